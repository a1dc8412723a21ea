import json
import logging
import time
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

from eye_disease_api.config import Settings

_EXTRA_FIELDS = (
    "request_id",
    "method",
    "path",
    "status_code",
    "latency_ms",
    "client_ip",
    "error",
    "detail",
    "blob_key",
    "size_bytes",
    "image_url",
    "record_id",
)


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(settings: Settings) -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler()
    if settings.log_json:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    root.setLevel(level)
    root.addHandler(handler)


@dataclass
class MetricsRegistry:
    requests_total: int = 0
    requests_inflight: int = 0
    requests_by_status: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    predictions_by_outcome: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    request_latency_ms_sum: float = 0.0
    request_latency_ms_count: int = 0
    _lock: Lock = field(default_factory=Lock)

    def record_request(self, status_code: int, latency_ms: float) -> None:
        with self._lock:
            self.requests_total += 1
            self.requests_by_status[str(status_code)] += 1
            self.request_latency_ms_sum += latency_ms
            self.request_latency_ms_count += 1

    def set_inflight(self, delta: int) -> None:
        with self._lock:
            self.requests_inflight += delta
            if self.requests_inflight < 0:
                self.requests_inflight = 0

    def record_prediction(self, outcome: str) -> None:
        with self._lock:
            self.predictions_by_outcome[outcome] += 1

    def render_prometheus(self) -> str:
        with self._lock:
            lines = [
                "# TYPE http_requests_total counter",
                f"http_requests_total {self.requests_total}",
                "# TYPE http_requests_inflight gauge",
                f"http_requests_inflight {self.requests_inflight}",
                "# TYPE http_request_latency_ms_sum counter",
                f"http_request_latency_ms_sum {self.request_latency_ms_sum}",
                "# TYPE http_request_latency_ms_count counter",
                f"http_request_latency_ms_count {self.request_latency_ms_count}",
                "# TYPE http_requests_by_status_total counter",
            ]
            for code, count in sorted(self.requests_by_status.items()):
                lines.append(f'http_requests_by_status_total{{status="{code}"}} {count}')
            lines.append("# TYPE predictions_total counter")
            for outcome, count in sorted(self.predictions_by_outcome.items()):
                lines.append(f'predictions_total{{outcome="{outcome}"}} {count}')
            return "\n".join(lines) + "\n"


_access_logger = logging.getLogger("eye_disease.access")


class RequestMetricsAndLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, registry: MetricsRegistry, enable_metrics: bool = True):
        super().__init__(app)
        self._registry = registry
        self._enable_metrics = enable_metrics

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()
        self._registry.set_inflight(1)

        response: Response | None = None
        exc: Exception | None = None
        try:
            response = await call_next(request)
            return response
        except Exception as err:  # noqa: BLE001
            exc = err
            raise
        finally:
            latency_ms = (time.perf_counter() - start) * 1000.0
            status_code = response.status_code if response else 500
            self._registry.set_inflight(-1)
            if self._enable_metrics:
                self._registry.record_request(status_code=status_code, latency_ms=latency_ms)

            extra = {
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "latency_ms": round(latency_ms, 2),
                "client_ip": request.client.host if request.client else None,
            }
            if exc is None:
                _access_logger.info("request_complete", extra=extra)
            else:
                _access_logger.exception("request_failed", extra=extra)

            if response is not None:
                response.headers["x-request-id"] = request_id
