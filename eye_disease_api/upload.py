import contextlib
import time
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from pathlib import Path

from starlette.datastructures import FormData, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser
from starlette.requests import Request

from eye_disease_api.config import ALLOWED_EXTENSIONS
from eye_disease_api.errors import InputMissing, ValidationFailed

PHOTO_FIELD = "photo"
# Room for boundaries, part headers and small text fields around the file.
MULTIPART_OVERHEAD_BYTES = 64 * 1024
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StagedFile:
    name: str
    path: Path
    content_type: str
    size: int
    original_filename: str

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


def select_photo(form: FormData, field: str = PHOTO_FIELD) -> UploadFile:
    """Pick the single uploaded file out of a multipart form.

    Plain text parts are ignored. A missing file raises ``InputMissing``; a
    second file, or a file under any other field name, raises
    ``ValidationFailed``.
    """
    photos: list[UploadFile] = []
    for key, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        if key != field:
            raise ValidationFailed(f"Unexpected field: {key}")
        photos.append(value)

    if not photos:
        raise InputMissing()
    if len(photos) > 1:
        raise ValidationFailed(f"Unexpected field: {field} (expected a single file)")
    return photos[0]


def check_extension(filename: str) -> str:
    suffix = Path(filename).suffix
    if suffix not in ALLOWED_EXTENSIONS:
        raise ValidationFailed(f"Only image files are allowed. Rejected {filename!r}")
    return suffix


def staged_name(filename: str, clock: Callable[[], float] = time.time) -> str:
    return f"{int(clock() * 1000)}-{Path(filename).name}"


@contextlib.asynccontextmanager
async def stage_upload(
    upload: UploadFile,
    upload_dir: Path,
    max_bytes: int,
    clock: Callable[[], float] = time.time,
) -> AsyncIterator[StagedFile]:
    filename = upload.filename or ""
    check_extension(filename)

    upload_dir.mkdir(parents=True, exist_ok=True)
    name = staged_name(filename, clock)
    path = upload_dir / name

    try:
        size = 0
        with path.open("wb") as out:
            while True:
                chunk = await upload.read(_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise ValidationFailed(f"File too large: {filename!r} exceeds {max_bytes} bytes")
                out.write(chunk)

        yield StagedFile(
            name=name,
            path=path,
            content_type=upload.content_type or "application/octet-stream",
            size=size,
            original_filename=filename,
        )
    finally:
        path.unlink(missing_ok=True)


async def limit_stream(stream: AsyncIterator[bytes], max_bytes: int) -> AsyncIterator[bytes]:
    """Pass chunks through until more than ``max_bytes`` have arrived, then stop reading."""
    received = 0
    async for chunk in stream:
        received += len(chunk)
        if received > max_bytes:
            raise ValidationFailed(f"Request body exceeds {max_bytes} bytes")
        yield chunk


async def read_upload_form(request: Request, max_upload_bytes: int) -> FormData:
    """Parse a multipart body without reading past the upload ceiling.

    Non-multipart bodies yield an empty form, which ``select_photo`` reports as
    a missing file.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("multipart/form-data"):
        return FormData()

    max_body_bytes = max_upload_bytes + MULTIPART_OVERHEAD_BYTES
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_body_bytes:
        raise ValidationFailed(f"Declared body of {declared} bytes exceeds {max_body_bytes} bytes")

    parser = MultiPartParser(request.headers, limit_stream(request.stream(), max_body_bytes))
    try:
        return await parser.parse()
    except MultiPartException as exc:
        raise ValidationFailed(f"Malformed multipart body: {exc.message}") from exc
