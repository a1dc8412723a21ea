import eye_disease_api.main as main_module


def test_importing_main_builds_no_app() -> None:
    assert not hasattr(main_module, "app")


def test_run_hands_the_factory_to_uvicorn(monkeypatch) -> None:
    calls: list[tuple[tuple, dict]] = []
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "8123")
    monkeypatch.setattr(main_module.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))

    main_module.run()

    assert calls == [
        (("eye_disease_api.main:create_app",), {"factory": True, "host": "127.0.0.1", "port": 8123}),
    ]
