from src.config import Settings, settings


class TestConfigDefaults:
    def test_app_name(self) -> None:
        assert settings.app_name == "h4x-image-editor"

    def test_debug_default(self) -> None:
        s = Settings()
        assert s.debug is False

    def test_port_default(self) -> None:
        s = Settings()
        assert s.port == 8000

    def test_host_default(self) -> None:
        s = Settings()
        assert s.host == "0.0.0.0"

    def test_log_level_default(self) -> None:
        s = Settings()
        assert s.log_level == "info"

    def test_cors_origins_default(self) -> None:
        s = Settings()
        assert s.cors_origins == ["*"]

    def test_gemini_api_key_default_empty(self) -> None:
        s = Settings(_env_file=None, gemini_api_key=None)
        assert s.gemini_api_key is None

    def test_gemini_model_default(self) -> None:
        s = Settings()
        assert s.gemini_model == "gemini-2.5-flash-image"

    def test_download_prefix(self) -> None:
        s = Settings()
        assert s.download_prefix == "h4x_edit_"

    def test_accepted_mime_types(self) -> None:
        s = Settings()
        assert s.accepted_mime_types == ["image/png", "image/jpeg", "image/webp"]


class TestConfigOverrides:
    def test_env_override(self, monkeypatch) -> None:  # type: ignore[no-untyped-def]
        monkeypatch.setenv("GEMINI_MODEL", "gemini-test-model")
        monkeypatch.setenv("PORT", "9000")
        s = Settings()
        assert s.gemini_model == "gemini-test-model"
        assert s.port == 9000
