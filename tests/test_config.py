"""Unit tests for xraylens.config: Settings loading and defaults."""

import pytest
from pydantic import ValidationError


class TestSettingsDefaults:
    """Verify that Settings loads correct defaults when no env is set."""

    def test_default_ollama_model(self):
        from xraylens.config import Settings

        s = Settings()
        assert s.ollama_model == "llava"

    def test_default_ollama_base_url(self):
        from xraylens.config import Settings

        s = Settings()
        assert s.ollama_base_url == "http://localhost:11434"

    def test_default_request_timeout(self):
        from xraylens.config import Settings

        s = Settings()
        assert s.request_timeout == 120.0

    def test_default_pipeline_options(self):
        from xraylens.config import Settings

        s = Settings()
        assert s.parallel_stages is True
        assert s.summary_flow == "summarize"

    def test_default_log_level(self):
        from xraylens.config import Settings

        s = Settings()
        assert s.log_level == "INFO"


class TestSettingsOverride:
    """Verify that Settings picks up environment variable overrides."""

    def test_override_ollama_model(self, monkeypatch):
        monkeypatch.setenv("OLLAMA_MODEL", "llama3.2-vision")
        from xraylens.config import Settings

        s = Settings()
        assert s.ollama_model == "llama3.2-vision"

    def test_override_parallel_stages(self, monkeypatch):
        monkeypatch.setenv("PARALLEL_STAGES", "false")
        from xraylens.config import Settings

        s = Settings()
        assert s.parallel_stages is False

    def test_override_summary_flow(self, monkeypatch):
        monkeypatch.setenv("SUMMARY_FLOW", "generate")
        from xraylens.config import Settings

        s = Settings()
        assert s.summary_flow == "generate"

    def test_rejects_unknown_summary_flow(self, monkeypatch):
        monkeypatch.setenv("SUMMARY_FLOW", "rewrite")
        from xraylens.config import Settings

        with pytest.raises(ValidationError):
            Settings()


class TestSingletonSettings:
    """Verify the module-level settings instance is accessible."""

    def test_settings_instance_exists(self):
        from xraylens.config import settings

        assert settings is not None
        assert hasattr(settings, "ollama_model")
