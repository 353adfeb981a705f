"""
Unit tests for configuration loading.
"""

import pytest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from citeresolve.config import DEFAULT_CONFIG, get_config


class TestGetConfig:
    """Test defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        for name in ("CITERESOLVE_DEBUG", "CITERESOLVE_STRICT_MODE", "CITERESOLVE_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        config = get_config()
        assert config["inspire"]["base_url"] == "https://inspirehep.net/api"
        assert config["matching"]["strict_mode_enabled"] is True
        assert config["matching"]["strict_mismatch_count"] == 5
        assert config["debug"] is False

    def test_returns_a_copy(self):
        config = get_config()
        config["matching"]["strict_ratio"] = 0.1
        assert DEFAULT_CONFIG["matching"]["strict_ratio"] == 0.85

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CITERESOLVE_DEBUG", "TRUE")
        monkeypatch.setenv("CITERESOLVE_INSPIRE_URL", "http://localhost:8080/api/")
        monkeypatch.setenv("CITERESOLVE_TIMEOUT", "5")
        monkeypatch.setenv("CITERESOLVE_MAX_RETRIES", "1")
        monkeypatch.setenv("CITERESOLVE_STRICT_MODE", "false")
        monkeypatch.setenv("CITERESOLVE_MAX_LABEL", "300")
        monkeypatch.setenv("CITERESOLVE_LOGS_DIR", "/tmp/citeresolve-logs")

        config = get_config()
        assert config["debug"] is True
        assert config["inspire"]["base_url"] == "http://localhost:8080/api"
        assert config["inspire"]["timeout"] == 5
        assert config["inspire"]["max_retries"] == 1
        assert config["matching"]["strict_mode_enabled"] is False
        assert config["parsing"]["max_label"] == 300
        assert config["output"]["logs_dir"] == "/tmp/citeresolve-logs"

    def test_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("CITERESOLVE_TIMEOUT", "soon")
        with pytest.raises(ValueError):
            get_config()
