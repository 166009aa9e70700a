"""Tests for backend/storelocator/config.py: Settings validation."""
from __future__ import annotations

import os
import warnings
from unittest.mock import patch

import pytest
from pydantic import ValidationError


class TestApiKeyValidation:
    """Verify GOOGLE_API_KEY handling in Settings."""

    def test_api_key_read_from_environment(self):
        from storelocator.config import Settings

        with patch.dict(os.environ, {"GOOGLE_API_KEY": "env-key"}, clear=False):
            s = Settings(_env_file=None)
            assert s.google_api_key == "env-key"

    def test_api_key_whitespace_is_stripped(self):
        """Leading/trailing whitespace in GOOGLE_API_KEY should be stripped on load."""
        from storelocator.config import Settings

        with patch.dict(os.environ, {"GOOGLE_API_KEY": "  my-key \n"}, clear=False):
            s = Settings(_env_file=None)
            assert s.google_api_key == "my-key"

    def test_empty_api_key_warns(self):
        """An empty key does not stop startup but is reported."""
        from storelocator.config import Settings

        with patch.dict(os.environ, {"GOOGLE_API_KEY": "   "}, clear=False):
            with warnings.catch_warnings(record=True) as w:
                warnings.simplefilter("always")
                s = Settings(_env_file=None)
        assert s.google_api_key == ""
        assert any("GOOGLE_API_KEY is not set" in str(warning.message) for warning in w)

    def test_valid_api_key_does_not_warn(self):
        from storelocator.config import Settings

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            Settings(_env_file=None, google_api_key="a-real-key")
        assert not any("GOOGLE_API_KEY" in str(warning.message) for warning in w)


class TestDefaults:
    def test_defaults(self):
        from storelocator.config import Settings

        s = Settings(_env_file=None, google_api_key="k")
        assert s.port == 8000
        assert s.places_api_base_url == "https://maps.googleapis.com/maps/api"
        assert s.upstream_timeout_seconds == 10.0
        assert (s.static_dir / "index.html").is_file()

    def test_port_override(self):
        from storelocator.config import Settings

        with patch.dict(os.environ, {"PORT": "9123"}, clear=False):
            s = Settings(_env_file=None, google_api_key="k")
            assert s.port == 9123

    def test_settings_are_immutable(self):
        from storelocator.config import Settings

        s = Settings(_env_file=None, google_api_key="k")
        with pytest.raises(ValidationError):
            s.google_api_key = "other"
