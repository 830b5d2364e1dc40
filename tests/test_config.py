"""Tests for configuration loading."""

import json

import pytest

from tuyasensor.config import ConfigError, load_config, session_from_config, validate_config
from tuyasensor.lan import ProtocolVersion

from .frames import DEVICE_ID, LOCAL_KEY

MINIMAL = {"device_id": DEVICE_ID, "host": "192.168.1.20", "local_key": LOCAL_KEY}


class TestValidateConfig:
    """Tests for validate_config."""

    def test_defaults(self):
        """Optional values get their defaults."""
        config = validate_config(dict(MINIMAL))

        assert config["protocol_version"] == "3.3"
        assert config["port"] == 6668
        assert config["timeout"] == 5.0
        assert config["sensor_interval"] == 0.25
        assert config["relay_interval"] == 0.1
        assert config["relays"] == []
        assert config["enable_debug"] is False
        assert "backend_url" not in config

    def test_numeric_version(self):
        """A numeric protocol version is accepted."""
        config = validate_config({**MINIMAL, "protocol_version": 3.4})
        assert config["protocol_version"] == "3.4"

    @pytest.mark.parametrize("version", ["3.1", "3.6", "4"])
    def test_unsupported_version(self, version):
        """Unsupported versions are rejected."""
        with pytest.raises(ConfigError):
            validate_config({**MINIMAL, "protocol_version": version})

    @pytest.mark.parametrize("key", ["short", "0123456789abcdef0"])
    def test_key_length(self, key):
        """Local key must be 16 characters."""
        with pytest.raises(ConfigError):
            validate_config({**MINIMAL, "local_key": key})

    def test_missing_required(self):
        """Missing device id is rejected."""
        with pytest.raises(ConfigError):
            validate_config({"host": "h", "local_key": LOCAL_KEY})

    def test_backend_url_trailing_slash(self):
        """Trailing slash is stripped from the backend URL."""
        config = validate_config({**MINIMAL, "backend_url": "http://192.168.1.10:8000/"})
        assert config["backend_url"] == "http://192.168.1.10:8000"

    def test_backend_url_invalid(self):
        """A backend URL needs a scheme and host."""
        with pytest.raises(ConfigError):
            validate_config({**MINIMAL, "backend_url": "not a url"})

    def test_relays(self):
        """Relay ids are coerced to ints."""
        config = validate_config({**MINIMAL, "relays": [2, "3", 4]})
        assert config["relays"] == [2, 3, 4]

    @pytest.mark.parametrize("field", ["timeout", "sensor_interval", "relay_interval"])
    def test_intervals_positive(self, field):
        """Timeouts and intervals must be positive."""
        with pytest.raises(ConfigError):
            validate_config({**MINIMAL, field: 0})

    def test_unknown_key(self):
        """Unknown keys are rejected."""
        with pytest.raises(ConfigError):
            validate_config({**MINIMAL, "colour": "blue"})


class TestLoadConfig:
    """Tests for load_config and session_from_config."""

    def test_load(self, tmp_path):
        """A JSON file is loaded and validated."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({**MINIMAL, "protocol_version": "3.5"}))

        config = load_config(path)
        assert config["device_id"] == DEVICE_ID
        assert config["protocol_version"] == "3.5"

    def test_missing_file(self, tmp_path):
        """A missing file is a ConfigError."""
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Broken JSON is a ConfigError."""
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_session_from_config(self):
        """The session is built from the validated values."""
        config = validate_config({**MINIMAL, "protocol_version": "3.4", "port": 7000, "timeout": 2})
        session = session_from_config(config)

        assert session.device_id == DEVICE_ID
        assert session.address == "192.168.1.20"
        assert session.port == 7000
        assert session.timeout == 2.0
        assert session.protocol_version is ProtocolVersion.V3_4
        assert session.is_connected() is False
