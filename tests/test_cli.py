"""Tests for the command line entry point."""

import json

from tuyasensor.__main__ import main

from .frames import DEVICE_ID, LOCAL_KEY


class TestMain:
    """Tests for main()."""

    def test_missing_config(self, tmp_path, capsys):
        """A missing config file exits with status 2."""
        assert main([str(tmp_path / "missing.json")]) == 2
        assert "tuyasensor:" in capsys.readouterr().err

    def test_once_unreachable(self, tmp_path):
        """--once reports failure when the device cannot be reached."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "device_id": DEVICE_ID,
            "host": "127.0.0.1",
            "port": 1,
            "local_key": LOCAL_KEY,
            "timeout": 0.5,
        }))
        assert main([str(path), "--once"]) == 1
