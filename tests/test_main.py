"""Tests for the exporter entry point and application lifecycle."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from btrfs_exporter import main as main_module
from btrfs_exporter.config.models import ExporterConfig
from btrfs_exporter.main import ExporterApp, build_parser, load_config


def parse(*argv):
    return build_parser().parse_args(list(argv))


class TestArguments:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        config = load_config(parse("/,/home"))

        assert config.mountpoints == ["/", "/home"]
        assert config.server.port == 9899
        assert config.command.use_sudo is True
        assert config.log_level == "INFO"

    def test_flags(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        config = load_config(parse(
            "/data", "-p", "9100", "--listen-address", "127.0.0.1",
            "--timeout", "5", "--no-sudo", "-v"
        ))

        assert config.server.port == 9100
        assert config.server.listen_address == "127.0.0.1"
        assert config.command.timeout_seconds == 5.0
        assert config.command.use_sudo is False
        assert config.log_level == "DEBUG"

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        config = load_config(parse("/data", "-q"))

        assert config.log_level == "ERROR"


class TestMain:

    def test_invalid_config_exits_nonzero(self):
        with pytest.raises(SystemExit) as exc_info:
            main_module.main(["--port", "9899"])

        assert exc_info.value.code == 1

    def test_missing_config_file_exits_nonzero(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main_module.main(["--config", str(tmp_path / "missing.yaml")])

        assert exc_info.value.code == 1

    def test_bind_failure_exits_nonzero(self):
        with patch.object(main_module, "start_server", AsyncMock(side_effect=OSError("address in use"))), \
                patch.object(ExporterApp, "_install_signal_handlers"):
            with pytest.raises(SystemExit) as exc_info:
                main_module.main(["/data"])

        assert exc_info.value.code == 1


class TestExporterApp:

    @pytest.mark.asyncio
    async def test_serve_until_stop_event(self, logger):
        """Test the app stops and cleans up once the stop event is set."""
        app = ExporterApp(ExporterConfig(mountpoints=["/data"]), logger)
        runner = MagicMock()
        runner.cleanup = AsyncMock()
        stop_event = asyncio.Event()

        with patch.object(main_module, "start_server", AsyncMock(return_value=runner)) as start:
            task = asyncio.create_task(app.serve(stop_event))
            await asyncio.sleep(0.01)
            assert not task.done()

            app._signal_handler(2)
            await asyncio.wait_for(task, timeout=1)

        start.assert_awaited_once_with(app.app, app.config.server)
        runner.cleanup.assert_awaited_once()
        assert stop_event.is_set()

    def test_app_wires_components(self, logger):
        app = ExporterApp(ExporterConfig(mountpoints="/a,/b"), logger)

        assert app.gate.workflow is app.workflow
        assert app.gate.registry is app.schema.registry
        assert [c.mountpoint for c in app.workflow.coordinator.collectors] == ["/a", "/b"]
