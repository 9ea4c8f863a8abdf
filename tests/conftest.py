"""Shared pytest configuration and fixtures."""

import asyncio
import logging

import pytest

from btrfs_exporter.config.models import CommandConfig, ExporterConfig
from btrfs_exporter.services.publisher import MetricSchema
from btrfs_exporter.utils.logger import setup_logger


class FakeProcess:
    """Stand-in for asyncio.subprocess.Process."""

    def __init__(self, stdout: str = "", stderr: str = "", returncode: int = 0, delay: float = 0.0):
        self.stdout = stdout.encode()
        self.stderr = stderr.encode()
        self.exit_code = returncode
        self.returncode = None
        self.delay = delay
        self.terminated = False
        self.killed = False

    async def communicate(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        self.returncode = self.exit_code
        return self.stdout, self.stderr

    def terminate(self):
        self.terminated = True
        self.returncode = -15

    def kill(self):
        self.killed = True
        self.returncode = -9

    async def wait(self):
        return self.returncode


class FakeBtrfs:
    """Maps mountpoints to fake processes and records every invocation."""

    def __init__(self):
        self.processes = {}
        self.calls = []

    def set(self, mountpoint: str, **kwargs) -> FakeProcess:
        process = FakeProcess(**kwargs)
        self.processes[mountpoint] = process
        return process

    def fail_spawn(self, mountpoint: str, error: Exception) -> None:
        self.processes[mountpoint] = error

    async def create_subprocess_exec(self, *argv, **kwargs):
        self.calls.append(list(argv))
        behaviour = self.processes[argv[-1]]
        if isinstance(behaviour, Exception):
            raise behaviour
        return behaviour


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", "DEBUG")


@pytest.fixture
def plain_logger():
    """Propagating logger so caplog sees the records."""
    return logging.getLogger("tests.btrfs_exporter")


@pytest.fixture
def command_config():
    """Command configuration with a short timeout."""
    return CommandConfig(timeout_seconds=0.2)


@pytest.fixture
def exporter_config(command_config):
    """Two-mountpoint exporter configuration."""
    return ExporterConfig(mountpoints=["/mnt/a", "/mnt/b"], command=command_config)


@pytest.fixture
def schema():
    """Metric schema on its own registry."""
    return MetricSchema()


@pytest.fixture
def fake_btrfs(monkeypatch):
    """Patch subprocess creation with a FakeBtrfs."""
    fake = FakeBtrfs()
    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake.create_subprocess_exec)
    return fake


@pytest.fixture
def sample_output():
    """btrfs device stats output for one device on /mnt/a."""
    return (
        "[/dev/sdb].write_io_errs    0\n"
        "[/dev/sdb].read_io_errs     0\n"
        "[/dev/sdb].flush_io_errs    0\n"
        "[/dev/sdb].corruption_errs  2\n"
        "[/dev/sdb].generation_errs  0\n"
    )


@pytest.fixture
def sample_output_sdc():
    """btrfs device stats output for a second device."""
    return (
        "[/dev/sdc].write_io_errs    69\n"
        "[/dev/sdc].read_io_errs     1\n"
        "[/dev/sdc].flush_io_errs    0\n"
        "[/dev/sdc].corruption_errs  0\n"
        "[/dev/sdc].generation_errs  0\n"
    )
