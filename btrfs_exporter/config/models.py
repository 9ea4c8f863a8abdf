"""Pydantic configuration models for the btrfs exporter."""

from pydantic import BaseModel, Field, field_validator
from typing import List


class CommandConfig(BaseModel):
    """How the btrfs device stats command is invoked."""
    sudo_path: str = "/usr/bin/sudo"
    btrfs_path: str = "/usr/bin/btrfs"
    use_sudo: bool = True
    timeout_seconds: float = Field(default=30.0, gt=0)
    kill_grace_seconds: float = Field(default=2.0, gt=0)  # Wait for exit after SIGTERM

    def build_argv(self, mountpoint: str) -> List[str]:
        """
        Build the argument vector for one mountpoint.

        Args:
            mountpoint: Filesystem mount path to query

        Returns:
            List[str]: e.g. ["/usr/bin/sudo", "/usr/bin/btrfs", "device", "stats", "/mnt"]
        """
        argv = [self.btrfs_path, "device", "stats", mountpoint]
        if self.use_sudo:
            argv.insert(0, self.sudo_path)
        return argv


class ServerConfig(BaseModel):
    """Metrics HTTP listener configuration."""
    listen_address: str = "::"
    port: int = Field(default=9899, ge=1, le=65535)
    metrics_path: str = "/metrics"

    @field_validator('metrics_path')
    @classmethod
    def validate_metrics_path(cls, v: str) -> str:
        """Metrics path must be absolute."""
        if not v.startswith('/'):
            raise ValueError('metrics_path must start with /')
        return v


class ExporterConfig(BaseModel):
    """Root configuration model for the exporter."""
    mountpoints: List[str]
    command: CommandConfig = Field(default_factory=CommandConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"

    @field_validator('mountpoints', mode='before')
    @classmethod
    def split_mountpoints(cls, v):
        """Accept the operator's comma-delimited list as well as a YAML list."""
        if isinstance(v, str):
            v = v.split(',')
        return v

    @field_validator('mountpoints')
    @classmethod
    def validate_mountpoints(cls, v: List[str]) -> List[str]:
        """Strip entries, drop empties and duplicates, keep order."""
        cleaned = []
        for mountpoint in v:
            mountpoint = mountpoint.strip()
            if mountpoint and mountpoint not in cleaned:
                cleaned.append(mountpoint)
        if not cleaned:
            raise ValueError('At least one mountpoint is required')
        return cleaned

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Restrict to the levels the CLI exposes."""
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f'Invalid log level: {v}')
        return level
