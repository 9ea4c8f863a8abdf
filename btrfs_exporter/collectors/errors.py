"""Exceptions raised inside the collection pipeline."""


class StatsParseError(ValueError):
    """A line of btrfs device stats output did not have the expected shape."""


class CommandFailedError(RuntimeError):
    """The btrfs command exited with a non-zero status."""

    def __init__(self, exit_code: int, stderr: str):
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Command failed with exit code {exit_code}: {stderr}")


class CollectionTimeoutError(TimeoutError):
    """The btrfs command did not finish within its timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Command timed out after {timeout:g}s")
