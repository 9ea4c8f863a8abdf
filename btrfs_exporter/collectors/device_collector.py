"""btrfs device stats collector for a single mountpoint."""

import asyncio
import logging
import time
from typing import Optional

from ..config.models import CommandConfig
from ..utils.status import OutcomeStatus
from ..utils.metrics import CollectionOutcome
from .base import BaseCollector, safe_collect
from .errors import CollectionTimeoutError, CommandFailedError
from .parser import parse_device_stats


class DeviceStatsCollector(BaseCollector):
    """Runs `sudo btrfs device stats <mountpoint>` and parses its output."""

    def __init__(self, mountpoint: str, config: CommandConfig, logger: logging.Logger):
        """
        Initialize device stats collector.

        Args:
            mountpoint: Filesystem mount path to query
            config: Command paths and timeout
            logger: Logger instance
        """
        super().__init__(mountpoint, config, logger)
        self.argv = config.build_argv(mountpoint)

    @safe_collect
    async def collect(self) -> CollectionOutcome:
        """
        Collect device error counters for this mountpoint.

        Timeouts, non-zero exits and spawn failures are returned as
        unsuccessful outcomes with an empty StatSet.

        Returns:
            CollectionOutcome: OK with parsed stats, or FAILED/TIMEOUT/ERROR
        """
        start_time = time.monotonic()

        try:
            stdout = await self._run_command()

        except CollectionTimeoutError as e:
            self.logger.error(f"{self.argv} timed out: {e}")
            return self._failure(OutcomeStatus.TIMEOUT, e, start_time)

        except CommandFailedError as e:
            self.logger.error(f"{self.argv} failed: {e.stderr.strip()}")
            return self._failure(OutcomeStatus.FAILED, e, start_time, exit_code=e.exit_code)

        except OSError as e:
            self.logger.error(f"Unable to run {self.argv}: {e}")
            return self._failure(OutcomeStatus.ERROR, e, start_time)

        stats = parse_device_stats(stdout, self.logger)
        self.logger.debug(f"Collected {len(stats)} stats from {self.mountpoint}")

        return CollectionOutcome(
            mountpoint=self.mountpoint,
            status=OutcomeStatus.OK,
            stats=stats,
            message=f"{len(stats)} stats collected",
            exit_code=0,
            duration=time.monotonic() - start_time
        )

    async def _run_command(self) -> str:
        """
        Execute the stats command and return its stdout.

        Returns:
            str: Decoded command stdout

        Raises:
            CollectionTimeoutError: If the command exceeds the configured timeout
            CommandFailedError: If the command exits non-zero
            OSError: If the command cannot be spawned
        """
        self.logger.debug(f"--> Running {self.argv}")

        process = await asyncio.create_subprocess_exec(
            *self.argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.config.timeout_seconds
            )
        except asyncio.TimeoutError:
            await self._stop(process)
            raise CollectionTimeoutError(self.config.timeout_seconds) from None
        except BaseException:
            # Cancelled scrape: signal the command but do not wait for it
            self._terminate(process)
            raise

        if process.returncode != 0:
            raise CommandFailedError(
                process.returncode,
                stderr.decode('utf-8', errors='replace')
            )

        return stdout.decode('utf-8', errors='replace')

    def _terminate(self, process) -> bool:
        """
        Send SIGTERM, which sudo relays to btrfs.

        Returns:
            bool: False if the process had already exited
        """
        if process.returncode is not None:
            return False
        try:
            process.terminate()
        except ProcessLookupError:
            return False
        return True

    async def _stop(self, process) -> None:
        """
        Terminate a timed-out process and wait a bounded time for it.

        A btrfs stuck on a hung filesystem may never exit and keeps the
        pipes open, so after the grace period the process is killed and
        abandoned instead of awaited.
        """
        if not self._terminate(process):
            return

        try:
            await asyncio.wait_for(process.wait(), timeout=self.config.kill_grace_seconds)
        except asyncio.TimeoutError:
            self.logger.warning(
                f"{self.argv} still running {self.config.kill_grace_seconds:g}s after SIGTERM, abandoning"
            )
            try:
                process.kill()
            except ProcessLookupError:
                pass

    def _failure(
        self,
        status: OutcomeStatus,
        error: Exception,
        start_time: float,
        exit_code: Optional[int] = None
    ) -> CollectionOutcome:
        return CollectionOutcome(
            mountpoint=self.mountpoint,
            status=status,
            message=f"Collection {status.value}: {error}",
            error=str(error),
            exit_code=exit_code,
            duration=time.monotonic() - start_time
        )
