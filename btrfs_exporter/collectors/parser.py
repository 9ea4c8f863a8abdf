"""Parser for `btrfs device stats` output.

Example output (one line per counter)::

    [/dev/sdb].write_io_errs    0
    [/dev/sdb].read_io_errs     0
    [/dev/sdc].write_io_errs    69
"""

import logging
from typing import Optional, Tuple

from ..utils.metrics import StatSet
from .errors import StatsParseError

# Device identifier is the third "/"-separated segment: "/dev/sdb" -> ["", "dev", "sdb"]
DEVICE_SEGMENT = 2
KEY_SEPARATOR = "_"


def stat_key(device: str, stat_name: str) -> str:
    """Flatten a (device, stat name) pair into a StatSet key."""
    return f"{device}{KEY_SEPARATOR}{stat_name}"


def parse_stat_line(line: str) -> Tuple[str, str, float]:
    """
    Parse a single stats line.

    Args:
        line: e.g. "[/dev/sdb].write_io_errs    0"

    Returns:
        Tuple[str, str, float]: (device identifier, stat name, value)

    Raises:
        StatsParseError: If the line is malformed
    """
    device_part, bracket, stat_part = line.strip().partition("]")
    if not bracket or not device_part.startswith("["):
        raise StatsParseError(f"Missing bracketed device path: {line!r}")

    device_path = device_part[1:]
    segments = device_path.split("/")
    if len(segments) <= DEVICE_SEGMENT or not segments[DEVICE_SEGMENT]:
        raise StatsParseError(f"Device path too short: {device_path!r}")

    fields = stat_part.split()
    if len(fields) != 2:
        raise StatsParseError(f"Expected stat name and value: {line!r}")

    stat_token, raw_value = fields
    if not stat_token.startswith(".") or len(stat_token) < 2:
        raise StatsParseError(f"Invalid stat name: {stat_token!r}")

    try:
        value = float(raw_value)
    except ValueError:
        raise StatsParseError(f"Non-numeric value: {raw_value!r}") from None

    return segments[DEVICE_SEGMENT], stat_token[1:], value


def parse_device_stats(output: str, logger: Optional[logging.Logger] = None) -> StatSet:
    """
    Parse full `btrfs device stats` output into a StatSet.

    Malformed lines are logged and skipped; the remaining lines are still
    parsed.

    Args:
        output: Command stdout
        logger: Optional logger for malformed lines

    Returns:
        StatSet: {"sdb_write_io_errs": 0.0, ...}
    """
    logger = logger or logging.getLogger(__name__)
    stats = {}

    for line in output.splitlines():
        if not line.strip():
            continue

        try:
            device, stat_name, value = parse_stat_line(line)
        except StatsParseError as e:
            logger.warning(f"Skipping malformed stats line: {e}")
            continue

        stats[stat_key(device, stat_name)] = value

    return stats
