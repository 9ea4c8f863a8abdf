"""Tests for the btrfs device stats parser."""

import logging

import pytest

from btrfs_exporter.collectors.errors import StatsParseError
from btrfs_exporter.collectors.parser import parse_device_stats, parse_stat_line, stat_key


def test_parse_three_line_sample():
    """Test the reference sample parses into flattened device keys."""
    output = "[/dev/sdb].write_io_errs 0\n[/dev/sdb].read_io_errs 0\n[/dev/sdc].write_io_errs 69"

    assert parse_device_stats(output) == {
        "sdb_write_io_errs": 0.0,
        "sdb_read_io_errs": 0.0,
        "sdc_write_io_errs": 69.0,
    }


def test_parse_column_aligned_output(sample_output):
    """Test real btrfs output with padded columns and trailing newline."""
    stats = parse_device_stats(sample_output)

    assert len(stats) == 5
    assert stats["sdb_corruption_errs"] == 2.0
    assert all(isinstance(value, float) for value in stats.values())


def test_parse_is_idempotent(sample_output):
    """Test parsing the same text twice yields equal results."""
    assert parse_device_stats(sample_output) == parse_device_stats(sample_output)


def test_parse_empty_output():
    assert parse_device_stats("") == {}
    assert parse_device_stats("\n\n  \n") == {}


def test_parse_uses_third_path_segment():
    """Test device identifier comes from the third path segment."""
    stats = parse_device_stats("[/dev/nvme0n1p2].read_io_errs 3")
    assert stats == {"nvme0n1p2_read_io_errs": 3.0}

    stats = parse_device_stats("[/dev/mapper/luks-root].read_io_errs 1")
    assert stats == {"mapper_read_io_errs": 1.0}


@pytest.mark.parametrize("line", [
    "/dev/sdb].write_io_errs 0",          # missing opening bracket
    "[/dev/sdb.write_io_errs 0",          # missing closing bracket
    "[/dev/sdb].write_io_errs zero",      # non-numeric value
    "[/dev].write_io_errs 0",             # path too short
    "[sdb].write_io_errs 0",              # no path separators
    "[/dev/sdb]write_io_errs 0",          # no dot before stat name
    "[/dev/sdb]. 0",                      # empty stat name
    "[/dev/sdb].write_io_errs",           # missing value
    "[/dev/sdb].write_io_errs 0 extra",   # trailing garbage
])
def test_parse_stat_line_rejects_malformed(line):
    """Test malformed lines raise StatsParseError."""
    with pytest.raises(StatsParseError):
        parse_stat_line(line)


def test_malformed_lines_are_skipped_and_logged(plain_logger, caplog):
    """Test one bad line does not abort the rest of the output."""
    output = "\n".join([
        "[/dev/sdb].write_io_errs 4",
        "ERROR: something unexpected",
        "[/dev].read_io_errs 1",
        "[/dev/sdc].read_io_errs 7",
    ])

    with caplog.at_level(logging.WARNING, logger=plain_logger.name):
        stats = parse_device_stats(output, plain_logger)

    assert stats == {"sdb_write_io_errs": 4.0, "sdc_read_io_errs": 7.0}
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert "malformed" in warnings[0].getMessage()


def test_stat_key():
    assert stat_key("sdb", "write_io_errs") == "sdb_write_io_errs"
