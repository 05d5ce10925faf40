"""Tests for exit_codes module."""

from genomeannot.cli.exit_codes import (
    EXIT_SUCCESS,
    EXIT_ERROR,
    EXIT_USAGE,
    EXIT_SIGINT,
    EXIT_SIGTERM,
)


class TestExitCodes:
    """Test exit code constants."""

    def test_values(self):
        assert EXIT_SUCCESS == 0
        assert EXIT_ERROR == 1
        assert EXIT_USAGE == 2

    def test_signal_codes(self):
        """Signal exits follow the 128 + signal number convention."""
        assert EXIT_SIGINT == 128 + 2
        assert EXIT_SIGTERM == 128 + 15

    def test_codes_are_distinct(self):
        codes = [EXIT_SUCCESS, EXIT_ERROR, EXIT_USAGE, EXIT_SIGINT, EXIT_SIGTERM]
        assert len(set(codes)) == len(codes)
