"""
Unit tests for fatal-signal diagnostics.
"""

import signal
import sys
from unittest.mock import patch

from safe_sqlplus.process.signals import FATAL_SIGNALS, install_fault_handlers


class TestInstallFaultHandlers:
    """Tests for install_fault_handlers()."""

    def test_covers_fatal_signals(self):
        """Test the signals diagnosed."""
        assert set(FATAL_SIGNALS) == {signal.SIGSEGV, signal.SIGFPE, signal.SIGILL}

    def test_default_stream_is_stderr(self):
        """Test that diagnostics go to stderr."""
        with patch("safe_sqlplus.process.signals.faulthandler.enable") as enable:
            install_fault_handlers()

        enable.assert_called_once_with(file=sys.stderr)

    def test_custom_stream(self, tmp_path):
        """Test dumping to another file."""
        with open(tmp_path / "faults.log", "w") as f:
            with patch("safe_sqlplus.process.signals.faulthandler.enable") as enable:
                install_fault_handlers(f)

        enable.assert_called_once_with(file=f)
