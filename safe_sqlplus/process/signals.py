"""
Fatal-signal diagnostics.

On SIGSEGV, SIGFPE or SIGILL the Python stack is dumped to the error
stream and the default action (termination) proceeds. Nothing is
recovered; the dump only tells the operator where the process was.
"""

import faulthandler
import logging
import signal
import sys
from typing import Optional, TextIO

logger = logging.getLogger(__name__)

FATAL_SIGNALS = (signal.SIGSEGV, signal.SIGFPE, signal.SIGILL)


def install_fault_handlers(file: Optional[TextIO] = None) -> None:
    """
    Enable stack dumps for fatal signals for the rest of the process lifetime.

    Parameters
    ----------
    file : TextIO, optional
        Stream with a real file descriptor to dump to (default: sys.stderr)
    """
    faulthandler.enable(file=file if file is not None else sys.stderr)
    logger.debug(
        "Fault handlers installed for %s",
        ", ".join(sig.name for sig in FATAL_SIGNALS),
    )
