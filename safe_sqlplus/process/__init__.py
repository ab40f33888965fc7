"""
Process module for safe-sqlplus.

This module contains process-level plumbing:
- ChildSupervisor: owns child processes and turns abnormal child exits into a session abort
- install_fault_handlers: stack dumps for fatal signals
"""

from safe_sqlplus.process.signals import FATAL_SIGNALS, install_fault_handlers
from safe_sqlplus.process.supervisor import ChildSupervisor, exit_status

__all__ = ["ChildSupervisor", "FATAL_SIGNALS", "exit_status", "install_fault_handlers"]
