"""
Session module for safe-sqlplus.

This module contains the classes that run a client session:
- SessionOrchestrator: acquires credentials, starts the client, relays input
- SessionState: stages a session goes through
"""

from safe_sqlplus.session.orchestrator import SessionOrchestrator, SessionState

__all__ = ["SessionOrchestrator", "SessionState"]
