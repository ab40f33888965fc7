"""
Pytest configuration and shared fixtures.

This module contains pytest fixtures and configuration that are shared
across all test modules. Providers and the database client are stood in
for by small shell scripts written under tmp_path.
"""

from pathlib import Path

import pytest

from safe_sqlplus.process.supervisor import ChildSupervisor

# Fake sqlplus: records its arguments and everything written to its stdin
# under $ORACLE_HOME, then exits with $FAKE_SQLPLUS_STATUS (default 0).
FAKE_CLIENT = """#!/bin/sh
echo "$@" > "$ORACLE_HOME/args.txt"
cat > "$ORACLE_HOME/received.txt"
exit "${FAKE_SQLPLUS_STATUS:-0}"
"""


@pytest.fixture
def make_script(tmp_path):
    """
    Provide a factory writing executable shell scripts.

    Returns
    -------
    callable
        ``make_script(name, body) -> Path``; body is the script without shebang
    """

    def _make(name: str, body: str) -> Path:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(0o755)
        return path

    return _make


@pytest.fixture
def oracle_home(tmp_path) -> Path:
    """
    Create a fake Oracle home with bin/sqlplus.

    Returns
    -------
    Path
        Path to the fake Oracle home
    """
    home = tmp_path / "oracle"
    (home / "bin").mkdir(parents=True)
    client = home / "bin" / "sqlplus"
    client.write_text(FAKE_CLIENT)
    client.chmod(0o755)
    return home


@pytest.fixture
def supervisor():
    """Provide a ChildSupervisor with its SIGCHLD handler installed."""
    with ChildSupervisor() as supervisor:
        yield supervisor
