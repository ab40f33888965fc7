"""
Database client invocation.

The client is started as ``<oracle_home>/bin/sqlplus /NOLOG`` so that it
never logs in by itself; the login happens through a ``connect`` command
written to its standard input, wrapped in directives that switch off
sqlplus substitution variables while the connection string is parsed
(``&`` is a legal password character).
"""

import os

from safe_sqlplus.config import SessionConfig
from safe_sqlplus.core.tokenizer import ArgumentVector, split_arguments

NOLOG_FLAG = "/NOLOG"
CLIENT_HOME_ENV = "ORACLE_HOME"

DEFINE_OFF = b"set define off;\n"
DEFINE_ON = b"set define on;\n"
CONNECT_PREFIX = b"connect "
LINE_END = b"\n"


def client_vector(config: SessionConfig) -> ArgumentVector:
    """
    Build the client's argument vector.

    Examples
    --------
    >>> client_vector(config).argv
    ['/opt/oracle/bin/sqlplus', '/NOLOG']
    """
    return ArgumentVector(
        str(config.client_executable),
        (NOLOG_FLAG, *split_arguments(config.client_args)),
    )


def client_environment(config: SessionConfig) -> dict[str, str]:
    """Return the client's environment: ours plus ORACLE_HOME."""
    env = dict(os.environ)
    env[CLIENT_HOME_ENV] = str(config.client_home)
    return env
