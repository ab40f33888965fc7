"""
safe-sqlplus - start sqlplus without exposing database credentials.

Passwords given on the sqlplus command line (or in environment variables)
are visible to every user on the host through the process list. This
package fetches the username and password from external provider programs
at runtime, logs in by writing a ``connect`` command to sqlplus's standard
input, scrubs the credentials from memory and then hands the terminal
over to the user.

Example usage::

    from safe_sqlplus import ChildSupervisor, SessionOrchestrator, resolve_config

    config = resolve_config(
        host="db1.example.com",
        connect_data="SERVICE_NAME=pluggable1",
        oracle_home="/opt/oracle",
        username_program="/usr/local/bin/get_oracle_username",
        password_program="/usr/local/bin/get_oracle_password",
    )
    with ChildSupervisor() as supervisor:
        exit_code = SessionOrchestrator(config, supervisor).run()
"""

__version__ = "0.1.0"

from safe_sqlplus.config import SessionConfig, load_config_file, resolve_config
from safe_sqlplus.core.secret import SecretBuffer
from safe_sqlplus.core.template import expand_template
from safe_sqlplus.core.tokenizer import ArgumentVector, tokenize
from safe_sqlplus.exceptions import (
    ChildFailedError,
    CommandError,
    ConfigError,
    ProviderError,
    SafeSqlplusError,
    SessionError,
)
from safe_sqlplus.process.supervisor import ChildSupervisor
from safe_sqlplus.providers.runner import CredentialProvider
from safe_sqlplus.session.orchestrator import SessionOrchestrator, SessionState

__all__ = [
    # Core
    "ArgumentVector",
    "SecretBuffer",
    "expand_template",
    "tokenize",
    # Configuration
    "SessionConfig",
    "load_config_file",
    "resolve_config",
    # Session
    "ChildSupervisor",
    "CredentialProvider",
    "SessionOrchestrator",
    "SessionState",
    # Exceptions
    "SafeSqlplusError",
    "ConfigError",
    "CommandError",
    "ProviderError",
    "ChildFailedError",
    "SessionError",
    # Version
    "__version__",
]
