"""
Session configuration.

SessionConfig is the single immutable value the session consumes. It is
assembled by resolve_config() from command-line options, an optional TOML
configuration file and built-in defaults, in that order of precedence.

Configuration file example::

    host = "db1.example.com"
    port = 1521
    connect_data = "SERVICE_NAME=pluggable1"
    oracle_home = "/opt/oracle/product/19c"
    username_program = "/usr/local/bin/get_oracle_username"
    password_program = "/usr/local/bin/get_oracle_password prod"

Credentials themselves are never part of the configuration.
"""

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from safe_sqlplus.core.template import PASSWORD_PLACEHOLDER, USERNAME_PLACEHOLDER
from safe_sqlplus.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 1521
MAX_PORT = 65535
DEFAULT_CLIENT = "sqlplus"

# Connect descriptor used when no explicit template is given
DEFAULT_TEMPLATE = (
    USERNAME_PLACEHOLDER + '/"' + PASSWORD_PLACEHOLDER + '"@"(DESCRIPTION='
    "(ADDRESS=(PROTOCOL=TCP)(HOST=%(host)s)(PORT=%(port)s))"
    '(CONNECT_DATA=(%(connect_data)s)))"'
)


@dataclass(frozen=True)
class SessionConfig:
    """
    Validated configuration of one client session.

    Attributes
    ----------
    template : str
        Connection-string template with {{username}}/{{password}} placeholders
    client_home : Path
        Client installation root (ORACLE_HOME)
    username_command : str
        Username provider: path and whitespace-separated arguments
    password_command : str
        Password provider: path and whitespace-separated arguments
    client_args : str
        Extra whitespace-separated arguments for the client
    client_name : str
        Client executable under client_home/bin
    debug : bool
        Enable debug tracing on stderr
    """

    template: str
    client_home: Path
    username_command: str
    password_command: str
    client_args: str = ""
    client_name: str = DEFAULT_CLIENT
    debug: bool = False

    def __post_init__(self) -> None:
        problems = []
        if not self.template:
            problems.append("A connection template is required")
        if not self.username_command.strip():
            problems.append("A username program is required")
        if not self.password_command.strip():
            problems.append("A password program is required")
        if not self.client_name:
            problems.append("A client program name is required")
        if problems:
            raise ConfigError("; ".join(problems), problems=problems)

    @property
    def client_executable(self) -> Path:
        """Return the full path of the client program."""
        return self.client_home / "bin" / self.client_name


class ConfigFile(BaseModel):
    """Schema of the optional TOML configuration file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    template: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = Field(default=None, gt=0, le=MAX_PORT)
    connect_data: Optional[str] = None
    oracle_home: Optional[str] = Field(default=None, min_length=1)
    username_program: Optional[str] = None
    password_program: Optional[str] = None
    client: Optional[str] = None
    client_args: Optional[str] = None
    debug: Optional[bool] = None


def load_config_file(path: str | Path) -> ConfigFile:
    """
    Load and validate a TOML configuration file.

    Parameters
    ----------
    path : str or Path
        Configuration file

    Returns
    -------
    ConfigFile
        Validated file contents

    Raises
    ------
    ConfigError
        If the file is missing, is not valid TOML or has unknown/invalid keys
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e

    try:
        config_file = ConfigFile.model_validate(data)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigError(
            f"Invalid config file {path}: {'; '.join(problems)}",
            problems=problems,
        ) from e

    logger.debug("Loaded config file %s", path)
    return config_file


def build_template(host: str, port: int | str, connect_data: str) -> str:
    """
    Build the default connection template for a TCP connect descriptor.

    Examples
    --------
    >>> build_template("db1", 1521, "SID=orcl")
    '{{username}}/"{{password}}"@"(DESCRIPTION=(ADDRESS=(PROTOCOL=TCP)(HOST=db1)(PORT=1521))(CONNECT_DATA=(SID=orcl)))"'
    """
    return DEFAULT_TEMPLATE % {"host": host, "port": port, "connect_data": connect_data}


def _pick(*values):
    for value in values:
        if value is not None:
            return value
    return None


def resolve_config(
    config_file: Optional[ConfigFile] = None,
    *,
    template: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    connect_data: Optional[str] = None,
    oracle_home: Optional[str | Path] = None,
    username_program: Optional[str] = None,
    password_program: Optional[str] = None,
    client: Optional[str] = None,
    client_args: Optional[str] = None,
    debug: Optional[bool] = None,
) -> SessionConfig:
    """
    Merge command-line values, file values and defaults into a SessionConfig.

    Keyword values left as None fall back to the configuration file, then
    to the defaults. All missing values are reported together.

    Raises
    ------
    ConfigError
        Listing every missing required value
    """
    file = config_file or ConfigFile()

    template = _pick(template, file.template)
    host = _pick(host, file.host)
    port = _pick(port, file.port, DEFAULT_PORT)
    connect_data = _pick(connect_data, file.connect_data)
    oracle_home = _pick(oracle_home, file.oracle_home)
    username_program = _pick(username_program, file.username_program)
    password_program = _pick(password_program, file.password_program)

    problems = []
    if not template:
        if not connect_data:
            problems.append("You must specify CONNECT_DATA (-c) or a template (-t)")
        if not host:
            problems.append(
                "You must specify an Oracle database host to connect to (-H) "
                "or a template (-t)"
            )
    if not 0 < port <= MAX_PORT:
        problems.append(f"Port must be between 1 and {MAX_PORT} (-P), not {port}")
    if not oracle_home:
        problems.append("You must specify Oracle home (-o)")
    if not password_program or not password_program.strip():
        problems.append("You must specify a password program (-p)")
    if not username_program or not username_program.strip():
        problems.append("You must specify a username program (-u)")
    if problems:
        raise ConfigError("; ".join(problems), problems=problems)

    if not template:
        template = build_template(host, port, connect_data)

    return SessionConfig(
        template=template,
        client_home=Path(oracle_home),
        username_command=username_program,
        password_command=password_program,
        client_args=_pick(client_args, file.client_args, ""),
        client_name=_pick(client, file.client, DEFAULT_CLIENT),
        debug=bool(_pick(debug, file.debug, False)),
    )
