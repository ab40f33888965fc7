"""
Custom exceptions for safe-sqlplus.

This module defines all custom exceptions used throughout the safe-sqlplus
package. All exceptions inherit from SafeSqlplusError for easy catching of
package-specific errors, and every exception carries the process exit code
the command-line interface should terminate with.
"""


class SafeSqlplusError(Exception):
    """
    Base exception for all safe-sqlplus errors.

    Attributes
    ----------
    exit_code : int
        Exit status the process should terminate with (default: 1)

    Examples
    --------
    >>> try:
    ...     # some safe_sqlplus operation
    ...     pass
    ... except SafeSqlplusError as e:
    ...     print(f"Error: {e}")
    ...     raise SystemExit(e.exit_code)
    """

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(SafeSqlplusError):
    """
    Error in the session configuration.

    Raised when a required value (template, Oracle home, provider
    commands) is missing, or when a configuration file cannot be read
    or does not validate.

    Attributes
    ----------
    problems : list[str]
        Individual problems found, one message per missing or invalid value

    Examples
    --------
    >>> raise ConfigError("You must specify a password program (-p)")
    """

    def __init__(self, message: str, problems: list[str] | None = None):
        super().__init__(message)
        self.problems = problems or [message]


class CommandError(SafeSqlplusError):
    """
    Command string cannot be turned into an argument vector.

    Examples
    --------
    >>> raise CommandError("Unusable command: ''")
    """

    pass


class ProviderError(SafeSqlplusError):
    """
    Credential provider failed.

    Raised when a provider program cannot be executed, exits with a
    nonzero status, or produces no output.

    Attributes
    ----------
    provider : str
        Name of the credential the provider was asked for ("username", "password")
    exit_code : int
        Provider's own exit status, or 1 when it did not report a failure itself
    """

    def __init__(self, message: str, provider: str, exit_code: int = 1):
        super().__init__(message, exit_code=exit_code)
        self.provider = provider


class ChildFailedError(SafeSqlplusError):
    """
    A supervised child process terminated with a nonzero status.

    Raised from the SIGCHLD handler, so it can surface from any blocking
    read, write or wait that was in progress when the child died.

    Attributes
    ----------
    pid : int
        Process id of the child that failed
    program : str
        Executable of the child
    exit_code : int
        Child's exit status (128 + N for a child killed by signal N)
    """

    def __init__(self, message: str, pid: int, program: str, exit_code: int):
        super().__init__(message, exit_code=exit_code)
        self.pid = pid
        self.program = program


class SessionError(SafeSqlplusError):
    """
    Error launching or talking to the database client.

    Examples
    --------
    >>> raise SessionError("Unable to execute '/opt/oracle/bin/sqlplus'")
    """

    pass
