"""
Credential provider runner.

A provider is any executable that prints exactly one line (the secret) on
its standard output and exits with status 0. The runner starts it with its
stdout wired to a pipe, captures the line with a single read into a
bounded SecretBuffer, reads the rest of the output to end of file and
discards it, and fails the whole session if the provider fails.
"""

import logging
import subprocess

from safe_sqlplus.core.secret import SECRET_MAX, SecretBuffer
from safe_sqlplus.core.tokenizer import ArgumentVector
from safe_sqlplus.exceptions import ProviderError
from safe_sqlplus.process.supervisor import ChildSupervisor

logger = logging.getLogger(__name__)


class CredentialProvider:
    """
    Runs one provider program and captures its output as a secret.

    Parameters
    ----------
    name : str
        What the provider returns ("username" or "password"); used in messages
    command : ArgumentVector
        Provider program and its arguments
    supervisor : ChildSupervisor
        Supervisor that owns the provider process
    capacity : int, optional
        Maximum number of bytes captured (default: SECRET_MAX)

    Examples
    --------
    >>> with ChildSupervisor() as supervisor:
    ...     provider = CredentialProvider(
    ...         "username", tokenize("/usr/local/bin/get_db_user"), supervisor
    ...     )
    ...     with provider.fetch() as username:
    ...         ...
    """

    def __init__(
        self,
        name: str,
        command: ArgumentVector,
        supervisor: ChildSupervisor,
        capacity: int = SECRET_MAX,
    ):
        self._name = name
        self._command = command
        self._supervisor = supervisor
        self._capacity = capacity

    @property
    def name(self) -> str:
        """Return what this provider is asked for."""
        return self._name

    @property
    def command(self) -> ArgumentVector:
        """Return the provider's argument vector."""
        return self._command

    def fetch(self) -> SecretBuffer:
        """
        Run the provider and return the captured secret.

        Returns
        -------
        SecretBuffer
            First line of the provider's output, trailing newline removed.
            The caller owns the buffer and must scrub it.

        Raises
        ------
        ProviderError
            If the provider cannot be executed (exit code 1), exits with a
            nonzero status (that status), or prints nothing (exit code 1)
        ChildFailedError
            If the SIGCHLD handler sees the provider fail first
        """
        logger.debug("Running %s program: %s", self._name, self._command)
        secret = SecretBuffer(self._capacity)

        try:
            proc = self._supervisor.spawn(self._command.argv, stdout=subprocess.PIPE)
        except OSError as e:
            raise ProviderError(
                f"Unable to execute {self._name} program "
                f"'{self._command.executable}': {e.strerror or e}",
                provider=self._name,
            ) from e

        try:
            try:
                count = secret.fill_from(proc.stdout)
                discarded = _discard_rest(proc.stdout)
                status = self._supervisor.wait(proc)
            finally:
                proc.stdout.close()

            if status != 0:
                raise ProviderError(
                    f"The {self._name} program '{self._command.executable}' "
                    f"exited with status {status}",
                    provider=self._name,
                    exit_code=status,
                )
            if count <= 0:
                raise ProviderError(
                    f"Could not get {self._name}: "
                    f"'{self._command.executable}' produced no output",
                    provider=self._name,
                )
            if discarded:
                logger.warning(
                    "The %s program wrote %d bytes beyond the %d captured; "
                    "the %s was truncated",
                    self._name,
                    discarded,
                    count,
                    self._name,
                )
            secret.strip_newline()
        except BaseException:
            secret.scrub()
            raise

        logger.debug("Got %s (%d bytes)", self._name, len(secret))
        return secret


def _discard_rest(stream) -> int:
    """Read ``stream`` to end of file through a scrubbed scratch buffer."""
    discarded = 0
    with SecretBuffer() as scratch:
        while True:
            count = scratch.fill_from(stream)
            if not count:
                break
            discarded += count
    return discarded
