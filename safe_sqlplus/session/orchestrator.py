"""
Session orchestration.

A session runs strictly in sequence:

    INIT → USERNAME_ACQUIRED → PASSWORD_ACQUIRED → CLIENT_SPAWNED → RELAYING → DONE

1. Run the username provider, then the password provider.
2. Start the client with its standard input wired to a pipe.
3. Write the preamble (define off, connect command, define on).
4. Scrub username, password and connection command.
5. Relay our standard input to the client until end of input.
6. Wait for the client and return its exit status.

Any failure ends the session in FAILED. Nothing is retried: credentials
are fetched at most once per session.
"""

import logging
import subprocess
import sys
from contextlib import ExitStack
from enum import Enum
from typing import BinaryIO, Optional

from safe_sqlplus.config import SessionConfig
from safe_sqlplus.core.secret import SecretBuffer
from safe_sqlplus.core.template import expand_template
from safe_sqlplus.core.tokenizer import tokenize
from safe_sqlplus.exceptions import ChildFailedError, SessionError
from safe_sqlplus.process.supervisor import ChildSupervisor
from safe_sqlplus.providers.runner import CredentialProvider
from safe_sqlplus.session.client import (
    CONNECT_PREFIX,
    DEFINE_OFF,
    DEFINE_ON,
    LINE_END,
    client_environment,
    client_vector,
)

logger = logging.getLogger(__name__)

RELAY_CHUNK = 4096  # bytes


class SessionState(Enum):
    """Stages of a session."""

    INIT = "init"
    USERNAME_ACQUIRED = "username-acquired"
    PASSWORD_ACQUIRED = "password-acquired"
    CLIENT_SPAWNED = "client-spawned"
    RELAYING = "relaying"
    DONE = "done"
    FAILED = "failed"


def write_all(stream: BinaryIO, data: bytes | memoryview) -> None:
    """Write all of ``data`` to an unbuffered stream, retrying short writes."""
    with memoryview(data) as view:
        remaining = view
        while remaining:
            written = stream.write(remaining)
            remaining = remaining[written:]


class SessionOrchestrator:
    """
    Runs one client session from credential acquisition to client exit.

    Parameters
    ----------
    config : SessionConfig
        Validated session configuration
    supervisor : ChildSupervisor
        Supervisor owning every child process of the session; its SIGCHLD
        handler must be installed for the duration of run()
    stdin : BinaryIO, optional
        Input relayed to the client (default: sys.stdin.buffer)

    Examples
    --------
    >>> with ChildSupervisor() as supervisor:
    ...     exit_code = SessionOrchestrator(config, supervisor).run()
    """

    def __init__(
        self,
        config: SessionConfig,
        supervisor: ChildSupervisor,
        stdin: Optional[BinaryIO] = None,
    ):
        self._config = config
        self._supervisor = supervisor
        self._stdin = stdin
        self._state = SessionState.INIT

    @property
    def state(self) -> SessionState:
        """Return the current session state."""
        return self._state

    def run(self) -> int:
        """
        Run the session.

        Returns
        -------
        int
            The client's exit status

        Raises
        ------
        ProviderError
            If a provider fails; exit_code is the provider's status
        ChildFailedError
            If a provider process is reaped with a nonzero status
        CommandError
            If a provider command is empty
        SessionError
            If the client cannot be started or exits before the login
        """
        client: Optional[subprocess.Popen] = None
        held: list[SecretBuffer] = []
        try:
            try:
                with ExitStack() as secrets:
                    username = self._hold(
                        secrets, held,
                        self._fetch("username", self._config.username_command),
                    )
                    self._advance(SessionState.USERNAME_ACQUIRED)

                    password = self._hold(
                        secrets, held,
                        self._fetch("password", self._config.password_command),
                    )
                    self._advance(SessionState.PASSWORD_ACQUIRED)

                    client = self._spawn_client()
                    self._advance(SessionState.CLIENT_SPAWNED)

                    command = self._hold(
                        secrets, held,
                        expand_template(self._config.template, username, password),
                    )
                    self._send_preamble(client, command)
            finally:
                # An abort raised by the SIGCHLD handler can cut one scrub short
                for secret in held:
                    secret.scrub()
            logger.debug("Credentials scrubbed from memory")

            self._advance(SessionState.RELAYING)
            self._relay(client)
            exit_code = self._finish(client)

        except ChildFailedError as e:
            if client is None or e.pid != client.pid:
                self._state = SessionState.FAILED
                raise
            # The client's own exit status is the session result
            self._close_input(client)
            logger.debug("Client exited with status %d", e.exit_code)
            self._advance(SessionState.DONE)
            return e.exit_code
        except BaseException:
            self._state = SessionState.FAILED
            raise

        self._advance(SessionState.DONE)
        return exit_code

    def _advance(self, state: SessionState) -> None:
        logger.debug("Session state: %s -> %s", self._state.value, state.value)
        self._state = state

    @staticmethod
    def _hold(
        stack: ExitStack, held: list[SecretBuffer], secret: SecretBuffer
    ) -> SecretBuffer:
        held.append(secret)
        return stack.enter_context(secret)

    def _fetch(self, name: str, command: str) -> SecretBuffer:
        provider = CredentialProvider(name, tokenize(command), self._supervisor)
        return provider.fetch()

    def _spawn_client(self) -> subprocess.Popen:
        vector = client_vector(self._config)
        try:
            return self._supervisor.spawn(
                vector.argv,
                stdin=subprocess.PIPE,
                env=client_environment(self._config),
            )
        except OSError as e:
            raise SessionError(
                f"Unable to execute '{vector.executable}': {e.strerror or e}"
            ) from e

    def _send_preamble(self, client: subprocess.Popen, command: SecretBuffer) -> None:
        logger.debug("Sending connection command to client (%d bytes)", len(command))
        try:
            with command.view() as value:
                for chunk in (DEFINE_OFF, CONNECT_PREFIX, value, LINE_END, DEFINE_ON):
                    write_all(client.stdin, chunk)
        except BrokenPipeError as e:
            raise SessionError(
                "The client exited before accepting the connection command"
            ) from e

    def _relay(self, client: subprocess.Popen) -> None:
        source = self._stdin if self._stdin is not None else sys.stdin.buffer
        relayed = 0
        while True:
            chunk = source.read1(RELAY_CHUNK)
            if not chunk:
                break
            try:
                write_all(client.stdin, chunk)
            except BrokenPipeError:
                logger.debug("Client closed its input; stopping relay")
                break
            relayed += len(chunk)
        logger.debug("Relay finished after %d bytes", relayed)

    def _finish(self, client: subprocess.Popen) -> int:
        self._close_input(client)
        try:
            return self._supervisor.wait(client)
        except OSError as e:
            logger.error("Waiting for the client failed: %s", e)
            return 1

    @staticmethod
    def _close_input(client: subprocess.Popen) -> None:
        if client.stdin is not None and not client.stdin.closed:
            client.stdin.close()
