"""
Supervised child process lifecycle.

The supervisor owns every child process a session starts. It installs a
SIGCHLD handler that reaps only the children it owns, without blocking, and
aborts the session as soon as one of them terminates with a nonzero status.
The abort is delivered by raising ChildFailedError from the handler, which
interrupts whatever blocking read, write or wait the main thread is in, so
the session never hangs on a pipe whose other end died abnormally.
"""

import logging
import os
import signal
import subprocess
from typing import Optional

from safe_sqlplus.exceptions import ChildFailedError

logger = logging.getLogger(__name__)

# Grace period for children still running when a session aborts
TERMINATE_TIMEOUT = 5  # seconds


def exit_status(returncode: int) -> int:
    """
    Convert a Popen return code into a process exit status.

    Parameters
    ----------
    returncode : int
        Popen.returncode; negative for a child killed by a signal

    Returns
    -------
    int
        The exit status itself, or 128 + N for a child killed by signal N
    """
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


class ChildSupervisor:
    """
    Owner of the session's child processes.

    Use as a context manager: entering installs the SIGCHLD handler,
    leaving restores the previous handler and, if the block failed,
    terminates children that are still running.

    Examples
    --------
    >>> with ChildSupervisor() as supervisor:
    ...     proc = supervisor.spawn(["/bin/true"])
    ...     supervisor.wait(proc)
    0
    """

    def __init__(self):
        self._children: dict[int, subprocess.Popen] = {}
        self._previous_handler = None
        self._installed = False

    def __enter__(self) -> "ChildSupervisor":
        self.install()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Handler goes first: terminated children must not raise from it
        self.uninstall()
        if exc_type is not None:
            self.terminate_all()

    @property
    def installed(self) -> bool:
        """Return True while the SIGCHLD handler is active."""
        return self._installed

    @property
    def children(self) -> list[subprocess.Popen]:
        """Return the children that have not been reaped yet."""
        return list(self._children.values())

    def install(self) -> None:
        """Install the SIGCHLD handler (main thread only)."""
        if self._installed:
            return
        self._previous_handler = signal.signal(signal.SIGCHLD, self._handle_sigchld)
        self._installed = True
        logger.debug("SIGCHLD handler installed")

    def uninstall(self) -> None:
        """Restore the SIGCHLD handler that was active before install()."""
        if not self._installed:
            return
        previous = self._previous_handler
        signal.signal(signal.SIGCHLD, previous if previous is not None else signal.SIG_DFL)
        self._previous_handler = None
        self._installed = False
        logger.debug("SIGCHLD handler removed")

    def spawn(
        self,
        argv: list[str],
        *,
        stdin: Optional[int] = None,
        stdout: Optional[int] = None,
        env: Optional[dict[str, str]] = None,
    ) -> subprocess.Popen:
        """
        Start a supervised child process.

        Pipes are unbuffered (bufsize=0) so reads and writes map one to one
        onto system calls and no secret data lingers in Python-level buffers.

        Parameters
        ----------
        argv : list[str]
            Executable path followed by its arguments
        stdin : int, optional
            subprocess.PIPE to feed the child's standard input
        stdout : int, optional
            subprocess.PIPE to capture the child's standard output
        env : dict, optional
            Environment for the child (default: inherit)

        Returns
        -------
        subprocess.Popen
            Handle of the started child

        Raises
        ------
        OSError
            If the program cannot be executed
        """
        logger.debug("Exec: %s", " ".join(argv))
        proc = subprocess.Popen(
            argv,
            stdin=stdin,
            stdout=stdout,
            env=env,
            bufsize=0,
            close_fds=True,
        )
        self._children[proc.pid] = proc
        logger.debug("Started %s as pid %d", argv[0], proc.pid)
        return proc

    def wait(self, proc: subprocess.Popen) -> int:
        """
        Block until ``proc`` terminates and return its exit status.

        While waiting, any other supervised child that dies with a nonzero
        status still aborts the session through the SIGCHLD handler.

        Parameters
        ----------
        proc : subprocess.Popen
            Child started with spawn()

        Returns
        -------
        int
            Exit status (see exit_status())
        """
        try:
            returncode = proc.wait()
        finally:
            if proc.returncode is not None:
                self._children.pop(proc.pid, None)
        status = exit_status(returncode)
        logger.debug("Child %d exited with status %d", proc.pid, status)
        return status

    def reap(self) -> None:
        """
        Reap supervised children that have terminated, without blocking.

        Raises
        ------
        ChildFailedError
            For the first terminated child with a nonzero exit status
        """
        for pid, proc in list(self._children.items()):
            if proc.poll() is None:
                continue
            del self._children[pid]
            status = exit_status(proc.returncode)
            if status != 0:
                program = os.path.basename(str(proc.args[0]))
                raise ChildFailedError(
                    f"Child process {program} (pid {pid}) exited with status {status}",
                    pid=pid,
                    program=program,
                    exit_code=status,
                )

    def terminate_all(self, timeout: float = TERMINATE_TIMEOUT) -> None:
        """Terminate every supervised child that is still running."""
        for pid, proc in list(self._children.items()):
            if proc.poll() is None:
                logger.debug("Terminating child %d", pid)
                proc.terminate()
                try:
                    proc.wait(timeout=timeout)
                except subprocess.TimeoutExpired:
                    proc.kill()
                    proc.wait()
            self._children.pop(pid, None)

    def _handle_sigchld(self, signum, frame) -> None:
        self.reap()
