"""
Argument tokenizer for provider and client commands.

Commands are given as a single string and are split on whitespace only.
There is no quoting or escaping: provider programs must be simple paths
with simple arguments. Anything more elaborate belongs in a wrapper script.
"""

import logging
from dataclasses import dataclass

from safe_sqlplus.exceptions import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArgumentVector:
    """
    One program invocation: executable path plus positional arguments.

    Attributes
    ----------
    executable : str
        Path of the program to execute
    arguments : tuple[str, ...]
        Arguments passed after the executable

    Examples
    --------
    >>> vector = ArgumentVector("/usr/bin/env", ("FOO=bar",))
    >>> vector.argv
    ['/usr/bin/env', 'FOO=bar']
    """

    executable: str
    arguments: tuple[str, ...] = ()

    @property
    def argv(self) -> list[str]:
        """Return the full vector, executable first."""
        return [self.executable, *self.arguments]

    def __str__(self) -> str:
        return " ".join(self.argv)


def split_arguments(text: str) -> list[str]:
    """
    Split a string into whitespace-separated arguments.

    Parameters
    ----------
    text : str
        Arguments string (may be empty)

    Returns
    -------
    list[str]
        Arguments in order; empty list for empty input
    """
    return text.split()


def tokenize(command: str) -> ArgumentVector:
    """
    Turn a command string into an argument vector.

    Parameters
    ----------
    command : str
        Whitespace-separated command, e.g. "/usr/local/bin/get_pw prod"

    Returns
    -------
    ArgumentVector
        Executable and its arguments

    Raises
    ------
    CommandError
        If the command string is empty or contains only whitespace

    Examples
    --------
    >>> tokenize("/usr/bin/env FOO=bar").argv
    ['/usr/bin/env', 'FOO=bar']
    """
    tokens = split_arguments(command)
    if not tokens:
        raise CommandError(f"Unusable command: {command!r}")

    vector = ArgumentVector(tokens[0], tuple(tokens[1:]))
    logger.debug("Tokenized command into %d argument(s): %s", len(tokens), vector.argv)
    return vector
