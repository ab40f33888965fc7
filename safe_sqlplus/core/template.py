"""
Connection-string template expansion.

Templates contain the literal placeholders ``{{username}}`` and
``{{password}}``. Expansion is a single left-to-right pass: secret values
are copied verbatim and never rescanned, so a secret that happens to
contain placeholder text cannot trigger a further substitution.
"""

import logging

from safe_sqlplus.core.secret import SecretBuffer

logger = logging.getLogger(__name__)

USERNAME_PLACEHOLDER = "{{username}}"
PASSWORD_PLACEHOLDER = "{{password}}"

# Initial size of the output buffer; it doubles as secrets are appended.
_INITIAL_CAPACITY = 256


def expand_template(
    template: str,
    username: SecretBuffer,
    password: SecretBuffer,
) -> SecretBuffer:
    """
    Substitute credentials into a connection-string template.

    Parameters
    ----------
    template : str
        Connection string containing zero or more placeholders
    username : SecretBuffer
        Value for ``{{username}}``
    password : SecretBuffer
        Value for ``{{password}}``

    Returns
    -------
    SecretBuffer
        The assembled connection command. The caller owns it and must
        scrub it once it has been sent.

    Examples
    --------
    >>> user = SecretBuffer.from_bytes(b"alice")
    >>> pw = SecretBuffer.from_bytes(b"s3cret!")
    >>> cmd = expand_template('{{username}}/"{{password}}"@DB', user, pw)
    >>> bytes(cmd.view())
    b'alice/"s3cret!"@DB'
    """
    source = template.encode("utf-8")
    tokens = (
        (USERNAME_PLACEHOLDER.encode("ascii"), username),
        (PASSWORD_PLACEHOLDER.encode("ascii"), password),
    )
    command = SecretBuffer(max(len(source), _INITIAL_CAPACITY))

    try:
        position = 0
        while position < len(source):
            for token, secret in tokens:
                if source.startswith(token, position):
                    with secret.view() as value:
                        command.append(value)
                    position += len(token)
                    break
            else:
                # Plain text up to the next possible placeholder start
                end = source.find(b"{", position + 1)
                if end == -1:
                    end = len(source)
                command.append(source[position:end])
                position = end
    except BaseException:
        command.scrub()
        raise

    logger.debug("Expanded connection template into %d bytes", len(command))
    return command
