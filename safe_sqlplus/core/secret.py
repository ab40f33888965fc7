"""
Scrubbable in-memory secret storage.

Secrets (usernames, passwords, assembled connection commands) are kept in
mutable ``bytearray`` storage so they can be overwritten with zero bytes
once handed to the client. Immutable ``str``/``bytes`` copies of secret
values are avoided: callers work with ``view()`` instead.
"""

from typing import BinaryIO

# Upper bound for a single-line credential
SECRET_MAX = 512


class SecretBuffer:
    """
    Bounded mutable byte buffer holding one secret value.

    The buffer has a fixed capacity unless it is grown explicitly with
    ``append()``, which doubles the storage and scrubs the storage it
    outgrew. Using the buffer as a context manager scrubs it on exit.

    Parameters
    ----------
    capacity : int, optional
        Initial storage size in bytes (default: SECRET_MAX)

    Examples
    --------
    >>> with SecretBuffer.from_bytes(b"s3cret!") as pw:
    ...     len(pw)
    7
    >>> pw.is_scrubbed()
    True
    """

    def __init__(self, capacity: int = SECRET_MAX):
        if capacity <= 0:
            raise ValueError(f"Capacity must be positive, got {capacity}")
        self._storage = bytearray(capacity)
        self._length = 0

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> "SecretBuffer":
        """Create a buffer holding a copy of ``data``."""
        buffer = cls(max(len(data), 1))
        buffer.append(data)
        return buffer

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"SecretBuffer(length={self._length}, capacity={self.capacity})"

    def __enter__(self) -> "SecretBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.scrub()

    @property
    def capacity(self) -> int:
        """Return the current storage size in bytes."""
        return len(self._storage)

    def view(self) -> memoryview:
        """
        Return a read-only view of the stored bytes.

        The view shares memory with the buffer; release it (or use it in a
        ``with`` block) before the buffer needs to grow.
        """
        return memoryview(self._storage).toreadonly()[: self._length]

    def fill_from(self, stream: BinaryIO) -> int:
        """
        Replace the contents with a single read from ``stream``.

        Exactly one ``readinto`` call is made, so at most ``capacity``
        bytes are captured; anything beyond that is left unread.

        Parameters
        ----------
        stream : BinaryIO
            Unbuffered binary stream (e.g. a subprocess pipe opened with bufsize=0)

        Returns
        -------
        int
            Number of bytes read (0 on end of stream)
        """
        self.scrub()
        with memoryview(self._storage) as target:
            count = stream.readinto(target)
        self._length = count or 0
        return self._length

    def append(self, data: bytes | bytearray | memoryview) -> None:
        """
        Append bytes, doubling the storage as often as needed.

        Outgrown storage is zeroed before it is dropped so that no copy of
        the secret is left behind in released memory.
        """
        needed = self._length + len(data)
        if needed > len(self._storage):
            capacity = len(self._storage)
            while capacity < needed:
                capacity *= 2
            grown = bytearray(capacity)
            grown[: self._length] = self._storage[: self._length]
            self._storage[:] = bytes(len(self._storage))
            self._storage = grown
        self._storage[self._length : needed] = data
        self._length = needed

    def strip_newline(self) -> bool:
        """
        Remove exactly one trailing newline, if present.

        Returns
        -------
        bool
            True if a newline was removed
        """
        if self._length and self._storage[self._length - 1] == ord("\n"):
            self._length -= 1
            self._storage[self._length] = 0
            return True
        return False

    def scrub(self) -> None:
        """Overwrite the whole storage with zero bytes and empty the buffer."""
        self._storage[:] = bytes(len(self._storage))
        self._length = 0

    def is_scrubbed(self) -> bool:
        """Return True if every byte of the storage is zero."""
        return self._length == 0 and not any(self._storage)
