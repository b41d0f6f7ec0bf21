"""Wipeable storage for arbitrary-precision key material.

Python's built-in ``int`` does all the arithmetic, but it is immutable and cannot be zeroized. Sensitive values are
therefore kept in a ``SecureInt``, an owned ``bytearray`` holding the big-endian magnitude, which can be overwritten in
place before it is released. Transient ``int`` objects created during a computation are left to the interpreter.

Typical usage example:

    d = SecureInt.from_int(pow(17, -1, phi))
    m = pow(c, d.value, n)
    d.clear()
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class SecureInt:
    """An unsigned big integer whose storage can be zeroized.

    Attributes:
        cleared: Whether the value has been wiped.
    """

    __slots__ = ("_buf",)

    def __init__(self, data: bytes | bytearray) -> None:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Key material must be bytes-like, not {type(data).__name__}.")
        # Always copy, the caller keeps ownership of its own buffer.
        self._buf: bytearray | None = bytearray(data) if data else bytearray(1)

    def __del__(self) -> None:
        if getattr(self, "_buf", None) is not None:
            self.clear()

    @classmethod
    def from_int(cls, value: int) -> "SecureInt":
        """Stores a non-negative integer."""
        if value < 0:
            raise ValueError("SecureInt only holds non-negative integers.")
        return cls(integer_to_bytes(value))

    @classmethod
    def from_bytes(cls, data: bytes | bytearray) -> "SecureInt":
        """Stores a big-endian unsigned byte string. An empty string is zero."""
        return cls(data)

    @property
    def cleared(self) -> bool:
        return self._buf is None

    @property
    def value(self) -> int:
        """The stored integer.

        Raises:
            ValueError: If the value has been cleared.
        """
        if self._buf is None:
            raise ValueError("Key material has been cleared.")
        return bytes_to_integer(self._buf)

    def bit_length(self) -> int:
        return self.value.bit_length()

    def to_bytes(self) -> bytearray:
        """Returns a fresh minimal big-endian copy. Zero encodes as a single null byte."""
        return bytearray(integer_to_bytes(self.value))

    def clear(self) -> None:
        """Overwrites the buffer with zeros and releases it. Clearing twice is a no-op."""
        if self._buf is None:
            return
        wipe(self._buf)
        self._buf = None


def bytes_to_integer(msg: bytes | bytearray) -> int:
    """Converts a byte string to an integer, big-endian and unsigned.

    Args:
        msg: The bytes (AKA Octet String) to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int, fixedlen: int | None = None) -> bytes:
    """Converts an integer to bytes, big-endian and unsigned.

    Args:
        msg: The integer to unmarshal.
        fixedlen: The target length of the byte string.
            If not provided, the minimal length is used (at least one byte).

    Returns:
        The representative bytes. (AKA Octet String)
    """
    if fixedlen is None:
        fixedlen = max(1, (msg.bit_length() + 7) // 8)
    return msg.to_bytes(fixedlen, byteorder="big", signed=False)


def wipe(buffer: bytearray | None) -> None:
    """Zero-fills a mutable buffer in place. ``None`` is ignored."""
    if buffer is None:
        return
    buffer[:] = bytes(len(buffer))
