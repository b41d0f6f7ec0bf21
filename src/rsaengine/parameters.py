"""The parameter exchange form and the key size contract of the RSA key engine.

`RSAParameters` is the plain transfer structure between an engine and any surrounding key-storage framework. All
fields are big-endian unsigned byte arrays, or None when absent.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import typing

from rsaengine.secureint import wipe

DEFAULT_KEY_SIZE = 1024
PUBLIC_EXPONENT = 17

CRT_FIELDS = ("p", "q", "dp", "dq", "inverse_q")
PRIVATE_FIELDS = ("d",) + CRT_FIELDS


class KeySizes(typing.NamedTuple):
    """An inclusive range of legal key sizes in bits, with a fixed step."""
    min_size: int
    max_size: int
    skip: int

    def is_legal(self, size: int) -> bool:
        if not self.min_size <= size <= self.max_size:
            return False
        return (size - self.min_size) % self.skip == 0


LEGAL_KEY_SIZES = KeySizes(384, 16384, 8)


class RSAParameters(typing.NamedTuple):
    """RSA key parameters in exchange form.

    Attributes:
        modulus: n = p * q.
        exponent: The public exponent e.
        d: The private exponent.
        p: Private prime 1.
        q: Private prime 2.
        dp: CRT component d mod (p - 1).
        dq: CRT component d mod (q - 1).
        inverse_q: CRT component q^-1 mod p.
    """
    modulus: bytearray | None = None
    exponent: bytearray | None = None
    d: bytearray | None = None
    p: bytearray | None = None
    q: bytearray | None = None
    dp: bytearray | None = None
    dq: bytearray | None = None
    inverse_q: bytearray | None = None

    def has_crt(self) -> bool:
        """Whether all five CRT fields are present."""
        return all(getattr(self, name) is not None for name in CRT_FIELDS)

    def is_private(self) -> bool:
        """Whether the private exponent is present."""
        return self.d is not None

    def wipe(self) -> None:
        """Zero-fills every private byte array in place."""
        for name in PRIVATE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bytearray):
                wipe(value)
