"""The capability interface an asymmetric key engine offers to a surrounding provider framework."""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import abc

from rsaengine.parameters import RSAParameters


class AsymmetricKeyEngine(abc.ABC):
    """Template for engines owning a key pair.

    Registration of concrete engines is left to the provider framework.
    """

    @property
    @abc.abstractmethod
    def key_size(self) -> int:
        ...

    @property
    @abc.abstractmethod
    def key_exchange_algorithm(self) -> str:
        ...

    @property
    @abc.abstractmethod
    def signature_algorithm(self) -> str:
        ...

    @abc.abstractmethod
    def generate_key_pair(self) -> None:
        """Generates a fresh key pair, replacing any held key."""

    @abc.abstractmethod
    def encrypt_value(self, data: bytes) -> bytes:
        """Applies the raw public-key primitive."""

    @abc.abstractmethod
    def decrypt_value(self, data: bytes) -> bytes:
        """Applies the raw private-key primitive (decryption or signature)."""

    @abc.abstractmethod
    def import_parameters(self, params: RSAParameters) -> None:
        ...

    @abc.abstractmethod
    def export_parameters(self, include_private: bool = False) -> RSAParameters:
        ...

    @abc.abstractmethod
    def close(self) -> None:
        """Disposes of the key material."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
