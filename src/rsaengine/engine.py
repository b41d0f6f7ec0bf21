"""The RSA key engine: key generation, the raw RSA primitives and parameter exchange.

The engine owns one key pair. The pair is generated lazily on the first operation that needs it, or supplied wholesale
through `import_parameters`. Private-key operations use the Chinese Remainder Theorem when the full CRT parameter set
is available and are blinded by default. All key material is held in wipeable `SecureInt` buffers and zeroized when the
engine is closed.

This is the "textbook" primitive. Callers are responsible for padding (PKCS#1 v1.5, OAEP) and for keeping inputs below
the modulus.

Typical usage example:

    with RSAEngine(2048) as engine:
        c = engine.encrypt_value(padded_message)
        m = engine.decrypt_value(c)
        xml = engine.to_xml_string(include_private=False)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import math
import typing
import warnings

from rsaengine import keygen
from rsaengine import xmlkey
from rsaengine.errors import KeyDisposedError
from rsaengine.errors import MissingParameterError
from rsaengine.parameters import DEFAULT_KEY_SIZE
from rsaengine.parameters import KeySizes
from rsaengine.parameters import LEGAL_KEY_SIZES
from rsaengine.parameters import PUBLIC_EXPONENT
from rsaengine.parameters import RSAParameters
from rsaengine.provider import AsymmetricKeyEngine
from rsaengine.secureint import SecureInt
from rsaengine.secureint import wipe

logger = logging.getLogger(__name__)

# Engine attribute backing each RSAParameters private field.
_PRIVATE_SLOTS = (("d", "_d"), ("p", "_p"), ("q", "_q"), ("dp", "_dp"), ("dq", "_dq"), ("inverse_q", "_qinv"))
_CRT_SLOTS = ("_p", "_q", "_dp", "_dq", "_qinv")

KeyGeneratedListener = typing.Callable[["RSAEngine"], typing.Any]


class RSAEngine(AsymmetricKeyEngine):
    """RSA key engine owning a single key pair.

    Not safe for concurrent mutation: generation, import and closing must be serialized by the caller. Encrypting and
    decrypting with an existing key keeps every intermediate local to the call.

    Attributes:
        KEY_EXCHANGE_ALGORITHM: Identifier of the key exchange scheme.
        SIGNATURE_ALGORITHM: Identifier of the signature scheme.
    """

    KEY_EXCHANGE_ALGORITHM = "RSA-PKCS1-KeyEx"
    SIGNATURE_ALGORITHM = "http://www.w3.org/2000/09/xmldsig#rsa-sha1"

    def __init__(self, key_size: int = DEFAULT_KEY_SIZE) -> None:
        """Initialize the engine without generating a key.

        Args:
            key_size: Size of the key to generate on demand, in bits. Must be in `LEGAL_KEY_SIZES`.

        Raises:
            ValueError: If `key_size` is not a legal key size.
        """
        if not LEGAL_KEY_SIZES.is_legal(key_size):
            raise ValueError(f"Key size {key_size} is not legal. Legal sizes: {LEGAL_KEY_SIZES}.")
        self._requested_size = key_size
        self._n: SecureInt | None = None
        self._e: SecureInt | None = None
        self._d: SecureInt | None = None
        self._p: SecureInt | None = None
        self._q: SecureInt | None = None
        self._dp: SecureInt | None = None
        self._dq: SecureInt | None = None
        self._qinv: SecureInt | None = None
        self._key_generated = False
        self._crt_possible = False
        self._use_blinding = True
        self._listeners: list[KeyGeneratedListener] = []
        self._disposed = False

    def __del__(self) -> None:
        # A half-constructed engine has nothing to clean up.
        if getattr(self, "_disposed", True):
            return
        warnings.warn(f"RSA engine {self!r} was never closed.", ResourceWarning)
        self._dispose(owner=False)

    @property
    def key_size(self) -> int:
        """Modulus length rounded up to whole bytes once a key exists, the requested size otherwise."""
        if self._key_generated and self._n is not None:
            ks = self._n.bit_length()
            if ks & 7:
                ks += 8 - (ks & 7)
            return ks
        return self._requested_size

    @property
    def legal_key_sizes(self) -> KeySizes:
        return LEGAL_KEY_SIZES

    @property
    def key_exchange_algorithm(self) -> str:
        return self.KEY_EXCHANGE_ALGORITHM

    @property
    def signature_algorithm(self) -> str:
        return self.SIGNATURE_ALGORITHM

    @property
    def public_only(self) -> bool:
        return self._d is None or self._n is None

    @property
    def key_generated(self) -> bool:
        return self._key_generated

    @property
    def crt_possible(self) -> bool:
        """True if no key exists yet (one will be generated with CRT parameters) or the CRT set is complete."""
        return not self._key_generated or self._crt_possible

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def use_key_blinding(self) -> bool:
        """Whether private-key operations are blinded. Enabled by default.

        Blinding decorrelates the timing of the private exponentiation from the exponent bits. Disabling it removes
        that protection against timing-based key recovery and issues a RuntimeWarning.
        """
        return self._use_blinding

    @use_key_blinding.setter
    def use_key_blinding(self, value: bool) -> None:
        if not value:
            warnings.warn("Disabling key blinding exposes the private key to timing attacks!", RuntimeWarning,
                          stacklevel=2)
        self._use_blinding = bool(value)

    def add_key_generated_listener(self, listener: KeyGeneratedListener) -> None:
        """Registers a callback invoked with this engine right after each key generation. Imports do not notify."""
        self._listeners.append(listener)

    def remove_key_generated_listener(self, listener: KeyGeneratedListener) -> None:
        self._listeners.remove(listener)

    def _check_disposed(self, what: str = "key") -> None:
        if self._disposed:
            raise KeyDisposedError(f"Cannot use the {what}: the RSA engine has been disposed.")

    def _ensure_key(self) -> None:
        if not self._key_generated:
            self.generate_key_pair()

    def generate_key_pair(self) -> None:
        """Generates a fresh key pair of the requested size with e = 17.

        Primes p and q with p mod e != 1 and q mod e != 1 (so e is coprime to p-1 and q-1) are drawn until their
        product has exactly the requested bit length. Any previously held key is wiped and replaced.

        Raises:
            KeyDisposedError: If the engine has been disposed.
            RuntimeError: If the prime search is exhausted.
        """
        self._check_disposed()
        size = self._requested_size
        p_size = (size + 1) >> 1
        q_size = size - p_size
        e = PUBLIC_EXPONENT
        logger.debug("Generating %d-bit key pair (%d/%d-bit primes).", size, p_size, q_size)

        while True:
            p = keygen.generate_pseudoprime(p_size)
            if p % e != 1:
                break
        retries = 0
        while True:
            while True:
                q = keygen.generate_pseudoprime(q_size)
                if q % e != 1 and q != p:
                    break
            n = p * q
            if n.bit_length() == size:
                break
            # The product came up short, keep the larger prime and try again.
            retries += 1
            p = max(p, q)

        p_sub1 = p - 1
        q_sub1 = q - 1
        d = pow(e, -1, p_sub1 * q_sub1)

        self._clear_key(owner=True)
        self._e = SecureInt.from_int(e)
        self._n = SecureInt.from_int(n)
        self._d = SecureInt.from_int(d)
        self._p = SecureInt.from_int(p)
        self._q = SecureInt.from_int(q)
        self._dp = SecureInt.from_int(d % p_sub1)
        self._dq = SecureInt.from_int(d % q_sub1)
        self._qinv = SecureInt.from_int(pow(q, -1, p))
        self._key_generated = True
        self._crt_possible = True
        logger.debug("Generated %d-bit key pair after %d modulus retries.", size, retries)

        for listener in list(self._listeners):
            listener(self)

    def _blinding_factor(self, n: int) -> int:
        while True:
            r = keygen.generate_random(n.bit_length())
            if r > 1 and math.gcd(r, n) == 1:
                return r

    def _crt_exponentiate(self, c: int) -> int:
        p = self._p.value
        q = self._q.value
        qinv = self._qinv.value
        m1 = pow(c, self._dp.value, p)
        m2 = pow(c, self._dq.value, q)
        if m2 > m1:
            # Keeps the intermediate non-negative. Reducing mod p covers m2 = m1 (mod p).
            h = (p - ((m2 - m1) * qinv % p)) % p
        else:
            h = (m1 - m2) * qinv % p
        return m2 + q * h

    def decrypt_value(self, data: bytes) -> bytes:
        """Applies the private-key primitive, used for both decryption and raw signatures.

        Generates a key pair first if none exists. The input is read as a big-endian unsigned integer and should be
        below the modulus; larger inputs are not rejected.

        Args:
            data: The big-endian ciphertext representative.

        Returns:
            The minimal big-endian representation of the result.

        Raises:
            KeyDisposedError: If the engine has been disposed.
            MissingParameterError: If the key holds neither a private exponent nor a complete CRT set.
        """
        self._check_disposed("private key")
        self._ensure_key()
        if self._d is None and not self._crt_possible:
            raise MissingParameterError("Missing private key")

        n = self._n.value
        work = SecureInt.from_bytes(data)
        r = None
        output = None
        try:
            if self._use_blinding:
                # A new r on every call so the timing is randomized as well.
                r = SecureInt.from_int(self._blinding_factor(n))
                blinded = pow(r.value, self._e.value, n) * work.value % n
                work.clear()
                work = SecureInt.from_int(blinded)
            if self._crt_possible:
                m = self._crt_exponentiate(work.value)
            else:
                m = pow(work.value, self._d.value, n)
            if r is not None:
                m = m * pow(r.value, -1, n) % n
            output = SecureInt.from_int(m)
            raw = output.to_bytes()
            result = bytes(raw)
            wipe(raw)
            return result
        finally:
            work.clear()
            if r is not None:
                r.clear()
            if output is not None:
                output.clear()

    def encrypt_value(self, data: bytes) -> bytes:
        """Applies the public-key primitive m^e mod n.

        Generates a key pair first if none exists.

        Args:
            data: The big-endian message representative, below the modulus.

        Returns:
            The minimal big-endian representation of the result.

        Raises:
            KeyDisposedError: If the engine has been disposed.
        """
        self._check_disposed("public key")
        self._ensure_key()
        work = SecureInt.from_bytes(data)
        output = None
        try:
            output = SecureInt.from_int(pow(work.value, self._e.value, self._n.value))
            return bytes(output.to_bytes())
        finally:
            work.clear()
            if output is not None:
                output.clear()

    def export_parameters(self, include_private: bool = False) -> RSAParameters:
        """Exports the key, generating one first if none exists.

        The private exponent is left-padded with zeros to the modulus length. CRT parameters are only included if all
        five are present. The returned arrays are fresh copies owned by the caller, see `RSAParameters.wipe`.

        Args:
            include_private: Whether to export the private parameters.

        Returns:
            The key parameters.

        Raises:
            KeyDisposedError: If the engine has been disposed.
            MissingParameterError: If private parameters are requested but no private exponent is held.
        """
        self._check_disposed()
        self._ensure_key()
        modulus = self._n.to_bytes()
        exponent = self._e.to_bytes()
        if not include_private:
            return RSAParameters(modulus=modulus, exponent=exponent)
        if self._d is None:
            raise MissingParameterError("Missing private key")
        d = self._d.to_bytes()
        if len(d) < len(modulus):
            normalized = bytearray(len(modulus))
            normalized[len(modulus) - len(d):] = d
            wipe(d)
            d = normalized
        crt = {}
        if self._has_crt_set():
            crt = {field: getattr(self, slot).to_bytes() for field, slot in _PRIVATE_SLOTS if slot != "_d"}
        return RSAParameters(modulus=modulus, exponent=exponent, d=d, **crt)

    def import_parameters(self, params: RSAParameters) -> None:
        """Replaces the held key with the supplied parameters.

        Modulus and exponent are mandatory, everything else is optional. No consistency check (e.g. n = p * q) is
        performed; inconsistent parameters give inconsistent results. CRT is used only if all five CRT fields are
        supplied. Key-generated listeners are not notified.

        Args:
            params: The parameters to import. The engine copies them, the caller keeps ownership.

        Raises:
            KeyDisposedError: If the engine has been disposed.
            MissingParameterError: If the exponent or the modulus is missing.
            TypeError: If a supplied field is not bytes-like. The held key is left untouched.
        """
        self._check_disposed()
        if params.exponent is None:
            raise MissingParameterError("Missing exponent")
        if params.modulus is None:
            raise MissingParameterError("Missing modulus")

        incoming = {}
        try:
            incoming["_e"] = SecureInt.from_bytes(params.exponent)
            incoming["_n"] = SecureInt.from_bytes(params.modulus)
            for field, slot in _PRIVATE_SLOTS:
                value = getattr(params, field)
                if value is not None:
                    incoming[slot] = SecureInt.from_bytes(value)
        except TypeError:
            for value in incoming.values():
                value.clear()
            raise

        self._clear_key(owner=True)
        for slot, value in incoming.items():
            setattr(self, slot, value)

        self._key_generated = True
        self._crt_possible = self._has_crt_set()
        logger.debug("Imported %d-bit key (private: %s, crt: %s).", self._n.bit_length(), self._d is not None,
                     self._crt_possible)

    def _has_crt_set(self) -> bool:
        return all(getattr(self, slot) is not None for slot in _CRT_SLOTS)

    def to_xml_string(self, include_private: bool = False) -> str:
        """Exports the key in the `<RSAKeyValue>` XML encoding.

        The temporary private byte arrays are wiped once serialized, also when serialization fails.

        Args:
            include_private: Whether to include the private parameters.

        Returns:
            The XML text.

        Raises:
            KeyDisposedError: If the engine has been disposed.
            MissingParameterError: If private parameters are requested but no private exponent is held.
        """
        params = self.export_parameters(include_private)
        try:
            return xmlkey.to_xml_string(params, include_private)
        finally:
            params.wipe()

    def from_xml_string(self, text: str) -> None:
        """Imports a key from the `<RSAKeyValue>` XML encoding.

        Args:
            text: The XML text.

        Raises:
            KeyDisposedError: If the engine has been disposed.
            MissingParameterError: If the exponent or the modulus is missing.
            ValueError: If the text is not an `RSAKeyValue` document.
        """
        self._check_disposed()
        params = xmlkey.from_xml_string(text)
        try:
            self.import_parameters(params)
        finally:
            params.wipe()

    def _clear_key(self, owner: bool) -> None:
        for _, slot in _PRIVATE_SLOTS:
            value = getattr(self, slot)
            if value is not None:
                value.clear()
                setattr(self, slot, None)
        if owner:
            for slot in ("_e", "_n"):
                value = getattr(self, slot)
                if value is not None:
                    value.clear()
                    setattr(self, slot, None)
        self._crt_possible = False

    def _dispose(self, owner: bool) -> None:
        """Wipes the key material and marks the engine disposed.

        Private material is always wiped. The public modulus and exponent are only wiped when the owner closes the
        engine; finalization leaves them to a later close or to their buffers being collected.
        """
        # Clearing an already cleared field is a no-op.
        self._clear_key(owner)
        if not self._disposed:
            logger.debug("Disposed RSA engine (owner: %s).", owner)
        self._disposed = True

    def close(self) -> None:
        """Disposes of the engine, zeroizing all key material. Safe to call more than once.

        Every later operation raises `KeyDisposedError`. Owners should always close (or use the engine as a context
        manager); relying on garbage collection leaves the public parameters to the collector and warns.
        """
        self._dispose(owner=True)
