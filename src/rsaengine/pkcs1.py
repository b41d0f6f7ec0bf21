"""PKCS#1 (RFC 8017) DER interchange for the RSA key engine.

Encodes an engine's parameters as `RSAPublicKey` or `RSAPrivateKey` structures and imports them back, for
interoperability with other RSA tooling. Private keys need the full CRT parameter set, as the structure has no optional
fields for them.

Typical usage example:

    der = export_pkcs1(engine, include_private=True)
    import_pkcs1(other_engine, der, private=True)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.codec.native import encoder as localize
from pyasn1_modules import rfc8017

from rsaengine.engine import RSAEngine
from rsaengine.errors import MissingParameterError
from rsaengine.parameters import RSAParameters
from rsaengine.secureint import bytes_to_integer
from rsaengine.secureint import integer_to_bytes

# (RSAPrivateKey component, RSAParameters field)
_PRIVATE_COMPONENTS = (
    ("modulus", "modulus"),
    ("publicExponent", "exponent"),
    ("privateExponent", "d"),
    ("prime1", "p"),
    ("prime2", "q"),
    ("exponent1", "dp"),
    ("exponent2", "dq"),
    ("coefficient", "inverse_q"),
)


def export_pkcs1(engine: RSAEngine, include_private: bool = False) -> bytes:
    """Exports the engine's key as DER.

    Args:
        engine: The engine to export from. Generates its key if none exists yet.
        include_private: Whether to export `RSAPrivateKey` rather than `RSAPublicKey`.

    Returns:
        The DER encoding.

    Raises:
        MissingParameterError: If a private export is requested without the complete CRT parameter set.
    """
    params = engine.export_parameters(include_private)
    try:
        if not include_private:
            keydata = rfc8017.RSAPublicKey()
            keydata["modulus"] = bytes_to_integer(params.modulus)
            keydata["publicExponent"] = bytes_to_integer(params.exponent)
            return encoder.encode(keydata)
        if not params.has_crt():
            raise MissingParameterError("PKCS#1 private keys require the CRT parameters.")
        keydata = rfc8017.RSAPrivateKey()
        keydata["version"] = 0
        for component, field in _PRIVATE_COMPONENTS:
            keydata[component] = bytes_to_integer(getattr(params, field))
        return encoder.encode(keydata)
    finally:
        params.wipe()


def import_pkcs1(engine: RSAEngine, data: bytes, private: bool = False) -> None:
    """Imports a DER encoded key into the engine.

    Args:
        engine: The engine to import into.
        data: DER encoded `RSAPrivateKey` if `private`, `RSAPublicKey` otherwise.
        private: Which structure to expect.

    Raises:
        ValueError: If the key is a multi-prime key.
        pyasn1.error.PyAsn1Error: If the data does not decode as the expected structure.
    """
    if not private:
        keydata, _ = decoder.decode(data, asn1Spec=rfc8017.RSAPublicKey())
        pykeyd = localize.encode(keydata)
        engine.import_parameters(
            RSAParameters(modulus=bytearray(integer_to_bytes(pykeyd["modulus"])),
                          exponent=bytearray(integer_to_bytes(pykeyd["publicExponent"]))))
        return
    keydata, _ = decoder.decode(data, asn1Spec=rfc8017.RSAPrivateKey())
    if keydata["version"] != 0:
        raise ValueError("Multi-prime keys are not supported.")
    pykeyd = localize.encode(keydata)
    params = RSAParameters(**{
        field: bytearray(integer_to_bytes(pykeyd[component])) for component, field in _PRIVATE_COMPONENTS
    })
    try:
        engine.import_parameters(params)
    finally:
        params.wipe()
