# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.error import PyAsn1Error
from pyasn1_modules import rfc8017
import pytest

import rsaengine
from rsaengine.secureint import bytes_to_integer

TARGET_SIZES = [1024, 2048]
known_keys = {size: rsa.generate_private_key(public_exponent=65537, key_size=size) for size in TARGET_SIZES}


@pytest.fixture(scope="module", params=TARGET_SIZES)
def keyset(request) -> rsa.RSAPrivateKey:
    return known_keys[request.param]


def private_der(key: rsa.RSAPrivateKey) -> bytes:
    return key.private_bytes(serialization.Encoding.DER, serialization.PrivateFormat.TraditionalOpenSSL,
                             serialization.NoEncryption())


def public_der(key: rsa.RSAPrivateKey) -> bytes:
    return key.public_key().public_bytes(serialization.Encoding.DER, serialization.PublicFormat.PKCS1)


def test_private_import(keyset):
    privs = keyset.private_numbers()
    with rsaengine.RSAEngine() as engine:
        rsaengine.import_pkcs1(engine, private_der(keyset), private=True)
        params = engine.export_parameters(True)
        assert engine.crt_possible
    assert bytes_to_integer(params.modulus) == privs.public_numbers.n
    assert bytes_to_integer(params.exponent) == privs.public_numbers.e
    assert bytes_to_integer(params.d) == privs.d
    assert bytes_to_integer(params.p) == privs.p
    assert bytes_to_integer(params.q) == privs.q
    assert bytes_to_integer(params.dp) == privs.dmp1
    assert bytes_to_integer(params.dq) == privs.dmq1
    assert bytes_to_integer(params.inverse_q) == privs.iqmp


def test_public_import(keyset):
    pubs = keyset.public_key().public_numbers()
    with rsaengine.RSAEngine() as engine:
        rsaengine.import_pkcs1(engine, public_der(keyset))
        params = engine.export_parameters()
        assert engine.public_only
    assert bytes_to_integer(params.modulus) == pubs.n
    assert bytes_to_integer(params.exponent) == pubs.e


def test_private_export(keyset):
    with rsaengine.RSAEngine() as engine:
        rsaengine.import_pkcs1(engine, private_der(keyset), private=True)
        assert rsaengine.export_pkcs1(engine, include_private=True) == private_der(keyset)


def test_public_export(keyset):
    with rsaengine.RSAEngine() as engine:
        rsaengine.import_pkcs1(engine, private_der(keyset), private=True)
        assert rsaengine.export_pkcs1(engine) == public_der(keyset)


def test_generated_key_loads_elsewhere():
    with rsaengine.RSAEngine(1024) as engine:
        der = rsaengine.export_pkcs1(engine, include_private=True)
        params = engine.export_parameters(True)
    loaded = serialization.load_der_private_key(der, None)
    assert loaded.private_numbers().d == bytes_to_integer(params.d)
    assert loaded.private_numbers().public_numbers.e == 17


def test_private_export_noncrt():
    privs = known_keys[1024].private_numbers()
    params = rsaengine.RSAParameters(modulus=bytearray(privs.public_numbers.n.to_bytes(128, "big")),
                                     exponent=bytearray(b"\x01\x00\x01"),
                                     d=bytearray(privs.d.to_bytes(128, "big")))
    with rsaengine.RSAEngine() as engine:
        engine.import_parameters(params)
        with pytest.raises(rsaengine.MissingParameterError):
            rsaengine.export_pkcs1(engine, include_private=True)


def test_multiprime_rejected():
    keydata, _ = decoder.decode(private_der(known_keys[1024]), asn1Spec=rfc8017.RSAPrivateKey())
    keydata["version"] = 1
    with rsaengine.RSAEngine() as engine:
        with pytest.raises(ValueError, match="Multi-prime"):
            rsaengine.import_pkcs1(engine, encoder.encode(keydata), private=True)
        assert not engine.key_generated


def test_import_garbage():
    with rsaengine.RSAEngine() as engine:
        with pytest.raises(PyAsn1Error):
            rsaengine.import_pkcs1(engine, b"\x30\x03\x02\x01", private=True)
