"""The RSA public-key primitive as a self-contained key engine.

Provides key-pair generation, the raw ("textbook") encryption and decryption primitives with CRT acceleration and
exponent blinding, parameter import/export, the `<RSAKeyValue>` XML encoding and PKCS#1 DER interchange. Key material is
kept in wipeable buffers and zeroized when the engine is closed. Padding is the caller's responsibility.

Typical usage example:

    with RSAEngine(2048) as engine:
        c = engine.encrypt_value(b"\\x2a")
        m = engine.decrypt_value(c)
        xml = engine.to_xml_string()
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsaengine.engine import RSAEngine
from rsaengine.errors import KeyDisposedError
from rsaengine.errors import MissingParameterError
from rsaengine.keygen import check_prime
from rsaengine.keygen import generate_pseudoprime
from rsaengine.keygen import generate_random
from rsaengine.parameters import DEFAULT_KEY_SIZE
from rsaengine.parameters import KeySizes
from rsaengine.parameters import LEGAL_KEY_SIZES
from rsaengine.parameters import RSAParameters
from rsaengine.pkcs1 import export_pkcs1
from rsaengine.pkcs1 import import_pkcs1
from rsaengine.provider import AsymmetricKeyEngine
from rsaengine.secureint import SecureInt

__version__ = "0.1.0"
__all__ = [
    "RSAEngine",
    "AsymmetricKeyEngine",
    "RSAParameters",
    "KeySizes",
    "LEGAL_KEY_SIZES",
    "DEFAULT_KEY_SIZE",
    "KeyDisposedError",
    "MissingParameterError",
    "SecureInt",
    "check_prime",
    "generate_pseudoprime",
    "generate_random",
    "export_pkcs1",
    "import_pkcs1",
]
