"""Exceptions raised by the RSA key engine.

Both derive from builtins so callers catching `RuntimeError`/`ValueError` keep working.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class KeyDisposedError(RuntimeError):
    """An operation was invoked on an engine whose key material has been disposed."""


class MissingParameterError(ValueError):
    """A mandatory key parameter is absent (exponent, modulus or private key material)."""
