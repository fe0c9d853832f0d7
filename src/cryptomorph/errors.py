"""Typed failures raised across Cryptomorph.

Builtin exceptions are reused wherever they already say what went wrong (`OSError` for files, `ValueError` for
out-of-range representatives). The classes below narrow them for the cases callers are expected to tell apart.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class InvalidModulusError(ArithmeticError):
    """Raised when a modular operation is asked to work modulo zero (or a negative number)."""


class KeyGenerationError(RuntimeError):
    """Raised when key generation cannot produce a key that satisfies the RSA invariants."""


class MalformedInputError(ValueError):
    """Raised when an envelope, key or encoded argument cannot be parsed."""
