"""RSA from first principles, and hybrid RSA/AES file encryption built on it.

Provides the number theory RSA rests on (modular exponentiation, extended Euclid, modular inverse, Miller-Rabin),
textbook RSA key generation, encryption, decryption, signing and verification, and a file workflow that wraps an
AES-256 key in RSA.

Typical usage example:

    pk = RSAPrivKey.generate(3072)
    c = pk.pub.encrypt(1234)
    r = pk.decrypt(c)
    hybrid.encrypt_file("notes.txt", "keys/rsa_public.key", "notes.enc")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from cryptomorph import hybrid
from cryptomorph import symmetric
from cryptomorph.errors import InvalidModulusError
from cryptomorph.errors import KeyGenerationError
from cryptomorph.errors import MalformedInputError
from cryptomorph.keygen import check_prime
from cryptomorph.keygen import generate_key_pair
from cryptomorph.keygen import generate_primes
from cryptomorph.keygen import get_pre_primes
from cryptomorph.keygen import is_probably_prime
from cryptomorph.numtheory import extended_gcd
from cryptomorph.numtheory import gcd
from cryptomorph.numtheory import is_coprime
from cryptomorph.numtheory import lcm
from cryptomorph.numtheory import mod_exp
from cryptomorph.numtheory import mod_inverse
from cryptomorph.numtheory import totient
from cryptomorph.rsa import export_key_pair
from cryptomorph.rsa import RSAPrivKey
from cryptomorph.rsa import RSAPubKey

__version__ = "0.1.0"
__all__ = [
    "RSAPrivKey",
    "RSAPubKey",
    "InvalidModulusError",
    "KeyGenerationError",
    "MalformedInputError",
    "check_prime",
    "export_key_pair",
    "extended_gcd",
    "gcd",
    "generate_key_pair",
    "generate_primes",
    "get_pre_primes",
    "hybrid",
    "is_coprime",
    "is_probably_prime",
    "lcm",
    "mod_exp",
    "mod_inverse",
    "symmetric",
    "totient",
]
