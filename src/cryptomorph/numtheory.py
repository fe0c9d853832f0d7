"""Number theory primitives underpinning the RSA engine.

Everything here works on plain Python integers and has no state. Modular exponentiation is implemented by hand
(square-and-multiply) so that the rest of the package routes every exponentiation through a single audited place.

Typical usage example:

    mod_exp(4, 13, 497)
    g, x, y = extended_gcd(240, 46)
    d = mod_inverse(65537, phi)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from cryptomorph.errors import InvalidModulusError


def mod_exp(base: int, exponent: int, modulus: int) -> int:
    """Computes `base**exponent % modulus` using square-and-multiply.

    Walks the exponent from the least significant bit upwards, multiplying the accumulator by the running square
    whenever the bit is set. The base is reduced first, so intermediates never exceed `modulus**2`.

    Args:
        base: The base. Negative values are reduced into range first.
        exponent: The exponent. Must be >= 0.
        modulus: The modulus. Must be > 0.

    Returns:
        The result in range [0, modulus).

    Raises:
        InvalidModulusError: If the modulus is not positive.
        ValueError: If the exponent is negative.
    """
    if modulus <= 0:
        raise InvalidModulusError("Modulus must be a positive integer.")
    if exponent < 0:
        raise ValueError("Exponent must be non-negative.")
    result = 1 % modulus
    base %= modulus
    while exponent:
        if exponent & 1:
            result = (result * base) % modulus
        exponent >>= 1
        base = (base * base) % modulus
    return result


def gcd(a: int, b: int) -> int:
    """Greatest common divisor via the iterative Euclidean algorithm. `gcd(a, 0) == a`."""
    a, b = abs(a), abs(b)
    while b:
        a, b = b, a % b
    return a


def extended_gcd(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such that a*s0 + b*t0 = r0 = gcd(a, b).

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        Greatest common divisor of two integers.
        As well as the Bezout coefficients, which may be negative.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return r0, s0, t0


def mod_inverse(a: int, m: int) -> int | None:
    """Computes the modular multiplicative inverse of `a` modulo `m`.

    Args:
        a: The number to invert.
        m: The modulus. Must be > 0.

    Returns:
        The unique r in [0, m) such that a*r = 1 (mod m), or None if `a` and `m` are not coprime.

    Raises:
        InvalidModulusError: If the modulus is not positive.
    """
    if m <= 0:
        raise InvalidModulusError("Modulus must be a positive integer.")
    g, x, _ = extended_gcd(a % m, m)
    if g != 1:
        return None
    return x % m


def lcm(a: int, b: int) -> int:
    """Least common multiple, `a*b // gcd(a, b)`.

    Raises:
        ZeroDivisionError: If both `a` and `b` are zero.
    """
    g = gcd(a, b)
    if g == 0:
        raise ZeroDivisionError("lcm(0, 0) is undefined.")
    return abs(a * b) // g


def is_coprime(a: int, b: int) -> bool:
    return gcd(a, b) == 1


def totient(n: int) -> int:
    """Euler's totient function via trial division.

    Only practical for numbers with small factors. RSA itself never calls this on a modulus, the key generator
    works from the known primes instead.

    Args:
        n: A positive integer.

    Returns:
        The count of integers in [1, n] coprime to `n`.

    Raises:
        ValueError: If `n` is not positive.
    """
    if n < 1:
        raise ValueError("Totient is only defined for positive integers.")
    result = n
    rem = n
    p = 2
    while p * p <= rem:
        if rem % p == 0:
            result -= result // p
            while rem % p == 0:
                rem //= p
        p += 1 if p == 2 else 2
    if rem > 1:
        result -= result // rem
    return result
