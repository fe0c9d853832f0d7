"""Core Key Generation Utility, mainly focusing on the generation of random large primes.

This module is responsible for generating RSA key pairs from probable primes. Primality is decided by a Miller-Rabin
test, preceded by trial division against a cached list of small primes to throw out most candidates cheaply.

Every function that needs randomness takes an `rng` argument: any object with the `random.Random` interface. It
defaults to the operating system CSPRNG, tests substitute a seeded `random.Random` to make runs reproducible.

Typical usage example:

    get_pre_primes(12000)
    is_probably_prime(32416190071, 10)
    p, q = generate_primes(2048)
    (n, e), (_, d) = generate_key_pair(2048)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import random
import secrets
from typing import Literal, overload
import warnings

from cryptomorph.errors import KeyGenerationError
from cryptomorph.numtheory import gcd
from cryptomorph.numtheory import is_coprime
from cryptomorph.numtheory import mod_exp
from cryptomorph.numtheory import mod_inverse

DEFAULT_EXPONENT: int = 65537
MINIMUM_KEY_SIZE: int = 16
RECOMMENDED_KEY_SIZE: int = 2048
MINIMUM_ROUNDS: int = 10

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0
_MINIMUM_PRIME_SEPARATION: int = 100
_SYSTEM_RANDOM = secrets.SystemRandom()

logger = logging.getLogger(__name__)


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    result = [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]
    return result


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    Uses the module-level `_SMALL_PRIMES` list as a cache. Regeneration occurs if the requested range is greater,
    forced by `change` or the cache is empty.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
            Ignored if smaller or equal than `_SMALL_PRIMES_CAP`, `change` is False and `_SMALL_PRIMES` is non-empty.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order. All primes at least to `n` or more unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        logger.debug("Sieving small primes up to %d", n)
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check the provided `no` against the known small primes.

    Runs a fast pre-check before Miller-Rabin by using modulo division on our known frequent primes.

    Args:
         no: The number to check. Must be integer and non-negative.
         n: The number up to which to generate primes. Defaults to 10000.
           Passed to `get_pre_primes()`, without the `change` argument.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime**2 > no:
            return True
        if no % prime == 0:
            return False
    return True


def is_probably_prime(n: int, rounds: int, rng: random.Random | None = None) -> bool:
    """Perform the Miller-Rabin primality test.

    Writes n - 1 as 2**r * d with d odd, then runs `rounds` independent witness rounds. A single failed round proves
    `n` composite. A prime always passes, a composite passes all rounds with probability at most 4**-rounds.

    Args:
        n: Integer to be tested.
        rounds: Number of Miller-Rabin witness rounds to perform. Must be >= 1.
        rng: Source of witnesses. Defaults to the system CSPRNG.

    Returns:
        True if `n` is probably prime, False if it is definitely composite.

    Raises:
        ValueError: If `rounds` is smaller than 1.
    """
    if rounds < 1:
        raise ValueError("At least one Miller-Rabin round is required.")
    if n <= 3:
        return n in (2, 3)
    if n % 2 == 0:
        return False
    rng = rng or _SYSTEM_RANDOM
    tw = n - 1
    r = (tw & -tw).bit_length() - 1
    d = tw >> r
    for _ in range(rounds):
        a = rng.randrange(2, n - 1)
        x = mod_exp(a, d, n)
        if x == 1 or x == tw:
            continue
        for _ in range(r - 1):
            x = mod_exp(x, 2, n)
            if x == tw:
                break
            if x == 1:
                return False
        else:
            return False
    return True


def check_prime(candidate: int, rounds: int | None = None, n: int = 10000, rng: random.Random | None = None) -> bool:
    """Performs a composite Primality test, using a limited amount of trial divisions, before a Miller-Rabin test.

    In interest of providing a result expediently we run a trial division with all primes up to `n`, before proceeding
    with the Miller-Rabin primality test.

    Args:
        candidate: The candidate prime to test.
        rounds: Number of Miller-Rabin rounds to perform. Values below `MINIMUM_ROUNDS` are raised to it.
            If not provided will use defaults as per the FIPS 186-5 Appendix C.1
        n: The number up to which to generate primes. Defaults to 10000.
            Passed to `_trial_division()`.
        rng: Source of witnesses. Defaults to the system CSPRNG.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2:
        return False
    if not _trial_division(candidate, n):
        return False
    if rounds is None:
        if candidate.bit_length() <= 512:
            rounds = 40
        elif candidate.bit_length() <= 1024:
            rounds = 56
        elif candidate.bit_length() <= 1536:
            rounds = 64
        elif candidate.bit_length() <= 2048:
            rounds = 70
        else:
            rounds = 74
    return is_probably_prime(candidate, max(rounds, MINIMUM_ROUNDS), rng)


def _generate_probable_prime(size: int,
                             pub: int = DEFAULT_EXPONENT,
                             prm_p: int | None = None,
                             rounds: int | None = None,
                             rng: random.Random | None = None) -> int:
    """Generate a probable prime number of the specified bit size.

    Draws random odd candidates with the two top bits set, so the product of two such primes always has exactly
    twice their size. Used for both p and q.

    Args:
        size: The size of the prime to generate in bits. Must be >= 2.
        pub: The public exponent the prime has to suit. `gcd(prime - 1, pub)` will be 1.
        prm_p: The other prime in the pair if this is the second generation. Adds the FIPS 186-5 separation test.
            Optional, if not provided generates 1st prime.
        rounds: Number of Miller-Rabin rounds, passed to `check_prime()`.
        rng: Source of candidates and witnesses. Defaults to the system CSPRNG.

    Returns:
        A probable prime number.

    Raises:
        KeyGenerationError: If generation loops way beyond a reasonable time and a bit.
    """
    rng = rng or _SYSTEM_RANDOM
    rep_cap = max(size * 5, 100)
    msk = (1 << size - 1) | (1 << size - 2) | 1
    for attempt in range(rep_cap):
        byts = rng.getrandbits(size) | msk
        # Separation only applies once primes are large enough for it to be meaningful.
        if (prm_p is not None and size > _MINIMUM_PRIME_SEPARATION
                and abs(prm_p - byts) <= (1 << (size - _MINIMUM_PRIME_SEPARATION))):
            continue
        if byts == prm_p:
            continue
        if gcd(byts - 1, pub) == 1 and check_prime(byts, rounds, rng=rng):
            logger.debug("Found %d-bit probable prime after %d candidates", size, attempt + 1)
            return byts
    raise KeyGenerationError(
        f"Run an improbable {rep_cap} amount of loops with no prime found. Check system random number generator.")


def generate_primes(size: int,
                    pub: int = DEFAULT_EXPONENT,
                    rounds: int | None = None,
                    rng: random.Random | None = None) -> tuple[int, int]:
    """Generates an RSA-suitable pair of distinct prime numbers.

    Args:
        size: The key size to generate the prime pair for. Must be even and at least `MINIMUM_KEY_SIZE`.
        pub: The public exponent. Defaults (and recommended) to use 65537. Has to be odd and greater than 1.
        rounds: Number of Miller-Rabin rounds per candidate, passed to `check_prime()`.
        rng: Source of candidates and witnesses. Defaults to the system CSPRNG.

    Returns:
        A pair of distinct probable primes of `size // 2` bits each.

    Raises:
        ValueError: If `size` or `pub` does not meet requirements.
        KeyGenerationError: If the prime search gives up.
    """
    if size < MINIMUM_KEY_SIZE:
        raise ValueError(f"Size must be at least {MINIMUM_KEY_SIZE}.")
    if size % 2 != 0:
        raise ValueError("Size must be an even number.")
    if pub % 2 == 0 or pub <= 1:
        raise ValueError("Public exponent does not meet requirements.")
    p = _generate_probable_prime(size // 2, pub, rounds=rounds, rng=rng)
    q = _generate_probable_prime(size // 2, pub, p, rounds=rounds, rng=rng)
    while p == q:  # (Un)Likely story.
        q = _generate_probable_prime(size // 2, pub, p, rounds=rounds, rng=rng)
    return p, q


@overload
def generate_key_pair(size: int,
                      pub: int = DEFAULT_EXPONENT,
                      expose_primes: Literal[False] = False,
                      rounds: int | None = None,
                      rng: random.Random | None = None) -> tuple[tuple[int, int], tuple[int, int]]:
    ...


@overload
def generate_key_pair(size: int,
                      pub: int = DEFAULT_EXPONENT,
                      expose_primes: Literal[True] = False,
                      rounds: int | None = None,
                      rng: random.Random | None = None) -> tuple[tuple[int, int], tuple[int, int, int, int]]:
    ...


def generate_key_pair(
    size: int,
    pub: int = DEFAULT_EXPONENT,
    expose_primes: bool = False,
    rounds: int | None = None,
    rng: random.Random | None = None,
) -> tuple[tuple[int, int], tuple[int, int]] | tuple[tuple[int, int], tuple[int, int, int, int]]:
    """Generates an RSA key pair.

    Fully generates a valid RSA Key: n = p*q, and d as the inverse of the public exponent modulo (p-1)(q-1).
    Both invariants are checked rather than assumed.

    Args:
        size: The key size to generate the prime pair for. Must be even.
        pub: The public exponent. Defaults (and recommended) to use 65537.
        expose_primes: Whether to export the prime numbers as well or not. Defaults to False.
            Provides some acceleration for decryption if used correctly.
        rounds: Number of Miller-Rabin rounds per candidate.
        rng: Source of candidates and witnesses. Defaults to the system CSPRNG.

    Returns:
        A tuple of tuples of (public, private) sub-tuples (modulus, exponent) or if exposed for the private
        (modulus, exponent, p, q)

    Raises:
        KeyGenerationError: If the exponent is not invertible modulo the totient.
    """
    if size < RECOMMENDED_KEY_SIZE:
        warnings.warn(f"{size}-bit keys are only suitable for testing.", RuntimeWarning, stacklevel=2)
    p, q = generate_primes(size, pub, rounds, rng)
    n = p * q
    totient = (p - 1) * (q - 1)
    if not is_coprime(pub, totient):
        raise KeyGenerationError("Public exponent is not coprime to the totient.")
    d = mod_inverse(pub, totient)
    if d is None:
        raise KeyGenerationError("Public exponent has no inverse modulo the totient.")
    logger.debug("Generated %d-bit key pair", n.bit_length())
    if not expose_primes:
        del p, q
        return (n, pub), (n, d)
    return (n, pub), (n, d, p, q)
