"""Prime and random number generation backing the RSA key engine.

Provides probabilistic primes roughly based on FIPS 186-5 (trial division against a cached table of small primes,
followed by Miller-Rabin) and cryptographically secure random integers. Coprimality with the public exponent and the
modulus length are enforced by the caller, which is free to redraw.

Typical usage example:

    get_pre_primes(12000)
    p = generate_pseudoprime(512)
    r = generate_random(1024)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import math
import secrets

# Small primes used for trial division, and the bound they were sieved up to.
_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0

# (largest candidate bit length, Miller-Rabin rounds) after FIPS 186-5 Appendix C.1.
_MR_ROUNDS = ((512, 40), (1024, 56), (1536, 64), (2048, 70))
_MR_ROUNDS_MAX = 74


def _sieve(n: int = 10000) -> list[int]:
    """Sieve of Eratosthenes over the odd numbers.

    Args:
        n: Inclusive upper bound. Defaults to 10000.

    Returns:
        All primes up to `n` in ascending order.
    """
    if n < 2:
        return []
    # odd[i] stands for 2i + 1. Multiples of r are struck from r * r onwards.
    odd = bytearray([1]) * ((n + 1) // 2)
    odd[0] = 0
    for i in range(1, (math.isqrt(n) - 1) // 2 + 1):
        if odd[i]:
            r = 2 * i + 1
            start = r * r // 2
            odd[start::r] = bytes(len(range(start, len(odd), r)))
    return [2] + [2 * i + 1 for i, flag in enumerate(odd) if flag]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Returns the small-prime table, sieving it first when needed.

    The table is kept at module level. It is rebuilt when `n` exceeds the bound it was built for, when it is empty,
    or when `change` asks for it (which also allows shrinking it).

    Args:
        n: Inclusive upper bound of the primes needed. Defaults to 10000.
        change: Rebuild the table for exactly `n`. Defaults to False.

    Returns:
        The cached primes in ascending order, covering at least `n` unless `change` shrank the table.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """False if `no` is below 2 or has a proper divisor among the small primes up to `n`."""
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime * prime > no:
            break
        if not no % prime:
            return False
    return True


def _miller_rabin(w: int, iters: int) -> bool:
    """Miller-Rabin with `iters` random bases in [2, w - 2].

    Args:
        w: The integer to test.
        iters: Number of rounds.

    Returns:
        False if a witness to compositeness was found, True if `w` is probably prime.
    """
    if w <= 3:
        return w in (2, 3)
    # w - 1 = 2**s * d with d odd.
    s = ((w - 1) & (1 - w)).bit_length() - 1
    d = (w - 1) >> s
    for _ in range(iters):
        x = pow(secrets.randbelow(w - 3) + 2, d, w)
        if x in (1, w - 1):
            continue
        for _ in range(s - 1):
            x = x * x % w
            if x == w - 1:
                break
        else:
            return False
    return True


def check_prime(candidate: int, iters: None | int = None, n: int = 10000) -> bool:
    """Probable-prime test: trial division by the primes up to `n`, then Miller-Rabin.

    Args:
        candidate: The number to test.
        iters: Miller-Rabin rounds. Chosen from the candidate's bit length when omitted.
        n: Bound of the trial division primes. Defaults to 10000.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if not _trial_division(candidate, n):
        return False
    if iters is None:
        bits = candidate.bit_length()
        iters = next((rounds for cap, rounds in _MR_ROUNDS if bits <= cap), _MR_ROUNDS_MAX)
    return _miller_rabin(candidate, iters)


def generate_pseudoprime(size: int) -> int:
    """Generate a probable prime of exactly `size` bits.

    Candidates are odd with the top bit set, so the result always has the requested bit length. Nothing is assumed
    about the public exponent; the caller rejects unsuitable primes.

    Args:
        size: The size of the prime to generate in bits. Must be at least 2.

    Returns:
        A probable prime number.

    Raises:
        ValueError: If `size` is below 2.
        RuntimeError: If generation loops way beyond a reasonable time and a bit.
    """
    if size < 2:
        raise ValueError("Prime size must be at least 2 bits.")
    rep_cap = size * 20
    msk = (1 << (size - 1)) | 1
    for _ in range(rep_cap):
        candidate = secrets.randbits(size) | msk
        if check_prime(candidate):
            return candidate
    raise RuntimeError(
        f"Run an improbable {rep_cap} amount of loops with no prime found. Check system random number generator.")


def generate_random(size: int) -> int:
    """Generate a cryptographically secure random integer of at most `size` bits."""
    if size < 1:
        raise ValueError("Random size must be at least 1 bit.")
    return secrets.randbits(size)
