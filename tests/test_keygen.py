# pylint: disable=protected-access,missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from cryptography.hazmat.primitives.asymmetric import rsa
import pytest
import sympy

from rsaengine import keygen

SMALL_PRIMES = list(sympy.primerange(0, 10001))
reference_primes = {}
for target in (1024, 2048):
    numbers = rsa.generate_private_key(public_exponent=65537, key_size=target).private_numbers()
    reference_primes[target] = (numbers.p, numbers.q)

base_primetest_cases = [
    # Edge Cases (neither)
    (0, False),
    (1, False),
    # Known Primes
    (2, True),
    (3, True),
    (101, True),
    (3571, True),
    (9973, True),
    # Composite
    (4, False),
    (6, False),
    (9, False),
    # Carmichael numbers and other Fermat pseudoprimes
    (341, False),
    (561, False),
    (1105, False),
    (2047, False),
    (52633, False),
]

large_primetest_cases = [
    (reference_primes[1024][0], True),
    (reference_primes[1024][1], True),
    (reference_primes[2048][0], True),
    (reference_primes[2048][1], True),
    (reference_primes[1024][0] * 3, False),
    (reference_primes[2048][1] * 3, False),
]

rsa_composites = [
    (reference_primes[1024][0] * reference_primes[1024][1], False),
    (reference_primes[2048][0] * reference_primes[2048][1], False),
    (reference_primes[1024][0] ** 2, False),
    (reference_primes[2048][1] * reference_primes[1024][0], False),
]

test_sizes = [
    2,
    16,
    192,
    512,
    1024,
    pytest.param(2048, marks=pytest.mark.slow),
    pytest.param(4096, marks=pytest.mark.extreme),
]


def id_generator(param):
    if isinstance(param, int) and param > 1000000:
        return f"LargeInt-{param.bit_length()}bits"
    return str(param)


@pytest.mark.parametrize("n", [0, 1, 2, 20, 50, 1000, 5000, 10000])
def test_sieve_sane(n):
    assert keygen._sieve(n) == [p for p in SMALL_PRIMES if p <= n]


@pytest.mark.parametrize("n,expected", [(10**5, 9592), pytest.param(10**6, 78498, marks=pytest.mark.slow)])
def test_sieve_large_approx(n, expected):
    assert len(keygen._sieve(n)) == expected


@pytest.mark.parametrize("n", [-27358709381728, -10, -1])
def test_get_pre_primes_errors(n):
    with pytest.raises(ValueError):
        keygen.get_pre_primes(n)


def test_get_pre_primes_caches(mocker):
    mocked_primes = [2, 3, 5, 7, 11]
    mocker.patch("rsaengine.keygen._sieve", return_value=mocked_primes)
    mocker.patch("rsaengine.keygen._SMALL_PRIMES", [])
    mocker.patch("rsaengine.keygen._SMALL_PRIMES_CAP", 0)

    rs = keygen.get_pre_primes(50)
    keygen._sieve.assert_called_once_with(50)
    assert rs == mocked_primes


def test_get_pre_primes_cache_hit(mocker):
    mocked_primes = [2, 3, 5, 7, 11]
    mocker.patch("rsaengine.keygen._sieve")
    mocker.patch("rsaengine.keygen._SMALL_PRIMES", mocked_primes)
    mocker.patch("rsaengine.keygen._SMALL_PRIMES_CAP", 50)

    assert keygen.get_pre_primes(25) == mocked_primes
    assert keygen.get_pre_primes(50) == mocked_primes
    keygen._sieve.assert_not_called()


def test_get_pre_primes_cache_miss(mocker):
    greater_mocked_primes = [2, 3, 5, 7, 11, 13, 17, 19, 23]
    mocker.patch("rsaengine.keygen._sieve", return_value=greater_mocked_primes)
    mocker.patch("rsaengine.keygen._SMALL_PRIMES", [2, 3, 5, 7, 11])
    mocker.patch("rsaengine.keygen._SMALL_PRIMES_CAP", 50)

    rs = keygen.get_pre_primes(75)
    keygen._sieve.assert_called_once_with(75)
    assert rs == greater_mocked_primes


def test_get_pre_primes_cache_forced(mocker):
    mocked_primes = [2, 3, 5, 7, 11]
    mocker.patch("rsaengine.keygen._sieve", return_value=mocked_primes)
    mocker.patch("rsaengine.keygen._SMALL_PRIMES", [2, 3, 5, 7, 11, 13, 17, 19, 23])
    mocker.patch("rsaengine.keygen._SMALL_PRIMES_CAP", 75)

    rs = keygen.get_pre_primes(50, change=True)
    keygen._sieve.assert_called_with(50)
    assert rs == mocked_primes


@pytest.mark.parametrize("num,expected", base_primetest_cases + large_primetest_cases, ids=id_generator)
def test_trial_division(num, expected):
    assert keygen._trial_division(num) == expected


@pytest.mark.parametrize("n,expected", base_primetest_cases + large_primetest_cases + rsa_composites, ids=id_generator)
def test_miller_rabin(n, expected):
    assert keygen._miller_rabin(n, 10) == expected


@pytest.mark.parametrize("n,expected", base_primetest_cases + large_primetest_cases + rsa_composites, ids=id_generator)
def test_check_prime(n, expected):
    assert keygen.check_prime(n) == expected


@pytest.mark.parametrize("bits,rounds", [(16, 40), (512, 40), (513, 56), (1024, 56), (1536, 64), (2048, 70),
                                         (3072, 74)])
def test_check_prime_rounds(mocker, bits, rounds):
    candidate = (1 << (bits - 1)) | 1
    mocker.patch("rsaengine.keygen._trial_division", return_value=True)
    mr = mocker.patch("rsaengine.keygen._miller_rabin", return_value=True)
    assert keygen.check_prime(candidate)
    mr.assert_called_once_with(candidate, rounds)


@pytest.mark.parametrize("size", test_sizes)
def test_generate_pseudoprime(size):
    p = keygen.generate_pseudoprime(size)
    assert p.bit_length() == size
    assert sympy.isprime(p)


@pytest.mark.parametrize("size", [-5, 0, 1])
def test_generate_pseudoprime_validates(size):
    with pytest.raises(ValueError):
        keygen.generate_pseudoprime(size)


def test_generate_pseudoprime_forces_shape(mocker):
    mocker.patch("secrets.randbits", return_value=0)
    mocker.patch("rsaengine.keygen.check_prime", return_value=True)
    assert keygen.generate_pseudoprime(64) == (1 << 63) | 1


def test_generate_pseudoprime_faulty(mocker):
    mocker.patch("rsaengine.keygen.check_prime", return_value=False)
    with pytest.raises(RuntimeError):
        keygen.generate_pseudoprime(256)


@pytest.mark.parametrize("size", [1, 8, 384, 1024])
def test_generate_random_bounds(size):
    for _ in range(50):
        assert 0 <= keygen.generate_random(size) < 2**size


def test_generate_random_validates():
    with pytest.raises(ValueError):
        keygen.generate_random(0)
