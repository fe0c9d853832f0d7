"""Configures pytest further, and provides the shared key material."""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import random

from cryptography.hazmat.primitives.asymmetric import rsa
import pytest

REFERENCE_SIZES = [1024, 2048]
_reference_keys: dict[int, rsa.RSAPrivateKey] = {}


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extreme value extremely slow tests")


def pytest_collection_modifyitems(config, items):
    skipdict = {}
    if config.getoption("--skip-slow"):
        skipdict["slow"] = pytest.mark.skip(reason="Slow test: needs no --skip-slow option")
    if not config.getoption("--run-extreme"):
        skipdict["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme option")
    if not skipdict:
        return
    for item in items:
        for k, v in skipdict.items():
            if k in item.keywords:
                item.add_marker(v)


def reference_key(size: int) -> rsa.RSAPrivateKey:
    """Independently generated RSA key, cached per size for the whole session."""
    if size not in _reference_keys:
        _reference_keys[size] = rsa.generate_private_key(public_exponent=65537, key_size=size)
    return _reference_keys[size]


@pytest.fixture(scope="session", params=REFERENCE_SIZES)
def reference(request) -> rsa.RSAPrivateKey:
    return reference_key(request.param)


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(20251019)
