"""Configures pytest further."""
import pytest

SPEED_MARKERS = {
    "slow": ("--skip-slow", True, "Slow test: needs no --skip-slow option"),
    "extreme": ("--run-extreme", False, "Extreme test: needs --run-extreme option"),
}


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests (large key sizes)")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extremely slow key size tests")


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: slower key generation tests, skipped with --skip-slow")
    config.addinivalue_line("markers", "extreme: very large key tests, only run with --run-extreme")


def pytest_collection_modifyitems(config, items):
    skipdict = {}
    for marker, (option, skip_when_set, reason) in SPEED_MARKERS.items():
        if config.getoption(option) == skip_when_set:
            skipdict[marker] = pytest.mark.skip(reason=reason)
    if not skipdict:
        return
    for item in items:
        for k, v in skipdict.items():
            if k in item.keywords:
                item.add_marker(v)
