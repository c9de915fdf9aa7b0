"""
Pytest configuration for the acslasmc test suite.

    python -m pytest                   # everything; C-compile tests skip
                                       # themselves when no compiler exists
    python -m pytest -m "not cc"       # translator-only tests
    python -m pytest --cc clang        # build generated C with clang

The host C compiler is taken from --cc, then $CC, then the first of
cc / gcc / clang found on PATH.
"""

import os
import shutil

import pytest


def pytest_addoption(parser):
    parser.addoption("--cc", action="store", default=None,
                     help="C compiler used by tests marked 'cc'")


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers",
        "cc: tests that build and run generated C with a host compiler")


def _find_cc(config):
    for cand in (config.getoption("--cc"), os.environ.get("CC"),
                 "cc", "gcc", "clang"):
        if cand and shutil.which(cand):
            return shutil.which(cand)
    return None


@pytest.fixture(scope="session")
def cc_path(pytestconfig):
    """Absolute path of the host C compiler, or skip."""
    path = _find_cc(pytestconfig)
    if path is None:
        pytest.skip("no C compiler on PATH (set $CC or pass --cc)")
    return path
