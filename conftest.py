"""
Pytest configuration for the carguino test suite.

``--full`` also runs the integration tests, which drive fake toolchains
through real subprocesses. Every test runs without the variables carguino
reads from its environment.
"""

import pytest

CARGUINO_ENV_VARS = (
    "ARDUINO_HOME",
    "CARGUINO_CONFIG",
    "OUT_DIR",
    "RUSTFLAGS",
    "RUSTDOCFLAGS",
    "RUST_TARGET_PATH",
)


def pytest_addoption(parser):
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Also run integration tests against fake toolchains",
    )


def pytest_configure(config):
    if config.getoption("--full") and config.getoption("-m", "") == "not integration":
        config.option.markexpr = ""


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Hide the caller's build environment from tests."""
    for name in CARGUINO_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
