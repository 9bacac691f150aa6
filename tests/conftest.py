"""Shared fakes for the provisioning tests."""
import logging

import pytest

from devsetup.packages import PackageManager
from devsetup.utils import LOGGER_NAME


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float) -> None:
        self.now += seconds


class FakePackageManager(PackageManager):
    """In-memory package manager; packages in ``broken`` fail to install."""

    name = "fake"
    command = "fake-pm"

    def __init__(self, installed=(), broken=()):
        self.installed = set(installed)
        self.broken = set(broken)
        self.install_calls = []
        self.update_calls = 0

    def available(self) -> bool:
        return True

    def is_installed(self, package: str) -> bool:
        return package in self.installed

    def install_args(self, package):
        return ("fake-pm", "install", package)

    def update_args(self):
        return ("fake-pm", "refresh")

    def install(self, package: str) -> bool:
        self.install_calls.append(package)
        if package in self.broken:
            return False
        self.installed.add(package)
        return True

    def update(self) -> bool:
        self.update_calls += 1
        return True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_manager():
    return FakePackageManager()


@pytest.fixture
def manager_factory():
    return FakePackageManager


@pytest.fixture(autouse=True)
def reset_logger():
    """Undo any handlers installed by setup_logging."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
