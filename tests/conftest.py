"""Shared pytest fixtures for bindwire tests."""

import pytest

from bindwire.container import Container
from bindwire.lock_mode import LockMode


@pytest.fixture()
def container() -> Container:
    """Default container with autowiring enabled."""
    return Container()


@pytest.fixture()
def container_no_autowire() -> Container:
    """Container with autowire=False."""
    return Container(autowire=False)


@pytest.fixture()
def container_unlocked() -> Container:
    """Container without any locking."""
    return Container(lock_mode=LockMode.NONE)
