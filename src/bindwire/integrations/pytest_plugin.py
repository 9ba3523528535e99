from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from bindwire.container import Container


@pytest.fixture()
def bindwire_container() -> Iterator[Container]:
    """Provide an isolated container that is flushed when the test ends.

    Override this fixture in a test suite to start every test from a
    pre-configured container.

    """
    container = Container()
    yield container
    container.flush()


@pytest.fixture()
def bindwire_resolve(bindwire_container: Container) -> Callable[..., Any]:
    """Return ``bindwire_container.make`` for terse resolution inside tests."""
    return bindwire_container.make
