from collections.abc import Callable
from typing import Any

import pytest

from bindwire import Container

pytest_plugins = ["bindwire.integrations.pytest_plugin"]


class _Service:
    pass


class _FakeService(_Service):
    pass


@pytest.fixture()
def bindwire_container() -> Container:
    container = Container()
    container.bind(_Service, _FakeService)
    return container


def test_overridden_container_is_used_for_resolution(
    bindwire_resolve: Callable[..., Any],
) -> None:
    assert isinstance(bindwire_resolve(_Service), _FakeService)
