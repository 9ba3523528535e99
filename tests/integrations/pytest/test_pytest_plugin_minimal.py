from collections.abc import Callable
from typing import Any

from bindwire import Container

pytest_plugins = ["bindwire.integrations.pytest_plugin"]


class _Service:
    pass


def test_container_fixture_is_available(bindwire_container: Container) -> None:
    assert isinstance(bindwire_container, Container)
    assert bindwire_container.make(Container) is bindwire_container


def test_resolve_fixture_uses_container(
    bindwire_container: Container,
    bindwire_resolve: Callable[..., Any],
) -> None:
    bindwire_container.singleton(_Service)

    assert bindwire_resolve(_Service) is bindwire_container.make(_Service)


def test_each_test_gets_a_fresh_container(bindwire_container: Container) -> None:
    assert not bindwire_container.bound(_Service)
