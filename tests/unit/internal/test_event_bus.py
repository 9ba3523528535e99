from typing import Any

from bindwire._internal.events import LifecycleEventBus


class Base:
    pass


class Child(Base):
    pass


def test_before_resolving_matches_key_and_subclasses() -> None:
    bus = LifecycleEventBus()
    calls: list[tuple[str, Any]] = []
    bus.add_before_resolving(Base, lambda abstract, params, c: calls.append(("base", abstract)))
    bus.add_before_resolving("child", lambda abstract, params, c: calls.append(("name", abstract)))
    bus.add_before_resolving(None, lambda abstract, params, c: calls.append(("global", abstract)))

    bus.fire_before_resolving(Child, {}, None)
    bus.fire_before_resolving("child", {}, None)

    assert calls == [
        ("global", Child),
        ("base", Child),
        ("global", "child"),
        ("name", "child"),
    ]


def test_resolving_matches_key_or_instance() -> None:
    bus = LifecycleEventBus()
    calls: list[str] = []
    bus.add_resolving(Base, lambda obj, c: calls.append("base"))
    bus.add_resolving("service", lambda obj, c: calls.append("key"))
    bus.add_resolving(int, lambda obj, c: calls.append("int"))

    bus.fire_resolving("service", Child(), None)

    assert calls == ["base", "key"]


def test_after_resolving_uses_its_own_lists() -> None:
    bus = LifecycleEventBus()
    calls: list[str] = []
    bus.add_resolving(None, lambda obj, c: calls.append("resolving"))
    bus.add_after_resolving(None, lambda obj, c: calls.append("after"))

    bus.fire_after_resolving("service", object(), None)

    assert calls == ["after"]


def test_rebound_and_extenders_are_per_identifier() -> None:
    bus = LifecycleEventBus()

    def rebound(c: Any, instance: Any) -> None:
        pass

    def extender(instance: Any, c: Any) -> Any:
        return instance

    bus.add_rebound("mailer", rebound)
    bus.add_extender("mailer", extender)

    assert bus.rebound_callbacks("mailer") == (rebound,)
    assert bus.rebound_callbacks("queue") == ()
    assert bus.extenders("mailer") == (extender,)

    bus.forget_extenders("mailer")
    assert bus.extenders("mailer") == ()


def test_clear_forgets_everything() -> None:
    bus = LifecycleEventBus()
    calls: list[str] = []
    bus.add_resolving(None, lambda obj, c: calls.append("global"))
    bus.add_rebound("mailer", lambda c, instance: None)

    bus.clear()
    bus.fire_resolving("service", object(), None)

    assert calls == []
    assert bus.rebound_callbacks("mailer") == ()
