from __future__ import annotations

import importlib
import warnings
from typing import Any

from pydantic_settings import BaseSettings

from bindwire._internal.dependencies import is_runtime_class

_PYDANTIC_V1_WARNING_PATTERN = (
    r"Core Pydantic V1 functionality isn't compatible with Python 3\.14 or greater\."
)


def _load_pydantic_v1_base() -> type[Any] | None:
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message=_PYDANTIC_V1_WARNING_PATTERN,
            category=UserWarning,
        )
        try:
            module = importlib.import_module("pydantic.v1")
        except ImportError:
            return None
    base_settings = getattr(module, "BaseSettings", None)
    if isinstance(base_settings, type) and base_settings is not BaseSettings:
        return base_settings
    return None


def _build_settings_bases() -> tuple[type[Any], ...]:
    legacy = _load_pydantic_v1_base()
    if legacy is None:
        return (BaseSettings,)
    return (BaseSettings, legacy)


SETTINGS_BASES: tuple[type[Any], ...] = _build_settings_bases()


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether a class is a Pydantic settings model.

    Both ``pydantic_settings.BaseSettings`` and the legacy
    ``pydantic.v1.BaseSettings`` count. The container autowires such classes
    as shared instances built through a zero-argument factory, so their values
    come from the environment exactly once per container.

    Args:
        candidate: Object to test.

    Returns:
        ``True`` when ``candidate`` is a runtime class and subclasses any
        settings base other than the bases themselves; otherwise ``False``.

    """
    if not is_runtime_class(candidate) or candidate in SETTINGS_BASES:
        return False
    try:
        return any(issubclass(candidate, base) for base in SETTINGS_BASES)
    except TypeError:
        return False


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
]
