from bindwire.application import Application
from bindwire.container import Container
from bindwire.container_interface import IContainer
from bindwire.contextual_binding import ContextualBindingBuilder
from bindwire.exceptions import (
    BindwireBindingResolutionError,
    BindwireCircularAliasError,
    BindwireCircularDependencyError,
    BindwireEntryNotFoundError,
    BindwireError,
    BindwireInvalidProviderError,
    BindwireInvalidRegistrationError,
    BindwireSelfAliasError,
)
from bindwire.lock_mode import LockMode
from bindwire.markers import Inject
from bindwire.service_provider import ServiceProvider
from bindwire.settings import ApplicationSettings

__all__ = [
    "Application",
    "ApplicationSettings",
    "BindwireBindingResolutionError",
    "BindwireCircularAliasError",
    "BindwireCircularDependencyError",
    "BindwireEntryNotFoundError",
    "BindwireError",
    "BindwireInvalidProviderError",
    "BindwireInvalidRegistrationError",
    "BindwireSelfAliasError",
    "Container",
    "ContextualBindingBuilder",
    "IContainer",
    "Inject",
    "LockMode",
    "ServiceProvider",
]
