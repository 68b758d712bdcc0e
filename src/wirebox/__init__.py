from wirebox.builder import ContainerBuilder, RegistrationBuilder
from wirebox.container import Container
from wirebox.exceptions import (
    WireboxAmbiguousRegistrationError,
    WireboxCircularDependencyError,
    WireboxContainerAlreadyBuiltError,
    WireboxDependencyExtractionError,
    WireboxError,
    WireboxInvalidRegistrationError,
    WireboxServiceNotRegisteredError,
    WireboxUnresolvedParameterError,
)
from wirebox.factories import BoundFactory
from wirebox.lock_mode import LockMode
from wirebox.parameters import (
    NamedParameter,
    Parameter,
    PositionalParameter,
    ResolvedParameter,
    TypedParameter,
)
from wirebox.service_key import Component, ServiceKey
from wirebox.types import DuplicatePolicy, Lifetime

__all__ = [
    "BoundFactory",
    "Component",
    "Container",
    "ContainerBuilder",
    "DuplicatePolicy",
    "Lifetime",
    "LockMode",
    "NamedParameter",
    "Parameter",
    "PositionalParameter",
    "RegistrationBuilder",
    "ResolvedParameter",
    "ServiceKey",
    "TypedParameter",
    "WireboxAmbiguousRegistrationError",
    "WireboxCircularDependencyError",
    "WireboxContainerAlreadyBuiltError",
    "WireboxDependencyExtractionError",
    "WireboxError",
    "WireboxInvalidRegistrationError",
    "WireboxServiceNotRegisteredError",
    "WireboxUnresolvedParameterError",
]
