from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wirebox.dependencies import ParameterInfo
    from wirebox.service_key import ServiceKey


class WireboxError(Exception):
    """Represent a base class for all wirebox-specific failures.

    Catch this type when you want to handle any wirebox error path without
    matching each concrete exception class individually.
    """


class WireboxInvalidRegistrationError(WireboxError):
    """Signal invalid registration input on the container builder.

    Raised by ``ContainerBuilder.register_type``, ``register_factory`` and
    ``register_instance`` (or by ``build``) when the registration cannot
    describe a constructible service, for example an abstract class, a
    non-callable factory, or a factory without a provided type.
    """


class WireboxContainerAlreadyBuiltError(WireboxInvalidRegistrationError):
    """Signal use of a builder after ``build`` has been called.

    A container is frozen once built. Create a new ``ContainerBuilder`` to
    assemble a different set of registrations.
    """

    def __init__(self) -> None:
        super().__init__("This ContainerBuilder has already built a container.")


class WireboxAmbiguousRegistrationError(WireboxError):
    """Signal that several registrations claim the same service key.

    Only raised when the builder uses ``DuplicatePolicy.REJECT``. The default
    policy lets the last registration win.
    """

    def __init__(self, service_key: ServiceKey, count: int) -> None:
        self.service_key = service_key
        self.count = count
        super().__init__(
            f"Service {service_key} has {count} registrations and duplicates are rejected.",
        )


class WireboxDependencyExtractionError(WireboxError):
    """Signal that constructor type hints could not be evaluated.

    Usually caused by forward references to names that are not importable
    from the constructor's module.
    """

    def __init__(self, service_key: ServiceKey, error: Exception) -> None:
        self.service_key = service_key
        self.error = error
        super().__init__(f"Failed to extract dependencies for {service_key}: {error}")


class WireboxServiceNotRegisteredError(WireboxError):
    """Signal that a service key has no registration.

    Raised by ``Container.resolve`` and ``Container.resolve_factory``.
    Register the service on the builder (``register_type(...).as_(...)``) or
    resolve the concrete type it was registered under.
    """

    def __init__(self, service_key: ServiceKey) -> None:
        self.service_key = service_key
        super().__init__(f"Service {service_key} is not registered.")


class WireboxUnresolvedParameterError(WireboxError):
    """Signal that a constructor parameter could not be supplied.

    None of the parameter sources matched, the parameter type is not
    registered, and the parameter has no default value. Pass a value with
    ``NamedParameter``/``TypedParameter`` or register the parameter type.
    """

    def __init__(self, service_key: ServiceKey, parameter: ParameterInfo) -> None:
        self.service_key = service_key
        self.parameter = parameter
        super().__init__(
            f"Cannot resolve parameter '{parameter.name}' "
            f"({parameter.describe_annotation()}) of {service_key}.",
        )


class WireboxCircularDependencyError(WireboxError):
    """Signal a resolution chain that revisits a service already in progress."""

    def __init__(self, service_key: ServiceKey, resolution_chain: Sequence[ServiceKey]) -> None:
        self.service_key = service_key
        self.resolution_chain = list(resolution_chain)
        chain = " -> ".join(str(key) for key in (*self.resolution_chain, service_key))
        super().__init__(f"Circular dependency detected: {chain}")
