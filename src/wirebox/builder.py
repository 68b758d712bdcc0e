from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from typing_extensions import Self

from wirebox.container import Container
from wirebox.defaults import DEFAULT_DUPLICATE_POLICY, DEFAULT_LIFETIME, DEFAULT_LOCK_MODE
from wirebox.dependencies import ConstructorRecipe, DependenciesExtractor
from wirebox.exceptions import (
    WireboxAmbiguousRegistrationError,
    WireboxContainerAlreadyBuiltError,
    WireboxInvalidRegistrationError,
)
from wirebox.lock_mode import LockMode
from wirebox.parameters import NamedParameter, Parameter, ParametersInput, normalize_parameters
from wirebox.registry import Registration
from wirebox.service_key import Component, ServiceKey
from wirebox.types import DuplicatePolicy, Lifetime
from wirebox.validators import RegistrationValidator

logger = logging.getLogger(__name__)

_MISSING: Any = object()


class _RegistrationKind(Enum):
    TYPE = "type"
    FACTORY = "factory"
    INSTANCE = "instance"


class RegistrationBuilder:
    """Fluent configuration of one registration.

    Returned by ``ContainerBuilder.register_type``, ``register_factory`` and
    ``register_instance``. Every method returns the builder itself so calls
    can be chained.

    Examples:
        .. code-block:: python

            builder.register_type(SMSLog).as_(Log).with_parameter("phone_number", "+123456789")

    """

    __slots__ = (
        "_constructor",
        "_kind",
        "_lifetime",
        "_owner",
        "_parameters",
        "_service_keys",
        "_target",
    )

    def __init__(self, owner: ContainerBuilder, kind: _RegistrationKind, target: Any) -> None:
        self._owner = owner
        self._kind = kind
        self._target = target
        self._service_keys: list[ServiceKey] = []
        self._parameters: list[Parameter] = []
        self._lifetime: Lifetime | None = None
        self._constructor: Callable[..., Any] | None = None

    def as_(self, *service_types: Any) -> Self:
        """Expose the registration under each of ``service_types``.

        Accepts plain types, ``Annotated[T, Component(...)]`` aliases and
        ``ServiceKey`` objects. Once ``as_`` is used the implementation type
        is no longer exposed unless ``as_self`` is also called.
        """
        self._owner._ensure_not_built()
        for service_type in service_types:
            self._add_service_key(ServiceKey.from_value(service_type))
        return self

    def as_self(self) -> Self:
        """Expose the registration under its own implementation type as well."""
        self._owner._ensure_not_built()
        implementation = self._implementation_type()
        if implementation is None:
            msg = f"Cannot infer the implementation type of {self._target!r}; use as_()."
            raise WireboxInvalidRegistrationError(msg)
        self._add_service_key(ServiceKey.from_value(implementation))
        return self

    def named(self, name: str, service_type: Any) -> Self:
        """Expose the registration as ``service_type`` qualified by component ``name``."""
        self._owner._ensure_not_built()
        self._add_service_key(ServiceKey.from_value(service_type, Component(name)))
        return self

    def with_parameter(self, parameter: Parameter | str, value: Any = _MISSING) -> Self:
        """Attach a parameter source used every time this registration is built.

        ``with_parameter("name", value)`` is shorthand for
        ``with_parameter(NamedParameter("name", value))``.
        """
        self._owner._ensure_not_built()
        if isinstance(parameter, str):
            if value is _MISSING:
                msg = f"with_parameter('{parameter}') requires a value."
                raise WireboxInvalidRegistrationError(msg)
            parameter = NamedParameter(parameter, value)
        elif value is not _MISSING:
            msg = "A value cannot be combined with a Parameter object."
            raise WireboxInvalidRegistrationError(msg)
        self._add_parameters([parameter])
        return self

    def with_parameters(self, *parameters: ParametersInput) -> Self:
        """Attach several parameter sources; mappings become named parameters."""
        self._owner._ensure_not_built()
        self._add_parameters(normalize_parameters(parameters))
        return self

    def using_constructor(self, constructor: Callable[..., Any]) -> Self:
        """Build the type through an alternate constructor, such as a classmethod."""
        self._owner._ensure_not_built()
        if self._kind is not _RegistrationKind.TYPE:
            msg = "using_constructor() is only available for register_type() registrations."
            raise WireboxInvalidRegistrationError(msg)
        self._owner._validator.validate_factory(constructor)
        self._constructor = constructor
        return self

    def with_lifetime(self, lifetime: Lifetime) -> Self:
        self._owner._ensure_not_built()
        if self._kind is _RegistrationKind.INSTANCE and lifetime is not Lifetime.SINGLETON:
            msg = "Instance registrations are always shared."
            raise WireboxInvalidRegistrationError(msg)
        self._lifetime = lifetime
        return self

    def single_instance(self) -> Self:
        """Share one instance for the lifetime of the container."""
        return self.with_lifetime(Lifetime.SINGLETON)

    def instance_per_dependency(self) -> Self:
        """Build a new instance every time the service is resolved."""
        return self.with_lifetime(Lifetime.TRANSIENT)

    def to_registration(
        self,
        default_lifetime: Lifetime,
        extractor: DependenciesExtractor,
    ) -> Registration:
        """Freeze the configuration into a ``Registration``."""
        service_keys = list(self._service_keys)
        if not service_keys:
            implementation = self._implementation_type()
            if implementation is None:
                msg = (
                    f"Cannot infer the provided type of factory {self._target!r}. "
                    "Add a return annotation or call as_()."
                )
                raise WireboxInvalidRegistrationError(msg)
            service_keys.append(ServiceKey.from_value(implementation))

        if self._kind is _RegistrationKind.INSTANCE:
            if self._parameters:
                msg = f"Instance registration for {service_keys[0]} cannot take parameters."
                raise WireboxInvalidRegistrationError(msg)
            return Registration(
                service_keys=tuple(service_keys),
                lifetime=Lifetime.SINGLETON,
                instance=self._target,
                has_instance=True,
            )

        return Registration(
            service_keys=tuple(service_keys),
            lifetime=self._lifetime or default_lifetime,
            recipe=self._recipe(extractor),
            parameters=tuple(self._parameters),
        )

    def _recipe(self, extractor: DependenciesExtractor) -> ConstructorRecipe:
        if self._constructor is not None:
            return extractor.extract_from_factory(self._constructor)
        if self._kind is _RegistrationKind.TYPE:
            return extractor.extract_from_type(self._target)
        return extractor.extract_from_factory(self._target)

    def _implementation_type(self) -> Any | None:
        if self._kind is _RegistrationKind.TYPE:
            return self._target
        if self._kind is _RegistrationKind.INSTANCE:
            return type(self._target)
        return self._owner._extractor.extract_return_type(self._target)

    def _add_service_key(self, service_key: ServiceKey) -> None:
        implementation = self._implementation_type()
        if implementation is not None:
            self._owner._validator.validate_service_key(service_key, implementation)
        if service_key not in self._service_keys:
            self._service_keys.append(service_key)

    def _add_parameters(self, parameters: list[Parameter]) -> None:
        if self._kind is _RegistrationKind.INSTANCE:
            msg = "Instance registrations cannot take parameters."
            raise WireboxInvalidRegistrationError(msg)
        self._parameters.extend(parameters)


class ContainerBuilder:
    """Collect registrations and build an immutable ``Container``.

    Args:
        default_lifetime: Lifetime of registrations that do not choose one.
        duplicate_policy: ``LAST_WINS`` lets the latest registration of a key
            shadow earlier ones; ``REJECT`` makes ``build`` fail instead.
        lock_mode: Locking used by the built container for shared instances.

    Examples:
        .. code-block:: python

            builder = ContainerBuilder()
            builder.register_type(ConsoleLog).as_(Log, Console)
            builder.register_type(Engine)
            builder.register_type(Car)
            container = builder.build()
            car = container.resolve(Car)

    """

    def __init__(
        self,
        *,
        default_lifetime: Lifetime = DEFAULT_LIFETIME,
        duplicate_policy: DuplicatePolicy = DEFAULT_DUPLICATE_POLICY,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
    ) -> None:
        self._default_lifetime = default_lifetime
        self._duplicate_policy = duplicate_policy
        self._lock_mode = lock_mode
        self._registrations: list[RegistrationBuilder] = []
        self._extractor = DependenciesExtractor()
        self._validator = RegistrationValidator()
        self._built = False

    def register_type(self, concrete_type: type[Any], /) -> RegistrationBuilder:
        """Register a class built through its constructor."""
        self._ensure_not_built()
        self._validator.validate_concrete_type(concrete_type)
        return self._add(_RegistrationKind.TYPE, concrete_type)

    def register_factory(self, factory: Callable[..., Any], /) -> RegistrationBuilder:
        """Register a callable whose parameters are resolved like constructor parameters.

        The provided type comes from the return annotation unless ``as_`` is used.
        """
        self._ensure_not_built()
        self._validator.validate_factory(factory)
        return self._add(_RegistrationKind.FACTORY, factory)

    def register_instance(self, instance: Any, /) -> RegistrationBuilder:
        """Register a pre-built object; every resolution returns this same object."""
        self._ensure_not_built()
        return self._add(_RegistrationKind.INSTANCE, instance)

    def build(self) -> Container:
        """Freeze the registrations into a ``Container``.

        Raises:
            WireboxAmbiguousRegistrationError: If duplicates are rejected and a
                key has several registrations.
            WireboxInvalidRegistrationError: If a registration is incomplete.
            WireboxContainerAlreadyBuiltError: If this builder was already built.

        """
        self._ensure_not_built()
        registrations = [
            registration_builder.to_registration(self._default_lifetime, self._extractor)
            for registration_builder in self._registrations
        ]

        if self._duplicate_policy is DuplicatePolicy.REJECT:
            counts: dict[ServiceKey, int] = {}
            for registration in registrations:
                for service_key in registration.service_keys:
                    counts[service_key] = counts.get(service_key, 0) + 1
            for service_key, count in counts.items():
                if count > 1:
                    raise WireboxAmbiguousRegistrationError(service_key, count)

        self._built = True
        container = Container(registrations, lock_mode=self._lock_mode)
        logger.debug("Built container with %d registration(s)", len(registrations))
        return container

    def _add(self, kind: _RegistrationKind, target: Any) -> RegistrationBuilder:
        registration_builder = RegistrationBuilder(self, kind, target)
        self._registrations.append(registration_builder)
        return registration_builder

    def _ensure_not_built(self) -> None:
        if self._built:
            raise WireboxContainerAlreadyBuiltError
