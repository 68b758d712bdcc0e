from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, TypeAlias, TypeVar, get_args, get_origin, overload

from wirebox.defaults import DEFAULT_LOCK_MODE
from wirebox.dependencies import ParameterInfo
from wirebox.exceptions import (
    WireboxCircularDependencyError,
    WireboxServiceNotRegisteredError,
    WireboxUnresolvedParameterError,
)
from wirebox.factories import BoundFactory
from wirebox.lock_mode import LockMode
from wirebox.parameters import (
    NOT_SUPPLIED,
    Parameter,
    ParametersInput,
    normalize_parameters,
    order_by_precedence,
)
from wirebox.registry import Registration, RegistrationSlot, Registry
from wirebox.resolution_stack import resolving
from wirebox.service_key import Component, ServiceKey
from wirebox.types import Lifetime

T = TypeVar("T")

logger = logging.getLogger(__name__)

_MISSING: Any = object()

_BuiltShared: TypeAlias = list[tuple[dict[RegistrationSlot, Any], RegistrationSlot]]
"""(cache, slot) pairs of shared instances cached by one resolution."""

# None outside of a resolution
_built_shared: ContextVar[_BuiltShared | None] = ContextVar("wirebox_built_shared", default=None)


@contextmanager
def _all_or_nothing() -> Iterator[None]:
    """Drop shared instances cached by a resolution that ends with an error.

    A resolve started from inside a constructor joins the enclosing one.
    """
    if _built_shared.get() is not None:
        yield
        return

    built: _BuiltShared = []
    token = _built_shared.set(built)
    try:
        yield
    except BaseException:
        for singletons, slot in reversed(built):
            singletons.pop(slot, None)
        if built:
            logger.debug("Discarded %d shared instance(s) of a failed resolution", len(built))
        raise
    finally:
        _built_shared.reset(token)


class Container:
    """Immutable set of registrations that builds object graphs on demand.

    Containers are produced by ``ContainerBuilder.build``. Every resolution
    walks the registry, supplies constructor parameters from explicit
    sources or by recursive resolution, and caches shared instances.
    The container registers itself, so factories may depend on ``Container``.
    """

    __slots__ = (
        "_checked_slots",
        "_lock_mode",
        "_registry",
        "_singleton_locks",
        "_singletons",
    )

    def __init__(
        self,
        registrations: Iterable[Registration] = (),
        *,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
    ) -> None:
        self._lock_mode = lock_mode
        self._registry = Registry()
        # Registered first so a user registration for Container shadows it
        self._registry.register(
            Registration(
                service_keys=(ServiceKey.from_value(type(self)),),
                lifetime=Lifetime.SINGLETON,
                instance=self,
                has_instance=True,
            ),
        )
        for registration in registrations:
            self._registry.register(registration)

        self._singletons: dict[RegistrationSlot, Any] = {}
        # Registrations whose dependency graph is known to be buildable
        self._checked_slots: set[RegistrationSlot] = set()
        # One lock per shared registration slot. RLock because a constructor that
        # resolves through the container can re-enter its slot under another key.
        self._singleton_locks: dict[RegistrationSlot, threading.RLock] = {}
        if lock_mode is LockMode.THREAD:
            self._singleton_locks = {
                registration.slot: threading.RLock()
                for registration in self._registry.values()
                if registration.is_shared and not registration.has_instance
            }

    @property
    def registrations(self) -> tuple[Registration, ...]:
        """All registrations, including the container's own, in registration order."""
        return tuple(self._registry.values())

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    def is_registered(self, key: Any, *, component: Component | str | None = None) -> bool:
        """Check whether ``key`` (optionally qualified by ``component``) has a registration."""
        return ServiceKey.from_value(key, component) in self._registry

    @overload
    def resolve(
        self,
        key: type[T],
        /,
        *parameters: ParametersInput,
        component: Component | str | None = None,
    ) -> T: ...

    @overload
    def resolve(
        self,
        key: Any,
        /,
        *parameters: ParametersInput,
        component: Component | str | None = None,
    ) -> Any: ...

    def resolve(
        self,
        key: Any,
        /,
        *parameters: ParametersInput,
        component: Component | str | None = None,
    ) -> Any:
        """Resolve an instance of ``key``.

        A failed resolve leaves the container as it was: shared instances
        built on the way are discarded.

        Args:
            key: The service type, an ``Annotated`` alias carrying a ``Component``,
                or a ``ServiceKey``.
            *parameters: Explicit parameter sources for the top-level
                constructor. A mapping is shorthand for named parameters.
            component: Optional component name selecting a named registration.

        Returns:
            The constructed (or shared) instance.

        Raises:
            WireboxServiceNotRegisteredError: If ``key`` has no registration.
            WireboxUnresolvedParameterError: If a constructor parameter cannot
                be supplied.
            WireboxCircularDependencyError: If resolving the key would need the
                key itself, directly or through its dependencies. Raised before
                anything is constructed.

        """
        service_key = ServiceKey.from_value(key, component)
        registration = self._registry.lookup(service_key)
        if registration is None:
            raise WireboxServiceNotRegisteredError(service_key)
        return self._resolve_roots(service_key, [registration], normalize_parameters(parameters))[0]

    @overload
    def resolve_optional(
        self,
        key: type[T],
        /,
        *parameters: ParametersInput,
        component: Component | str | None = None,
    ) -> T | None: ...

    @overload
    def resolve_optional(
        self,
        key: Any,
        /,
        *parameters: ParametersInput,
        component: Component | str | None = None,
    ) -> Any | None: ...

    def resolve_optional(
        self,
        key: Any,
        /,
        *parameters: ParametersInput,
        component: Component | str | None = None,
    ) -> Any | None:
        """Resolve ``key`` like ``resolve`` but return ``None`` when it is not registered.

        Only a missing registration for ``key`` itself is turned into ``None``;
        failures while building its dependencies still raise.
        """
        service_key = ServiceKey.from_value(key, component)
        registration = self._registry.lookup(service_key)
        if registration is None:
            return None
        return self._resolve_roots(service_key, [registration], normalize_parameters(parameters))[0]

    def resolve_all(
        self,
        key: Any,
        /,
        *parameters: ParametersInput,
        component: Component | str | None = None,
    ) -> list[Any]:
        """Resolve one instance per registration of ``key``, in registration order.

        Returns an empty list when ``key`` has no registration. If any of the
        instances fails to build, shared instances built for the others are
        discarded too.
        """
        service_key = ServiceKey.from_value(key, component)
        return self._resolve_roots(
            service_key,
            self._registry.lookup_all(service_key),
            normalize_parameters(parameters),
        )

    def resolve_factory(
        self,
        key: Any,
        /,
        *open_parameters: str,
        component: Component | str | None = None,
    ) -> BoundFactory[Any]:
        """Return a ``BoundFactory`` that builds ``key`` with some parameters left open.

        Args:
            key: The service to build.
            *open_parameters: Constructor parameter names supplied at call time.
                When omitted, every required parameter that neither the
                registry nor a registration-level source can supply is open.
            component: Optional component name selecting a named registration.

        Raises:
            WireboxServiceNotRegisteredError: If ``key`` has no registration.
            TypeError: If an open parameter name is not a constructor parameter.

        """
        service_key = ServiceKey.from_value(key, component)
        registration = self._registry.lookup(service_key)
        if registration is None:
            raise WireboxServiceNotRegisteredError(service_key)

        if registration.recipe is None:
            names: tuple[str, ...] = ()
        elif open_parameters:
            for name in open_parameters:
                if registration.recipe.get(name) is None:
                    msg = f"{service_key} has no constructor parameter named '{name}'."
                    raise TypeError(msg)
            names = tuple(open_parameters)
        else:
            names = tuple(
                parameter.name
                for parameter in registration.recipe.parameters
                if self._is_open_parameter(parameter, registration)
            )

        return BoundFactory(container=self, service_key=service_key, open_parameters=names)

    def _is_open_parameter(self, parameter: ParameterInfo, registration: Registration) -> bool:
        if parameter.has_default:
            return False
        if any(source.applies_to(parameter, self) for source in registration.parameters):
            return False
        dependency_key = parameter.service_key
        if dependency_key is None:
            return True
        if get_origin(dependency_key.value) is BoundFactory:
            return False
        return dependency_key not in self._registry

    def _resolve_roots(
        self,
        service_key: ServiceKey,
        registrations: Sequence[Registration],
        parameters: Sequence[Parameter],
    ) -> list[Any]:
        for registration in registrations:
            self._check_buildable(service_key, registration, parameters)
        with _all_or_nothing():
            return [
                self._resolve_registration(service_key, registration, parameters)
                for registration in registrations
            ]

    def _check_buildable(
        self,
        service_key: ServiceKey,
        registration: Registration,
        call_site: Sequence[Parameter] = (),
        path: tuple[ServiceKey, ...] = (),
    ) -> None:
        """Walk the dependencies a resolution would take, without constructing anything.

        Raises the errors the resolution itself would raise, so a missing
        parameter or a cycle is reported before any instance is built and
        before any shared-instance lock is taken.

        Raises:
            WireboxCircularDependencyError: If a dependency leads back to a key
                already on ``path``.
            WireboxUnresolvedParameterError: If nothing can supply a parameter.

        """
        recipe = registration.recipe
        if recipe is None:
            return
        # Extra call-site sources only cut edges, so a checked graph stays valid
        if registration.slot in self._checked_slots or registration.slot in self._singletons:
            return

        path = (*path, service_key)
        sources = order_by_precedence(call_site, registration.parameters)
        for parameter in recipe.parameters:
            if any(source.applies_to(parameter, self) for source in sources):
                continue

            dependency_key = parameter.service_key
            if dependency_key is not None:
                if get_origin(dependency_key.value) is BoundFactory:
                    continue
                dependency = self._registry.lookup(dependency_key)
                if dependency is not None:
                    if dependency_key in path:
                        raise WireboxCircularDependencyError(dependency_key, path)
                    self._check_buildable(dependency_key, dependency, path=path)
                    continue

            if not parameter.has_default:
                raise WireboxUnresolvedParameterError(service_key, parameter)

        if not call_site:
            self._checked_slots.add(registration.slot)

    def _resolve_registration(
        self,
        service_key: ServiceKey,
        registration: Registration,
        parameters: Sequence[Parameter],
    ) -> Any:
        if registration.has_instance:
            return registration.instance

        if not registration.is_shared:
            with resolving(service_key):
                return self._construct(service_key, registration, parameters)

        cached = self._singletons.get(registration.slot, _MISSING)
        if cached is not _MISSING:
            if parameters:
                logger.debug(
                    "Ignoring %d explicit parameter(s) for already built shared %s",
                    len(parameters),
                    service_key,
                )
            return cached

        with resolving(service_key):
            lock = self._singleton_locks.get(registration.slot)
            if lock is None:
                return self._construct_shared(service_key, registration, parameters)
            with lock:
                # Double-check: another thread may have built it while we waited
                cached = self._singletons.get(registration.slot, _MISSING)
                if cached is not _MISSING:
                    return cached
                return self._construct_shared(service_key, registration, parameters)

    def _construct_shared(
        self,
        service_key: ServiceKey,
        registration: Registration,
        parameters: Sequence[Parameter],
    ) -> Any:
        instance = self._construct(service_key, registration, parameters)
        # Cached only after construction succeeded
        self._singletons[registration.slot] = instance
        built = _built_shared.get()
        if built is not None:
            built.append((self._singletons, registration.slot))
        logger.debug("Built shared instance for %s", service_key)
        return instance

    def _construct(
        self,
        service_key: ServiceKey,
        registration: Registration,
        parameters: Sequence[Parameter],
    ) -> Any:
        recipe = registration.recipe
        if recipe is None:  # pragma: no cover - builder never produces this
            raise WireboxServiceNotRegisteredError(service_key)

        sources = order_by_precedence(parameters, registration.parameters)
        arguments: dict[str, Any] = {}
        for parameter in recipe.parameters:
            value = self._supply_parameter(service_key, parameter, sources)
            if value is not NOT_SUPPLIED:
                arguments[parameter.name] = value

        return recipe.construct(arguments)

    def _supply_parameter(
        self,
        service_key: ServiceKey,
        parameter: ParameterInfo,
        sources: Sequence[Parameter],
    ) -> Any:
        """Supply one constructor parameter, or return ``NOT_SUPPLIED`` to use its default."""
        for source in sources:
            value = source.try_supply(parameter, self)
            if value is not NOT_SUPPLIED:
                return value

        dependency_key = parameter.service_key
        if dependency_key is not None:
            if get_origin(dependency_key.value) is BoundFactory:
                (target,) = get_args(dependency_key.value)
                return self.resolve_factory(target)

            registration = self._registry.lookup(dependency_key)
            if registration is not None:
                return self._resolve_registration(dependency_key, registration, ())

        if parameter.has_default:
            return NOT_SUPPLIED

        raise WireboxUnresolvedParameterError(service_key, parameter)

    def __contains__(self, key: object) -> bool:
        return self.is_registered(key)

    def __repr__(self) -> str:
        return f"Container(registrations={len(self._registry)}, lock_mode={self._lock_mode.value})"
