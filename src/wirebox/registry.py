from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from wirebox.dependencies import ConstructorRecipe
from wirebox.parameters import Parameter
from wirebox.service_key import ServiceKey
from wirebox.types import Lifetime

logger = logging.getLogger(__name__)

RegistrationSlot = int
"""A unique number assigned to each registration."""

_slots = itertools.count(1)


@dataclass(frozen=True, kw_only=True, eq=False)
class Registration:
    """A frozen binding from one or more service keys to a way of building an instance."""

    service_keys: tuple[ServiceKey, ...]
    """Every key this registration answers to."""
    lifetime: Lifetime
    """Transient or shared. Instance registrations are always shared."""
    recipe: ConstructorRecipe | None = None
    """How to construct the instance; ``None`` for instance registrations."""
    instance: Any = None
    """The pre-built instance when ``has_instance`` is set."""
    has_instance: bool = False
    parameters: tuple[Parameter, ...] = ()
    """Parameter sources attached at registration time."""

    slot: RegistrationSlot = field(init=False, compare=False)

    def __post_init__(self) -> None:
        # Unique across threads: advancing a count is a single atomic step
        object.__setattr__(self, "slot", next(_slots))

    @property
    def is_shared(self) -> bool:
        return self.has_instance or self.lifetime is Lifetime.SINGLETON

    def __str__(self) -> str:
        if self.has_instance:
            source = f"instance of {type(self.instance).__qualname__}"
        elif self.recipe is not None:
            source = getattr(self.recipe.target, "__qualname__", repr(self.recipe.target))
        else:  # pragma: no cover - builder never produces this
            source = "<nothing>"
        keys = ", ".join(str(key) for key in self.service_keys)
        return f"{source} as {keys} ({self.lifetime.value})"


class Registry:
    """Many-to-one table from service keys to registrations.

    Registrations are kept in insertion order. When several registrations
    share a key, ``lookup`` returns the most recent one and ``lookup_all``
    returns all of them.
    """

    def __init__(self) -> None:
        self._registrations: list[Registration] = []
        self._by_key: dict[ServiceKey, list[Registration]] = {}

    def register(self, registration: Registration) -> None:
        """Make ``registration`` reachable under each of its keys."""
        self._registrations.append(registration)
        for service_key in registration.service_keys:
            existing = self._by_key.setdefault(service_key, [])
            if existing:
                logger.debug(
                    "Registration %s shadows %d earlier registration(s) for %s",
                    registration,
                    len(existing),
                    service_key,
                )
            existing.append(registration)

    def lookup(self, service_key: ServiceKey) -> Registration | None:
        """Return the latest registration for ``service_key``, if any."""
        registrations = self._by_key.get(service_key)
        if not registrations:
            return None
        return registrations[-1]

    def lookup_all(self, service_key: ServiceKey) -> list[Registration]:
        """Return every registration for ``service_key`` in registration order."""
        return list(self._by_key.get(service_key, ()))

    def values(self) -> list[Registration]:
        """Get all registrations in insertion order."""
        return list(self._registrations)

    def __contains__(self, service_key: object) -> bool:
        return bool(self._by_key.get(service_key))  # type: ignore[call-overload]

    def __iter__(self) -> Iterator[ServiceKey]:
        return iter(self._by_key)

    def __len__(self) -> int:
        return len(self._registrations)
