from __future__ import annotations

import inspect
from typing import Any

from wirebox.exceptions import WireboxInvalidRegistrationError
from wirebox.service_key import ServiceKey


class RegistrationValidator:
    """Validates builder input before registrations are created."""

    def validate_concrete_type(self, concrete_type: object) -> None:
        """Validate that a concrete type is instantiable."""
        if not inspect.isclass(concrete_type):
            msg = f"Concrete type must be a class, got {concrete_type!r}."
            raise WireboxInvalidRegistrationError(msg)

        if inspect.isabstract(concrete_type):
            msg = f"Concrete type '{concrete_type.__qualname__}' cannot be an abstract class."
            raise WireboxInvalidRegistrationError(msg)

    def validate_factory(self, factory: object) -> None:
        """Validate that a factory or alternate constructor is callable."""
        if not callable(factory):
            msg = f"Factory must be callable, got {factory!r}."
            raise WireboxInvalidRegistrationError(msg)

    def validate_service_key(self, service_key: ServiceKey, implementation: Any) -> None:
        """Validate that ``implementation`` can stand in for the service type.

        Only plain classes are checked. Protocols, generic aliases and other
        non-class keys are accepted as-is.
        """
        service_type = service_key.value
        if not inspect.isclass(service_type) or not inspect.isclass(implementation):
            return
        if getattr(service_type, "_is_protocol", False):
            return
        try:
            is_assignable = issubclass(implementation, service_type)
        except TypeError:
            return
        if not is_assignable:
            msg = (
                f"'{implementation.__qualname__}' cannot be registered as "
                f"{service_key}: it is not a subclass of '{service_type.__qualname__}'."
            )
            raise WireboxInvalidRegistrationError(msg)
