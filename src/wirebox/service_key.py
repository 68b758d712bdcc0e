from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, NamedTuple, get_args, get_origin

_ANNOTATED_MARKER_MIN_ARGS = 2


class Component(NamedTuple):
    """Differentiate multiple registrations for the same base type.

    Attach ``Component`` metadata to ``typing.Annotated`` so the container
    treats each annotated key as a distinct service.

    Examples:
        .. code-block:: python

            from typing import Annotated, TypeAlias


            class Log: ...


            SmsLog: TypeAlias = Annotated[Log, Component("sms")]

    """

    value: Any


@dataclass(frozen=True, slots=True)
class ServiceKey:
    """Identity of a requested service: a type plus an optional component."""

    value: Any
    component: Component | None = None

    @classmethod
    def from_value(cls, value: Any, component: Component | str | None = None) -> ServiceKey:
        """Build a key from a type, an ``Annotated`` alias or an existing key."""
        if isinstance(component, str):
            component = Component(component)

        if isinstance(value, ServiceKey):
            if component is None or component == value.component:
                return value
            return cls(value=value.value, component=component)

        if get_origin(value) is Annotated:
            args = get_args(value)
            if len(args) >= _ANNOTATED_MARKER_MIN_ARGS:
                for metadata in args[1:]:
                    if isinstance(metadata, Component):
                        return cls(value=args[0], component=component or metadata)
                return cls(value=args[0], component=component)

        return cls(value=value, component=component)

    def __str__(self) -> str:
        name = getattr(self.value, "__qualname__", None) or repr(self.value)
        if self.component is None:
            return name
        return f"{name}[{self.component.value!r}]"
