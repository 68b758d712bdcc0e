"""Explicit parameter sources used while constructing a service.

Each source is a small value object with a ``rank`` (its precedence) and a
single ``try_supply`` operation. For every constructor parameter the
container tries call-site sources in rank order, then registration-level
sources in rank order, and falls back to registry resolution when none of
them supplies a value.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Final, TypeAlias

if TYPE_CHECKING:
    from wirebox.container import Container
    from wirebox.dependencies import ParameterInfo


class _NotSupplied:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NOT_SUPPLIED"


NOT_SUPPLIED: Final = _NotSupplied()
"""Returned by ``try_supply`` when a source does not apply to a parameter."""


class Parameter:
    """Base class for explicit parameter sources."""

    __slots__ = ()

    rank: ClassVar[int]

    def try_supply(self, parameter: ParameterInfo, container: Container) -> Any:
        """Return the value for ``parameter`` or ``NOT_SUPPLIED``."""
        raise NotImplementedError

    def applies_to(self, parameter: ParameterInfo, container: Container) -> bool:
        """Tell whether this source would supply ``parameter``."""
        return self.try_supply(parameter, container) is not NOT_SUPPLIED


@dataclass(frozen=True, slots=True)
class PositionalParameter(Parameter):
    """Supply ``value`` to the constructor parameter at ``position`` (0-based, ``self`` excluded)."""

    rank: ClassVar[int] = 1

    position: int
    value: Any

    def try_supply(self, parameter: ParameterInfo, container: Container) -> Any:
        if parameter.position == self.position:
            return self.value
        return NOT_SUPPLIED


@dataclass(frozen=True, slots=True)
class NamedParameter(Parameter):
    """Supply ``value`` to the constructor parameter called ``name``."""

    rank: ClassVar[int] = 2

    name: str
    value: Any

    def try_supply(self, parameter: ParameterInfo, container: Container) -> Any:
        if parameter.name == self.name:
            return self.value
        return NOT_SUPPLIED


@dataclass(frozen=True, slots=True)
class TypedParameter(Parameter):
    """Supply ``value`` to every constructor parameter declared as ``type``."""

    rank: ClassVar[int] = 3

    type: Any
    value: Any

    def try_supply(self, parameter: ParameterInfo, container: Container) -> Any:
        if parameter.is_annotated and parameter.declared_type == self.type:
            return self.value
        return NOT_SUPPLIED


ParameterPredicate: TypeAlias = Callable[["ParameterInfo", "Container"], bool]
ValueAccessor: TypeAlias = Callable[["ParameterInfo", "Container"], Any]


@dataclass(frozen=True, slots=True)
class ResolvedParameter(Parameter):
    """Supply a computed value to parameters accepted by ``predicate``.

    Examples:
        .. code-block:: python

            ResolvedParameter(
                predicate=lambda p, c: p.declared_type is str and p.name == "phone_number",
                value_accessor=lambda p, c: "+12345678",
            )

    """

    rank: ClassVar[int] = 4

    predicate: ParameterPredicate
    value_accessor: ValueAccessor

    def try_supply(self, parameter: ParameterInfo, container: Container) -> Any:
        if self.predicate(parameter, container):
            return self.value_accessor(parameter, container)
        return NOT_SUPPLIED

    def applies_to(self, parameter: ParameterInfo, container: Container) -> bool:
        return bool(self.predicate(parameter, container))


ParametersInput: TypeAlias = Parameter | Mapping[str, Any]
"""A parameter source, or a mapping used as shorthand for named parameters."""


def normalize_parameters(parameters: Iterable[ParametersInput]) -> list[Parameter]:
    """Flatten sources and ``{name: value}`` mappings into a list of sources."""
    result: list[Parameter] = []
    for item in parameters:
        if isinstance(item, Parameter):
            result.append(item)
        elif isinstance(item, Mapping):
            result.extend(NamedParameter(name, value) for name, value in item.items())
        else:
            msg = f"Expected a Parameter or a mapping of named values, got {item!r}."
            raise TypeError(msg)
    return result


def order_by_precedence(*groups: Iterable[Parameter]) -> list[Parameter]:
    """Order sources group by group, each group by rank.

    Every source of an earlier group (call-site sources) comes before any
    source of a later one (registration-level sources), whatever their kind.
    """
    return [source for group in groups for source in sorted(group, key=lambda s: s.rank)]
