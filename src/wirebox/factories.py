from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from wirebox.parameters import NamedParameter, Parameter

if TYPE_CHECKING:
    from wirebox.container import Container
    from wirebox.service_key import ServiceKey

T = TypeVar("T")


class BoundFactory(Generic[T]):
    """A callable that builds ``T`` on demand, leaving some parameters open.

    Open parameters are filled from the call arguments: positional arguments
    in the order of ``open_parameters``, keyword arguments by name. An open
    parameter left out of the call is resolved like any other parameter. Every
    other constructor parameter is resolved by the container as usual.

    Annotate a constructor parameter as ``BoundFactory[T]`` to have the
    container inject a factory for ``T``.

    Examples:
        .. code-block:: python

            factory = container.resolve_factory(DomainObject)
            domain_object = factory(43)

    """

    __slots__ = ("_container", "_open_parameters", "_service_key")

    def __init__(
        self,
        *,
        container: Container,
        service_key: ServiceKey,
        open_parameters: tuple[str, ...],
    ) -> None:
        self._container = container
        self._service_key = service_key
        self._open_parameters = open_parameters

    @property
    def service_key(self) -> ServiceKey:
        return self._service_key

    @property
    def open_parameters(self) -> tuple[str, ...]:
        return self._open_parameters

    def __call__(self, *args: Any, **kwargs: Any) -> T:
        return self._container.resolve(self._service_key, *self._bind_arguments(args, kwargs))

    def _bind_arguments(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> list[Parameter]:
        if len(args) > len(self._open_parameters):
            msg = (
                f"Factory for {self._service_key} takes {len(self._open_parameters)} "
                f"positional argument(s) but {len(args)} were given."
            )
            raise TypeError(msg)

        bound = dict(zip(self._open_parameters, args))
        for name, value in kwargs.items():
            if name not in self._open_parameters:
                msg = f"Factory for {self._service_key} got an unexpected argument '{name}'."
                raise TypeError(msg)
            if name in bound:
                msg = f"Factory for {self._service_key} got multiple values for argument '{name}'."
                raise TypeError(msg)
            bound[name] = value

        return [NamedParameter(name, value) for name, value in bound.items()]

    def __repr__(self) -> str:
        open_parameters = ", ".join(self._open_parameters)
        return f"BoundFactory({self._service_key}, open=({open_parameters}))"
