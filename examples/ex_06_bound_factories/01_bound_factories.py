"""Bound factories: resolve now, supply the remaining arguments later.

``DomainObject`` needs a ``Service`` (registered) and an ``int`` value
(not registered). A bound factory resolves the service for you and takes
the value as a call argument. Ask for ``BoundFactory[T]`` in a constructor
to have one injected.
"""

from __future__ import annotations

from wirebox import BoundFactory, ContainerBuilder, PositionalParameter


class Service:
    def do_something(self, value: int) -> str:
        return f"I have {value}"


class DomainObject:
    def __init__(self, service: Service, value: int) -> None:
        self.service = service
        self.value = value

    def __str__(self) -> str:
        return self.service.do_something(self.value)


class Workshop:
    def __init__(self, make_object: BoundFactory[DomainObject]) -> None:
        self.make_object = make_object

    def batch(self, *values: int) -> list[str]:
        return [str(self.make_object(value)) for value in values]


def main() -> None:
    builder = ContainerBuilder()
    builder.register_type(Service)
    builder.register_type(DomainObject)
    builder.register_type(Workshop)
    container = builder.build()

    print(container.resolve(DomainObject, PositionalParameter(1, 42)))  # => I have 42

    factory = container.resolve_factory(DomainObject)
    print(f"open={factory.open_parameters}")  # => open=('value',)
    print(factory(43))  # => I have 43

    workshop = container.resolve(Workshop)
    print(workshop.batch(1, 2))  # => ['I have 1', 'I have 2']


if __name__ == "__main__":
    main()
