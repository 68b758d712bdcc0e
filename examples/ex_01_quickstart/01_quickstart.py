"""Quickstart: register a few classes and let the container wire them.

``Car`` needs an ``Engine`` and a ``Log``; ``Engine`` needs a ``Log`` too.
Register ``MemoryLog`` as the ``Log`` implementation, resolve only ``Car``
and the whole chain is built for you.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from wirebox import ContainerBuilder, Lifetime


class Log(ABC):
    @abstractmethod
    def write(self, message: str) -> None: ...


class MemoryLog(Log):
    def __init__(self) -> None:
        self.lines: list[str] = []

    def write(self, message: str) -> None:
        self.lines.append(message)


class Engine:
    def __init__(self, log: Log, engine_id: int = 7) -> None:
        self.log = log
        self.engine_id = engine_id

    def ahead(self, power: int) -> None:
        self.log.write(f"Engine [{self.engine_id}] ahead {power}")


class Car:
    def __init__(self, engine: Engine, log: Log) -> None:
        self.engine = engine
        self.log = log

    def go(self) -> None:
        self.engine.ahead(100)
        self.log.write("Car going forward...")


def main() -> None:
    builder = ContainerBuilder()
    builder.register_type(MemoryLog).as_(Log).with_lifetime(Lifetime.SINGLETON)
    builder.register_type(Engine)
    builder.register_type(Car)
    container = builder.build()

    car = container.resolve(Car)
    car.go()

    log = container.resolve(Log)
    print(" | ".join(log.lines))  # => Engine [7] ahead 100 | Car going forward...

    chain = f"{type(car).__name__}>{type(car.engine).__name__}>{type(car.engine.log).__name__}"
    print(f"chain={chain}")  # => chain=Car>Engine>MemoryLog


if __name__ == "__main__":
    main()
