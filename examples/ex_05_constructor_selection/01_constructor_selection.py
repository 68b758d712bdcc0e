"""Constructor selection: build a type through an alternate constructor.

Python classes have a single ``__init__``; alternate constructors are
classmethods. ``using_constructor`` tells the container which one to call,
and its parameters are resolved like ``__init__`` parameters.
"""

from __future__ import annotations

from wirebox import ContainerBuilder


class Log:
    def __init__(self, name: str = "console") -> None:
        self.name = name


class EmailLog(Log):
    def __init__(self) -> None:
        super().__init__(name="email:admin@foo.com")


class Engine:
    pass


class Car:
    def __init__(self, engine: Engine, log: Log) -> None:
        self.engine = engine
        self.log = log

    @classmethod
    def with_default_log(cls, engine: Engine) -> Car:
        return cls(engine, EmailLog())


def main() -> None:
    builder = ContainerBuilder()
    builder.register_type(Log)
    builder.register_type(Engine)
    builder.register_type(Car)
    container = builder.build()
    print(f"init_log={container.resolve(Car).log.name}")  # => init_log=console

    builder = ContainerBuilder()
    builder.register_type(Engine)
    builder.register_type(Car).using_constructor(Car.with_default_log)
    container = builder.build()
    print(f"alt_log={container.resolve(Car).log.name}")  # => alt_log=email:admin@foo.com


if __name__ == "__main__":
    main()
