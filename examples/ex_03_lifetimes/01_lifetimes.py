"""Lifetimes: transient versus single instance.

Transient registrations build a new object on every resolution. Shared
registrations build once per container and hand out the same object,
even when several service types point at the same registration.
"""

from __future__ import annotations

from wirebox import ContainerBuilder, Lifetime


class Log:
    pass


class Console:
    pass


class ConsoleLog(Log, Console):
    pass


class Clock:
    pass


def main() -> None:
    builder = ContainerBuilder()
    builder.register_type(Clock)
    builder.register_type(ConsoleLog).as_(Log, Console).single_instance()
    container = builder.build()

    print(f"transient_new={container.resolve(Clock) is not container.resolve(Clock)}")  # => transient_new=True
    print(f"shared_same={container.resolve(Log) is container.resolve(Console)}")  # => shared_same=True

    builder = ContainerBuilder(default_lifetime=Lifetime.SINGLETON)
    builder.register_type(Clock)
    container = builder.build()
    print(f"default_shared={container.resolve(Clock) is container.resolve(Clock)}")  # => default_shared=True


if __name__ == "__main__":
    main()
