"""Registration methods: types, several service types, instances and factories.

One implementation can answer to several service types. ``register_type``
builds a new object per resolution (unless shared), while
``register_instance`` always hands out the object you registered.
"""

from __future__ import annotations

from wirebox import ContainerBuilder


class Log:
    def write(self, message: str) -> str:
        return message


class Console:
    pass


class ConsoleLog(Log, Console):
    def write(self, message: str) -> str:
        return f"console: {message}"


class Settings:
    def __init__(self, prefix: str) -> None:
        self.prefix = prefix


def make_settings() -> Settings:
    return Settings(prefix="[app]")


def main() -> None:
    builder = ContainerBuilder()
    builder.register_type(ConsoleLog).as_(Log, Console).as_self()
    container = builder.build()

    log = container.resolve(Log)
    console = container.resolve(Console)
    concrete = container.resolve(ConsoleLog)
    print(f"type_distinct={log is not console and console is not concrete}")  # => type_distinct=True
    print(log.write("hello"))  # => console: hello

    builder = ContainerBuilder()
    shared_log = ConsoleLog()
    builder.register_instance(shared_log).as_(Log, Console)
    builder.register_factory(make_settings)
    container = builder.build()

    same = container.resolve(Log) is container.resolve(Console) is shared_log
    print(f"instance_same={same}")  # => instance_same=True
    print(f"factory_prefix={container.resolve(Settings).prefix}")  # => factory_prefix=[app]


if __name__ == "__main__":
    main()
