"""Errors: what the container reports when a graph cannot be built.

Unknown services, cycles and duplicate registrations (when rejected) fail
synchronously with a ``WireboxError`` subclass.
"""

from __future__ import annotations

from wirebox import (
    ContainerBuilder,
    DuplicatePolicy,
    WireboxAmbiguousRegistrationError,
    WireboxCircularDependencyError,
    WireboxServiceNotRegisteredError,
)


class Unregistered:
    pass


class Chicken:
    def __init__(self, egg: Egg) -> None:
        self.egg = egg


class Egg:
    def __init__(self, chicken: Chicken) -> None:
        self.chicken = chicken


def main() -> None:
    builder = ContainerBuilder()
    builder.register_type(Chicken)
    builder.register_type(Egg)
    container = builder.build()

    try:
        container.resolve(Unregistered)
    except WireboxServiceNotRegisteredError as error:
        print(f"unknown={error.service_key}")  # => unknown=Unregistered

    try:
        container.resolve(Chicken)
    except WireboxCircularDependencyError as error:
        print(error)  # => Circular dependency detected: Chicken -> Egg -> Chicken

    builder = ContainerBuilder(duplicate_policy=DuplicatePolicy.REJECT)
    builder.register_type(Egg)
    builder.register_type(Egg)
    try:
        builder.build()
    except WireboxAmbiguousRegistrationError as error:
        print(f"duplicates={error.count}")  # => duplicates=2


if __name__ == "__main__":
    main()
