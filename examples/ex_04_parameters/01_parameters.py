"""Parameters: supply constructor values the registry cannot provide.

``SMSLog`` needs a phone number. Attach it when registering (by name, by
type or through a predicate) or pass it when resolving. A value passed at
resolve time wins over the registry.
"""

from __future__ import annotations

from wirebox import (
    ContainerBuilder,
    NamedParameter,
    ResolvedParameter,
    TypedParameter,
    WireboxUnresolvedParameterError,
)


class Log:
    def write(self, message: str) -> str:
        raise NotImplementedError


class SMSLog(Log):
    def __init__(self, phone_number: str) -> None:
        self.phone_number = phone_number

    def write(self, message: str) -> str:
        return f"SMS to {self.phone_number} : {message}"


def main() -> None:
    builder = ContainerBuilder()
    builder.register_type(SMSLog).as_(Log).with_parameter("phone_number", "+123456789")
    container = builder.build()
    print(container.resolve(Log).write("Named Parameter"))  # => SMS to +123456789 : Named Parameter

    builder = ContainerBuilder()
    builder.register_type(SMSLog).as_(Log).with_parameter(TypedParameter(str, "+12345678"))
    container = builder.build()
    print(container.resolve(Log).write("Type Parameter"))  # => SMS to +12345678 : Type Parameter

    builder = ContainerBuilder()
    builder.register_type(SMSLog).as_(Log).with_parameter(
        ResolvedParameter(
            predicate=lambda p, _: p.declared_type is str and p.name == "phone_number",
            value_accessor=lambda _p, _c: "+1222333",
        ),
    )
    container = builder.build()
    print(container.resolve(Log).write("Resolved Parameter"))  # => SMS to +1222333 : Resolved Parameter

    builder = ContainerBuilder()
    builder.register_type(SMSLog).as_(Log)
    container = builder.build()
    try:
        container.resolve(Log)
    except WireboxUnresolvedParameterError as error:
        print(f"missing={error.parameter.name}")  # => missing=phone_number

    log = container.resolve(Log, NamedParameter("phone_number", "+100"))
    print(log.write("call site"))  # => SMS to +100 : call site
    print(container.resolve(Log, {"phone_number": "+200"}).phone_number)  # => +200


if __name__ == "__main__":
    main()
