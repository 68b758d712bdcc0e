"""Named components: several registrations of one service type.

Qualify a registration with a component name and ask for it either with
``component=...`` or with an ``Annotated`` alias in a constructor.
``resolve_all`` returns every registration of a type.
"""

from __future__ import annotations

from typing import Annotated, TypeAlias

from wirebox import Component, ContainerBuilder


class Log:
    channel = "base"


class EmailLog(Log):
    channel = "email"


class SMSLog(Log):
    channel = "sms"


AlertLog: TypeAlias = Annotated[Log, Component("alerts")]


class Alerter:
    def __init__(self, log: AlertLog) -> None:
        self.log = log


def main() -> None:
    builder = ContainerBuilder()
    builder.register_type(EmailLog).as_(Log)
    builder.register_type(SMSLog).as_(Log).named("alerts", Log)
    builder.register_type(Alerter)
    container = builder.build()

    print(f"default={container.resolve(Log).channel}")  # => default=sms
    print(f"named={container.resolve(Log, component='alerts').channel}")  # => named=sms
    print(f"injected={container.resolve(Alerter).log.channel}")  # => injected=sms
    print(f"all={[log.channel for log in container.resolve_all(Log)]}")  # => all=['email', 'sms']


if __name__ == "__main__":
    main()
