import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from wirebox.dependencies import DependenciesExtractor
from wirebox.registry import Registration, Registry
from wirebox.service_key import ServiceKey
from wirebox.types import Lifetime


class Log:
    pass


class ConsoleLog(Log):
    pass


class EmailLog(Log):
    pass


LOG_KEY = ServiceKey.from_value(Log)
CONSOLE_KEY = ServiceKey.from_value(ConsoleLog)


def _registration(concrete: type, *keys: ServiceKey, lifetime: Lifetime = Lifetime.TRANSIENT) -> Registration:
    return Registration(
        service_keys=keys,
        lifetime=lifetime,
        recipe=DependenciesExtractor().extract_from_type(concrete),
    )


def test_lookup_missing_key_returns_none() -> None:
    assert Registry().lookup(LOG_KEY) is None
    assert Registry().lookup_all(LOG_KEY) == []


def test_one_registration_under_many_keys() -> None:
    registry = Registry()
    registration = _registration(ConsoleLog, LOG_KEY, CONSOLE_KEY)

    registry.register(registration)

    assert registry.lookup(LOG_KEY) is registration
    assert registry.lookup(CONSOLE_KEY) is registration
    assert len(registry) == 1
    assert set(registry) == {LOG_KEY, CONSOLE_KEY}


def test_last_registration_wins_and_all_are_kept() -> None:
    registry = Registry()
    first = _registration(ConsoleLog, LOG_KEY)
    second = _registration(EmailLog, LOG_KEY)

    registry.register(first)
    registry.register(second)

    assert registry.lookup(LOG_KEY) is second
    assert registry.lookup_all(LOG_KEY) == [first, second]
    assert registry.values() == [first, second]


def test_shadowing_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    registry = Registry()
    registry.register(_registration(ConsoleLog, LOG_KEY))

    with caplog.at_level(logging.DEBUG, logger="wirebox.registry"):
        registry.register(_registration(EmailLog, LOG_KEY))

    assert "shadows 1 earlier registration(s) for Log" in caplog.text


def test_contains() -> None:
    registry = Registry()
    registry.register(_registration(ConsoleLog, LOG_KEY))

    assert LOG_KEY in registry
    assert CONSOLE_KEY not in registry


def test_slots_are_unique() -> None:
    first = _registration(ConsoleLog, LOG_KEY)
    second = _registration(ConsoleLog, LOG_KEY)

    assert first.slot != second.slot


def test_slots_are_unique_across_threads() -> None:
    recipe = DependenciesExtractor().extract_from_type(ConsoleLog)

    def make_slot(_: int) -> int:
        registration = Registration(
            service_keys=(LOG_KEY,),
            lifetime=Lifetime.TRANSIENT,
            recipe=recipe,
        )
        return registration.slot

    with ThreadPoolExecutor(max_workers=8) as executor:
        slots = list(executor.map(make_slot, range(400)))

    assert len(set(slots)) == 400


def test_is_shared() -> None:
    assert not _registration(ConsoleLog, LOG_KEY).is_shared
    assert _registration(ConsoleLog, LOG_KEY, lifetime=Lifetime.SINGLETON).is_shared
    instance = Registration(
        service_keys=(LOG_KEY,),
        lifetime=Lifetime.SINGLETON,
        instance=ConsoleLog(),
        has_instance=True,
    )
    assert instance.is_shared
    assert str(instance) == "instance of ConsoleLog as Log (singleton)"


def test_str_of_recipe_registration() -> None:
    registration = _registration(ConsoleLog, LOG_KEY, CONSOLE_KEY)

    assert str(registration) == "ConsoleLog as Log, ConsoleLog (transient)"
