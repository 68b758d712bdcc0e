"""Tests for thread safety of Container."""

import asyncio
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

import pytest

from wirebox import ContainerBuilder
from wirebox.exceptions import WireboxCircularDependencyError
from wirebox.resolution_stack import resolution_chain, resolving
from wirebox.service_key import ServiceKey


class ServiceA:
    pass


class ServiceB:
    def __init__(self, a: ServiceA) -> None:
        self.a = a


class SlowInit:
    instance_count = 0
    count_lock = threading.Lock()

    def __init__(self) -> None:
        time.sleep(0.01)
        with SlowInit.count_lock:
            SlowInit.instance_count += 1


class TestConcurrentResolution:
    def test_concurrent_singleton_resolution_same_instance(
        self,
        builder_singleton: ContainerBuilder,
    ) -> None:
        """Concurrent singleton resolution returns same instance."""
        builder_singleton.register_type(ServiceA)
        container = builder_singleton.build()
        results: list[ServiceA] = []
        errors: list[Exception] = []

        def resolve_service() -> None:
            try:
                instance = container.resolve(ServiceA)
                results.append(instance)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=resolve_service) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(results) == 10
        # All should be the same instance
        assert all(r is results[0] for r in results)

    def test_concurrent_transient_resolution_different_instances(
        self,
        builder: ContainerBuilder,
    ) -> None:
        """Concurrent transient resolution creates different instances."""
        builder.register_type(ServiceA)
        container = builder.build()
        results: list[ServiceA] = []
        errors: list[Exception] = []

        def resolve_service() -> None:
            try:
                instance = container.resolve(ServiceA)
                results.append(instance)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=resolve_service) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(results) == 10
        # All should be different instances
        unique_instances = {id(r) for r in results}
        assert len(unique_instances) == 10


class TestRaceConditions:
    def test_singleton_constructed_once_under_contention(
        self,
        builder_singleton: ContainerBuilder,
    ) -> None:
        """The first resolution wins and every other caller waits for its result."""
        SlowInit.instance_count = 0
        builder_singleton.register_type(SlowInit)
        container = builder_singleton.build()
        results: list[SlowInit] = []

        def resolve_slow() -> None:
            results.append(container.resolve(SlowInit))

        with ThreadPoolExecutor(max_workers=20) as executor:
            futures = [executor.submit(resolve_slow) for _ in range(20)]
            for f in as_completed(futures):
                f.result()  # Raise any exceptions

        assert len(results) == 20
        assert all(r is results[0] for r in results)
        assert SlowInit.instance_count == 1


class TestStress:
    def test_many_concurrent_resolutions(self, builder: ContainerBuilder) -> None:
        """100 threads resolving concurrently."""

        class StressService:
            def __init__(self, a: ServiceA, b: ServiceB) -> None:
                self.a = a
                self.b = b

        builder.register_type(ServiceA).single_instance()
        builder.register_type(ServiceB)
        builder.register_type(StressService)
        container = builder.build()
        results: list[StressService] = []
        errors: list[Exception] = []

        def resolve_complex() -> None:
            try:
                instance = container.resolve(StressService)
                results.append(instance)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=resolve_complex) for _ in range(100)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(results) == 100
        for r in results:
            assert r.a is r.b.a
            assert r.a is results[0].a


# Circular dependency classes for thread safety tests
class CircularX:
    """X -> Y (circular)."""

    def __init__(self, y: "CircularY") -> None:
        self.y = y


class CircularY:
    """Y -> X (circular)."""

    def __init__(self, x: CircularX) -> None:
        self.x = x


class SharedX:
    instance_count = 0

    def __init__(self, y: "SharedY") -> None:
        SharedX.instance_count += 1
        self.y = y


class SharedY:
    instance_count = 0

    def __init__(self, x: SharedX) -> None:
        SharedY.instance_count += 1
        self.x = x


class TestCircularDetectionPerThread:
    def test_circular_detection_in_threads(self, builder: ContainerBuilder) -> None:
        """Every thread detects the cycle independently and none deadlocks."""
        builder.register_type(CircularX)
        builder.register_type(CircularY)
        container = builder.build()
        errors: list[Exception] = []

        def resolve_circular() -> None:
            try:
                container.resolve(CircularX)
            except WireboxCircularDependencyError as e:
                errors.append(e)

        threads = [threading.Thread(target=resolve_circular) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert len(errors) == 10
        assert all(len(e.resolution_chain) == 2 for e in errors)

    def test_shared_cycle_entered_from_both_ends_fails_in_every_thread(
        self,
        builder_singleton: ContainerBuilder,
    ) -> None:
        """Opposite entry points into a cycle of shared services raise instead of deadlocking."""
        builder_singleton.register_type(SharedX)
        builder_singleton.register_type(SharedY)
        container = builder_singleton.build()
        start = threading.Barrier(2)
        outcomes: dict[str, Exception] = {}

        def resolve_from(name: str, service_type: type) -> None:
            start.wait(timeout=5)
            try:
                container.resolve(service_type)
            except WireboxCircularDependencyError as e:
                outcomes[name] = e

        threads = [
            threading.Thread(target=resolve_from, args=("x", SharedX)),
            threading.Thread(target=resolve_from, args=("y", SharedY)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert not any(t.is_alive() for t in threads)
        assert set(outcomes) == {"x", "y"}
        assert SharedX.instance_count == 0
        assert SharedY.instance_count == 0


class TestAsyncTaskIsolation:
    @pytest.mark.asyncio
    async def test_tasks_see_isolated_resolution_chains(self) -> None:
        chains: list[tuple[ServiceKey, ...]] = []

        async def capture(key: ServiceKey) -> None:
            with resolving(key):
                await asyncio.sleep(0)
                chains.append(resolution_chain())

        await asyncio.gather(
            capture(ServiceKey.from_value(ServiceA)),
            capture(ServiceKey.from_value(ServiceB)),
        )

        assert sorted(len(chain) for chain in chains) == [1, 1]
        assert resolution_chain() == ()

    @pytest.mark.asyncio
    async def test_resolution_inside_tasks(self, builder: ContainerBuilder) -> None:
        builder.register_type(ServiceA)
        builder.register_type(ServiceB)
        container = builder.build()

        async def resolve() -> ServiceB:
            await asyncio.sleep(0)
            return container.resolve(ServiceB)

        results = await asyncio.gather(*(resolve() for _ in range(5)))

        assert len({id(r) for r in results}) == 5
        assert resolution_chain() == ()
