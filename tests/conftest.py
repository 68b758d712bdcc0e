"""Shared pytest fixtures for wirebox tests."""

import pytest

from wirebox import ContainerBuilder, DuplicatePolicy, Lifetime, LockMode


@pytest.fixture()
def builder() -> ContainerBuilder:
    """Default builder: transient lifetime, last registration wins."""
    return ContainerBuilder()


@pytest.fixture()
def builder_singleton() -> ContainerBuilder:
    """Builder with shared lifetime as default."""
    return ContainerBuilder(default_lifetime=Lifetime.SINGLETON)


@pytest.fixture()
def builder_strict() -> ContainerBuilder:
    """Builder that rejects duplicate registrations."""
    return ContainerBuilder(duplicate_policy=DuplicatePolicy.REJECT)


@pytest.fixture()
def builder_unlocked() -> ContainerBuilder:
    """Builder whose container skips shared-instance locks."""
    return ContainerBuilder(lock_mode=LockMode.NONE)
