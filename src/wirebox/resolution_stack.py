from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from wirebox.exceptions import WireboxCircularDependencyError
from wirebox.service_key import ServiceKey

# Immutable chain of keys being built in the current context. Threads start
# with an empty context and asyncio tasks copy their parent's, so a tuple
# that is replaced (never mutated) keeps every task and thread isolated.
_in_progress: ContextVar[tuple[ServiceKey, ...]] = ContextVar(
    "wirebox_in_progress",
    default=(),
)


def resolution_chain() -> tuple[ServiceKey, ...]:
    """Keys currently being built in this context, outermost first."""
    return _in_progress.get()


@contextmanager
def resolving(service_key: ServiceKey) -> Iterator[None]:
    """Mark ``service_key`` as in progress for the duration of the block.

    Raises:
        WireboxCircularDependencyError: If the key is already in progress in
            the current context.

    """
    chain = _in_progress.get()
    if service_key in chain:
        raise WireboxCircularDependencyError(service_key, chain)
    token = _in_progress.set((*chain, service_key))
    try:
        yield
    finally:
        _in_progress.reset(token)
