from __future__ import annotations

from enum import Enum


class Lifetime(str, Enum):
    """Defines the lifetime of a service in the container."""

    TRANSIENT = "transient"
    """A new instance is created every time the service is requested."""

    SINGLETON = "singleton"
    """A single instance is created and shared for the lifetime of the container."""


class DuplicatePolicy(str, Enum):
    """Decide what happens when two registrations claim the same service key."""

    LAST_WINS = "last_wins"
    """The most recent registration shadows earlier ones for single resolution."""

    REJECT = "reject"
    """Building the container fails with ``WireboxAmbiguousRegistrationError``."""
