from wirebox.lock_mode import LockMode
from wirebox.types import DuplicatePolicy, Lifetime

DEFAULT_LIFETIME = Lifetime.TRANSIENT

DEFAULT_DUPLICATE_POLICY = DuplicatePolicy.LAST_WINS

DEFAULT_LOCK_MODE = LockMode.THREAD
