"""advlock: advisory file locks over flock, on the file or a sidecar."""

from .config import LockConfig, load_config
from .errors import AdvlockError, ConfigError, InvalidPathError, LockNotAcquiredError
from .filelock import FileLock, LockMethod, file_lock, safe_append, safe_write

__version__ = "0.1.0"

__all__ = [
    "AdvlockError",
    "ConfigError",
    "FileLock",
    "InvalidPathError",
    "LockConfig",
    "LockMethod",
    "LockNotAcquiredError",
    "file_lock",
    "load_config",
    "safe_append",
    "safe_write",
]
