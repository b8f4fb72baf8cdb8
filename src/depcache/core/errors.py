"""Core exceptions for depcache."""


class DepCacheError(Exception):
    """Base exception for depcache."""

    pass


class LockfileNotFoundError(DepCacheError):
    """Lockfile does not exist."""

    pass


class StorageError(DepCacheError):
    """Object store request failed."""

    pass


class CacheTimeoutError(StorageError):
    """Object store request exceeded the configured timeout."""

    pass


class ArchiveError(DepCacheError):
    """Archive could not be created or extracted."""

    pass


class InstallFailedError(DepCacheError):
    """The package manager's install command failed."""

    def __init__(self, ecosystem: str, command: str, returncode: int):
        super().__init__(f"{ecosystem} install failed: `{command}` exited with {returncode}")
        self.ecosystem = ecosystem
        self.command = command
        self.returncode = returncode
