"""Symitar validation dispatch package."""

from executor.clients import (
    BackendLoadError,
    ClientBackend,
    SSHConfig,
    SymitarConfig,
    load_backend,
)
from executor.dispatch import DispatchFailure, dispatch_validation
from executor.result import ChangedFile, ValidationResult, utc_iso8601

__all__ = [
    "BackendLoadError",
    "ChangedFile",
    "ClientBackend",
    "DispatchFailure",
    "SSHConfig",
    "SymitarConfig",
    "ValidationResult",
    "dispatch_validation",
    "load_backend",
    "utc_iso8601",
]
