"""Interfaces for the external Symitar validation client.

The client that actually talks to the Symitar host is provided by the caller
through a ClientBackend. This module only describes the shapes the dispatcher
relies on and how a backend is located at runtime.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Any, Callable, Literal, Mapping, Protocol

LogLevel = Literal["debug", "info", "warn"]


class BackendLoadError(Exception):
    pass


@dataclass(frozen=True)
class SymitarConfig:
    sym_number: int
    symitar_user_number: str
    symitar_user_password: str


@dataclass(frozen=True)
class SSHConfig:
    port: int
    username: str
    password: str
    host: str | None = None


class PowerOnValidator(Protocol):
    def validate_poweron(self, file_path: str) -> Mapping[str, Any]: ...


class SessionClient(Protocol):
    """Persistent SSH session: one per run, all files validated over it."""

    def wait_ready(self) -> None: ...

    def create_validate_worker(self, symitar_config: SymitarConfig) -> PowerOnValidator: ...

    def end(self) -> None: ...


class CallClient(PowerOnValidator, Protocol):
    """Stateless HTTPS client: every validation is an independent request."""

    def end(self) -> None: ...


@dataclass(frozen=True)
class ClientBackend:
    open_session: Callable[[SSHConfig, LogLevel], SessionClient]
    open_client: Callable[[str, SymitarConfig, LogLevel, SSHConfig], CallClient]


def load_backend(path: str) -> ClientBackend:
    """Resolve `package.module:attribute` to a ClientBackend.

    The attribute may be a ClientBackend instance or a zero-argument callable
    returning one.
    """
    module_name, sep, attr = (path or "").partition(":")
    if not module_name or not sep or not attr:
        raise BackendLoadError(f"Invalid backend path '{path}'. Expected 'module:attribute'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise BackendLoadError(f"Cannot import backend module '{module_name}': {exc}") from exc
    try:
        target = getattr(module, attr)
    except AttributeError as exc:
        raise BackendLoadError(f"Backend module '{module_name}' has no attribute '{attr}'") from exc

    backend = target if isinstance(target, ClientBackend) else None
    if backend is None and callable(target):
        backend = target()
    if not isinstance(backend, ClientBackend):
        raise BackendLoadError(f"Backend '{path}' did not resolve to a ClientBackend")
    return backend
