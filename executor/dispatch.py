import posixpath
from collections.abc import Mapping

from executor.clients import ClientBackend, SSHConfig, SymitarConfig
from executor.result import ChangedFile, ValidationResult
from gate.config import ValidationConfig
from gate.logger import info, log_event


class DispatchFailure(Exception):
    pass


def symitar_config_for(config: ValidationConfig) -> SymitarConfig:
    return SymitarConfig(
        sym_number=int(config.sym_number, 10),
        symitar_user_number=config.symitar_user_number,
        symitar_user_password=config.symitar_user_password,
    )


def ssh_config_for(config: ValidationConfig, *, with_host: bool) -> SSHConfig:
    return SSHConfig(
        host=config.symitar_hostname if with_host else None,
        port=config.ssh_port,
        username=config.ssh_username,
        password=config.ssh_password,
    )


def https_base_url(config: ValidationConfig) -> str:
    if config.symitar_app_port:
        return f"https://{config.symitar_hostname}:{config.symitar_app_port}"
    return f"https://{config.symitar_hostname}"


def _log_level(config: ValidationConfig, default: str) -> str:
    return "debug" if config.debug else default


def _error_text(errors) -> str:
    if isinstance(errors, (list, tuple)):
        return "\n".join(str(e) for e in errors)
    return "" if errors is None else str(errors)


def validate_files(validator, files: list[ChangedFile], log_prefix: str) -> ValidationResult:
    """
    Run every file through validator.validate_poweron in change-set order.
    A failing or raising file is recorded and the loop moves on.
    """
    errors: list[str] = []
    validated_files: list[str] = []
    files_failed = 0

    for changed in files:
        file_name = posixpath.basename(changed.file_path)
        validated_files.append(file_name)
        info(f"{log_prefix} Validating {changed.file_path}...")
        try:
            outcome = validator.validate_poweron(changed.file_path)
        except Exception as exc:
            files_failed += 1
            errors.append(f"{file_name}: {str(exc) or exc.__class__.__name__}")
            log_event("dispatch", f"file={file_name} result=ERROR error={exc.__class__.__name__}")
            continue

        if not isinstance(outcome, Mapping):
            files_failed += 1
            errors.append(f"{file_name}: invalid validation result")
            log_event("dispatch", f"file={file_name} result=ERROR error=invalid_result")
            continue

        if not outcome.get("isValid", False):
            files_failed += 1
            errors.append(f"{file_name}: {_error_text(outcome.get('errors'))}")
            log_event("dispatch", f"file={file_name} result=FAIL")
        else:
            log_event("dispatch", f"file={file_name} result=PASS")

    return ValidationResult(
        files_validated=len(files),
        files_passed=len(files) - files_failed,
        files_failed=files_failed,
        errors=errors,
        validated_files=validated_files,
    )


def _validate_over_session(config, files, backend):
    client = backend.open_session(ssh_config_for(config, with_host=True), _log_level(config, "warn"))
    try:
        client.wait_ready()
        worker = client.create_validate_worker(symitar_config_for(config))
        return validate_files(worker, files, config.log_prefix)
    finally:
        client.end()
        log_event("dispatch", f"session_closed host={config.symitar_hostname}")


def _validate_per_call(config, files, backend):
    client = backend.open_client(
        https_base_url(config),
        symitar_config_for(config),
        _log_level(config, "info"),
        ssh_config_for(config, with_host=False),
    )
    try:
        return validate_files(client, files, config.log_prefix)
    finally:
        client.end()
        log_event("dispatch", f"client_closed host={config.symitar_hostname}")


_STRATEGIES = {
    "ssh": _validate_over_session,
    "https": _validate_per_call,
}


def dispatch_validation(
    config: ValidationConfig,
    files: list[ChangedFile],
    backend: ClientBackend,
) -> ValidationResult:
    strategy = _STRATEGIES.get(config.connection_type)
    if strategy is None:
        raise DispatchFailure(f"validation.dispatch.unknown_connection_type {config.connection_type}")

    log_event(
        "dispatch",
        f"start connection={config.connection_type} host={config.symitar_hostname} files={len(files)}",
    )
    result = strategy(config, files, backend)
    result.validate_counts()
    log_event(
        "dispatch",
        f"done validated={result.files_validated} passed={result.files_passed} failed={result.files_failed}",
    )
    return result
