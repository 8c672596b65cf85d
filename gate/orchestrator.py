from changeset.branches import resolve_branch
from changeset.scanner import get_changed_files
from executor.clients import ClientBackend
from executor.dispatch import dispatch_validation
from executor.result import ValidationResult
from gate.config import ValidationConfig, validate_config
from gate.logger import info, log_event
from licensing.retry import RetryPolicy
from licensing.subscription import validate_api_key


def validate_powerons(
    config: ValidationConfig,
    backend: ClientBackend,
    *,
    retry_policy: RetryPolicy | None = None,
    license_validator=validate_api_key,
) -> ValidationResult:
    """
    License check, change-set resolution, then one dispatch over the files.
    Configuration problems (bad inputs, unknown target branch) surface before
    the license service is contacted; no Symitar client is created when
    there is nothing to validate.
    """
    prefix = config.log_prefix
    validate_config(config)

    resolved_ref = None
    if config.target_branch:
        resolved_ref = resolve_branch(config.target_branch)
        info(f"{prefix} Comparing against {resolved_ref}")

    info(f"{prefix} Validating API key...")
    license_validator(config.api_key, config.symitar_hostname, policy=retry_policy)
    info(f"{prefix} API key validation successful")

    files = get_changed_files(
        config.target_branch,
        config.poweron_directory,
        config.ignore_list,
        resolved_ref=resolved_ref,
    )
    if not files:
        info(f"{prefix} No PowerOn files found to validate")
        log_event("orchestrator", f"empty_change_set dir={config.poweron_directory}")
        return ValidationResult.empty()

    info(f"{prefix} Found {len(files)} file(s) to validate:")
    for changed in files:
        info(f"{prefix} - {changed.file_path} ({changed.status})")

    return dispatch_validation(config, files, backend)
