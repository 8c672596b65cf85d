import argparse
import os
import sys
import traceback

from changeset.branches import BranchNotFoundError
from executor.clients import BackendLoadError, load_backend
from gate import __version__
from gate.config import (
    DEFAULT_LOG_PREFIX,
    SECRET_INPUTS,
    ConfigError,
    load_config,
    read_action_inputs,
)
from gate.logger import debug, error, info, log_event, register_secret
from gate.orchestrator import validate_powerons
from gate.report import summary_lines, validation_report, write_outputs, write_validation_artifact
from licensing.subscription import AuthenticationError, LicenseConnectionError


def _parse_args(argv):
    parser = argparse.ArgumentParser(
        prog="poweron-gate",
        description="Validate changed PowerOn files against a Symitar host.",
    )
    parser.add_argument(
        "--config",
        default=os.environ.get("POWERON_GATE_CONFIG"),
        help="YAML file with action inputs; INPUT_* environment variables override it",
    )
    parser.add_argument(
        "--backend",
        default=os.environ.get("POWERON_GATE_BACKEND"),
        help="module:attribute resolving to the Symitar ClientBackend",
    )
    parser.add_argument(
        "--artifact-dir",
        default=os.environ.get("POWERON_GATE_ARTIFACT_DIR"),
        help="write a JSON result artifact into this directory",
    )
    return parser.parse_args(argv)


def _log_banner(config):
    prefix = config.log_prefix
    info(f"{prefix} Starting PowerOn validation (v{__version__})")
    info(f"{prefix} Connection Type: {config.connection_type.upper()}")
    info(f"{prefix} Hostname: {config.symitar_hostname}")
    info(f"{prefix} Sym: {config.sym_number}")
    info(f"{prefix} Directory: {config.poweron_directory}")
    info(f"{prefix} API Key: {'provided' if config.api_key else 'missing'}")
    if config.connection_type == "ssh":
        info(f"{prefix} SSH Username: {config.ssh_username}")
        info(f"{prefix} SSH Port: {config.ssh_port}")
    else:
        info(f"{prefix} Symitar App Port: {config.symitar_app_port}")
    if config.ignore_list:
        info(f"{prefix} Ignoring: {', '.join(config.ignore_list)}")


def _report_failure(prefix, exc):
    if isinstance(exc, AuthenticationError):
        error(f"{prefix} Authentication failed: {exc}")
        error(f"{prefix} API Key: {exc.masked_key}")
        error(f"{prefix} Host: {exc.host}")
        error(f"API key validation failed: {exc}")
    elif isinstance(exc, LicenseConnectionError):
        error(f"{prefix} Connection failed: {exc}")
        error(f"{prefix} Host: {exc.host}:{exc.port}")
        if exc.original_error is not None:
            error(f"{prefix} Original error: {exc.original_error}")
        error(f"Failed to connect to license server: {exc}")
    elif isinstance(exc, (ConfigError, BranchNotFoundError, BackendLoadError)):
        error(f"{prefix} Configuration error: {exc}")
    else:
        error(f"{prefix} Unexpected error: {exc}")
        error(str(exc))
    debug(f"{prefix} Stack trace: {''.join(traceback.format_exception(exc))}")
    log_event("main", f"FINAL result=ERROR error={exc.__class__.__name__}")


def run(argv=None, environ=None):
    environ = os.environ if environ is None else environ
    args = _parse_args(argv)
    prefix = DEFAULT_LOG_PREFIX

    try:
        raw_inputs = read_action_inputs(environ)
        for name in SECRET_INPUTS:
            register_secret(raw_inputs.get(name))

        config, retry_policy = load_config(args.config, environ)
        for secret in (config.api_key, config.symitar_user_password, config.ssh_password):
            register_secret(secret)
        prefix = config.log_prefix

        if not args.backend:
            raise ConfigError("No Symitar client backend configured (use --backend or POWERON_GATE_BACKEND)")
        backend = load_backend(args.backend)

        _log_banner(config)
        result = validate_powerons(config, backend, retry_policy=retry_policy)
    except Exception as exc:
        _report_failure(prefix, exc)
        return 1

    write_outputs(result, environ.get("GITHUB_OUTPUT"))
    for line in summary_lines(result, prefix):
        info(line)
    log_event("main", validation_report(result, config.connection_type, config.target_branch))
    if args.artifact_dir:
        run_id = environ.get("GITHUB_SHA") or environ.get("GITHUB_RUN_ID") or "local"
        write_validation_artifact(result, run_id, root=args.artifact_dir)

    if result.files_failed > 0:
        info("")
        error(f"{prefix} Validation failed for {result.files_failed} file(s):")
        for message in result.errors:
            error(f"{prefix} {message}")
        error(f"Found {result.files_failed} invalid PowerOn file(s)")
        return 1

    info(f"{prefix} All PowerOn files validated successfully!")
    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
