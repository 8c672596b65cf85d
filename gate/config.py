import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from gate.logger import log_event
from licensing.retry import RetryPolicy


class ConfigError(Exception):
    pass


DEFAULT_CONNECTION_TYPE = "ssh"
DEFAULT_POWERON_DIRECTORY = "REPWRITERSPECS/"
DEFAULT_SSH_PORT = 22
DEFAULT_LOG_PREFIX = "[ValidatePowerOn]"
CONNECTION_TYPES = ("ssh", "https")

REQUIRED_INPUTS = (
    "symitar-hostname",
    "sym-number",
    "symitar-user-number",
    "symitar-user-password",
    "ssh-username",
    "ssh-password",
)
SECRET_INPUTS = ("api-key", "symitar-user-password", "ssh-password")

_HOSTNAME_RE = re.compile(r"^[a-zA-Z0-9.-]+$")


@dataclass(frozen=True)
class ValidationConfig:
    symitar_hostname: str
    sym_number: str
    symitar_user_number: str
    symitar_user_password: str
    ssh_username: str
    ssh_password: str
    api_key: str
    ssh_port: int = DEFAULT_SSH_PORT
    symitar_app_port: int | None = None
    connection_type: str = DEFAULT_CONNECTION_TYPE
    poweron_directory: str = DEFAULT_POWERON_DIRECTORY
    target_branch: str | None = None
    ignore_list: tuple[str, ...] = field(default_factory=tuple)
    log_prefix: str = DEFAULT_LOG_PREFIX
    debug: bool = False


def _valid_port(value):
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 65535


def validate_config(config: ValidationConfig) -> None:
    if config.connection_type not in CONNECTION_TYPES:
        raise ConfigError(
            f'Invalid connection type: {config.connection_type}. Must be "https" or "ssh"'
        )
    if not _HOSTNAME_RE.match(config.symitar_hostname or ""):
        raise ConfigError(f"Invalid hostname format: {config.symitar_hostname}")
    if not (config.sym_number or "").isdigit():
        raise ConfigError(f"Invalid sym-number: {config.sym_number}. Must be numeric")
    if not _valid_port(config.ssh_port):
        raise ConfigError(f"Invalid SSH port: {config.ssh_port}. Must be between 1-65535")
    if config.connection_type == "https" and config.symitar_app_port is None:
        raise ConfigError("symitar-app-port is required when using HTTPS connection type")
    if config.symitar_app_port is not None and not _valid_port(config.symitar_app_port):
        raise ConfigError(
            f"Invalid symitar-app-port: {config.symitar_app_port}. Must be between 1-65535"
        )
    if not config.poweron_directory:
        raise ConfigError("poweron-directory must not be empty")


def parse_ignore_list(raw):
    if isinstance(raw, (list, tuple)):
        items = [str(item) for item in raw]
    else:
        items = str(raw or "").split(",")
    return tuple(item.strip() for item in items if item.strip())


def _parse_port(raw, label):
    try:
        return int(str(raw).strip(), 10)
    except ValueError as exc:
        raise ConfigError(f"Invalid {label}: {raw}. Must be between 1-65535") from exc


def _parse_bool(raw):
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("true", "1", "yes", "on")


def read_action_inputs(environ=None):
    """Collect `INPUT_<NAME>` values the Actions runner exports, keyed by input name."""
    environ = os.environ if environ is None else environ
    inputs = {}
    for key, value in environ.items():
        if key.startswith("INPUT_") and value.strip():
            inputs[key[len("INPUT_"):].lower()] = value.strip()
    return inputs


def load_config_file(path):
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        log_event("config", f"load_failed path={path} error={exc}")
        raise ConfigError(f"Failed to read config: {exc}") from exc
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        log_event("config", f"parse_failed path={path} error={exc}")
        raise ConfigError(f"Failed to parse config YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        log_event("config", f"invalid_mapping path={path}")
        raise ConfigError("Config YAML must be a mapping")
    log_event("config", f"loaded path={path} top_keys={','.join(sorted(str(k) for k in data))}")
    return data


def retry_policy_from(settings, environ=None):
    environ = os.environ if environ is None else environ
    license_cfg = settings.get("license") or {}
    if not isinstance(license_cfg, dict):
        raise ConfigError("license must be a mapping")
    retry_cfg = license_cfg.get("retry") or {}
    if not isinstance(retry_cfg, dict):
        raise ConfigError("license.retry must be a mapping")
    max_env = environ.get("POWERON_LICENSE_RETRY_MAX")
    backoff_env = environ.get("POWERON_LICENSE_RETRY_BACKOFF")
    defaults = RetryPolicy()
    try:
        return RetryPolicy(
            max_attempts=int(max_env if max_env else retry_cfg.get("max_attempts", defaults.max_attempts)),
            base_delay=float(retry_cfg.get("base_delay", defaults.base_delay)),
            multiplier=float(backoff_env if backoff_env else retry_cfg.get("multiplier", defaults.multiplier)),
            max_delay=float(retry_cfg.get("max_delay", defaults.max_delay)),
        )
    except ValueError as exc:
        raise ConfigError(f"Invalid license retry settings: {exc}") from exc


def build_config(inputs):
    missing = [name for name in REQUIRED_INPUTS if not str(inputs.get(name) or "").strip()]
    if missing:
        raise ConfigError(f"Input required and not supplied: {', '.join(missing)}")

    app_port_raw = inputs.get("symitar-app-port")
    config = ValidationConfig(
        symitar_hostname=str(inputs["symitar-hostname"]).strip(),
        sym_number=str(inputs["sym-number"]).strip().zfill(3),
        symitar_user_number=str(inputs["symitar-user-number"]),
        symitar_user_password=str(inputs["symitar-user-password"]),
        ssh_username=str(inputs["ssh-username"]),
        ssh_password=str(inputs["ssh-password"]),
        api_key=str(inputs.get("api-key") or ""),
        ssh_port=_parse_port(inputs.get("ssh-port") or DEFAULT_SSH_PORT, "SSH port"),
        symitar_app_port=_parse_port(app_port_raw, "symitar-app-port") if app_port_raw else None,
        connection_type=str(inputs.get("connection-type") or DEFAULT_CONNECTION_TYPE).strip().lower(),
        poweron_directory=str(inputs.get("poweron-directory") or DEFAULT_POWERON_DIRECTORY),
        target_branch=str(inputs.get("target-branch") or "").strip() or None,
        ignore_list=parse_ignore_list(inputs.get("validate-ignore")),
        log_prefix=str(inputs.get("log-prefix") or DEFAULT_LOG_PREFIX),
        debug=_parse_bool(inputs.get("debug", False)),
    )
    validate_config(config)
    return config


def load_config(config_path=None, environ=None):
    """Build the run configuration from an optional YAML file and Actions inputs.

    Environment inputs override values from the file. Returns the validated
    ValidationConfig and the license RetryPolicy.
    """
    environ = os.environ if environ is None else environ
    settings = load_config_file(config_path) if config_path else {}
    inputs = {k: v for k, v in settings.items() if k != "license"}
    inputs.update(read_action_inputs(environ))
    if environ.get("RUNNER_DEBUG") == "1" and "debug" not in inputs:
        inputs["debug"] = True
    return build_config(inputs), retry_policy_from(settings, environ)
