import pytest

from gate import logger

_GATE_ENV = (
    "GITHUB_WORKSPACE",
    "GITHUB_OUTPUT",
    "RUNNER_DEBUG",
    "POWERON_LICENSE_RETRY_MAX",
    "POWERON_LICENSE_RETRY_BACKOFF",
    "POWERON_GATE_CONFIG",
    "POWERON_GATE_BACKEND",
    "POWERON_GATE_ARTIFACT_DIR",
)


@pytest.fixture(autouse=True)
def _isolated_gate_env(tmp_path, monkeypatch):
    monkeypatch.setenv("POWERON_GATE_LOG_PATH", str(tmp_path / "logs" / "poweron-gate.log"))
    for name in _GATE_ENV:
        monkeypatch.delenv(name, raising=False)
    logger.clear_secrets()
    yield
    logger.clear_secrets()
