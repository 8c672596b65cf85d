import dataclasses

import pytest

from executor.clients import ClientBackend, SSHConfig, SymitarConfig
from executor.dispatch import DispatchFailure, dispatch_validation, https_base_url
from executor.result import ChangedFile
from gate.config import ValidationConfig


class _Abort(BaseException):
    pass


class FakeValidator:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.paths = []

    def validate_poweron(self, file_path):
        self.paths.append(file_path)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeCallClient(FakeValidator):
    def __init__(self, outcomes):
        super().__init__(outcomes)
        self.end_calls = 0

    def end(self):
        self.end_calls += 1


class FakeSession:
    def __init__(self, worker, ready_error=None):
        self.worker = worker
        self.ready_error = ready_error
        self.end_calls = 0
        self.symitar_config = None

    def wait_ready(self):
        if self.ready_error is not None:
            raise self.ready_error

    def create_validate_worker(self, symitar_config):
        self.symitar_config = symitar_config
        return self.worker

    def end(self):
        self.end_calls += 1


def _config(**overrides):
    base = ValidationConfig(
        symitar_hostname="sym.example.com",
        sym_number="001",
        symitar_user_number="1234",
        symitar_user_password="password",
        ssh_username="user",
        ssh_password="pass",
        api_key="key",
        symitar_app_port=42627,
        log_prefix="[Test]",
    )
    return dataclasses.replace(base, **overrides)


def _files(*names):
    return [ChangedFile(file_path=f"REPWRITERSPECS/{name}", status="modified") for name in names]


def _backend(outcomes, ready_error=None):
    opened = {}

    def open_session(ssh_config, log_level):
        opened["ssh_config"] = ssh_config
        opened["log_level"] = log_level
        opened["client"] = FakeSession(FakeValidator(outcomes), ready_error)
        return opened["client"]

    def open_client(base_url, symitar_config, log_level, ssh_config):
        opened["base_url"] = base_url
        opened["symitar_config"] = symitar_config
        opened["log_level"] = log_level
        opened["ssh_config"] = ssh_config
        opened["client"] = FakeCallClient(outcomes)
        return opened["client"]

    return ClientBackend(open_session=open_session, open_client=open_client), opened


@pytest.mark.parametrize("connection_type", ["ssh", "https"])
def test_one_failure_one_pass(connection_type):
    backend, opened = _backend([{"isValid": False, "errors": ["bad syntax"]}, {"isValid": True}])
    result = dispatch_validation(_config(connection_type=connection_type), _files("A.PO", "B.PO"), backend)
    assert result.files_validated == 2
    assert result.files_passed == 1
    assert result.files_failed == 1
    assert result.errors == ["A.PO: bad syntax"]
    assert result.validated_files == ["A.PO", "B.PO"]
    assert opened["client"].end_calls == 1


@pytest.mark.parametrize("connection_type", ["ssh", "https"])
def test_raising_validation_is_recorded_and_loop_continues(connection_type):
    backend, opened = _backend(
        [RuntimeError("socket closed"), {"isValid": False, "errors": "missing TARGET"}, {"isValid": True}]
    )
    result = dispatch_validation(
        _config(connection_type=connection_type), _files("A.PO", "B.PO", "C.PO"), backend
    )
    assert result.errors == ["A.PO: socket closed", "B.PO: missing TARGET"]
    assert result.files_failed == 2
    assert result.files_passed == 1
    assert result.files_validated == result.files_passed + result.files_failed
    assert opened["client"].end_calls == 1


@pytest.mark.parametrize("connection_type", ["ssh", "https"])
def test_non_mapping_result_is_recorded_and_loop_continues(connection_type):
    backend, opened = _backend([None, {"isValid": True}])
    result = dispatch_validation(_config(connection_type=connection_type), _files("A.PO", "B.PO"), backend)
    assert result.errors == ["A.PO: invalid validation result"]
    assert result.files_failed == 1
    assert result.files_passed == 1
    assert result.validated_files == ["A.PO", "B.PO"]
    assert opened["client"].end_calls == 1


def test_multiple_error_lines_are_joined():
    backend, _ = _backend([{"isValid": False, "errors": ["line 3: bad", "line 9: worse"]}])
    result = dispatch_validation(_config(), _files("A.PO"), backend)
    assert result.errors == ["A.PO: line 3: bad\nline 9: worse"]


def test_files_validated_in_change_set_order():
    backend, opened = _backend([{"isValid": True}] * 3)
    dispatch_validation(_config(), _files("Z.PO", "A.PO", "M.PO"), backend)
    worker = opened["client"].worker
    assert worker.paths == ["REPWRITERSPECS/Z.PO", "REPWRITERSPECS/A.PO", "REPWRITERSPECS/M.PO"]


def test_session_released_when_readiness_fails():
    backend, opened = _backend([], ready_error=TimeoutError("ssh handshake"))
    with pytest.raises(TimeoutError):
        dispatch_validation(_config(connection_type="ssh"), _files("A.PO"), backend)
    assert opened["client"].end_calls == 1
    assert opened["client"].worker.paths == []


@pytest.mark.parametrize("connection_type", ["ssh", "https"])
def test_client_released_when_loop_is_aborted(connection_type):
    backend, opened = _backend([{"isValid": True}, _Abort()])
    with pytest.raises(_Abort):
        dispatch_validation(_config(connection_type=connection_type), _files("A.PO", "B.PO"), backend)
    assert opened["client"].end_calls == 1


def test_session_strategy_binds_worker_to_symitar_identity():
    backend, opened = _backend([{"isValid": True}])
    dispatch_validation(_config(connection_type="ssh"), _files("A.PO"), backend)
    assert opened["ssh_config"] == SSHConfig(host="sym.example.com", port=22, username="user", password="pass")
    assert opened["log_level"] == "warn"
    assert opened["client"].symitar_config == SymitarConfig(
        sym_number=1, symitar_user_number="1234", symitar_user_password="password"
    )


def test_per_call_strategy_builds_base_url_and_levels():
    backend, opened = _backend([{"isValid": True}])
    dispatch_validation(_config(connection_type="https", debug=True), _files("A.PO"), backend)
    assert opened["base_url"] == "https://sym.example.com:42627"
    assert opened["log_level"] == "debug"
    assert opened["ssh_config"].host is None
    assert opened["symitar_config"].sym_number == 1


def test_base_url_without_app_port():
    assert https_base_url(_config(symitar_app_port=None)) == "https://sym.example.com"


def test_unknown_connection_type_opens_nothing():
    backend, opened = _backend([])
    with pytest.raises(DispatchFailure):
        dispatch_validation(_config(connection_type="telnet"), _files("A.PO"), backend)
    assert opened == {}
