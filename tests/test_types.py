import pytest

from containerz.types import (
    NotFoundError,
    Progress,
    RunningError,
    StartOptions,
    StatusCode,
    StatusError,
    VolumeInfo,
)


def test_with_env():
    envs = ["containerz"]
    opts = StartOptions(envs=envs)
    assert opts.envs == ["containerz"]
    assert opts.ports == []


def test_with_ports():
    ports = ["containerz"]
    opts = StartOptions(ports=ports)
    assert opts.ports == ["containerz"]
    assert opts.envs == []


def test_start_options_defaults_are_independent():
    first = StartOptions()
    second = StartOptions()
    first.envs.append("a=b")
    first.labels["k"] = "v"
    assert second.envs == []
    assert second.labels == {}


def test_not_found_matches_status():
    assert NotFoundError() == StatusError(StatusCode.NOT_FOUND, "resource was not found")


def test_running_matches_status():
    assert RunningError() == StatusError(StatusCode.FAILED_PRECONDITION, "resource is running")


def test_status_errors_differ_by_code():
    assert NotFoundError() != RunningError()
    assert StatusError(StatusCode.INTERNAL, "x") != StatusError(StatusCode.UNKNOWN, "x")


def test_status_error_message():
    assert str(NotFoundError()) == "rpc error: code = NotFound desc = resource was not found"


def test_running_error_code_and_message():
    error = RunningError()
    assert error.code is StatusCode.FAILED_PRECONDITION
    assert str(error) == "rpc error: code = FailedPrecondition desc = resource is running"


def test_status_code_labels_in_message():
    failed = StatusError(StatusCode.FAILED_PRECONDITION, "x")
    ok = StatusError(StatusCode.OK, "fine")
    assert str(failed) == "rpc error: code = FailedPrecondition desc = x"
    assert str(ok) == "rpc error: code = OK desc = fine"


def test_status_error_hash_follows_equality():
    assert len({NotFoundError(), NotFoundError(), RunningError()}) == 2


def test_progress_defaults():
    progress = Progress(bytes_received=26)
    assert progress == Progress(finished=False, image="", tag="", bytes_received=26, error=None)


def test_volume_info_maps_independent():
    first = VolumeInfo()
    first.labels["a"] = "b"
    assert VolumeInfo().labels == {}