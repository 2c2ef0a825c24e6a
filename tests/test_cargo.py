import sys

import pytest

from assertcmd import cargo
from assertcmd.cargo import (
    EXE_SUFFIX,
    CargoError,
    NotFoundError,
    cargo_bin,
    cargo_bin_cmd,
    cargo_runner,
    current_target,
    target_dir,
)


@pytest.fixture
def no_runner(monkeypatch):
    monkeypatch.delenv(cargo._runner_env_var(), raising=False)


@pytest.fixture
def fixture_bin(tmp_path, monkeypatch):
    path = tmp_path / "fixture"
    path.write_text("")
    monkeypatch.setenv("CARGO_BIN_EXE_fixture", str(path))
    return path


def test_current_target_linux_amd64(monkeypatch):
    monkeypatch.setattr(cargo.platform, "machine", lambda: "AMD64")
    monkeypatch.setattr(cargo.sys, "platform", "linux")
    assert current_target() == "x86_64-unknown-linux-gnu"


def test_current_target_is_triplet_like():
    parts = current_target().split("-")
    assert len(parts) >= 3
    assert all(parts)


def test_runner_env_var_shape():
    name = cargo._runner_env_var()
    assert name.startswith("CARGO_TARGET_")
    assert name.endswith("_RUNNER")
    assert "-" not in name
    assert name == name.upper()


def test_cargo_runner_absent(no_runner):
    assert cargo_runner() is None


def test_cargo_runner_splits_on_spaces(monkeypatch):
    monkeypatch.setenv(cargo._runner_env_var(), "qemu -L /sysroot")
    assert cargo_runner() == ["qemu", "-L", "/sysroot"]


def test_target_dir_skips_deps(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "executable", str(tmp_path / "deps" / "python"))
    assert target_dir() == tmp_path


def test_target_dir_plain(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "executable", str(tmp_path / "bin" / "python"))
    assert target_dir() == tmp_path / "bin"


def test_target_dir_without_executable(monkeypatch):
    monkeypatch.setattr(sys, "executable", "")
    with pytest.raises(RuntimeError):
        target_dir()


def test_cargo_bin_from_env(fixture_bin):
    assert cargo_bin("fixture") == fixture_bin


def test_cargo_bin_falls_back_to_target_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("CARGO_BIN_EXE_other", raising=False)
    monkeypatch.setattr(sys, "executable", str(tmp_path / "deps" / "python"))
    assert cargo_bin("other") == tmp_path / f"other{EXE_SUFFIX}"


def test_cargo_bin_cmd_direct(fixture_bin, no_runner):
    assert cargo_bin_cmd("fixture") == [str(fixture_bin)]


def test_cargo_bin_cmd_with_runner(fixture_bin, monkeypatch):
    monkeypatch.setenv(cargo._runner_env_var(), "wrapper --flag")
    assert cargo_bin_cmd("fixture") == ["wrapper", "--flag", str(fixture_bin)]


def test_cargo_bin_cmd_missing(tmp_path, monkeypatch):
    missing = tmp_path / "missing"
    monkeypatch.setenv("CARGO_BIN_EXE_missing", str(missing))
    with pytest.raises(CargoError) as info:
        cargo_bin_cmd("missing")
    err = info.value
    assert isinstance(err.cause, NotFoundError)
    assert err.cause.path == missing
    assert str(err) == f"Cause: Cargo command not found: {missing}\n\n"


def test_cargo_bin_cmd_directory_is_not_a_binary(tmp_path, monkeypatch):
    monkeypatch.setenv("CARGO_BIN_EXE_dir", str(tmp_path))
    with pytest.raises(CargoError):
        cargo_bin_cmd("dir")


def test_cargo_error_without_cause_is_empty():
    assert str(CargoError()) == ""


def test_cargo_error_with_cause_chains():
    cause = ValueError("boom")
    err = CargoError.with_cause(cause)
    assert err.cause is cause
    assert err.__cause__ is cause
    assert str(err) == "Cause: boom\n"


def test_cargo_error_with_cause_rejects_non_exception():
    with pytest.raises(TypeError):
        CargoError.with_cause("not an error")