"""
kvcommons - unit tests for the registration executable wrapper

File: tests/unit/registrar/test_registrar_runner.py

Purpose
- Validate argument mapping, executable discovery and failure modes with an injected
  command runner, and live output relay of the default runner against a real child.
"""

from __future__ import annotations

import io
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import IO

import pytest

from kvcommons.registrar import (
    ArtifactNotFoundError,
    CommandResult,
    ExecutableNotFoundError,
    Registrar,
    RegistrarSettings,
    RegistrarTimeoutError,
    RegistrarUsageError,
    SubprocessRunner,
    build_command,
    locate_executable,
    render_command_line,
)


class _FakeRunner:
    def __init__(self, *, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.calls: list[tuple[tuple[str, ...], float | None]] = []
        self._returncode = returncode
        self._stdout = stdout
        self._stderr = stderr

    def run(
        self,
        command: Sequence[str],
        *,
        timeout_seconds: float | None,
        stdout: IO[str] | None = None,
        stderr: IO[str] | None = None,
    ) -> CommandResult:
        self.calls.append((tuple(command), timeout_seconds))
        for text, sink in ((self._stdout, stdout), (self._stderr, stderr)):
            if text and sink is not None:
                sink.write(text)
        return CommandResult(
            command=tuple(command),
            returncode=self._returncode,
            stdout=self._stdout,
            stderr=self._stderr,
        )


def _no_path_lookup(name: str) -> str | None:
    return None


@pytest.fixture()
def artifact(tmp_path: Path) -> Path:
    path = tmp_path / "Sample.dll"
    path.write_bytes(b"MZ")
    return path


@pytest.fixture()
def executable(tmp_path: Path) -> Path:
    path = tmp_path / "bin" / "RegAsm.exe"
    path.parent.mkdir()
    path.write_text("", encoding="utf-8")
    return path


@pytest.mark.unit
def test_register_passes_codebase_arguments_and_relays_output(artifact: Path, executable: Path) -> None:
    runner = _FakeRunner(returncode=0, stdout="Types registered successfully\n", stderr="warning\n")
    registrar = Registrar(RegistrarSettings(executable=str(executable), timeout_seconds=5.0), runner=runner)
    out, err = io.StringIO(), io.StringIO()

    code = registrar.register(artifact, stdout=out, stderr=err)

    assert code == 0
    assert runner.calls == [
        ((str(executable.resolve()), str(artifact), "/nologo", "/tlb", "/codebase"), 5.0)
    ]
    assert out.getvalue() == "Types registered successfully\n"
    assert err.getvalue() == "warning\n"


@pytest.mark.unit
def test_unregister_passes_uninstall_arguments_and_returns_child_exit_code(
    artifact: Path, executable: Path
) -> None:
    runner = _FakeRunner(returncode=100, stderr="RegAsm : error RA0000\n")
    registrar = Registrar(RegistrarSettings(executable=str(executable)), runner=runner)
    err = io.StringIO()

    code = registrar.unregister(artifact, stdout=io.StringIO(), stderr=err)

    assert code == 100
    assert runner.calls[0][0][1:] == (str(artifact), "/nologo", "/u")
    assert err.getvalue() == "RegAsm : error RA0000\n"


@pytest.mark.unit
def test_missing_artifact_is_reported_before_spawning(tmp_path: Path, executable: Path) -> None:
    runner = _FakeRunner()
    registrar = Registrar(RegistrarSettings(executable=str(executable)), runner=runner)

    with pytest.raises(ArtifactNotFoundError, match="Missing.dll"):
        registrar.register(tmp_path / "Missing.dll")

    assert runner.calls == []


@pytest.mark.unit
def test_missing_executable_is_reported_before_spawning(artifact: Path) -> None:
    runner = _FakeRunner()
    registrar = Registrar(RegistrarSettings(), runner=runner, which=_no_path_lookup)

    with pytest.raises(ExecutableNotFoundError, match="RegAsm.exe, regasm"):
        registrar.register(artifact)

    assert runner.calls == []


@pytest.mark.unit
def test_unknown_action_is_a_usage_error(artifact: Path, executable: Path) -> None:
    registrar = Registrar(RegistrarSettings(executable=str(executable)), runner=_FakeRunner())

    with pytest.raises(RegistrarUsageError, match="unsupported action"):
        registrar.run("install", artifact)
    with pytest.raises(RegistrarUsageError, match="artifact path is required"):
        registrar.run("register", " ")


@pytest.mark.unit
def test_locate_executable_prefers_configured_path_then_path_lookup(executable: Path) -> None:
    seen: list[str] = []

    def _which(name: str) -> str | None:
        seen.append(name)
        return "/opt/mono/bin/regasm" if name == "regasm" else None

    assert locate_executable(str(executable), which=_which) == executable.resolve()
    assert seen == []
    assert locate_executable("", which=_which) == Path("/opt/mono/bin/regasm")
    assert seen == ["RegAsm.exe", "regasm"]

    with pytest.raises(ExecutableNotFoundError, match="custom-tool"):
        locate_executable("custom-tool", which=_no_path_lookup)


@pytest.mark.unit
def test_settings_from_config_and_custom_argument_tails(artifact: Path) -> None:
    settings = RegistrarSettings.from_config(
        {
            "registrar": {
                "executable": "",
                "timeout_seconds": 10,
                "register_args": ["/tlb"],
                "unregister_args": ["/u", "/silent"],
            }
        }
    )

    assert settings.timeout_seconds == 10.0
    assert build_command("register", artifact, "regasm", settings) == ("regasm", str(artifact), "/tlb")
    assert build_command("unregister", artifact, "regasm", settings)[2:] == ("/u", "/silent")
    with pytest.raises(ValueError, match="timeout_seconds"):
        RegistrarSettings(timeout_seconds=0)


@pytest.mark.unit
def test_render_command_line_quotes_only_when_needed() -> None:
    rendered = render_command_line(["C:\\Tools\\RegAsm.exe", "C:\\My Libs\\a.dll", "/nologo"])

    assert rendered == 'C:\\Tools\\RegAsm.exe "C:\\My Libs\\a.dll" /nologo'


@pytest.mark.unit
def test_subprocess_runner_relays_and_captures_output_and_exit_code() -> None:
    out, err = io.StringIO(), io.StringIO()

    result = SubprocessRunner().run(
        [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"],
        timeout_seconds=30.0,
        stdout=out,
        stderr=err,
    )

    assert result.returncode == 3
    assert result.stdout.strip() == "out"
    assert result.stderr.strip() == "err"
    assert out.getvalue() == result.stdout
    assert err.getvalue() == result.stderr


class _MarkerSink(io.StringIO):
    """Stream that drops a marker file on first write."""

    def __init__(self, marker: Path) -> None:
        super().__init__()
        self._marker = marker

    def write(self, text: str) -> int:
        self._marker.write_text("seen", encoding="utf-8")
        return super().write(text)


@pytest.mark.unit
def test_subprocess_runner_relays_lines_while_child_is_running(tmp_path: Path) -> None:
    marker = tmp_path / "relayed"
    # The child only exits cleanly once its first line has reached the sink.
    script = (
        "import os, sys, time\n"
        "print('registering', flush=True)\n"
        "deadline = time.monotonic() + 20\n"
        "while not os.path.exists(sys.argv[1]):\n"
        "    if time.monotonic() > deadline:\n"
        "        sys.exit(1)\n"
        "    time.sleep(0.01)\n"
        "print('done', flush=True)\n"
    )
    sink = _MarkerSink(marker)

    result = SubprocessRunner().run(
        [sys.executable, "-c", script, str(marker)],
        timeout_seconds=30.0,
        stdout=sink,
        stderr=io.StringIO(),
    )

    assert result.returncode == 0
    assert sink.getvalue() == "registering\ndone\n"


@pytest.mark.unit
def test_subprocess_runner_timeout_is_typed() -> None:
    with pytest.raises(RegistrarTimeoutError, match="timed out after 0.5 seconds"):
        SubprocessRunner().run(
            [sys.executable, "-c", "import time; time.sleep(30)"],
            timeout_seconds=0.5,
        )
