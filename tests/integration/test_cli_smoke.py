"""
kvcommons - CLI subprocess smoke contracts

File: tests/integration/test_cli_smoke.py

Purpose
- Run ``python -m kvcommons`` end to end against a stub registration executable.
- Verify argument forwarding, output relay, child exit-code passthrough, and the
  error exit codes of the process boundary.
"""

from __future__ import annotations

import json
import os
import stat
import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(os.name == "nt", reason="stub executable relies on a POSIX shebang"),
]


def _run_cli(cwd: Path, *args: str, extra_env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    for name in list(env):
        if name.startswith("KVCOMMONS_"):
            del env[name]
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath if not existing_pythonpath else f"{src_pythonpath}{os.pathsep}{existing_pythonpath}"
    )
    env.update(extra_env or {})
    return subprocess.run(
        [sys.executable, "-m", "kvcommons", *args],
        cwd=cwd,
        text=True,
        capture_output=True,
        check=False,
        env=env,
        timeout=60,
    )


def _write_stub_executable(directory: Path, *, exit_code: int) -> tuple[Path, Path]:
    """Create a fake registration executable that records its argv as JSON."""

    record = directory / "argv.json"
    script = directory / "fake-regasm"
    script.write_text(
        f"#!{sys.executable}\n"
        "import json, sys\n"
        f"with open({str(record)!r}, 'w', encoding='utf-8') as handle:\n"
        "    json.dump(sys.argv[1:], handle)\n"
        "print('Microsoft .NET Framework Assembly Registration Utility (stub)')\n"
        "print('stub diagnostics', file=sys.stderr)\n"
        f"sys.exit({exit_code})\n",
        encoding="utf-8",
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script, record


@pytest.fixture()
def artifact(tmp_path: Path) -> Path:
    path = tmp_path / "Component.dll"
    path.write_bytes(b"MZ")
    return path


def test_register_subcommand_forwards_arguments_and_relays_output(tmp_path: Path, artifact: Path) -> None:
    script, record = _write_stub_executable(tmp_path, exit_code=0)

    completed = _run_cli(
        tmp_path,
        "register",
        str(artifact),
        extra_env={"KVCOMMONS_REGISTRAR_EXECUTABLE": str(script)},
    )

    assert completed.returncode == 0, completed.stderr
    assert json.loads(record.read_text(encoding="utf-8")) == [
        str(artifact),
        "/nologo",
        "/tlb",
        "/codebase",
    ]
    assert "Assembly Registration Utility (stub)" in completed.stdout
    assert "stub diagnostics" in completed.stderr


def test_legacy_unregister_flag_passes_child_exit_code_through(tmp_path: Path, artifact: Path) -> None:
    script, record = _write_stub_executable(tmp_path, exit_code=100)
    (tmp_path / "kvcommons.toml").write_text(
        f"[registrar]\nexecutable = {json.dumps(script.name)}\n",
        encoding="utf-8",
    )

    completed = _run_cli(tmp_path, "--unregister", str(artifact))

    assert completed.returncode == 100
    assert json.loads(record.read_text(encoding="utf-8")) == [str(artifact), "/nologo", "/u"]


def test_missing_artifact_and_bad_usage_exit_codes(tmp_path: Path) -> None:
    script, record = _write_stub_executable(tmp_path, exit_code=0)
    env = {"KVCOMMONS_REGISTRAR_EXECUTABLE": str(script)}

    missing = _run_cli(tmp_path, "register", str(tmp_path / "Nope.dll"), extra_env=env)
    assert missing.returncode == 2
    assert "artifact to process was not found" in missing.stderr
    assert not record.exists()

    usage = _run_cli(tmp_path, "--register", extra_env=env)
    assert usage.returncode == 2
    assert usage.stdout.startswith("usage: kvcommons register")


def test_missing_executable_exit_code(tmp_path: Path, artifact: Path) -> None:
    completed = _run_cli(
        tmp_path,
        "register",
        str(artifact),
        extra_env={"KVCOMMONS_REGISTRAR_EXECUTABLE": str(tmp_path / "no-such-regasm")},
    )

    assert completed.returncode == 2
    assert "registration executable was not found" in completed.stderr


def test_inspect_round_trips_a_saved_document(tmp_path: Path) -> None:
    document = tmp_path / "settings.xml"
    document.write_text(
        '<?xml version="1.0" encoding="utf-8"?>\n'
        "<dictionary>\n"
        '  <KeyValue><Key type="string">retries</Key><Value type="int">3</Value></KeyValue>\n'
        '  <KeyValue><Key type="string">retries</Key><Value type="int">5</Value></KeyValue>\n'
        "</dictionary>\n",
        encoding="utf-8",
    )

    completed = _run_cli(tmp_path, "inspect", str(document), "--value-type", "int")

    assert completed.returncode == 0, completed.stderr
    assert completed.stdout == "retries: 5\n"


def test_debug_logging_goes_to_configured_file(tmp_path: Path) -> None:
    document = tmp_path / "empty.xml"
    document.write_text("<dictionary></dictionary>", encoding="utf-8")
    log_file = tmp_path / "logs" / "kvcommons.jsonl"

    completed = _run_cli(
        tmp_path,
        "inspect",
        str(document),
        "--log-level",
        "INFO",
        extra_env={"KVCOMMONS_LOGGING_FILE": str(log_file)},
    )

    assert completed.returncode == 0, completed.stderr
    assert completed.stdout == "{}\n"
    events = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert any(event["message"] == "loaded map" and event["fields"]["entries"] == 0 for event in events)
