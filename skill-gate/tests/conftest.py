"""Shared fixtures for the skill-gate hook tests."""

import json
import stat
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point config, audit log and plugin root at a scratch directory."""
    plugin_root = tmp_path / "plugin"
    (plugin_root / "skills").mkdir(parents=True)
    monkeypatch.setenv("CLAUDE_PLUGIN_ROOT", str(plugin_root))
    monkeypatch.setenv("SKILL_GATE_CONFIG", str(tmp_path / "skill-gate.yaml"))
    monkeypatch.setenv("SKILL_GATE_LOG_FILE", str(tmp_path / "audit.log"))
    monkeypatch.delenv("SKILL_GATE_DEBUG", raising=False)
    return plugin_root


@pytest.fixture
def audit_path(tmp_path: Path) -> Path:
    return tmp_path / "audit.log"


@pytest.fixture
def skills_dir(isolated_env: Path) -> Path:
    return isolated_env / "skills"


@pytest.fixture
def write_reference(skills_dir: Path) -> Callable[[str, str], Path]:
    def _write(relative: str, content: str) -> Path:
        path = skills_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def transcript(tmp_path: Path) -> Callable[..., str]:
    """Write a JSONL transcript recording the given Skill calls."""

    def _write(*skills: str) -> str:
        path = tmp_path / "transcript.jsonl"
        lines = [json.dumps({"type": "user", "message": "hello"})]
        for skill in skills:
            lines.append(
                json.dumps(
                    {
                        "type": "assistant",
                        "content": [
                            {"type": "tool_use", "name": "Skill", "input": {"skill": skill}}
                        ],
                    }
                )
            )
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A Ruby project checkout used as the working directory."""
    project = tmp_path / "project"
    (project / "bin").mkdir(parents=True)
    monkeypatch.chdir(project)
    return project


@pytest.fixture
def make_binstub(project_dir: Path) -> Callable[..., Path]:
    def _make(name: str, executable: bool = True) -> Path:
        path = project_dir / "bin" / name
        path.write_text("#!/usr/bin/env ruby\n", encoding="utf-8")
        mode = path.stat().st_mode
        if executable:
            path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        else:
            path.chmod(mode & ~(stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))
        return path

    return _make
