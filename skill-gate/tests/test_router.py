"""End-to-end tests for the hook router (stdin JSON in, exit code out)."""

import io
import json
from pathlib import Path
from typing import Any, Callable

import pytest

from hooks import router as router_module
from hooks.router import HookRouter, run
from hooks.schemas import ToolEvent
from lib.gate_model import GateResult, GateVerdict


def _invoke(payload: Any, argv: list[str] | None = None) -> tuple[int, str, str]:
    raw = payload if isinstance(payload, str) else json.dumps(payload)
    stdout, stderr = io.StringIO(), io.StringIO()
    code = run(argv or [], stdin=io.StringIO(raw), stdout=stdout, stderr=stderr)
    return code, stdout.getvalue(), stderr.getvalue()


def _edit(file_path: str, transcript_path: str) -> dict[str, Any]:
    return {
        "hook_event_name": "PreToolUse",
        "tool_name": "Edit",
        "tool_input": {"file_path": file_path},
        "transcript_path": transcript_path,
    }


def _bash(command: str) -> dict[str, Any]:
    return {"hook_event_name": "PreToolUse", "tool_name": "Bash", "tool_input": {"command": command}}


@pytest.mark.parametrize(
    "raw",
    ["", "   \n", "not json", "[1, 2]", '{"tool_name":', "null", "{}", '"Edit"'],
)
def test_malformed_input_fails_open_silently(raw: str) -> None:
    """Anything the router cannot decode is allowed with no output at all."""
    assert _invoke(raw) == (0, "", ""), f"Input {raw!r} must exit 0 with empty stdout/stderr"


def test_spec_edit_without_skill_is_denied(transcript: Callable[..., str]) -> None:
    code, stdout, stderr = _invoke(_edit("spec/user_spec.rb", transcript()))

    assert code == 2
    assert stdout == ""
    assert "ruby-conventions:ruby-testing" in stderr, "stderr must name the missing skill"


def test_spec_edit_with_skill_is_allowed(transcript: Callable[..., str]) -> None:
    path = transcript("ruby-conventions:ruby-testing")
    assert _invoke(_edit("spec/user_spec.rb", path)) == (0, "", "")


def test_bundle_exec_with_binstub_is_denied(make_binstub: Callable[..., Path]) -> None:
    make_binstub("rspec")
    code, _, stderr = _invoke(_bash("bundle exec rspec spec/models"))

    assert code == 2
    assert "bin/rspec spec/models" in stderr, "stderr must suggest the binstub command"


def test_bundle_exec_without_binstub_is_allowed(project_dir: Path) -> None:
    assert _invoke(_bash("bundle exec rspec spec/models")) == (0, "", "")


def test_nonconventional_commit_is_denied(project_dir: Path) -> None:
    code, _, stderr = _invoke(_bash('git commit -m "Added user login"'))
    assert code == 2
    assert "Conventional Commits" in stderr


def test_conventional_commit_is_allowed(project_dir: Path) -> None:
    assert _invoke(_bash('git commit -m "feat(auth): Add login flow"')) == (0, "", "")


def test_attribution_in_second_message_flag_is_denied(project_dir: Path) -> None:
    """The whole commit message is scanned, including later -m paragraphs."""
    command = 'git commit -m "feat: Add login" -m "Co-Authored-By: Claude <noreply@anthropic.com>"'
    code, _, stderr = _invoke(_bash(command))
    assert code == 2
    assert "AI attribution" in stderr


def test_crashing_gate_fails_open(
    monkeypatch: pytest.MonkeyPatch, transcript: Callable[..., str]
) -> None:
    """A bug in a gate must never block the host's tool call."""

    def boom(event: ToolEvent, config: dict) -> GateResult:
        raise RuntimeError("gate bug")

    monkeypatch.setitem(router_module.GATE_CHECKS, "ruby-conventions", boom)
    assert _invoke(_edit("spec/user_spec.rb", transcript())) == (0, "", "")


def test_first_deny_stops_evaluation(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    def deny(event: ToolEvent, config: dict) -> GateResult:
        calls.append("deny")
        return GateResult.deny("no")

    def record(event: ToolEvent, config: dict) -> GateResult:
        calls.append("record")
        return GateResult.allow()

    monkeypatch.setitem(router_module.GATE_CHECKS, "first", deny)
    monkeypatch.setitem(router_module.GATE_CHECKS, "second", record)

    code, _, stderr = _invoke(_bash("ls"), ["--gate", "first", "--gate", "second"])

    assert code == 2
    assert stderr == "no\n"
    assert calls == ["deny"], "Gates after the first deny must not run"


def test_master_switch_disables_all_gates(tmp_path: Path, transcript: Callable[..., str]) -> None:
    (tmp_path / "skill-gate.yaml").write_text("enabled: false\n", encoding="utf-8")
    assert _invoke(_edit("spec/user_spec.rb", transcript())) == (0, "", "")


def test_single_gate_can_be_disabled(tmp_path: Path, transcript: Callable[..., str]) -> None:
    (tmp_path / "skill-gate.yaml").write_text(
        "gates:\n  ruby-conventions:\n    enabled: false\n", encoding="utf-8"
    )
    assert _invoke(_edit("spec/user_spec.rb", transcript())) == (0, "", "")


def test_broken_config_is_ignored(tmp_path: Path, transcript: Callable[..., str]) -> None:
    """Malformed YAML falls back to defaults, so gates still run."""
    (tmp_path / "skill-gate.yaml").write_text("enabled: [unclosed\n", encoding="utf-8")
    code, _, _ = _invoke(_edit("spec/user_spec.rb", transcript()))
    assert code == 2


def test_explicit_gate_selection(transcript: Callable[..., str]) -> None:
    """Rails rules only apply when the rails-conventions gate is requested."""
    payload = _edit("/r/app/models/user.rb", transcript())

    assert _invoke(payload)[0] == 0, "Default gates defer app/ files to the Rails table"
    code, _, stderr = _invoke(payload, ["--gate", "rails-conventions"])
    assert code == 2
    assert "rails-conventions:rails-model-conventions" in stderr


def test_unknown_gate_is_skipped(transcript: Callable[..., str]) -> None:
    payload = _edit("spec/user_spec.rb", transcript())
    assert _invoke(payload, ["--gate", "no-such-gate"]) == (0, "", "")


def test_unknown_flags_are_ignored(transcript: Callable[..., str]) -> None:
    payload = _edit("spec/user_spec.rb", transcript())
    assert _invoke(payload, ["--verbose"])[0] == 2


def test_prompt_references_printed_as_text(
    write_reference: Callable[[str, str], Path],
) -> None:
    """Prompt-triggered references go to stdout as raw text under a header."""
    write_reference("ruby-testing/references/rspec.md", "# RSpec")

    code, stdout, stderr = _invoke(
        {"hook_event_name": "UserPromptSubmit", "prompt": "How do I use let( in RSpec?"}
    )

    assert code == 0
    assert stderr == ""
    assert stdout.startswith("# Relevant Ruby API References")
    assert "# RSpec\n\n---\n\n" in stdout


def test_component_references_printed_as_json(
    write_reference: Callable[[str, str], Path], transcript: Callable[..., str]
) -> None:
    write_reference("rails-viewcomponent/references/slots.md", "# Slots")
    path = transcript("rails-conventions:rails-view-conventions")

    code, stdout, _ = _invoke(
        _edit("/r/app/components/card_component.rb", path), ["--gate", "rails-conventions"]
    )

    assert code == 0
    assert json.loads(stdout) == {"additionalContext": "# Slots\n\n---\n\n"}


def test_audit_log_written_to_configured_file(
    audit_path: Path, transcript: Callable[..., str]
) -> None:
    """$SKILL_GATE_LOG_FILE overrides the table's default log location."""
    _invoke(_edit("spec/user_spec.rb", transcript()))
    assert "DENIED (skill ruby-conventions:ruby-testing not loaded)" in audit_path.read_text(
        encoding="utf-8"
    )


def test_merge_uses_json_when_any_gate_asks_for_it() -> None:
    """Contexts are joined with a blank line; one JSON request wraps the whole payload."""
    merged = HookRouter._merge_results(
        [
            GateResult.allow(),
            GateResult.allow_with_context("one"),
            GateResult.allow_with_context("two", context_format="json"),
        ]
    )
    assert merged.verdict == GateVerdict.ALLOW_WITH_CONTEXT
    assert merged.context_format == "json"
    assert json.loads(HookRouter.render_stdout(merged)) == {"additionalContext": "one\n\ntwo"}


def test_merge_without_context_is_plain_allow() -> None:
    merged = HookRouter._merge_results([GateResult.allow(), GateResult.allow()])
    assert merged.verdict == GateVerdict.ALLOW
    assert HookRouter.render_stdout(merged) is None


def test_text_context_is_rendered_verbatim() -> None:
    result = GateResult.allow_with_context("# Docs\n")
    assert HookRouter.render_stdout(result) == "# Docs\n"
