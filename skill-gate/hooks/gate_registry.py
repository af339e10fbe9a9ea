"""
Gate Registry: Maps gate names to check functions.

Every check takes the decoded event plus the loaded config and returns a
GateResult. Checks ignore events they do not handle (silent ALLOW).
"""

from typing import Any, Callable, Dict

from hooks.gate_config import get_log_file
from hooks.schemas import PROMPT_EVENT, TOOL_EVENT, ToolEvent

from lib.audit_log import AuditLog
from lib.binstub import check_binstub
from lib.commit_message import check_commit_command
from lib.gate_model import GateResult
from lib.gates.definitions import REFERENCE_TABLES, RULE_TABLES
from lib.gates.engine import SkillGate
from lib.references import build_prompt_context

GateCheck = Callable[[ToolEvent, Dict[str, Any]], GateResult]


def _rule_table_gate(table_name: str) -> GateCheck:
    table = RULE_TABLES[table_name]

    def check(event: ToolEvent, config: Dict[str, Any]) -> GateResult:
        if event.hook_event != TOOL_EVENT:
            return GateResult.allow()
        audit = AuditLog(get_log_file(config, default=table.log_file))
        return SkillGate(table).check(event, audit=audit)

    check.__name__ = f"check_{table_name.replace('-', '_')}"
    return check


def _reference_gate(table_name: str) -> GateCheck:
    table = REFERENCE_TABLES[table_name]

    def check(event: ToolEvent, config: Dict[str, Any]) -> GateResult:
        if event.hook_event != PROMPT_EVENT or not event.user_prompt:
            return GateResult.allow()
        context = build_prompt_context(table, event.user_prompt)
        if context is None:
            return GateResult.allow()
        return GateResult.allow_with_context(context, context_format="text")

    check.__name__ = f"check_{table_name.replace('-', '_')}"
    return check


def check_binstub_enforcer(event: ToolEvent, config: Dict[str, Any]) -> GateResult:
    """Bash: prefer bin/<name> over `bundle exec <name>` and bare <name>."""
    if event.hook_event != TOOL_EVENT or event.tool_name != "Bash":
        return GateResult.allow()
    return check_binstub(event.command, audit=AuditLog(get_log_file(config)))


def check_commit_validator(event: ToolEvent, config: Dict[str, Any]) -> GateResult:
    """Bash: Conventional Commits subject + no AI attribution."""
    if event.hook_event != TOOL_EVENT or event.tool_name != "Bash":
        return GateResult.allow()
    return check_commit_command(event.command, audit=AuditLog(get_log_file(config)))


GATE_CHECKS: Dict[str, GateCheck] = {
    "ruby-conventions": _rule_table_gate("ruby-conventions"),
    "rails-conventions": _rule_table_gate("rails-conventions"),
    "binstub-enforcer": check_binstub_enforcer,
    "commit-validator": check_commit_validator,
    "ruby-references": _reference_gate("ruby-references"),
    "rails-references": _reference_gate("rails-references"),
    "git-references": _reference_gate("git-references"),
}
