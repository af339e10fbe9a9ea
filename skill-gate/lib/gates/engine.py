import logging
from pathlib import Path

from hooks.schemas import ToolEvent

from lib.audit_log import AuditLog, NullAuditLog
from lib.gate_model import GateResult
from lib.gate_types import PathRule, RuleTable
from lib.references import load_reference_set
from lib.transcript_ledger import CapabilitySource, LazyLedger

logger = logging.getLogger(__name__)

DENY_TEMPLATE = """\
BLOCKED: You must load the {skill} skill before editing {file_type} files.

STOP. Do not immediately retry your edit.
1. Load the skill: Skill(skill: "{skill}")
2. Read the conventions carefully
3. Reconsider whether your planned edit follows them
4. Adjust your approach if needed, then edit
"""


def render_deny_message(skill: str, file_type: str) -> str:
    return DENY_TEMPLATE.format(skill=skill, file_type=file_type)


class SkillGate:
    """
    Deny-until-skill-loaded gate driven by a declarative RuleTable.

    The gate never records anything itself. Loading a skill is an ordinary
    Skill tool call which the host writes to the transcript, and later
    invocations see it through the ledger.
    """

    def __init__(self, table: RuleTable, skills_dir: Path | None = None):
        self.table = table
        self.skills_dir = skills_dir

    @property
    def name(self) -> str:
        return self.table.name

    def classify(self, file_path: str) -> PathRule | None:
        return self.table.classify(file_path)

    def _allow_loaded(self, rule: PathRule, audit: AuditLog) -> GateResult:
        if rule.inject is None:
            audit.log(
                f"BRANCH: {rule.file_type} matched -> ALLOWED "
                f"(skill {rule.required_capability} already loaded)"
            )
            return GateResult.allow(metadata={"rule": rule.file_type})

        audit.log(f"BRANCH: {rule.file_type} matched -> ALLOWED with references")
        context = load_reference_set(rule.inject.references, self.skills_dir)
        if not context:
            return GateResult.allow(metadata={"rule": rule.file_type})
        return GateResult.allow_with_context(
            context,
            context_format=rule.inject.format,
            metadata={"rule": rule.file_type},
        )

    def check(
        self,
        event: ToolEvent,
        ledger: CapabilitySource | None = None,
        audit: AuditLog | None = None,
    ) -> GateResult:
        """PreToolUse: decide whether the edit may proceed."""
        audit = audit or NullAuditLog()
        ledger = ledger or LazyLedger(event.transcript_path)

        audit.log(
            f"HOOK START: tool={event.tool_name or ''} "
            f"path={event.file_path or ''} skill={event.loaded_skill or ''} "
            f"cwd={event.cwd or ''}"
        )

        if event.tool_name == "Skill" and event.loaded_skill:
            audit.log(f"BRANCH: Skill tool -> loaded: {event.loaded_skill}")
            return GateResult.allow()

        if not event.file_path:
            audit.log("BRANCH: No file_path -> exit early")
            return GateResult.allow()

        rule = self.classify(event.file_path)
        if rule is None:
            audit.log("BRANCH: No pattern matched -> allowing without skill requirement")
            return GateResult.allow()

        logger.debug("%s: %s classified as %s", self.name, event.file_path, rule.file_type)
        if rule.is_excluded(event.file_path):
            audit.log(f"BRANCH: {rule.exclusion_reason}")
            return GateResult.allow()

        skill = rule.required_capability
        if skill is None or ledger.is_loaded(skill):
            return self._allow_loaded(rule, audit)

        audit.log(f"BRANCH: {rule.file_type} matched -> DENIED (skill {skill} not loaded)")
        return GateResult.deny(
            render_deny_message(skill, rule.file_type),
            metadata={"rule": rule.file_type, "capability": skill},
        )
