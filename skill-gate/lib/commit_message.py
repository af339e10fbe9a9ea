"""Conventional Commits validation for ``git commit`` commands.

Only the subject line is checked against the grammar::

    type(scope)!: description

A separate pass over the whole message rejects AI attribution trailers.

A message that cannot be extracted confidently is never blocked: parse
failures allow the commit.
"""

from __future__ import annotations

import re

from lib.audit_log import AuditLog, NullAuditLog
from lib.gate_model import GateResult

VALID_TYPES = (
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "ci",
    "chore",
    "revert",
)

SUBJECT_PATTERN = re.compile(
    rf"^({'|'.join(VALID_TYPES)})(\([a-zA-Z0-9_-]+\))?!?:\s+\S.*$"
)
AI_ATTRIBUTION_PATTERN = re.compile(
    r"co-authored-by:.*claude|generated.*claude|claude.*code|anthropic",
    re.IGNORECASE,
)

GIT_COMMIT = re.compile(r"^git\s+commit")
# -m, or -m folded into short flags (-am)
SHORT_MESSAGE_FLAG = r"(?<![\w-])-[a-zA-Z]*m"
HAS_MESSAGE_FLAG = re.compile(rf"\s{SHORT_MESSAGE_FLAG}\s|\s--message")
HEREDOC_MESSAGE = re.compile(rf"{SHORT_MESSAGE_FLAG}\s+\"\$\(cat\s+<<")
HEREDOC_OPENER = re.compile(r"<<-?\s*['\"]?(\w+)['\"]?")

# -m "..." / -m '...' / --message="..." / --message '...'
QUOTED_MESSAGE = re.compile(
    rf"""(?:{SHORT_MESSAGE_FLAG}\s*|--message[=\s]\s*)(?:"([^"]*)"|'([^']*)')"""
)

GRAMMAR_HELP = """\
BLOCKED: Commit message does not follow Conventional Commits format

Your message: "{subject}"

Expected format: type(scope): description

Valid types: {types}

Examples:
  feat: Add user authentication
  fix(api): Handle null response
  docs: Update README
  refactor!: Drop Node 14 support

Rules:
  - Type is required (feat, fix, etc.)
  - Scope is optional, in parentheses
  - Add ! before : for breaking changes
  - Colon and space after type/scope
  - Description is required

See the full specification: skills/conventional-commits/references/specification.md
"""

ATTRIBUTION_HELP = """\
BLOCKED: Commit message contains AI attribution

Conventional commits in this project should NOT include:
  - Co-Authored-By tags for AI/Claude
  - "Generated with Claude Code" or similar
  - References to AI assistance

Please remove AI attribution from the commit message.
"""


def _quoted_messages(text: str) -> list[str]:
    """Every non-empty quoted message value, in command order."""
    values = []
    for match in QUOTED_MESSAGE.finditer(text):
        value = match.group(1) if match.group(1) is not None else match.group(2)
        if value:
            values.append(value)
    return values


def _split_heredoc(command: str) -> tuple[str, str, str] | None:
    """Split a command around its ``-m "$(cat <<EOF ... EOF)"`` message.

    Returns (text before the flag, heredoc body, text after the delimiter
    line), or None when there is no complete heredoc message.
    """
    flag = HEREDOC_MESSAGE.search(command)
    if not flag:
        return None

    lines = command[flag.start():].splitlines()
    opener = HEREDOC_OPENER.search(lines[0])
    if not opener:
        return None
    closing = re.compile(rf"\s*{re.escape(opener.group(1))}\b")
    for end in range(1, len(lines)):
        if closing.match(lines[end]):
            return (
                command[: flag.start()],
                "\n".join(lines[1:end]),
                "\n".join(lines[end + 1 :]),
            )
    return None


def extract_commit_message(command: str) -> str | None:
    """Pull the literal commit message out of a ``git commit`` command.

    Like git, every ``-m``/``--message`` value becomes its own paragraph, so
    the first value holds the subject line.

    Returns None for anything that is not a ``git commit`` with an inline
    message, and for messages that could not be extracted.
    """
    if not GIT_COMMIT.search(command) or not HAS_MESSAGE_FLAG.search(command):
        return None

    heredoc = _split_heredoc(command)
    if heredoc is not None:
        before, body, after = heredoc
        parts = _quoted_messages(before) + ([body] if body else []) + _quoted_messages(after)
    elif HEREDOC_MESSAGE.search(command):
        # Unterminated heredoc
        return None
    else:
        parts = _quoted_messages(command)

    return "\n\n".join(parts) if parts else None


def subject_line(message: str) -> str:
    return message.splitlines()[0] if message else ""


def is_valid_subject(subject: str) -> bool:
    return SUBJECT_PATTERN.match(subject) is not None


def has_ai_attribution(message: str) -> bool:
    return AI_ATTRIBUTION_PATTERN.search(message) is not None


def validate_message(message: str) -> GateResult:
    """Check an extracted commit message."""
    subject = subject_line(message)
    if not is_valid_subject(subject):
        return GateResult.deny(
            GRAMMAR_HELP.format(subject=subject, types=", ".join(VALID_TYPES)),
            metadata={"subject": subject},
        )
    if has_ai_attribution(message):
        return GateResult.deny(ATTRIBUTION_HELP, metadata={"subject": subject})
    return GateResult.allow()


def check_commit_command(command: str | None, audit: AuditLog | None = None) -> GateResult:
    """PreToolUse: validate the message of a ``git commit -m`` command."""
    audit = audit or NullAuditLog()
    if not command:
        return GateResult.allow()

    message = extract_commit_message(command)
    if message is None:
        audit.log("BRANCH: commit-validator -> not a commit with an inline message")
        return GateResult.allow()

    result = validate_message(message)
    audit.log(f"BRANCH: commit-validator -> {result.verdict.value.upper()}")
    return result
