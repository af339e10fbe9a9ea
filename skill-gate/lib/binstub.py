"""
Binstub enforcement for Bash commands.

Blocks gem commands when a project binstub exists and suggests the binstub
form instead. The check probes the filesystem for ``bin/<name>`` rather than
consulting a list of known gems, so it works for any project layout.

Flow:
    1. Commands already starting with bin/ (or ./bin/) pass through
    2. ``bundle exec <name> [args]`` with an executable bin/<name> -> block
    3. bare ``<name> [args]`` with an executable bin/<name> -> block
    4. otherwise allow (``bundle exec`` is the legitimate fallback)
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from lib.audit_log import AuditLog, NullAuditLog
from lib.gate_model import GateResult

BUNDLE_EXEC = re.compile(r"^bundle\s+exec\s+([a-zA-Z0-9_-]+)(.*)$", re.DOTALL)
ALREADY_BINSTUB = ("bin/", "./bin/")


@dataclass(frozen=True)
class BinstubSuggestion:
    """A command that should go through its binstub instead."""

    name: str
    args: str
    via_bundle_exec: bool

    @property
    def replacement(self) -> str:
        return f"bin/{self.name}{self.args}"

    def message(self) -> str:
        if self.via_bundle_exec:
            title = f"BLOCKED: Use binstub instead of bundle exec {self.name}"
            why = "Why: Binstubs ensure the correct gem version and are faster."
        else:
            title = f"BLOCKED: Use binstub instead of bare command '{self.name}'"
            why = "Why: Binstubs ensure the correct gem version from Gemfile.lock."
        return (
            f"{title}\n\n"
            f"A binstub exists at bin/{self.name}. Use it instead:\n\n"
            f"  {self.replacement}\n\n"
            f"{why}\n"
        )


def has_binstub(name: str, root: Path) -> bool:
    """Whether ``root/bin/<name>`` is an executable regular file."""
    if not name or "/" in name or name in (".", ".."):
        return False
    candidate = root / "bin" / name
    return candidate.is_file() and os.access(candidate, os.X_OK)


def suggest_binstub(command: str, root: Path | None = None) -> BinstubSuggestion | None:
    """Return the binstub rewrite for ``command``, or None to leave it alone."""
    root = root or Path.cwd()

    if not command or command.startswith(ALREADY_BINSTUB):
        return None

    match = BUNDLE_EXEC.match(command)
    if match:
        name, rest = match.group(1), match.group(2) or ""
        if has_binstub(name, root):
            return BinstubSuggestion(name=name, args=rest, via_bundle_exec=True)
        # No binstub: bundle exec is fine
        return None

    first_word = command.split(" ", 1)[0]
    if has_binstub(first_word, root):
        return BinstubSuggestion(
            name=first_word,
            args=command[len(first_word):],
            via_bundle_exec=False,
        )
    return None


def check_binstub(
    command: str | None,
    root: Path | None = None,
    audit: AuditLog | None = None,
) -> GateResult:
    """PreToolUse: block gem commands that bypass an existing binstub."""
    audit = audit or NullAuditLog()
    if not command:
        return GateResult.allow()

    suggestion = suggest_binstub(command, root)
    if suggestion is None:
        audit.log("BRANCH: binstub -> no rewrite needed")
        return GateResult.allow()

    audit.log(f"BRANCH: binstub -> DENIED (use bin/{suggestion.name})")
    return GateResult.deny(
        suggestion.message(),
        metadata={"replacement": suggestion.replacement},
    )
