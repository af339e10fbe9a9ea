"""Reference document loading for context injection.

Two triggers feed into this module:

- file rules: a rule with ``inject`` loads its reference set when the edit
  is allowed (ViewComponent, Stimulus, Turbo Stream files)
- prompt keywords: UserPromptSubmit gates scan the prompt and load the
  references whose keywords appear

Each document is followed by a ``---`` separator, as the shell loaders did.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from lib.gate_types import ReferenceTable
from lib.paths import get_skills_dir, resolve_references

logger = logging.getLogger(__name__)

SEPARATOR = "\n\n---\n\n"


def load_documents(paths: list[Path]) -> str:
    """Concatenate documents, each followed by the separator."""
    return "".join(path.read_text(encoding="utf-8") + SEPARATOR for path in paths)


def load_reference_set(patterns: list[str], skills_dir: Path | None = None) -> str:
    """Load every document matching the patterns ("" if none exist)."""
    return load_documents(resolve_references(patterns, skills_dir))


def select_references(
    table: ReferenceTable, prompt: str, skills_dir: Path | None = None
) -> list[Path]:
    """Pick the reference files whose keyword rules match the prompt.

    Rules are tested in table order. A file is selected at most once even when
    several rules point at it.
    """
    prompt_lower = prompt.lower()
    selected: list[Path] = []

    for rule in table.rules:
        if rule.only_if_empty and selected:
            continue
        if not re.search(rule.pattern, prompt_lower):
            continue
        for path in resolve_references(rule.references, skills_dir):
            if path not in selected:
                selected.append(path)

    return selected


def build_prompt_context(
    table: ReferenceTable, prompt: str, skills_dir: Path | None = None
) -> str | None:
    """Render the context block for a prompt, or None when nothing matched."""
    paths = select_references(table, prompt, skills_dir or get_skills_dir())
    if not paths:
        return None

    logger.debug("%s: loading %d reference(s)", table.name, len(paths))
    return f"{table.header}\n\n{load_documents(paths)}"
