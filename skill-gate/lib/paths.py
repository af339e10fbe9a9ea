#!/usr/bin/env python3
"""
Path resolution for the skill-gate plugin.

Resolves paths relative to this file's location in the plugin, unless the
host passes $CLAUDE_PLUGIN_ROOT (Claude Code sets it for plugin hooks).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

PLUGIN_ROOT_ENV = "CLAUDE_PLUGIN_ROOT"


def get_plugin_root() -> Path:
    """
    Get the root directory of the plugin.

    Resolution strategy:
    - $CLAUDE_PLUGIN_ROOT if set
    - otherwise 2 levels up from this file (<root>/lib/paths.py)
    """
    env_root = os.environ.get(PLUGIN_ROOT_ENV)
    if env_root:
        return Path(env_root)
    return Path(__file__).resolve().parent.parent


def get_skills_dir() -> Path:
    """Get skills directory (plugin_root/skills)."""
    return get_plugin_root() / "skills"


def resolve_references(patterns: list[str], skills_dir: Path | None = None) -> list[Path]:
    """Expand reference globs under the skills directory.

    Missing files are skipped; each pattern's matches are sorted so the
    injected text has a stable order.
    """
    base = skills_dir or get_skills_dir()
    resolved: list[Path] = []
    for pattern in patterns:
        matches = sorted(p for p in base.glob(pattern) if p.is_file())
        if not matches:
            logger.debug("No reference files for %s under %s", pattern, base)
        resolved.extend(matches)
    return resolved
