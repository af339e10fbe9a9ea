"""
Gate Configuration: Single source of truth for gate behavior.

This module defines:
1. Gate execution order per hook event
2. Audit log locations
3. Runtime configuration (environment variables + optional YAML file)

Rule tables themselves live in lib/gates/definitions.py.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List

import yaml

from lib.paths import get_plugin_root

logger = logging.getLogger(__name__)

# =============================================================================
# GATE EXECUTION ORDER
# =============================================================================
# Which gates run for each event type when the router is not given --gate.
# Order matters: gates run in sequence, first deny wins.
# The Rails gates are opt-in (installed alongside the Rails plugin).

GATE_EXECUTION_ORDER: Dict[str, List[str]] = {
    "PreToolUse": [
        "commit-validator",
        "binstub-enforcer",
        "ruby-conventions",
    ],
    "UserPromptSubmit": [
        "ruby-references",
        "git-references",
    ],
}

# =============================================================================
# AUDIT LOG
# =============================================================================
# Gates without a rule table of their own share this log.

DEFAULT_LOG_FILE = "/tmp/claude-skill-gate.log"

# =============================================================================
# ENVIRONMENT
# =============================================================================

CONFIG_ENV_VAR = "SKILL_GATE_CONFIG"
LOG_FILE_ENV_VAR = "SKILL_GATE_LOG_FILE"
DEBUG_ENV_VAR = "SKILL_GATE_DEBUG"
CONFIG_FILE_NAME = "skill-gate.yaml"


def get_config_path() -> Path:
    """YAML config location ($SKILL_GATE_CONFIG or <plugin root>/skill-gate.yaml)."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return get_plugin_root() / CONFIG_FILE_NAME


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Returns:
        Config dict, or empty dict if the file doesn't exist or can't be parsed.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.debug("Ignoring unreadable config %s: %s", config_path, e)
        return {}

    if not isinstance(config, dict):
        return {}
    return config


def is_enabled(config: Dict[str, Any]) -> bool:
    """Master switch (default on)."""
    return config.get("enabled", True) is not False


def is_gate_enabled(config: Dict[str, Any], gate_name: str) -> bool:
    gates = config.get("gates") or {}
    gate_config = gates.get(gate_name) if isinstance(gates, dict) else None
    if not isinstance(gate_config, dict):
        return True
    return gate_config.get("enabled", True) is not False


def get_log_file(config: Dict[str, Any], default: str = DEFAULT_LOG_FILE) -> str:
    """Audit log path. $SKILL_GATE_LOG_FILE beats YAML `log_file` beats the default."""
    return os.environ.get(LOG_FILE_ENV_VAR) or config.get("log_file") or default


def get_gates_for_event(event: str) -> List[str]:
    """Get the ordered list of gates to run for an event."""
    return GATE_EXECUTION_ORDER.get(event, [])
