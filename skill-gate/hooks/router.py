#!/usr/bin/env python3
"""
Skill-gate hook router.

One executable for every gate. Reads a single JSON event from stdin, runs the
selected gates in order and reports the merged decision:

    exit 0  allow (stdout may carry injected context: raw text, or
            {"additionalContext": "..."} for gates that ask for JSON)
    exit 2  deny (remediation message on stderr)

Usage:
    python hooks/router.py                          # default gates for the event
    python hooks/router.py --gate rails-conventions # explicit gate list
    python hooks/router.py --gate commit-validator --gate binstub-enforcer

Fail-open: any failure inside the router (bad install, unreadable stdin,
invalid JSON, a crashing gate) exits 0 silently. A broken gate must never
block the host's tool use.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, TextIO

# --- Path Setup ---
HOOK_DIR = Path(__file__).parent  # skill-gate/hooks
PLUGIN_DIR = HOOK_DIR.parent  # skill-gate

# Add the plugin root to path for imports when run as a script
if str(PLUGIN_DIR) not in sys.path:
    sys.path.insert(0, str(PLUGIN_DIR))

EXIT_ALLOW = 0

try:
    from hooks.gate_config import (
        DEBUG_ENV_VAR,
        get_gates_for_event,
        is_enabled,
        is_gate_enabled,
        load_config,
    )
    from hooks.gate_registry import GATE_CHECKS
    from hooks.schemas import ContextOutput, ToolEvent
    from lib.gate_model import GateResult, GateVerdict
except ImportError:
    # Missing dependency: allow rather than block the host
    sys.exit(EXIT_ALLOW)

logger = logging.getLogger(__name__)


# --- Router Logic ---


class HookRouter:
    def __init__(self, config: dict[str, Any] | None = None):
        self.config = load_config() if config is None else config

    @staticmethod
    def decode(raw: str) -> ToolEvent | None:
        """Parse stdin text into an event; None means "not ours, allow"."""
        if not raw.strip():
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.debug("Invalid JSON on stdin: %s", e)
            return None
        return ToolEvent.from_payload(payload)

    def select_gates(self, event: ToolEvent, requested: list[str] | None) -> list[str]:
        if not is_enabled(self.config):
            return []
        names = requested or get_gates_for_event(event.hook_event)
        return [name for name in names if is_gate_enabled(self.config, name)]

    def execute_hooks(self, event: ToolEvent, gate_names: list[str]) -> GateResult:
        """Run gates in order and merge results. First deny wins."""
        results: list[GateResult] = []
        for gate_name in gate_names:
            check_func = GATE_CHECKS.get(gate_name)
            if not check_func:
                logger.debug("Unknown gate '%s' skipped", gate_name)
                continue

            result = check_func(event, self.config)
            if result.verdict == GateVerdict.DENY:
                result.metadata.setdefault("gate", gate_name)
                return result
            results.append(result)

        return self._merge_results(results)

    @staticmethod
    def _merge_results(results: list[GateResult]) -> GateResult:
        """Concatenate injected context from every allowing gate."""
        with_context = [r for r in results if r.has_context]
        if not with_context:
            return GateResult.allow()
        if len(with_context) == 1:
            return with_context[0]

        context_format = "json" if any(r.context_format == "json" for r in with_context) else "text"
        merged_metadata: dict[str, Any] = {}
        for r in with_context:
            merged_metadata.update(r.metadata)
        return GateResult.allow_with_context(
            "\n\n".join(r.context_injection for r in with_context),
            context_format=context_format,
            metadata=merged_metadata,
        )

    @staticmethod
    def render_stdout(result: GateResult) -> str | None:
        """Injected context as raw text, or JSON-wrapped when requested."""
        if not result.has_context:
            return None
        if result.context_format == "json":
            return ContextOutput(additionalContext=result.context_injection).model_dump_json()
        return result.context_injection

    @classmethod
    def emit(cls, result: GateResult, stdout: TextIO, stderr: TextIO) -> None:
        if result.verdict == GateVerdict.DENY and result.stderr_message:
            message = result.stderr_message
            stderr.write(message if message.endswith("\n") else message + "\n")
        payload = cls.render_stdout(result)
        if payload:
            stdout.write(payload + "\n")


# --- Main Entry Point ---


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Skill-gate hook router")
    parser.add_argument(
        "--gate",
        action="append",
        dest="gates",
        metavar="NAME",
        help=f"Gate to run (repeatable). Known gates: {', '.join(GATE_CHECKS)}",
    )
    # Ignore extra flags so a newer hooks.json never breaks an older router
    args, _unknown = parser.parse_known_args(argv)
    return args


def run(
    argv: list[str] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Execute one hook invocation and return its exit code."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    try:
        args = _parse_args(argv)
        if os.environ.get(DEBUG_ENV_VAR):
            logging.basicConfig(
                level=logging.DEBUG,
                format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                stream=stderr,
            )

        router = HookRouter()
        event = router.decode(stdin.read())
        if event is None:
            return EXIT_ALLOW

        result = router.execute_hooks(event, router.select_gates(event, args.gates))
        logger.debug("Result: %s", result.to_json())
        router.emit(result, stdout, stderr)
        return result.exit_code
    except SystemExit:
        # argparse exits on --help or bad arguments
        return EXIT_ALLOW
    except Exception:
        logger.debug("Hook failed open", exc_info=True)
        return EXIT_ALLOW


def main() -> None:
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
