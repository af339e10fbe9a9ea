"""Capability ledger backed by the session transcript.

The transcript is the only record of which skills a session has loaded. A
skill counts as loaded once a ``"skill": "<namespace>:<name>"`` fragment
appears anywhere in it; nothing ever unloads a skill.

Each hook process scans the transcript once and answers every lookup from the
resulting set. Nothing is cached across processes.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# Tolerates whitespace around the colon and backslash-escaped quotes, since the
# transcript may hold tool calls re-serialized inside JSON strings.
SKILL_MARKER = re.compile(r'\\?"skill\\?"\s*:\s*\\?"([^"\\]+)\\?"')


class CapabilitySource(Protocol):
    def is_loaded(self, capability: str) -> bool: ...


class CapabilityLedger:
    """Read-only set of capabilities loaded in one session."""

    def __init__(self, loaded: frozenset[str] = frozenset()):
        self._loaded = loaded

    @classmethod
    def from_text(cls, text: str) -> CapabilityLedger:
        return cls(frozenset(SKILL_MARKER.findall(text)))

    @classmethod
    def from_transcript(cls, transcript_path: str | None) -> CapabilityLedger:
        """Scan a transcript file.

        A missing path or file yields an empty ledger: without a readable
        transcript nothing counts as loaded.
        """
        if not transcript_path:
            return cls()

        path = Path(transcript_path)
        if not path.is_file():
            logger.debug("Transcript not found: %s", path)
            return cls()

        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Transcript unreadable: %s (%s)", path, e)
            return cls()
        return cls.from_text(text)

    @property
    def loaded(self) -> frozenset[str]:
        return self._loaded

    def is_loaded(self, capability: str) -> bool:
        return capability in self._loaded


class LazyLedger:
    """Defers the transcript scan until a rule actually needs it."""

    def __init__(self, transcript_path: str | None):
        self.transcript_path = transcript_path
        self._ledger: CapabilityLedger | None = None

    def is_loaded(self, capability: str) -> bool:
        if self._ledger is None:
            self._ledger = CapabilityLedger.from_transcript(self.transcript_path)
        return self._ledger.is_loaded(capability)


def is_loaded(capability: str, transcript_path: str | None) -> bool:
    """Check whether ``capability`` was loaded in the given transcript."""
    return CapabilityLedger.from_transcript(transcript_path).is_loaded(capability)
