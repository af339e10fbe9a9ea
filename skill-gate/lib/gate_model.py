from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

EXIT_ALLOW = 0
EXIT_DENY = 2

ContextFormat = Literal["text", "json"]


class GateVerdict(Enum):
    """Verdict of a gate check."""

    ALLOW = "allow"
    ALLOW_WITH_CONTEXT = "allow_with_context"
    DENY = "deny"


@dataclass
class GateResult:
    """Result of one gate evaluation.

    ``stderr_message`` is only meaningful for DENY, ``context_injection`` only
    for ALLOW_WITH_CONTEXT.
    """

    verdict: GateVerdict
    stderr_message: str | None = None
    context_injection: str | None = None
    context_format: ContextFormat = "text"
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def allow(cls, metadata: dict[str, Any] | None = None) -> "GateResult":
        """Factory method for a silent ALLOW verdict."""
        return cls(verdict=GateVerdict.ALLOW, metadata=metadata or {})

    @classmethod
    def allow_with_context(
        cls,
        context_injection: str,
        context_format: ContextFormat = "text",
        metadata: dict[str, Any] | None = None,
    ) -> "GateResult":
        """Factory method for ALLOW with injected reference text."""
        return cls(
            verdict=GateVerdict.ALLOW_WITH_CONTEXT,
            context_injection=context_injection,
            context_format=context_format,
            metadata=metadata or {},
        )

    @classmethod
    def deny(
        cls,
        stderr_message: str,
        metadata: dict[str, Any] | None = None,
    ) -> "GateResult":
        """Factory method for DENY verdict."""
        return cls(
            verdict=GateVerdict.DENY,
            stderr_message=stderr_message,
            metadata=metadata or {},
        )

    @property
    def exit_code(self) -> int:
        return EXIT_DENY if self.verdict == GateVerdict.DENY else EXIT_ALLOW

    @property
    def has_context(self) -> bool:
        return self.verdict == GateVerdict.ALLOW_WITH_CONTEXT and bool(self.context_injection)

    def to_json(self) -> dict[str, Any]:
        """Serialize to a plain dict (used in audit traces and tests)."""
        return {
            "verdict": self.verdict.value,
            "exit_code": self.exit_code,
            "stderr_message": self.stderr_message,
            "context_injection": self.context_injection,
            "context_format": self.context_format,
            "metadata": self.metadata,
        }
