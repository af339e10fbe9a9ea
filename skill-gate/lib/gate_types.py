from fnmatch import fnmatchcase
from typing import Literal

from pydantic import BaseModel, Field


def rooted(path: str) -> str:
    """Anchor a relative path at "/" so ``*/spec/*`` also matches ``spec/x``."""
    return path if path.startswith("/") else "/" + path


def matches_any(path: str, patterns: list[str]) -> bool:
    """Shell-glob match where ``*`` also crosses directory separators."""
    candidate = rooted(path)
    return any(fnmatchcase(candidate, pattern) for pattern in patterns)


class ContextInjection(BaseModel):
    """Reference documents injected when a rule allows the operation."""

    # Glob patterns relative to the plugin's skills/ directory
    references: list[str]
    format: Literal["text", "json"] = "json"


class PathRule(BaseModel):
    """Classifier for a file path with the capability it requires."""

    # Human label used in messages ("RSpec spec", "controller", ...)
    file_type: str
    patterns: list[str]
    required_capability: str | None = None

    # Matching any of these forces ALLOW (path owned by another table)
    exclusions: list[str] = Field(default_factory=list)
    exclusion_reason: str = "excluded path"

    inject: ContextInjection | None = None

    def matches(self, file_path: str) -> bool:
        return matches_any(file_path, self.patterns)

    def is_excluded(self, file_path: str) -> bool:
        return bool(self.exclusions) and matches_any(file_path, self.exclusions)


class RuleTable(BaseModel):
    """Ordered path rules; the first matching rule decides."""

    name: str
    description: str
    rules: list[PathRule]
    log_file: str

    def classify(self, file_path: str) -> PathRule | None:
        for rule in self.rules:
            if rule.matches(file_path):
                return rule
        return None


class KeywordRule(BaseModel):
    """Prompt keyword regex (matched against the lower-cased prompt)."""

    pattern: str
    references: list[str]

    # Only consulted when nothing earlier in the table has matched
    only_if_empty: bool = False


class ReferenceTable(BaseModel):
    """Keyword rules for prompt-triggered reference loading."""

    name: str
    header: str
    rules: list[KeywordRule]
