from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# --- Input Schema (Event) ---

PROMPT_EVENT = "UserPromptSubmit"
TOOL_EVENT = "PreToolUse"


def _str_or_none(value: Any) -> str | None:
    """Keep non-empty strings, drop everything else (null, numbers, objects)."""
    if isinstance(value, str) and value:
        return value
    return None


class ToolEvent(BaseModel):
    """
    One decoded hook invocation.

    Every field except ``hook_event`` is optional: the decoder never raises on
    missing or oddly typed keys, it just leaves the field unset.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    hook_event: str = Field(
        TOOL_EVENT, description="Normalized event name (PreToolUse, UserPromptSubmit)."
    )
    tool_name: str | None = None

    # tool_input fields
    file_path: str | None = Field(None, description="Target of Edit/Write/MultiEdit.")
    command: str | None = Field(None, description="Shell text of a Bash call.")
    loaded_skill: str | None = Field(None, description="Skill named by a Skill call.")

    transcript_path: str | None = None
    user_prompt: str | None = None
    cwd: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ToolEvent | None":
        """Decode a parsed JSON payload.

        Returns None when the payload is not something a gate can act on:
        not an object, or carrying neither a tool name nor a prompt.
        """
        if not isinstance(payload, dict):
            return None

        tool_name = _str_or_none(payload.get("tool_name"))
        user_prompt = _str_or_none(payload.get("user_prompt")) or _str_or_none(
            payload.get("prompt")
        )
        if tool_name is None and user_prompt is None:
            return None

        tool_input = payload.get("tool_input")
        if not isinstance(tool_input, dict):
            tool_input = {}

        hook_event = _str_or_none(payload.get("hook_event_name"))
        if hook_event is None:
            hook_event = PROMPT_EVENT if tool_name is None else TOOL_EVENT

        loaded_skill = None
        if tool_name == "Skill":
            loaded_skill = _str_or_none(tool_input.get("skill"))

        return cls(
            hook_event=hook_event,
            tool_name=tool_name,
            file_path=_str_or_none(tool_input.get("file_path")),
            command=_str_or_none(tool_input.get("command")),
            loaded_skill=loaded_skill,
            transcript_path=_str_or_none(payload.get("transcript_path")),
            user_prompt=user_prompt,
            cwd=_str_or_none(payload.get("cwd")),
        )


# --- Output Schema ---


class ContextOutput(BaseModel):
    """
    Structured context injection for hosts that expect JSON on stdout.
    """

    additionalContext: str
