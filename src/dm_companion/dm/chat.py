"""The AI Dungeon Master chat.

``DungeonMasterChat`` turns a player's free-text prompt into a streamed
LLM reply appended to the session log. It reads the session to build the
system prompt and conversation history but never changes module or
combat state.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from dm_companion.core.constants import FALLBACK_DM_RESPONSE
from dm_companion.core.exceptions import DmCompanionError
from dm_companion.core.logging import get_logger, log_context
from dm_companion.dm.llm import ChatMessage, LLMBridge
from dm_companion.models.enums import MessageRole
from dm_companion.models.session import LogEntry


if TYPE_CHECKING:
    from dm_companion.engine.session import GameSession


logger = get_logger(__name__)

_THINK_RE = re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL)
_PLAN_LABEL_RE = re.compile(r"^\s*(?:plan of action|plan|analysis)\s*[:\-]+\s*", re.IGNORECASE | re.MULTILINE)
_SENTENCE_END_RE = re.compile(r"[.!?][\"')\]*]*")
_DC_RE = re.compile(r"\bDC\s*(\d{1,2})\b", re.IGNORECASE)


def sanitize_llm_output(text: str) -> str:
    """Strip reasoning artifacts from a model reply.

    Removes ``<think>...</think>`` blocks and leading "Plan:" or
    "Analysis:" labels, then drops a trailing sentence fragment cut off
    without terminal punctuation. Text with no complete sentence is
    kept as is.
    """
    cleaned = _THINK_RE.sub("", text)
    cleaned = _PLAN_LABEL_RE.sub("", cleaned).strip()
    if not cleaned:
        return ""

    ends = [match.end() for match in _SENTENCE_END_RE.finditer(cleaned)]
    if ends and ends[-1] != len(cleaned):
        cleaned = cleaned[: ends[-1]]
    return cleaned.strip()


def extract_dc(text: str) -> int | None:
    """Return the first ``DC nn`` named in the text, if any."""
    match = _DC_RE.search(text)
    return int(match.group(1)) if match else None


class DungeonMasterChat:
    """Send player prompts to the DM and log the replies.

    Args:
        session: Session whose state feeds the prompt and receives log entries.
        bridge: Streaming LLM bridge. Without one the DM answers with a
            canned line.
        history_limit: Most recent player and DM log entries sent as
            conversation history.
    """

    def __init__(
        self,
        session: GameSession,
        bridge: LLMBridge | None = None,
        *,
        history_limit: int = 20,
    ) -> None:
        self.session = session
        self.bridge = bridge
        self.history_limit = history_limit

    def _history(self) -> list[ChatMessage]:
        turns = [entry for entry in self.session.log if entry.role in (MessageRole.PLAYER, MessageRole.DM)]
        if self.history_limit > 0:
            turns = turns[-self.history_limit :]
        else:
            turns = []
        return [
            {"role": "user" if entry.role == MessageRole.PLAYER else "assistant", "content": entry.text}
            for entry in turns
        ]

    def send(self, prompt: str) -> LogEntry | None:
        """Log the prompt and stream the DM's reply into the session log.

        Returns:
            The DM or error entry appended, or None for a blank prompt.
        """
        text = prompt.strip()
        if not text:
            return None

        history = self._history()
        self.session.add_message(MessageRole.PLAYER, text)

        if self.bridge is None:
            return self.session.add_message(MessageRole.DM, FALLBACK_DM_RESPONSE)

        buffer: list[str] = []
        result: list[LogEntry] = []

        def on_done() -> None:
            raw = "".join(buffer)
            reply = sanitize_llm_output(raw)
            if not reply:
                logger.warning("DM reply empty after sanitizing", raw_length=len(raw))
                reply = FALLBACK_DM_RESPONSE
            result.append(self.session.add_message(MessageRole.DM, reply))

        def on_error(exc: Exception) -> None:
            message = exc.message if isinstance(exc, DmCompanionError) else str(exc)
            result.append(self.session.add_message(MessageRole.SYSTEM, f"Error: {message}"))

        character = self.session.current_character
        with log_context(provider=str(self.bridge.active), character=character.name if character else None):
            logger.debug("DM prompt sent", history=len(history))
            self.bridge.send_prompt(
                text,
                buffer.append,
                on_done,
                on_error,
                system_prompt=self.session.build_prompt(),
                history=history,
            )
        return result[0] if result else None


__all__ = [
    "sanitize_llm_output",
    "extract_dc",
    "DungeonMasterChat",
]
