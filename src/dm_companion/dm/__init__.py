"""AI Dungeon Master: prompt building, LLM providers and the chat surface."""

from __future__ import annotations

from dm_companion.dm.chat import DungeonMasterChat, extract_dc, sanitize_llm_output
from dm_companion.dm.llm import (
    ClaudeProvider,
    LLMBridge,
    LLMProvider,
    OllamaProvider,
    create_bridge,
)
from dm_companion.dm.prompts import (
    DM_SYSTEM_PROMPT,
    build_character_context,
    build_dm_prompt,
    build_module_context,
)


__all__ = [
    # Prompts
    "DM_SYSTEM_PROMPT",
    "build_character_context",
    "build_module_context",
    "build_dm_prompt",
    # LLM
    "LLMProvider",
    "OllamaProvider",
    "ClaudeProvider",
    "LLMBridge",
    "create_bridge",
    # Chat
    "DungeonMasterChat",
    "sanitize_llm_output",
    "extract_dc",
]
