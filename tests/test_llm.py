"""
Tests for the provider message conversion.
"""

from __future__ import annotations

from intelligence.llm import GeminiLLM, Message


def test_gemini_splits_system_instruction_from_prompt():
    llm = GeminiLLM(api_key="key")

    system, prompt = llm._convert_messages([Message.system("be terse"), Message.user("[1, 2]")])

    assert system == "be terse"
    assert prompt == "[1, 2]"


def test_gemini_without_system_message():
    system, prompt = GeminiLLM()._convert_messages([Message.user("a"), Message.user("b")])

    assert system is None
    assert prompt == "a\n\nb"
