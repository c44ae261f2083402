"""
Tests for prompt templates and output cleaning.
"""

import pytest

from localtranslate.services.prompts import (
    EN_TEMPLATE,
    build_translation_prompt,
    clean_translation,
)


def test_zh_tw_prompt_embeds_text_verbatim():
    text = "Keep <b>this</b> {formatting}"
    prompt = build_translation_prompt(text, "zh-tw")

    assert f"原文：\n{text}\n" in prompt
    assert "台灣" in prompt


def test_language_lookup_is_case_insensitive():
    assert build_translation_prompt("Hi", "ZH-CN") == build_translation_prompt("Hi", "zh-cn")


def test_english_template():
    assert build_translation_prompt("你好", "en") == EN_TEMPLATE.format(text="你好")


def test_unknown_language_uses_default_template():
    prompt = build_translation_prompt("Hello", "fr")

    assert "Français" in prompt
    assert "Hello" in prompt


def test_unlisted_language_code_is_named_directly():
    assert "into sv" in build_translation_prompt("Hello", "sv")


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("翻譯結果：你好", "你好"),
        ("翻譯結果:  你好 ", "你好"),
        ("譯文：你好", "你好"),
        ("翻譯：你好", "你好"),
        ("Translation: Hello", "Hello"),
        ("翻訳結果：こんにちは", "こんにちは"),
        ("訳文: こんにちは", "こんにちは"),
        ("翻訳：こんにちは", "こんにちは"),
        ("  你好\n", "你好"),
        ("你好，翻譯：不是標籤", "你好，翻譯：不是標籤"),
    ],
)
def test_clean_translation(raw, expected):
    assert clean_translation(raw) == expected
