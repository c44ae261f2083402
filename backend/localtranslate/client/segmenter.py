"""
Text segmentation and translation eligibility checks.
"""

import re

SENTENCE_TERMINATORS = ".!?。！？"

# A run of non-terminators followed by its terminators and trailing
# whitespace, or a bare run of terminators. Matches cover the whole input.
SENTENCE_RE = re.compile(
    rf"[^{SENTENCE_TERMINATORS}]+(?:[{SENTENCE_TERMINATORS}]+\s*)?|[{SENTENCE_TERMINATORS}]+\s*"
)

# Digits, whitespace and symbols only
NON_WORD_RE = re.compile(r"^[\d\s\W]+$")

HAN_RE = re.compile(r"[\u4e00-\u9fff]")

MIN_TRANSLATABLE_LENGTH = 3
TARGET_SCRIPT_RATIO = 0.8


def split_sentences(text: str) -> list[str]:
    """Split text after sentence terminators, keeping every character."""
    return SENTENCE_RE.findall(text)


def split_text(text: str, max_length: int) -> list[str]:
    """
    Split text into segments of at most max_length characters.

    Whole sentences are packed greedily into each segment. A sentence
    longer than max_length is cut at max_length boundaries. Joining the
    segments gives back the original text.

    Args:
        text: Text to split
        max_length: Maximum segment length in characters

    Returns:
        list[str]: Ordered segments
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")
    if len(text) <= max_length:
        return [text]

    segments: list[str] = []
    current = ""

    for sentence in split_sentences(text):
        if len(current) + len(sentence) <= max_length:
            current += sentence
            continue

        if current:
            segments.append(current)

        while len(sentence) > max_length:
            segments.append(sentence[:max_length])
            sentence = sentence[max_length:]
        current = sentence

    if current:
        segments.append(current)

    return segments


def should_translate(
    text: str,
    script_pattern: re.Pattern[str] = HAN_RE,
    max_script_ratio: float = TARGET_SCRIPT_RATIO,
) -> bool:
    """
    Decide whether a page text is worth sending for translation.

    Skips very short text, text without any letters, and text mostly
    written in the target script already. This is a heuristic, not
    language detection.

    Args:
        text: Candidate text
        script_pattern: Matches one character of the target script
        max_script_ratio: Share of target-script characters above which
            the text is considered already translated
    """
    if len(text) < MIN_TRANSLATABLE_LENGTH:
        return False
    if NON_WORD_RE.match(text):
        return False

    script_chars = len(script_pattern.findall(text))
    if script_chars / len(text) > max_script_ratio:
        return False

    return True
