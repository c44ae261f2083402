"""
Translation prompt templates for LLM-based web page translation.

Each supported target language gets its own instruction template with
locale and formatting rules; other targets use a generic template.
"""

import re


# =============================================================================
# Supported Languages
# =============================================================================

SUPPORTED_LANGUAGES: dict[str, str] = {
    "zh-tw": "繁體中文 (台灣)",
    "zh-cn": "簡體中文",
    "en": "English",
    "ja": "日本語",
    "ko": "한국어",
    "es": "Español",
    "fr": "Français",
    "de": "Deutsch",
    "it": "Italiano",
    "pt": "Português",
    "ru": "Русский",
    "ar": "العربية",
}

# Stop generation as soon as the model starts echoing prompt labels
STOP_SEQUENCES = ["原文：", "翻譯：", "說明："]


# =============================================================================
# Per-Language Templates
# =============================================================================

ZH_TW_TEMPLATE = """你是一位專業的翻譯專家，請將下列文本翻譯成台灣繁體中文。

翻譯要求：
1. 採用台灣地區的用詞習慣與表達方式
2. 保留原文的語氣、風格與格式
3. 技術術語使用台灣慣用譯法
4. 譯文需自然流暢，符合中文語法
5. 專有名詞保留原文或使用台灣通用譯名
6. 保留原文中的 HTML 標籤、連結等格式

原文：
{text}

請只輸出翻譯結果，不要加入任何解釋或說明："""

ZH_CN_TEMPLATE = """你是一位专业的翻译专家，请将下列文本翻译成简体中文。

翻译要求：
1. 采用中国大陆地区的用词习惯与表达方式
2. 保留原文的语气、风格与格式
3. 译文需自然流畅，符合中文语法
4. 保留原文中的 HTML 标签、链接等格式

原文：
{text}

请只输出翻译结果，不要加入任何解释或说明："""

EN_TEMPLATE = """You are a professional translator. Translate the following text into English.

Requirements:
1. Keep the original tone, style and formatting
2. Use natural, fluent English
3. Preserve HTML tags, links and other markup from the original text

Original text:
{text}

Return only the translation, without any explanation:"""

JA_TEMPLATE = """あなたはプロの翻訳者です。次のテキストを自然な日本語に翻訳してください。

要件：
1. 原文の語調、文体、書式を保つこと
2. 専門用語は日本で一般的な訳語を使うこと
3. 原文の HTML タグやリンクなどの書式を残すこと

原文：
{text}

翻訳結果のみを出力し、説明は加えないでください："""

DEFAULT_TEMPLATE = """You are a professional translator. Translate the following text into {language}.

Requirements:
1. Keep the original tone, style and formatting
2. Use natural, idiomatic {language}
3. Keep proper nouns in their original form unless a common translation exists
4. Preserve HTML tags, links and other markup from the original text

Original text:
{text}

Return only the translation, without any explanation:"""

TRANSLATION_TEMPLATES: dict[str, str] = {
    "zh-tw": ZH_TW_TEMPLATE,
    "zh-cn": ZH_CN_TEMPLATE,
    "en": EN_TEMPLATE,
    "ja": JA_TEMPLATE,
}


def build_translation_prompt(text: str, target_lang: str) -> str:
    """
    Build the translation prompt for a target language.

    Args:
        text: Source text, embedded verbatim
        target_lang: Target language code (e.g. "zh-tw")

    Returns:
        str: Prompt ready to send to the model
    """
    template = TRANSLATION_TEMPLATES.get(target_lang.lower())
    if template is not None:
        return template.format(text=text)

    language = SUPPORTED_LANGUAGES.get(target_lang.lower(), target_lang)
    return DEFAULT_TEMPLATE.format(text=text, language=language)


# =============================================================================
# Output Cleaning
# =============================================================================

LEADING_LABEL_PATTERNS = [
    re.compile(r"^翻譯結果[：:]\s*", re.IGNORECASE),
    re.compile(r"^翻译结果[：:]\s*", re.IGNORECASE),
    re.compile(r"^譯文[：:]\s*", re.IGNORECASE),
    re.compile(r"^译文[：:]\s*", re.IGNORECASE),
    re.compile(r"^翻譯[：:]\s*", re.IGNORECASE),
    re.compile(r"^翻译[：:]\s*", re.IGNORECASE),
    re.compile(r"^翻訳結果[：:]\s*", re.IGNORECASE),
    re.compile(r"^訳文[：:]\s*", re.IGNORECASE),
    re.compile(r"^翻訳[：:]\s*", re.IGNORECASE),
    re.compile(r"^translation( result)?:\s*", re.IGNORECASE),
    re.compile(r"^translated text:\s*", re.IGNORECASE),
]


def clean_translation(raw: str) -> str:
    """
    Strip leading label artifacts such as "翻譯結果：" from model output.

    Args:
        raw: Raw completion text

    Returns:
        str: Cleaned, whitespace-trimmed translation
    """
    cleaned = raw.strip()
    for pattern in LEADING_LABEL_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned.strip()
