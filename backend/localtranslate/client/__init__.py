"""
Translator client: page-side counterpart of the translation service.
"""

from localtranslate.client.document import Document, Element, TextNode, TreeDocument
from localtranslate.client.segmenter import should_translate, split_text
from localtranslate.client.translator_client import RetryPolicy, TranslatorClient, TranslatorClientError

__all__ = [
    "Document",
    "Element",
    "RetryPolicy",
    "TextNode",
    "TranslatorClient",
    "TranslatorClientError",
    "TreeDocument",
    "should_translate",
    "split_text",
]
