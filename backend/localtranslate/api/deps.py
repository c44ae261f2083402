"""
FastAPI dependencies for the process-owned translation components.
"""

from fastapi import Request

from localtranslate.services.translation_service import TranslationService


def get_translation_service(request: Request) -> TranslationService:
    """
    Get the translation service built during application startup.

    Tests override this dependency to inject a service wired to a fake runtime.
    """
    return request.app.state.translation_service
