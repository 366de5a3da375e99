"""
Translation API - forwards one text to the localization engine.

Three outcomes only: translated text, missing_key (feature not configured)
and upstream_error (the engine failed). The request itself never fails.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from .schemas import TranslateRequest, TranslateResponse
from ..core import config
from ..core.translation import LocalizationEngine, TranslationError, get_localization_engine
from util.logging import logger

router = APIRouter()


@router.post("/translate", response_model=TranslateResponse, response_model_exclude_none=True)
async def translate_text(
    request: TranslateRequest,
    engine: Optional[LocalizationEngine] = Depends(get_localization_engine),
):
    """Translate text for a viewer."""
    target_locale = request.targetLocale or config.get_default_target_locale()

    if engine is None:
        logger.log_translation(target_locale, "disabled", reason="missing_key")
        return JSONResponse(
            status_code=400,
            content=TranslateResponse(ok=False, reason="missing_key", text=request.text).model_dump(),
        )

    try:
        translated = await engine.localize_text(
            request.text,
            target_locale=target_locale,
            source_locale=request.sourceLocale or None,
            fast=True,
        )
    except TranslationError as e:
        logger.error(f"Lingo translate error: {e}")
        logger.log_translation(target_locale, "failed", text=request.text, reason="upstream_error")
        return JSONResponse(
            status_code=502,
            content=TranslateResponse(ok=False, reason="upstream_error", text=request.text).model_dump(),
        )

    logger.log_translation(target_locale, "success", text=request.text)
    return TranslateResponse(ok=True, text=translated)
