"""
Internationalization (i18n) API routes.
Labels and example queries for the browsing screen in French and Arabic.
"""

from fastapi import APIRouter, Query, HTTPException
from typing import Dict, List

from app.core.i18n import (
    get_translation,
    get_all_translations,
    get_supported_languages,
    resolve_lang,
    SUPPORTED_LANGS,
)
from app.services.translations import t, t_list

router = APIRouter(tags=["i18n"], prefix="/i18n")


def _require_supported(lang: str) -> str:
    if lang not in SUPPORTED_LANGS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported language: {lang}. Supported: {', '.join(sorted(SUPPORTED_LANGS))}"
        )
    return lang


@router.get("/languages", response_model=List[Dict[str, str]])
def list_supported_languages():
    """Supported languages with their text direction (Arabic is rtl)."""
    return get_supported_languages()


@router.get("/translations/{lang}", response_model=Dict[str, str])
def get_translations(lang: str = "fr"):
    """Every label of the browsing screen for one language (fr, ar)."""
    return get_all_translations(_require_supported(lang))


@router.get("/examples/{lang}")
def get_search_examples(lang: str = "fr"):
    """
    Placeholder and example queries shown in the empty search box.

    Returns:
        {"lang": "fr", "placeholder": "...", "examples": ["Vente Appartement F4 ...", ...]}
    """
    lang = _require_supported(lang)
    return {
        "lang": lang,
        "placeholder": t("search.placeholder", lang),
        "examples": t_list("search.examples", lang),
    }


@router.get("/translate")
def translate_key(
    key: str = Query(..., description="Translation key"),
    lang: str = Query("fr", description="Language code, unsupported codes fall back to fr")
):
    """
    Translate a single key; unknown keys are echoed back.

    Returns:
        {"key": "sort.newest", "translation": "Plus récent", "lang": "fr"}
    """
    lang = resolve_lang(lang)
    return {"key": key, "translation": get_translation(key, lang), "lang": lang}
