"""
Internationalization (i18n) support for the listing search service.
The browsing screen is bilingual: French (default) and Arabic.
Delegates to app.services.translations for the canonical translation store.
"""

from typing import Dict, List
from enum import Enum

from app.services.translations import FALLBACK_LANG, _T, _TL, t


class Language(str, Enum):
    """Supported languages."""
    FR = "fr"
    AR = "ar"


# Supported language codes set
SUPPORTED_LANGS = {lang.value for lang in Language}


def resolve_lang(lang: str) -> str:
    """Lower-cased language code, or the fallback when unsupported."""
    lang = (lang or "").lower()
    return lang if lang in SUPPORTED_LANGS else FALLBACK_LANG


def get_translation(key: str, lang: str = FALLBACK_LANG, **kwargs) -> str:
    """Get translated string for a key in specified language."""
    if key not in _T:
        return key
    return t(key, resolve_lang(lang), **kwargs)


def get_all_translations(lang: str = FALLBACK_LANG) -> Dict[str, str]:
    """Get all translations for a language; list entries are comma-joined."""
    lang = resolve_lang(lang)
    result = {}
    for key, lang_dict in _T.items():
        result[key] = str(lang_dict.get(lang) or lang_dict.get(FALLBACK_LANG, ""))
    for key, lang_dict in _TL.items():
        values = lang_dict.get(lang) or lang_dict.get(FALLBACK_LANG, [])
        result[key] = ", ".join(str(v) for v in values)
    return result


def get_supported_languages() -> List[Dict[str, str]]:
    """Get list of supported languages with metadata."""
    return [
        {"code": "fr", "name": "French", "native_name": "Français", "direction": "ltr"},
        {"code": "ar", "name": "Arabic", "native_name": "العربية", "direction": "rtl"},
    ]
