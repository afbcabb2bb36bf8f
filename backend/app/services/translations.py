"""
Listing Search -- Bilingual Labels
Supports: fr (default), ar
Use  t(key, lang)  for single strings.
Use  t_list(key, lang)  for example lists.
Dynamic values use {placeholders} -- pass as kwargs to t().
"""

from typing import List

FALLBACK_LANG = "fr"


def t(key: str, lang: str = FALLBACK_LANG, **kwargs) -> str:
    """Return translated string, falling back to French."""
    entry = _T.get(key, {})
    text = entry.get(lang) or entry.get(FALLBACK_LANG, key)
    if kwargs:
        try:
            text = text.format(**kwargs)
        except (KeyError, IndexError):
            pass
    return text


def t_list(key: str, lang: str = FALLBACK_LANG) -> List[str]:
    """Return translated list, falling back to French."""
    entry = _TL.get(key, {})
    return list(entry.get(lang) or entry.get(FALLBACK_LANG, []))


def deal_type_label(deal_type: str, lang: str = FALLBACK_LANG) -> str:
    key = f"deal.{deal_type}"
    return t(key, lang) if key in _T else deal_type


# ---------------------------------------------------------------------------
# Single-string translations
# ---------------------------------------------------------------------------
_T = {
    # ---- Deal types ----
    "deal.Tous": {"fr": "Tous", "ar": "الكل"},
    "deal.Vente": {"fr": "Vente", "ar": "بيع"},
    "deal.Location": {"fr": "Location", "ar": "كراء"},
    "deal.par_mois": {"fr": "Location / par mois", "ar": "كراء / بالشهر"},
    "deal.six_mois": {"fr": "Location / 6 mois", "ar": "كراء / 6 أشهر"},
    "deal.douze_mois": {"fr": "Location / 12 mois", "ar": "كراء / 12 شهر"},
    "deal.par_nuit": {"fr": "Location / par nuit", "ar": "كراء / بالليلة"},
    "deal.court_sejour": {"fr": "Location / court séjour", "ar": "كراء / إقامة قصيرة"},

    # ---- Sort modes ----
    "sort.relevance": {"fr": "Pertinence", "ar": "الأكثر صلة"},
    "sort.newest": {"fr": "Plus récent", "ar": "الأحدث"},
    "sort.price_asc": {"fr": "Prix ↑", "ar": "السعر تصاعدي"},
    "sort.price_desc": {"fr": "Prix ↓", "ar": "السعر تنازلي"},
    "sort.area_desc": {"fr": "Surface ↓", "ar": "المساحة تنازلي"},

    # ---- Publication window ----
    "published.all": {"fr": "N'importe quand", "ar": "أي وقت"},
    "published.7": {"fr": "7 derniers jours", "ar": "آخر 7 أيام"},
    "published.30": {"fr": "30 derniers jours", "ar": "آخر 30 يوم"},
    "published.90": {"fr": "90 derniers jours", "ar": "آخر 90 يوم"},

    # ---- Suggestion types ----
    "suggestion.commune": {"fr": "Commune", "ar": "بلدية"},
    "suggestion.district": {"fr": "Quartier", "ar": "حي"},
    "suggestion.room": {"fr": "Pièces", "ar": "غرف"},
    "suggestion.amenity": {"fr": "Équipement", "ar": "تجهيز"},
    "suggestion.transaction": {"fr": "Type", "ar": "معاملة"},
    "suggestion.category": {"fr": "Catégorie", "ar": "فئة"},

    # ---- Suggestion hints ----
    "hint.district": {"fr": "Commune: {commune}", "ar": "بلدية: {commune}"},
    "hint.commune": {"fr": "Filtrer par commune", "ar": "فلترة حسب البلدية"},
    "hint.category": {"fr": "Type de bien", "ar": "نوع العقار"},
    "hint.room": {"fr": "Nombre de pièces", "ar": "عدد الغرف"},
    "hint.amenity": {"fr": "Équipement distinctif", "ar": "تجهيزات مميزة"},
    "hint.transaction": {"fr": "", "ar": ""},

    # ---- Active filter chips ----
    "chip.photos_only": {"fr": "Avec photos uniquement", "ar": "صور فقط"},
    "chip.price": {"fr": "{low} → {high}", "ar": "{low} → {high}"},
    "chip.area": {"fr": "{low} → {high} m²", "ar": "{low} → {high} م²"},
    "chip.beds": {"fr": "{count}+ chambres", "ar": "{count}+ غرف نوم"},
    "chip.baths": {"fr": "{count}+ salles de bain", "ar": "{count}+ حمامات"},
    "chip.excluded": {"fr": "Sans {label}", "ar": "بدون {label}"},

    # ---- Screen ----
    "search.placeholder": {
        "fr": "Recherche intelligente : type de transaction, catégorie, pièces, commune, quartier…",
        "ar": "بحث ذكي: نوع المعاملة، الفئة، الغرف، البلدية، الحي…",
    },
    "search.results": {"fr": "{count} résultat(s)", "ar": "{count} نتيجة"},
    "search.empty_title": {"fr": "Aucun bien trouvé", "ar": "لا توجد نتائج"},
    "search.empty_sub": {
        "fr": "Essayez d'élargir vos critères pour voir plus d'options.",
        "ar": "وسع الفلاتر قليلاً لعرض خيارات أكثر.",
    },
}


# ---------------------------------------------------------------------------
# List translations
# ---------------------------------------------------------------------------
_TL = {
    "search.examples": {
        "fr": [
            "Vente Appartement F4 Bir El Djir Canastel",
            "Location Villa T5 Oran Hassi Ben Okba",
            "Location / par mois Appartement T3 Es Senia",
            "Vente Terrain Oran",
        ],
        "ar": [
            "بيع شقة F4 بير الجير كاناستيل",
            "كراء فيلا T5 وهران حاسي بن عقبة",
            "كراء / بالشهر شقة T3 السانية",
            "بيع أرض وهران",
        ],
    },
}
