"""
Static search vocabulary.
Each entry pairs a canonical facet value with the free-text terms
(French / English / Arabic) that refer to it. Read by the suggestion
ranker, the query extractor and the filter engine. No behaviour here.
"""

from typing import Dict, List

# ---- Amenities: key -> French display label ----
AMENITY_OPTIONS: Dict[str, str] = {
    "residence_fermee": "Residence fermee",
    "parking_sous_sol": "Parking sous-sol",
    "garage": "Garage",
    "box": "Box",
    "luxe": "Luxe",
    "haut_standing": "Haut standing",
    "domotique": "Domotique",
    "double_ascenseur": "Double ascenseur",
    "concierge": "Concierge",
    "camera_surveillance": "Camera de surveillance",
    "groupe_electrogene": "Groupe electrogene",
    "chauffage_central": "Chauffage central",
    "climatisation": "Climatisation",
    "cheminee": "Cheminee",
    "dressing": "Dressing",
    "porte_blindee": "Porte blindee",
    "cuisine_equipee": "Cuisine equipee",
    "sdb_italienne": "Salle de bain italienne",
    "deux_balcons": "Deux balcons",
    "terrasse": "Terrasse",
    "jardin": "Jardin",
    "piscine": "Piscine",
    "salle_sport": "Salle de sport",
    "interphone": "Interphone",
    "fibre": "Wifi fibre optique",
    "lumineux": "Appartement tres lumineux",
    "securite_h24": "Agent de securite H24",
    "vue_ville": "Vue ville",
    "vue_mer": "Vue mer",
}

# ---- Terms that, after a negation prefix, exclude an amenity ("sans piscine") ----
AMENITY_NEGATION_TERMS: Dict[str, List[str]] = {
    "residence_fermee": ["residence fermee", "residence", "اقامة مغلقة"],
    "parking_sous_sol": ["parking", "sous sol", "parking sous sol"],
    "garage": ["garage"],
    "box": ["box"],
    "luxe": ["luxe"],
    "haut_standing": ["haut standing", "standing"],
    "domotique": ["domotique", "smart home"],
    "double_ascenseur": ["ascenseur", "double ascenseur", "elevator"],
    "concierge": ["concierge", "gardien"],
    "camera_surveillance": ["camera", "surveillance"],
    "groupe_electrogene": ["groupe electrogene", "generateur"],
    "chauffage_central": ["chauffage", "chauffage central"],
    "climatisation": ["clim", "climatisation"],
    "cheminee": ["cheminee"],
    "dressing": ["dressing"],
    "porte_blindee": ["porte blindee"],
    "cuisine_equipee": ["cuisine equipee", "cuisine"],
    "sdb_italienne": ["italienne", "salle de bain italienne"],
    "deux_balcons": ["balcon", "deux balcons"],
    "terrasse": ["terrasse"],
    "jardin": ["jardin"],
    "piscine": ["piscine", "pool"],
    "salle_sport": ["salle de sport", "gym"],
    "interphone": ["interphone"],
    "fibre": ["fibre", "wifi", "internet"],
    "lumineux": ["lumineux", "lumineuse"],
    "securite_h24": ["securite", "h24", "security"],
    "vue_ville": ["vue ville", "city view"],
    "vue_mer": ["vue mer", "sea view", "mer"],
}

NEGATION_PREFIXES = ["sans", "without", "no", "pas de", "بدون", "بلا"]

# ---- Room codes, in display order ----
ROOM_OPTIONS: List[str] = [
    "Studio", "T1", "T2", "T3", "T4", "T5", "T6+", "F2", "F3", "F4", "F5", "F6+",
]

# ---- Deal types ----
DEAL_ANY = "Tous"
DEAL_SALE = "Vente"
DEAL_RENTAL = "Location"
RENTAL_SUBKINDS = ["par_mois", "six_mois", "douze_mois", "par_nuit", "court_sejour"]
DEAL_TYPES = [DEAL_ANY, DEAL_SALE, DEAL_RENTAL] + RENTAL_SUBKINDS

TRANSACTION_SUGGESTIONS: List[Dict[str, object]] = [
    {"deal_type": "Vente", "terms": ["vente", "vendre", "sale", "buy", "achat", "بيع"]},
    {"deal_type": "Location", "terms": ["location", "louer", "rent", "rental", "lease", "كراء", "ايجار"]},
    {"deal_type": "par_mois", "terms": ["par mois", "mensuel", "monthly", "mois"]},
    {"deal_type": "six_mois", "terms": ["6 mois", "six mois", "6mois"]},
    {"deal_type": "douze_mois", "terms": ["12 mois", "douze mois", "12mois", "annuel", "yearly"]},
    {"deal_type": "par_nuit", "terms": ["par nuit", "par nuite", "nuit", "nightly"]},
    {"deal_type": "court_sejour", "terms": ["court sejour", "court séjour", "short stay", "vacance", "weekend"]},
]

# ---- Property categories ----
CATEGORY_SUGGESTIONS: List[Dict[str, object]] = [
    {
        "label": "Appartement",
        "terms": [
            "appartement", "appart", "apartment", "studio",
            "f2", "f3", "f4", "f5", "f6", "t1", "t2", "t3", "t4", "t5", "t6", "شقة",
        ],
    },
    {"label": "Villa", "terms": ["villa", "house", "maison", "فيلا"]},
    {"label": "Terrain", "terms": ["terrain", "lot", "parcelle", "land", "ارض"]},
    {"label": "Local", "terms": ["local", "commercial", "commerce", "shop", "boutique", "magasin", "محل"]},
    {"label": "Bureau", "terms": ["bureau", "office", "administratif", "مكتب"]},
]

# Categories for which a room count makes no sense
NON_ROOM_CATEGORY_TERMS = [
    "terrain", "lot", "parcelle", "land", "local", "commercial", "commerce", "shop",
    "boutique", "magasin", "bureau", "office", "ارض", "محل", "مكتب",
]
APARTMENT_TERMS = ["appartement", "appart", "apartment", "studio", "شقة"]
HOUSE_TERMS = ["villa", "maison", "house", "فيلا"]

# ---- Equivalent spellings for free-text tokens ----
SEARCH_ALIAS_MAP: Dict[str, List[str]] = {
    "oran": ["wahran", "وهران"],
    "wahran": ["oran", "وهران"],
    "وهران": ["oran", "wahran"],
    "bir el djir": ["bir eldjir", "بير الجير", "bir djir"],
    "bir eldjir": ["bir el djir", "بير الجير"],
    "بير الجير": ["bir el djir", "bir eldjir"],
    "canastel": ["canastl", "kanastel", "كاناستيل"],
    "canastl": ["canastel", "kanastel"],
    "es senia": ["essenia", "السنية", "el senia"],
    "essenia": ["es senia", "السنية"],
    "sidi chahmi": ["sidi chehmi", "سيدي الشحمي"],
    "appartement": ["appart", "apartment", "شقة"],
    "villa": ["maison", "house", "فيلا"],
    "terrain": ["lot", "parcelle", "land", "ارض"],
    "vente": ["sale", "buy", "achat", "بيع"],
    "location": ["rent", "rental", "lease", "كراء", "ايجار"],
}


def amenity_label(key: str) -> str:
    return AMENITY_OPTIONS.get(key, key)


def transaction_terms(deal_type: str) -> List[str]:
    """Synonyms registered for a deal type (empty for unknown kinds)."""
    for entry in TRANSACTION_SUGGESTIONS:
        if entry["deal_type"] == deal_type:
            return list(entry["terms"])  # type: ignore[arg-type]
    return []
