"""Keyword based categorization, tagging and sentiment for French articles."""

from __future__ import annotations

import math
import re
from functools import lru_cache
from typing import Dict, List, Sequence

DEFAULT_CATEGORY = "Actualités"

# Checked in order; the first category with a matching keyword wins
CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "Politique": [
        "politique", "président", "gouvernement", "ministre", "macron", "élection",
        "assemblée", "sénat", "loi", "député", "vote", "maire", "conseil", "municipal",
    ],
    "Économie": [
        "économie", "business", "finance", "euro", "bourse", "entreprise", "industrie",
        "commerce", "marché", "inflation", "croissance", "startup", "emploi", "chômage",
        "salaire", "banque", "investissement",
    ],
    "International": [
        "international", "monde", "europe", "ukraine", "russie", "chine", "usa", "guerre",
        "conflit", "diplomatie", "brexit", "otan", "onu",
    ],
    "Tech": [
        "technologie", "intelligence artificielle", "ia", "numérique", "internet", "google",
        "meta", "apple", "microsoft", "startup", "android", "iphone", "app", "logiciel",
        "cyber", "data", "blockchain", "crypto",
    ],
    "Santé": [
        "santé", "médecine", "hôpital", "médecin", "maladie", "covid", "vaccin", "virus",
        "traitement", "médicament", "chirurgie", "patient", "infirmier", "clinique",
        "thérapie", "diagnostic", "symptôme", "épidémie", "prévention", "nutrition",
        "alimentation", "bien-être", "mental", "psychiatrie", "cancer", "diabète",
        "cardiologie", "neurologie", "pédiatrie", "gériatrie", "urgences", "soins",
    ],
    "Sciences": [
        "science", "recherche", "découverte", "étude", "espace", "nasa", "astronomie",
        "physique", "chimie", "biologie", "mathématiques", "laboratoire", "scientifique",
    ],
    "Environnement": [
        "climat", "environnement", "écologie", "carbone", "pollution", "biodiversité",
        "réchauffement", "cop", "énergie", "renouvelable", "solaire", "éolien",
        "nucléaire", "déchets", "recyclage", "nature", "forêt",
    ],
    "Culture": [
        "culture", "cinéma", "film", "livre", "musique", "théâtre", "art", "festival",
        "exposition", "concert", "spectacle", "littérature", "acteur", "réalisateur",
        "oscar", "cannes",
    ],
    "Sport": [
        "sport", "football", "rugby", "tennis", "jeux olympiques", "champion", "match",
        "psg", "ligue 1", "basketball", "handball", "cyclisme", "tour de france", "euro",
        "coupe du monde", "athlétisme",
    ],
    "Société": [
        "société", "social", "éducation", "école", "université", "famille", "jeunes",
        "retraite", "femme", "égalité", "discrimination", "immigration", "logement",
        "transport",
    ],
    "Régional": [
        "région", "local", "ville", "département", "commune", "municipal", "territorial",
    ],
}

# keyword -> tag
TAG_KEYWORDS: Dict[str, str] = {
    "france": "france",
    "paris": "paris",
    "europe": "europe",
    "climat": "climat",
    "macron": "macron",
    "intelligence artificielle": "ia",
    "covid": "covid",
    "ukraine": "ukraine",
    "économie": "économie",
    "santé": "santé",
    "médecine": "médecine",
    "hôpital": "hôpital",
    "vaccin": "vaccin",
    "cancer": "cancer",
    "mental": "santé-mentale",
    "nutrition": "nutrition",
    "chirurgie": "chirurgie",
    "patient": "patient",
    "environnement": "environnement",
    "écologie": "écologie",
    "pollution": "pollution",
    "biodiversité": "biodiversité",
    "réchauffement": "réchauffement",
    "énergie": "énergie",
    "renouvelable": "renouvelable",
    "crypto": "cryptomonnaie",
    "blockchain": "blockchain",
    "startup": "startup",
    "innovation": "innovation",
    "cinéma": "cinéma",
    "festival": "festival",
    "sport": "sport",
    "football": "football",
    "régional": "régional",
    "local": "local",
}

POSITIVE_WORDS = ["succès", "victoire", "amélioration", "croissance", "innovation", "record", "réussite"]
NEGATIVE_WORDS = ["crise", "échec", "problème", "guerre", "accident", "mort", "violence", "chute"]

# Keywords this short only match whole words ("ia" must not hit "social")
_SHORT_KEYWORD_LENGTH = 3


@lru_cache(maxsize=None)
def _keyword_pattern(keyword: str) -> re.Pattern:
    escaped = re.escape(keyword)
    if len(keyword) <= _SHORT_KEYWORD_LENGTH:
        return re.compile(rf"(?<!\w){escaped}(?!\w)")
    # Longer keywords also match inflected forms: "vaccin" -> "vaccination"
    return re.compile(rf"(?<!\w){escaped}")


def mentions(text: str, keyword: str) -> bool:
    """True when lowercased ``text`` mentions ``keyword`` at a word start."""
    return _keyword_pattern(keyword).search(text) is not None


def _combined(title: str, content: str) -> str:
    return f"{title} {content}".lower()


def categorize_article(title: str, content: str, source_category: str = "") -> str:
    text = _combined(title, content)
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(mentions(text, keyword) for keyword in keywords):
            return category
    return source_category or DEFAULT_CATEGORY


def generate_tags(title: str, content: str, category: str, max_tags: int = 6) -> List[str]:
    """Lowercased category first, then keyword tags without repeats."""
    text = _combined(title, content)
    tags = [category.lower()]
    for keyword, tag in TAG_KEYWORDS.items():
        if tag not in tags and mentions(text, keyword):
            tags.append(tag)
    return tags[:max_tags]


def determine_sentiment(
    title: str,
    content: str,
    positive_words: Sequence[str] = POSITIVE_WORDS,
    negative_words: Sequence[str] = NEGATIVE_WORDS,
) -> str:
    text = _combined(title, content)
    positive = sum(1 for word in positive_words if mentions(text, word))
    negative = sum(1 for word in negative_words if mentions(text, word))
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def calculate_read_time(content: str, words_per_minute: int = 200) -> int:
    """Minutes needed to read ``content``, never less than 1."""
    return max(1, math.ceil(len(content.split()) / words_per_minute))
