# config/sources.py
# French RSS source catalogue for SuperFacts
# ==========================================

"""
Every feed the collector polls is declared here, grouped by editorial family.

Each source carries:
- name: display name, also stored as the article author and source
- url: RSS/Atom endpoint
- category: fallback category when keyword categorization finds nothing
- domain: site origin used to resolve relative image URLs (optional)
- logo: path of the logo served by the front-end
"""

from __future__ import annotations

from typing import Dict, List

# General news
# ============

GENERAL_MEDIA = {
    "le_monde": {
        "name": "Le Monde",
        "url": "https://www.lemonde.fr/rss/une.xml",
        "category": "Actualités",
        "domain": "https://www.lemonde.fr",
        "logo": "/logos/lemonde.png",
    },
    "le_figaro": {
        "name": "Le Figaro",
        "url": "https://www.lefigaro.fr/rss/figaro_actualites.xml",
        "category": "Actualités",
        "domain": "https://www.lefigaro.fr",
        "logo": "/logos/figaro.png",
    },
    "liberation": {
        "name": "Libération",
        "url": "https://www.liberation.fr/arc/outboundfeeds/rss/?outputType=xml",
        "category": "Actualités",
        "domain": "https://www.liberation.fr",
        "logo": "/logos/liberation.png",
    },
    "france24": {
        "name": "France 24",
        "url": "https://www.france24.com/fr/rss",
        "category": "Actualités",
        "logo": "/logos/france24.png",
    },
    "franceinfo": {
        "name": "France Info",
        "url": "https://www.francetvinfo.fr/titres.rss",
        "category": "Actualités",
        "logo": "/logos/franceinfo.png",
    },
    "bfmtv": {
        "name": "BFM TV",
        "url": "https://www.bfmtv.com/rss/info/",
        "category": "Actualités",
        "logo": "/logos/bfmtv.png",
    },
    "lexpress": {
        "name": "L'Express",
        "url": "https://www.lexpress.fr/rss/unes.xml",
        "category": "Actualités",
        "domain": "https://www.lexpress.fr",
        "logo": "/logos/express.png",
    },
    "marianne": {
        "name": "Marianne",
        "url": "https://www.marianne.net/rss.xml",
        "category": "Actualités",
        "logo": "/logos/marianne.png",
    },
    "lobs": {
        "name": "L'Obs",
        "url": "https://www.nouvelobs.com/rss.xml",
        "category": "Actualités",
        "logo": "/logos/obs.png",
    },
    "vingt_minutes": {
        "name": "20 Minutes",
        "url": "https://www.20minutes.fr/rss-actu.xml",
        "category": "Actualités",
        "domain": "https://www.20minutes.fr",
        "logo": "/logos/20minutes.png",
    },
    "atlantico": {
        "name": "Atlantico",
        "url": "https://atlantico.fr/rss.xml",
        "category": "Actualités",
        "logo": "/logos/atlantico.png",
    },
    "slate": {
        "name": "Slate.fr",
        "url": "https://www.slate.fr/rss.xml",
        "category": "Actualités",
        "domain": "https://www.slate.fr",
        "logo": "/logos/slate.png",
    },
    "linternaute": {
        "name": "L'Internaute",
        "url": "https://www.linternaute.com/rss/une.xml",
        "category": "Actualités",
        "domain": "https://www.linternaute.com",
        "logo": "/logos/internaute.png",
    },
}

# Economy and business
# ====================

ECONOMY_MEDIA = {
    "les_echos": {
        "name": "Les Échos",
        "url": "https://www.lesechos.fr/rss.xml",
        "category": "Économie",
        "logo": "/logos/echos.png",
    },
    "la_tribune": {
        "name": "La Tribune",
        "url": "https://www.latribune.fr/rss/a-la-une.rss",
        "category": "Économie",
        "logo": "/logos/tribune.png",
    },
    "challenges": {
        "name": "Challenges",
        "url": "https://www.challenges.fr/rss.xml",
        "category": "Économie",
        "logo": "/logos/challenges.png",
    },
    "capital": {
        "name": "Capital",
        "url": "https://www.capital.fr/rss",
        "category": "Économie",
        "logo": "/logos/capital.png",
    },
    "alternatives_economiques": {
        "name": "Alternatives Économiques",
        "url": "https://www.alternatives-economiques.fr/rss.xml",
        "category": "Économie",
        "logo": "/logos/alternatives.png",
    },
}

# Tech and innovation
# ===================

TECH_MEDIA = {
    "zero_one_net": {
        "name": "01net",
        "url": "https://www.01net.com/rss/info/",
        "category": "Tech",
        "logo": "/logos/01net.png",
    },
    "clubic": {
        "name": "Clubic",
        "url": "https://www.clubic.com/feed/",
        "category": "Tech",
        "logo": "/logos/clubic.png",
    },
    "numerama": {
        "name": "Numerama",
        "url": "https://www.numerama.com/feed/",
        "category": "Tech",
        "domain": "https://www.numerama.com",
        "logo": "/logos/numerama.png",
    },
    "jdn": {
        "name": "JDN - Journal du Net",
        "url": "https://www.journaldunet.com/rss/",
        "category": "Tech",
        "logo": "/logos/jdn.png",
    },
    "frandroid": {
        "name": "Frandroid",
        "url": "https://www.frandroid.com/feed",
        "category": "Tech",
        "domain": "https://www.frandroid.com",
        "logo": "/logos/frandroid.png",
    },
    "zdnet": {
        "name": "ZDNet France",
        "url": "https://www.zdnet.fr/feeds/rss/",
        "category": "Tech",
        "domain": "https://www.zdnet.fr",
        "logo": "/logos/zdnet.png",
    },
    "presse_citron": {
        "name": "Presse-citron",
        "url": "https://www.presse-citron.net/feed/",
        "category": "Tech",
        "domain": "https://www.presse-citron.net",
        "logo": "/logos/pressecitron.png",
    },
    "echos_start": {
        "name": "Les Échos Start",
        "url": "https://start.lesechos.fr/feed/",
        "category": "Tech",
        "logo": "/logos/echosstart.png",
    },
}

# Science, health and environment
# ===============================

SCIENCE_MEDIA = {
    "futura_sciences": {
        "name": "Futura Sciences",
        "url": "https://www.futura-sciences.com/rss/actualites.xml",
        "category": "Sciences",
        "domain": "https://www.futura-sciences.com",
        "logo": "/logos/futura.png",
    },
    "sciences_et_avenir": {
        "name": "Sciences et Avenir",
        "url": "https://www.sciencesetavenir.fr/rss.xml",
        "category": "Sciences",
        "logo": "/logos/sciencesetavenir.png",
    },
    "science_et_vie": {
        "name": "Science & Vie",
        "url": "https://www.science-et-vie.com/rss.xml",
        "category": "Sciences",
        "logo": "/logos/sciencevie.png",
    },
    "la_recherche": {
        "name": "La Recherche",
        "url": "https://www.larecherche.fr/rss.xml",
        "category": "Sciences",
        "logo": "/logos/larecherche.png",
    },
}

HEALTH_MEDIA = {
    "doctissimo": {
        "name": "Doctissimo",
        "url": "https://www.doctissimo.fr/rss.xml",
        "category": "Santé",
        "logo": "/logos/doctissimo.png",
    },
    "top_sante": {
        "name": "Top Santé",
        "url": "https://www.topsante.com/rss.xml",
        "category": "Santé",
        "logo": "/logos/topsante.png",
    },
    "futura_sante": {
        "name": "Futura Sciences Santé",
        "url": "https://www.futura-sciences.com/rss/sante.xml",
        "category": "Santé",
        "domain": "https://www.futura-sciences.com",
        "logo": "/logos/futura.png",
    },
    "sciences_et_avenir_sante": {
        "name": "Sciences et Avenir Santé",
        "url": "https://www.sciencesetavenir.fr/rss/sante.xml",
        "category": "Santé",
        "logo": "/logos/sciencesetavenir.png",
    },
    "figaro_sante": {
        "name": "Le Figaro Santé",
        "url": "https://www.lefigaro.fr/rss/figaro_sante.xml",
        "category": "Santé",
        "domain": "https://www.lefigaro.fr",
        "logo": "/logos/figaro.png",
    },
}

ENVIRONMENT_MEDIA = {
    "reporterre": {
        "name": "Reporterre",
        "url": "https://reporterre.net/spip.php?page=backend",
        "category": "Environnement",
        "domain": "https://reporterre.net",
        "logo": "/logos/reporterre.png",
    },
    "actu_environnement": {
        "name": "Actu-Environnement",
        "url": "https://www.actu-environnement.com/ae/rss/news.rss",
        "category": "Environnement",
        "domain": "https://www.actu-environnement.com",
        "logo": "/logos/actuenv.png",
    },
}

# Sport and culture
# =================

SPORT_MEDIA = {
    "lequipe": {
        "name": "L'Équipe",
        "url": "https://www.lequipe.fr/rss/actu_rss.xml",
        "category": "Sport",
        "logo": "/logos/equipe.png",
    },
    "rmc_sport": {
        "name": "RMC Sport",
        "url": "https://rmcsport.bfmtv.com/rss/",
        "category": "Sport",
        "logo": "/logos/rmcsport.png",
    },
    "eurosport": {
        "name": "Eurosport",
        "url": "https://www.eurosport.fr/rss.xml",
        "category": "Sport",
        "domain": "https://www.eurosport.fr",
        "logo": "/logos/eurosport.png",
    },
    "so_foot": {
        "name": "So Foot",
        "url": "https://www.sofoot.com/rss.xml",
        "category": "Sport",
        "domain": "https://www.sofoot.com",
        "logo": "/logos/sofoot.png",
    },
}

CULTURE_MEDIA = {
    "telerama": {
        "name": "Télérama",
        "url": "https://www.telerama.fr/rss.xml",
        "category": "Culture",
        "logo": "/logos/telerama.png",
    },
    "inrocks": {
        "name": "Les Inrockuptibles",
        "url": "https://www.lesinrocks.com/rss.xml",
        "category": "Culture",
        "logo": "/logos/inrocks.png",
    },
    "premiere": {
        "name": "Première",
        "url": "https://www.premiere.fr/rss",
        "category": "Culture",
        "domain": "https://www.premiere.fr",
        "logo": "/logos/premiere.png",
    },
}

# Regional press
# ==============

REGIONAL_MEDIA = {
    "ouest_france": {
        "name": "Ouest-France",
        "url": "https://www.ouest-france.fr/rss-en-continu.xml",
        "category": "Régional",
        "domain": "https://www.ouest-france.fr",
        "logo": "/logos/ouestfrance.png",
    },
    "sud_ouest": {
        "name": "Sud Ouest",
        "url": "https://www.sudouest.fr/rss/",
        "category": "Régional",
        "domain": "https://www.sudouest.fr",
        "logo": "/logos/sudouest.png",
    },
    "la_depeche": {
        "name": "La Dépêche",
        "url": "https://www.ladepeche.fr/rss.xml",
        "category": "Régional",
        "domain": "https://www.ladepeche.fr",
        "logo": "/logos/ladepeche.png",
    },
    "nice_matin": {
        "name": "Nice-Matin",
        "url": "https://www.nicematin.com/rss",
        "category": "Régional",
        "domain": "https://www.nicematin.com",
        "logo": "/logos/nicematin.png",
    },
    "le_progres": {
        "name": "Le Progrès",
        "url": "https://www.leprogres.fr/rss",
        "category": "Régional",
        "domain": "https://www.leprogres.fr",
        "logo": "/logos/leprogres.png",
    },
    "voix_du_nord": {
        "name": "La Voix du Nord",
        "url": "https://www.lavoixdunord.fr/rss",
        "category": "Régional",
        "domain": "https://www.lavoixdunord.fr",
        "logo": "/logos/voixdunord.png",
    },
    "dna": {
        "name": "DNA - Dernières Nouvelles d'Alsace",
        "url": "https://www.dna.fr/rss/",
        "category": "Régional",
        "domain": "https://www.dna.fr",
        "logo": "/logos/dna.png",
    },
}

# Politics and society
# ====================

SOCIETY_MEDIA = {
    "mediapart": {
        "name": "Mediapart",
        "url": "https://www.mediapart.fr/articles/feed",
        "category": "Politique",
        "domain": "https://www.mediapart.fr",
        "logo": "/logos/mediapart.png",
    },
    "rue89": {
        "name": "Rue89",
        "url": "https://www.nouvelobs.com/rue89/rss.xml",
        "category": "Société",
        "logo": "/logos/rue89.png",
    },
    "madame_figaro": {
        "name": "Madame Figaro",
        "url": "https://madame.lefigaro.fr/rss/madame_figaro_une.xml",
        "category": "Société",
        "logo": "/logos/madamefigaro.png",
    },
    "marie_claire": {
        "name": "Marie Claire",
        "url": "https://www.marieclaire.fr/rss.xml",
        "category": "Société",
        "domain": "https://www.marieclaire.fr",
        "logo": "/logos/marieclaire.png",
    },
}

# Full catalogue
# ==============
# Insertion order is the polling order.

ALL_SOURCES: Dict[str, Dict[str, str]] = {
    **GENERAL_MEDIA,
    **ECONOMY_MEDIA,
    **SCIENCE_MEDIA,
    **TECH_MEDIA,
    **HEALTH_MEDIA,
    **SPORT_MEDIA,
    **CULTURE_MEDIA,
    **REGIONAL_MEDIA,
    **SOCIETY_MEDIA,
    **ENVIRONMENT_MEDIA,
}

# Category slugs published in the structured sitemap
SITEMAP_CATEGORIES: List[str] = [
    "politique",
    "economie",
    "technologie",
    "sport",
    "culture",
    "sciences",
    "sante",
    "international",
]


def get_sources_by_category(category: str) -> Dict[str, Dict[str, str]]:
    """Return the sources whose fallback category matches, case-insensitively."""
    wanted = category.lower()
    return {
        source_id: source_config
        for source_id, source_config in ALL_SOURCES.items()
        if source_config["category"].lower() == wanted
    }


def get_source_domain(source_name: str) -> str | None:
    """Origin of a source, looked up by display name."""
    lowered = source_name.lower()
    for source_config in ALL_SOURCES.values():
        if source_config["name"].lower() == lowered:
            return source_config.get("domain")
    return None


def validate_sources(sources: Dict[str, Dict[str, str]] | None = None) -> int:
    """Check that every source is complete and points at an http(s) URL.

    Returns the number of validated sources.
    """
    catalogue = ALL_SOURCES if sources is None else sources
    required_fields = ["name", "url", "category"]

    for source_id, source_config in catalogue.items():
        for field in required_fields:
            if not source_config.get(field):
                raise ValueError(f"Source {source_id} is missing field {field}")

        url = source_config["url"]
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"Source {source_id} has an invalid URL: {url}")

    return len(catalogue)
