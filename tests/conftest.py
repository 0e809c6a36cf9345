from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional
from xml.sax.saxutils import escape

import pytest
import requests
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.serving import create_app
from src.services import SiteServices, build_services
from superfacts.config_manager import Config, load_config

# Monday, noon in Paris
FIXED_NOW = datetime(2024, 5, 6, 10, 0, tzinfo=timezone.utc)

LE_MONDE_URL = "https://feeds.test/lemonde.xml"
LES_ECHOS_URL = "https://feeds.test/lesechos.xml"
BROKEN_URL = "https://feeds.test/broken.xml"

TEST_SOURCES = {
    "le_monde": {"name": "Le Monde", "url": LE_MONDE_URL, "category": "Actualités"},
    "les_echos": {"name": "Les Echos", "url": LES_ECHOS_URL, "category": "Économie"},
    "broken": {"name": "Broken Feed", "url": BROKEN_URL, "category": "Tech"},
}


def pytest_configure(config):
    config.addinivalue_line("markers", "e2e: exercises the HTTP application end to end")


def rss_document(items: List[Dict[str, str]], title: str = "Flux de test") -> str:
    rendered = []
    for item in items:
        parts = [
            f"<title>{escape(item['title'])}</title>",
            f"<link>{escape(item.get('link', ''))}</link>",
            f"<description>{escape(item.get('description', ''))}</description>",
        ]
        if item.get("pubDate"):
            parts.append(f"<pubDate>{item['pubDate']}</pubDate>")
        if item.get("image"):
            parts.append(f'<enclosure url="{escape(item["image"])}" type="image/jpeg" length="0"/>')
        rendered.append("<item>" + "".join(parts) + "</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{escape(title)}</title><link>https://feeds.test/</link>"
        "<description>Flux</description>" + "".join(rendered) + "</channel></rss>"
    )


LE_MONDE_FEED = rss_document(
    [
        {
            "title": "Le gouvernement présente sa réforme des retraites",
            "link": "https://www.lemonde.fr/politique/article/reforme.html",
            "description": "<p>Le ministre a détaillé le projet devant les députés.</p>",
            "pubDate": "Mon, 06 May 2024 08:00:00 GMT",
            "image": "https://img.lemonde.fr/reforme.jpg",
        },
        {
            "title": "Festival de Cannes : la sélection officielle dévoilée",
            "link": "https://www.lemonde.fr/culture/article/cannes.html",
            "description": "<p>Vingt films en compétition cette année.</p>",
            "pubDate": "Sun, 05 May 2024 18:00:00 GMT",
        },
    ]
)

LES_ECHOS_FEED = rss_document(
    [
        {
            "title": "Record de croissance pour les jeunes entreprises",
            "link": "https://www.lesechos.fr/entreprises/record.html",
            "description": "<p>Les levées de fonds atteignent un niveau record.</p>",
            "pubDate": "Mon, 06 May 2024 06:30:00 GMT",
        },
    ]
)


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class FakeSession:
    """Serves canned feed bodies by URL; unknown URLs fail like a dead host."""

    def __init__(self, feeds: Optional[Dict[str, object]] = None):
        self.feeds = dict(feeds or {})
        self.requested: List[str] = []

    def get(self, url: str, timeout: Optional[float] = None) -> FakeResponse:
        self.requested.append(url)
        payload = self.feeds.get(url)
        if payload is None:
            raise requests.ConnectionError(f"cannot reach {url}")
        if isinstance(payload, int):
            return FakeResponse(b"", status_code=payload)
        return FakeResponse(str(payload).encode("utf-8"))


def write_config(tmp_path: Path, extra: str = "") -> Path:
    config_file = tmp_path / "config.toml"
    data_dir = (tmp_path / "data").as_posix()
    config_file.write_text(f'[paths]\ndata_dir = "{data_dir}"\n{extra}', encoding="utf-8")
    return config_file


@pytest.fixture()
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture()
def site_config(tmp_path) -> Config:
    return load_config(write_config(tmp_path), environ={})


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession({LE_MONDE_URL: LE_MONDE_FEED, LES_ECHOS_URL: LES_ECHOS_FEED})


@pytest.fixture()
def services(site_config, fake_session, fixed_clock) -> SiteServices:
    return build_services(
        site_config, sources=TEST_SOURCES, session=fake_session, clock=fixed_clock
    )


@pytest.fixture()
def client(services) -> TestClient:
    return TestClient(create_app(services))
