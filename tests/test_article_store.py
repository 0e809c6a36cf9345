from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from src.contracts.article import ArticleModel
from src.storage import JsonArticleStore, StorageError, create_article_store
from src.storage.database import DatabaseManager, SqlArticleStore
from src.storage.json_document import JsonDocument

BASE_TIME = datetime(2024, 5, 6, 10, 0, tzinfo=timezone.utc)


def _article(index: int, **overrides) -> ArticleModel:
    data = {
        "id": str(1000 + index),
        "title": f"Article {index}",
        "summary": f"Résumé {index}",
        "content": f"Contenu {index}",
        "author": "Le Monde",
        "publish_date": BASE_TIME - timedelta(hours=index),
        "category": "Politique",
        "tags": ["politique"],
        "source_url": f"https://www.lemonde.fr/{index}",
        "source": "Le Monde",
        "is_hot": True,
        "sentiment": "neutral",
        "read_time": 1,
    }
    data.update(overrides)
    return ArticleModel(**data)


@pytest.fixture()
def json_store(tmp_path) -> JsonArticleStore:
    return JsonArticleStore(tmp_path / "articles.json", max_articles=3)


@pytest.fixture()
def sql_store(tmp_path) -> SqlArticleStore:
    manager = DatabaseManager({"type": "sqlite", "path": tmp_path / "articles.db"})
    return SqlArticleStore(manager, max_articles=3)


def test_json_store_absent_until_first_write(json_store) -> None:
    assert not json_store.exists()
    assert json_store.load() == []
    json_store.append([])
    assert json_store.exists()
    assert json.loads(json_store.path.read_text(encoding="utf-8")) == []


@pytest.mark.parametrize("store_fixture", ["json_store", "sql_store"])
def test_append_prepends_and_caps(request, store_fixture) -> None:
    store = request.getfixturevalue(store_fixture)
    assert store.append([_article(3), _article(4)]) == 2
    assert store.append([_article(1), _article(2)]) == 3
    assert [article.id for article in store.load()] == ["1001", "1002", "1003"]


@pytest.mark.parametrize("store_fixture", ["json_store", "sql_store"])
def test_find_and_replace_all(request, store_fixture) -> None:
    store = request.getfixturevalue(store_fixture)
    store.append([_article(1), _article(2)])
    found = store.find("1002")
    assert found is not None and found.title == "Article 2"
    assert store.find("missing") is None

    recategorized = [
        article.model_copy(update={"category": "Culture"}) for article in store.load()
    ]
    assert store.replace_all(recategorized) == 2
    assert {article.category for article in store.load()} == {"Culture"}
    assert [article.id for article in store.load()] == ["1001", "1002"]


def test_json_store_writes_camel_case_records(json_store) -> None:
    json_store.append([_article(1)])
    stored = json.loads(json_store.path.read_text(encoding="utf-8"))[0]
    assert stored["publishDate"] == "2024-05-06T09:00:00.000Z"
    assert stored["imageUrl"] == "/images/default-article.svg"
    assert stored["isHot"] is True
    assert stored["readTime"] == 1


def test_json_store_keeps_unknown_keys_and_numeric_ids(json_store) -> None:
    json_store.path.write_text(
        json.dumps(
            [
                {
                    "id": 42,
                    "title": "Ancien article",
                    "publishDate": "2024-01-01T00:00:00Z",
                    "views": 17,
                }
            ]
        ),
        encoding="utf-8",
    )
    article = json_store.load()[0]
    assert article.id == "42"
    assert article.to_payload()["views"] == 17


def test_reappended_id_replaces_previous_copy(json_store) -> None:
    json_store.append([_article(1)])
    json_store.append([_article(1, title="Article 1 mis à jour")])
    stored = json_store.load()
    assert len(stored) == 1
    assert stored[0].title == "Article 1 mis à jour"


def test_corrupt_document_raises_storage_error(json_store) -> None:
    json_store.path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        json_store.load()

    json_store.path.write_text('{"id": "1"}', encoding="utf-8")
    with pytest.raises(StorageError, match="JSON array"):
        json_store.load()


def test_json_document_write_is_atomic(tmp_path) -> None:
    document = JsonDocument(tmp_path / "nested" / "ads.json")
    document.write([{"id": "ad-1"}])
    document.write([{"id": "ad-2"}])
    assert document.read() == [{"id": "ad-2"}]
    assert [path.name for path in document.path.parent.iterdir()] == ["ads.json"]


def test_create_article_store_selects_backend(tmp_path) -> None:
    json_backend = create_article_store(
        {"type": "json", "articles_path": tmp_path / "a.json", "max_articles": 5}
    )
    assert isinstance(json_backend, JsonArticleStore)
    assert json_backend.max_articles == 5

    sql_backend = create_article_store({"type": "sqlite", "path": tmp_path / "a.db"})
    assert isinstance(sql_backend, SqlArticleStore)
    assert sql_backend.exists()


def test_database_health_status(sql_store) -> None:
    sql_store.append([_article(1)])
    health = sql_store.manager.get_health_status()
    assert health == {"status": "healthy", "type": "sqlite", "articles": 1}
