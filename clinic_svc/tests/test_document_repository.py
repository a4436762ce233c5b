"""
Tests for the generic JSON document repository.
"""
import pytest

from repositories import DocumentRepository, AncRecordRepository, SettingsRepository, HealthTipRepository


@pytest.fixture
def repo(temp_db):
    return DocumentRepository(db=temp_db, collection="things")


def test_add_and_get(repo):
    created = repo.add({"title": "First", "nested": {"a": [1, 2]}})
    assert len(created["id"]) == 20
    assert repo.get(created["id"]) == {"id": created["id"], "title": "First", "nested": {"a": [1, 2]}}


def test_body_id_is_ignored(repo):
    created = repo.add({"id": "spoofed", "title": "x"}, document_id="real")
    assert created["id"] == "real"
    assert repo.get("spoofed") is None


def test_duplicate_id_returns_none(repo):
    assert repo.add({"n": 1}, document_id="same") is not None
    assert repo.add({"n": 2}, document_id="same") is None
    assert repo.get("same")["n"] == 1


def test_collections_are_isolated(temp_db, repo):
    repo.add({"n": 1}, document_id="shared")
    other = DocumentRepository(db=temp_db, collection="others")
    assert other.get("shared") is None
    assert other.count() == 0


def test_list_all_in_insertion_order(repo):
    ids = [repo.add({"n": n})["id"] for n in range(3)]
    assert [d["id"] for d in repo.list_all()] == ids


def test_update_merges_top_level_fields(repo):
    repo.add({"a": 1, "b": {"x": 1}}, document_id="doc")
    updated = repo.update("doc", {"b": {"y": 2}, "c": 3})
    assert updated == {"id": "doc", "a": 1, "b": {"y": 2}, "c": 3}
    assert repo.get("doc") == updated


def test_update_missing_returns_none(repo):
    assert repo.update("nope", {"a": 1}) is None


def test_set_replaces_whole_document(repo):
    repo.add({"a": 1}, document_id="doc")
    repo.set("doc", {"b": 2})
    assert repo.get("doc") == {"id": "doc", "b": 2}


def test_delete(repo):
    repo.add({"a": 1}, document_id="doc")
    assert repo.delete("doc") is True
    assert repo.delete("doc") is False
    assert repo.count() == 0


def test_subclass_without_collection_is_rejected(temp_db):
    with pytest.raises(ValueError):
        DocumentRepository(db=temp_db)


def test_set_visit_rejects_unknown_key(temp_db):
    anc = AncRecordRepository(db=temp_db)
    anc.add({"basicInfo": {"clientName": "A"}}, document_id="r1")
    with pytest.raises(ValueError):
        anc.set_visit("r1", "visit9", {"x": 1})
    assert anc.set_visit("r1", "visitdelivery", {"outcome": "live birth"})["visitdelivery"] == {"outcome": "live birth"}


def test_settings_round_trip(temp_db):
    settings = SettingsRepository(db=temp_db)
    assert settings.load() is None
    settings.save({"smsEnabled": False})
    assert settings.load() == {"smsEnabled": False}


def test_increment_sent_count(temp_db):
    tips = HealthTipRepository(db=temp_db)
    tips.add({"title": "Hydrate", "sentCount": 3}, document_id="t1")
    assert tips.increment_sent_count("t1", 4)["sentCount"] == 7
    assert tips.get("t1")["sentCount"] == 7
    assert tips.increment_sent_count("missing", 1) is None


def test_ping(temp_db):
    assert temp_db.ping() is True


def test_reset_database_drops_shared_instance():
    from core.dependencies import get_database, reset_database

    first = get_database()
    assert get_database() is first
    reset_database()
    second = get_database()
    assert second is not first
    assert second.db_path == first.db_path
