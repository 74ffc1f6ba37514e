# FILE: tests/test_storage_service.py
"""
Tests for studio/storage/service.py
CRUD semantics, ordering, cascades, defaults and seed data.
"""

import time
from datetime import datetime, timedelta

import pytest

from studio.storage import models, schemas, service


def _conversation(db, title="Chat", user_id="u1"):
    return service.create_conversation(db, schemas.ConversationCreate(title=title, user_id=user_id))


def _message(db, conversation_id, content="hi", role="user", metadata=None):
    return service.create_message(
        db,
        schemas.MessageCreate(conversation_id=conversation_id, role=role, content=content, metadata=metadata),
    )


class TestUsers:
    def test_password_is_hashed(self, db):
        user = service.create_user(db, schemas.UserCreate(username="alice", password="secret"))
        assert user.password != "secret"
        assert service.verify_password("secret", user.password)
        assert not service.verify_password("wrong", user.password)

    def test_verify_password_bad_hash(self):
        assert service.verify_password("x", "not-a-bcrypt-hash") is False

    def test_lookup_by_username(self, db):
        user = service.create_user(db, schemas.UserCreate(username="bob", password="pw"))
        assert service.get_user_by_username(db, "bob").id == user.id
        assert service.get_user_by_username(db, "nobody") is None
        assert len(user.id) == 36


class TestConversations:
    def test_list_most_recent_first(self, db):
        first = _conversation(db, "first")
        second = _conversation(db, "second")
        first.updated_at = datetime.utcnow() - timedelta(hours=1)
        second.updated_at = datetime.utcnow()
        db.commit()

        titles = [c.title for c in service.list_conversations(db, "u1")]
        assert titles == ["second", "first"]

    def test_list_filters_by_user(self, db):
        _conversation(db, "mine", "u1")
        _conversation(db, "theirs", "u2")
        assert [c.title for c in service.list_conversations(db, "u1")] == ["mine"]

    def test_touch_bumps_updated_at(self, db):
        conv = _conversation(db)
        before = conv.updated_at
        time.sleep(0.01)
        service.touch_conversation(db, conv.id)
        assert service.get_conversation(db, conv.id).updated_at > before

    def test_update_ignores_id(self, db):
        conv = _conversation(db)
        updated = service.update_conversation(db, conv.id, {"id": "other", "title": "Renamed"})
        assert updated.id == conv.id
        assert updated.title == "Renamed"

    def test_update_unknown(self, db):
        assert service.update_conversation(db, "missing", {"title": "x"}) is None

    def test_delete_cascades_messages(self, db):
        conv = _conversation(db)
        _message(db, conv.id, "one")
        _message(db, conv.id, "two")

        assert service.delete_conversation(db, conv.id) is True
        assert db.query(models.Message).count() == 0
        assert service.delete_conversation(db, conv.id) is False


class TestMessages:
    def test_list_oldest_first(self, db):
        conv = _conversation(db)
        a = _message(db, conv.id, "a")
        b = _message(db, conv.id, "b")
        a.created_at = datetime.utcnow() - timedelta(minutes=5)
        db.commit()
        assert [m.content for m in service.list_messages(db, conv.id)] == ["a", "b"]
        assert b.id != a.id

    def test_metadata_round_trip(self, db):
        conv = _conversation(db)
        msg = _message(db, conv.id, metadata={"model": "llama2"})
        out = schemas.MessageOut.model_validate(msg).model_dump(by_alias=True)
        assert out["metadata"] == {"model": "llama2"}
        assert out["conversationId"] == conv.id


class TestProjects:
    def test_update_metadata_maps_to_meta(self, db):
        project = service.create_project(db, schemas.ProjectCreate(name="P", user_id="u1"))
        updated = service.update_project(db, project.id, {"metadata": {"k": 1}})
        assert updated.meta == {"k": 1}

    def test_delete_cascades_plan_versions(self, db):
        project = service.create_project(db, schemas.ProjectCreate(name="P", user_id="u1"))
        service.create_plan_version(db, project.id, schemas.ProjectPlanVersionCreate(title="v"))
        assert service.delete_project(db, project.id)
        assert db.query(models.ProjectPlanVersion).count() == 0


class TestConfigurationsAndEngines:
    def test_user_sees_global_and_own_configs(self, db):
        service.create_llm_configuration(
            db, schemas.LLMConfigurationCreate(name="global", endpoint="http://x", model="m")
        )
        service.create_llm_configuration(
            db, schemas.LLMConfigurationCreate(name="mine", endpoint="http://x", model="m", user_id="u1")
        )
        service.create_llm_configuration(
            db, schemas.LLMConfigurationCreate(name="other", endpoint="http://x", model="m", user_id="u2")
        )
        names = {c.name for c in service.list_llm_configurations(db, "u1")}
        assert names == {"global", "mine"}

    def test_config_defaults(self, db):
        config = service.create_llm_configuration(
            db, schemas.LLMConfigurationCreate(name="c", endpoint="http://x", model="m")
        )
        assert config.temperature == 70
        assert config.max_tokens == 2048
        assert config.is_default is False

    def test_enabled_engines_without_user_are_global_only(self, db):
        service.create_search_engine(db, schemas.SearchEngineCreate(name="Google"))
        service.create_search_engine(db, schemas.SearchEngineCreate(name="Bing", user_id="u1"))
        service.create_search_engine(db, schemas.SearchEngineCreate(name="DuckDuckGo", enabled=False))

        assert [e.name for e in service.list_enabled_search_engines(db, None)] == ["Google"]
        assert {e.name for e in service.list_enabled_search_engines(db, "u1")} == {"Google", "Bing"}

    def test_listing_without_user_is_global_only(self, db):
        service.create_search_engine(db, schemas.SearchEngineCreate(name="Google"))
        service.create_search_engine(db, schemas.SearchEngineCreate(name="Bing", user_id="u1"))
        service.create_search_engine(db, schemas.SearchEngineCreate(name="DuckDuckGo", enabled=False))

        assert [e.name for e in service.list_search_engines(db, None)] == ["DuckDuckGo", "Google"]
        assert [e.name for e in service.list_search_engines(db, "u1")] == ["Bing", "DuckDuckGo", "Google"]


class TestPreferences:
    def test_defaults_created_on_first_read(self, db):
        prefs = service.get_user_preferences(db, "u1")
        assert prefs.theme == "dark"
        assert prefs.font_size == "medium"
        assert prefs.max_concurrent_requests == 5
        assert db.query(models.UserPreferences).count() == 1

        service.get_user_preferences(db, "u1")
        assert db.query(models.UserPreferences).count() == 1

    def test_update_cannot_change_owner(self, db):
        prefs = service.update_user_preferences(db, "u1", {"theme": "light", "user_id": "u2"})
        assert prefs.theme == "light"
        assert prefs.user_id == "u1"

    def test_reset(self, db):
        service.update_user_preferences(db, "u1", {"theme": "light", "compact_mode": True})
        prefs = service.reset_user_preferences(db, "u1")
        assert prefs.theme == "dark"
        assert prefs.compact_mode is False


class TestPlanVersions:
    def test_auto_increment_and_order(self, db):
        project = service.create_project(db, schemas.ProjectCreate(name="P"))
        v1 = service.create_plan_version(db, project.id, schemas.ProjectPlanVersionCreate(title="one"))
        v2 = service.create_plan_version(db, project.id, schemas.ProjectPlanVersionCreate(title="two"))

        assert (v1.version, v2.version) == (1, 2)
        assert [v.version for v in service.list_plan_versions(db, project.id)] == [2, 1]
        assert service.get_latest_plan_version(db, project.id).id == v2.id

    def test_explicit_version_kept(self, db):
        project = service.create_project(db, schemas.ProjectCreate(name="P"))
        plan = service.create_plan_version(
            db, project.id, schemas.ProjectPlanVersionCreate(title="x", version=7)
        )
        assert plan.version == 7

    def test_latest_when_none(self, db):
        assert service.get_latest_plan_version(db, "nope") is None


class TestSeeds:
    def test_seed_once(self, db):
        service.seed_defaults(db)
        service.seed_defaults(db)

        engines = {e.name: e.enabled for e in db.query(models.SearchEngine).all()}
        assert engines == {"Google": True, "Bing": True, "DuckDuckGo": False}

        configs = db.query(models.LLMConfiguration).all()
        assert len(configs) == 1
        assert configs[0].endpoint == "http://localhost:11434"
        assert configs[0].is_default is True
