"""
Tests for VersionReconciler: drift detection, confirmation and persistence.
"""

from unittest.mock import MagicMock

import pytest
import yaml

from skillsync.config.loader import ConfigStore
from skillsync.config.schema import SkillConfig
from skillsync.prompts import NoTTYError, Prompter, ScriptedPrompter
from skillsync.registry.models import RemoteMetadata
from skillsync.sync.reconciler import VersionReconciler, find_updates


@pytest.fixture
def store(tmp_path) -> ConfigStore:
    return ConfigStore(tmp_path)


def saved(store: ConfigStore) -> dict:
    return yaml.safe_load(store.path.read_text(encoding="utf-8"))


class TestFindUpdates:
    def test_detects_drift(self):
        config = SkillConfig(
            registry="x",
            skills={
                "flutter": {"ref": "flutter-v1.0.0"},
                "dart": {"ref": "dart-v1.0.0"},
            },
        )
        metadata = RemoteMetadata.model_validate(
            {
                "categories": {
                    "flutter": {"version": "2.0.0", "tag_prefix": "flutter-v"},
                    "dart": {"version": "1.0.0", "tag_prefix": "dart-v"},
                }
            }
        )
        updates = find_updates(config, metadata)
        assert [u.to_dict() for u in updates] == [
            {"category": "flutter", "from": "flutter-v1.0.0", "to": "flutter-v2.0.0"}
        ]

    def test_unpinned_compares_against_main(self):
        config = SkillConfig(registry="x", skills={"dart": {}})
        metadata = RemoteMetadata.model_validate(
            {"categories": {"dart": {"version": "1.0.0", "tag_prefix": "dart-v"}}}
        )
        assert find_updates(config, metadata)[0].from_ref == "main"

    def test_disabled_and_incomplete_ignored(self):
        config = SkillConfig(
            registry="x",
            skills={"flutter": {"enabled": False, "ref": "old"}, "dart": {"ref": "old"}},
        )
        metadata = RemoteMetadata.model_validate(
            {
                "categories": {
                    "flutter": {"version": "2.0.0", "tag_prefix": "flutter-v"},
                    "dart": {"version": "2.0.0"},
                }
            }
        )
        assert find_updates(config, metadata) == []


class TestReconcile:
    @pytest.fixture
    def config(self, github, store) -> SkillConfig:
        github.set_metadata({"flutter": {"version": "2.0.0", "tag_prefix": "flutter-v"}})
        config = SkillConfig(
            registry=github.registry,
            agents=["claude"],
            skills={"flutter": {"enabled": True, "ref": "flutter-v1.0.0"}},
        )
        store.save(config)
        return config

    def test_confirm_rewrites_ref_and_saves(self, config, client, store):
        prompter = ScriptedPrompter({"update_all": True})
        result = VersionReconciler(client, store, prompter).reconcile(config)

        assert result.applied
        assert config.skills["flutter"].ref == "flutter-v2.0.0"
        assert saved(store)["skills"]["flutter"]["ref"] == "flutter-v2.0.0"
        assert prompter.asked == ["update_all"]

    def test_decline_leaves_everything(self, config, client, store):
        before = store.path.read_text(encoding="utf-8")
        result = VersionReconciler(client, store, ScriptedPrompter({"update_all": False})).reconcile(config)

        assert not result.applied
        assert result.checked
        assert [u.to_ref for u in result.updates] == ["flutter-v2.0.0"]
        assert config.skills["flutter"].ref == "flutter-v1.0.0"
        assert store.path.read_text(encoding="utf-8") == before

    def test_up_to_date_asks_nothing(self, github, client, store):
        github.set_metadata({"flutter": {"version": "1.0.0", "tag_prefix": "flutter-v"}})
        config = SkillConfig(registry=github.registry, skills={"flutter": {"ref": "flutter-v1.0.0"}})
        prompter = ScriptedPrompter()

        result = VersionReconciler(client, store, prompter).reconcile(config)

        assert result.checked
        assert result.updates == []
        assert prompter.asked == []
        assert not store.exists()

    def test_metadata_read_on_default_branch(self, github, client, store):
        github.default_branch = "develop"
        github.set_metadata({"dart": {"version": "3.0.0", "tag_prefix": "dart-v"}}, ref="develop")
        config = SkillConfig(registry=github.registry, skills={"dart": {"ref": "dart-v1.0.0"}})

        result = VersionReconciler(client, store, ScriptedPrompter({"update_all": True})).reconcile(config)

        assert config.skills["dart"].ref == "dart-v3.0.0"
        assert result.applied

    def test_malformed_category_does_not_hide_others(self, github, client, store):
        github.set_metadata(
            {
                "flutter": {"version": 2, "tag_prefix": "flutter-v"},
                "react": {"version": ["1.0.0"], "tag_prefix": "react-v"},
                "dart": {"version": "2.0.0", "tag_prefix": "dart-v"},
            }
        )
        config = SkillConfig(
            registry=github.registry,
            skills={
                "flutter": {"ref": "flutter-v1.0.0"},
                "react": {"ref": "react-v0.9.0"},
                "dart": {"ref": "dart-v1.0.0"},
            },
        )

        result = VersionReconciler(client, store, ScriptedPrompter({"update_all": False})).reconcile(config)

        assert result.checked
        assert [(u.category, u.to_ref) for u in result.updates] == [
            ("flutter", "flutter-v2"),
            ("dart", "dart-v2.0.0"),
        ]

    def test_no_metadata_skips(self, github, client, store):
        config = SkillConfig(registry=github.registry, skills={"dart": {"ref": "dart-v1.0.0"}})
        result = VersionReconciler(client, store, ScriptedPrompter()).reconcile(config)
        assert not result.checked
        assert result.error is None


class TestReconcileFailures:
    def test_unsupported_registry_skips_without_requests(self, github, client, store):
        config = SkillConfig(registry="https://bitbucket.org/acme/skills", skills={"dart": {}})
        result = VersionReconciler(client, store, ScriptedPrompter()).reconcile(config)
        assert not result.checked
        assert github.requests == []

    def test_unreachable_registry_is_swallowed(self, github, client, store):
        github.repo_status = 500
        config = SkillConfig(registry=github.registry, skills={"dart": {"ref": "v1"}})

        result = VersionReconciler(client, store, ScriptedPrompter()).reconcile(config)

        assert result.error
        assert config.skills["dart"].ref == "v1"

    def test_headless_confirmation_keeps_refs(self, github, client, store):
        github.set_metadata({"dart": {"version": "2.0.0", "tag_prefix": "dart-v"}})
        config = SkillConfig(registry=github.registry, skills={"dart": {"ref": "dart-v1.0.0"}})
        prompter = MagicMock(spec=Prompter)
        prompter.confirm.side_effect = NoTTYError("no tty")

        result = VersionReconciler(client, store, prompter).reconcile(config)

        assert not result.applied
        assert "no tty" in result.error
        assert config.skills["dart"].ref == "dart-v1.0.0"

    def test_failed_save_leaves_config_untouched(self, github, client, store):
        github.set_metadata({"dart": {"version": "2.0.0", "tag_prefix": "dart-v"}})
        config = SkillConfig(registry=github.registry, skills={"dart": {"ref": "dart-v1.0.0"}})
        store.save = MagicMock(side_effect=OSError("read-only"))

        result = VersionReconciler(client, store, ScriptedPrompter({"update_all": True})).reconcile(config)

        assert not result.applied
        assert config.skills["dart"].ref == "dart-v1.0.0"
