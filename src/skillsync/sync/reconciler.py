"""
Version Reconciler -- detects drift between pinned refs and published tags.

Flow:
1. Parse owner/repo from the registry. Unrecognized locators are not
   reconciled (no error).
2. Resolve the registry's default branch and fetch skills/metadata.json
   there. Missing metadata skips the check.
3. Every enabled category with both version and tag_prefix published is
   compared: tag_prefix + version vs. its ref (or "main").
4. All candidates are confirmed with a single yes/no question. On yes,
   every ref is rewritten and .skillsrc is saved.

Nothing raised in here reaches the caller: a failed check only means the
sync proceeds with the refs already pinned.
"""

import structlog

from ..config.loader import ConfigStore
from ..config.schema import SkillConfig
from ..errors import UnsupportedRegistry
from ..logging import HumanLog
from ..prompts import Prompter
from ..registry.client import RegistryClient, parse_registry
from ..registry.models import RemoteMetadata
from .models import ReconcileResult, VersionUpdate

logger = structlog.get_logger()


def find_updates(config: SkillConfig, metadata: RemoteMetadata) -> list[VersionUpdate]:
    """Update candidates for enabled categories, in config order.

    Categories missing version or tag_prefix in the metadata are never
    proposed.
    """
    updates: list[VersionUpdate] = []
    for name, category in config.skills.items():
        if not category.enabled:
            continue
        latest = metadata.latest_tag(name)
        if latest is None:
            continue
        current = category.effective_ref
        if current != latest:
            updates.append(VersionUpdate(category=name, from_ref=current, to_ref=latest))
    return updates


class VersionReconciler:
    """Checks pinned refs against the registry and optionally upgrades them."""

    def __init__(self, client: RegistryClient, store: ConfigStore, prompter: Prompter):
        self.client = client
        self.store = store
        self.prompter = prompter
        self.log = logger.bind(component="reconciler")
        self.hlog = HumanLog(self.log)

    def reconcile(self, config: SkillConfig) -> ReconcileResult:
        """Run the check. config is updated in place only if the user confirms.

        Returns:
            ReconcileResult; never raises.
        """
        try:
            owner, repo = parse_registry(config.registry)
        except UnsupportedRegistry:
            self.log.info("reconcile.skipped", reason="unsupported_registry", registry=config.registry)
            return ReconcileResult(config=config)

        try:
            return self._reconcile(config, owner, repo)
        except Exception as e:
            self.log.warning("reconcile.failed", error=str(e))
            self.hlog.reconcile_failed(str(e))
            return ReconcileResult(config=config, error=str(e))

    def _reconcile(self, config: SkillConfig, owner: str, repo: str) -> ReconcileResult:
        self.hlog.reconcile_checking()

        branch = self.client.resolve_default_branch(owner, repo)
        metadata = self.client.fetch_metadata(owner, repo, branch)
        if metadata is None:
            self.log.info("reconcile.skipped", reason="no_metadata", branch=branch)
            return ReconcileResult(config=config)

        updates = find_updates(config, metadata)
        if not updates:
            self.hlog.reconcile_up_to_date()
            return ReconcileResult(config=config, checked=True)

        self.hlog.reconcile_updates([u.to_dict() for u in updates])
        confirmed = self.prompter.confirm(
            "update_all",
            f"Would you like to update your {self.store.path.name} to the latest versions?",
            default=True,
        )
        if not confirmed:
            self.hlog.reconcile_declined()
            return ReconcileResult(config=config, updates=updates, checked=True)

        # Persist first so a failed write leaves the in-memory config untouched
        updated = config.model_copy(deep=True)
        for u in updates:
            updated.skills[u.category].ref = u.to_ref
        self.store.save(updated)

        for u in updates:
            config.skills[u.category].ref = u.to_ref

        self.log.info("reconcile.applied", updates=len(updates))
        self.hlog.reconcile_applied(self.store.path.name)
        return ReconcileResult(config=config, updates=updates, applied=True, checked=True)
