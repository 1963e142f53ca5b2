"""
Sync pipeline: load config -> CLI update check -> reconcile -> assemble -> write.

The reconciler finishes (including saving .skillsrc) before assembly
starts, and the config object is read-only from then on.
"""

from pathlib import Path

import httpx
import structlog

from .. import __version__
from ..config.loader import ConfigStore
from ..config.schema import ToolSettings
from ..logging import HumanLog
from ..prompts import Prompter
from ..registry.client import RegistryClient
from .assembler import SkillAssembler
from .models import SyncReport
from .reconciler import VersionReconciler
from .writer import TargetWriter

logger = structlog.get_logger()

PACKAGE_NAME = "agent-skills-sync"
PYPI_URL = f"https://pypi.org/pypi/{PACKAGE_NAME}/json"


class SyncEngine:
    """Runs a complete sync for one project root."""

    def __init__(
        self,
        root: str | Path,
        prompter: Prompter,
        settings: ToolSettings | None = None,
        client: RegistryClient | None = None,
    ):
        """Create the engine.

        Args:
            root: Project root holding .skillsrc; tool directories are created here.
            prompter: Answers the update confirmation.
            settings: Runtime settings. Defaults apply if None.
            client: Registry client to use. If None, one is created and closed per run.
        """
        self.root = Path(root)
        self.prompter = prompter
        self.settings = settings or ToolSettings()
        self.client = client
        self.store = ConfigStore(self.root)
        self.log = logger.bind(component="sync_engine")
        self.hlog = HumanLog(self.log)

    def run(self) -> SyncReport:
        """Run the pipeline.

        Raises:
            ConfigurationMissing: If .skillsrc does not exist.
            ConfigurationInvalid: If .skillsrc cannot be parsed.
        """
        config = self.store.load()

        owns_client = self.client is None
        client = self.client or RegistryClient(self.settings.registry)
        try:
            if self.settings.registry.update_check:
                self.check_cli_update(client)

            report = SyncReport()
            report.reconcile = VersionReconciler(client, self.store, self.prompter).reconcile(config)
            config = report.reconcile.config

            self.hlog.sync_start(config.registry)

            assembler = SkillAssembler(client)
            report.skills = assembler.assemble(config)
            report.failures = list(assembler.failures)

            report.write = TargetWriter(self.root).write(report.skills, config)
        finally:
            if owns_client:
                client.close()

        for failure in report.failures:
            self.log.warning("sync.partial_failure", item=failure.describe())

        self.hlog.sync_complete(failures=len(report.failures))
        self.log.info(
            "sync.complete",
            skills=len(report.skills),
            written=len(report.write.written),
            overridden=len(report.write.overridden),
            failures=len(report.failures),
        )
        return report

    def check_cli_update(self, client: RegistryClient) -> str | None:
        """Notify when PyPI has a newer release of the CLI.

        Returns:
            The latest version if it differs from the running one, else None.
            Failures are logged and ignored.
        """
        try:
            response = client.http.get(PYPI_URL)
            if not response.is_success:
                self.log.debug("sync.cli_update.unavailable", status=response.status_code)
                return None
            latest = response.json()["info"]["version"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            self.log.debug("sync.cli_update.failed", error=str(e))
            return None

        if not latest or latest == __version__:
            return None

        self.hlog.cli_update(PACKAGE_NAME, __version__, latest)
        return latest
