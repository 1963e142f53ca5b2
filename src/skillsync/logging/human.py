"""
Human Log -- formatter and helper for sync status lines.

Produces short colored lines so the user can follow what init and sync do,
without technical noise.

Example output:
    Checking for skill updates...
    All skills are up to date.

    Syncing skills from https://github.com/acme/skills...
      - Discovering flutter skills (flutter-v1.2.0)...
        + Fetched flutter/bloc (3 files)
        ! Skipping overridden item: .claude/skills/flutter/bloc/SKILL.md
      - Updated .claude/skills/ (Claude Code)
    All skills synced successfully!
"""

import logging
import sys

import click

from .levels import HUMAN


class HumanFormatter:
    """Formats sync events into readable text.

    Each event type has its own format. Unknown events return None and are
    not printed.
    """

    def format_event(self, event: str, **kw) -> str | None:
        """Format one event.

        Args:
            event: Event name (e.g. "sync.start", "write.overridden")
            **kw: Event parameters

        Returns:
            Formatted text or None if the event has no defined format
        """
        match event:

            # ── SYNC ─────────────────────────────────────────────────────
            case "sync.start":
                registry = kw.get("registry", "?")
                return click.style(f"\nSyncing skills from {registry}...", fg="cyan")

            case "sync.complete":
                failures = kw.get("failures", 0)
                if failures:
                    return click.style(
                        f"\nSkills synced with {failures} item(s) skipped.", fg="yellow"
                    )
                return click.style("\nAll skills synced successfully!", fg="green")

            case "sync.cli_update":
                current = kw.get("current", "?")
                latest = kw.get("latest", "?")
                package = kw.get("package", "?")
                return click.style(
                    f"\nA newer CLI version is available: {current} -> {latest}\n"
                    f"   Run `pip install -U {package}` to update.\n",
                    fg="magenta",
                )

            # ── RECONCILE ────────────────────────────────────────────────
            case "reconcile.checking":
                return click.style("Checking for skill updates...", dim=True)

            case "reconcile.updates":
                updates = kw.get("updates", [])
                lines = [click.style(f"\n{len(updates)} update(s) available:", fg="yellow")]
                for u in updates:
                    lines.append(
                        f"  - {click.style(u['category'], fg='cyan')}: "
                        f"{u['from']} -> {click.style(u['to'], fg='green')}"
                    )
                return "\n".join(lines)

            case "reconcile.up_to_date":
                return click.style("All skills are up to date.\n", dim=True)

            case "reconcile.applied":
                filename = kw.get("filename", ".skillsrc")
                return click.style(f"{filename} updated successfully.\n", fg="green")

            case "reconcile.declined":
                return click.style("Keeping current versions.\n", dim=True)

            case "reconcile.failed":
                return click.style(
                    "  (Could not check for updates, proceeding with current versions)",
                    dim=True,
                )

            # ── ASSEMBLE ─────────────────────────────────────────────────
            case "assemble.unsupported_registry":
                return click.style(
                    "Error: Only GitHub registries are supported for auto-discovery.",
                    fg="red",
                )

            case "assemble.category.discover":
                category = kw.get("category", "?")
                ref = kw.get("ref", "?")
                return click.style(f"  - Discovering {category} skills ({ref})...", dim=True)

            case "assemble.category.unavailable":
                category = kw.get("category", "?")
                ref = kw.get("ref", "?")
                return click.style(
                    f"    x Failed to fetch {category}@{ref}. Skipping.", fg="red"
                )

            case "assemble.category.error":
                category = kw.get("category", "?")
                error = kw.get("error", "unknown")
                return click.style(
                    f"    x Failed to fetch remote skills for {category}: {error}", fg="red"
                )

            case "assemble.skill.fetched":
                category = kw.get("category", "?")
                skill = kw.get("skill", "?")
                files = kw.get("files", 0)
                return click.style(f"    + Fetched {category}/{skill} ({files} files)", dim=True)

            case "assemble.file.dropped":
                path = kw.get("path", "?")
                return click.style(f"    ! Could not fetch {path}", fg="yellow")

            # ── WRITE ────────────────────────────────────────────────────
            case "write.overridden":
                path = kw.get("path", "?")
                return click.style(f"    ! Skipping overridden item: {path}", fg="yellow")

            case "write.tool.updated":
                path = kw.get("path", "?")
                name = kw.get("name", "?")
                return click.style(f"  - Updated {path}/ ({name})", dim=True)

            # ── INIT ─────────────────────────────────────────────────────
            case "init.registry_error":
                error = kw.get("error", "unknown")
                return click.style(
                    f"Failed to fetch registry metadata or tree: {error}", fg="red"
                )

            case "init.package_json_error":
                error = kw.get("error", "unknown")
                return click.style(f"Failed to read package.json: {error}", fg="red")

            case "init.aborted":
                return click.style("Aborted.", fg="yellow")

            case "init.unsupported_framework":
                framework = kw.get("framework", "?")
                return (
                    click.style(
                        f"\nNotice: Skills for {framework} are not yet strictly defined "
                        f"and will be added soon.",
                        fg="yellow",
                    )
                    + "\n"
                    + click.style(
                        "The CLI will still generate the configuration with global standards.\n",
                        dim=True,
                    )
                )

            case "init.written":
                filename = kw.get("filename", ".skillsrc")
                framework = kw.get("framework", "?")
                languages = kw.get("languages") or []
                return "\n".join([
                    click.style(f"\nInitialized {filename} with your preferences!", fg="green"),
                    click.style(f"   Selected framework: {framework}", dim=True),
                    click.style(
                        f"   Auto-enabled languages: {', '.join(languages) or 'none'}",
                        dim=True,
                    ),
                ])

            case _:
                return None


class HumanLogHandler(logging.Handler):
    """Logging handler that renders HUMAN events.

    Only processes records at exactly the HUMAN level (25).
    Writes to stderr so stdout pipes stay clean.
    """

    _RESERVED = frozenset((
        "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "exc_info", "exc_text", "stack_info",
        "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "message",
        "taskName", "name", "event",
    ))

    def __init__(self, stream=None) -> None:
        super().__init__(level=HUMAN)
        self.stream = stream or sys.stderr
        self.formatter_inst = HumanFormatter()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.levelno != HUMAN:
                return

            # structlog's wrap_for_formatter hands over the event dict as msg
            if isinstance(record.msg, dict):
                kw = dict(record.msg)
                event = kw.pop("event", None)
            else:
                event = getattr(record, "event", None) or record.getMessage()
                kw = {
                    k: v for k, v in record.__dict__.items()
                    if not k.startswith("_") and k not in self._RESERVED
                }

            if not event:
                return

            formatted = self.formatter_inst.format_event(event, **kw)
            if formatted is not None:
                self.stream.write(formatted + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


class HumanLog:
    """Typed helper to emit HUMAN level events.

    Instead of calling log.log(HUMAN, "event", ...) directly, use methods
    with clear semantic names.

    Usage:
        hlog = HumanLog(structlog.get_logger())
        hlog.sync_start("https://github.com/acme/skills")
        hlog.skill_fetched("flutter", "bloc", 3)
    """

    def __init__(self, logger) -> None:
        self._log = logger

    def sync_start(self, registry: str) -> None:
        self._log.log(HUMAN, "sync.start", registry=registry)

    def sync_complete(self, failures: int = 0) -> None:
        self._log.log(HUMAN, "sync.complete", failures=failures)

    def cli_update(self, package: str, current: str, latest: str) -> None:
        self._log.log(HUMAN, "sync.cli_update", package=package, current=current, latest=latest)

    def reconcile_checking(self) -> None:
        self._log.log(HUMAN, "reconcile.checking")

    def reconcile_updates(self, updates: list[dict[str, str]]) -> None:
        self._log.log(HUMAN, "reconcile.updates", updates=updates)

    def reconcile_up_to_date(self) -> None:
        self._log.log(HUMAN, "reconcile.up_to_date")

    def reconcile_applied(self, filename: str) -> None:
        self._log.log(HUMAN, "reconcile.applied", filename=filename)

    def reconcile_declined(self) -> None:
        self._log.log(HUMAN, "reconcile.declined")

    def reconcile_failed(self, error: str) -> None:
        self._log.log(HUMAN, "reconcile.failed", error=error)

    def unsupported_registry(self, registry: str) -> None:
        self._log.log(HUMAN, "assemble.unsupported_registry", registry=registry)

    def category_discover(self, category: str, ref: str) -> None:
        self._log.log(HUMAN, "assemble.category.discover", category=category, ref=ref)

    def category_unavailable(self, category: str, ref: str) -> None:
        self._log.log(HUMAN, "assemble.category.unavailable", category=category, ref=ref)

    def category_error(self, category: str, error: str) -> None:
        self._log.log(HUMAN, "assemble.category.error", category=category, error=error)

    def skill_fetched(self, category: str, skill: str, files: int) -> None:
        self._log.log(HUMAN, "assemble.skill.fetched", category=category, skill=skill, files=files)

    def file_dropped(self, path: str) -> None:
        self._log.log(HUMAN, "assemble.file.dropped", path=path)

    def overridden(self, path: str) -> None:
        self._log.log(HUMAN, "write.overridden", path=path)

    def tool_updated(self, path: str, name: str) -> None:
        self._log.log(HUMAN, "write.tool.updated", path=path, name=name)

    def init_event(self, name: str, **kw) -> None:
        self._log.log(HUMAN, f"init.{name}", **kw)
