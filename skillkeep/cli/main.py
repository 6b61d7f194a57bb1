"""
Typer CLI for the skillkeep progress store.

Commands:
    skillkeep db init               - Create tables and seed the sequence counter
    skillkeep status                - Review state of every tracked skill
    skillkeep due                   - Skills due for review, most overdue first
    skillkeep decay                 - Run the decay sweep and save a snapshot
    skillkeep snapshots show        - List recent snapshots
    skillkeep snapshots prune       - Keep only the N most recent snapshots
    skillkeep rarity                - Depth-based gem rarity per skill

Usage:
    skillkeep --help
    skillkeep snapshots prune --keep 3
    skillkeep rarity --catalog skills.json
"""

from __future__ import annotations

from pathlib import Path

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from skillkeep.core.timestamps import format_timestamp, utcnow
from skillkeep.db.database import create_db_engine, init_db
from skillkeep.errors import SkillGraphError, SkillkeepError
from skillkeep.gems import compute_depth_map
from skillkeep.logging_setup import configure_logging
from skillkeep.mastery import MasteryService
from skillkeep.session import ProgressTracker
from skillkeep.skillgraph import SkillGraph, load_skill_graph
from skillkeep.spacedrep import ReviewStatus, Scheduler
from skillkeep.store import EventRepo, SequenceCounter, SnapshotStore

app = typer.Typer(help="skillkeep: learner progress, spaced repetition and gems")
console = Console()

_STATUS_STYLES = {
    ReviewStatus.NOT_DUE: "green",
    ReviewStatus.DUE: "yellow",
    ReviewStatus.OVERDUE: "red",
    ReviewStatus.GRADUATED: "cyan",
}


@app.callback()
def main_callback(
    log_level: str | None = typer.Option(None, "--log-level", help="Override the configured log level"),
):
    """Learner progress store."""
    settings = get_settings()
    configure_logging(level=(log_level or settings.log_level).upper(), log_file=settings.log_file)


# ========================================
# Context Builder (Dependency Injection)
# ========================================


class CLIContext:
    """
    Dependency container for CLI commands.

    Lazily builds the engine and stores from settings.
    """

    def __init__(self):
        self.settings = get_settings()
        self._engine = None
        self._sequencer = None

    @property
    def engine(self):
        if self._engine is None:
            self._engine = create_db_engine(self.settings.database_url)
            init_db(self._engine)
        return self._engine

    @property
    def sequencer(self) -> SequenceCounter:
        if self._sequencer is None:
            self._sequencer = SequenceCounter(self.engine)
        return self._sequencer

    @property
    def snapshot_store(self) -> SnapshotStore:
        return SnapshotStore(self.engine)

    @property
    def event_repo(self) -> EventRepo:
        return EventRepo(self.engine, self.sequencer)

    def skill_graph(self, catalog: Path | None = None, required: bool = False) -> SkillGraph:
        """Load the skill catalog; an empty graph when none is configured."""
        path = catalog or self.settings.skill_catalog_path
        if path is None:
            if required:
                rprint("[red]✗[/red] No skill catalog: pass --catalog or set SKILL_CATALOG_PATH")
                raise typer.Exit(code=1)
            return SkillGraph([])
        try:
            return load_skill_graph(path)
        except SkillGraphError as e:
            logger.error(f"Invalid skill catalog: {e}")
            raise typer.Exit(code=1)

    def scheduler(self) -> Scheduler:
        """Read-only scheduler view of the latest snapshot."""
        latest = self.snapshot_store.latest()
        data = latest.data if latest else None
        return Scheduler(data, MasteryService(data))


# ========================================
# DATABASE COMMANDS
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Create all tables and seed the global sequence.

    Safe to run multiple times (idempotent).
    """
    ctx = CLIContext()
    try:
        current = ctx.sequencer.current()
    except SkillkeepError as e:
        logger.error(f"Database initialization failed: {e}")
        raise typer.Exit(code=1)
    rprint(f"[green]✓[/green] Database initialized (sequence at {current})")


# ========================================
# REVIEW COMMANDS
# ========================================


@app.command("status")
def status() -> None:
    """Show the spaced-repetition state of every tracked skill."""
    ctx = CLIContext()
    scheduler = ctx.scheduler()
    states = scheduler.all_review_states()
    if not states:
        rprint("[dim]No skills under review yet.[/dim]")
        return

    now = utcnow()
    table = Table(title="Review Status", show_header=True)
    table.add_column("Skill", style="cyan")
    table.add_column("Status")
    table.add_column("Stage", justify="right")
    table.add_column("Hits", justify="right")
    table.add_column("Interval (d)", justify="right")
    table.add_column("Days Until", justify="right")
    table.add_column("Next Review", style="dim")

    for skill_id in sorted(states):
        rs = states[skill_id]
        st = rs.status(now)
        table.add_row(
            skill_id,
            f"[{_STATUS_STYLES[st]}]{st.value}[/{_STATUS_STYLES[st]}]",
            str(rs.stage),
            str(rs.consecutive_hits),
            str(rs.current_interval_days),
            str(rs.days_until_review(now)),
            format_timestamp(rs.next_review_date),
        )
    console.print(table)


@app.command("due")
def due() -> None:
    """List mastered skills due for review, most overdue first."""
    ctx = CLIContext()
    scheduler = ctx.scheduler()
    now = utcnow()
    skills = scheduler.due_skills(now)
    if not skills:
        rprint("[green]✓[/green] Nothing due for review")
        return
    for skill_id in skills:
        rs = scheduler.get_review_state(skill_id)
        rprint(f"  {skill_id} [dim]({rs.overdue_days(now):.1f} days overdue)[/dim]")


@app.command("decay")
def decay(
    catalog: Path | None = typer.Option(None, "--catalog", help="Skill catalog JSON"),
) -> None:
    """Run the decay sweep now and persist the result as a new snapshot."""
    ctx = CLIContext()
    tracker = ProgressTracker(
        ctx.snapshot_store,
        ctx.event_repo,
        ctx.sequencer,
        ctx.skill_graph(catalog),
        keep=ctx.settings.snapshot_keep,
        snapshot_version=ctx.settings.snapshot_version,
    )
    now = utcnow()
    try:
        transitions = tracker.start(now)
        snapshot = tracker.finish(now)
    except SkillkeepError as e:
        logger.error(f"Decay sweep failed: {e}")
        raise typer.Exit(code=1)

    if not transitions:
        rprint("[green]✓[/green] No skills decayed")
    for t in transitions:
        rprint(f"  [red]{t.skill_name}[/red]: {t.from_state.display_name} -> {t.to_state.display_name}")
    rprint(f"[dim]Saved snapshot at sequence {snapshot.sequence}[/dim]")


# ========================================
# SNAPSHOT COMMANDS
# ========================================

snapshots_app = typer.Typer(help="Snapshot inspection and retention")
app.add_typer(snapshots_app, name="snapshots")


@snapshots_app.command("show")
def snapshots_show(
    limit: int = typer.Option(10, "--limit", "-n", help="Number of snapshots to list"),
) -> None:
    """List the most recent snapshots."""
    ctx = CLIContext()
    snapshots = ctx.snapshot_store.list_recent(limit=limit)
    if not snapshots:
        rprint("[dim]No snapshots stored.[/dim]")
        return

    table = Table(title="Snapshots", show_header=True)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Sequence", justify="right", style="cyan")
    table.add_column("Timestamp")
    table.add_column("Version", justify="right")
    table.add_column("Skills", justify="right", style="green")
    table.add_column("Reviews", justify="right", style="yellow")
    for snap in snapshots:
        data = snap.data
        table.add_row(
            str(snap.id),
            str(snap.sequence),
            format_timestamp(snap.timestamp),
            str(data.version),
            str(len(data.mastery.skills) if data.mastery else 0),
            str(len(data.spaced_rep.reviews) if data.spaced_rep else 0),
        )
    console.print(table)


@snapshots_app.command("prune")
def snapshots_prune(
    keep: int | None = typer.Option(None, "--keep", "-k", help="Snapshots to retain (default: from config)"),
) -> None:
    """Delete all but the most recent snapshots. The newest is always kept."""
    ctx = CLIContext()
    keep = keep if keep is not None else ctx.settings.snapshot_keep
    try:
        deleted = ctx.snapshot_store.prune(keep)
    except SkillkeepError as e:
        logger.error(f"Prune failed: {e}")
        raise typer.Exit(code=1)
    rprint(f"[green]✓[/green] Pruned {deleted} snapshot(s)")


# ========================================
# GEM COMMANDS
# ========================================


@app.command("rarity")
def rarity(
    catalog: Path | None = typer.Option(None, "--catalog", help="Skill catalog JSON"),
) -> None:
    """Show the gem rarity each skill yields, from its depth in the skill graph."""
    ctx = CLIContext()
    graph = ctx.skill_graph(catalog, required=True)
    depth_map = compute_depth_map(graph)

    q1, q2, q3 = depth_map.boundaries
    table = Table(title=f"Gem Rarity (quartile boundaries {q1}/{q2}/{q3})", show_header=True)
    table.add_column("Skill", style="cyan")
    table.add_column("Name")
    table.add_column("Depth", justify="right")
    table.add_column("Rarity", style="magenta")
    for skill in graph.topological_order():
        table.add_row(
            skill.id,
            skill.name,
            str(depth_map.depth(skill.id)),
            depth_map.rarity_for_skill(skill.id).display_name,
        )
    console.print(table)


if __name__ == "__main__":
    app()
