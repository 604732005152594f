"""
Project command handlers.

Handles: projects list, projects add, projects delete
"""

import argparse

from rich.table import Table

from tribute_tracker.context import AppContext
from tribute_tracker.core.console import get_console
from tribute_tracker.core.output import log
from tribute_tracker.domain import stats
from tribute_tracker.helpers import resolve_project


def handle_projects_list_command(ctx: AppContext, args: argparse.Namespace) -> int:
    store = ctx.store
    if not store.projects:
        log("No projects yet. Create one with: projects add <name>")
        return 0

    table = Table(title="Projects")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Band")
    table.add_column("Songs", justify="right")
    table.add_column("Complete", justify="right")
    for project in store.projects:
        table.add_row(
            project.id,
            project.name,
            project.band_name,
            str(stats.project_song_count(project.id, store.songs)),
            f"{stats.project_completion(project.id, store.songs)}%",
        )
    get_console().print(table)
    return 0


def handle_projects_add_command(ctx: AppContext, args: argparse.Namespace) -> int:
    name = (args.name or "").strip()
    if not name:
        log("Project name is required", level="error")
        return 1

    project = ctx.store.add_project(
        name, band_name=args.band or "", description=args.description or ""
    )
    log(f"✅ Created project '{project.name}'", level="success")
    return 0


def handle_projects_delete_command(ctx: AppContext, args: argparse.Namespace) -> int:
    project = resolve_project(ctx.store, args.project)
    if project is None:
        log(f"Project not found: {args.project}", level="error")
        return 1

    ctx.store.delete_project(project.id)
    log(f"🗑 Deleted project '{project.name}' and its songs")
    return 0
