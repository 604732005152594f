"""
Shared helpers for the command handlers.
"""

from typing import Optional, Sequence, TypeVar

from tribute_tracker.core.console import get_console
from tribute_tracker.domain.models import Project, Song, TonePreset
from tribute_tracker.domain.store import AppStore

T = TypeVar("T", Project, Song, TonePreset)


def _match(ref: str, candidates: Sequence[T], name_attr: str) -> Optional[T]:
    """Exact id match first, then case-insensitive name, then unique prefix."""
    for item in candidates:
        if item.id == ref:
            return item
    lowered = ref.strip().lower()
    exact = [c for c in candidates if getattr(c, name_attr).lower() == lowered]
    if exact:
        return exact[0]
    prefixed = [c for c in candidates if getattr(c, name_attr).lower().startswith(lowered)]
    if len(prefixed) == 1:
        return prefixed[0]
    return None


def resolve_project(store: AppStore, ref: str) -> Optional[Project]:
    return _match(ref, store.projects, "name")


def resolve_song(store: AppStore, ref: str) -> Optional[Song]:
    return _match(ref, store.songs, "title")


def resolve_tone_preset(store: AppStore, ref: str) -> Optional[TonePreset]:
    return _match(ref, store.tone_presets, "name")


def progress_bar(percent: int, width: int = 20) -> str:
    filled = round(width * max(0, min(100, percent)) / 100)
    return "█" * filled + "░" * (width - filled)


def show_data_error(store: AppStore) -> None:
    """Banner for the last remote failure, cleared once shown."""
    if store.data_error:
        get_console().print(f"[bold red]⚠ {store.data_error}[/bold red]")
        store.clear_data_error()
