"""
Practice tracker domain models.

Contains the in-memory shape of projects, songs, tone presets, the practice
schedule and practice logs. Remote rows are converted into these by
domain.normalize; nothing else in the app sees a raw row.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


class SongStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    READY_FOR_REVIEW = "Ready for Review"
    PERFORMANCE_READY = "Performance Ready"
    NEEDS_WORK = "Needs Work"


class ComponentType(str, Enum):
    INTRO = "Intro"
    VERSE = "Verse"
    CHORUS = "Chorus"
    BRIDGE = "Bridge"
    SOLO = "Solo"
    OUTRO = "Outro"
    RHYTHM = "Rhythm"
    LEAD = "Lead"
    CUSTOM = "Custom"


def new_id() -> str:
    """Client-side id, replaced by the server id once an insert succeeds."""
    return str(uuid.uuid4())


def clamp_progress(value: int) -> int:
    return max(0, min(100, int(value)))


@dataclass(frozen=True)
class Project:
    """A setlist being prepared for one band.

    song_count / completed_count mirror the remote columns but are refreshed
    locally from song membership; stats never read them.
    """

    id: str
    name: str
    band_name: str = ""
    description: str = ""
    song_count: int = 0
    completed_count: int = 0


@dataclass(frozen=True)
class SongComponent:
    """A structural section of a song tracked with its own progress (0-100)."""

    id: str
    name: str
    type: ComponentType = ComponentType.CUSTOM
    progress: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", ComponentType(self.type))
        object.__setattr__(self, "progress", clamp_progress(self.progress))


@dataclass(frozen=True)
class Song:
    """A song inside a project, with optional resources and a linked tone."""

    id: str
    project_id: str
    title: str
    artist: str = ""
    album: Optional[str] = None
    key: Optional[str] = None
    bpm: Optional[int] = None
    difficulty: Difficulty = Difficulty.BEGINNER
    status: SongStatus = SongStatus.NOT_STARTED
    tab_url: Optional[str] = None
    tab_content: Optional[str] = None
    backing_track_url: Optional[str] = None
    reference_url: Optional[str] = None
    notes: Optional[str] = None
    duration: Optional[str] = None  # "m:ss", display only
    last_played: Optional[datetime] = None
    tone_preset_id: Optional[str] = None
    components: list[SongComponent] = field(default_factory=list)

    def __post_init__(self) -> None:
        # Plain strings such as "Performance Ready" become enum members;
        # unknown values raise ValueError
        object.__setattr__(self, "difficulty", Difficulty(self.difficulty))
        object.__setattr__(self, "status", SongStatus(self.status))


@dataclass(frozen=True)
class AmpSettings:
    """Six amp knobs, conventionally 0-10."""

    gain: int = 0
    bass: int = 0
    mid: int = 0
    treble: int = 0
    reverb: int = 0
    volume: int = 0


@dataclass(frozen=True)
class EffectPedal:
    id: str
    name: str
    type: str = ""
    enabled: bool = True


@dataclass(frozen=True)
class TonePreset:
    """A saved amp/effects configuration, optionally linked from songs."""

    id: str
    name: str
    description: str = ""
    guitar_model: str = ""
    pickup_position: str = ""  # e.g. "Neck", "Bridge", "Position 4"
    amp_settings: AmpSettings = field(default_factory=AmpSettings)
    effects: list[EffectPedal] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ScheduleItem:
    """One song planned for one day. The date is the key it is stored under."""

    song_id: str
    completed: bool = False
    notes: str = ""
    id: Optional[str] = None  # Remote row id, unknown until the insert lands
    completed_at: Optional[datetime] = None


@dataclass(frozen=True)
class PracticeSession:
    id: str
    song_id: str
    practiced_at: datetime
    duration_minutes: int
    recording_url: Optional[str] = None


@dataclass(frozen=True)
class PracticeVideo:
    id: str
    song_id: str
    title: str
    url: str
    recorded_at: datetime
    description: Optional[str] = None


Schedule = dict[date, list[ScheduleItem]]
