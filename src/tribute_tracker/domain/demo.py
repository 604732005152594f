"""
Demo data used when no remote store is configured.

Timestamps are relative to the moment of loading so "needs attention" and the
schedule look the same whenever the demo is opened.
"""

from datetime import date, timedelta
from typing import Optional

from .models import (
    AmpSettings,
    ComponentType,
    Difficulty,
    EffectPedal,
    Project,
    Schedule,
    ScheduleItem,
    Song,
    SongComponent,
    SongStatus,
    TonePreset,
)
from .normalize import utc_now


def demo_projects() -> list[Project]:
    return [
        Project(
            id="p1",
            name="The Dark Side Project",
            band_name="Pink Floyd Tribute",
            description="Preparing for the summer festival circuit. Focus on accuracy and tone.",
        ),
        Project(
            id="p2",
            name="Neon Nights",
            band_name="80s Synth Pop Cover",
            description="High energy setlist for club gigs.",
        ),
    ]


def demo_tone_presets() -> list[TonePreset]:
    return [
        TonePreset(
            id="t1",
            name="Gilmour Lead",
            description="Sustainy, smooth lead tone for solos. High compression.",
            guitar_model="Black Strat",
            pickup_position="Bridge",
            amp_settings=AmpSettings(gain=8, bass=6, mid=4, treble=7, reverb=4, volume=9),
            effects=[
                EffectPedal(id="e1", name="Big Muff", type="Fuzz"),
                EffectPedal(id="e2", name="Elec. Mistress", type="Flanger"),
                EffectPedal(id="e3", name="Delay 440ms", type="Delay"),
            ],
            tags=["Lead", "High Gain", "Atmospheric"],
        ),
        TonePreset(
            id="t2",
            name="Funky Clean",
            description="Crystal clear rhythm tone for chopping chords.",
            guitar_model="Fender Strat",
            pickup_position="Position 4",
            amp_settings=AmpSettings(gain=3, bass=5, mid=6, treble=8, reverb=3, volume=7),
            effects=[
                EffectPedal(id="e4", name="Dyna Comp", type="Compression"),
                EffectPedal(id="e5", name="CE-2", type="Chorus", enabled=False),
            ],
            tags=["Clean", "Rhythm", "Funk"],
        ),
    ]


def _component(cid: str, name: str, ctype: ComponentType, progress: int) -> SongComponent:
    return SongComponent(id=cid, name=name, type=ctype, progress=progress)


def demo_songs() -> list[Song]:
    now = utc_now()
    return [
        Song(
            id="s1",
            project_id="p1",
            title="Comfortably Numb",
            artist="Pink Floyd",
            difficulty=Difficulty.EXPERT,
            status=SongStatus.IN_PROGRESS,
            bpm=64,
            last_played=now - timedelta(days=2),
            tone_preset_id="t1",
            components=[
                _component("c1", "Intro", ComponentType.INTRO, 100),
                _component("c2", "Verse 1", ComponentType.VERSE, 100),
                _component("c3", "Chorus", ComponentType.CHORUS, 100),
                _component("c4", "Solo 1", ComponentType.SOLO, 75),
                _component("c5", "Solo 2 (Outro)", ComponentType.SOLO, 25),
            ],
        ),
        Song(
            id="s2",
            project_id="p1",
            title="Time",
            artist="Pink Floyd",
            difficulty=Difficulty.ADVANCED,
            status=SongStatus.NEEDS_WORK,
            bpm=120,
            last_played=now - timedelta(days=8),
            tone_preset_id="t2",
            components=[
                _component("c6", "Intro (Clocks)", ComponentType.INTRO, 50),
                _component("c7", "Verse Rhythm", ComponentType.RHYTHM, 90),
                _component("c8", "Solo", ComponentType.SOLO, 40),
            ],
        ),
        Song(
            id="s3",
            project_id="p1",
            title="Money",
            artist="Pink Floyd",
            difficulty=Difficulty.INTERMEDIATE,
            status=SongStatus.PERFORMANCE_READY,
            bpm=120,
            last_played=now,
            tone_preset_id="t2",
            components=[
                _component("c9", "Bass Riff", ComponentType.RHYTHM, 100),
                _component("c10", "Sax Solo Section", ComponentType.RHYTHM, 100),
                _component("c11", "Guitar Solo", ComponentType.SOLO, 100),
            ],
        ),
    ]


def demo_schedule(today: Optional[date] = None) -> Schedule:
    """First three songs scheduled for today, with yesterday already done."""
    today = today or date.today()
    return {
        today - timedelta(days=1): [ScheduleItem(song_id="s3", completed=True)],
        today: [ScheduleItem(song_id=song_id) for song_id in ("s1", "s2", "s3")],
    }
