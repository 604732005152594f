"""
Tone preset command handlers.

Handles: tones list, tones add, tones delete
"""

import argparse

from rich.table import Table

from tribute_tracker.context import AppContext
from tribute_tracker.core.console import get_console
from tribute_tracker.core.output import log
from tribute_tracker.domain.models import AmpSettings, EffectPedal, new_id
from tribute_tracker.helpers import resolve_tone_preset

AMP_KNOBS = ("gain", "bass", "mid", "treble", "reverb", "volume")


def parse_effect(spec: str) -> EffectPedal:
    """Parse "Name", "Name:Type" or "Name:Type:off" (pedal in the chain but bypassed)."""
    parts = [part.strip() for part in spec.split(":")]
    enabled = True
    if len(parts) == 3 and parts[2].lower() in ("on", "off"):
        enabled = parts.pop().lower() == "on"
    if len(parts) > 2 or not parts[0]:
        raise ValueError(f"Invalid effect '{spec}'. Use NAME, NAME:TYPE or NAME:TYPE:off")
    effect_type = parts[1] if len(parts) == 2 else ""
    return EffectPedal(id=new_id(), name=parts[0], type=effect_type, enabled=enabled)


def handle_tones_list_command(ctx: AppContext, args: argparse.Namespace) -> int:
    store = ctx.store
    if not store.tone_presets:
        log("No tone presets yet. Create one with: tones add <name>")
        return 0

    presets = store.tone_presets
    tag = (getattr(args, "tag", None) or "").strip().lower()
    if tag:
        presets = [p for p in presets if tag in (t.lower() for t in p.tags)]
        if not presets:
            log(f"No tone presets tagged '{args.tag}'")
            return 0

    table = Table(title=f"Tone presets tagged '{args.tag}'" if tag else "Tone presets")
    table.add_column("Name")
    table.add_column("Guitar")
    table.add_column("Pickup")
    table.add_column("Amp (G/B/M/T/R/V)")
    table.add_column("Effects")
    table.add_column("Tags")
    table.add_column("Songs", justify="right")
    for preset in presets:
        amp = preset.amp_settings
        effects = ", ".join(
            e.name if e.enabled else f"[dim]{e.name}[/dim]" for e in preset.effects
        )
        linked = sum(1 for s in store.songs if s.tone_preset_id == preset.id)
        table.add_row(
            preset.name,
            preset.guitar_model,
            preset.pickup_position,
            "/".join(str(getattr(amp, knob)) for knob in AMP_KNOBS),
            effects,
            ", ".join(preset.tags),
            str(linked),
        )
    get_console().print(table)
    return 0


def handle_tones_add_command(ctx: AppContext, args: argparse.Namespace) -> int:
    name = (args.name or "").strip()
    if not name:
        log("Tone preset name is required", level="error")
        return 1

    try:
        effects = [parse_effect(spec) for spec in args.effect or []]
    except ValueError as e:
        log(str(e), level="error")
        return 1

    amp = AmpSettings(**{knob: getattr(args, knob) or 0 for knob in AMP_KNOBS})
    preset = ctx.store.add_tone_preset(
        name,
        amp_settings=amp,
        effects=effects,
        tags=[t.strip() for t in args.tag or [] if t.strip()],
        description=args.description or "",
        guitar_model=args.guitar or "",
        pickup_position=args.pickup or "",
    )
    log(f"🎛 Saved tone preset '{preset.name}'", level="success")
    return 0


def handle_tones_delete_command(ctx: AppContext, args: argparse.Namespace) -> int:
    preset = resolve_tone_preset(ctx.store, args.preset)
    if preset is None:
        log(f"Tone preset not found: {args.preset}", level="error")
        return 1
    ctx.store.delete_tone_preset(preset.id)
    log(f"🗑 Deleted tone preset '{preset.name}'")
    return 0
