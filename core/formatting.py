"""Human readable labels for takes."""

from __future__ import annotations

from typing import Iterable, List, Optional

SOURCE_LABELS = {
    "touchpad:update": "Touch Pad",
    "hardware:midi-value": "MIDI",
    "audio:flourish": "Audio",
}


def format_duration(ms: Optional[float]) -> str:
    if not ms or ms <= 0:
        return "0.0s"
    if ms < 1000:
        return f"{ms:.0f}ms"
    seconds = ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    remainder = round(seconds % 60)
    if remainder == 60:
        minutes, remainder = minutes + 1, 0
    return f"{minutes}:{remainder:02d}"


def format_beats(ms: float, tempo: Optional[float]) -> Optional[str]:
    """Length of ``ms`` in beats at ``tempo`` BPM, or ``None`` under one beat."""

    if not tempo or tempo <= 0:
        return None
    beats = (ms / 60000) * tempo
    if beats < 1:
        return None
    if beats < 16:
        return f"≈{beats:.1f} beats"
    return f"≈{beats:.0f} beats"


def describe_sources(sources: Iterable[str]) -> str:
    labels: List[str] = []
    for source in sources:
        label = SOURCE_LABELS.get(source, source)
        if label not in labels:
            labels.append(label)
    return " + ".join(labels) if labels else "custom"


__all__ = ["describe_sources", "format_beats", "format_duration"]
