"""
Email Fallback Utilities

Text helpers and tone presets for the template-based draft generator.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional


_TERMINAL_PUNCTUATION = re.compile(r"[.!?]$")


@dataclass(frozen=True)
class TonePreset:
    """Greeting, sign-off and voice used for one tone."""
    greeting: str
    sign_off: str
    voice: str


NEUTRAL_PRESET = TonePreset(greeting="Hello", sign_off="Best regards", voice="neutral")

TONE_PRESETS = {
    "friendly": TonePreset(greeting="Hi", sign_off="Warm regards", voice="friendly"),
    "warm": TonePreset(greeting="Hi", sign_off="Warm regards", voice="friendly"),
    "formal": TonePreset(greeting="Hello", sign_off="Sincerely", voice="formal"),
    "direct": TonePreset(greeting="Hello", sign_off="Regards", voice="direct"),
    "enthusiastic": TonePreset(greeting="Hey", sign_off="Cheers", voice="enthusiastic"),
}


def choose_tone(tone: Optional[str]) -> TonePreset:
    """Map a tone string to its preset; unknown tones get the neutral preset."""
    normalized = (tone or "").lower().strip()
    return TONE_PRESETS.get(normalized, NEUTRAL_PRESET)


def normalize_sentence(text: str) -> str:
    """Trim, capitalize the first letter and ensure terminal punctuation."""
    trimmed = text.strip()
    if not trimmed:
        return ""
    capitalized = trimmed[0].upper() + trimmed[1:]
    if _TERMINAL_PUNCTUATION.search(capitalized):
        return capitalized
    return f"{capitalized}."


def bullet_list(points: Iterable[str]) -> str:
    """Render non-blank points as a dash list of normalized sentences."""
    return "\n".join(
        f"- {normalize_sentence(point)}"
        for point in points
        if point.strip()
    )
