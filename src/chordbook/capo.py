"""Capo advisor.

Scores how hard a set of chords is to play and looks for a capo position
whose transposed shapes are markedly easier.  Capo on fret N sounds the
same as playing every shape N semitones lower, so candidates are scored on
the chords transposed *down* by N.

This is a heuristic: lower scores are easier, nothing guarantees the
suggested shapes are playable.
"""

import logging

from .config import Settings, get_settings
from .models import CapoSuggestion
from .transposer import transpose_chord

logger = logging.getLogger(__name__)

OPEN_CHORDS = frozenset(
    ["C", "A", "G", "E", "D", "Am", "Em", "Dm", "Cmaj7", "A7", "E7", "D7", "G7", "C7", "B7"]
)
SEMI_BARRE_CHORDS = frozenset(["F", "Bm"])

BARRE_PENALTY = 5
SEMI_BARRE_PENALTY = 4
OTHER_PENALTY = 3


def chord_penalty(chord: str) -> int:
    shape = chord.split("/")[0]
    if shape in OPEN_CHORDS:
        return 0
    if "#" in shape or "b" in shape:
        return BARRE_PENALTY
    if shape in SEMI_BARRE_CHORDS:
        return SEMI_BARRE_PENALTY
    return OTHER_PENALTY


def difficulty_score(chords: list[str]) -> int:
    """Sum of penalties over the unique chords; lower is easier."""
    return sum(chord_penalty(c) for c in dict.fromkeys(chords))


def suggest_capo(chords: list[str], settings: Settings | None = None) -> CapoSuggestion | None:
    """Best capo position for *chords*, or ``None`` when none is worth it."""
    settings = settings or get_settings()
    unique = list(dict.fromkeys(chords))
    original_score = difficulty_score(unique)

    if original_score < settings.capo_easy_floor:
        return None

    best_capo = 0
    best_score = original_score
    for capo in range(1, settings.capo_max + 1):
        score = difficulty_score([transpose_chord(c, -capo) for c in unique])
        if score < best_score:
            best_capo, best_score = capo, score

    if best_capo > 0 and best_score < original_score * settings.capo_min_improvement:
        logger.debug("capo %d lowers difficulty %d -> %d", best_capo, original_score, best_score)
        return CapoSuggestion(capo=best_capo, original_score=original_score, new_score=best_score)
    return None
