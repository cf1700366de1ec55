"""Semitone transposition of chord names.

Output always uses sharp spelling, whatever the input spelling or the
song's key: ``transpose_chord("Bb", 2) == "C"``, ``transpose_chord("Eb", 1)
== "E"``, ``transpose_chord("F", 1) == "F#"``.
"""

import re

NOTES_SHARP = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
NOTES_FLAT = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

_NOTE_RE = re.compile(r"^([A-G])(#|b)?(.*)", re.DOTALL)

# Chord annotation inside a song line, brackets included.
_ANNOTATION_RE = re.compile(r"\[([^\]]*)\]")


def note_index(note: str) -> int | None:
    """Pitch class (0-11) of a root such as ``"C#"`` or ``"Db"``."""
    if note in NOTES_SHARP:
        return NOTES_SHARP.index(note)
    if note in NOTES_FLAT:
        return NOTES_FLAT.index(note)
    return None


def transpose_chord(chord: str, semitones: int) -> str:
    """Shift the root (and slash bass) of *chord* by *semitones*.

    The suffix is carried through unchanged.  Names that do not start with a
    note letter are returned as-is.
    """
    if not chord or semitones == 0:
        return chord

    if "/" in chord:
        root, bass = chord.split("/", 1)
        return f"{transpose_chord(root, semitones)}/{transpose_chord(bass, semitones)}"

    m = _NOTE_RE.match(chord)
    if not m:
        return chord

    index = note_index(m.group(1) + (m.group(2) or ""))
    if index is None:
        return chord

    new_index = ((index + semitones) % 12 + 12) % 12
    return NOTES_SHARP[new_index] + m.group(3)


def transpose_content(content: str, semitones: int) -> str:
    """Transpose every ``[Chord]`` annotation of a song, leaving the rest intact."""
    if not content or semitones == 0:
        return content

    def _replace(m: re.Match) -> str:
        return f"[{transpose_chord(m.group(1), semitones)}]"

    lines = []
    for line in content.split("\n"):
        if line.strip().startswith("{"):
            lines.append(line)
        else:
            lines.append(_ANNOTATION_RE.sub(_replace, line))
    return "\n".join(lines)
