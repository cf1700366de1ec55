from dataclasses import dataclass, field

STRING_COUNT = 6


@dataclass
class Token:
    """One piece of a parsed song line: lyric text or a chord annotation."""

    type: str  # "text" or "chord"
    content: str


@dataclass
class ParsedLine:
    """A line of song content after tokenizing.

    Directive lines (``{title: ...}``) keep the raw line in ``content`` and
    have no tokens.  Regular lines carry their ordered tokens.
    """

    type: str  # "directive" or "line"
    content: str = ""
    tokens: list[Token] = field(default_factory=list)


@dataclass
class ChordGroup:
    """A chord annotation paired with the lyric text that follows it."""

    chord: str | None = None
    text: str = ""


@dataclass
class Fingering:
    """Canonical six-string fingering, low E (index 0) to high e (index 5).

    ``frets``: -1 muted, 0 open, n > 0 absolute fret.
    ``fingers``: 0 unassigned, 1..4 finger.
    """

    frets: list[int] = field(default_factory=lambda: [-1] * STRING_COUNT)
    fingers: list[int] = field(default_factory=lambda: [0] * STRING_COUNT)

    def to_dict(self) -> dict:
        return {"frets": list(self.frets), "fingers": list(self.fingers)}

    @property
    def is_empty(self) -> bool:
        return not self.frets or all(f == -1 for f in self.frets)


@dataclass
class ChordDefinition:
    """A named chord with fingering data in any of the stored shapes."""

    name: str
    category: str = "Standard"
    tags: list[str] = field(default_factory=list)
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "category": self.category,
            "tags": list(self.tags),
            "data": self.data,
        }


@dataclass
class CapoSuggestion:
    capo: int
    original_score: int
    new_score: int


@dataclass
class ScrollState:
    is_playing: bool = False
    speed_level: int = 3
    progress_percent: float = 0.0


@dataclass
class LyricLine:
    """A single line of lyrics with chords already embedded inline.

    Example: "I [D]pulled into Nazareth, was feelin' about [G]half past [D]dead"
    Chord-only lines (instrumental passages) will have content like "[D] [G] [A]".
    """

    content: str


@dataclass
class Section:
    """A labelled section of a song (verse, chorus, bridge, etc.)."""

    label: str | None  # e.g. "Verse 1", "Chorus", None for unlabelled passages
    lines: list[LyricLine] = field(default_factory=list)


@dataclass
class Song:
    """Structured song as produced by the importers."""

    title: str
    artist: str
    sections: list[Section] = field(default_factory=list)
    key: str | None = None
    capo: int | None = None
    tuning: str | None = None  # e.g. "Drop D", "DADGAD"
    source_url: str = ""
