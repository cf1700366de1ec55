"""Chord lookup: reference table, common-chord table, user chords, resolver.

Nothing here is a hidden global.  :data:`REFERENCE_CHORDS` is a read-only
mapping that callers pass into :class:`ChordResolver` explicitly, so tests
and deployments can swap in their own table.
"""

import json
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from .chordpro import extract_chords, normalize_chord_name, parse_chord_name
from .exceptions import ChordLibraryError
from .models import ChordDefinition
from .normalizer import STRING_ORDER, fingers_to_list, strings_to_frets

logger = logging.getLogger(__name__)

# A lookup backend returns fingering data in any stored shape, or None.
ChordLookup = Callable[[str], Mapping | None]

# ---------------------------------------------------------------------------
# Reference table (positions shape, [E, A, D, G, B, e])
# ---------------------------------------------------------------------------

REFERENCE_CHORDS: Mapping[str, dict] = MappingProxyType({
    # Major
    "C": {
        "positions": [
            {"frets": [-1, 3, 2, 0, 1, 0], "fingers": [0, 3, 2, 0, 1, 0]},  # open
            {"frets": [3, 3, 5, 5, 5, 3], "fingers": [1, 1, 2, 3, 4, 1], "barre": 3},  # A-shape
            {"frets": [8, 10, 10, 9, 8, 8], "fingers": [1, 3, 4, 2, 1, 1], "barre": 8},  # E-shape
        ]
    },
    "D": {"positions": [{"frets": [-1, -1, 0, 2, 3, 2], "fingers": [0, 0, 0, 1, 3, 2]}]},
    "E": {"positions": [{"frets": [0, 2, 2, 1, 0, 0], "fingers": [0, 2, 3, 1, 0, 0]}]},
    "F": {"positions": [{"frets": [1, 3, 3, 2, 1, 1], "fingers": [1, 3, 4, 2, 1, 1], "barre": 1}]},
    "G": {
        "positions": [
            {"frets": [3, 2, 0, 0, 0, 3], "fingers": [2, 1, 0, 0, 0, 3]},  # open
            {"frets": [3, 5, 5, 4, 3, 3], "fingers": [1, 3, 4, 2, 1, 1], "barre": 3},  # E-shape
        ]
    },
    "A": {"positions": [{"frets": [-1, 0, 2, 2, 2, 0], "fingers": [0, 0, 1, 2, 3, 0]}]},
    "B": {"positions": [{"frets": [-1, 2, 4, 4, 4, 2], "fingers": [0, 1, 2, 3, 4, 1], "barre": 2}]},
    # Minor
    "Cm": {"positions": [{"frets": [-1, 3, 5, 5, 4, 3], "fingers": [0, 1, 3, 4, 2, 1], "barre": 3}]},
    "Dm": {"positions": [{"frets": [-1, -1, 0, 2, 3, 1], "fingers": [0, 0, 0, 2, 3, 1]}]},
    "Em": {"positions": [{"frets": [0, 2, 2, 0, 0, 0], "fingers": [0, 2, 3, 0, 0, 0]}]},
    "Fm": {"positions": [{"frets": [1, 3, 3, 1, 1, 1], "fingers": [1, 3, 4, 1, 1, 1], "barre": 1}]},
    "Gm": {"positions": [{"frets": [3, 5, 5, 3, 3, 3], "fingers": [1, 3, 4, 1, 1, 1], "barre": 3}]},
    "Am": {
        "positions": [
            {"frets": [-1, 0, 2, 2, 1, 0], "fingers": [0, 0, 2, 3, 1, 0]},  # open
            {"frets": [5, 7, 7, 5, 5, 5], "fingers": [1, 3, 4, 1, 1, 1], "barre": 5},  # E-shape
        ]
    },
    "Bm": {"positions": [{"frets": [-1, 2, 4, 4, 3, 2], "fingers": [0, 1, 3, 4, 2, 1], "barre": 2}]},
    # Sharps
    "C#m": {"positions": [{"frets": [-1, 4, 6, 6, 5, 4], "fingers": [0, 1, 3, 4, 2, 1], "barre": 4}]},
    "F#m": {"positions": [{"frets": [2, 4, 4, 2, 2, 2], "fingers": [1, 3, 4, 1, 1, 1], "barre": 2}]},
    # 7th
    "E7": {"positions": [{"frets": [0, 2, 0, 1, 0, 0], "fingers": [0, 2, 0, 1, 0, 0]}]},
    "A7": {"positions": [{"frets": [-1, 0, 2, 0, 2, 0], "fingers": [0, 0, 1, 0, 2, 0]}]},
    "D7": {"positions": [{"frets": [-1, -1, 0, 2, 1, 2], "fingers": [0, 0, 0, 2, 1, 3]}]},
    "G7": {"positions": [{"frets": [3, 2, 0, 0, 0, 1], "fingers": [3, 2, 0, 0, 0, 1]}]},
})

# ---------------------------------------------------------------------------
# Common chords (auto-import table)
# ---------------------------------------------------------------------------

# name: (starting fret, strings [E, A, D, G, B, e], fingers)
_COMMON_ROWS: dict[str, tuple[int, list[int], list[int]]] = {
    "C": (1, [-1, 3, 2, 0, 1, 0], [0, 3, 2, 0, 1, 0]),
    "D": (1, [-1, -1, 0, 2, 3, 2], [0, 0, 0, 1, 3, 2]),
    "E": (1, [0, 2, 2, 1, 0, 0], [0, 2, 3, 1, 0, 0]),
    "F": (1, [1, 3, 3, 2, 1, 1], [1, 3, 4, 2, 1, 1]),
    "G": (1, [3, 2, 0, 0, 0, 3], [2, 1, 0, 0, 0, 3]),
    "A": (1, [-1, 0, 2, 2, 2, 0], [0, 0, 1, 2, 3, 0]),
    "B": (2, [-1, 2, 4, 4, 4, 2], [0, 1, 2, 3, 4, 1]),
    "Am": (1, [-1, 0, 2, 2, 1, 0], [0, 0, 2, 3, 1, 0]),
    "Bm": (2, [-1, 2, 4, 4, 3, 2], [0, 1, 3, 4, 2, 1]),
    "Cm": (3, [-1, 3, 5, 5, 4, 3], [0, 1, 3, 4, 2, 1]),
    "Dm": (1, [-1, -1, 0, 2, 3, 1], [0, 0, 0, 2, 3, 1]),
    "Em": (1, [0, 2, 2, 0, 0, 0], [0, 2, 3, 0, 0, 0]),
    "Fm": (1, [1, 3, 3, 1, 1, 1], [1, 3, 4, 1, 1, 1]),
    "Gm": (3, [3, 5, 5, 3, 3, 3], [1, 3, 4, 1, 1, 1]),
    "A7": (1, [-1, 0, 2, 0, 2, 0], [0, 0, 1, 0, 2, 0]),
    "B7": (1, [-1, 2, 1, 2, 0, 2], [0, 2, 1, 3, 0, 4]),
    "C7": (1, [-1, 3, 2, 3, 1, 0], [0, 3, 2, 4, 1, 0]),
    "D7": (1, [-1, -1, 0, 2, 1, 2], [0, 0, 0, 2, 1, 3]),
    "E7": (1, [0, 2, 0, 1, 0, 0], [0, 2, 0, 1, 0, 0]),
    "F7": (1, [1, 3, 1, 2, 1, 1], [1, 3, 1, 2, 1, 1]),
    "G7": (1, [3, 2, 0, 0, 0, 1], [3, 2, 0, 0, 0, 1]),
    "Am7": (1, [-1, 0, 2, 0, 1, 0], [0, 0, 2, 0, 1, 0]),
    "Bm7": (2, [-1, 2, 4, 2, 3, 2], [0, 1, 3, 1, 2, 1]),
    "Dm7": (1, [-1, -1, 0, 2, 1, 1], [0, 0, 0, 2, 1, 1]),
    "Em7": (1, [0, 2, 0, 0, 0, 0], [0, 1, 0, 0, 0, 0]),
    "Gm7": (3, [3, 5, 3, 3, 3, 3], [1, 3, 1, 1, 1, 1]),
    "Cmaj7": (1, [-1, 3, 2, 0, 0, 0], [0, 3, 2, 0, 0, 0]),
    "Dmaj7": (1, [-1, -1, 0, 2, 2, 2], [0, 0, 0, 1, 1, 1]),
    "Emaj7": (1, [0, 2, 1, 1, 0, 0], [0, 3, 1, 2, 0, 0]),
    "Fmaj7": (1, [-1, -1, 3, 2, 1, 0], [0, 0, 3, 2, 1, 0]),
    "Gmaj7": (1, [3, 2, 0, 0, 0, 2], [2, 1, 0, 0, 0, 3]),
    "Amaj7": (1, [-1, 0, 2, 1, 2, 0], [0, 0, 2, 1, 3, 0]),
    "Asus2": (1, [-1, 0, 2, 2, 0, 0], [0, 0, 1, 2, 0, 0]),
    "Asus4": (1, [-1, 0, 2, 2, 3, 0], [0, 0, 1, 2, 3, 0]),
    "Dsus2": (1, [-1, -1, 0, 2, 3, 0], [0, 0, 0, 1, 2, 0]),
    "Dsus4": (1, [-1, -1, 0, 2, 3, 3], [0, 0, 0, 1, 2, 3]),
    "Esus4": (1, [0, 2, 2, 2, 0, 0], [0, 1, 2, 3, 0, 0]),
    "Gsus4": (1, [3, 3, 0, 0, 1, 3], [2, 3, 0, 0, 1, 4]),
    "Cadd9": (1, [-1, 3, 2, 0, 3, 0], [0, 2, 1, 0, 3, 0]),
    "Dadd9": (1, [-1, -1, 0, 2, 3, 0], [0, 0, 0, 1, 2, 0]),
    "Eadd9": (1, [0, 2, 2, 1, 0, 2], [0, 2, 3, 1, 0, 4]),
    "Gadd9": (1, [3, 0, 0, 2, 0, 3], [2, 0, 0, 1, 0, 3]),
    "F#m": (2, [2, 4, 4, 2, 2, 2], [1, 3, 4, 1, 1, 1]),
    "C#m": (4, [-1, 4, 6, 6, 5, 4], [0, 1, 3, 4, 2, 1]),
    "Bb": (1, [-1, 1, 3, 3, 3, 1], [0, 1, 2, 3, 4, 1]),
    "Eb": (3, [-1, -1, 5, 3, 4, 3], [0, 0, 3, 1, 2, 1]),
    "Ab": (4, [4, 6, 6, 5, 4, 4], [1, 3, 4, 2, 1, 1]),
    "Bdim": (1, [-1, 2, 3, 4, 3, -1], [0, 1, 2, 4, 3, 0]),
    "Cdim": (1, [-1, 3, 4, 5, 4, -1], [0, 1, 2, 4, 3, 0]),
    "Caug": (1, [-1, 3, 2, 1, 1, 0], [0, 4, 3, 1, 2, 0]),
    "Eaug": (1, [0, 3, 2, 1, 1, 0], [0, 4, 3, 1, 2, 0]),
}


def _common_entry(name: str, starting_fret: int, strings: list[int], fingers: list[int]) -> dict:
    parsed = parse_chord_name(name)
    return {
        "name": name,
        "key": parsed.key,
        "suffix": parsed.suffix,
        "starting_fret": starting_fret,
        "strings": list(strings),
        "fingers": list(fingers),
    }


COMMON_CHORDS: Mapping[str, dict] = MappingProxyType(
    {name: _common_entry(name, *row) for name, row in _COMMON_ROWS.items()}
)


def lookup_common_chord(name: str) -> dict | None:
    return COMMON_CHORDS.get(normalize_chord_name(name))


def all_common_chord_names() -> list[str]:
    return list(COMMON_CHORDS)


# ---------------------------------------------------------------------------
# User chords
# ---------------------------------------------------------------------------


def _positions_of(data: Mapping) -> list:
    """Existing variations of stored chord data, as a positions list."""
    if isinstance(data.get("positions"), list):
        return list(data["positions"])
    if data.get("strings") is not None or data.get("frets") is not None:
        return [dict(data)]
    return []


class CustomChordStore:
    """User-owned chords keyed by normalized name.

    The default variation of a chord is ``data["positions"][0]``.
    """

    def __init__(self, chords: Iterable[ChordDefinition] = ()):
        self._chords: dict[str, ChordDefinition] = {}
        for chord in chords:
            self.add(chord)

    def __contains__(self, name: str) -> bool:
        return normalize_chord_name(name) in self._chords

    def __iter__(self) -> Iterator[ChordDefinition]:
        return iter(self._chords.values())

    def __len__(self) -> int:
        return len(self._chords)

    def names(self) -> list[str]:
        return [chord.name for chord in self._chords.values()]

    def get(self, name: str) -> ChordDefinition | None:
        return self._chords.get(normalize_chord_name(name))

    def add(self, chord: ChordDefinition) -> None:
        """Insert or replace *chord* as-is."""
        self._chords[normalize_chord_name(chord.name)] = chord

    def save(
        self,
        name: str,
        fingering: dict,
        category: str = "Standard",
        tags: Iterable[str] = (),
    ) -> ChordDefinition:
        """Create a chord, or append *fingering* as a new variation of an existing one."""
        existing = self.get(name)
        if existing is not None:
            positions = _positions_of(existing.data)
            positions.append(fingering)
            existing.data = {"positions": positions}
            logger.debug("added variation %d to %s", len(positions), existing.name)
            return existing

        chord = ChordDefinition(
            name=name,
            category=category,
            tags=[t.strip() for t in tags if t.strip()],
            data={"positions": [fingering]},
        )
        self.add(chord)
        return chord

    def set_default(self, name: str, index: int) -> bool:
        """Move variation *index* to the front.  Returns False if nothing moved."""
        chord = self.get(name)
        if chord is None:
            return False
        positions = _positions_of(chord.data)
        if index < 0 or index >= len(positions):
            return False
        positions.insert(0, positions.pop(index))
        chord.data = {"positions": positions}
        return True

    def remove(self, name: str) -> bool:
        return self._chords.pop(normalize_chord_name(name), None) is not None

    def lookup(self, name: str) -> dict | None:
        chord = self.get(name)
        return chord.data if chord is not None else None

    @classmethod
    def load_json(cls, path: str | Path) -> "CustomChordStore":
        """Load chords from a JSON list of ``{name, category, tags, data}`` objects."""
        p = Path(path)
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ChordLibraryError(str(p), exc.strerror or str(exc)) from exc
        except json.JSONDecodeError as exc:
            raise ChordLibraryError(str(p), f"not valid JSON ({exc.msg})") from exc

        if not isinstance(raw, list):
            raise ChordLibraryError(str(p), "expected a list of chords")

        chords = []
        for i, entry in enumerate(raw):
            if not isinstance(entry, dict) or not entry.get("name"):
                raise ChordLibraryError(str(p), f"entry {i} has no name")
            chords.append(
                ChordDefinition(
                    name=entry["name"],
                    category=entry.get("category", "Standard"),
                    tags=list(entry.get("tags", [])),
                    data=entry.get("data") or {},
                )
            )
        logger.info("loaded %d custom chords from %s", len(chords), p)
        return cls(chords)

    def dump_json(self, path: str | Path) -> None:
        data = [chord.to_dict() for chord in self]
        Path(path).write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class ChordResolver:
    """Chord name → stored fingering data: user chords, then library, then fallback."""

    def __init__(
        self,
        custom: CustomChordStore | None = None,
        library: Mapping[str, Mapping] | None = None,
        fallback: ChordLookup | None = None,
    ):
        self.custom = custom
        self.library = library if library is not None else {}
        self.fallback = fallback

    @classmethod
    def default(cls, custom: CustomChordStore | None = None) -> "ChordResolver":
        return cls(custom=custom, library=REFERENCE_CHORDS)

    def resolve(self, name: str) -> Mapping | None:
        key = normalize_chord_name(name)
        if not key:
            return None
        if self.custom is not None:
            data = self.custom.lookup(key)
            if data:
                return data
        if key in self.library:
            return self.library[key]
        if self.fallback is not None:
            return self.fallback(key)
        return None

    __call__ = resolve


# ---------------------------------------------------------------------------
# Auto-import
# ---------------------------------------------------------------------------


@dataclass
class ChordStats:
    total: int
    existing: int
    new: int
    unknown: int


def _by_string(values: list[int]) -> dict[int, int]:
    return {string_num: values[i] for i, string_num in enumerate(STRING_ORDER)}


def import_missing_chords(
    content: str,
    store: CustomChordStore,
    fallback: ChordLookup | None = None,
) -> list[str]:
    """Add every chord used in *content* that the user does not have yet.

    Chords are taken from the common-chord table, then *fallback*.  Returns
    the names that were added.
    """
    added: list[str] = []
    for name in extract_chords(content):
        if name in store:
            continue

        entry = lookup_common_chord(name)
        if entry is None and fallback is not None:
            entry = fallback(name)
        if not entry:
            logger.info("chord not found: %s", name)
            continue

        strings = entry.get("strings")
        fingers = entry.get("fingers")
        store.save(
            entry.get("name") or name,
            {
                "strings": _by_string(strings_to_frets(strings)) if isinstance(strings, list) else strings,
                "fingers": _by_string(fingers_to_list(fingers)) if isinstance(fingers, list) else fingers,
                "startingFret": entry.get("starting_fret", entry.get("startingFret", 1)),
            },
            category="Auto-Import",
            tags=["auto"],
        )
        added.append(entry.get("name") or name)
    return added


def chord_stats(content: str, store: CustomChordStore) -> ChordStats:
    names = extract_chords(content)
    existing = new = unknown = 0
    for name in names:
        if name in store:
            existing += 1
        elif lookup_common_chord(name):
            new += 1
        else:
            unknown += 1
    return ChordStats(total=len(names), existing=existing, new=new, unknown=unknown)
