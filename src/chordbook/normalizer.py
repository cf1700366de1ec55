"""Chord fingering normalizer.

Stored chords use three shapes, kept side by side because old records were
never migrated:

- ``strings``: ``{"strings": {1: 0, 2: 1, ...}, "fingers": {...}}`` keyed by
  string number, 1 = high e, 6 = low E.
- ``frets``: ``{"frets": [...], "fingers": [...]}`` ordered low E to high e.
- ``positions``: ``{"positions": [variant, ...]}`` where each variant is
  either of the above; ``positions[0]`` is the default variation.

Every read goes through this module.  Output is always a six-element
low-E-to-high-e :class:`~chordbook.models.Fingering`; anything missing or
malformed degrades to muted strings and unassigned fingers.
"""

from collections.abc import Mapping
from typing import Any

from .models import STRING_COUNT, Fingering

# String numbers in array order: index 0 is string 6 (low E).
STRING_ORDER = [6, 5, 4, 3, 2, 1]

MUTED = -1
NO_FINGER = 0


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _fit(values: list, default: int) -> list[int]:
    """Coerce a list to exactly six ints, padding or truncating."""
    fitted = [_as_int(v, default) for v in values[:STRING_COUNT]]
    return fitted + [default] * (STRING_COUNT - len(fitted))


def _by_string_number(mapping: Mapping, default: int) -> list[int]:
    result = []
    for string_num in STRING_ORDER:
        # JSON round-trips turn the int keys into strings
        value = mapping.get(string_num, mapping.get(str(string_num)))
        result.append(default if value is None else _as_int(value, default))
    return result


def strings_to_frets(strings: Any) -> list[int]:
    """Convert a ``strings`` object to a low-E-first frets list."""
    if isinstance(strings, Mapping):
        return _by_string_number(strings, MUTED)
    if isinstance(strings, list):
        # Common-chord table rows store strings already in array order
        return _fit(strings, MUTED)
    return [MUTED] * STRING_COUNT


def fingers_to_list(fingers: Any) -> list[int]:
    """Convert a ``fingers`` object or list to a low-E-first fingers list."""
    if isinstance(fingers, Mapping):
        return _by_string_number(fingers, NO_FINGER)
    if isinstance(fingers, list):
        return _fit(fingers, NO_FINGER)
    return [NO_FINGER] * STRING_COUNT


def _first_position(data: Mapping) -> Mapping | None:
    positions = data.get("positions")
    if isinstance(positions, list) and positions and isinstance(positions[0], Mapping):
        return positions[0]
    return None


def normalize_frets(data: Any) -> list[int]:
    """Resolve frets from any stored shape, ``positions[0]`` first."""
    if not isinstance(data, Mapping):
        return [MUTED] * STRING_COUNT

    first = _first_position(data)
    if first is not None:
        if isinstance(first.get("frets"), list):
            return _fit(first["frets"], MUTED)
        if first.get("strings") is not None:
            return strings_to_frets(first["strings"])

    if isinstance(data.get("strings"), (Mapping, list)):
        return strings_to_frets(data["strings"])

    if isinstance(data.get("frets"), list):
        return _fit(data["frets"], MUTED)

    return [MUTED] * STRING_COUNT


def normalize_fingers(data: Any) -> list[int]:
    """Resolve fingers with the same precedence as :func:`normalize_frets`."""
    if not isinstance(data, Mapping):
        return [NO_FINGER] * STRING_COUNT

    first = _first_position(data)
    if first is not None and isinstance(first.get("fingers"), (Mapping, list)):
        return fingers_to_list(first["fingers"])

    if isinstance(data.get("fingers"), (Mapping, list)):
        return fingers_to_list(data["fingers"])

    return [NO_FINGER] * STRING_COUNT


def normalize_chord_data(data: Any) -> Fingering:
    return Fingering(frets=normalize_frets(data), fingers=normalize_fingers(data))


def normalize_to_positions(data: Any) -> dict:
    """Wrap the canonical fingering as ``{"positions": [{frets, fingers}]}``."""
    return {"positions": [normalize_chord_data(data).to_dict()]}


def get_all_variations(data: Any) -> list[Fingering]:
    """Every stored variation of a chord, default first."""
    if not isinstance(data, Mapping):
        return []

    positions = data.get("positions")
    if isinstance(positions, list):
        return [_normalize_variant(pos) for pos in positions]

    return [normalize_chord_data(data)]


def _normalize_variant(variant: Any) -> Fingering:
    if not isinstance(variant, Mapping):
        return Fingering()
    if isinstance(variant.get("frets"), list):
        return Fingering(
            frets=_fit(variant["frets"], MUTED),
            fingers=fingers_to_list(variant.get("fingers")),
        )
    if variant.get("strings") is not None:
        return Fingering(
            frets=strings_to_frets(variant["strings"]),
            fingers=fingers_to_list(variant.get("fingers")),
        )
    return normalize_chord_data(variant)
