import json

import pytest

from chordbook.exceptions import ChordLibraryError
from chordbook.library import (
    COMMON_CHORDS,
    REFERENCE_CHORDS,
    ChordResolver,
    CustomChordStore,
    all_common_chord_names,
    chord_stats,
    import_missing_chords,
    lookup_common_chord,
)
from chordbook.models import ChordDefinition
from chordbook.normalizer import get_all_variations, normalize_chord_data

C_SHAPE = {"frets": [-1, 3, 2, 0, 1, 0], "fingers": [0, 3, 2, 0, 1, 0]}
C_BARRE = {"frets": [3, 3, 5, 5, 5, 3], "fingers": [1, 1, 2, 3, 4, 1]}

# ---------------------------------------------------------------------------
# Reference and common tables
# ---------------------------------------------------------------------------


def test_reference_table_is_read_only():
    with pytest.raises(TypeError):
        REFERENCE_CHORDS["X"] = {}


def test_reference_c_has_three_variations():
    assert len(get_all_variations(REFERENCE_CHORDS["C"])) == 3


def test_reference_entries_normalize_to_six_strings():
    for name, data in REFERENCE_CHORDS.items():
        for variation in get_all_variations(data):
            assert len(variation.frets) == 6, name
            assert not variation.is_empty, name


def test_common_chord_entry():
    entry = lookup_common_chord("C#m")
    assert entry["key"] == "C#"
    assert entry["suffix"] == "m"
    assert entry["starting_fret"] == 4
    assert entry["strings"] == [-1, 4, 6, 6, 5, 4]


def test_common_chord_lookup_normalizes_name():
    assert lookup_common_chord(" Am7 ") is COMMON_CHORDS["Am7"]
    assert lookup_common_chord("H7") is None


def test_all_common_chord_names():
    names = all_common_chord_names()
    assert "Cadd9" in names
    assert len(names) == len(set(names))


# ---------------------------------------------------------------------------
# CustomChordStore
# ---------------------------------------------------------------------------


def test_save_creates_positions_entry():
    store = CustomChordStore()
    chord = store.save("C", C_SHAPE, tags=["open", " "])
    assert chord.data == {"positions": [C_SHAPE]}
    assert chord.tags == ["open"]
    assert "C" in store
    assert len(store) == 1


def test_save_existing_appends_variation():
    store = CustomChordStore()
    store.save("C", C_SHAPE)
    store.save("C", C_BARRE)
    assert store.get("C").data == {"positions": [C_SHAPE, C_BARRE]}


def test_save_existing_legacy_shape_keeps_old_variation():
    legacy = {"strings": {1: 0, 2: 1, 3: 0, 4: 2, 5: 3, 6: -1}}
    store = CustomChordStore([ChordDefinition(name="C", data=legacy)])
    store.save("C", C_BARRE)
    variations = get_all_variations(store.lookup("C"))
    assert [v.frets for v in variations] == [C_SHAPE["frets"], C_BARRE["frets"]]


def test_set_default_moves_variation_to_front():
    store = CustomChordStore()
    store.save("C", C_SHAPE)
    store.save("C", C_BARRE)
    assert store.set_default("C", 1) is True
    assert normalize_chord_data(store.lookup("C")).frets == C_BARRE["frets"]


def test_set_default_out_of_range():
    store = CustomChordStore()
    store.save("C", C_SHAPE)
    assert store.set_default("C", 3) is False
    assert store.set_default("D", 0) is False


def test_remove():
    store = CustomChordStore()
    store.save("C", C_SHAPE)
    assert store.remove("C") is True
    assert store.remove("C") is False
    assert store.lookup("C") is None


def test_names_are_normalized_for_lookup():
    store = CustomChordStore()
    store.save("C♯m", C_SHAPE)
    assert "C#m" in store
    assert store.names() == ["C♯m"]


def test_json_round_trip(tmp_path):
    path = tmp_path / "chords.json"
    store = CustomChordStore()
    store.save("Em", {"frets": [0, 2, 2, 0, 0, 0]}, category="Mine", tags=["open"])
    store.dump_json(path)

    loaded = CustomChordStore.load_json(path)
    chord = loaded.get("Em")
    assert chord.category == "Mine"
    assert chord.tags == ["open"]
    assert chord.data == {"positions": [{"frets": [0, 2, 2, 0, 0, 0]}]}


def test_load_json_missing_file(tmp_path):
    with pytest.raises(ChordLibraryError):
        CustomChordStore.load_json(tmp_path / "nope.json")


def test_load_json_invalid(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(ChordLibraryError, match="not valid JSON"):
        CustomChordStore.load_json(path)


def test_load_json_not_a_list(tmp_path):
    path = tmp_path / "obj.json"
    path.write_text(json.dumps({"name": "C"}))
    with pytest.raises(ChordLibraryError, match="expected a list"):
        CustomChordStore.load_json(path)


def test_load_json_entry_without_name(tmp_path):
    path = tmp_path / "noname.json"
    path.write_text(json.dumps([{"data": {}}]))
    with pytest.raises(ChordLibraryError, match="entry 0"):
        CustomChordStore.load_json(path)


# ---------------------------------------------------------------------------
# ChordResolver
# ---------------------------------------------------------------------------


def test_resolver_prefers_custom_chords():
    store = CustomChordStore()
    store.save("C", C_BARRE)
    data = ChordResolver.default(store).resolve("C")
    assert normalize_chord_data(data).frets == C_BARRE["frets"]


def test_resolver_uses_library():
    data = ChordResolver.default().resolve("Am")
    assert data is REFERENCE_CHORDS["Am"]


def test_resolver_fallback():
    calls = []

    def fallback(name):
        calls.append(name)
        return {"frets": [0, 0, 0, 0, 0, 0]}

    resolver = ChordResolver(library={}, fallback=fallback)
    assert resolver("Xyz") == {"frets": [0, 0, 0, 0, 0, 0]}
    assert calls == ["Xyz"]


def test_resolver_unknown_and_empty():
    resolver = ChordResolver.default()
    assert resolver("Zz") is None
    assert resolver("  ") is None


def test_resolver_does_not_match_enharmonics():
    assert ChordResolver.default().resolve("Gbm") is None


# ---------------------------------------------------------------------------
# Auto-import and stats
# ---------------------------------------------------------------------------

SONG = "[Am]one [C]two [Gsus2]three [Am]four"


def test_import_missing_chords():
    store = CustomChordStore()
    added = import_missing_chords("[Am]one [C]two [G7]three", store)
    assert added == ["Am", "C", "G7"]

    chord = store.get("Am")
    assert chord.category == "Auto-Import"
    assert chord.tags == ["auto"]
    variant = chord.data["positions"][0]
    assert variant["strings"] == {6: -1, 5: 0, 4: 2, 3: 2, 2: 1, 1: 0}
    assert variant["startingFret"] == 1
    assert normalize_chord_data(chord.data).frets == [-1, 0, 2, 2, 1, 0]


def test_import_skips_existing_chords():
    store = CustomChordStore()
    store.save("C", C_BARRE)
    assert import_missing_chords("[C]two [Em]three", store) == ["Em"]
    assert store.get("C").data == {"positions": [C_BARRE]}


def test_import_uses_fallback_for_unknown():
    store = CustomChordStore()
    fallback = lambda name: {"name": name, "strings": [0, 0, 0, 0, 0, 0], "fingers": []}  # noqa: E731
    assert import_missing_chords("[Gsus2]la", store, fallback) == ["Gsus2"]
    assert normalize_chord_data(store.lookup("Gsus2")).frets == [0] * 6


def test_import_keeps_camel_case_starting_fret():
    store = CustomChordStore()
    fallback = lambda name: {"name": name, "strings": [3, 5, 5, 4, 3, 3], "startingFret": 4}  # noqa: E731
    import_missing_chords("[Gsus2]la", store, fallback)
    (variant,) = store.lookup("Gsus2")["positions"]
    assert variant["startingFret"] == 4


def test_import_leaves_unknown_chords():
    store = CustomChordStore()
    assert import_missing_chords("[Gsus2]la", store) == []
    assert len(store) == 0


def test_chord_stats():
    store = CustomChordStore()
    store.save("C", C_SHAPE)
    stats = chord_stats(SONG, store)
    assert (stats.total, stats.existing, stats.new, stats.unknown) == (3, 1, 1, 1)
