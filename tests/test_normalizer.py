from chordbook.models import Fingering
from chordbook.normalizer import (
    fingers_to_list,
    get_all_variations,
    normalize_chord_data,
    normalize_fingers,
    normalize_frets,
    normalize_to_positions,
    strings_to_frets,
)

MUTED_ROW = [-1] * 6
NO_FINGERS = [0] * 6

# C major in each of the stored shapes
C_FRETS = {"frets": [-1, 3, 2, 0, 1, 0], "fingers": [0, 3, 2, 0, 1, 0]}
C_STRINGS = {
    "strings": {1: 0, 2: 1, 3: 0, 4: 2, 5: 3, 6: -1},
    "fingers": {1: 0, 2: 1, 3: 0, 4: 2, 5: 3, 6: 0},
}
C_POSITIONS = {"positions": [C_FRETS]}

# ---------------------------------------------------------------------------
# Shape conversion
# ---------------------------------------------------------------------------


def test_strings_to_frets_orders_low_e_first():
    assert strings_to_frets(C_STRINGS["strings"]) == [-1, 3, 2, 0, 1, 0]


def test_strings_to_frets_accepts_string_keys():
    strings = {"1": 0, "2": 1, "3": 0, "4": 2, "5": 3, "6": -1}
    assert strings_to_frets(strings) == [-1, 3, 2, 0, 1, 0]


def test_strings_to_frets_missing_strings_are_muted():
    assert strings_to_frets({1: 0}) == [-1, -1, -1, -1, -1, 0]


def test_strings_to_frets_list_is_taken_as_frets():
    assert strings_to_frets([0, 2, 2, 1, 0, 0]) == [0, 2, 2, 1, 0, 0]


def test_strings_to_frets_garbage():
    assert strings_to_frets("x32010") == MUTED_ROW
    assert strings_to_frets(None) == MUTED_ROW


def test_fingers_to_list_pads_short_lists():
    assert fingers_to_list([1, 2]) == [1, 2, 0, 0, 0, 0]


def test_fingers_to_list_truncates_long_lists():
    assert fingers_to_list([1, 2, 3, 4, 1, 1, 1]) == [1, 2, 3, 4, 1, 1]


def test_fingers_to_list_bad_values_unassigned():
    assert fingers_to_list(["1", "x", None, 2.0, True, 3]) == [1, 0, 0, 2, 0, 3]


# ---------------------------------------------------------------------------
# normalize_frets / normalize_fingers
# ---------------------------------------------------------------------------


def test_all_shapes_normalize_to_same_fingering():
    expected = Fingering(frets=[-1, 3, 2, 0, 1, 0], fingers=[0, 3, 2, 0, 1, 0])
    assert normalize_chord_data(C_FRETS) == expected
    assert normalize_chord_data(C_STRINGS) == expected
    assert normalize_chord_data(C_POSITIONS) == expected


def test_positions_win_over_top_level():
    data = {"positions": [C_FRETS], "frets": [0, 0, 0, 0, 0, 0]}
    assert normalize_frets(data) == [-1, 3, 2, 0, 1, 0]


def test_positions_entry_in_strings_shape():
    data = {"positions": [C_STRINGS]}
    assert normalize_frets(data) == [-1, 3, 2, 0, 1, 0]
    assert normalize_fingers(data) == [0, 3, 2, 0, 1, 0]


def test_strings_win_over_frets():
    data = {"strings": {6: 3}, "frets": [0, 0, 0, 0, 0, 0]}
    assert normalize_frets(data) == [3, -1, -1, -1, -1, -1]


def test_empty_positions_falls_back_to_top_level():
    data = {"positions": [], "frets": [0, 2, 2, 0, 0, 0]}
    assert normalize_frets(data) == [0, 2, 2, 0, 0, 0]


def test_fingers_missing_default_to_unassigned():
    assert normalize_fingers({"frets": [0, 2, 2, 0, 0, 0]}) == NO_FINGERS


def test_malformed_input_degrades_to_muted():
    for data in (None, 42, "C", [], {}, {"frets": "x"}, {"positions": ["bad"]}):
        assert normalize_frets(data) == MUTED_ROW
        assert normalize_fingers(data) == NO_FINGERS


def test_output_always_six_entries():
    data = {"frets": [1, 2, 3], "fingers": [1, 2, 3, 4, 1, 1, 1, 1]}
    fingering = normalize_chord_data(data)
    assert len(fingering.frets) == 6
    assert len(fingering.fingers) == 6


def test_normalize_to_positions():
    assert normalize_to_positions(C_STRINGS) == {
        "positions": [{"frets": [-1, 3, 2, 0, 1, 0], "fingers": [0, 3, 2, 0, 1, 0]}]
    }


# ---------------------------------------------------------------------------
# Variations
# ---------------------------------------------------------------------------


def test_get_all_variations_positions_in_order():
    barre = {"frets": [3, 3, 5, 5, 5, 3], "fingers": [1, 1, 2, 3, 4, 1]}
    variations = get_all_variations({"positions": [C_FRETS, barre]})
    assert [v.frets for v in variations] == [C_FRETS["frets"], barre["frets"]]


def test_get_all_variations_mixed_shapes():
    variations = get_all_variations({"positions": [C_STRINGS, C_FRETS]})
    assert variations[0] == variations[1]


def test_get_all_variations_single_shape():
    assert get_all_variations(C_STRINGS) == [normalize_chord_data(C_STRINGS)]


def test_get_all_variations_non_mapping():
    assert get_all_variations(None) == []
    assert get_all_variations([C_FRETS]) == []


def test_get_all_variations_bad_entry_is_muted():
    variations = get_all_variations({"positions": [C_FRETS, "junk"]})
    assert variations[1] == Fingering()
    assert variations[1].is_empty
