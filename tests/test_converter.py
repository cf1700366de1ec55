from chordbook.converter import (
    LineType,
    chord_only_line,
    classify_line,
    extract_chords_with_offsets,
    extract_section_label,
    merge_chord_line,
    merge_chord_lyric_lines,
    ocr_to_chordpro,
    parse_text_tab,
    song_from_ocr,
    text_to_chordpro,
)

OCR_PAYLOAD = {
    "title": "Inconnu",
    "artist": "Jacques Brel",
    "key": "G",
    "capo": "Capo 2",
    "sections": [
        {
            "label": "Couplet",
            "content": [
                {"chords": "G   D", "lyrics": "Ne me quitte pas"},
                {"chords": "Em C", "lyrics": ""},
            ],
        },
        "junk",
    ],
}

# ---------------------------------------------------------------------------
# classify_line
# ---------------------------------------------------------------------------


def test_classify_blank():
    assert classify_line("") == LineType.BLANK
    assert classify_line("   ", "bracketed") == LineType.BLANK


def test_classify_tab():
    assert classify_line("e|--0--1--3--|") == LineType.TAB
    assert classify_line("E------2--") == LineType.TAB


def test_classify_chord_row():
    assert classify_line("Am       G        C") == LineType.CHORD
    assert classify_line("  D/F#  Cadd9(no3)  Bbmaj7") == LineType.CHORD


def test_classify_lyric_starting_with_chord_letter():
    assert classify_line("A la claire fontaine") == LineType.LYRIC


def test_classify_section_keywords():
    assert classify_line("Couplet 1") == LineType.SECTION
    assert classify_line("Refrain:") == LineType.SECTION
    assert classify_line("Pre-Chorus") == LineType.SECTION
    assert classify_line("[Verse 2]") == LineType.SECTION


def test_classify_bracketed():
    assert classify_line("[Verse 1]", "bracketed") == LineType.SECTION
    assert classify_line("[Am7]   [G/B]", "bracketed") == LineType.CHORD
    assert classify_line("[D]pulled into Nazareth", "bracketed") == LineType.LYRIC


# ---------------------------------------------------------------------------
# Offsets and merging
# ---------------------------------------------------------------------------


def test_extract_offsets_unbracketed():
    assert extract_chords_with_offsets("Am       G") == [(0, "Am"), (9, "G")]


def test_extract_offsets_bracketed():
    assert extract_chords_with_offsets("  [D]   [G/B]", "bracketed") == [(2, "D"), (8, "G/B")]


def test_extended_chord_names_in_row():
    row = "G7sus4   CM7  Dm7b5"
    assert classify_line("G7sus4   CM7") == LineType.CHORD
    assert extract_chords_with_offsets(row) == [(0, "G7sus4"), (9, "CM7"), (14, "Dm7b5")]
    assert merge_chord_line(row, "Hello darkness my") == "[G7sus4]Hello dar[CM7]kness[Dm7b5] my"


def test_merge_inserts_chords_at_columns():
    merged = merge_chord_lyric_lines("Am       G        C", "Hello darkness my old friend")
    assert merged == "[Am]Hello dar[G]kness my [C]old friend"


def test_merge_chord_beyond_lyric_appended():
    assert merge_chord_lyric_lines("D          G", "la") == "[D]la[G]"


def test_merge_no_chords_returns_lyric():
    assert merge_chord_lyric_lines("   ", "só as palavras") == "só as palavras"


def test_merge_chord_line_rows():
    assert merge_chord_line(None, "paroles") == "paroles"
    assert merge_chord_line("", None) == ""
    assert merge_chord_line("Em  C", "  ") == "[Em] [C]"


def test_chord_only_line():
    assert chord_only_line("D   G   A") == "[D] [G] [A]"


def test_extract_section_label():
    assert extract_section_label("[Chorus]") == "Chorus"
    assert extract_section_label("Refrain:") == "Refrain"
    assert extract_section_label("  Intro  ") == "Intro"


# ---------------------------------------------------------------------------
# parse_text_tab
# ---------------------------------------------------------------------------


def test_parse_text_tab_sections_and_lines():
    text = "Couplet 1\nAm       G\nHello darkness\n\nRefrain\nC   G\n"
    sections = parse_text_tab(text)
    assert [s.label for s in sections] == ["Couplet 1", "Refrain"]
    assert [l.content for l in sections[0].lines] == ["[Am]Hello dar[G]kness"]
    assert [l.content for l in sections[1].lines] == ["[C] [G]"]


def test_parse_text_tab_unlabelled_start():
    sections = parse_text_tab("just a line\nChorus\nD\nla")
    assert sections[0].label is None
    assert sections[0].lines[0].content == "just a line"
    assert sections[1].lines[0].content == "[D]la"


def test_parse_text_tab_skips_tab_lines():
    sections = parse_text_tab("e|--0--1--|\nB|--1-----|\nla la")
    assert [l.content for l in sections[0].lines] == ["la la"]


def test_parse_text_tab_empty_sections_dropped():
    assert parse_text_tab("Intro\n\nVerse 1\n") == []


def test_parse_text_tab_bracketed():
    sections = parse_text_tab("[Verse 1]\n[D]    [G]\nI pulled in", "bracketed")
    assert sections[0].label == "Verse 1"
    assert sections[0].lines[0].content == "[D]I pulle[G]d in"


# ---------------------------------------------------------------------------
# OCR payloads
# ---------------------------------------------------------------------------


def test_song_from_ocr():
    song = song_from_ocr(OCR_PAYLOAD)
    assert song.title == ""
    assert song.artist == "Jacques Brel"
    assert song.key == "G"
    assert song.capo == 2
    assert len(song.sections) == 1
    assert [l.content for l in song.sections[0].lines] == [
        "[G]Ne m[D]e quitte pas",
        "[Em] [C]",
    ]


def test_song_from_ocr_capo_values():
    base = {"sections": []}
    assert song_from_ocr({**base, "capo": 3}).capo == 3
    assert song_from_ocr({**base, "capo": "0"}).capo is None
    assert song_from_ocr({**base, "capo": "none"}).capo is None


def test_song_from_ocr_without_sections():
    assert song_from_ocr(None) is None
    assert song_from_ocr({"title": "x"}) is None
    assert song_from_ocr({"sections": "x"}) is None


def test_ocr_to_chordpro():
    assert ocr_to_chordpro(OCR_PAYLOAD) == (
        "{artist: Jacques Brel}\n"
        "{key: G}\n"
        "{capo: 2}\n"
        "\n"
        "{comment: Couplet}\n"
        "[G]Ne m[D]e quitte pas\n"
        "[Em] [C]\n"
    )


def test_ocr_to_chordpro_nothing():
    assert ocr_to_chordpro(None) == ""


def test_text_to_chordpro():
    out = text_to_chordpro("Verse 1\nD G\nla la", title="Berceuse")
    assert out == (
        "{title: Berceuse}\n"
        "\n"
        "{start_of_verse: Verse 1}\n"
        "[D]la[G] la\n"
        "{end_of_verse}\n"
    )
