"""Chords-over-lyrics → inline ChordPro conversion.

Used when importing songs typed or scanned in the classic two-row layout::

    Am       G        C
    Hello darkness my old

becomes ``[Am]Hello da[G]rkness my [C]old``.

Pipeline:

  1. classify_line()              : BLANK / SECTION / CHORD / TAB / LYRIC
  2. extract_chords_with_offsets(): (column, name) pairs from a chord line
  3. merge_chord_lyric_lines()    : insert chords inline into a lyric line
  4. parse_text_tab()             : full pipeline: raw text → list[Section]
  5. song_from_ocr()              : OCR JSON → Song

Two chord notation styles are supported:

  "bracketed"  : [D]  [Am7]  [G/B]
  "unbracketed":  D    Am7    G/B   (space-aligned)
"""

import re
from enum import Enum, auto

from .chordpro import ChordProFormatter
from .models import LyricLine, Section, Song

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

_CHORD_BODY = (
    r"[A-G][#b]?"
    r"(?:maj|min|dim|aug|sus|add|m|M|7|9|11|13)*"
    r"\d*"
    r"(?:[#b]\d+)*"
    r"(?:\([^)]*\))?"
    r"(?:\/[A-Ga-g][#b]?)?"
)

# Valid chord name without brackets: A, Am7, Amaj7, G7sus4, CM7, Dm7b5, G/B, Cadd9(no3)
CHORD_NAME_RE = re.compile(rf"^(?:{_CHORD_BODY})$")

# A bracketed chord token: [D], [Am7], [G/B]
BRACKETED_CHORD_TOKEN_RE = re.compile(rf"\[({_CHORD_BODY})\]")

# Any [token] group regardless of content
ANY_BRACKET_RE = re.compile(r"\[([^\]]+)\]")

SECTION_KEYWORDS_RE = re.compile(
    r"^(?:Verse|Chorus|Bridge|Intro|Outro|Solo|Interlude|Instrumental|"
    r"Pre-?Chorus|Tag|Coda|Refrain|Hook|Couplet|Pont)(?:\s+\d+)?$",
    re.IGNORECASE,
)

# ASCII guitar tab line: e|--0-1-3--  or  E---------2--
TAB_LINE_RE = re.compile(r"^[eEBGDAd](?:\|[-\d]|--)")

# OCR placeholder for unknown title/artist
_UNKNOWN = "Inconnu"


class LineType(Enum):
    BLANK = auto()
    SECTION = auto()  # [Verse 1], Chorus:
    CHORD = auto()  # chord-only line
    TAB = auto()  # ASCII guitar tab
    LYRIC = auto()


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------


def classify_line(line: str, style: str = "unbracketed") -> LineType:
    """Classify a single line of chord sheet text."""
    stripped = line.strip()
    if not stripped:
        return LineType.BLANK
    if TAB_LINE_RE.match(stripped):
        return LineType.TAB
    if style == "bracketed":
        return _classify_bracketed(stripped)
    return _classify_unbracketed(stripped)


def _classify_bracketed(line: str) -> LineType:
    all_tokens = ANY_BRACKET_RE.findall(line)
    remainder = ANY_BRACKET_RE.sub("", line).strip()

    if not all_tokens or remainder:
        return LineType.LYRIC
    if len(all_tokens) == 1 and not CHORD_NAME_RE.match(all_tokens[0]):
        return LineType.SECTION
    if all(CHORD_NAME_RE.match(t) for t in all_tokens):
        return LineType.CHORD
    return LineType.LYRIC


def _classify_unbracketed(line: str) -> LineType:
    m = re.match(r"^\[([^\]]+)\]$", line)
    if m and not CHORD_NAME_RE.match(m.group(1)):
        return LineType.SECTION

    if SECTION_KEYWORDS_RE.match(line.rstrip(":").strip()):
        return LineType.SECTION

    tokens = line.split()
    if tokens and all(CHORD_NAME_RE.match(t) for t in tokens):
        return LineType.CHORD
    return LineType.LYRIC


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def extract_chords_with_offsets(line: str, style: str = "unbracketed") -> list[tuple[int, str]]:
    """Return ``(column_offset, chord_name)`` pairs from a chord line, left to right."""
    if style == "bracketed":
        return [(m.start(), m.group(1)) for m in BRACKETED_CHORD_TOKEN_RE.finditer(line)]
    return [
        (m.start(), m.group()) for m in re.finditer(r"\S+", line) if CHORD_NAME_RE.match(m.group())
    ]


def merge_chord_lyric_lines(chord_line: str, lyric_line: str, style: str = "unbracketed") -> str:
    """Insert the chords of *chord_line* into *lyric_line* at their columns.

    A chord whose column lies past the end of the lyric is appended rather
    than dropped.
    """
    chords = extract_chords_with_offsets(chord_line, style)
    if not chords:
        return lyric_line

    result = lyric_line
    inserted = 0  # characters inserted so far shift every later offset

    for offset, name in chords:
        bracket = f"[{name}]"
        pos = min(offset + inserted, len(result))
        result = result[:pos] + bracket + result[pos:]
        inserted += len(bracket)

    return result


def merge_chord_line(chords_line: str | None, lyrics_line: str | None) -> str:
    """Merge one OCR row.  Chord-only rows become ``[A] [B]``."""
    if not chords_line or not chords_line.strip():
        return lyrics_line or ""
    if not lyrics_line or not lyrics_line.strip():
        return chord_only_line(chords_line)
    return merge_chord_lyric_lines(chords_line, lyrics_line)


def chord_only_line(chords_line: str, style: str = "unbracketed") -> str:
    return " ".join(f"[{name}]" for _, name in extract_chords_with_offsets(chords_line, style))


def extract_section_label(line: str) -> str:
    stripped = line.strip()
    m = re.match(r"^\[([^\]]+)\]$", stripped)
    if m:
        return m.group(1)
    return stripped.rstrip(":").strip()


# ---------------------------------------------------------------------------
# Full text parser
# ---------------------------------------------------------------------------


def parse_text_tab(text: str, style: str = "unbracketed") -> list[Section]:
    """Parse a chords-over-lyrics sheet into sections with inline chords.

    SECTION lines start a new section; a CHORD line followed by a LYRIC line
    is merged into one; a lone CHORD line becomes a chord-only line; BLANK
    and TAB lines are skipped.
    """
    lines = text.splitlines()
    sections: list[Section] = []
    current = Section(label=None)

    i = 0
    while i < len(lines):
        lt = classify_line(lines[i], style)

        if lt in (LineType.BLANK, LineType.TAB):
            i += 1
            continue

        if lt == LineType.SECTION:
            if current.lines:
                sections.append(current)
            current = Section(label=extract_section_label(lines[i]))
            i += 1
            continue

        if lt == LineType.CHORD:
            next_lt = classify_line(lines[i + 1], style) if i + 1 < len(lines) else None
            if next_lt == LineType.LYRIC:
                merged = merge_chord_lyric_lines(lines[i], lines[i + 1], style)
                current.lines.append(LyricLine(content=merged))
                i += 2
            else:
                current.lines.append(LyricLine(content=chord_only_line(lines[i], style)))
                i += 1
            continue

        current.lines.append(LyricLine(content=lines[i]))
        i += 1

    if current.lines:
        sections.append(current)

    return sections


# ---------------------------------------------------------------------------
# OCR payloads
# ---------------------------------------------------------------------------


def _known(value) -> str:
    if not value or value == _UNKNOWN:
        return ""
    return str(value)


def song_from_ocr(data: dict | None) -> Song | None:
    """Build a :class:`Song` from an OCR payload.

    Expected shape::

        {"title": ..., "artist": ..., "key": ..., "capo": ...,
         "sections": [{"label": "Verse 1",
                       "content": [{"chords": "Am  G", "lyrics": "Hello"}]}]}
    """
    if not data or not isinstance(data.get("sections"), list):
        return None

    sections = []
    for raw in data["sections"]:
        if not isinstance(raw, dict):
            continue
        rows = [row for row in raw.get("content") or [] if isinstance(row, dict)]
        sections.append(
            Section(
                label=raw.get("label") or None,
                lines=[LyricLine(merge_chord_line(row.get("chords"), row.get("lyrics"))) for row in rows],
            )
        )

    return Song(
        title=_known(data.get("title")),
        artist=_known(data.get("artist")),
        key=data.get("key") or None,
        capo=_capo(data.get("capo")),
        sections=sections,
    )


def _capo(value) -> int | None:
    m = re.search(r"\d+", str(value)) if value else None
    return int(m.group()) if m and int(m.group()) > 0 else None


def ocr_to_chordpro(data: dict | None) -> str:
    """ChordPro text for an OCR payload; empty string when there is nothing."""
    song = song_from_ocr(data)
    if song is None:
        return ""
    return ChordProFormatter().render(song)


def text_to_chordpro(text: str, style: str = "unbracketed", title: str = "", artist: str = "") -> str:
    """ChordPro text for a plain chords-over-lyrics sheet."""
    song = Song(title=title, artist=artist, sections=parse_text_tab(text, style))
    return ChordProFormatter().render(song)
