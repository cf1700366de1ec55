"""ChordPro parsing and formatting.

Parsing turns inline-annotated song text into tokens::

    >>> parse_chordpro("C'est un [C]beau roman")
    [ParsedLine(type='line', content='', tokens=[
        Token(type='text', content="C'est un "),
        Token(type='chord', content='C'),
        Token(type='text', content='beau roman')])]

Lines whose first non-blank character is ``{`` are directives and are kept
verbatim.  There is no escape for a literal ``[``: an unterminated bracket
absorbs the remainder of its line as the chord annotation.

Formatting renders a structured :class:`~chordbook.models.Song` back to
ChordPro text.

Section label → ChordPro directive mapping
------------------------------------------

+--------------------------------------+------------------------------------+
| Label (case-insensitive prefix)      | Directive pair                     |
+======================================+====================================+
| ``Verse``, ``Verse N``               | ``{start_of_verse: Verse N}`` /    |
|                                      | ``{end_of_verse}``                 |
+--------------------------------------+------------------------------------+
| ``Chorus``                           | ``{start_of_chorus}`` /            |
|                                      | ``{end_of_chorus}``                |
+--------------------------------------+------------------------------------+
| ``Bridge``                           | ``{start_of_bridge}`` /            |
|                                      | ``{end_of_bridge}``                |
+--------------------------------------+------------------------------------+
| anything else                        | ``{comment: <label>}``             |
+--------------------------------------+------------------------------------+
| ``None`` / unlabeled                 | no wrapper directive               |
+--------------------------------------+------------------------------------+
"""

import re
from dataclasses import dataclass

from .models import ParsedLine, Section, Song, Token

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

_DIRECTIVE_RE = re.compile(r"{(.*?):(.*)}")

# Bracketed chord name: [Am], [C#m7], [Dsus4], [G/B], [Cadd9(no3)]
_BRACKETED_CHORD_RE = re.compile(
    r"\[([A-G][#b]?(?:m|maj|min|dim|aug|sus|add)?[0-9]*(?:\([^)]*\))?(?:/[A-G][#b]?)?)\]",
    re.IGNORECASE,
)

_ROOT_RE = re.compile(r"^([A-G][#b]?)", re.IGNORECASE)
_BASS_RE = re.compile(r"/([A-G][#b]?)$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_chordpro(content: str | None) -> list[ParsedLine]:
    """Tokenize song *content* line by line.  Never raises."""
    if not content:
        return []
    return [_parse_line(line) for line in content.split("\n")]


def _parse_line(line: str) -> ParsedLine:
    if line.strip().startswith("{"):
        return ParsedLine(type="directive", content=line)

    tokens: list[Token] = []
    buffer = ""
    i = 0
    while i < len(line):
        if line[i] == "[":
            if buffer:
                tokens.append(Token(type="text", content=buffer))
                buffer = ""
            end = line.find("]", i + 1)
            if end == -1:
                end = len(line)
            tokens.append(Token(type="chord", content=line[i + 1:end]))
            i = end + 1
            continue
        buffer += line[i]
        i += 1

    if buffer:
        tokens.append(Token(type="text", content=buffer))
    return ParsedLine(type="line", tokens=tokens)


def extract_metadata(content: str | None) -> dict[str, str]:
    """Return ``{key: value}`` pairs from the song's directive lines."""
    metadata: dict[str, str] = {}
    for line in (content or "").split("\n"):
        m = _DIRECTIVE_RE.search(line)
        if m:
            metadata[m.group(1).strip().lower()] = m.group(2).strip()
    return metadata


# ---------------------------------------------------------------------------
# Chord names
# ---------------------------------------------------------------------------


@dataclass
class ChordName:
    key: str
    suffix: str
    bass: str | None


def extract_chords(content: str | None) -> list[str]:
    """Return the unique chord names annotated in *content*, first seen first."""
    if not content or not isinstance(content, str):
        return []
    seen: dict[str, None] = {}
    for m in _BRACKETED_CHORD_RE.finditer(content):
        name = m.group(1).strip()
        if name:
            seen.setdefault(name, None)
    return list(seen)


def normalize_chord_name(name: str) -> str:
    """Canonical lookup form: no whitespace, ASCII accidentals."""
    return re.sub(r"\s+", "", name).replace("♯", "#").replace("♭", "b").strip()


def parse_chord_name(name: str) -> ChordName:
    """Split a chord name into root key, suffix and optional slash bass."""
    normalized = normalize_chord_name(name)
    root = _ROOT_RE.match(normalized)
    if not root:
        return ChordName(key=name, suffix="", bass=None)

    key = root.group(1)
    remaining = normalized[len(key):]
    bass = None
    m = _BASS_RE.search(remaining)
    if m:
        bass = m.group(1)
        remaining = remaining[: -len(m.group(0))]
    return ChordName(key=key, suffix=remaining, bass=bass)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

# Section labels whose directives ChordPro has standardised.
_STRUCTURED = {
    "verse": ("start_of_verse", "end_of_verse"),
    "chorus": ("start_of_chorus", "end_of_chorus"),
    "bridge": ("start_of_bridge", "end_of_bridge"),
}


class ChordProFormatter:
    """Render a :class:`~chordbook.models.Song` to ChordPro text."""

    def render(self, song: Song) -> str:
        """Return ChordPro text for *song*.

        The returned string ends with a single newline and uses Unix line
        endings (``\\n``) throughout.
        """
        parts: list[str] = []

        # --- Metadata block ---
        if song.title:
            parts.append(f"{{title: {song.title}}}")
        if song.artist:
            parts.append(f"{{artist: {song.artist}}}")
        if song.key:
            parts.append(f"{{key: {song.key}}}")
        if song.capo:
            parts.append(f"{{capo: {song.capo}}}")
        if song.tuning:
            parts.append(f"{{tuning: {song.tuning}}}")

        # --- Section blocks ---
        for section in song.sections:
            if parts:
                parts.append("")  # blank line before every section
            parts.extend(_render_section(section))

        return "\n".join(parts) + "\n"


def _render_section(section: Section) -> list[str]:
    """Return a list of lines for one section (no trailing blank line)."""
    label = (section.label or "").strip()
    lines = [line.content for line in section.lines]

    if not label:
        return lines

    label_lower = label.lower().split()[0]  # "verse" from "Verse 1"

    if label_lower in _STRUCTURED:
        start_dir, end_dir = _STRUCTURED[label_lower]
        # Verse keeps its full label ("Verse 2"); chorus/bridge use the bare directive
        if label_lower == "verse":
            start_line = f"{{{start_dir}: {label}}}"
        else:
            start_line = f"{{{start_dir}}}"
        return [start_line, *lines, f"{{{end_dir}}}"]

    return [f"{{comment: {label}}}", *lines]
