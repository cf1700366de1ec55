"""Song rendering: parsed lines → transposed chord/lyric groups.

The renderer never paints anything.  It hands a presentation layer a list of
:class:`RenderedLine` objects, each a row of :class:`RenderedGroup` columns
(chord label above lyric text), and answers chord selections with a
:class:`ChordTooltip` carrying the diagram geometry.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from .chordpro import parse_chordpro
from .diagram import DiagramGeometry, render_diagram
from .exceptions import ChordLookupError
from .models import ChordGroup, Fingering, Token
from .normalizer import get_all_variations
from .transposer import transpose_chord

logger = logging.getLogger(__name__)

TOOLTIP_WIDTH = 140
TOOLTIP_HEIGHT = 180
VIEWPORT_MARGIN = 10


@dataclass
class RenderedGroup:
    chord: str | None  # annotation as written
    label: str | None  # transposed chord shown to the reader
    text: str = ""


@dataclass
class RenderedLine:
    groups: list[RenderedGroup] = field(default_factory=list)


@dataclass
class RenderedSong:
    font_size: int
    transpose: int
    lines: list[RenderedLine] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.lines


@dataclass
class ChordTooltip:
    name: str
    variations: list[Fingering]
    diagram: DiagramGeometry

    @property
    def fingering(self) -> Fingering:
        return self.variations[0]


@dataclass
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


def group_tokens(tokens: list[Token]) -> list[ChordGroup]:
    """Pair each chord with the lyric text that follows it.

    Consecutive chords with no text between them produce chord groups with
    empty text.
    """
    groups: list[ChordGroup] = []
    current = ChordGroup()
    for token in tokens:
        if token.type == "chord":
            if current.text or current.chord:
                groups.append(current)
            current = ChordGroup(chord=token.content)
        else:
            current.text = token.content
            groups.append(current)
            current = ChordGroup()
    if current.text or current.chord:
        groups.append(current)
    return groups


class SongRenderer:
    """Render song content against a chord resolver."""

    def __init__(
        self,
        resolver: Callable[[str], Mapping | None],
        diagram_width: float = 100,
        diagram_height: float = 120,
    ):
        self.resolver = resolver
        self.diagram_width = diagram_width
        self.diagram_height = diagram_height

    def render(self, content: str | None, font_size: int = 16, transpose: int = 0) -> RenderedSong:
        song = RenderedSong(font_size=font_size, transpose=transpose)
        for line in parse_chordpro(content):
            if line.type == "directive":
                continue
            song.lines.append(
                RenderedLine(
                    groups=[
                        RenderedGroup(
                            chord=group.chord,
                            label=transpose_chord(group.chord, transpose) if group.chord else None,
                            text=group.text,
                        )
                        for group in group_tokens(line.tokens)
                    ]
                )
            )
        return song

    def select(self, chord: str | None, transpose: int = 0) -> ChordTooltip | None:
        """Resolve the diagram for a selected chord, or None when unknown."""
        if not chord:
            return None
        name = transpose_chord(chord.strip(), transpose)
        try:
            data = self.resolver(name)
        except ChordLookupError as exc:
            logger.warning("%s", exc)
            return None
        if not data:
            return None

        # a matched entry with no usable positions still gets a "No Data" diagram
        variations = get_all_variations(data) or [Fingering()]
        return ChordTooltip(
            name=name,
            variations=variations,
            diagram=render_diagram(variations[0], self.diagram_width, self.diagram_height),
        )

    def select_group(self, group: RenderedGroup, transpose: int) -> ChordTooltip | None:
        return self.select(group.chord, transpose)


def place_tooltip(
    anchor: Rect,
    viewport_width: float,
    viewport_height: float,
    tooltip_width: float = TOOLTIP_WIDTH,
    tooltip_height: float = TOOLTIP_HEIGHT,
) -> tuple[float, float]:
    """Anchor point ``(x, y)`` for a tooltip centred above *anchor*.

    ``x`` is the tooltip's horizontal centre and ``y`` its bottom edge.  The
    tooltip is kept inside the viewport horizontally and flipped below the
    anchor when it would clip the top.
    """
    x = anchor.left + anchor.width / 2
    y = anchor.top

    if x - tooltip_width / 2 < VIEWPORT_MARGIN:
        x = tooltip_width / 2 + VIEWPORT_MARGIN
    if x + tooltip_width / 2 > viewport_width - VIEWPORT_MARGIN:
        x = viewport_width - tooltip_width / 2 - VIEWPORT_MARGIN
    if y - tooltip_height < VIEWPORT_MARGIN:
        y = anchor.bottom + tooltip_height + 20
    return x, y


def format_text(song: RenderedSong) -> str:
    """Plain-text rendering with chord labels above their lyrics."""
    out: list[str] = []
    for line in song.lines:
        chord_row = ""
        lyric_row = ""
        for group in line.groups:
            label = group.label or ""
            width = max(len(group.text), len(label) + 1 if label else 0)
            chord_row += label.ljust(width)
            lyric_row += group.text.ljust(width)
        if chord_row.strip():
            out.append(chord_row.rstrip())
        out.append(lyric_row.rstrip())
    return "\n".join(out) + "\n" if out else ""
