"""Chord diagram geometry.

:func:`render_diagram` turns a canonical fingering into a declarative list
of drawing primitives that any vector surface can paint.  :func:`to_svg`
serializes that geometry for the command line.

The visible window is always five frets.  When the lowest fretted note sits
above the second fret the window starts at ``min_fret - 1`` and a ``"3fr"``
style label replaces the nut; notes that fall outside the window are not
drawn.
"""

from dataclasses import dataclass, field
from xml.sax.saxutils import escape

from .models import STRING_COUNT, Fingering

FRET_COUNT = 5
PADDING_X = 15
PADDING_Y = 20

NUT_WIDTH = 4
LINE_COLOR = "#444"


@dataclass
class GridLine:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke_width: float = 1
    color: str = LINE_COLOR
    kind: str = "fret"  # "nut", "fret" or "string"


@dataclass
class Label:
    x: float
    y: float
    text: str
    font_size: int = 10
    color: str = "black"
    anchor: str = "start"


@dataclass
class Mute:
    string: int
    x: float
    y: float


@dataclass
class Ring:
    string: int
    cx: float
    cy: float
    r: float = 3


@dataclass
class Dot:
    string: int
    fret: int
    cx: float
    cy: float
    r: float = 5
    finger: int = 0


@dataclass
class DiagramGeometry:
    width: float
    height: float
    base_fret: int = 1
    placeholder: str | None = None
    lines: list[GridLine] = field(default_factory=list)
    labels: list[Label] = field(default_factory=list)
    mutes: list[Mute] = field(default_factory=list)
    rings: list[Ring] = field(default_factory=list)
    dots: list[Dot] = field(default_factory=list)

    @property
    def has_nut(self) -> bool:
        return any(line.kind == "nut" for line in self.lines)


def compute_base_fret(frets: list[int]) -> int:
    """First fret of the five-fret window for *frets*."""
    active = [f for f in frets if f > 0]
    min_fret = min(active) if active else 0
    return min_fret - 1 if min_fret > 2 else 1


def render_diagram(fingering: Fingering | None, width: float = 100, height: float = 120) -> DiagramGeometry:
    """Build diagram geometry for *fingering* in a ``width`` × ``height`` box."""
    if fingering is None:
        return DiagramGeometry(width=width, height=height, placeholder="?")
    if fingering.is_empty:
        return DiagramGeometry(width=width, height=height, placeholder="No Data")

    frets = fingering.frets
    fingers = fingering.fingers
    inner_w = width - 2 * PADDING_X
    inner_h = height - 2 * PADDING_Y
    string_spacing = inner_w / (STRING_COUNT - 1)
    fret_spacing = inner_h / FRET_COUNT

    base_fret = compute_base_fret(frets)
    geometry = DiagramGeometry(width=width, height=height, base_fret=base_fret)

    if base_fret > 1:
        geometry.labels.append(
            Label(
                x=PADDING_X - 8,
                y=PADDING_Y + fret_spacing / 2,
                text=f"{base_fret}fr",
            )
        )
    else:
        geometry.lines.append(
            GridLine(PADDING_X, PADDING_Y, width - PADDING_X, PADDING_Y,
                     stroke_width=NUT_WIDTH, color="black", kind="nut")
        )

    for i in range(FRET_COUNT + 1):
        y = PADDING_Y + i * fret_spacing
        geometry.lines.append(GridLine(PADDING_X, y, width - PADDING_X, y, kind="fret"))

    for i in range(STRING_COUNT):
        x = PADDING_X + i * string_spacing
        # bass strings are drawn heavier
        geometry.lines.append(
            GridLine(x, PADDING_Y, x, height - PADDING_Y,
                     stroke_width=1 if i > 2 else 1.5, kind="string")
        )

    for string_index, fret in enumerate(frets):
        x = PADDING_X + string_index * string_spacing
        if fret < 0:
            geometry.mutes.append(Mute(string=string_index, x=x, y=PADDING_Y - 5))
        elif fret == 0:
            geometry.rings.append(Ring(string=string_index, cx=x, cy=PADDING_Y - 8))
        else:
            relative = fret - (base_fret - 1)
            if 0 < relative <= FRET_COUNT:
                geometry.dots.append(
                    Dot(
                        string=string_index,
                        fret=fret,
                        cx=x,
                        cy=PADDING_Y + (relative - 0.5) * fret_spacing,
                        finger=fingers[string_index] if string_index < len(fingers) else 0,
                    )
                )

    return geometry


def to_svg(geometry: DiagramGeometry, title: str | None = None) -> str:
    """Serialize *geometry* to a standalone SVG document."""
    w, h = geometry.width, geometry.height
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{w:g}" height="{h:g}" '
        f'viewBox="0 0 {w:g} {h:g}">'
    ]
    if title:
        parts.append(f"<title>{escape(title)}</title>")

    if geometry.placeholder:
        parts.append(f'<rect width="{w:g}" height="{h:g}" fill="#f2f2f2"/>')
        parts.append(
            f'<text x="{w / 2:g}" y="{h / 2:g}" text-anchor="middle" '
            f'dominant-baseline="middle" font-size="10" fill="#888">'
            f"{escape(geometry.placeholder)}</text>"
        )
        parts.append("</svg>")
        return "\n".join(parts)

    parts.append(f'<rect width="{w:g}" height="{h:g}" fill="white" rx="4"/>')
    for line in geometry.lines:
        parts.append(
            f'<line x1="{line.x1:g}" y1="{line.y1:g}" x2="{line.x2:g}" y2="{line.y2:g}" '
            f'stroke="{line.color}" stroke-width="{line.stroke_width:g}"/>'
        )
    for label in geometry.labels:
        parts.append(
            f'<text x="{label.x:g}" y="{label.y:g}" font-size="{label.font_size}" '
            f'font-weight="bold" fill="{label.color}">{escape(label.text)}</text>'
        )
    for mute in geometry.mutes:
        parts.append(
            f'<text x="{mute.x:g}" y="{mute.y:g}" text-anchor="middle" '
            f'font-size="12" fill="red">X</text>'
        )
    for ring in geometry.rings:
        parts.append(
            f'<circle cx="{ring.cx:g}" cy="{ring.cy:g}" r="{ring.r:g}" '
            f'stroke="black" fill="white" stroke-width="1"/>'
        )
    for dot in geometry.dots:
        parts.append(f'<circle cx="{dot.cx:g}" cy="{dot.cy:g}" r="{dot.r:g}" fill="black"/>')
    parts.append("</svg>")
    return "\n".join(parts)
