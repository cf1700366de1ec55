import json
import logging
import sys
from pathlib import Path

import click

from .capo import suggest_capo
from .chordpro import extract_chords, extract_metadata
from .config import get_settings
from .converter import ocr_to_chordpro, text_to_chordpro
from .diagram import render_diagram, to_svg
from .exceptions import ChordbookError, ChordLibraryError, FetchError
from .library import ChordResolver, CustomChordStore, chord_stats, import_missing_chords
from .renderer import SongRenderer, format_text
from .sources import load_song
from .transposer import transpose_content


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _load(source: str) -> str:
    try:
        return load_song(source, timeout=get_settings().http_timeout)
    except FetchError as exc:
        msg = f"Could not fetch {exc.url}"
        if exc.status_code:
            msg += f" (HTTP {exc.status_code})"
        _fail(msg)
    except ChordbookError as exc:
        _fail(str(exc))


def _store(chords_path: str | None) -> CustomChordStore | None:
    if not chords_path:
        return None
    try:
        return CustomChordStore.load_json(chords_path)
    except ChordLibraryError as exc:
        _fail(str(exc))


def _write_or_echo(text: str, output_path: str | None) -> None:
    if output_path:
        Path(output_path).write_text(text, encoding="utf-8")
        click.echo(f"Written to {output_path}")
    else:
        click.echo(text, nl=False)


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """Read, transpose and analyse ChordPro songs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("source")
@click.option("-t", "--transpose", default=0, show_default=True, help="Semitones to shift chords by.")
@click.option("--chords", "chords_path", default=None, metavar="PATH",
              help="JSON file of custom chords.")
def render(source: str, transpose: int, chords_path: str | None) -> None:
    """Print SOURCE (file or URL) with chords above the lyrics."""
    content = _load(source)
    renderer = SongRenderer(ChordResolver.default(_store(chords_path)))
    song = renderer.render(content, transpose=transpose)
    if song.is_empty:
        _fail("no content to display")

    meta = extract_metadata(content)
    if meta.get("title"):
        header = meta["title"]
        if meta.get("artist"):
            header += f" - {meta['artist']}"
        click.echo(header)
        click.echo("")
    click.echo(format_text(song), nl=False)


@main.command()
@click.argument("source")
@click.option("-s", "--semitones", type=int, required=True, help="Semitones to shift by (negative for down).")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Output file path (default: stdout).")
def transpose(source: str, semitones: int, output_path: str | None) -> None:
    """Rewrite every chord of SOURCE shifted by N semitones."""
    _write_or_echo(transpose_content(_load(source), semitones), output_path)


@main.command()
@click.argument("source")
@click.option("--chords", "chords_path", default=None, metavar="PATH",
              help="JSON file of custom chords, to report which are missing.")
def chords(source: str, chords_path: str | None) -> None:
    """List the chords used in SOURCE."""
    content = _load(source)
    names = extract_chords(content)
    for name in names:
        click.echo(name)

    store = _store(chords_path)
    if store is not None:
        stats = chord_stats(content, store)
        click.echo(
            f"{stats.total} chords: {stats.existing} known, "
            f"{stats.new} importable, {stats.unknown} unknown"
        )


@main.command("import-chords")
@click.argument("source")
@click.option("--chords", "chords_path", required=True, metavar="PATH",
              help="JSON file of custom chords to update (created if missing).")
def import_chords(source: str, chords_path: str) -> None:
    """Add the chords used in SOURCE to the custom chord file."""
    content = _load(source)
    store = _store(chords_path) if Path(chords_path).exists() else CustomChordStore()
    added = import_missing_chords(content, store)
    store.dump_json(chords_path)
    if added:
        click.echo(f"Added {len(added)} chords: {', '.join(added)}")
    else:
        click.echo("No new chords to add")


@main.command()
@click.argument("source")
def capo(source: str) -> None:
    """Suggest a capo position that makes SOURCE easier to play."""
    suggestion = suggest_capo(extract_chords(_load(source)))
    if suggestion is None:
        click.echo("No capo suggestion")
        return
    click.echo(
        f"Capo {suggestion.capo} "
        f"(difficulty {suggestion.original_score} -> {suggestion.new_score})"
    )


@main.command()
@click.argument("name")
@click.option("--chords", "chords_path", default=None, metavar="PATH",
              help="JSON file of custom chords.")
@click.option("--variation", default=0, show_default=True, help="Variation index to draw.")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Write the SVG here instead of stdout.")
def diagram(name: str, chords_path: str | None, variation: int, output_path: str | None) -> None:
    """Draw the chord diagram for NAME as SVG."""
    settings = get_settings()
    renderer = SongRenderer(
        ChordResolver.default(_store(chords_path)),
        diagram_width=settings.diagram_width,
        diagram_height=settings.diagram_height,
    )
    tooltip = renderer.select(name)
    if tooltip is None:
        _fail(f"No fingering found for {name}")
    if not 0 <= variation < len(tooltip.variations):
        _fail(f"{tooltip.name} has {len(tooltip.variations)} variation(s)")

    geometry = render_diagram(
        tooltip.variations[variation], settings.diagram_width, settings.diagram_height
    )
    _write_or_echo(to_svg(geometry, title=tooltip.name) + "\n", output_path)


@main.command()
@click.argument("sheet", type=click.Path(exists=True, dir_okay=False))
@click.option("--title", default="", help="Title for plain-text sheets.")
@click.option("--artist", default="", help="Artist for plain-text sheets.")
@click.option("--bracketed", is_flag=True, default=False,
              help="Chord rows use [D] [G] brackets.")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Output file path (default: stdout).")
def convert(sheet: str, title: str, artist: str, bracketed: bool, output_path: str | None) -> None:
    """Convert a chords-over-lyrics SHEET (text, or OCR .json) to ChordPro."""
    raw = Path(sheet).read_text(encoding="utf-8")
    if sheet.endswith(".json"):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            _fail(f"{sheet} is not valid JSON ({exc.msg})")
        text = ocr_to_chordpro(data if isinstance(data, dict) else None)
        if not text:
            _fail(f"{sheet} has no sections")
    else:
        style = "bracketed" if bracketed else "unbracketed"
        text = text_to_chordpro(raw, style, title=title, artist=artist)
    _write_or_echo(text, output_path)
