from __future__ import annotations

import json
from pathlib import Path

import typer

from lyric_keyframes.app import play as play_loop
from lyric_keyframes.config import AppConfig, load_config, save_timing
from lyric_keyframes.logging_setup import setup_logging
from lyric_keyframes.sources.service import TimingService
from lyric_keyframes.sources.types import STRATEGIES, PreparedSong, SongNotFound
from lyric_keyframes.timing.errors import ConfigError, NoUsableRecords
from lyric_keyframes.timing.export import export_lines_json, export_lrc, export_slides_json, export_srt
from lyric_keyframes.timing.slides import group_slides
from lyric_keyframes.timing.words import timing_stats


app = typer.Typer(no_args_is_help=True, add_completion=False)

SOURCE_HELP = "Path to a saved aligned-lyrics JSON file, or a song id to fetch"


@app.callback()
def main_options(debug: bool = typer.Option(False, "--debug", help="Enable debug logging")):
    setup_logging(debug)


def _fail(msg: str) -> typer.Exit:
    typer.echo(f"Error: {msg}", err=True)
    return typer.Exit(code=1)


def _config(**timing_overrides) -> AppConfig:
    try:
        cfg = load_config()
        timing = cfg.timing.with_overrides(timing_overrides)
    except ConfigError as e:
        raise _fail(str(e))
    return cfg.__class__(**{**cfg.__dict__, "timing": timing})


def _check_strategy(strategy: str) -> str:
    s = strategy.lower()
    if s not in STRATEGIES:
        raise typer.BadParameter(f"strategy must be one of: {', '.join(STRATEGIES)}")
    return s


def _load(cfg: AppConfig, source: str) -> PreparedSong:
    svc = TimingService(cfg)
    path = Path(source)
    try:
        if path.is_file():
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise _fail(f"{path} does not hold a JSON object")
            return svc.prepare_from_data(path.stem, data)
        return svc.prepare(source)
    except ValueError as e:
        # NoUsableRecords is a ValueError too
        if isinstance(e, NoUsableRecords):
            raise _fail(f"no usable timed words: {e}")
        raise _fail(f"cannot parse {path}: {e}")
    except SongNotFound as e:
        raise _fail(str(e))


@app.command()
def fetch(
    song_id: str,
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Download the raw aligned-lyrics payload of a song."""
    cfg = _config()
    try:
        data = TimingService(cfg).fetch(song_id)
    except SongNotFound as e:
        raise _fail(str(e))
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if out:
        out.write_text(text, encoding="utf-8")
    else:
        typer.echo(text)


@app.command()
def words(source: str = typer.Argument(..., help=SOURCE_HELP)):
    """Print normalized words (start, end, text)."""
    prepared = _load(_config(), source)
    for w in prepared.words:
        typer.echo(f"{w.start:9.3f} {w.end:9.3f}  {w.text}")


@app.command()
def lines(
    source: str = typer.Argument(..., help=SOURCE_HELP),
    strategy: str = typer.Option("word", "--strategy", "-s", help="word|api|wordwrap"),
    gap_break: float | None = typer.Option(None, "--gap-break", help="Seconds of silence that force a new line"),
    max_chars: int | None = typer.Option(None, "--max-chars", help="Character cap per line"),
):
    """Print display lines for the chosen strategy."""
    strategy = _check_strategy(strategy)
    prepared = _load(_config(gap_break=gap_break, max_chars=max_chars), source)
    for line in prepared.lines(strategy):
        text = line.text.replace("\n", " / ")
        typer.echo(f"{line.start:9.3f} {line.end:9.3f}  {text}")


@app.command()
def slides(
    source: str = typer.Argument(..., help=SOURCE_HELP),
    strategy: str = typer.Option("word", "--strategy", "-s", help="word|api|wordwrap"),
):
    """Print multi-line slides."""
    strategy = _check_strategy(strategy)
    cfg = _config()
    prepared = _load(cfg, source)
    for s in group_slides(prepared.lines(strategy), cfg.timing):
        typer.echo(f"#{s.index} {s.start:9.3f} {s.end:9.3f}")
        for line in s.lines:
            typer.echo(f"    {line.text.replace(chr(10), ' / ')}")


@app.command()
def export(
    source: str = typer.Argument(..., help=SOURCE_HELP),
    fmt: str = typer.Option("json", "--format", case_sensitive=False, help="json|srt|lrc"),
    strategy: str = typer.Option("word", "--strategy", "-s", help="word|api|wordwrap"),
    as_slides: bool = typer.Option(False, "--slides", help="Group lines into slides"),
    chunk: int | None = typer.Option(None, "--chunk", help="Words revealed per highlight step"),
    offset: float = typer.Option(0.0, "--offset", help="Global time offset in seconds (may be negative)"),
    word_tags: bool = typer.Option(False, "--word-tags", help="LRC: inline per-word times"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Export lines or slides with highlight keyframes."""
    strategy = _check_strategy(strategy)
    cfg = _config(highlight_chunk=chunk)
    prepared = _load(cfg, source)
    lines_ = prepared.lines(strategy)
    if not lines_:
        raise _fail(f"no lines available for strategy '{strategy}'")

    fmt_l = fmt.lower()
    k = cfg.timing.highlight_chunk
    if fmt_l == "json":
        if as_slides:
            data = export_slides_json(group_slides(lines_, cfg.timing), chunk=k, offset_s=offset)
        else:
            data = export_lines_json(lines_, chunk=k, offset_s=offset)
    elif fmt_l == "srt":
        units = group_slides(lines_, cfg.timing) if as_slides else lines_
        data = export_srt(units, offset_s=offset)
    elif fmt_l == "lrc":
        data = export_lrc(lines_, offset_s=offset, word_tags=word_tags)
    else:
        raise typer.BadParameter("format must be one of: json, srt, lrc")

    if out:
        out.write_text(data, encoding="utf-8")
    else:
        typer.echo(data, nl=False)


@app.command()
def stats(source: str = typer.Argument(..., help=SOURCE_HELP)):
    """Timing diagnostics for a payload."""
    cfg = _config()
    prepared = _load(cfg, source)
    st = prepared.stats
    typer.echo(f"records_total={st.records_total}")
    typer.echo(f"words_total={st.words_total}")
    typer.echo(f"dropped_unresolvable={st.dropped_unresolvable}")
    typer.echo(f"dropped_empty={st.dropped_empty}")
    typer.echo(f"dropped_non_positive={st.dropped_non_positive}")
    typer.echo(f"rescaled={st.rescaled}")
    for k, v in timing_stats(prepared.words, seconds_ceiling=cfg.timing.seconds_ceiling).items():
        typer.echo(f"{k}={v}")
    for s in STRATEGIES:
        typer.echo(f"lines_{s}={len(prepared.lines(s))}")


@app.command()
def play(
    source: str = typer.Argument(..., help=SOURCE_HELP),
    strategy: str = typer.Option("word", "--strategy", "-s", help="word|api|wordwrap"),
    as_slides: bool = typer.Option(False, "--slides", help="Show slides instead of single lines"),
    chunk: int | None = typer.Option(None, "--chunk", help="Words revealed per highlight step"),
    offset: float = typer.Option(0.0, "--offset", help="Global time offset in seconds"),
    no_alt_screen: bool = typer.Option(False, "--no-alt-screen", help="Do not use alternate screen buffer"),
):
    """Preview the highlight timing in the terminal."""
    strategy = _check_strategy(strategy)
    cfg = _config(highlight_chunk=chunk)
    if no_alt_screen:
        cfg = cfg.__class__(**{**cfg.__dict__, "use_alt_screen": False})
    prepared = _load(cfg, source)
    raise typer.Exit(code=play_loop(cfg, prepared, strategy=strategy, as_slides=as_slides, offset_s=offset))


@app.command()
def configure(settings: list[str] = typer.Argument(..., help="Timing options as key=value")):
    """Store timing overrides in config.json."""
    overrides: dict[str, str] = {}
    for item in settings:
        key, sep, value = item.partition("=")
        if not sep:
            raise typer.BadParameter(f"expected key=value, got '{item}'")
        overrides[key.strip()] = value.strip()
    try:
        path = save_timing(overrides)
    except ConfigError as e:
        raise _fail(str(e))
    typer.echo(f"Saved: {path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
