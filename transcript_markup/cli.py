"""CLI interface: inspect, annotate and render transcript files."""

import argparse
import json
import logging
import os
import sys

from transcript_markup.artifacts import (
    load_asset_list,
    load_transcript,
    save_transcript,
    scan_asset_dir,
    segments_to_dicts,
)
from transcript_markup.clips import render_play_request, render_transcript_cues
from transcript_markup.constants import OUTPUT_DIR, VERSION
from transcript_markup.models import AUDIO, MODE_AUDIO, OP_AUDIO, OP_CLEAR, OP_EDIT, OP_HIGHLIGHT, SEGMENT_KINDS, AudioConfig
from transcript_markup.mutations import apply_operation
from transcript_markup.parser import parse_transcript
from transcript_markup.playback import bind_to_assets, resolve_playback
from transcript_markup.selection import (
    available_actions,
    resolve_segment,
    resolve_selection,
    selection_from_offsets,
)


def _fail(message: str, hint: str | None = None):
    print(f"Error: {message}", file=sys.stderr)
    if hint:
        print(hint, file=sys.stderr)
    raise SystemExit(1)


def _load(path: str) -> str:
    if not os.path.exists(path):
        _fail(f"File not found: {path}")
    try:
        return load_transcript(path)
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Could not read {path}: {e}")


def _assets(args) -> list[str]:
    assets = load_asset_list(args.file)
    for path in scan_asset_dir(getattr(args, "assets_dir", None)):
        if path not in assets:
            assets.append(path)
    return assets


def _config(args) -> AudioConfig:
    return AudioConfig(
        filename=args.audio_file or "",
        start=args.start or "",
        duration=args.duration or "",
    )


def _segment_range(text: str, index: int, operation: str):
    segments = parse_transcript(text)
    rng = resolve_segment(segments, index)
    if rng is None:
        _fail(f"No segment {index} (transcript has {len(segments)})",
              "Run 'transcript-markup parse <file>' to list segments.")
    if operation not in available_actions(rng):
        _fail(f"Cannot {operation} a {rng.kind} segment")
    return rng


def _offset_range(text: str, start: int, end: int, operation: str):
    segments = parse_transcript(text)
    rng = resolve_selection(text, segments, selection_from_offsets(segments, start, end))
    if rng is None:
        _fail(f"Selection {start}:{end} cannot be annotated",
              "Selections must be non-empty and must not touch an existing audio cue.")
    if operation not in available_actions(rng):
        _fail(f"Cannot {operation} a {rng.kind} selection")
    return rng


def _apply_and_save(path: str, text: str, rng, operation: str, config=None):
    new_text = apply_operation(text, rng, operation, config)
    if new_text == text:
        _fail(f"Nothing changed ({operation} {rng.start}:{rng.end})")
    try:
        save_transcript(path, new_text)
    except OSError as e:
        _fail(f"Could not write {path}: {e}")
    print(f"Updated: {path} ({operation} {rng.start}:{rng.end})")
    return new_text


def cmd_parse(args):
    """Print the segments of a transcript."""
    text = _load(args.file)
    segments = parse_transcript(text)
    if args.json:
        print(json.dumps(segments_to_dicts(segments), indent=2, ensure_ascii=False))
        return

    for i, seg in enumerate(segments):
        line = f"  {i:>3} {seg.kind:<10} {seg.start:>5}:{seg.end:<5} {seg.display!r}"
        if seg.meta is not None:
            line += f"  file={seg.meta.file} start={seg.meta.start} duration={seg.meta.duration}"
        print(line)
    counts = {kind: sum(1 for s in segments if s.kind == kind) for kind in SEGMENT_KINDS}
    print(f"{len(segments)} segments ({counts['highlight']} highlight, {counts['audio']} audio)")


def cmd_highlight(args):
    text = _load(args.file)
    rng = _offset_range(text, args.start_offset, args.end_offset, OP_HIGHLIGHT)
    _apply_and_save(args.file, text, rng, OP_HIGHLIGHT)


def cmd_mark(args):
    text = _load(args.file)
    rng = _offset_range(text, args.start_offset, args.end_offset, OP_AUDIO)
    _apply_and_save(args.file, text, rng, OP_AUDIO, _config(args))


def cmd_edit(args):
    text = _load(args.file)
    rng = _segment_range(text, args.index, OP_EDIT)
    _apply_and_save(args.file, text, rng, OP_EDIT, _config(args))


def cmd_clear(args):
    text = _load(args.file)
    rng = _segment_range(text, args.index, OP_CLEAR)
    _apply_and_save(args.file, text, rng, OP_CLEAR)


def cmd_play(args):
    """Render one audio cue to a file."""
    text = _load(args.file)
    segments = parse_transcript(text)
    if not 0 <= args.index < len(segments) or segments[args.index].kind != AUDIO:
        _fail(f"Segment {args.index} is not an audio cue")

    request = resolve_playback(segments[args.index])
    if not request.text and request.file is None:
        _fail(f"Segment {args.index} has nothing to play")
    try:
        path = render_play_request(
            request, args.output_dir, f"{args.index:03d}",
            assets=_assets(args), asset_dir=args.assets_dir,
        )
    except ValueError as e:
        _fail(f"Segment {args.index}: {e}")
    print(f"Done: {path}")


def cmd_render(args):
    """Render every audio cue of a transcript."""
    text = _load(args.file)
    assets = _assets(args)
    print(f"Rendering audio cues to {args.output_dir}/ ...")
    paths = render_transcript_cues(text, args.output_dir, assets=assets, asset_dir=args.assets_dir)
    print(f"Done: {len(paths)} clips")


def cmd_assets(args):
    """Show known assets and what each cue resolves to."""
    text = _load(args.file)
    assets = _assets(args)
    if assets:
        print("Assets:")
        for asset in assets:
            print(f"  {asset}")
    else:
        print("No audio assets found.")

    print("Cues:")
    for i, seg in enumerate(parse_transcript(text)):
        if seg.kind != AUDIO:
            continue
        bound = bind_to_assets(resolve_playback(seg), assets)
        target = bound.file if bound.mode == MODE_AUDIO else "(speech)"
        print(f"  {i:>3} {seg.display[:30]:<30} → {target}")


def _add_cue_options(parser):
    parser.add_argument("--audio-file", help="Source audio file name or link")
    parser.add_argument("--start", help="Start offset in seconds")
    parser.add_argument("--duration", help="Duration in seconds")


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="transcript-markup",
        description="Annotate transcripts with highlights and audio cues",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse
    parse_parser = subparsers.add_parser("parse", help="List the segments of a transcript")
    parse_parser.add_argument("file", help="Transcript text file")
    parse_parser.add_argument("--json", action="store_true", help="Print segments as JSON")
    parse_parser.set_defaults(func=cmd_parse)

    # highlight
    hl_parser = subparsers.add_parser("highlight", help="Highlight a raw offset range")
    hl_parser.add_argument("file", help="Transcript text file")
    hl_parser.add_argument("start_offset", type=int, help="Start offset in the raw text")
    hl_parser.add_argument("end_offset", type=int, help="End offset in the raw text")
    hl_parser.set_defaults(func=cmd_highlight)

    # mark
    mark_parser = subparsers.add_parser("mark", help="Mark a raw offset range as an audio cue")
    mark_parser.add_argument("file", help="Transcript text file")
    mark_parser.add_argument("start_offset", type=int, help="Start offset in the raw text")
    mark_parser.add_argument("end_offset", type=int, help="End offset in the raw text")
    _add_cue_options(mark_parser)
    mark_parser.set_defaults(func=cmd_mark)

    # edit
    edit_parser = subparsers.add_parser("edit", help="Change an audio cue's source settings")
    edit_parser.add_argument("file", help="Transcript text file")
    edit_parser.add_argument("index", type=int, help="Segment index (see 'parse')")
    _add_cue_options(edit_parser)
    edit_parser.set_defaults(func=cmd_edit)

    # clear
    clear_parser = subparsers.add_parser("clear", help="Remove a highlight or audio cue")
    clear_parser.add_argument("file", help="Transcript text file")
    clear_parser.add_argument("index", type=int, help="Segment index (see 'parse')")
    clear_parser.set_defaults(func=cmd_clear)

    # play
    play_parser = subparsers.add_parser("play", help="Render one audio cue to a file")
    play_parser.add_argument("file", help="Transcript text file")
    play_parser.add_argument("index", type=int, help="Segment index of an audio cue")
    play_parser.add_argument("--assets-dir", help="Directory holding the source audio files")
    play_parser.add_argument("-o", "--output-dir", default=OUTPUT_DIR, help="Where to write the clip")
    play_parser.set_defaults(func=cmd_play)

    # render
    render_parser = subparsers.add_parser("render", help="Render every audio cue to files")
    render_parser.add_argument("file", help="Transcript text file")
    render_parser.add_argument("--assets-dir", help="Directory holding the source audio files")
    render_parser.add_argument("-o", "--output-dir", default=OUTPUT_DIR, help="Where to write the clips")
    render_parser.set_defaults(func=cmd_render)

    # assets
    assets_parser = subparsers.add_parser("assets", help="Show how cues resolve to audio assets")
    assets_parser.add_argument("file", help="Transcript text file")
    assets_parser.add_argument("--assets-dir", help="Directory holding the source audio files")
    assets_parser.set_defaults(func=cmd_assets)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    args.func(args)
