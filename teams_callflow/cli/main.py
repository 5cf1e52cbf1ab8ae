"""CLI entrypoint: render a Teams voice app call flow from a tenant snapshot."""

from __future__ import annotations

import argparse
from dataclasses import replace
import logging
import os
import sys
from typing import List, Sequence

from teams_callflow.core.config_loader import RenderOptions, graph_token, load_options
from teams_callflow.core.logging_config import setup_logging
from teams_callflow.core.paths import default_diagram_path, write_text
from teams_callflow.errors import ConfigurationAmbiguityError, SnapshotError
from teams_callflow.export import AssetExportSink
from teams_callflow.graph.accumulator import GraphAccumulator
from teams_callflow.lookup.graph_directory import GraphDirectory
from teams_callflow.lookup.snapshot import SnapshotLookup
from teams_callflow.render import FORMATS, render
from teams_callflow.traversal import TraversalDriver, all_voice_app_identities

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_NO_ENTRY_POINTS = 2


# ANSI colour codes for the terminal summary; diagram output never contains them.
class Colors:
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teams-callflow",
        description="Render Microsoft Teams auto attendant and call queue call flows as Mermaid or Graphviz DOT",
    )
    parser.add_argument("--snapshot", required=True, help="Tenant snapshot JSON (auto attendants, call queues, directory)")
    target = parser.add_argument_group("entry points")
    target.add_argument("--identity", action="append", default=[], help="Voice app identity to start from (repeatable)")
    target.add_argument("--name", action="append", default=[], help="Voice app display name to start from (repeatable)")
    target.add_argument("--all", action="store_true", help="Start from every auto attendant and call queue")

    output = parser.add_argument_group("output")
    output.add_argument("--options", default=None, help="JSON file with render options")
    output.add_argument("--format", choices=sorted(FORMATS), default=None, help="Diagram format")
    output.add_argument("--direction", default=None, help="Flowchart direction: TD, LR, BT or RL")
    output.add_argument("--out", default=None, help="Output file or directory (stdout when omitted)")
    output.add_argument("--title", default=None, help="Diagram title")

    labels = parser.add_argument_group("labels")
    labels.add_argument("--show-tts-text", action="store_true", default=None, help="Show text-to-speech prompt text")
    labels.add_argument("--show-audio-file-names", action="store_true", default=None, help="Show audio file names")
    labels.add_argument("--truncate", type=int, default=None, help="Truncate greeting labels to N characters")
    labels.add_argument("--export-assets", action="store_true", default=None, help="Write prompts and audio files")
    labels.add_argument("--assets-dir", default=None, help="Directory for exported assets")
    labels.add_argument("--show-agent-numbers", action="store_true", default=None, help="Show agent phone numbers")
    labels.add_argument("--show-agent-opt-in", action="store_true", default=None, help="Show agent opt-in state")
    labels.add_argument(
        "--hide-queue-settings", dest="show_queue_settings", action="store_false", default=None,
        help="Leave out the call queue settings block",
    )

    parser.add_argument("--graph-token", default=None, help="Microsoft Graph bearer token for directory lookups")
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    return parser


def options_from_args(args: argparse.Namespace) -> RenderOptions:
    """Options file and environment first, then any flag that was given on the command line."""
    options = load_options(args.options)
    overrides = {
        "output_format": args.format,
        "direction": args.direction,
        "title": args.title,
        "show_tts_text": args.show_tts_text,
        "show_audio_file_names": args.show_audio_file_names,
        "truncate_greetings": args.truncate,
        "export_assets": args.export_assets,
        "assets_dir": args.assets_dir,
        "show_agent_numbers": args.show_agent_numbers,
        "show_agent_opt_in": args.show_agent_opt_in,
        "show_queue_settings": args.show_queue_settings,
    }
    options = replace(options, **{k: v for k, v in overrides.items() if v is not None})
    if options.output_format not in FORMATS:
        raise ConfigurationAmbiguityError(
            f"Unknown output format {options.output_format!r} (expected one of {', '.join(sorted(FORMATS))})"
        )
    return options


def entry_references(args: argparse.Namespace, lookup: SnapshotLookup) -> List[str]:
    references = list(args.identity) + list(args.name)
    if args.all:
        references.extend(all_voice_app_identities(lookup))
    return references


def output_path(out: str, options: RenderOptions, acc: GraphAccumulator) -> str:
    """``--out`` as given, or ``<dir>/<title>.<ext>`` when it names a directory."""
    if not (os.path.isdir(out) or out.endswith(("/", os.sep))):
        return out
    title = options.title or acc.entry_points[0].name
    return default_diagram_path(out, title, options.output_format)


def print_summary(acc: GraphAccumulator, destination: str, exported: int) -> None:
    err = sys.stderr
    print(Colors.GREEN + Colors.BOLD + "✓ Call flow rendered: " + Colors.ENDC + Colors.CYAN + destination + Colors.ENDC,
          file=err)
    print(Colors.BOLD + "  Voice apps: " + Colors.ENDC + str(len(acc.visited) - len(acc.skipped.keys() & acc.visited)),
          file=err)
    print(Colors.BOLD + "  Nodes:      " + Colors.ENDC + str(len(acc.unique_nodes())), file=err)
    if exported:
        print(Colors.BOLD + "  Assets:     " + Colors.ENDC + str(exported), file=err)
    for identity, reason in acc.skipped.items():
        first_line = reason.splitlines()[0] if reason else ""
        print(Colors.YELLOW + f"  Skipped {identity}: " + Colors.ENDC + first_line, file=err)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(debug=args.debug, log_file=args.log_file)

    try:
        options = options_from_args(args)
    except (ConfigurationAmbiguityError, OSError, ValueError) as exc:
        print(Colors.RED + f"❌ Invalid options: {exc}" + Colors.ENDC, file=sys.stderr)
        return EXIT_INPUT_ERROR

    token = args.graph_token or graph_token()
    directory = GraphDirectory(token=token) if token else None
    try:
        lookup = SnapshotLookup.from_file(args.snapshot, directory)
    except SnapshotError as exc:
        print(Colors.RED + f"❌ {exc}" + Colors.ENDC, file=sys.stderr)
        return EXIT_INPUT_ERROR

    references = entry_references(args, lookup)
    if not references:
        print(Colors.RED + "❌ No entry points: pass --identity, --name or --all" + Colors.ENDC, file=sys.stderr)
        return EXIT_NO_ENTRY_POINTS

    acc = TraversalDriver(lookup, options).run(references)
    if not acc.entry_points:
        print(Colors.RED + "❌ None of the requested voice apps were found" + Colors.ENDC, file=sys.stderr)
        return EXIT_NO_ENTRY_POINTS

    exported = 0
    if options.export_assets and acc.exports:
        written = AssetExportSink(options.assets_dir).export_all(acc.exports)
        acc.keep_links(written)
        exported = len(written)

    diagram = render(acc, options)
    if args.out:
        path = output_path(args.out, options, acc)
        write_text(path, diagram)
        destination = os.path.abspath(path)
    else:
        sys.stdout.write(diagram)
        destination = "<stdout>"

    print_summary(acc, destination, exported)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())


__all__ = ["build_parser", "main", "options_from_args", "entry_references", "output_path", "Colors"]
