"""CLI entry point for extramark.

Usage:
    python -m extramark insert <input> <output> <target> <new>
    python -m extramark copy <input> <output> <source> <dest>
    python -m extramark copy-n <input> <output> <source> <n>
    python -m extramark content <file> <name>
    python -m extramark position <file> <name>
    python -m extramark span <file> <name>
    python -m extramark numbering <file> <name>
    python -m extramark compare <file> <name_a> <name_b>
    python -m extramark dump <file>
    python -m extramark sample <output>
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence

from loguru import logger

from extramark import operations
from extramark.compare import style_differences
from extramark.config import get_settings
from extramark.debug import describe_document
from extramark.exceptions import ExtraMarkError
from extramark.logging import configure_logging
from extramark.markers import list_markers
from extramark.sample import write_sample_document


def cmd_insert(args: argparse.Namespace) -> int:
    """Insert a new marker before an existing one."""
    operations.insert_marker_before(args.input, args.output, args.target, args.new)
    print(f"Inserted {args.new} before {args.target}: {args.output}")
    return 0


def cmd_copy(args: argparse.Namespace) -> int:
    """Copy one marker's content into another."""
    operations.copy_marker_content(
        args.input,
        args.output,
        args.source,
        args.dest,
        strip_numbering=False if args.keep_numbering else None,
    )
    print(f"Copied {args.source} into {args.dest}: {args.output}")
    return 0


def cmd_copy_n(args: argparse.Namespace) -> int:
    """Insert N copies of a marker before it."""
    created = operations.copy_marker_content_n_times(args.input, args.output, args.source, args.n)
    if created:
        print(f"Created {', '.join(created)}: {args.output}")
    else:
        print(f"No copies requested, wrote unchanged document: {args.output}")
    return 0


def cmd_content(args: argparse.Namespace) -> int:
    """Print the text inside a marker."""
    content = operations.get_marker_content(args.file, args.name)
    if content is None:
        print(f"Error: Marker not found: {args.name}", file=sys.stderr)
        return 1
    print(content)
    return 0


def cmd_position(args: argparse.Namespace) -> int:
    position = operations.get_marker_position(args.file, args.name)
    if position is None:
        print(f"Error: Marker not found: {args.name}", file=sys.stderr)
        return 1
    print(position)
    return 0


def cmd_span(args: argparse.Namespace) -> int:
    span = operations.get_marker_span(args.file, args.name)
    if span is None:
        print(f"Error: Marker not found: {args.name}", file=sys.stderr)
        return 1
    print(f"{span[0]} {span[1]}")
    return 0


def cmd_numbering(args: argparse.Namespace) -> int:
    """Exit 0 when the marker is a list item, 3 when it is not."""
    numbered = operations.uses_numbering_style(args.file, args.name)
    print("yes" if numbered else "no")
    return 0 if numbered else 3


def cmd_compare(args: argparse.Namespace) -> int:
    """Compare the block styles of two markers."""
    with operations.EditSession(args.file) as session:
        differences = style_differences(session.document, args.name_a, args.name_b)
    if args.json:
        print(json.dumps([d.model_dump() for d in differences], indent=2, default=str))
    elif not differences:
        print("Styles match.")
    else:
        for difference in differences:
            print(difference)
    return 0 if not differences else 3


def cmd_dump(args: argparse.Namespace) -> int:
    """List blocks and markers."""
    with operations.EditSession(args.file) as session:
        if args.json:
            print(json.dumps([vars(m) for m in list_markers(session.document)], indent=2))
        else:
            print(describe_document(session.document))
    return 0


def cmd_sample(args: argparse.Namespace) -> int:
    path = write_sample_document(args.output)
    print(f"Wrote sample document: {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extramark",
        description="Edit bookmark spans in .docx documents",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (DEBUG, INFO, WARNING, ERROR); defaults to EXTRAMARK_LOG_LEVEL",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        default=None,
        help="Emit log records as JSON lines",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # insert subcommand
    insert_parser = subparsers.add_parser(
        "insert",
        help="Insert a new marker before an existing one",
    )
    insert_parser.add_argument("input", help="Input .docx file")
    insert_parser.add_argument("output", help="Output .docx file")
    insert_parser.add_argument("target", help="Existing marker to insert before")
    insert_parser.add_argument("new", help="Name of the new marker")
    insert_parser.set_defaults(func=cmd_insert)

    # copy subcommand
    copy_parser = subparsers.add_parser(
        "copy",
        help="Replace a marker's content with another marker's content",
    )
    copy_parser.add_argument("input", help="Input .docx file")
    copy_parser.add_argument("output", help="Output .docx file")
    copy_parser.add_argument("source", help="Marker to copy from")
    copy_parser.add_argument("dest", help="Marker to copy into")
    copy_parser.add_argument(
        "--keep-numbering",
        action="store_true",
        help="Keep a leading 'N.' numeral from the source text",
    )
    copy_parser.set_defaults(func=cmd_copy)

    # copy-n subcommand
    copy_n_parser = subparsers.add_parser(
        "copy-n",
        help="Insert N copies of a marker before it (named <source>1..<source>N)",
    )
    copy_n_parser.add_argument("input", help="Input .docx file")
    copy_n_parser.add_argument("output", help="Output .docx file")
    copy_n_parser.add_argument("source", help="Marker to copy")
    copy_n_parser.add_argument("n", type=int, help="Number of copies")
    copy_n_parser.set_defaults(func=cmd_copy_n)

    # query subcommands
    for name, func, help_text in (
        ("content", cmd_content, "Print the text inside a marker"),
        ("position", cmd_position, "Print the index of the block holding a marker"),
        ("span", cmd_span, "Print the first and last block index of a marker"),
        ("numbering", cmd_numbering, "Check whether a marker's blocks are list items"),
    ):
        query_parser = subparsers.add_parser(name, help=help_text)
        query_parser.add_argument("file", help=".docx file")
        query_parser.add_argument("name", help="Marker name")
        query_parser.set_defaults(func=func)

    # compare subcommand
    compare_parser = subparsers.add_parser(
        "compare",
        help="Compare the block styles of two markers",
    )
    compare_parser.add_argument("file", help=".docx file")
    compare_parser.add_argument("name_a", help="First marker")
    compare_parser.add_argument("name_b", help="Second marker")
    compare_parser.add_argument("--json", action="store_true", help="Output JSON")
    compare_parser.set_defaults(func=cmd_compare)

    # dump subcommand
    dump_parser = subparsers.add_parser(
        "dump",
        help="List every block and the markers it opens or closes",
    )
    dump_parser.add_argument("file", help=".docx file")
    dump_parser.add_argument("--json", action="store_true", help="Only list markers, as JSON")
    dump_parser.set_defaults(func=cmd_dump)

    # sample subcommand
    sample_parser = subparsers.add_parser(
        "sample",
        help="Write a demo document containing the marker labelA",
    )
    sample_parser.add_argument("output", help="Output .docx file")
    sample_parser.set_defaults(func=cmd_sample)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(
        log_level=(args.log_level or settings.log_level).upper(),
        json_output=settings.log_json if args.log_json is None else args.log_json,
    )

    try:
        result: int = args.func(args)
    except (ExtraMarkError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.debug("I/O failure: {}", e)
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return result


if __name__ == "__main__":
    sys.exit(main())
