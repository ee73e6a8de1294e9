#!/usr/bin/env python3
"""
Convert an emitted HTML document directory (index.html plus its assets) to PDF.
Uses Playwright (headless Chromium) for PDF generation.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from colorama import init, Fore, Style

from html_to_pdf import Config, ProgressEvent, check_dependencies, create_converter, parse_margin_shorthand
from html_to_pdf.console import ConsoleLogger
from html_to_pdf.options import PAGE_SIZES

# Initialize colorama for cross-platform colored output
init(autoreset=True)


def print_progress(event: ProgressEvent) -> None:
    """Print a one-line progress update."""
    color = Fore.RED if event.status.value == "failed" else Fore.CYAN
    step = f" - {event.current_step}" if event.current_step else ""
    print(f"{color}[{event.percent:3d}%]{Style.RESET_ALL} {event.status.value}{step}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert an emitted HTML directory to PDF (Playwright/Chromium)")
    parser.add_argument("source", nargs="?", help="Directory containing index.html and its assets")
    parser.add_argument("-o", "--output", help="Output PDF path (default: <source>.pdf)")
    parser.add_argument("--page-size", choices=list(PAGE_SIZES) + ["custom"], help="Page size preset (default: a4)")
    parser.add_argument("--width", help="Page width for --page-size custom, e.g. '100mm'")
    parser.add_argument("--height", help="Page height for --page-size custom, e.g. '150mm'")
    parser.add_argument("--orientation", choices=["portrait", "landscape"], help="Page orientation (default: portrait)")
    parser.add_argument("--margins", help="Page margins in CSS format (default: '15mm'). Use 1, 2, or 4 values. Units: mm, cm, in, pt, px")
    parser.add_argument("--no-cover", action="store_true", help="Do not generate a cover page")
    parser.add_argument("--cover-title", help="Override the cover title")
    parser.add_argument("--cover-subtitle", help="Cover subtitle")
    parser.add_argument("--toc", action="store_true", help="Generate a table of contents page")
    parser.add_argument("--toc-depth", type=int, help="Deepest heading level listed in the table of contents (default: 3)")
    parser.add_argument("--no-background", action="store_true", help="Do not print background colors and images")
    parser.add_argument("--scale", type=float, help="Rendering scale, greater than 0 and at most 2 (default: 1)")
    parser.add_argument("--wait", type=int, help="Extra settle delay in milliseconds after load (default: 500)")
    parser.add_argument("--header-footer", action="store_true", help="Print header and footer (page numbers)")
    parser.add_argument("--outline", action="store_true", help="Generate PDF bookmarks from headings")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging for detailed output")
    parser.add_argument("--check-deps", action="store_true", help="Check dependencies and exit")
    return parser


def options_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Per-run options that the CLI sets explicitly."""
    source = Path(args.source)
    options: Dict[str, Any] = {
        "output_path": args.output or str(source.parent / f"{source.name}.pdf"),
        "on_progress": print_progress,
    }
    if args.width:
        options["width"] = args.width
    if args.height:
        options["height"] = args.height
    if args.no_cover:
        options["include_cover"] = False
    cover = {"title": args.cover_title, "subtitle": args.cover_subtitle}
    if any(cover.values()):
        options["cover"] = cover
    if args.toc:
        options["include_toc"] = True
    if args.toc_depth is not None:
        options["toc"] = {"max_depth": args.toc_depth}
    if args.no_background:
        options["print_background"] = False
    if args.header_footer:
        options["display_header_footer"] = True
    if args.outline:
        options["generate_outline"] = True
    return options


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.check_deps:
        return 0 if check_dependencies() else 1

    if not args.source:
        parser.error("the source directory is required")

    cli_config: Dict[str, Any] = {
        "page_size": args.page_size,
        "orientation": args.orientation,
        "scale": args.scale,
        "wait_ms": args.wait,
    }
    if args.margins:
        try:
            cli_config["margin"] = parse_margin_shorthand(args.margins)
        except ValueError as e:
            print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {e}")
            return 1

    logger = ConsoleLogger(debug=args.debug)
    config = Config(cli_args=cli_config)
    for key in ("page_size", "orientation", "margin", "scale", "wait_ms"):
        if config.get(key) is not None:
            logger.debug(f"{key} = {config.get(key)!r} (from {config.source_of(key)})")
    converter = create_converter(config=config, logger=logger)

    result = asyncio.run(converter.convert(args.source, options_from_args(args)))
    if not result.success:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} [{result.error.code.value}] {result.error.message}")
        return 1

    print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} Saved {result.output_path} "
          f"({result.page_count} pages, {result.file_size} bytes, {result.duration_ms / 1000:.1f}s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
