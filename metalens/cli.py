import argparse
import asyncio
import json
import logging
import sys
import webbrowser
from typing import Optional
from urllib.parse import quote

from . import __version__, config
from .core import get_metadata
from .errors import (
    ContentParsingError,
    DomainNotFoundError,
    HttpError,
    InvalidUrlError,
    MetalensError,
    NetworkError,
    NotFoundError,
)
from .models import PageMetadata
from .storage import parse_file_name, parse_url_for_filename, save_metadata

logger = logging.getLogger(__name__)

ACTIONS = ("log", "save", "preview")

_COLORS = {
    "red": "\033[31m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
}
_RESET = "\033[0m"

# checked in order, so subclasses come before HttpError
_DIAGNOSTICS = (
    (DomainNotFoundError, "red", "Domain Not Found: \"{url}\"", (
        "The website domain does not exist or cannot be resolved.",
        "Please check if the domain name is spelled correctly.",
    )),
    (NetworkError, "yellow", "Network Error: Unable to connect to {url}", (
        "Please check your internet connection and try again.",
    )),
    (NotFoundError, "magenta", "Page Not Found: {url}", (
        "Please check if the URL path is correct and exists.",
    )),
    (InvalidUrlError, "blue", "Invalid URL Format: {url}", (
        "Please enter a valid URL including http:// or https://.",
    )),
    (ContentParsingError, "cyan", "Content Parsing Error: {url}", (
        "The content couldn't be parsed properly.",
    )),
)


def _color(text: str, color: str) -> str:
    if not sys.stderr.isatty():
        return text
    return f"{_COLORS[color]}{text}{_RESET}"


def format_error(error: BaseException, url: str) -> list[str]:
    """Kind-specific diagnostic lines (uncolored) for a failed lookup."""
    for kind, color, heading, hints in _DIAGNOSTICS:
        if isinstance(error, kind):
            return [heading.format(url=url), str(error), *hints]
    if isinstance(error, HttpError):
        return [f"HTTP Error {error.status_code}: {url}", str(error)]
    return [str(error) or "Unknown error occurred"]


def _error_color(error: BaseException) -> str:
    for kind, color, _, _ in _DIAGNOSTICS:
        if isinstance(error, kind):
            return color
    return "red"


def display_error(error: BaseException, url: str) -> None:
    color = _error_color(error)
    print("\n❌ Error retrieving metadata", file=sys.stderr)
    for line in format_error(error, url):
        print(_color(f"   {line}", color), file=sys.stderr)


# --- prompts ---

def prompt_text(message: str, default: Optional[str] = None) -> str:
    suffix = f" ({default})" if default else ""
    while True:
        answer = input(f"? {message}{suffix}: ").strip()
        if answer:
            return answer
        if default:
            return default
        print("   URL is required" if "URL" in message else "   A value is required")


def prompt_choice(message: str, choices: list[tuple[str, str]]) -> str:
    print(f"? {message}")
    for index, (label, _) in enumerate(choices, start=1):
        print(f"  {index}) {label}")
    while True:
        answer = input("  > ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return choices[int(answer) - 1][1]
        print(f"   Please enter a number between 1 and {len(choices)}")


# --- actions ---

def save_as_json(metadata: PageMetadata, url: str, filename: Optional[str] = None) -> str:
    if filename is None:
        filename = prompt_text("Enter filename to save as", default=parse_url_for_filename(url).filename)
    path = save_metadata(metadata, parse_file_name(filename))
    return str(path)


def open_preview(url: str) -> None:
    # imported here: the api package depends on metalens, not the other way round
    from api.preview import start_server

    server = start_server(config.PREVIEW_PORT, initial_url=url)
    preview_url = f"{server.url}?url={quote(url, safe='')}"
    print(f"Preview server started at {server.url}")
    print(f"Opening preview at {preview_url}")
    webbrowser.open(preview_url)
    print("Press Ctrl+C to stop the server")
    server.wait()


def handle_metadata_action(metadata: PageMetadata, url: str, action: Optional[str] = None,
                           output: Optional[str] = None) -> None:
    if action is None:
        action = prompt_choice("What would you like to do?", [
            ("Log metadata to console", "log"),
            ("Save metadata to JSON file", "save"),
            ("View in local preview", "preview"),
        ])

    if action == "log":
        print("\n\U0001f4cb Metadata Content:")
        print(json.dumps(metadata.to_dict(), indent=2, ensure_ascii=False))
    elif action == "save":
        print("\n\U0001f4be Saving metadata to file...")
        filename = save_as_json(metadata, url, output)
        print(f"Metadata saved to {filename}")
    elif action == "preview":
        print("\n\U0001f310 Starting local preview server...")
        open_preview(url)
    else:
        raise ValueError(f"Unknown action: {action!r}")


def process_url(url: str, action: Optional[str] = None, output: Optional[str] = None,
                interactive: bool = True) -> int:
    """
    Look up metadata for url and run the chosen action. On failure, print a
    diagnostic and offer to retry with another URL. Returns the exit code.
    """
    while True:
        print(f"\nFetching metadata for {url}...")
        try:
            metadata = asyncio.run(get_metadata(url))
        except MetalensError as exc:
            display_error(exc, url)
            if not interactive:
                return 1
            retry = prompt_choice("Would you like to:", [
                ("Try a different URL", "retry"),
                ("Exit", "exit"),
            ])
            if retry != "retry":
                return 1
            url = prompt_text("Enter a new URL")
            continue

        print("\n✅ Metadata retrieved successfully!")
        handle_metadata_action(metadata, url, action=action, output=output)
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metalens",
        description="\U0001f50d Metalens - fetch a page and explore its title, meta, Open Graph and Twitter Card tags",
    )
    parser.add_argument("url", nargs="?", help="website URL to fetch metadata from")
    parser.add_argument("--action", choices=ACTIONS, help="skip the action menu")
    parser.add_argument("-o", "--output", help="filename for --action save (skips the filename prompt)")
    parser.add_argument("--no-input", action="store_true", help="never prompt; exit 1 on failure")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=config.LOG_FORMAT,
    )

    url = args.url
    if not url:
        if args.no_input:
            print("URL is required", file=sys.stderr)
            return 1
        url = prompt_text("Enter website URL")

    try:
        return process_url(url, action=args.action, output=args.output, interactive=not args.no_input)
    except (KeyboardInterrupt, EOFError):
        print()
        return 130


if __name__ == "__main__":
    sys.exit(main())
