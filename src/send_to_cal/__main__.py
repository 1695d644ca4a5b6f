"""CLI entry point for Send to Calendar."""

import argparse
import asyncio
import getpass
import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional

import pytz
import requests

from .config import CalDAVConfig, SettingsStore, config
from .extractors.remote import RemotePage
from .ics.codec import encode_event, generate_uid
from .models.settings import CalDavSettings
from .session import (
    ContextCapture,
    DraftState,
    SuggestionBoard,
    apply_context,
    apply_description_body,
    apply_page_info,
    build_event,
    capture_selection,
    gather_suggestions,
    new_draft,
    publish,
    set_all_day,
    validate_draft,
)
from .utils.date_utils import format_suggestion, parse_iso, to_local_iso
from .utils.exceptions import SendToCalError
from .utils.logging import setup_logging
from .utils.ssl_utils import init_ssl
from .utils.text import build_description
from .writers.caldav_writer import CalDAVCalendarWriter


def _is_url(page: str) -> bool:
    return page.startswith(("http://", "https://"))


def load_page(page: str) -> str:
    """Read page markup from a local file or an http(s) URL."""
    if _is_url(page):
        resp = requests.get(page, timeout=config.request_timeout)
        resp.raise_for_status()
        return resp.text
    return Path(page).read_text(encoding="utf-8")


def _settings_store() -> SettingsStore:
    return SettingsStore(config.settings_file, env=CalDAVConfig())


def _require_settings(store: SettingsStore) -> CalDavSettings:
    settings = store.get()
    if settings is None:
        raise SendToCalError(
            f"No CalDAV settings configured. Run with --configure or edit {config.settings_file}"
        )
    return settings


def _writer(settings: CalDavSettings) -> CalDAVCalendarWriter:
    return CalDAVCalendarWriter(
        settings, timeout=config.request_timeout, line_ending=config.line_ending
    )


def configure(store: SettingsStore) -> int:
    """Prompt for CalDAV settings, save them and probe the server."""
    current = store.get()
    print("CalDAV calendar settings")
    server_url = input(f"Calendar collection URL [{current.server_url if current else ''}]: ").strip()
    username = input(f"Username [{current.username if current else ''}]: ").strip()
    password = getpass.getpass("Password (leave empty to keep): ")

    settings = CalDavSettings(
        server_url=server_url or (current.server_url if current else ""),
        username=username or (current.username if current else ""),
        password=password or (current.password if current else ""),
    )
    if not (settings.server_url and settings.username and settings.password):
        print("Server URL, username and password are all required.")
        return 1

    store.set(settings)
    if _writer(settings).check_connection():
        print("Connection successful.")
        return 0
    print("Settings saved, but the server could not be reached with them.")
    return 1


async def _collect(page: RemotePage, selection: Optional[str]) -> SuggestionBoard:
    sibling = capture_selection(page, selection) if selection else None
    return await gather_suggestions(page, SuggestionBoard(), sibling)


def suggest(page_ref: str, selection: Optional[str], tz: pytz.BaseTzInfo) -> int:
    """Print date and description suggestions for a page."""
    page = RemotePage(load_page(page_ref), timezone=config.page_timezone)
    board = asyncio.run(_collect(page, selection))

    print("Dates:")
    if not board.dates:
        print("  (none)")
    for i, s in enumerate(board.dates, 1):
        print(f"  {i}. {format_suggestion(s, tz)} ({s.label})")

    print("Descriptions:")
    if not board.descriptions:
        print("  (none)")
    for i, s in enumerate(board.descriptions, 1):
        preview = s.text if len(s.text) <= 80 else f"{s.text[:80]}…"
        print(f"  {i}. [{s.source}] {preview}")
    return 0


async def _prefill(state: DraftState, page: RemotePage, selection: Optional[str]) -> DraftState:
    if selection:
        # Fire before anything else, the selection does not outlive the gesture
        sibling = capture_selection(page, selection)
        state = apply_context(state, ContextCapture(url=state.url or None, selection=selection))
        text = await sibling
        if text:
            state = apply_description_body(state, text)
        return state
    return apply_page_info(state, await page.scrape_page())


def _draft_from_args(args: argparse.Namespace, tz: pytz.BaseTzInfo) -> DraftState:
    state = new_draft(tz)

    if args.page:
        page = RemotePage(load_page(args.page), timezone=config.page_timezone)
        url = args.url or (args.page if _is_url(args.page) else "")
        state = state.model_copy(update={"url": url, "description": build_description("", url or None)})
        state = asyncio.run(_prefill(state, page, args.selection))

    if args.all_day:
        state = set_all_day(state, True, tz)

    update = {}
    if args.title:
        update["title"] = args.title
    if args.url:
        update["url"] = args.url
    if args.start:
        update["start"] = args.start
        if not args.end:
            if args.all_day:
                update["end"] = args.start
            else:
                start = parse_iso(args.start)
                if start.tzinfo is None:
                    start = tz.localize(start)
                update["end"] = to_local_iso(start + timedelta(hours=1), tz)
    if args.end:
        update["end"] = args.end
    state = state.model_copy(update=update)

    if args.description is not None:
        state = apply_description_body(state, args.description)
    return state


def create(args: argparse.Namespace, store: SettingsStore, tz: pytz.BaseTzInfo) -> int:
    """Build an event from the arguments and send it (or print it)."""
    state = _draft_from_args(args, tz)

    if args.dry_run:
        validate_draft(state, tz)
        event = build_event(state, tz)
        print(encode_event(event, generate_uid(), line_ending=config.line_ending), end="")
        return 0

    location = publish(state, _writer(_require_settings(store)), tz)
    print(f"Event created: {location}")
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Send to Calendar - create CalDAV events from web pages"
    )
    parser.add_argument("--configure", action="store_true", help="Set CalDAV server and credentials")
    parser.add_argument("--check", action="store_true", help="Check the CalDAV connection")
    parser.add_argument(
        "--suggest",
        metavar="PAGE",
        help="Show date and description suggestions for a page (file or URL)",
    )
    parser.add_argument("--create", action="store_true", help="Create an event")
    parser.add_argument("--page", help="Page (file or URL) to prefill the event from")
    parser.add_argument("--selection", help="Selected text on the page")
    parser.add_argument("--title", help="Event title")
    parser.add_argument("--start", help="Start (YYYY-MM-DDTHH:MM local, or YYYY-MM-DD with --all-day)")
    parser.add_argument("--end", help="End (same format as --start; inclusive for all-day events)")
    parser.add_argument("--all-day", action="store_true", help="All-day event")
    parser.add_argument("--description", help="Event description")
    parser.add_argument("--url", help="Event URL")
    parser.add_argument("--dry-run", action="store_true", help="Print the iCalendar data instead of sending it")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    args = parser.parse_args()

    log_level = "DEBUG" if args.verbose else config.log_level
    logger = setup_logging(level=log_level, log_file=config.log_file)
    init_ssl(config.use_truststore)

    try:
        tz = pytz.timezone(config.page_timezone)
        store = _settings_store()

        if args.configure:
            return configure(store)

        if args.check:
            ok = _writer(_require_settings(store)).check_connection()
            print("Connection successful." if ok else "Connection failed.")
            return 0 if ok else 1

        if args.suggest:
            return suggest(args.suggest, args.selection, tz)

        if args.create:
            return create(args, store, tz)

        parser.print_help()
        return 0

    except pytz.UnknownTimeZoneError as e:
        logger.error(f"Unknown PAGE_TIMEZONE: {e}")
        return 1
    except SendToCalError as e:
        logger.error(str(e))
        return 1
    except (requests.RequestException, OSError) as e:
        logger.error(f"Request failed: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
