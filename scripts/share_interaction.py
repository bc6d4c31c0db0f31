#!/usr/bin/env python3
"""Share surface: queue an interaction for the main app and print (or open) its deep link.

Usage:
    python scripts/share_interaction.py CONTACT_ID "Some shared text" [--type "Phone call"] [--open]

Reads RELATE_SHARED_DIR, RELATE_APP_GROUP and RELATE_URL_SCHEME from .env.
The main app picks the record up at launch or when the deep link reaches POST /open.
"""
import argparse
import logging
import sys
import webbrowser
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from api.config import load_env_file, load_settings  # noqa: E402
from relate.domain import InteractionType  # noqa: E402
from relate.infrastructure import (  # noqa: E402
    PendingInteractionInbox,
    SharedDefaults,
    contact_link,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger("share_interaction")

SHARE_TYPES = [
    InteractionType.MET,
    InteractionType.CALL,
    InteractionType.TEXT,
    InteractionType.EMAIL,
    InteractionType.VIDEO,
    InteractionType.NOTE,
]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Log an interaction to Relate CRM.")
    parser.add_argument("contact_id", help="Contacts directory identifier")
    parser.add_argument("text", help="Shared text used as the note")
    parser.add_argument(
        "--type",
        default=InteractionType.TEXT.value,
        choices=[t.value for t in SHARE_TYPES],
        help="Interaction type label",
    )
    parser.add_argument("--note", default="", help="Note to save instead of the shared text")
    parser.add_argument("--open", action="store_true", help="Open the deep link after saving")
    args = parser.parse_args(argv)

    contact_id = args.contact_id.strip()
    if not contact_id:
        print("contact_id must be non-empty", file=sys.stderr)
        return 1

    load_env_file()
    settings = load_settings()
    inbox = PendingInteractionInbox(SharedDefaults(settings.shared_dir, settings.app_group))
    inbox.append(contact_id, args.type, args.note or args.text)
    logger.info("Saved interaction for contact: %s", contact_id)

    url = contact_link(contact_id, settings.url_scheme)
    print(url)
    if args.open:
        webbrowser.open(url)
    return 0


if __name__ == "__main__":
    sys.exit(main())
