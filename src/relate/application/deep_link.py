"""Deep-link hand-off: scheme://contact/{contactID}."""

import logging
from urllib.parse import unquote, urlsplit

from relate.application.inbox_import import import_pending_interactions
from relate.application.ports import InteractionInbox, RelationshipStore

logger = logging.getLogger(__name__)

DEFAULT_URL_SCHEME = "relatecrm"
CONTACT_HOST = "contact"


def parse_contact_link(url: str | None, scheme: str = DEFAULT_URL_SCHEME) -> str | None:
    """Return the contact id from a contact deep link, or None when the link is malformed."""
    if not url:
        return None
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if parts.scheme.lower() != scheme.lower() or parts.netloc.lower() != CONTACT_HOST:
        return None
    contact_id = unquote(parts.path)
    if contact_id.startswith("/"):
        contact_id = contact_id[1:]
    if not contact_id or contact_id == "/":
        return None
    return contact_id


def handle_deep_link(
    url: str | None,
    inbox: InteractionInbox,
    store: RelationshipStore,
    *,
    scheme: str = DEFAULT_URL_SCHEME,
) -> str | None:
    """Import pending interactions, then return the contact id to navigate to.

    Malformed links are ignored (None, nothing imported).
    """
    contact_id = parse_contact_link(url, scheme)
    if contact_id is None:
        logger.info("Ignoring malformed deep link: %r", url)
        return None
    import_pending_interactions(inbox, store)
    return contact_id
