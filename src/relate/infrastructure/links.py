"""Outbound links: dial, mail, follow-up reminder, and contact deep links."""

from urllib.parse import quote

import phonenumbers

from relate.application.deep_link import CONTACT_HOST, DEFAULT_URL_SCHEME

REMINDER_URL = "x-apple-reminderkit://REMCDReminder/create?title="


def dial_link(raw: str | None, default_region: str | None = None) -> str | None:
    """tel: link for a directory phone number.

    Numbers phonenumbers can validate are dialled in E.164 form; default_region
    applies only when the number has no leading +. Anything else is dialled as
    typed, minus spaces.
    """
    if not raw or not raw.strip():
        return None
    number = raw.strip()
    try:
        parsed = phonenumbers.parse(number, default_region)
    except phonenumbers.NumberParseException:
        parsed = None
    if parsed is not None and phonenumbers.is_valid_number(parsed):
        return "tel:" + phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
    return "tel:" + number.replace(" ", "")


def email_link(address: str | None) -> str | None:
    if not address or not address.strip():
        return None
    return f"mailto:{address.strip()}"


def reminder_link(display_name: str) -> str:
    """Link that opens a "Follow up with <name>" reminder."""
    return REMINDER_URL + quote(f"Follow up with {display_name}")


def contact_link(contact_id: str, scheme: str = DEFAULT_URL_SCHEME) -> str:
    """Deep link the share surface opens after queuing an interaction."""
    return f"{scheme}://{CONTACT_HOST}/{quote(contact_id, safe=':')}"
