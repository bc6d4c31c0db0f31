"""Tests for quick-action links: dial (E.164 via phonenumbers), mail, reminders."""

from relate.infrastructure import dial_link, email_link, reminder_link


def test_dial_link_with_country_code_uses_e164():
    assert dial_link("+39 312 345 6789") == "tel:+393123456789"
    assert dial_link("+1 202 555 1234") == "tel:+12025551234"


def test_dial_link_without_country_code_uses_default_region():
    assert dial_link("202 555 1234", default_region="US") == "tel:+12025551234"


def test_dial_link_invalid_number_is_dialled_as_typed():
    assert dial_link("123", default_region="US") == "tel:123"
    assert dial_link("abc") == "tel:abc"
    assert dial_link("") is None


def test_dial_link_prefers_e164():
    assert dial_link("+1 (202) 555-1234") == "tel:+12025551234"


def test_dial_link_falls_back_to_number_without_spaces():
    assert dial_link("555 01 99") == "tel:5550199"
    assert dial_link("  ") is None
    assert dial_link(None) is None


def test_email_link():
    assert email_link(" alice@example.com ") == "mailto:alice@example.com"
    assert email_link("") is None


def test_reminder_link_encodes_name():
    assert reminder_link("Alice Smith") == (
        "x-apple-reminderkit://REMCDReminder/create?title=Follow%20up%20with%20Alice%20Smith"
    )
