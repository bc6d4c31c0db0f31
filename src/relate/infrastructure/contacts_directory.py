"""ContactDirectory adapters: in-memory and a JSON contacts export on disk.

Authorization is an explicit value on each instance; nothing is read from
process-wide state.
"""

import json
import logging
import os
from datetime import date
from pathlib import Path

from pydantic import Base64Bytes, BaseModel, Field

from relate.application.dto import AuthorizationStatus, ContactRecord
from relate.application.errors import PermissionDenied

logger = logging.getLogger(__name__)


def _matches_name(record: ContactRecord, query: str) -> bool:
    needle = query.strip().lower()
    return bool(needle) and needle in record.display_name.lower()


class InMemoryContactDirectory:
    """Directory backed by a list of records. Order preserved by insertion."""

    def __init__(
        self,
        records: list[ContactRecord] | None = None,
        *,
        status: AuthorizationStatus = AuthorizationStatus.AUTHORIZED,
        grant_on_request: bool = True,
    ) -> None:
        self._records = list(records or [])
        self._status = status
        self._grant_on_request = grant_on_request

    def add(self, record: ContactRecord) -> None:
        self._records.append(record)

    def authorization_status(self) -> AuthorizationStatus:
        return self._status

    def request_access(self) -> bool:
        if self._status == AuthorizationStatus.NOT_DETERMINED:
            self._status = (
                AuthorizationStatus.AUTHORIZED
                if self._grant_on_request
                else AuthorizationStatus.DENIED
            )
        return self._status == AuthorizationStatus.AUTHORIZED

    def _require_access(self) -> None:
        if self._status != AuthorizationStatus.AUTHORIZED:
            raise PermissionDenied(self._status)

    def fetch_all(self) -> list[ContactRecord]:
        self._require_access()
        return list(self._records)

    def get_by_identifier(self, identifier: str) -> ContactRecord | None:
        self._require_access()
        for record in self._records:
            if record.identifier == identifier:
                return record
        return None

    def search_by_name(self, query: str) -> list[ContactRecord]:
        self._require_access()
        if not query or not query.strip():
            return list(self._records)
        return [r for r in self._records if _matches_name(r, query)]


class ExportedContact(BaseModel):
    """One entry of a contacts export file."""

    identifier: str
    display_name: str = ""
    given_name: str = ""
    family_name: str = ""
    organization: str = ""
    phone_numbers: list[str] = Field(default_factory=list)
    email_addresses: list[str] = Field(default_factory=list)
    birthday: date | None = None
    photo: Base64Bytes | None = None
    note: str = ""

    def to_record(self) -> ContactRecord:
        name = self.display_name.strip() or f"{self.given_name} {self.family_name}".strip()
        return ContactRecord(
            identifier=self.identifier,
            display_name=name or "No Name",
            organization=self.organization,
            phone_numbers=tuple(self.phone_numbers),
            email_addresses=tuple(self.email_addresses),
            birthday=self.birthday,
            photo=self.photo,
            note=self.note,
        )


class JsonFileContactDirectory:
    """Directory read from a JSON array of contacts.

    Status: not determined while the file is missing, denied when it is not
    readable, authorized otherwise. request_access cannot grant anything; it
    re-checks the file.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def authorization_status(self) -> AuthorizationStatus:
        if not self._path.exists():
            return AuthorizationStatus.NOT_DETERMINED
        if not os.access(self._path, os.R_OK):
            return AuthorizationStatus.DENIED
        return AuthorizationStatus.AUTHORIZED

    def request_access(self) -> bool:
        status = self.authorization_status()
        logger.info("Contacts access status: %s", status.value)
        return status == AuthorizationStatus.AUTHORIZED

    def _load(self) -> list[ContactRecord]:
        status = self.authorization_status()
        if status != AuthorizationStatus.AUTHORIZED:
            raise PermissionDenied(status)
        data = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"Contacts export {self._path} must be a JSON array.")
        return [ExportedContact.model_validate(item).to_record() for item in data]

    def fetch_all(self) -> list[ContactRecord]:
        records = self._load()
        logger.info("Fetched %d contacts", len(records))
        return records

    def get_by_identifier(self, identifier: str) -> ContactRecord | None:
        for record in self._load():
            if record.identifier == identifier:
                return record
        return None

    def search_by_name(self, query: str) -> list[ContactRecord]:
        records = self._load()
        if not query or not query.strip():
            return records
        return [r for r in records if _matches_name(r, query)]
