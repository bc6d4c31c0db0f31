"""Application errors. Adapters translate driver and storage errors into these."""


class RelateError(Exception):
    """Base class for errors raised by the relate core."""


class PermissionDenied(RelateError):
    """Contacts directory access is not authorized. Not retried automatically."""

    def __init__(self, status) -> None:
        self.status = status
        super().__init__(f"Contacts access not authorized (status: {status}).")


class MalformedRecord(RelateError):
    """A pending inbox record is missing a field or has a field of the wrong type."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class UniquenessViolation(RelateError):
    """A second ContactContext was created for an identifier that already has one."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"ContactContext already exists for identifier {identifier!r}.")


class CommitFailure(RelateError):
    """Staged changes could not be durably saved. Staged changes are kept for a manual retry."""
