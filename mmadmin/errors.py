"""Error taxonomy shared by the transport, the core and the command layer."""

from __future__ import annotations

from typing import Any, Optional, Sequence


class AdminError(Exception):
    """Base class for every error raised by mmadmin."""


class TransportError(AdminError):
    """A remote call failed (network, auth, server side)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_id = error_id

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (status {self.status_code})"
        return self.message


class RemoteNotFoundError(TransportError):
    """The remote answered 404 for a lookup."""


class NotFoundError(AdminError):
    """No resolution strategy matched the identifier."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"unable to find {kind} '{identifier}'")
        self.kind = kind
        self.identifier = identifier


class PartialAggregationFailure(AdminError):
    """Primary data was retrieved but secondary enrichment failed."""

    def __init__(self, entities: Sequence[Any], cause: BaseException) -> None:
        super().__init__(f"enrichment incomplete: {cause}")
        self.entities = tuple(entities)
        self.cause = cause


class OperationCancelled(AdminError):
    """Cancellation was requested between two remote calls."""


class CommandError(AdminError):
    """A command failed; the CLI prints the message and exits non-zero."""


class SecretReferenceError(AdminError, ValueError):
    """A token reference could not be turned into a token."""

    def __init__(self, source: str, reference: str, reason: str) -> None:
        super().__init__(f"{source}: cannot resolve {reference}: {reason}")
        self.source = source
        self.reference = reference
