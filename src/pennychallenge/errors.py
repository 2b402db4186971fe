from __future__ import annotations

from typing import Any


class PennyChallengeError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class AuthError(PennyChallengeError):
    """The OAuth token endpoint rejected the exchange."""


class NetworkError(PennyChallengeError):
    """Transport failure or non-success status from the Monzo API."""


class DecodeError(PennyChallengeError):
    """A response body (or the stored credential) could not be parsed."""


class TokenStoreError(PennyChallengeError):
    pass


class NotFoundError(PennyChallengeError):
    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind.capitalize()} {identifier} not found")
        self.kind = kind
        self.identifier = identifier


class RunFailed(PennyChallengeError):
    """A savings run aborted at ``stage`` because of ``cause``."""

    def __init__(self, stage: str, cause: Exception) -> None:
        super().__init__(f"{stage} failed: {cause}", status_code=getattr(cause, "status_code", None))
        self.stage = stage
        self.cause = cause


__all__ = [
    "AuthError",
    "DecodeError",
    "NetworkError",
    "NotFoundError",
    "PennyChallengeError",
    "RunFailed",
    "TokenStoreError",
]
