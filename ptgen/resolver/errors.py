"""Error taxonomy for the resolution pipeline."""
from __future__ import annotations

from typing import Any

NONE_EXIST_ERROR = "The corresponding resource does not exist."


class ResolverError(RuntimeError):
    """Base class for failures that end a resolution as a failure record."""

    code = "ResolverError"
    default_message = "Resolution failed"

    def __init__(self, message: str | None = None, *, debug: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.debug = debug
        super().__init__(self.message)


class NotFoundError(ResolverError):
    """Raised when the subject does not exist upstream."""

    code = "NotFound"
    default_message = NONE_EXIST_ERROR


class TemporarilyBlockedError(ResolverError):
    """Raised when a source is rate limiting or banning the fetcher."""

    code = "TemporarilyBlocked"
    default_message = "Temporarily blocked by the source site"


class ChallengeParametersMissing(ResolverError):
    """Raised when a gate page lacks the token or challenge string."""

    code = "ChallengeParametersMissing"
    default_message = "Could not extract challenge parameters"


class ChallengeTimeout(ResolverError):
    """Raised when the proof-of-work search exceeds its attempt ceiling."""

    code = "ChallengeTimeout"
    default_message = "Challenge solution timeout - too many iterations"


class ChallengeSubmissionFailed(ResolverError):
    """Raised when the challenge endpoint returns no session cookie."""

    code = "ChallengeSubmissionFailed"
    default_message = "No cookies received from challenge submission"


class ParseFailure(ResolverError):
    """Raised when the structured data block is absent or malformed."""

    code = "ParseFailure"
    default_message = "Could not parse page content"


class UnsupportedSource(ResolverError):
    """Raised for a site or search source with no adapter."""

    code = "UnsupportedSource"
    default_message = "Unsupported source"


class MissingIdentifier(ResolverError):
    """Raised when neither a supported URL nor site+sid was supplied."""

    code = "MissingIdentifier"
    default_message = "Miss key of site or sid, or input unsupported resource url."


class FetchError(RuntimeError):
    """Raised when an outbound request fails at the transport level."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")
