from __future__ import annotations


class ProviderError(RuntimeError):
    """Base exception for provider-related failures."""


class TransportError(ProviderError):
    """Network-level failure: timeouts, refused connections, broken streams."""


class UpstreamError(ProviderError):
    """Provider answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class RateLimited(UpstreamError):
    """Provider throttled the request (HTTP 429)."""

    def __init__(self, message: str, *, retry_after_seconds: float | None = None) -> None:
        super().__init__(429, message)
        self.retry_after_seconds = retry_after_seconds


class PayloadDecodeError(ProviderError):
    """Response body did not match the payload shape expected for the endpoint."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Could not decode response for {path}: {message}")
        self.path = path


class SquadProcessingError(ProviderError):
    """Fetching or reconciling one team's squad failed; the import carries on."""

    def __init__(self, team_name: str, reason: str) -> None:
        super().__init__(f"Squad processing failed for {team_name}: {reason}")
        self.team_name = team_name
        self.reason = reason


class NotFoundError(LookupError):
    """Requested competition/team does not exist (locally or upstream)."""
