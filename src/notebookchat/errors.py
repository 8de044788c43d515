# Typed failures for the credential lifecycle and the chat pipeline.
# Created: 2026-10-02
#
# Every error carries a machine-readable ``code`` (used for ``/?error=<code>``
# redirects) and the HTTP status the API layer should answer with.

from __future__ import annotations


class NotebookChatError(Exception):
    """Base class for all errors raised by the core."""

    code = "error"
    status_code = 500

    def __init__(self, message: str = "", *, code: str | None = None):
        super().__init__(message or self.__class__.__doc__ or self.code)
        if code is not None:
            self.code = code

    @property
    def message(self) -> str:
        return str(self)


class ConfigMissing(NotebookChatError):
    """OAuth client id/secret is not configured."""

    code = "config_missing"
    status_code = 500


class InvalidState(NotebookChatError):
    """OAuth state is missing, mismatched or already consumed."""

    code = "invalid_state"
    status_code = 400


class ProviderError(NotebookChatError):
    """The identity provider reported an authorization error."""

    status_code = 400

    def __init__(self, provider_error: str):
        super().__init__(f"Identity provider returned error: {provider_error}", code=provider_error)
        self.provider_error = provider_error


class MissingCode(NotebookChatError):
    """Callback carried neither an authorization code nor an error."""

    code = "no_code"
    status_code = 400


class TokenExchangeFailed(NotebookChatError):
    """Authorization code could not be exchanged for tokens."""

    code = "token_exchange_failed"
    status_code = 502

    def __init__(
        self,
        message: str = "",
        *,
        code: str | None = None,
        upstream_status: int | None = None,
        upstream_body: str | None = None,
    ):
        super().__init__(message, code=code)
        # Diagnostics only: never rendered into responses.
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body


class RefreshFailed(NotebookChatError):
    """Failed to refresh token"""

    code = "refresh_failed"
    status_code = 401


class NoCredentialsAvailable(NotebookChatError):
    """No access token could be obtained from any credential source."""

    code = "no_credentials"
    status_code = 401

    REMEDIATION = (
        "No access token available. Please set up authentication:\n"
        "1. Sign in with Google (GET /api/v1/auth/login), OR\n"
        "2. Run: gcloud auth application-default login, OR\n"
        "3. Set GOOGLE_CLOUD_ACCESS_TOKEN=$(gcloud auth application-default print-access-token), OR\n"
        "4. Set GOOGLE_APPLICATION_CREDENTIALS (path to service account JSON file), OR\n"
        "5. Set GOOGLE_SERVICE_ACCOUNT_JSON (service account JSON as string)"
    )

    def __init__(self, message: str = ""):
        super().__init__(message or self.REMEDIATION)


class UpstreamUnavailable(NotebookChatError):
    """The notebook service could not be reached or rejected the request."""

    code = "upstream_unavailable"
    status_code = 502

    def __init__(self, message: str = "", *, status: int | None = None):
        super().__init__(message)
        self.status = status


class CompletionFailed(NotebookChatError):
    """Failed to process chat message"""

    code = "completion_failed"
    status_code = 500
