"""Club harness exception hierarchy.

Setup failures always propagate; teardown failures are logged per resource
and only surface as CleanupError when a caller asks for strict teardown.
"""


class HarnessError(Exception):
    """Base exception for all harness errors."""

    pass


class ConfigurationError(HarnessError):
    """Raised when configuration is invalid or missing.

    Raised before any network call is made, so a test never runs
    privileged operations against an unconfigured target.

    Example:
        raise ConfigurationError("Missing PUBLIC_SUPABASE_URL or SERVICE_ROLE_KEY")
    """

    pass


class UpstreamError(HarnessError):
    """Raised when a backend or payment provider call is rejected.

    The upstream message is carried verbatim so the first fix attempt is
    informed by the real backend error.

    Attributes:
        service: Name of the upstream service (Supabase, Stripe).
        status_code: HTTP status code if available, None otherwise.

    Example:
        raise UpstreamError(service="Supabase", message="duplicate key value")
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.service = service
        self.upstream_message = message
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class CleanupError(HarnessError):
    """Raised by strict teardown when one or more cleanup actions failed.

    Attributes:
        failures: (resource name, exception) pairs in teardown order.
    """

    def __init__(self, failures: list[tuple[str, BaseException]]) -> None:
        self.failures = failures
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"{len(failures)} cleanup action(s) failed: {names}")


class NavigationError(HarnessError):
    """Raised when a page keeps rendering the backend error page.

    Attributes:
        url: Page that was requested.
        attempts: Navigations made before giving up.
    """

    def __init__(self, url: str, attempts: int) -> None:
        self.url = url
        self.attempts = attempts
        super().__init__(f"{url} still showed the error page after {attempts} attempt(s)")
