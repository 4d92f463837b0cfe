"""Privileged Supabase client used for fixture setup and teardown."""

from typing import Any

import structlog
from postgrest.exceptions import APIError
from supabase._async.client import AsyncClient
from supabase._async.client import create_client as create_async_client
from supabase.lib.client_options import AsyncClientOptions
from supabase_auth.errors import AuthError
from supabase_auth.types import Session, User

from clubharness.config.settings import Settings, get_settings
from clubharness.core.exceptions import ConfigurationError, UpstreamError

log = structlog.get_logger(__name__)

SERVICE = "Supabase"
AUTH_SERVICE = "Supabase Auth"


def _client_options() -> AsyncClientOptions:
    # Fixture clients never keep a session around or refresh it in the background
    return AsyncClientOptions(auto_refresh_token=False, persist_session=False)


def _auth_error(error: AuthError) -> UpstreamError:
    return UpstreamError(AUTH_SERVICE, error.message, getattr(error, "status", None))


def first_row(data: Any, procedure: str) -> dict[str, Any]:
    """First row of a stored procedure result.

    Raises:
        UpstreamError: If the procedure returned nothing.
    """
    # Set-returning procedures come back as a list, scalar ones as a dict
    if isinstance(data, list):
        data = data[0] if data else None
    if not data:
        raise UpstreamError(SERVICE, f"{procedure} returned no row")
    row: dict[str, Any] = data
    return row


class ServiceClient:
    """Service-role Supabase client wrapper.

    Bypasses row level security for fixture setup and teardown. The wrapped
    client is only ever used for data and auth-admin calls; password
    sign-ins run on their own short-lived client so this handle keeps its
    elevated role no matter how many fixtures mint user sessions
    concurrently.

    Example:
        client = await get_service_client()
        row = await client.insert_one("containers", {"name": "Rack A", ...})
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize client with settings."""
        self._client: AsyncClient | None = None
        self._settings = settings or get_settings()

    def _credentials(self) -> tuple[str, str]:
        url = self._settings.supabase_url
        key = self._settings.service_role_key
        if not url or key is None or not key.get_secret_value():
            raise ConfigurationError(
                "Missing PUBLIC_SUPABASE_URL or SERVICE_ROLE_KEY in environment variables"
            )
        return url, key.get_secret_value()

    async def _create(self) -> AsyncClient:
        url, key = self._credentials()
        return await create_async_client(url, key, options=_client_options())

    async def connect(self) -> None:
        """Create the underlying client.

        Raises:
            ConfigurationError: If the URL or service-role key is missing.
        """
        if self._client is not None:
            return

        self._client = await self._create()
        log.info("service_client_connected", url=self._settings.supabase_url)

    async def disconnect(self) -> None:
        """Drop the underlying client."""
        if self._client is not None:
            self._client = None
            log.info("service_client_disconnected")

    @property
    def client(self) -> AsyncClient:
        """Get the underlying Supabase client.

        Raises:
            ConfigurationError: If not connected.
        """
        if self._client is None:
            raise ConfigurationError("Supabase: Service client not connected")
        return self._client

    @property
    def settings(self) -> Settings:
        return self._settings

    # -------------------------------------------------------------------------
    # Data API
    # -------------------------------------------------------------------------

    async def execute(self, query: Any) -> Any:
        """Execute a PostgREST query builder.

        Raises:
            UpstreamError: With the raw PostgREST message on rejection.
        """
        try:
            return await query.execute()
        except APIError as e:
            raise UpstreamError(SERVICE, e.message or str(e)) from e

    async def insert_one(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it.

        Raises:
            UpstreamError: If the insert is rejected or returns no row.
        """
        result = await self.execute(self.client.table(table).insert(record))
        if not result.data:
            raise UpstreamError(SERVICE, f"Insert into {table} returned no row")
        row: dict[str, Any] = result.data[0]
        return row

    async def insert_many(
        self, table: str, records: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Insert several rows in one request."""
        if not records:
            return []
        result = await self.execute(self.client.table(table).insert(records))
        return result.data or []

    async def update_where(
        self, table: str, values: dict[str, Any], column: str, value: Any
    ) -> list[dict[str, Any]]:
        """Update rows matching ``column = value`` and return them."""
        result = await self.execute(
            self.client.table(table).update(values).eq(column, value)
        )
        return result.data or []

    async def delete_where(self, table: str, column: str, value: Any) -> int:
        """Delete rows matching ``column = value``.

        Deleting rows that no longer exist is not an error.

        Returns:
            Number of rows deleted.
        """
        result = await self.execute(self.client.table(table).delete().eq(column, value))
        return len(result.data or [])

    async def select_where(
        self, table: str, column: str, value: Any, columns: str = "*"
    ) -> list[dict[str, Any]]:
        result = await self.execute(
            self.client.table(table).select(columns).eq(column, value)
        )
        return result.data or []

    async def rpc(self, function: str, params: dict[str, Any]) -> Any:
        """Call a stored procedure and return its data."""
        result = await self.execute(self.client.rpc(function, params))
        return result.data

    # -------------------------------------------------------------------------
    # Auth admin API
    # -------------------------------------------------------------------------

    async def create_user(
        self,
        email: str,
        password: str,
        user_metadata: dict[str, Any] | None = None,
    ) -> User:
        """Create an auth user with a confirmed email."""
        attributes: dict[str, Any] = {
            "email": email,
            "password": password,
            "email_confirm": True,
        }
        if user_metadata:
            attributes["user_metadata"] = user_metadata
        try:
            response = await self.client.auth.admin.create_user(attributes)
        except AuthError as e:
            raise _auth_error(e) from e
        return response.user

    async def update_app_metadata(self, user_id: str, app_metadata: dict[str, Any]) -> User:
        """Replace claims stored in the user's ``app_metadata``."""
        try:
            response = await self.client.auth.admin.update_user_by_id(
                user_id, {"app_metadata": app_metadata}
            )
        except AuthError as e:
            raise _auth_error(e) from e
        return response.user

    async def get_user(self, user_id: str) -> User | None:
        """Fetch an auth user, or None if it does not exist."""
        try:
            response = await self.client.auth.admin.get_user_by_id(user_id)
        except AuthError as e:
            if getattr(e, "status", None) == 404:
                return None
            raise _auth_error(e) from e
        return response.user

    async def delete_user(self, user_id: str) -> bool:
        """Delete an auth user.

        Returns:
            False if the user was already gone, True otherwise.
        """
        try:
            await self.client.auth.admin.delete_user(user_id)
        except AuthError as e:
            if getattr(e, "status", None) == 404:
                log.debug("auth_user_already_deleted", user_id=user_id)
                return False
            raise _auth_error(e) from e
        return True

    async def list_users(self, per_page: int = 1000) -> list[User]:
        """List every auth user, following pagination."""
        users: list[User] = []
        page = 1
        while True:
            try:
                batch = await self.client.auth.admin.list_users(page=page, per_page=per_page)
            except AuthError as e:
                raise _auth_error(e) from e
            users.extend(batch)
            if len(batch) < per_page:
                return users
            page += 1

    async def sign_in_with_password(self, email: str, password: str | None = None) -> Session:
        """Mint a session for ``email`` on a short-lived client.

        The short-lived client is closed afterwards without signing out,
        so the returned session (and its refresh token) stays valid.

        Raises:
            UpstreamError: If sign-in fails or returns no session.
        """
        if password is None:
            password = self._settings.test_password.get_secret_value()
        scratch = await self._create()
        try:
            response = await scratch.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as e:
            raise _auth_error(e) from e
        finally:
            # Only the auth transport is opened on a sign-in client
            await scratch.auth.close()
        if response.session is None:
            raise UpstreamError(AUTH_SERVICE, f"No session returned for {email}")
        log.debug("password_sign_in", user_id=response.session.user.id)
        return response.session

    async def health_check(self) -> dict[str, Any]:
        """Check that the service-role key is accepted.

        Returns:
            Dict with status, healthy flag, and optional error.
        """
        if self._client is None:
            return {"status": "disconnected", "healthy": False}

        try:
            await self._client.auth.admin.list_users(page=1, per_page=1)
            return {"status": "connected", "healthy": True}
        except Exception as e:
            log.error("service_client_health_check_failed", error=str(e))
            return {"status": "error", "healthy": False, "error": str(e)}


# Process-wide instance, created lazily on first use
_service_client: ServiceClient | None = None


async def get_service_client() -> ServiceClient:
    """Get or create the shared service client.

    Raises:
        ConfigurationError: If the URL or service-role key is missing.
    """
    global _service_client
    if _service_client is None:
        client = ServiceClient()
        await client.connect()
        _service_client = client
    return _service_client


async def create_service_client(settings: Settings | None = None) -> ServiceClient:
    """Create a connected service client that is not shared."""
    client = ServiceClient(settings)
    await client.connect()
    return client


async def close_service_client() -> None:
    """Close and clear the shared service client."""
    global _service_client
    if _service_client is not None:
        await _service_client.disconnect()
        _service_client = None
