import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple

import httpx


POPUP_CANCELLED_CODES = ("auth/cancelled-popup-request", "auth/popup-closed-by-user")


class AuthProviderError(Exception):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(frozen=True)
class AuthUser:
    uid: int
    email: str


AuthListener = Callable[[Optional[AuthUser]], None]
PopupFlow = Callable[[], Awaitable[Tuple[str, str]]]


class HttpIdentityProvider:
    """Account operations against the SafeSkin ``/auth`` endpoints.

    Holds the signed-in user and pushes every change to subscribers, much
    like a hosted identity SDK would. New subscribers receive the current
    state on the next event loop iteration.
    """

    def __init__(self, base_url: str = "http://localhost:8080", transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._listeners: List[AuthListener] = []
        self._user: Optional[AuthUser] = None
        self._password: Optional[str] = None

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._user

    @property
    def auth(self) -> Optional[httpx.BasicAuth]:
        if self._user is None or self._password is None:
            return None
        return httpx.BasicAuth(self._user.email, self._password)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self._transport)

    async def _account_call(self, path: str, email: str, password: str, code: str) -> AuthUser:
        try:
            async with self._client() as client:
                res = await client.post(path, json={"email": email, "password": password})
        except httpx.HTTPError as exc:
            raise AuthProviderError("auth/network-request-failed", str(exc) or "Network error.") from exc

        if not res.is_success:
            try:
                detail = res.json().get("detail")
            except ValueError:
                detail = None
            raise AuthProviderError(code, detail if isinstance(detail, str) else "Authentication failed.")

        data = res.json()
        user = AuthUser(uid=data["uid"], email=data["email"])
        self._set_user(user, password)
        return user

    async def sign_up_with_email(self, email: str, password: str) -> AuthUser:
        return await self._account_call("/auth/signup", email, password, "auth/sign-up-failed")

    async def login_with_email(self, email: str, password: str) -> AuthUser:
        return await self._account_call("/auth/login", email, password, "auth/invalid-credential")

    async def login_with_popup(self, flow: PopupFlow) -> Optional[AuthUser]:
        """Sign in with credentials produced by a federated popup flow.

        A closed or superseded popup is not an error: it returns None.
        """
        try:
            email, password = await flow()
        except AuthProviderError as exc:
            if exc.code in POPUP_CANCELLED_CODES:
                return None
            raise
        return await self.login_with_email(email, password)

    async def logout(self) -> None:
        self._set_user(None, None)

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)
        asyncio.get_running_loop().call_soon(self._deliver, listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _deliver(self, listener: AuthListener) -> None:
        # skip listeners that unsubscribed before the initial delivery ran
        if listener in self._listeners:
            listener(self._user)

    def _set_user(self, user: Optional[AuthUser], password: Optional[str]) -> None:
        self._user = user
        self._password = password
        for listener in list(self._listeners):
            listener(user)
