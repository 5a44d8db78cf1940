import asyncio
from typing import Callable, Optional

from client.identity import AuthUser, HttpIdentityProvider


class IdentitySession:
    """Current-user state for one running application.

    Built once at startup; ``start`` subscribes to the provider and ``stop``
    tears the subscription down. ``loading`` stays true until the provider
    delivers its first notification.
    """

    def __init__(self, provider: HttpIdentityProvider) -> None:
        self.provider = provider
        self.user: Optional[AuthUser] = None
        self.loading = True
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._ready: Optional[asyncio.Event] = None

    async def start(self) -> "IdentitySession":
        if self._unsubscribe is not None:
            raise RuntimeError("IdentitySession already started")
        self._ready = asyncio.Event()
        self._unsubscribe = self.provider.on_auth_state_changed(self._on_change)
        return self

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait_ready(self) -> Optional[AuthUser]:
        if self._ready is None:
            raise RuntimeError("IdentitySession not started")
        await self._ready.wait()
        return self.user

    async def logout(self) -> None:
        await self.provider.logout()

    def _on_change(self, user: Optional[AuthUser]) -> None:
        self.user = user
        self.loading = False
        if self._ready is not None:
            self._ready.set()

    async def __aenter__(self) -> "IdentitySession":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.stop()
