"""
Identity provider client.

Accounts and passwords live at the provider; this service only keeps the
provider uid and email. Credentials are checked by the provider, never here.
"""
from abc import ABC, abstractmethod
from typing import Optional
import logging

import httpx

from quizbank.core.config import settings
from quizbank.core.errors import Conflict, IdentityProviderError, Unauthorized

logger = logging.getLogger(__name__)

_BAD_CREDENTIALS = {"EMAIL_NOT_FOUND", "INVALID_PASSWORD", "INVALID_LOGIN_CREDENTIALS", "USER_DISABLED"}

class IdentityProvider(ABC):
    @abstractmethod
    async def create_account(self, email: str, password: str) -> str:
        """Create an account and return its uid."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> str:
        """Check credentials and return the account uid."""

class FirebaseIdentityProvider(IdentityProvider):
    """Firebase Auth over its REST API."""

    def __init__(self, api_key: str, base_url: str = settings.FIREBASE_AUTH_URL, timeout: float = settings.IDENTITY_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _call(self, action: str, payload: dict) -> dict:
        url = f"{self.base_url}/accounts:{action}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.error("Identity provider unreachable: %s", e)
            raise IdentityProviderError() from e
        if r.status_code == 200:
            return r.json()
        try:
            code = r.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            code = f"HTTP_{r.status_code}"
        # messages look like "EMAIL_EXISTS" or "WEAK_PASSWORD : Password should be..."
        code = code.split(":")[0].strip()
        if code == "EMAIL_EXISTS":
            raise Conflict("Email is already in use")
        if code in _BAD_CREDENTIALS:
            raise Unauthorized("Invalid email or password")
        logger.error("Identity provider %s failed with %s", action, code)
        raise IdentityProviderError()

    async def create_account(self, email: str, password: str) -> str:
        data = await self._call("signUp", {"email": email, "password": password, "returnSecureToken": True})
        return data["localId"]

    async def sign_in(self, email: str, password: str) -> str:
        data = await self._call("signInWithPassword", {"email": email, "password": password, "returnSecureToken": True})
        return data["localId"]

def get_identity_provider() -> IdentityProvider:
    if settings.FIREBASE_API_KEY is None:
        raise IdentityProviderError("Identity provider is not configured")
    return FirebaseIdentityProvider(settings.FIREBASE_API_KEY.get_secret_value())
