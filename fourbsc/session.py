from dataclasses import dataclass, field, replace
from typing import Callable, Optional
from aiohttp import ClientConnectionError, ClientSession, ClientTimeout
from aiohttp_socks import ProxyConnectionError, ProxyError, ProxyTimeoutError
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import to_hex
from fake_useragent import FakeUserAgent
import asyncio, time, uuid

from .config import Config
from .errors import MalformedResponse, TransientNetworkError
from .proxy import build_proxy_config
from .schemas import NonceResponse, TokenResponse

def new_correlation_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4()}"

@dataclass(frozen=True)
class Session:
    """One account's authenticated state for a single cycle.

    Re-authentication yields a new Session; an existing one is never mutated.
    """
    address: str
    token: Optional[str] = None
    id_factory: Callable[[], str] = field(default=new_correlation_id, repr=False, compare=False)

    def new_correlation_id(self) -> str:
        return self.id_factory()

    def with_token(self, token: str) -> "Session":
        return replace(self, token=token)

class SessionClient:
    def __init__(self, config: Config, private_key: str, proxy_url: Optional[str] = None, timeout=30) -> None:
        self.config = config
        self.account = Account.from_key(private_key)
        self.address = self.account.address
        self.proxy_url = proxy_url
        self.timeout = timeout
        self.HEADERS = {
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": "en-US,en;q=0.9",
            "Origin": config.base_url,
            "Referer": f"{config.base_url}/final-run",
            "Sec-Fetch-Dest": "empty",
            "Sec-Fetch-Mode": "cors",
            "Sec-Fetch-Site": "same-origin",
            "User-Agent": FakeUserAgent().random
        }
        self.http = None
        self.proxy = None
        self.proxy_auth = None

    def build_transport(self):
        connector, proxy, proxy_auth = build_proxy_config(self.proxy_url)
        self.http = ClientSession(connector=connector, timeout=ClientTimeout(total=self.timeout))
        self.proxy = proxy
        self.proxy_auth = proxy_auth
        return self.http

    async def reset_transport(self):
        await self.close()
        return self.build_transport()

    async def close(self):
        if self.http is not None and not self.http.closed:
            await self.http.close()
        self.http = None

    async def send(self, session: Optional[Session], method: str, path: str, body=None, correlation_id: Optional[str] = None):
        """Issue one request and return its decoded JSON body.

        HTTP error statuses raise ClientResponseError; connection, proxy and
        transport timeout failures raise TransientNetworkError.
        """
        if self.http is None or self.http.closed:
            self.build_transport()

        headers = {
            **self.HEADERS,
            "tid": correlation_id or new_correlation_id()
        }
        if body is not None:
            headers["Content-Type"] = "application/json"
        if session is not None and session.token:
            headers["Authorization"] = f"Bearer {session.token}"

        url = f"{self.config.base_url}{path}"
        try:
            async with self.http.request(method, url, headers=headers, json=body, proxy=self.proxy, proxy_auth=self.proxy_auth) as response:
                response.raise_for_status()
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise MalformedResponse(f"Non-JSON Response From {path}") from e
        except (ClientConnectionError, ProxyError, ProxyConnectionError, ProxyTimeoutError, asyncio.TimeoutError) as e:
            raise TransientNetworkError(f"{type(e).__name__}: {e}") from e

    def sign_nonce(self, nonce: str) -> str:
        signed = self.account.sign_message(encode_defunct(text=nonce))
        return to_hex(signed.signature)

    async def authenticate(self) -> Session:
        """Nonce -> signature -> bearer token. Raises AuthFailure on any rejection."""
        endpoints = self.config.endpoints

        nonce_res = await self.send(None, "POST", endpoints.nonce, {"addr": self.address})
        nonce = NonceResponse.parse(nonce_res).nonce

        signature = self.sign_nonce(nonce)
        auth_res = await self.send(None, "POST", endpoints.auth, {
            "addr": self.address,
            "signature": signature,
            "nonce": nonce
        })
        token = TokenResponse.parse(auth_res).token

        return Session(address=self.address, token=token)
