from typing import Optional
import asyncio

from .errors import AuthFailure, ErrorKind, SessionExpired, classify_error
from .schemas import Envelope
from .session import Session, SessionClient

SESSION_EXPIRED_MESSAGES = ("token expired", "invalid token")

def is_session_expired(payload) -> bool:
    message = Envelope.parse(payload).message.lower()
    return any(sentinel in message for sentinel in SESSION_EXPIRED_MESSAGES)

class RequestExecutor:
    """Authenticated requests with retry, re-authentication and transport reset.

    Every attempt carries a fresh correlation id. An expired session (either
    an expiry message in the payload or HTTP 401/403) triggers exactly one
    re-authentication and one reissue; that reissue is final. Network
    failures rebuild the proxy-bound transport before the next attempt.
    Waits between attempts grow linearly: attempt x `backoff` seconds.
    """

    def __init__(self, client: SessionClient, session: Session, logger=None, retries=5, backoff=3) -> None:
        self.client = client
        self.session = session
        self.logger = logger
        self.retries = retries
        self.backoff = backoff

    def _warn(self, field, value, detail=None):
        if self.logger:
            self.logger.warning(field, value, detail)

    async def execute(self, method: str, path: str, body=None, retries: Optional[int] = None):
        if retries is None:
            retries = self.retries
        if retries < 1:
            raise ValueError("retries must be at least 1")
        last_error = None

        for attempt in range(1, retries + 1):
            correlation_id = self.session.new_correlation_id()
            try:
                payload = await self.client.send(self.session, method, path, body, correlation_id)
            except Exception as e:
                kind = classify_error(e)
                if kind == ErrorKind.AUTH:
                    self._warn("Session", "Unauthorized", f"{path} {e}")
                    return await self._reauthenticate_and_reissue(method, path, body)

                if kind == ErrorKind.NETWORK:
                    self._warn("Network", f"Attempt {attempt}/{retries} Failed", f"{e} - Rebuilding Transport")
                    await self.client.reset_transport()
                else:
                    self._warn("Request", f"Attempt {attempt}/{retries} Failed", f"{path} {e}")

                last_error = e
                if attempt < retries:
                    await asyncio.sleep(attempt * self.backoff)
                continue

            if is_session_expired(payload):
                self._warn("Session", "Expired", Envelope.parse(payload).message)
                return await self._reauthenticate_and_reissue(method, path, body)

            return payload

        raise last_error

    async def _reauthenticate_and_reissue(self, method, path, body):
        try:
            fresh = await self.client.authenticate()
        except AuthFailure:
            raise
        except Exception as e:
            raise AuthFailure(f"Re-Authentication Failed: {e}") from e

        self.session = self.session.with_token(fresh.token)
        self._warn("Session", "Re-Authenticated", f"Reissuing {path}")

        try:
            payload = await self.client.send(self.session, method, path, body, self.session.new_correlation_id())
        except Exception as e:
            if classify_error(e) == ErrorKind.AUTH:
                raise SessionExpired(f"Still Unauthorized After Re-Authentication: {path} {e}") from e
            raise
        if is_session_expired(payload):
            raise SessionExpired(f"Session Still Expired After Re-Authentication: {path}")

        return payload
