from enum import Enum
from aiohttp import ClientConnectionError, ClientResponseError, ServerTimeoutError
from aiohttp_socks import ProxyConnectionError, ProxyError, ProxyTimeoutError
from requests.exceptions import ConnectionError as RequestsConnectionError, Timeout as RequestsTimeout
from web3.exceptions import ContractLogicError
import asyncio

REVERT_MARKERS = ("execution reverted", "transaction reverted")

class QuestError(Exception):
    pass

class ConfigError(QuestError):
    pass

class AuthFailure(QuestError):
    pass

class SessionExpired(QuestError):
    pass

class TransientNetworkError(QuestError):
    pass

class SimulatedRevert(QuestError):
    pass

class ConfirmedRevert(QuestError):
    pass

class MalformedResponse(QuestError):
    pass

class TimeoutExceeded(QuestError):
    def __init__(self, stage: str, seconds: float):
        super().__init__(f"{stage} Timed Out After {seconds}s")
        self.stage = stage
        self.seconds = seconds

class ErrorKind(Enum):
    AUTH = "auth"
    NETWORK = "network"
    REVERT = "revert"
    TIMEOUT = "timeout"
    OTHER = "other"

def classify_error(error: BaseException) -> ErrorKind:
    """Tag an exception raised by the HTTP or the chain layer.

    Our own timeouts are checked before the builtin ones: a raced stage that
    ran out of time is TIMEOUT, while a transport that timed out on its own
    is a NETWORK failure.
    """
    if isinstance(error, TimeoutExceeded):
        return ErrorKind.TIMEOUT

    if isinstance(error, (AuthFailure, SessionExpired)):
        return ErrorKind.AUTH

    if isinstance(error, ClientResponseError):
        if error.status in (401, 403):
            return ErrorKind.AUTH
        return ErrorKind.OTHER

    if isinstance(error, (SimulatedRevert, ConfirmedRevert, ContractLogicError)):
        return ErrorKind.REVERT

    if isinstance(error, (
        TransientNetworkError,
        ClientConnectionError,
        ServerTimeoutError,
        ProxyError,
        ProxyConnectionError,
        ProxyTimeoutError,
        RequestsConnectionError,
        RequestsTimeout,
        ConnectionError,
        asyncio.TimeoutError,
    )):
        return ErrorKind.NETWORK

    message = str(error).lower()
    if any(marker in message for marker in REVERT_MARKERS):
        return ErrorKind.REVERT

    return ErrorKind.OTHER
