"""Typed views over the quest API's `{code, message, data}` envelopes.

Each view documents which fields it needs and what a missing field falls
back to. Nothing here raises on a malformed payload except the two login
views, whose fields are required to continue.
"""
from dataclasses import dataclass
from typing import Any, Optional
import re

from .errors import AuthFailure

SCORE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:points?|credits?|pts)", re.IGNORECASE)

@dataclass(frozen=True)
class Envelope:
    code: int
    message: str
    data: dict

    @property
    def ok(self):
        return self.code == 0

    @classmethod
    def parse(cls, payload: Any) -> "Envelope":
        if not isinstance(payload, dict):
            return cls(code=-1, message="Malformed Response", data={})

        code = payload.get("code", -1)
        try:
            code = int(code)
        except (TypeError, ValueError):
            code = -1

        message = payload.get("message") or payload.get("msg") or ""
        data = payload.get("data")
        return cls(code=code, message=str(message), data=data if isinstance(data, dict) else {})

@dataclass(frozen=True)
class NonceResponse:
    nonce: str

    @classmethod
    def parse(cls, payload) -> "NonceResponse":
        envelope = Envelope.parse(payload)
        if not envelope.ok:
            raise AuthFailure(envelope.message or "Nonce Request Rejected")
        nonce = envelope.data.get("nonce")
        if not nonce:
            raise AuthFailure("Nonce Missing From Response")
        return cls(nonce=str(nonce))

@dataclass(frozen=True)
class TokenResponse:
    token: str

    @classmethod
    def parse(cls, payload) -> "TokenResponse":
        envelope = Envelope.parse(payload)
        if not envelope.ok:
            raise AuthFailure(envelope.message or "Signature Rejected")
        token = envelope.data.get("token")
        if not token:
            raise AuthFailure("Token Missing From Response")
        return cls(token=str(token))

@dataclass(frozen=True)
class TaskStatus:
    request_created: bool = False
    agent_created: bool = False

    @property
    def all_done(self):
        return self.request_created and self.agent_created

    @classmethod
    def parse(cls, payload) -> "TaskStatus":
        data = Envelope.parse(payload).data
        return cls(
            request_created=data.get("is_create_request") is True,
            agent_created=data.get("is_create_agent") is True,
        )

@dataclass(frozen=True)
class CreatedObject:
    ok: bool
    object_id: Optional[int]
    message: str = ""

    @classmethod
    def parse(cls, payload) -> "CreatedObject":
        envelope = Envelope.parse(payload)
        object_id = envelope.data.get("id")
        try:
            object_id = int(object_id) if object_id is not None else None
        except (TypeError, ValueError):
            object_id = None
        return cls(ok=envelope.ok, object_id=object_id, message=envelope.message)

def parse_score(payload) -> Optional[str]:
    """Latest credit from user-info, falling back to a number quoted in `message`."""
    envelope = Envelope.parse(payload)
    credit = envelope.data.get("credit")
    if credit is not None and credit != "":
        return str(credit)

    match = SCORE_PATTERN.search(envelope.message)
    if match:
        return match.group(1)

    return None
