# backend/store/line_ids.py
"""
Cart line identifiers.

Guest lines are created locally and never reach the server under their own id,
server lines carry whatever id the cart service assigned. Which store a line
belongs to is decided by the id type, not by looking inside the string.
"""
import uuid
from dataclasses import dataclass
from typing import Union

GUEST_ID_PREFIX = "guest_"


@dataclass(frozen=True)
class LocalLineId:
    token: str

    def __str__(self) -> str:
        return f"{GUEST_ID_PREFIX}{self.token}"


@dataclass(frozen=True)
class RemoteLineId:
    value: str

    def __str__(self) -> str:
        return self.value


LineId = Union[LocalLineId, RemoteLineId]


def new_local_id() -> LocalLineId:
    return LocalLineId(uuid.uuid4().hex)


def parse_line_id(raw: Union[LineId, str, int]) -> LineId:
    """Turn a wire/UI id into a typed one. Only strings carrying the guest prefix are local."""
    if isinstance(raw, (LocalLineId, RemoteLineId)):
        return raw
    text = str(raw)
    if text.startswith(GUEST_ID_PREFIX):
        return LocalLineId(text[len(GUEST_ID_PREFIX):])
    return RemoteLineId(text)
