"""Tagged outcomes of an upstream call."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class RawResponse:
    """What came back over the wire, before classification."""

    status: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class FailureKind(enum.Enum):
    REJECTED = "rejected"  # non-success status, or a disguised error body
    MALFORMED = "malformed"  # body is not the JSON we expected


class NetworkReason(enum.Enum):
    TIMEOUT = "timeout"
    TRANSPORT = "transport"


@dataclass(frozen=True)
class Success:
    status: int
    body: Any


@dataclass(frozen=True)
class UpstreamFailure:
    kind: FailureKind
    status: int  # status the gateway should answer with
    upstream_status: int
    excerpt: str
    body: Any = None  # parsed JSON, when there was any
    reason: str = ""  # quirk rule name or short description


@dataclass(frozen=True)
class NetworkFailure:
    reason: NetworkReason
    message: str

    @property
    def status(self) -> int:
        return 504 if self.reason is NetworkReason.TIMEOUT else 502


UpstreamResult = Union[Success, UpstreamFailure, NetworkFailure]
