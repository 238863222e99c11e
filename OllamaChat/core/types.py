from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A role-tagged message exchanged with the inference backend."""
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(role=Role(data["role"]), content=data.get("content") or "")


@dataclass(frozen=True)
class UserMessage:
    """Raw trace record of one inbound chat message."""
    id: str
    name: str
    time: str
    msg: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "time": self.time, "msg": self.msg}


@dataclass(frozen=True)
class InboundEvent:
    """Transport-independent view of an inbound chat message."""
    is_group: bool
    conversation_id: str
    sender_id: str
    sender_name: str
    timestamp_ms: float
    content: str
    message_id: str
    mentioned_ids: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Reply:
    content: str
    quote_id: Optional[str] = None


def format_timestamp(timestamp_ms: float) -> str:
    """Format a millisecond epoch timestamp as a local-time string."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000).astimezone()
    offset = dt.strftime("%z") or "+0000"
    return dt.strftime("%a %b %d %Y %H:%M:%S") + f" GMT{offset}"
