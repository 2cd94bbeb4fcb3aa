import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

# --- 0. Conversation ---


@dataclass(frozen=True)
class Message:
    """Atomic conversation unit."""

    role: str
    content: str
    timestamp: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)


class Conversation:
    """
    Append-only message history for one agentic run.

    Nothing is ever removed or reordered. Readers get a tuple snapshot so a
    provider holding on to the messages it was sent never sees later turns.
    """

    def __init__(self, seed: Optional[Message] = None):
        self._messages: List[Message] = []
        if seed is not None:
            self._messages.append(seed)

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def snapshot(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.snapshot())


# --- 1. Action Responses (decoded from the reply text) ---

GENERATE_TEST = "generate_test"
REQUEST_FILES = "request_files"


@dataclass(frozen=True)
class GenerateTest:
    """Terminal action: the model produced the final code."""

    code: str
    action: str = GENERATE_TEST


@dataclass(frozen=True)
class RequestFiles:
    """Continuation action: the model wants to read more project files."""

    files: Tuple[str, ...]
    action: str = REQUEST_FILES


AgentAction = Union[GenerateTest, RequestFiles]


# --- 2. Resolution Outcomes ---


@dataclass(frozen=True)
class Resolved:
    """A requested path that was found, possibly under another extension."""

    requested_path: str
    actual_path: str
    content: str

    @property
    def substituted(self) -> bool:
        return self.actual_path != self.requested_path


@dataclass(frozen=True)
class NotFound:
    """A requested path for which no candidate could be read."""

    requested_path: str
    attempted_paths: Tuple[str, ...]
    reason: str = ""


ResolutionOutcome = Union[Resolved, NotFound]


# --- 3. Provider replies ---


@dataclass
class ChatReply:
    """The single reply returned by one chat-completion call."""

    content: Optional[str]
    model: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict)
