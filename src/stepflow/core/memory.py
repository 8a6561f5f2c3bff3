"""
Conversation Memory

In-process memory collaborator:

  - an append-only message log keyed by (resource_id, thread_id)
  - a bounded window of the most recent messages of a thread
  - similarity recall over older messages of a resource, each hit returned
    with its neighbouring messages for context
  - a free-form working-memory document per resource, read and replaced
    wholesale

Similarity uses a pluggable embedder; the default is a bag-of-words vector,
which is enough for keyword-style recall without an embedding service.
"""

import math
import re
import threading
from collections import Counter, defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field

from .abstractions import IMemoryStore

Vector = Union[Mapping[str, float], Sequence[float]]
Embedder = Callable[[str], Vector]

_TOKEN = re.compile(r"[a-z0-9']+")


class Message(BaseModel):
    """Single message in a conversation thread."""

    role: str  # "user", "assistant", "system"
    content: str
    resource_id: str
    thread_id: str
    index: int = 0
    timestamp: datetime = Field(default_factory=datetime.now)


class RecalledMessage(BaseModel):
    """A recall hit with its surrounding messages."""

    message: Message
    score: float
    context: List[Message] = Field(default_factory=list)


def bag_of_words(text: str) -> Dict[str, float]:
    """Default embedder: lowercase token counts."""
    return dict(Counter(_TOKEN.findall(text.lower())))


def cosine_similarity(a: Vector, b: Vector) -> float:
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        dot = sum(value * b.get(key, 0.0) for key, value in a.items())
        norm_a = math.sqrt(sum(v * v for v in a.values()))
        norm_b = math.sqrt(sum(v * v for v in b.values()))
    else:
        if len(a) != len(b):
            raise ValueError(f"Vector sizes differ: {len(a)} != {len(b)}")
        dot = sum(x * y for x, y in zip(a, b))
        norm_a = math.sqrt(sum(x * x for x in a))
        norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class MemoryStore(IMemoryStore):
    """
    Thread-safe in-memory conversation store.

    Args:
        last_messages: Default size of the recent window
        top_k: Default maximum number of recall hits
        message_range: Default neighbours returned on each side of a hit
        embedder: Text -> vector function used for recall
    """

    def __init__(
        self,
        last_messages: int = 20,
        top_k: int = 3,
        message_range: int = 2,
        embedder: Optional[Embedder] = None,
    ):
        self.last_messages = last_messages
        self.top_k = top_k
        self.message_range = message_range
        self.embedder = embedder or bag_of_words
        self._threads: Dict[Tuple[str, str], List[Message]] = defaultdict(list)
        self._vectors: Dict[Tuple[str, str], List[Vector]] = defaultdict(list)
        self._working: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def append(self, resource_id: str, thread_id: str, role: str, content: str) -> Message:
        """Append a message to a thread; existing messages are never modified."""
        vector = self.embedder(content)
        with self._lock:
            key = (resource_id, thread_id)
            message = Message(
                role=role,
                content=content,
                resource_id=resource_id,
                thread_id=thread_id,
                index=len(self._threads[key]),
            )
            self._threads[key].append(message)
            self._vectors[key].append(vector)
        return message

    def recent(self, resource_id: str, thread_id: str, last_messages: Optional[int] = None) -> List[Message]:
        """The newest messages of a thread, oldest first."""
        n = self.last_messages if last_messages is None else last_messages
        if n <= 0:
            return []
        with self._lock:
            return list(self._threads.get((resource_id, thread_id), [])[-n:])

    def threads(self, resource_id: str) -> List[str]:
        with self._lock:
            return sorted(thread for resource, thread in self._threads if resource == resource_id)

    def recall(
        self,
        resource_id: str,
        query: str,
        top_k: Optional[int] = None,
        message_range: Optional[int] = None,
        thread_id: Optional[str] = None,
    ) -> List[RecalledMessage]:
        """
        Find older messages similar to the query.

        Args:
            resource_id: Resource whose threads are searched
            query: Text to match
            top_k: Maximum number of hits (store default if omitted)
            message_range: Neighbours included on each side of a hit (store
                default if omitted)
            thread_id: When given, that thread's recent window is excluded
                (it is already visible through recent())

        Returns:
            Hits ordered by descending similarity
        """
        top_k = self.top_k if top_k is None else top_k
        message_range = self.message_range if message_range is None else message_range
        query_vector = self.embedder(query)
        with self._lock:
            candidates = []
            for (resource, thread), messages in self._threads.items():
                if resource != resource_id:
                    continue
                searchable = len(messages)
                if thread == thread_id:
                    searchable = max(0, len(messages) - self.last_messages)
                vectors = self._vectors[(resource, thread)]
                for i in range(searchable):
                    score = cosine_similarity(query_vector, vectors[i])
                    if score > 0:
                        candidates.append((score, resource, thread, i))

            candidates.sort(key=lambda c: (-c[0], c[2], c[3]))
            hits = []
            for score, resource, thread, i in candidates[:top_k]:
                messages = self._threads[(resource, thread)]
                lo = max(0, i - message_range)
                hi = min(len(messages), i + message_range + 1)
                hits.append(
                    RecalledMessage(
                        message=messages[i],
                        score=round(score, 6),
                        context=[m for m in messages[lo:hi] if m.index != i],
                    )
                )
        return hits

    def get_working_memory(self, resource_id: str) -> Dict[str, Any]:
        with self._lock:
            return dict(self._working.get(resource_id, {}))

    def set_working_memory(self, resource_id: str, document: Dict[str, Any]) -> None:
        """Replace the working-memory document for a resource."""
        with self._lock:
            self._working[resource_id] = dict(document)


def format_context(messages: Sequence[Message]) -> str:
    """Format messages as a context block for prompts."""
    return "\n".join(f"{m.role.upper()}: {m.content}" for m in messages)
