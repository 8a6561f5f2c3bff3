"""
Core Abstractions

Interfaces for the collaborators steps consume through the context. Steps
depend on these, never on a concrete provider.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field

# A prompt message is either {"role": ..., "content": ...} or a LangChain BaseMessage
PromptMessage = Union[Dict[str, str], Any]


class ModelResponse(BaseModel):
    """Normalized response of a model invocation."""

    text: str
    usage: Dict[str, int] = Field(default_factory=dict)
    model: Optional[str] = None


class IModelProvider(ABC):
    """
    Model-invocation collaborator.

    Implementations wrap LangChain chat models, plain LLM clients or test
    doubles behind one async call.
    """

    @abstractmethod
    async def generate(self, messages: Sequence[PromptMessage]) -> ModelResponse:
        """
        Generate a response for a list of prompt messages.

        Args:
            messages: Conversation so far, oldest first

        Returns:
            ModelResponse whose .text is the reply
        """
        pass

    @property
    def name(self) -> str:
        return type(self).__name__


class IMemoryStore(ABC):
    """Conversation memory collaborator (see core.memory.MemoryStore)."""

    @abstractmethod
    def append(self, resource_id: str, thread_id: str, role: str, content: str) -> Any:
        pass

    @abstractmethod
    def recent(self, resource_id: str, thread_id: str, last_messages: Optional[int] = None) -> List[Any]:
        pass

    @abstractmethod
    def recall(self, resource_id: str, query: str, **options: Any) -> List[Any]:
        pass

    @abstractmethod
    def get_working_memory(self, resource_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    def set_working_memory(self, resource_id: str, document: Dict[str, Any]) -> None:
        pass
