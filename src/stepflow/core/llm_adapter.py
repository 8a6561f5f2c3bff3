"""
Model Adapters

Wrap concrete LLM implementations behind IModelProvider so steps only ever
see `await model.generate(messages)`.
"""

import asyncio
import logging
from typing import Any, Optional, Sequence

from .abstractions import IModelProvider, ModelResponse, PromptMessage
from .llm_client import LLMClient
from .llm_helpers import flatten_messages, to_langchain_messages

logger = logging.getLogger(__name__)


class LangChainModel(IModelProvider):
    """
    Adapter for LangChain chat models (anything with `ainvoke`).

    Args:
        llm: LangChain ChatModel instance
        system_prompt: Instructions prepended to every call
        name: Display name for logging
    """

    def __init__(self, llm: Any, system_prompt: Optional[str] = None, name: Optional[str] = None):
        self.llm = llm
        self.system_prompt = system_prompt
        self._name = name or type(llm).__name__

    @property
    def name(self) -> str:
        return self._name

    async def generate(self, messages: Sequence[PromptMessage]) -> ModelResponse:
        response = await self.llm.ainvoke(to_langchain_messages(messages, self.system_prompt))
        text = response.content if hasattr(response, "content") else str(response)
        usage = getattr(response, "usage_metadata", None) or {}
        logger.debug(f"[{self.name}] Generated {len(text)} chars")
        return ModelResponse(
            text=text if isinstance(text, str) else str(text),
            usage={k: v for k, v in usage.items() if isinstance(v, int)},
            model=self.name,
        )


class LLMClientModel(IModelProvider):
    """
    Adapter for synchronous LLMClient implementations.

    The blocking generate() call runs in the default thread pool so the
    event loop keeps serving sibling steps.
    """

    def __init__(
        self,
        client: LLMClient,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ):
        self.client = client
        self.system_prompt = system_prompt
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def name(self) -> str:
        return getattr(self.client, "model", type(self.client).__name__)

    async def generate(self, messages: Sequence[PromptMessage]) -> ModelResponse:
        system, user = flatten_messages(messages, self.system_prompt)
        loop = asyncio.get_running_loop()
        text = await loop.run_in_executor(
            None,
            lambda: self.client.generate(
                system=system,
                user=user,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            ),
        )
        logger.debug(f"[{self.name}] Generated {len(text)} chars")
        return ModelResponse(text=text, model=self.name)
