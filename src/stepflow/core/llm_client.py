"""LLM client abstraction - plain provider SDK clients behind one interface."""

import os
from abc import ABC, abstractmethod
from typing import Optional

from .config import Settings

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-sonnet-20241022",
    "ollama": "qwen2.5:14b",
}


class LLMClient(ABC):
    """Base class for synchronous LLM provider clients."""

    model: str

    @abstractmethod
    def generate(
        self,
        system: str,
        user: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Generate a response. Returns just the text."""
        pass


class OpenAIClient(LLMClient):
    """OpenAI chat completions."""

    def __init__(self, model: str = DEFAULT_MODELS["openai"], api_key: Optional[str] = None):
        try:
            from openai import OpenAI
        except ImportError:
            raise ImportError("Install with: pip install 'stepflow[openai]'")

        self.model = model
        self.client = OpenAI(api_key=api_key or os.getenv("OPENAI_API_KEY"))

    def generate(self, system, user, temperature=0.7, max_tokens=None) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=temperature,
            max_tokens=max_tokens or 2048,
        )
        return response.choices[0].message.content or ""


class AnthropicClient(LLMClient):
    """Anthropic messages API."""

    def __init__(self, model: str = DEFAULT_MODELS["anthropic"], api_key: Optional[str] = None):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError("Install with: pip install 'stepflow[anthropic]'")

        self.model = model
        self.client = Anthropic(api_key=api_key or os.getenv("ANTHROPIC_API_KEY"))

    def generate(self, system, user, temperature=0.7, max_tokens=None) -> str:
        response = self.client.messages.create(
            model=self.model,
            system=system,
            messages=[{"role": "user", "content": user}],
            temperature=temperature,
            max_tokens=max_tokens or 2048,
        )
        return response.content[0].text


class OllamaClient(LLMClient):
    """Local Ollama server."""

    def __init__(self, model: str = DEFAULT_MODELS["ollama"], base_url: str = "http://localhost:11434"):
        try:
            from ollama import Client
        except ImportError:
            raise ImportError("Install with: pip install 'stepflow[ollama]'")

        self.model = model
        self.client = Client(host=base_url)

    def generate(self, system, user, temperature=0.7, max_tokens=None) -> str:
        options = {"temperature": temperature}
        if max_tokens is not None:
            options["num_predict"] = max_tokens
        response = self.client.generate(
            model=self.model,
            prompt=f"{system}\n\nUser: {user}",
            options=options,
            stream=False,
        )
        return response["response"]


def create_llm_client(settings: Settings) -> LLMClient:
    """Create the client selected by settings.llm_provider.

    Usage:
        client = create_llm_client(load_settings())
        text = client.generate(system="You are helpful", user="Hello")
    """
    provider = settings.llm_provider
    model = settings.llm_model or DEFAULT_MODELS[provider]

    if provider == "openai":
        return OpenAIClient(model=model)
    elif provider == "anthropic":
        return AnthropicClient(model=model)
    elif provider == "ollama":
        return OllamaClient(model=model, base_url=settings.ollama_base_url)
    else:
        raise ValueError(f"Unknown provider: {provider}")
