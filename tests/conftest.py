"""Shared test doubles."""

from typing import List, Sequence

import pytest

from stepflow.core.abstractions import IModelProvider, ModelResponse, PromptMessage
from stepflow.core.context import CollaboratorContext
from stepflow.core.llm_helpers import message_parts


class FakeModel(IModelProvider):
    """Model provider returning a canned reply and recording prompts."""

    def __init__(self, reply: str = '{"score": 8, "feedback": "Clear and concise."}'):
        self.reply = reply
        self.prompts: List[str] = []

    async def generate(self, messages: Sequence[PromptMessage]) -> ModelResponse:
        self.prompts.append("\n".join(message_parts(m)[1] for m in messages))
        return ModelResponse(text=self.reply, model="fake")


@pytest.fixture
def fake_model():
    return FakeModel()


@pytest.fixture
def context(fake_model):
    return CollaboratorContext(models={"content": fake_model})
