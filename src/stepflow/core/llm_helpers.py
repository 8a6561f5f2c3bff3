"""
LLM Helper Functions

Conversions between the prompt-message shapes steps use ({"role", "content"}
dicts) and what LangChain chat models or plain LLM clients expect.
"""

from typing import List, Optional, Sequence, Tuple

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from .abstractions import PromptMessage

_ROLE_BY_TYPE = {"human": "user", "ai": "assistant", "system": "system"}


def message_parts(message: PromptMessage) -> Tuple[str, str]:
    """
    Return (role, content) for a dict message or a LangChain message.

    Raises:
        ValueError: If the message has no usable role/content
    """
    if isinstance(message, BaseMessage):
        content = message.content if isinstance(message.content, str) else str(message.content)
        return _ROLE_BY_TYPE.get(message.type, message.type), content
    if isinstance(message, dict) and "content" in message:
        return message.get("role", "user"), str(message["content"])
    raise ValueError(f"Unsupported prompt message: {message!r}")


def to_langchain_messages(
    messages: Sequence[PromptMessage],
    system: Optional[str] = None,
) -> List[BaseMessage]:
    """
    Convert prompt messages to LangChain messages.

    Args:
        messages: dict or LangChain messages
        system: Optional system prompt placed first

    Returns:
        List of LangChain BaseMessage
    """
    converted: List[BaseMessage] = []
    if system:
        converted.append(SystemMessage(content=system))
    for message in messages:
        if isinstance(message, BaseMessage):
            converted.append(message)
            continue
        role, content = message_parts(message)
        if role == "system":
            converted.append(SystemMessage(content=content))
        elif role == "assistant":
            converted.append(AIMessage(content=content))
        else:
            converted.append(HumanMessage(content=content))
    return converted


def flatten_messages(
    messages: Sequence[PromptMessage],
    system: Optional[str] = None,
) -> Tuple[str, str]:
    """
    Collapse a conversation into (system, user) strings for LLMClient.generate().

    Assistant turns are kept inline, prefixed with "Assistant: ".
    """
    system_parts = [system] if system else []
    user_parts = []
    for message in messages:
        role, content = message_parts(message)
        if role == "system":
            system_parts.append(content)
        elif role == "assistant":
            user_parts.append(f"Assistant: {content}")
        else:
            user_parts.append(content)
    return "\n".join(system_parts) or "You are a helpful assistant.", "\n".join(user_parts)
