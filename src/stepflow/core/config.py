"""
Runtime Settings

Environment-driven configuration for the host: which LLM provider backs the
model collaborators, where the MCP tool server lives, logging level and
memory window sizes.

Values come from the process environment; call load_settings() to read a
`.env` file first (python-dotenv).
"""

import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Host configuration."""

    llm_provider: Literal["openai", "anthropic", "ollama"] = "ollama"
    llm_model: Optional[str] = None
    llm_temperature: float = Field(0.7, ge=0.0, le=2.0)
    ollama_base_url: str = "http://localhost:11434"
    mcp_server_url: str = "http://localhost:8000"
    log_level: str = "INFO"
    memory_last_messages: int = Field(20, ge=1)
    recall_top_k: int = Field(3, ge=1)
    recall_message_range: int = Field(2, ge=0)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from STEPFLOW_* and provider environment variables."""
        env = {
            "llm_provider": os.getenv("STEPFLOW_LLM_PROVIDER"),
            "llm_model": os.getenv("STEPFLOW_LLM_MODEL"),
            "llm_temperature": os.getenv("STEPFLOW_LLM_TEMPERATURE"),
            "ollama_base_url": os.getenv("OLLAMA_BASE_URL"),
            "mcp_server_url": os.getenv("MCP_SERVER_URL"),
            "log_level": os.getenv("STEPFLOW_LOG_LEVEL"),
            "memory_last_messages": os.getenv("STEPFLOW_MEMORY_LAST_MESSAGES"),
            "recall_top_k": os.getenv("STEPFLOW_RECALL_TOP_K"),
            "recall_message_range": os.getenv("STEPFLOW_RECALL_MESSAGE_RANGE"),
        }
        return cls.model_validate({k: v for k, v in env.items() if v is not None})


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """
    Load `.env` (if present) and build Settings.

    Args:
        dotenv_path: Explicit .env path (defaults to python-dotenv's search)

    Returns:
        Settings instance
    """
    load_dotenv(dotenv_path)
    return Settings.from_env()
