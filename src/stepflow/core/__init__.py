"""Core infrastructure shared by steps, workflows and the host."""

from .types import (
    BuildTimeIncompatibility,
    CollaboratorNotFound,
    ContractViolationError,
    ExecutionFailure,
    FailureKind,
    InputContractViolation,
    OutputContractViolation,
    StepMetrics,
    StepStatus,
    Violation,
    WorkflowError,
)
from .contracts import Contract, ContractResult, as_contract, check_compatibility
from .context import EMPTY_CONTEXT, CollaboratorContext
from .config import Settings, load_settings
from .logger import get_logger
from .metrics import MetricsCollector

# Collaborator interfaces and implementations
from .abstractions import IMemoryStore, IModelProvider, ModelResponse, PromptMessage
from .llm_client import (
    AnthropicClient,
    LLMClient,
    OllamaClient,
    OpenAIClient,
    create_llm_client,
)
from .llm_adapter import LangChainModel, LLMClientModel
from .memory import MemoryStore, Message, RecalledMessage

# JSON Repair utilities
from .json_repair import (
    extract_json_object,
    parse_json_response,
    repair_json,
    repair_single_quotes,
    repair_trailing_commas,
    repair_unquoted_keys,
)

__all__ = [
    # Errors & types
    "BuildTimeIncompatibility",
    "CollaboratorNotFound",
    "ContractViolationError",
    "ExecutionFailure",
    "FailureKind",
    "InputContractViolation",
    "OutputContractViolation",
    "StepMetrics",
    "StepStatus",
    "Violation",
    "WorkflowError",
    # Contracts
    "Contract",
    "ContractResult",
    "as_contract",
    "check_compatibility",
    # Context & infrastructure
    "EMPTY_CONTEXT",
    "CollaboratorContext",
    "Settings",
    "load_settings",
    "get_logger",
    "MetricsCollector",
    # Collaborators
    "IMemoryStore",
    "IModelProvider",
    "ModelResponse",
    "PromptMessage",
    "AnthropicClient",
    "LLMClient",
    "OllamaClient",
    "OpenAIClient",
    "create_llm_client",
    "LangChainModel",
    "LLMClientModel",
    "MemoryStore",
    "Message",
    "RecalledMessage",
    # JSON repair
    "extract_json_object",
    "parse_json_response",
    "repair_json",
    "repair_single_quotes",
    "repair_trailing_commas",
    "repair_unquoted_keys",
]
