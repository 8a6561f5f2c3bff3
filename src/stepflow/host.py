"""
Workflow Host

The command surface: a fixed set of named, pre-committed workflows plus the
collaborator context they run against. The context is built once here and
handed to every run.

Usage:
    host = build_default_host(load_settings())
    result = await host.run("reading-time-workflow", {"content": "..."})
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from .core.abstractions import IModelProvider
from .core.config import Settings
from .core.context import CollaboratorContext
from .core.llm_adapter import LLMClientModel
from .core.llm_client import create_llm_client
from .core.logger import get_logger
from .core.memory import MemoryStore
from .patterns import CITY_DATA_SERVICE, SimulatedCityData, build_pattern_workflows
from .patterns.prompts import CONTENT_ANALYSIS_SYSTEM
from .tools import MCPToolkit, calculator_tool
from .workflows import ExecutionEngine, ExecutionResult, WorkflowDefinition

logger = logging.getLogger(__name__)


class WorkflowHost:
    """
    Named workflows bound to one collaborator context.

    Args:
        workflows: name -> committed WorkflowDefinition
        context: Context shared by every run
        engine: Engine to run with (a fresh ExecutionEngine by default)
    """

    def __init__(
        self,
        workflows: Mapping[str, WorkflowDefinition],
        context: CollaboratorContext,
        engine: Optional[ExecutionEngine] = None,
    ):
        self._workflows: Dict[str, WorkflowDefinition] = dict(workflows)
        self.context = context
        self.engine = engine or ExecutionEngine()

    def names(self) -> List[str]:
        return sorted(self._workflows)

    def get(self, name: str) -> WorkflowDefinition:
        """
        Raises:
            KeyError: Unknown workflow name
        """
        if name not in self._workflows:
            raise KeyError(f"Unknown workflow: {name}. Available: {self.names()}")
        return self._workflows[name]

    async def run(self, name: str, input_data: Any) -> ExecutionResult:
        """
        Run a named workflow.

        Args:
            name: Workflow name
            input_data: Raw workflow input

        Returns:
            Success or Failure
        """
        definition = self.get(name)
        result = await self.engine.execute(definition, input_data, self.context)
        if result.ok:
            logger.info(f"[{name}] Run succeeded")
        else:
            logger.warning(f"[{name}] Run failed at {list(result.path)}: {result.kind.value}")
        return result


def build_default_host(
    settings: Optional[Settings] = None,
    model: Optional[IModelProvider] = None,
) -> WorkflowHost:
    """
    Build a host with every pattern workflow and the default collaborators.

    Args:
        settings: Runtime settings (read from the environment if omitted)
        model: Model for the "content" collaborator; built from
            settings.llm_provider if omitted

    Returns:
        WorkflowHost
    """
    settings = settings or Settings.from_env()
    get_logger("stepflow", level=settings.log_level)

    if model is None:
        model = LLMClientModel(
            create_llm_client(settings),
            system_prompt=CONTENT_ANALYSIS_SYSTEM,
            temperature=settings.llm_temperature,
        )

    workflows = build_pattern_workflows()
    context = CollaboratorContext(
        models={"content": model},
        workflows=workflows,
        tools={calculator_tool.id: calculator_tool},
        memory={
            "default": MemoryStore(
                last_messages=settings.memory_last_messages,
                top_k=settings.recall_top_k,
                message_range=settings.recall_message_range,
            )
        },
        services={
            CITY_DATA_SERVICE: SimulatedCityData(),
            "mcp": MCPToolkit(mcp_server_url=settings.mcp_server_url),
        },
    )
    logger.info(f"Host ready with {len(workflows)} workflows ({settings.llm_provider} model provider)")
    return WorkflowHost(workflows, context)
