"""
Collaborator Context

The injected handle through which a step reaches external services.

Collaborators are registered once when the host starts up and are only
looked up by name afterwards. The context is shared read-only by every step
and every concurrent sibling of a run; it exposes no way to register or
replace a collaborator once constructed.

Example:
    context = CollaboratorContext(
        models={"content": LangChainModel(chat_model, system_prompt=...)},
        tools={"calculator": calculator_tool},
        memory={"default": MemoryStore()},
    )

    async def analyze(data, context):
        model = context.get_model("content")
        response = await model.generate([{"role": "user", "content": data.text}])
"""

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .types import CollaboratorNotFound


class CollaboratorContext:
    """
    Read-only registry of named collaborators.

    Args:
        models: name -> model-invocation provider (IModelProvider)
        workflows: name -> committed WorkflowDefinition
        tools: name -> Tool
        memory: name -> memory store
        services: name -> any other host-provided service
    """

    __slots__ = ("_registries",)

    def __init__(
        self,
        models: Optional[Mapping[str, Any]] = None,
        workflows: Optional[Mapping[str, Any]] = None,
        tools: Optional[Mapping[str, Any]] = None,
        memory: Optional[Mapping[str, Any]] = None,
        services: Optional[Mapping[str, Any]] = None,
    ):
        registries: Dict[str, Mapping[str, Any]] = {
            "model": MappingProxyType(dict(models or {})),
            "workflow": MappingProxyType(dict(workflows or {})),
            "tool": MappingProxyType(dict(tools or {})),
            "memory": MappingProxyType(dict(memory or {})),
            "service": MappingProxyType(dict(services or {})),
        }
        object.__setattr__(self, "_registries", MappingProxyType(registries))

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError("CollaboratorContext is read-only")

    def get(self, kind: str, name: str) -> Any:
        """
        Look up a collaborator.

        Args:
            kind: "model", "workflow", "tool", "memory" or "service"
            name: Registered name

        Raises:
            CollaboratorNotFound: If nothing is registered under that name
        """
        if kind not in self._registries:
            raise ValueError(f"Unknown collaborator kind: {kind}. Available: {list(self._registries)}")
        registry = self._registries[kind]
        if name not in registry:
            raise CollaboratorNotFound(kind, name, list(registry))
        return registry[name]

    def get_model(self, name: str) -> Any:
        return self.get("model", name)

    def get_workflow(self, name: str) -> Any:
        return self.get("workflow", name)

    def get_tool(self, name: str) -> Any:
        return self.get("tool", name)

    def get_memory(self, name: str = "default") -> Any:
        return self.get("memory", name)

    def get_service(self, name: str) -> Any:
        return self.get("service", name)

    def has(self, kind: str, name: str) -> bool:
        return name in self._registries.get(kind, {})

    def names(self, kind: str) -> List[str]:
        return sorted(self._registries.get(kind, {}))

    def __repr__(self) -> str:
        counts = ", ".join(f"{kind}s={len(reg)}" for kind, reg in self._registries.items())
        return f"CollaboratorContext({counts})"


EMPTY_CONTEXT = CollaboratorContext()
