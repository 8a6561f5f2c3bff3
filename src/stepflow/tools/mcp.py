"""
MCP (Model Context Protocol) Tool Bridge

Exposes tools served by a remote MCP-style HTTP server:

    GET  {base_url}/tools   -> {"tools": ["file_read", ...]}
    POST {base_url}/invoke  {"tool": name, "args": {...}} -> {"result": ...}

The toolkit is an ordinary collaborator: the host builds one from Settings
and registers it (or tools derived from it) in the context. There is no
module-level instance.
"""

import inspect
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Union

import httpx
from pydantic import BaseModel

from .base import Tool, create_tool

logger = logging.getLogger(__name__)


class ToolCall(BaseModel):
    """Record of a remote tool call."""

    tool_name: str
    args: Dict[str, Any]
    result: Optional[str] = None
    error: Optional[str] = None


class RemoteToolOutput(BaseModel):
    result: str


class MCPToolkit:
    """
    Async client for a remote tool server.

    Args:
        mcp_server_url: Base URL of the server
        client: Preconfigured httpx.AsyncClient (tests pass one with a mock
            transport); created lazily when omitted
        timeout: Per-call timeout in seconds
        history_size: Number of recent calls kept in history
    """

    def __init__(
        self,
        mcp_server_url: str = "http://localhost:8000",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        history_size: int = 100,
    ):
        self.base_url = mcp_server_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._tools_cache: Optional[List[str]] = None
        self.history: Deque[ToolCall] = deque(maxlen=history_size)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MCPToolkit":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def list_tools(self) -> List[str]:
        """Get available tool names from the server (cached after the first success)."""
        if self._tools_cache is not None:
            return self._tools_cache

        try:
            response = await self.client.get(f"{self.base_url}/tools", timeout=5.0)
            response.raise_for_status()
            self._tools_cache = list(response.json().get("tools", []))
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[mcp] Could not fetch tools from {self.base_url}: {e}")
            return []
        return self._tools_cache

    async def call(self, tool_name: str, **kwargs: Any) -> str:
        """
        Call a tool on the server.

        Usage:
            result = await toolkit.call("file_read", path="/path/to/file")

        Raises:
            RuntimeError: Transport error, HTTP error status or bad payload
        """
        record = ToolCall(tool_name=tool_name, args=kwargs)
        self.history.append(record)
        try:
            response = await self.client.post(
                f"{self.base_url}/invoke",
                json={"tool": tool_name, "args": kwargs},
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = str(response.json().get("result", ""))
        except (httpx.HTTPError, ValueError) as e:
            record.error = str(e)
            logger.error(f"[mcp] Tool '{tool_name}' failed: {e}")
            raise RuntimeError(f"MCP tool '{tool_name}' failed: {e}") from e
        record.result = result
        return result

    async def call_with_fallback(
        self,
        tool_name: str,
        fallback_fn: Callable[..., Union[str, Awaitable[str]]],
        **kwargs: Any,
    ) -> str:
        """
        Try the server, fall back to a local function if it is unavailable.

        Useful for development without an MCP server running.
        """
        try:
            return await self.call(tool_name, **kwargs)
        except RuntimeError as e:
            logger.warning(f"[mcp] {tool_name} unavailable, using fallback: {e}")
            result = fallback_fn(**kwargs)
            if inspect.isawaitable(result):
                result = await result
            return str(result)

    def as_tool(self, tool_name: str, input_schema: Any, description: str = "") -> Tool:
        """
        Wrap a remote tool as a local Tool.

        Args:
            tool_name: Remote tool name (also the Tool id)
            input_schema: Contract or model class for the arguments
            description: Tool description

        Returns:
            Tool whose output is {"result": <text returned by the server>}
        """

        async def invoke(data: BaseModel, context: Any) -> Dict[str, Any]:
            return {"result": await self.call(tool_name, **data.model_dump(by_alias=True))}

        return create_tool(
            id=tool_name,
            description=description or f"Remote tool {tool_name}",
            input_schema=input_schema,
            output_schema=RemoteToolOutput,
            execute=invoke,
        )
