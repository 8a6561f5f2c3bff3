"""Tests for the workflow host."""

import pytest

from stepflow.core.config import Settings
from stepflow.core.types import FailureKind
from stepflow.host import WorkflowHost, build_default_host
from stepflow.workflows import ExecutionEngine

from conftest import FakeModel


@pytest.fixture
def host():
    return build_default_host(Settings(log_level="WARNING"), model=FakeModel())


class TestWorkflowHost:
    def test_registers_pattern_workflows(self, host):
        assert "reading-time-workflow" in host.names()
        assert len(host.names()) == 6
        assert host.context.names("workflow") == host.names()

    def test_default_collaborators(self, host):
        assert host.context.has("model", "content")
        assert host.context.has("tool", "calculator")
        assert host.context.has("memory", "default")
        assert host.context.get_memory().last_messages == 20
        assert host.context.has("service", "mcp")

    def test_memory_settings_applied(self):
        settings = Settings(log_level="WARNING", memory_last_messages=5, recall_top_k=7, recall_message_range=1)
        memory = build_default_host(settings, model=FakeModel()).context.get_memory()
        assert memory.last_messages == 5
        assert memory.top_k == 7
        assert memory.message_range == 1

    def test_unknown_workflow(self, host):
        with pytest.raises(KeyError):
            host.get("nope")

    @pytest.mark.asyncio
    async def test_run_success(self, host):
        result = await host.run("content-processing-workflow", {"content": "one two three four five six"})
        assert result.ok
        assert result.value["ai_analysis"]["score"] == 8

    @pytest.mark.asyncio
    async def test_run_failure(self, host):
        result = await host.run("reading-time-workflow", {"content": "too short"})
        assert result.kind == FailureKind.INPUT_CONTRACT_VIOLATION

    @pytest.mark.asyncio
    async def test_run_request_routing(self, host):
        result = await host.run("request-routing-workflow", {"user_input": "calculate 2 + 2"})
        assert result.value["response"] == "The result of 2 + 2 is 4"

    def test_custom_engine(self, host):
        engine = ExecutionEngine()
        custom = WorkflowHost({"rt": host.get("reading-time-workflow")}, host.context, engine=engine)
        assert custom.engine is engine
        assert custom.names() == ["rt"]
