"""Tests for WorkflowBuilder commit-time checks and WorkflowDefinition."""

import dataclasses

import pytest
from pydantic import BaseModel

from stepflow.core.types import BuildTimeIncompatibility, FailureKind
from stepflow.workflows import WorkflowBuilder, WorkflowDefinition, create_step, create_workflow


class Text(BaseModel):
    text: str


class Count(BaseModel):
    word_count: int


class Label(BaseModel):
    label: str


def text_to_count(id="count"):
    return create_step(id, Text, Count, execute=lambda d, c: {"word_count": len(d.text.split())})


def count_to_label(id="label"):
    return create_step(id, Count, Label, execute=lambda d, c: {"label": str(d.word_count)})


def text_to_label(id):
    return create_step(id, Text, Label, execute=lambda d, c: {"label": d.text})


class TestCommit:
    """Tests for WorkflowBuilder.commit()."""

    def test_commit_returns_frozen_definition(self):
        definition = create_workflow("wf", Text, Label).then(text_to_count()).then(count_to_label()).commit()

        assert isinstance(definition, WorkflowDefinition)
        assert definition.step_ids == ["count", "label"]
        assert len(definition.stages) == 2
        with pytest.raises(dataclasses.FrozenInstanceError):
            definition.id = "other"

    def test_commit_is_idempotent(self):
        builder = create_workflow("wf", Text, Count).then(text_to_count())
        assert builder.commit() is builder.commit()
        assert builder.committed

    def test_append_after_commit_rejected(self):
        builder = create_workflow("wf", Text, Count).then(text_to_count())
        builder.commit()
        with pytest.raises(RuntimeError):
            builder.then(count_to_label())

    def test_empty_workflow_rejected(self):
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            create_workflow("wf", Text, Text).commit()
        assert exc_info.value.kind == FailureKind.BUILD_TIME_INCOMPATIBILITY
        assert isinstance(exc_info.value, ValueError)

    def test_adjacent_stages_incompatible(self):
        builder = create_workflow("wf", Text, Label).then(text_to_count()).then(text_to_label("echo"))
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            builder.commit()
        problems = exc_info.value.problems
        assert len(problems) == 1
        assert "echo" in problems[0]
        assert "'text'" in problems[0]

    def test_workflow_input_incompatible_with_first_stage(self):
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            create_workflow("wf", Count, Label).then(text_to_label("echo")).commit()
        assert "workflow input" in exc_info.value.problems[0]

    def test_last_stage_incompatible_with_workflow_output(self):
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            create_workflow("wf", Text, Label).then(text_to_count()).commit()
        assert "workflow output" in exc_info.value.problems[0]

    def test_closed_step_after_open_step_rejected(self):
        class StrictLabel(BaseModel, extra="forbid"):
            label: str

        closed = create_step("closed", StrictLabel, Label, execute=lambda d, c: {"label": d.label})
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            create_workflow("wf", Text, Label).then(text_to_label("echo")).then(closed).commit()
        problems = exc_info.value.problems
        assert len(problems) == 1
        assert "closed" in problems[0]
        assert "is open" in problems[0]

    def test_all_problems_reported_together(self):
        builder = (
            create_workflow("wf", Count, Count)
            .then(text_to_label("a"))
            .then(text_to_label("b"))
        )
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            builder.commit()
        assert len(exc_info.value.problems) == 3

    def test_builder_rejects_non_runnable(self):
        with pytest.raises(TypeError):
            create_workflow("wf", Text, Text).then(lambda value: value)

    def test_uncommitted_builder_cannot_be_nested(self):
        inner = create_workflow("inner", Text, Count).then(text_to_count())
        with pytest.raises(TypeError):
            create_workflow("outer", Text, Count).then(inner)

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            WorkflowBuilder(" ", None, None)


class TestParallelChecks:
    """Commit-time checks for parallel stages."""

    def test_parallel_needs_two_children(self):
        builder = create_workflow("wf", Text, Text).parallel([text_to_count()])
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            builder.commit()
        assert any("at least two" in p for p in exc_info.value.problems)

    def test_duplicate_sibling_ids(self):
        builder = create_workflow("wf", Text, Text).parallel([text_to_label("x"), text_to_label("x")])
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            builder.commit()
        assert any("duplicate sibling ids" in p for p in exc_info.value.problems)

    def test_duplicate_ids_across_stages(self):
        builder = create_workflow("wf", Text, Count).then(text_to_count("dup")).then(
            create_step("dup", Count, Count, execute=lambda d, c: d)
        )
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            builder.commit()
        assert any("more than one stage" in p for p in exc_info.value.problems)

    def test_fan_in_consumer_must_declare_child_keys(self):
        class Wrong(BaseModel):
            a: Label

        consume = create_step("consume", Wrong, Label, execute=lambda d, c: d.a)
        builder = (
            create_workflow("wf", Text, Label)
            .parallel([text_to_label("a"), text_to_label("b")])
            .then(consume)
        )
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            builder.commit()
        assert "fan-in keys" in exc_info.value.problems[0]

    def test_fan_in_consumer_with_exact_keys(self):
        class Both(BaseModel):
            a: Label
            b: Label

        consume = create_step("consume", Both, Label, execute=lambda d, c: d.a)
        definition = (
            create_workflow("wf", Text, Label)
            .parallel([text_to_label("a"), text_to_label("b")])
            .then(consume)
            .commit()
        )
        assert definition.stages[0].kind == "parallel"


class TestBranchChecks:
    """Commit-time checks for branch stages."""

    def test_branch_needs_an_arm(self):
        with pytest.raises(BuildTimeIncompatibility):
            create_workflow("wf", Text, Text).branch([]).commit()

    def test_predicate_must_be_callable(self):
        with pytest.raises(TypeError):
            create_workflow("wf", Text, Text).branch([(True, text_to_label("a"))])

    def test_branch_children_checked_against_upstream(self):
        builder = create_workflow("wf", Count, Count).branch(
            [(lambda v, c: True, text_to_label("a"))]
        )
        with pytest.raises(BuildTimeIncompatibility) as exc_info:
            builder.commit()
        assert any("stage[0] a" in p for p in exc_info.value.problems)


class TestDescribe:
    """Tests for WorkflowDefinition.describe()."""

    def test_describe_lists_stages(self):
        definition = create_workflow("wf", Text, Label).then(text_to_count()).then(count_to_label()).commit()
        rendering = definition.describe()
        assert rendering.splitlines()[0] == "Workflow: wf"
        assert "START" in rendering and "END" in rendering
        assert "[0] count" in rendering
        assert "[1] label" in rendering
