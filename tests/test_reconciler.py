"""Tests for step reconciliation."""

from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from plansync.core.content_hash import compute_step_content_hash
from plansync.core.reconciler import reconcile, sync_plan_from_markdown
from plansync.models import (
    ParsedStep,
    Plan,
    PlanStep,
    RenamedStep,
    StepComplexity,
    StepStatus,
)


def make_step(
    step_id: str,
    title: str,
    description: str = "",
    status: StepStatus = StepStatus.PENDING,
    **kwargs,
) -> PlanStep:
    """Create a stored step; completed steps get their content hash."""
    content_hash = (
        compute_step_content_hash(title, description) if status == StepStatus.COMPLETED else None
    )
    return PlanStep(
        id=step_id,
        title=title,
        description=description,
        status=status,
        content_hash=content_hash,
        **kwargs,
    )


def parsed(step_id: str, title: str, description: str = "", **kwargs) -> ParsedStep:
    """Create a parsed step."""
    return ParsedStep(id=step_id, title=title, description=description, **kwargs)


def as_parsed(plan: Plan) -> list[ParsedStep]:
    """Parse a plan back into the document form it came from."""
    return [
        ParsedStep(
            id=s.id,
            parent_id=s.parent_id,
            title=s.title,
            description=s.description,
            complexity=s.complexity,
        )
        for s in plan.steps
    ]


class TestNoOpSync:
    """Reconciling a plan against its own document."""

    @pytest.mark.unit
    def test_no_changes(self, sample_plan: Plan) -> None:
        outcome = reconcile(as_parsed(sample_plan), sample_plan)
        result = outcome.sync_result

        assert result.changed is False
        assert result.added_count == 0
        assert result.updated_count == 0
        assert result.removed_count == 0
        assert result.renamed_count == 0
        assert outcome.updated_plan.plan_version == sample_plan.plan_version

    @pytest.mark.unit
    def test_preserves_step_state(self, sample_plan: Plan) -> None:
        outcome = reconcile(as_parsed(sample_plan), sample_plan)
        assert outcome.updated_plan.steps == sample_plan.steps

    @pytest.mark.unit
    def test_whitespace_only_edit_is_not_an_update(self, sample_plan: Plan) -> None:
        """Content is compared after normalisation, like the hash."""
        steps = as_parsed(sample_plan)
        steps[0] = steps[0].model_copy(update={"description": "  Load   settings from\tTOML  "})

        outcome = reconcile(steps, sample_plan)

        assert outcome.sync_result.changed is False
        assert outcome.updated_plan.steps[0].status == StepStatus.COMPLETED

    @pytest.mark.unit
    def test_input_plan_not_mutated(self, sample_plan: Plan) -> None:
        before = sample_plan.model_dump()
        reconcile([parsed("x", "Other")], sample_plan)
        assert sample_plan.model_dump() == before


class TestIdentifierMatch:
    """Steps whose id survives in the document."""

    @pytest.mark.unit
    def test_edit_resets_completed_step(self, sample_plan: Plan) -> None:
        steps = as_parsed(sample_plan)
        steps[0] = steps[0].model_copy(update={"description": "Load settings from YAML"})

        outcome = reconcile(steps, sample_plan)
        step = outcome.updated_plan.steps[0]

        assert outcome.sync_result.updated_step_ids == ["step-1"]
        assert step.status == StepStatus.PENDING
        assert step.content_hash is None
        assert step.description == "Load settings from YAML"
        assert step.metadata == {"commit": "abc123"}
        assert outcome.updated_plan.plan_version == sample_plan.plan_version + 1

    @pytest.mark.unit
    def test_edit_resets_skipped_step(self) -> None:
        plan = Plan(steps=[make_step("a", "A", "one", StepStatus.SKIPPED)])
        outcome = reconcile([parsed("a", "A", "two")], plan)
        assert outcome.updated_plan.steps[0].status == StepStatus.PENDING

    @pytest.mark.unit
    def test_edit_keeps_in_progress_status(self) -> None:
        plan = Plan(steps=[make_step("a", "A", "one", StepStatus.IN_PROGRESS)])
        outcome = reconcile([parsed("a", "A", "two")], plan)
        assert outcome.updated_plan.steps[0].status == StepStatus.IN_PROGRESS

    @pytest.mark.unit
    def test_edit_takes_parsed_complexity(self) -> None:
        plan = Plan(steps=[make_step("a", "A", "one", complexity=StepComplexity.LOW)])
        outcome = reconcile([parsed("a", "A", "two", complexity=StepComplexity.HIGH)], plan)
        assert outcome.updated_plan.steps[0].complexity == StepComplexity.HIGH

    @pytest.mark.unit
    def test_edit_keeps_prior_complexity_when_omitted(self) -> None:
        plan = Plan(steps=[make_step("a", "A", "one", complexity=StepComplexity.LOW)])
        outcome = reconcile([parsed("a", "A", "two")], plan)
        assert outcome.updated_plan.steps[0].complexity == StepComplexity.LOW

    @pytest.mark.unit
    def test_unchanged_step_gets_new_order_and_parent(self) -> None:
        plan = Plan(
            steps=[
                make_step("a", "A", order_index=0),
                make_step("b", "B", order_index=1),
            ]
        )
        outcome = reconcile([parsed("b", "B", parent_id="a"), parsed("a", "A")], plan)

        b, a = outcome.updated_plan.steps
        assert (b.id, b.order_index, b.parent_id) == ("b", 0, "a")
        assert (a.id, a.order_index) == ("a", 1)
        assert outcome.sync_result.changed is False

    @pytest.mark.unit
    def test_identifier_precedes_hash_match(self) -> None:
        """Same id and content is unchanged even if another completed step shares it."""
        plan = Plan(
            steps=[
                make_step("x", "Shared", "same", StepStatus.COMPLETED),
                make_step("y", "Shared", "same", StepStatus.COMPLETED),
            ]
        )
        outcome = reconcile([parsed("x", "Shared", "same")], plan)
        result = outcome.sync_result

        assert result.renamed_steps == []
        assert result.updated_step_ids == []
        assert result.removed_step_ids == ["y"]

    @pytest.mark.unit
    def test_reused_id_with_new_content_is_edit_not_rename(self) -> None:
        plan = Plan(
            steps=[
                make_step("a", "Alpha", "first", StepStatus.COMPLETED),
                make_step("b", "Beta", "second", StepStatus.COMPLETED),
            ]
        )
        # "a" now carries b's content and b's id is gone
        outcome = reconcile([parsed("a", "Beta", "second")], plan)
        result = outcome.sync_result

        assert result.updated_step_ids == ["a"]
        assert result.renamed_steps == []
        assert result.removed_step_ids == ["b"]
        assert outcome.updated_plan.steps[0].status == StepStatus.PENDING

    @pytest.mark.unit
    def test_kept_id_is_not_a_rename_source(self) -> None:
        """A step whose id appears later in the document is not claimed by an earlier rename."""
        plan = Plan(steps=[make_step("a", "Alpha", "first", StepStatus.COMPLETED)])
        outcome = reconcile([parsed("a2", "Alpha", "first"), parsed("a", "Alpha", "first")], plan)
        result = outcome.sync_result

        assert result.renamed_steps == []
        assert result.added_step_ids == ["a2"]
        assert [s.id for s in outcome.updated_plan.steps] == ["a2", "a"]
        assert outcome.updated_plan.steps[1].status == StepStatus.COMPLETED


class TestHashMatch:
    """Renumbered steps matched by content."""

    @pytest.mark.unit
    def test_rename_preserves_completion(self) -> None:
        plan = Plan(
            plan_version=1,
            steps=[
                make_step(
                    "s1",
                    "Feature",
                    "Basic impl",
                    StepStatus.COMPLETED,
                    metadata={"commit": "abc"},
                    complexity=StepComplexity.MEDIUM,
                )
            ],
        )
        outcome = reconcile(
            [parsed("s2", "Feature", "Basic impl"), parsed("s1a", "New", "Something new")], plan
        )
        result = outcome.sync_result
        s2, s1a = outcome.updated_plan.steps

        assert result.renamed_steps == [RenamedStep(old_id="s1", new_id="s2")]
        assert result.added_step_ids == ["s1a"]
        assert result.removed_count == 0
        assert s2.status == StepStatus.COMPLETED
        assert s2.content_hash == plan.steps[0].content_hash
        assert s2.metadata == {"commit": "abc"}
        assert s2.complexity == StepComplexity.MEDIUM
        assert s1a.status == StepStatus.PENDING
        assert s1a.content_hash is None
        assert outcome.updated_plan.plan_version == 2

    @pytest.mark.unit
    def test_rename_matches_normalized_content(self) -> None:
        plan = Plan(steps=[make_step("s1", "Feature", "Basic impl", StepStatus.COMPLETED)])
        outcome = reconcile([parsed("s2", " Feature ", "Basic\t\timpl\r\n")], plan)
        assert outcome.sync_result.renamed_count == 1

    @pytest.mark.unit
    def test_rename_metadata_is_copied(self) -> None:
        plan = Plan(
            steps=[make_step("s1", "F", "D", StepStatus.COMPLETED, metadata={"k": "v"})]
        )
        outcome = reconcile([parsed("s2", "F", "D")], plan)
        outcome.updated_plan.steps[0].metadata["k"] = "changed"
        assert plan.steps[0].metadata == {"k": "v"}

    @pytest.mark.unit
    def test_parsed_complexity_wins_on_rename(self) -> None:
        plan = Plan(
            steps=[make_step("s1", "F", "D", StepStatus.COMPLETED, complexity=StepComplexity.LOW)]
        )
        outcome = reconcile([parsed("s2", "F", "D", complexity=StepComplexity.HIGH)], plan)
        assert outcome.updated_plan.steps[0].complexity == StepComplexity.HIGH

    @pytest.mark.unit
    def test_pending_step_is_not_rename_source(self) -> None:
        plan = Plan(steps=[make_step("s1", "F", "D")])
        outcome = reconcile([parsed("s2", "F", "D")], plan)
        result = outcome.sync_result

        assert result.renamed_steps == []
        assert result.added_step_ids == ["s2"]
        assert result.removed_step_ids == ["s1"]

    @pytest.mark.unit
    def test_completed_without_hash_is_not_rename_source(self) -> None:
        step = PlanStep(id="s1", title="F", description="D", status=StepStatus.COMPLETED)
        outcome = reconcile([parsed("s2", "F", "D")], Plan(steps=[step]))
        assert outcome.sync_result.renamed_count == 0

    @pytest.mark.unit
    def test_stale_hash_does_not_match_current_content(self) -> None:
        """The pool is keyed by the recorded hash, not the current text."""
        step = make_step("s1", "F", "D", StepStatus.COMPLETED).model_copy(
            update={"description": "edited after completion"}
        )
        outcome = reconcile([parsed("s2", "F", "edited after completion")], Plan(steps=[step]))
        assert outcome.sync_result.renamed_count == 0

    @pytest.mark.unit
    def test_skipped_steps_eligible_when_configured(self) -> None:
        step = make_step("s1", "F", "D", StepStatus.SKIPPED).model_copy(
            update={"content_hash": compute_step_content_hash("F", "D")}
        )
        plan = Plan(steps=[step])

        default = reconcile([parsed("s2", "F", "D")], plan)
        widened = reconcile(
            [parsed("s2", "F", "D")],
            plan,
            rename_statuses={StepStatus.COMPLETED, StepStatus.SKIPPED},
        )

        assert default.sync_result.renamed_count == 0
        assert widened.sync_result.renamed_steps == [RenamedStep(old_id="s1", new_id="s2")]
        assert widened.updated_plan.steps[0].status == StepStatus.SKIPPED

    @pytest.mark.unit
    def test_no_double_rename_match(self) -> None:
        """Two identical completed steps renamed to two new ids: one rename, one addition."""
        plan = Plan(
            steps=[
                make_step("a", "Same", "content", StepStatus.COMPLETED),
                make_step("b", "Same", "content", StepStatus.COMPLETED),
            ]
        )
        outcome = reconcile([parsed("x", "Same", "content"), parsed("y", "Same", "content")], plan)
        result = outcome.sync_result

        assert result.renamed_steps == [RenamedStep(old_id="a", new_id="x")]
        assert result.added_step_ids == ["y"]
        assert result.removed_step_ids == ["b"]
        x, y = outcome.updated_plan.steps
        assert x.status == StepStatus.COMPLETED
        assert y.status == StepStatus.PENDING


class TestAddAndRemove:
    """New and deleted steps."""

    @pytest.mark.unit
    def test_new_step_is_pending(self, sample_plan: Plan) -> None:
        steps = [*as_parsed(sample_plan), parsed("step-3", "Write docs", "README")]
        outcome = reconcile(steps, sample_plan)

        assert outcome.sync_result.added_step_ids == ["step-3"]
        new = outcome.updated_plan.steps[-1]
        assert new.status == StepStatus.PENDING
        assert new.order_index == 3
        assert new.metadata == {}

    @pytest.mark.unit
    def test_missing_step_is_removed(self, sample_plan: Plan) -> None:
        outcome = reconcile(as_parsed(sample_plan)[:2], sample_plan)

        assert outcome.sync_result.removed_step_ids == ["step-2"]
        assert [s.id for s in outcome.updated_plan.steps] == ["step-1", "step-1a"]

    @pytest.mark.unit
    def test_empty_document_removes_everything(self, sample_plan: Plan) -> None:
        outcome = reconcile([], sample_plan)

        assert outcome.sync_result.removed_step_ids == ["step-1", "step-1a", "step-2"]
        assert outcome.updated_plan.steps == []
        assert outcome.updated_plan.plan_version == sample_plan.plan_version + 1

    @pytest.mark.unit
    def test_empty_plan_adds_everything(self) -> None:
        outcome = reconcile([parsed("a", "A"), parsed("b", "B")], Plan())
        assert outcome.sync_result.added_step_ids == ["a", "b"]
        assert outcome.updated_plan.plan_version == 1

    @pytest.mark.unit
    def test_duplicate_document_id_reported(self) -> None:
        outcome = reconcile([parsed("a", "A"), parsed("a", "Again")], Plan())

        assert [s.id for s in outcome.updated_plan.steps] == ["a"]
        assert outcome.sync_result.added_step_ids == ["a"]
        assert len(outcome.sync_result.errors) == 1
        assert "'a'" in outcome.sync_result.errors[0]

    @pytest.mark.unit
    def test_order_follows_document(self, sample_plan: Plan) -> None:
        steps = list(reversed(as_parsed(sample_plan)))
        outcome = reconcile(steps, sample_plan)

        assert [s.id for s in outcome.updated_plan.steps] == ["step-2", "step-1a", "step-1"]
        assert [s.order_index for s in outcome.updated_plan.steps] == [0, 1, 2]


class TestReconcileProperties:
    """Property-based tests for reconcile."""

    @given(
        titles=st.lists(st.text(min_size=1, max_size=10), min_size=0, max_size=6),
        keep=st.lists(st.booleans(), min_size=6, max_size=6),
    )
    @settings(max_examples=100)
    def test_version_bumps_iff_changed(self, titles: list[str], keep: list[bool]) -> None:
        plan = Plan(
            plan_version=5,
            steps=[
                make_step(f"s{i}", t, status=StepStatus.COMPLETED) for i, t in enumerate(titles)
            ],
        )
        doc = [parsed(s.id, s.title) for s, k in zip(plan.steps, keep, strict=False) if k]

        outcome = reconcile(doc, plan)

        expected = 6 if outcome.sync_result.changed else 5
        assert outcome.updated_plan.plan_version == expected
        assert len({s.id for s in outcome.updated_plan.steps}) == len(outcome.updated_plan.steps)

    @given(count=st.integers(min_value=0, max_value=6))
    @settings(max_examples=20)
    def test_second_sync_is_noop(self, count: int) -> None:
        plan = Plan(steps=[make_step(f"s{i}", f"T{i}") for i in range(count)])
        doc = [parsed(f"n{i}", f"T{i}") for i in range(count)]

        first = reconcile(doc, plan)
        second = reconcile(doc, first.updated_plan)

        assert second.sync_result.changed is False
        assert second.updated_plan.plan_version == first.updated_plan.plan_version


class TestSyncPlanFromMarkdown:
    """Tests for the document-driven entry point."""

    @pytest.mark.unit
    def test_missing_document_returns_none(self, tmp_path: Path, sample_plan: Plan) -> None:
        assert sync_plan_from_markdown(tmp_path / "plan.md", sample_plan) is None

    @pytest.mark.unit
    def test_unchanged_document(self, workflow_dir: Path, sample_plan: Plan) -> None:
        outcome = sync_plan_from_markdown(workflow_dir / "plan.md", sample_plan)
        assert outcome is not None
        assert outcome.sync_result.changed is False

    @pytest.mark.unit
    def test_renumbered_document(self, tmp_path: Path, sample_plan: Plan) -> None:
        (tmp_path / "plan.md").write_text(
            """[PLAN_STEP id="step-10"]
Create config module
Load settings from TOML
[/PLAN_STEP]
[PLAN_STEP id="step-2"]
Build CLI
Create the entry point, with subcommands
[/PLAN_STEP]
"""
        )
        outcome = sync_plan_from_markdown(tmp_path / "plan.md", sample_plan)

        assert outcome is not None
        result = outcome.sync_result
        assert result.renamed_steps == [RenamedStep(old_id="step-1", new_id="step-10")]
        assert result.updated_step_ids == ["step-2"]
        assert result.removed_step_ids == ["step-1a"]
        assert outcome.updated_plan.get_step("step-10").status == StepStatus.COMPLETED
