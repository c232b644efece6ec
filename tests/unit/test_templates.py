"""Unit tests for workflow templates."""

from models.state import StageType, TaskStatus
from services.templates import BUILTIN_TEMPLATES, get_template


class TestTemplates:
    """Tests for built-in templates."""

    def test_template_ids_unique(self):
        ids = [template.id for template in BUILTIN_TEMPLATES]
        assert len(ids) == len(set(ids))

    def test_template_tasks_use_stage_types(self):
        stage_types = {stage.value for stage in StageType}
        for template in BUILTIN_TEMPLATES:
            assert all(task.type in stage_types for task in template.tasks)

    def test_get_template(self):
        template = get_template("template-merge-validate")
        assert [task.type for task in template.tasks] == ["merge", "validate"]

    def test_get_unknown_template(self):
        assert get_template("nope") is None

    def test_instantiate_gives_fresh_pending_tasks(self):
        template = get_template("template-clean-analyze")
        first = template.instantiate_tasks()
        second = template.instantiate_tasks()

        assert [task.type for task in first] == ["clean", "analyze", "report"]
        assert all(task.status == TaskStatus.PENDING for task in first)
        assert all(task.id.startswith("task-") for task in first)
        assert {task.id for task in first}.isdisjoint(task.id for task in second)
