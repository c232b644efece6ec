"""Built-in workflow templates."""

import uuid

from pydantic import BaseModel, ConfigDict

from models.state import StageType, Task


class TemplateTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    agent: str
    description: str | None = None


class WorkflowTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: str
    tasks: list[TemplateTask]

    def instantiate_tasks(self) -> list[Task]:
        """Fresh pending tasks with new ids."""
        return [
            Task(
                id=f"task-{uuid.uuid4().hex[:12]}",
                name=task.name,
                type=task.type,
                agent=task.agent,
                description=task.description,
            )
            for task in self.tasks
        ]


BUILTIN_TEMPLATES: tuple[WorkflowTemplate, ...] = (
    WorkflowTemplate(
        id="template-clean-analyze",
        name="Clean & Analyze Data",
        description="A standard workflow to clean raw data and generate initial analysis.",
        category="Data Preparation",
        tasks=[
            TemplateTask(name="Data Cleaning", type=StageType.CLEAN.value, agent="CleaningAgent"),
            TemplateTask(name="Schema Analysis", type=StageType.ANALYZE.value, agent="SchemaAgent"),
            TemplateTask(name="Generate Report", type=StageType.REPORT.value, agent="ReportAgent"),
        ],
    ),
    WorkflowTemplate(
        id="template-merge-validate",
        name="Merge & Validate Datasets",
        description="Combines multiple datasets and performs data validation checks.",
        category="Data Integration",
        tasks=[
            TemplateTask(name="Data Merging", type=StageType.MERGE.value, agent="MergeAgent"),
            TemplateTask(
                name="Data Validation", type=StageType.VALIDATE.value, agent="ValidationAgent"
            ),
        ],
    ),
)


def get_template(template_id: str) -> WorkflowTemplate | None:
    for template in BUILTIN_TEMPLATES:
        if template.id == template_id:
            return template
    return None
