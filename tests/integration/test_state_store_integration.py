"""Integration tests for the Redis stores with real Redis."""

from datetime import datetime, timezone

import pytest
from redis import Redis
from testcontainers.redis import RedisContainer

from models.dataset import Dataset
from models.state import Task, TaskMetrics, TaskStatus, WorkflowResult, WorkflowStatus
from services.file_store import RedisFileStore
from services.state_store import RedisWorkflowStore, WorkflowNotFoundError


@pytest.fixture(scope="module")
def redis_container():
    with RedisContainer() as container:
        yield container


@pytest.fixture
def redis_client(redis_container):
    client = Redis(
        host=redis_container.get_container_host_ip(),
        port=redis_container.get_exposed_port(6379),
        decode_responses=False,
    )
    yield client
    client.flushdb()
    client.close()


@pytest.fixture
def workflow_store(redis_client):
    return RedisWorkflowStore(redis_client)


@pytest.fixture
def file_store(redis_client):
    return RedisFileStore(redis_client)


class TestWorkflowIntegration:
    """Integration tests for workflow operations."""

    def test_workflow_lifecycle(self, workflow_store):
        workflow_store.create_workflow(
            "wf-int-1", name="Sales", tasks=[Task(id="t1", type="clean")]
        )

        state = workflow_store.set_workflow_status("wf-int-1", WorkflowStatus.RUNNING)
        assert state.status == WorkflowStatus.RUNNING

        workflow_store.save_tasks(
            "wf-int-1", [Task(id="t1", type="clean", status=TaskStatus.COMPLETED, progress=100)]
        )
        state = workflow_store.set_workflow_status("wf-int-1", WorkflowStatus.COMPLETED)

        retrieved = workflow_store.get_workflow("wf-int-1")
        assert retrieved.status == WorkflowStatus.COMPLETED
        assert retrieved.tasks[0].progress == 100

    def test_owner_scoping(self, workflow_store):
        workflow_store.create_workflow("wf-int-2", owner_id="alice")
        with pytest.raises(WorkflowNotFoundError):
            workflow_store.get_workflow("wf-int-2", owner_id="bob")
        assert [w.workflow_id for w in workflow_store.list_workflows("alice")] == ["wf-int-2"]

    def test_results_history(self, workflow_store):
        workflow_store.create_workflow("wf-int-3")
        now = datetime.now(timezone.utc)
        for idx in range(3):
            workflow_store.append_result(
                WorkflowResult(
                    result_id=f"r{idx}",
                    workflow_id="wf-int-3",
                    task_id="t1",
                    status=TaskStatus.COMPLETED,
                    metrics=TaskMetrics(records_processed=idx),
                    started_at=now,
                    completed_at=now,
                )
            )

        assert [r.result_id for r in workflow_store.list_results("wf-int-3")] == ["r0", "r1", "r2"]

        workflow_store.delete_workflow("wf-int-3")
        assert workflow_store.list_results("wf-int-3") == []


class TestFileStoreIntegration:
    """Integration tests for stored file content."""

    def test_put_and_fetch(self, file_store):
        file_store.put_dataset(
            "f-int-1",
            Dataset(headers=["Item", "Revenue"], rows=[["Widget", 10.5]]),
            owner_id="alice",
        )

        dataset = file_store.fetch_dataset("f-int-1", owner_id="alice")
        assert dataset.rows == [["Widget", 10.5]]
        assert file_store.fetch_dataset("f-int-1", owner_id="bob") is None
