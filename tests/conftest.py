import os
import sys
import tempfile

import pytest

# Ensure project root is on sys.path so top-level packages (e.g., app, cli, config) are importable
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Settings are read once, on first import of config.settings,
# so the test environment has to be in place before any app import.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="taskqueue-tests-")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("TASK_STORE_BACKEND", "sql")
os.environ.setdefault("SQLITE_PATH", os.path.join(_TEST_DB_DIR, "tasks.db"))
os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture
def task_def():
    """
    A complete task definition, every optional field spelled out.
    """
    from cli.client import from_now_json

    return {
        "provisionerId": "no-provisioner-extended-extended",
        "workerType": "test-worker-extended-extended",
        "schedulerId": "my-scheduler-extended-extended",
        "taskGroupId": "dSlITZ4yQgmvxxAi4A8fHQ",
        "dependencies": [],
        "requires": "all-completed",
        "routes": [],
        "priority": "lowest",
        "retries": 5,
        "created": from_now_json(),
        "deadline": from_now_json("3 days"),
        "expires": from_now_json("3 days"),
        "scopes": [],
        "payload": {},
        "metadata": {
            "name": "Unit testing task",
            "description": "Task created during unit tests",
            "owner": "jonsafj@mozilla.com",
            "source": "https://github.com/taskcluster/taskcluster-queue",
        },
        "tags": {
            "purpose": "taskcluster-testing",
        },
        "extra": {},
    }


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def queue(client):
    """A queue client holding every queue:* scope."""
    from app.core.security import create_access_token
    from cli.client import QueueClient

    token = create_access_token("tester", ["queue:*"])
    return QueueClient("http://testserver", token=token, session=client)


@pytest.fixture
def anonymous_queue(client):
    """A queue client without credentials."""
    from cli.client import QueueClient

    return QueueClient("http://testserver", session=client)
