import json
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests
import slugid

from app.core.security import decode_credentials
from app.core.task_ids import is_slugid
from cli import cli
from cli.client import QueueClient, from_now, from_now_json

REFERENCE = datetime(2026, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("offset, expected", [
    ("", datetime(2026, 1, 31, 12, 0, 0, tzinfo=timezone.utc)),
    ("3 days", datetime(2026, 2, 3, 12, 0, 0, tzinfo=timezone.utc)),
    ("-1 hour", datetime(2026, 1, 31, 11, 0, 0, tzinfo=timezone.utc)),
    ("2 weeks 1d 4h", datetime(2026, 2, 15, 16, 0, 0, tzinfo=timezone.utc)),
    ("1 month", datetime(2026, 3, 2, 12, 0, 0, tzinfo=timezone.utc)),
    ("1 year", datetime(2027, 1, 31, 12, 0, 0, tzinfo=timezone.utc)),
    ("30 min 15 s", datetime(2026, 1, 31, 12, 30, 15, tzinfo=timezone.utc)),
])
def test_from_now(offset, expected):
    assert from_now(offset, reference=REFERENCE) == expected

def test_from_now_rejects_garbage():
    with pytest.raises(ValueError):
        from_now("next tuesday")

def test_from_now_json_format():
    assert from_now_json("1 day", reference=REFERENCE) == "2026-02-01T12:00:00.000Z"

def test_create_and_get_through_client(queue, anonymous_queue, task_def):
    task_id = slugid.nice()

    assert queue.create_task(task_id, task_def) == {"taskId": task_id}
    assert anonymous_queue.task(task_id) == task_def

def test_cli_mint_token():
    args = cli.build_parser().parse_args([
        "mint-token", "--client-id", "ci", "--scope", "queue:*", "--scope", "index:*",
    ])

    token = cli.handle_mint_token(args)

    credentials = decode_credentials(token)
    assert credentials.client_id == "ci"
    assert credentials.scopes == ["queue:*", "index:*"]

def test_cli_create_task_reads_file(tmp_path, task_def, monkeypatch):
    definition_file = tmp_path / "task.json"
    definition_file.write_text(json.dumps(task_def))
    created = {}

    def fake_create(self, task_id, body):
        created[task_id] = body
        return {"taskId": task_id}

    monkeypatch.setattr(cli.QueueClient, "create_task", fake_create)
    args = cli.build_parser().parse_args(["create-task", "--file", str(definition_file)])

    task_id = cli.handle_create_task(args)

    assert is_slugid(task_id)
    assert created == {task_id: task_def}

def test_cli_create_task_missing_file(tmp_path):
    args = cli.build_parser().parse_args(["create-task", "--file", str(tmp_path / "missing.json")])

    assert cli.handle_create_task(args) is None

def _session(spec=None):
    session = Mock(spec=spec)
    session.request.return_value = Mock(status_code=200, json=Mock(return_value={"taskId": "x"}))
    return session

def test_client_sends_timeout_to_requests_session():
    session = _session(spec=requests.Session)

    QueueClient("http://queue", session=session, timeout=5).task("x")

    assert session.request.call_args.kwargs["timeout"] == 5

def test_client_omits_timeout_for_other_sessions():
    session = _session()

    QueueClient("http://queue", session=session, timeout=5).task("x")

    assert "timeout" not in session.request.call_args.kwargs
    assert session.request.call_args.args == ("GET", "http://queue/api/v1/task/x")
