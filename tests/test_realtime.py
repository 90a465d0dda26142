"""
Tests for the live task websocket.
"""
import pytest
from starlette.websockets import WebSocketDisconnect

from conftest import build_chain, tree_depth


def _url(project_id, token):
    return f"/ws/projects/{project_id}/tasks?token={token}"


class TestTaskSocket:
    """Snapshots pushed over the websocket."""

    def test_initial_snapshot(self, client, auth, project, make_task):
        make_task("Design")
        with client.websocket_connect(_url(project["id"], auth.token)) as ws:
            message = ws.receive_json()
        assert message["type"] == "snapshot"
        assert message["reason"] == "connected"
        assert message["project_id"] == project["id"]
        assert [task["title"] for task in message["tasks"]] == ["Design"]

    def test_committed_change_pushes_new_snapshot(self, client, auth, project, make_task):
        with client.websocket_connect(_url(project["id"], auth.token)) as ws:
            assert ws.receive_json()["tasks"] == []
            make_task("Design")
            message = ws.receive_json()
        assert message["reason"] == "insert"
        assert [task["title"] for task in message["tasks"]] == ["Design"]
        assert message["token"] > 1

    def test_ping_and_refresh(self, client, auth, project):
        with client.websocket_connect(_url(project["id"], auth.token)) as ws:
            ws.receive_json()
            ws.send_json({"type": "ping"})
            assert ws.receive_json()["type"] == "pong"
            ws.send_json({"type": "refresh"})
            assert ws.receive_json()["reason"] == "refresh"

    def test_deep_tree_snapshot(self, client, auth, project, make_task):
        build_chain(make_task, 400)
        with client.websocket_connect(_url(project["id"], auth.token)) as ws:
            message = ws.receive_json()
        assert message["reason"] == "connected"
        assert tree_depth(message["tasks"]) == 401

    def test_deleting_project_notifies_subscribers(self, client, auth, project, make_task):
        root = make_task("Root")
        make_task("Child", parent_id=root["id"])
        with client.websocket_connect(_url(project["id"], auth.token)) as ws:
            assert len(ws.receive_json()["tasks"]) == 1
            response = client.delete(f"/projects/{project['id']}", headers=auth.headers)
            assert response.status_code == 204
            message = ws.receive_json()
        assert message["reason"] == "delete"
        assert message["tasks"] == []

    def test_bad_token_is_refused(self, client, project):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(_url(project["id"], "garbage")) as ws:
                ws.receive_json()
        assert exc_info.value.code == 1008

    def test_foreign_project_is_refused(self, client, project, other_auth):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(_url(project["id"], other_auth.token)) as ws:
                ws.receive_json()
        assert exc_info.value.code == 1008
