"""
Tests for the project endpoints.
"""
from datetime import date, timedelta


class TestProjects:
    """CRUD and ownership."""

    def test_create_uses_default_color(self, client, auth, project):
        assert project["color"] == "#3b82f6"
        assert project["name"] == "Launch"

    def test_create_rejects_reversed_dates(self, client, auth):
        response = client.post(
            "/projects/",
            json={"name": "Bad", "start_date": "2024-02-01", "end_date": "2024-01-01"},
            headers=auth.headers,
        )
        assert response.status_code == 422

    def test_create_rejects_bad_color(self, client, auth):
        response = client.post(
            "/projects/",
            json={"name": "Bad", "start_date": "2024-01-01", "end_date": "2024-01-02", "color": "blue"},
            headers=auth.headers,
        )
        assert response.status_code == 422

    def test_list_newest_first(self, client, auth, project):
        client.post(
            "/projects/",
            json={"name": "Second", "start_date": "2024-03-01", "end_date": "2024-03-31"},
            headers=auth.headers,
        )
        names = [item["name"] for item in client.get("/projects/", headers=auth.headers).json()]
        assert names == ["Second", "Launch"]

    def test_update(self, client, auth, project):
        response = client.patch(
            f"/projects/{project['id']}",
            json={"name": "Relaunch", "end_date": "2024-02-15"},
            headers=auth.headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Relaunch"
        assert body["end_date"] == "2024-02-15"
        assert body["start_date"] == "2024-01-01"

    def test_update_rejects_end_before_stored_start(self, client, auth, project):
        response = client.patch(
            f"/projects/{project['id']}", json={"end_date": "2023-12-01"}, headers=auth.headers
        )
        assert response.status_code == 400

    def test_delete_removes_tasks(self, client, auth, project, make_task):
        task = make_task("Design")
        response = client.delete(f"/projects/{project['id']}", headers=auth.headers)
        assert response.status_code == 204
        assert client.get(f"/projects/{project['id']}", headers=auth.headers).status_code == 404
        assert client.get(f"/tasks/{task['id']}", headers=auth.headers).status_code == 404

    def test_other_owner_cannot_see_project(self, client, project, other_auth):
        assert client.get(f"/projects/{project['id']}", headers=other_auth.headers).status_code == 404
        assert client.get("/projects/", headers=other_auth.headers).json() == []
        response = client.delete(f"/projects/{project['id']}", headers=other_auth.headers)
        assert response.status_code == 404


class TestCurrentProject:
    """The first project is created on demand."""

    def test_creates_first_project_once(self, client, auth):
        first = client.get("/projects/current", headers=auth.headers)
        assert first.status_code == 200
        body = first.json()
        assert body["name"] == "My First Project"
        assert body["description"] == "Welcome to your first project!"
        start = date.fromisoformat(body["start_date"])
        assert date.fromisoformat(body["end_date"]) == start + timedelta(days=30)

        again = client.get("/projects/current", headers=auth.headers).json()
        assert again["id"] == body["id"]
        assert len(client.get("/projects/", headers=auth.headers).json()) == 1

    def test_returns_newest_existing_project(self, client, auth, project):
        assert client.get("/projects/current", headers=auth.headers).json()["id"] == project["id"]
