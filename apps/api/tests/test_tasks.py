from decimal import Decimal

from sqlalchemy import func, select

from app.models.task import Task
from app.models.task_review import TaskReview


def load_task(session_factory, task_id):
    with session_factory() as session:
        return session.get(Task, task_id)


def test_create_task_starts_pending(client, auth, alice, make_project):
    project = make_project("Alpha", [alice.id])

    res = client.post(
        "/tasks",
        json={
            "projectId": project["id"],
            "taskName": "  Write docs ",
            "expectedHours": "4",
            "actualHours": "4.5",
            "status": "approved",
        },
        headers=auth(alice),
    )
    assert res.status_code == 201
    task = res.json()["task"]
    assert task["taskName"] == "Write docs"
    assert task["employeeId"] == alice.id
    assert task["projectId"] == project["id"]
    assert task["status"] == "pending"
    assert task["approvedBy"] is None
    assert Decimal(task["expectedHours"]) == Decimal("4")
    assert Decimal(task["actualHours"]) == Decimal("4.5")


def test_expected_hours_is_optional(client, auth, alice, make_project):
    project = make_project("Alpha", [alice.id])

    res = client.post(
        "/tasks",
        json={"projectId": project["id"], "taskName": "Standup", "actualHours": 0.25},
        headers=auth(alice),
    )
    assert res.status_code == 201
    assert res.json()["task"]["expectedHours"] is None


def test_create_task_validation(client, auth, alice, make_project):
    project = make_project("Alpha", [alice.id])
    base = {"projectId": project["id"], "taskName": "Build", "actualHours": "1"}

    for override in (
        {"taskName": "  "},
        {"actualHours": "-1"},
        {"expectedHours": "-0.5"},
        {"actualHours": "1.234"},
        {"actualHours": None},
    ):
        res = client.post("/tasks", json={**base, **override}, headers=auth(alice))
        assert res.status_code == 400, override

    body = dict(base)
    del body["actualHours"]
    assert client.post("/tasks", json=body, headers=auth(alice)).status_code == 400


def test_any_employee_can_log_against_active_project(client, auth, admin, alice, bob, make_project):
    project = make_project("Alpha", [alice.id])
    body = {"projectId": project["id"], "taskName": "Build", "actualHours": "1"}

    res = client.post("/tasks", json=body, headers=auth(bob))
    assert res.status_code == 201
    assert res.json()["task"]["employeeId"] == bob.id

    assert client.post("/tasks", json=body, headers=auth(admin)).status_code == 201


def test_create_task_on_unknown_or_inactive_project(client, auth, admin, alice, make_project, session_factory):
    project = make_project("Alpha", [alice.id])
    body = {"taskName": "Build", "actualHours": "1"}

    res = client.post("/tasks", json={**body, "projectId": 999}, headers=auth(alice))
    assert res.status_code == 400
    assert res.json()["detail"] == "Project not found"

    client.delete(f"/projects/{project['id']}", headers=auth(admin))
    res = client.post("/tasks", json={**body, "projectId": project["id"]}, headers=auth(alice))
    assert res.status_code == 400

    with session_factory() as session:
        assert session.scalar(select(func.count()).select_from(Task)) == 0


def test_create_task_requires_token(client, make_project):
    project = make_project("Alpha")
    res = client.post("/tasks", json={"projectId": project["id"], "taskName": "Build", "actualHours": "1"})
    assert res.status_code == 401


def test_get_task_owner_or_admin(client, auth, admin, alice, bob, make_project, make_task):
    project = make_project("Alpha", [alice.id, bob.id])
    task = make_task(alice, project["id"])

    assert client.get(f"/tasks/{task['id']}", headers=auth(alice)).status_code == 200
    assert client.get(f"/tasks/{task['id']}", headers=auth(admin)).status_code == 200
    assert client.get(f"/tasks/{task['id']}", headers=auth(bob)).status_code == 403
    assert client.get("/tasks/999", headers=auth(alice)).status_code == 404


def test_owner_edits_pending_task(client, auth, alice, make_project, make_task):
    project = make_project("Alpha", [alice.id])
    task = make_task(alice, project["id"], actual="2", expected="3")

    res = client.put(
        f"/tasks/{task['id']}",
        json={"actualHours": "2.75", "description": "  paired with Bob  "},
        headers=auth(alice),
    )
    assert res.status_code == 200
    updated = res.json()["task"]
    assert Decimal(updated["actualHours"]) == Decimal("2.75")
    assert Decimal(updated["expectedHours"]) == Decimal("3")
    assert updated["description"] == "paired with Bob"
    assert updated["status"] == "pending"


def test_other_employee_cannot_edit(client, auth, alice, bob, make_project, make_task):
    project = make_project("Alpha", [alice.id, bob.id])
    task = make_task(alice, project["id"])

    res = client.put(f"/tasks/{task['id']}", json={"actualHours": "9"}, headers=auth(bob))
    assert res.status_code == 403


def test_non_admin_status_change_is_refused(client, auth, alice, make_project, make_task, session_factory):
    project = make_project("Alpha", [alice.id])
    task = make_task(alice, project["id"], actual="2")

    res = client.put(
        f"/tasks/{task['id']}",
        json={"status": "approved", "actualHours": "40"},
        headers=auth(alice),
    )
    assert res.status_code == 403
    assert res.json()["detail"] == "Only admins can change task status"

    row = load_task(session_factory, task["id"])
    assert row.status == "pending"
    assert row.actual_hours == Decimal("2")
    assert row.approved_by is None


def test_admin_approves_then_reopens(client, auth, admin, alice, make_project, make_task):
    project = make_project("Alpha", [alice.id])
    task = make_task(alice, project["id"])
    url = f"/tasks/{task['id']}"

    approved = client.put(url, json={"status": "approved"}, headers=auth(admin)).json()["task"]
    assert approved["status"] == "approved"
    assert approved["approvedBy"] == admin.id
    assert approved["approvedAt"] is not None
    assert approved["rejectionReason"] is None

    reopened = client.put(url, json={"status": "pending"}, headers=auth(admin)).json()["task"]
    assert reopened["status"] == "pending"
    assert reopened["approvedBy"] is None
    assert reopened["approvedAt"] is None
    assert reopened["rejectionReason"] is None


def test_admin_rejects_with_reason(client, auth, admin, alice, make_project, make_task):
    project = make_project("Alpha", [alice.id])
    task = make_task(alice, project["id"])

    res = client.put(
        f"/tasks/{task['id']}",
        json={"status": "rejected", "rejectionReason": " hours look inflated "},
        headers=auth(admin),
    )
    rejected = res.json()["task"]
    assert rejected["status"] == "rejected"
    assert rejected["approvedBy"] == admin.id
    assert rejected["rejectionReason"] == "hours look inflated"

    approved = client.put(f"/tasks/{task['id']}", json={"status": "approved"}, headers=auth(admin)).json()["task"]
    assert approved["rejectionReason"] is None


def test_invalid_status_is_rejected(client, auth, admin, alice, make_project, make_task):
    project = make_project("Alpha", [alice.id])
    task = make_task(alice, project["id"])

    res = client.put(f"/tasks/{task['id']}", json={"status": "done"}, headers=auth(admin))
    assert res.status_code == 400


def test_locked_task_cannot_be_edited_by_owner(client, auth, admin, alice, make_project, make_task, session_factory):
    project = make_project("Alpha", [alice.id])
    task = make_task(alice, project["id"], actual="2")
    client.put(f"/tasks/{task['id']}", json={"status": "approved"}, headers=auth(admin))

    res = client.put(f"/tasks/{task['id']}", json={"actualHours": "3"}, headers=auth(alice))
    assert res.status_code == 403
    assert res.json()["detail"] == "Cannot edit approved/rejected tasks"
    assert load_task(session_factory, task["id"]).actual_hours == Decimal("2")

    res = client.put(f"/tasks/{task['id']}", json={"actualHours": "3"}, headers=auth(admin))
    assert res.status_code == 200
    assert Decimal(res.json()["task"]["actualHours"]) == Decimal("3")


def test_delete_task_removes_its_reviews(client, auth, admin, alice, make_project, make_task, session_factory):
    project = make_project("Alpha", [alice.id])
    task = make_task(alice, project["id"])
    client.post("/reviews", json={"taskId": task["id"], "rating": 4}, headers=auth(admin))

    res = client.delete(f"/tasks/{task['id']}", headers=auth(alice))
    assert res.status_code == 200
    assert res.json() == {"message": "Task deleted successfully"}

    with session_factory() as session:
        assert session.get(Task, task["id"]) is None
        assert session.scalar(select(func.count()).select_from(TaskReview)) == 0

    assert client.get(f"/tasks/{task['id']}", headers=auth(alice)).status_code == 404


def test_delete_task_access(client, auth, admin, alice, bob, make_project, make_task):
    project = make_project("Alpha", [alice.id, bob.id])
    task = make_task(alice, project["id"])

    assert client.delete(f"/tasks/{task['id']}", headers=auth(bob)).status_code == 403
    assert client.delete(f"/tasks/{task['id']}", headers=auth(admin)).status_code == 200
    assert client.delete("/tasks/999", headers=auth(admin)).status_code == 404


def test_update_clears_nullable_fields_only(client, auth, alice, make_project, make_task):
    project = make_project("Alpha", [alice.id])
    task = make_task(alice, project["id"], actual="2", expected="3", name="Plan sprint")

    res = client.put(
        f"/tasks/{task['id']}",
        json={"expectedHours": None, "description": "   ", "actualHours": None, "taskName": None},
        headers=auth(alice),
    )
    assert res.status_code == 200
    updated = res.json()["task"]
    assert updated["expectedHours"] is None
    assert updated["description"] is None
    assert Decimal(updated["actualHours"]) == Decimal("2")
    assert updated["taskName"] == "Plan sprint"
