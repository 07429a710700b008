# (c) Copyright Datacraft, 2026
"""Tests for the policy HTTP endpoints."""
import pytest
from fastapi.testclient import TestClient

from taskhub.app import app


@pytest.fixture
def client(stores):
    app.state.stores = stores
    yield TestClient(app)
    app.state.stores = None


def as_user(user_id):
    return {"X-User-Id": str(user_id)}


def test_me_returns_normalized_caller(client):
    response = client.get("/policies/me", headers=as_user(2))

    assert response.status_code == 200
    assert response.json() == {
        "id": "2",
        "tier": "manager",
        "hierarchy": 3,
        "division": "Eng",
        "department": "Eng.Backend",
        "role_label": "manager",
    }


def test_missing_or_unknown_caller_is_unauthenticated(client):
    response = client.get("/policies/me")

    assert response.status_code == 401
    assert response.json()["code"] == "unauthenticated"
    assert response.headers["WWW-Authenticate"] == "Bearer"

    assert client.get("/policies/me", headers=as_user(999)).status_code == 401


def test_project_edit_permission(client):
    allowed = client.get("/policies/projects/100/permissions/edit", headers=as_user(2))
    denied = client.get("/policies/projects/100/permissions/edit", headers=as_user(5))

    assert allowed.status_code == 200
    assert allowed.json() == {
        "allowed": True,
        "effect": "allow",
        "reason": "manager_hierarchy",
        "rule": "edit_project",
    }
    assert denied.status_code == 403
    assert denied.json() == {
        "detail": "Access denied",
        "code": "forbidden",
        "reason": "division_mismatch",
    }


def test_unknown_project_and_archived_project_are_not_found(client):
    missing = client.get("/policies/projects/999/permissions/edit", headers=as_user(1))
    archived = client.get(
        "/policies/tasks/permissions/create", params={"project_id": 101}, headers=as_user(4),
    )

    assert missing.status_code == 404
    assert archived.status_code == 404
    assert missing.json()["detail"] == archived.json()["detail"] == "Project not found"


def test_unknown_action_is_rejected(client):
    response = client.get("/policies/projects/100/permissions/explode", headers=as_user(1))

    assert response.status_code == 422


def test_personal_task_creation(client):
    response = client.get("/policies/tasks/permissions/create", headers=as_user(3))

    assert response.status_code == 200
    assert response.json()["reason"] == "personal_task"


def test_task_and_member_permissions(client):
    assert client.get("/policies/tasks/10/permissions/modify", headers=as_user(3)).status_code == 200
    assert client.get("/policies/tasks/12/permissions/delete", headers=as_user(2)).status_code == 403

    removal = client.get("/policies/projects/100/members/4/permissions/remove", headers=as_user(1))
    assert removal.status_code == 403
    assert removal.json()["reason"] == "cannot_remove_creator"


def test_user_view_permission(client):
    assert client.get("/policies/users/3/permissions/view", headers=as_user(2)).status_code == 200
    assert client.get("/policies/users/2/permissions/view", headers=as_user(3)).status_code == 403


def test_scope_and_subordinates(client):
    scope = client.get("/policies/scope", headers=as_user(2))
    subordinates = client.get("/policies/subordinates", headers=as_user(2))

    assert scope.json() == {
        "kind": "division_bounded",
        "division": "Eng",
        "hierarchy_less_than": 3,
        "subject_id": "2",
        "include_memberships": True,
    }
    assert sorted(s["id"] for s in subordinates.json()) == ["3", "4", "6"]


def test_evaluate_explicit_facts(client):
    response = client.post(
        "/policies/evaluate",
        headers=as_user(3),
        json={
            "check": "edit_project",
            "subject": {"id": 2, "role": "manager", "hierarchy": 2, "division": "Eng"},
            "creator": {"id": 1, "role": "manager", "hierarchy": 2, "division": "Eng"},
            "project": {"id": 10, "creator_id": 1},
        },
    )

    assert response.status_code == 200
    assert response.json()["allowed"] is False
    assert response.json()["reason"] == "hierarchy_not_greater"


def test_evaluate_task_creation_in_archived_project(client):
    response = client.post(
        "/policies/evaluate",
        headers=as_user(3),
        json={
            "check": "create_task",
            "subject": {"id": 1, "role": "admin"},
            "project": {"id": 10, "creator_id": 1, "status": "archived"},
        },
    )

    assert response.json()["reason"] == "project_inactive"


def test_evaluate_rejects_unknown_check(client):
    response = client.post("/policies/evaluate", headers=as_user(3), json={"check": "fly"})

    assert response.status_code == 422


def test_decision_log_is_admin_only(client):
    assert client.get("/policies/decisions", headers=as_user(3)).status_code == 403
    # no audit database configured
    assert client.get("/policies/decisions", headers=as_user(1)).status_code == 501


def test_missing_stores_is_unavailable(client):
    app.state.stores = None

    response = client.get("/policies/me", headers=as_user(1))

    assert response.status_code == 503
    assert response.json()["code"] == "unavailable"
