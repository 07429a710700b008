# (c) Copyright Datacraft, 2026
"""In-memory stores shared by the policy tests."""
import pytest

from taskhub.core.config import Settings
from taskhub.core.features.policies import Stores


class InMemoryUsers:
    def __init__(self, users):
        self.users = {str(u["id"]): u for u in users}

    async def get_by_id(self, user_id):
        return self.users.get(str(user_id))

    async def list_subordinates(self, hierarchy, division):
        return [
            u for u in self.users.values()
            if u.get("division") == division and (u.get("hierarchy") or 1) < hierarchy
        ]


class InMemoryProjects:
    def __init__(self, projects):
        self.projects = {str(p["id"]): p for p in projects}

    async def get_by_id(self, project_id):
        return self.projects.get(str(project_id))


class InMemoryMemberships:
    def __init__(self, members):
        self.members = {str(k): set(v) for k, v in members.items()}

    async def list_members(self, project_id):
        return self.members.get(str(project_id), set())


class InMemoryTasks:
    def __init__(self, tasks):
        self.tasks = {str(t["id"]): t for t in tasks}

    async def get_by_id(self, task_id):
        return self.tasks.get(str(task_id))


USERS = [
    {"id": 1, "role": "admin", "hierarchy": 5, "division": "Eng", "department": "Eng"},
    {"id": 2, "role": "manager", "hierarchy": 3, "division": "Eng", "department": "Eng.Backend"},
    {"id": 3, "role": "staff", "hierarchy": 1, "division": "Eng", "department": "Eng.Backend"},
    {"id": 4, "role": "manager", "hierarchy": 2, "division": "Eng", "department": "Eng.Frontend"},
    {"id": 5, "role": "manager", "hierarchy": 4, "division": "Sales", "department": "Sales"},
    {"id": 6, "role": "staff", "hierarchy": 1, "division": "Eng", "department": "Engineering"},
    {"id": 7, "role": "hr", "hierarchy": 2, "division": "Ops", "department": "Eng"},
]

PROJECTS = [
    # created by manager 4 (Eng, rank 2)
    {"id": 100, "creator_id": 4, "status": "active"},
    {"id": 101, "creator_id": 4, "status": "archived"},
    # created by staff 3
    {"id": 102, "creator_id": 3, "status": "active"},
]

MEMBERS = {
    100: {3},
    101: {3},
    102: {3, 6},
}

TASKS = [
    {"id": 10, "project_id": 100, "assigned_to": [3]},
    {"id": 11, "project_id": 100, "assigned_to": []},
    {"id": 12, "project_id": None, "assigned_to": [6]},
    {"id": 13, "project_id": 102, "parent_id": 12, "assigned_to": []},
]


def make_stores(users=USERS, projects=PROJECTS, members=MEMBERS, tasks=TASKS):
    return Stores(
        users=InMemoryUsers(users),
        projects=InMemoryProjects(projects),
        memberships=InMemoryMemberships(members),
        tasks=InMemoryTasks(tasks),
    )


@pytest.fixture
def stores():
    return make_stores()


@pytest.fixture
def settings():
    return Settings(log_config=None, db_url=None, store_timeout_seconds=1.0)
