# (c) Copyright Datacraft, 2026
"""Tests for resolving authorization facts from the stores."""
import asyncio

import pytest

from taskhub.core.features.policies import (
    ABSENT, UNAUTHENTICATED, Project, ResourceContext, ResourceContextResolver,
    RoleTier, Subject, Task, UnavailableError,
)


class FailingProjects:
    async def get_by_id(self, project_id):
        raise ConnectionError("project store down")


class SlowProjects:
    async def get_by_id(self, project_id):
        await asyncio.sleep(10)


@pytest.mark.asyncio
async def test_resolve_subject(stores):
    resolver = ResourceContextResolver(stores)

    subject = await resolver.resolve_subject(2)

    assert subject == Subject(
        id="2", tier=RoleTier.MANAGER, hierarchy=3, division="Eng",
        department="Eng.Backend", role_label="manager",
    )
    assert await resolver.resolve_subject(None) is UNAUTHENTICATED
    assert await resolver.resolve_subject("999") is UNAUTHENTICATED


@pytest.mark.asyncio
async def test_resolve_subject_store_failure_is_unavailable(stores):
    class BrokenUsers:
        async def get_by_id(self, user_id):
            raise ConnectionError("user store down")

    stores.users = BrokenUsers()

    with pytest.raises(UnavailableError) as exc_info:
        await ResourceContextResolver(stores).resolve_subject("2")

    assert "subject" in exc_info.value.failures


@pytest.mark.asyncio
async def test_project_context_carries_creator_and_members(stores):
    context = await ResourceContextResolver(stores).for_project(100)

    assert context.project == Project(id="100", creator_id="4")
    assert context.creator.id == "4"
    assert context.creator.hierarchy == 2
    assert context.members == frozenset({"3"})
    assert not context.degraded


@pytest.mark.asyncio
async def test_project_context_without_members(stores):
    context = await ResourceContextResolver(stores).for_project(100, with_members=False)

    assert context.members is ABSENT
    assert context.creator.id == "4"


@pytest.mark.asyncio
async def test_missing_project_is_absent_without_failure(stores):
    context = await ResourceContextResolver(stores).for_project(999)

    assert context.project is ABSENT
    assert context.creator is ABSENT
    assert not context.degraded


@pytest.mark.asyncio
async def test_failed_lookup_becomes_absent_and_is_recorded(stores):
    stores.projects = FailingProjects()

    context = await ResourceContextResolver(stores).for_project(100)

    assert context.project is ABSENT
    assert context.creator is ABSENT
    assert context.members == frozenset({"3"})
    assert context.degraded
    assert isinstance(context.failures["project"], ConnectionError)


@pytest.mark.asyncio
async def test_slow_lookup_times_out_as_failure(stores):
    stores.projects = SlowProjects()

    context = await ResourceContextResolver(stores, timeout=0.05).for_project(100)

    assert context.project is ABSENT
    assert "project" in context.failures


@pytest.mark.asyncio
async def test_project_and_members_are_fetched_concurrently(stores):
    # Each lookup waits for the other to start; sequential fetching would time out.
    project_started = asyncio.Event()
    members_started = asyncio.Event()

    class WaitingProjects:
        async def get_by_id(self, project_id):
            project_started.set()
            await members_started.wait()
            return {"id": project_id, "creator_id": 4}

    class WaitingMemberships:
        async def list_members(self, project_id):
            members_started.set()
            await project_started.wait()
            return {3}

    stores.projects = WaitingProjects()
    stores.memberships = WaitingMemberships()

    context = await ResourceContextResolver(stores, timeout=1.0).for_project(100)

    assert not context.degraded
    assert context.project.id == "100"
    assert context.members == frozenset({"3"})


@pytest.mark.asyncio
async def test_cancellation_propagates(stores):
    stores.projects = SlowProjects()
    resolver = ResourceContextResolver(stores)

    pending = asyncio.create_task(resolver.for_project(100))
    await asyncio.sleep(0)
    pending.cancel()

    with pytest.raises(asyncio.CancelledError):
        await pending


@pytest.mark.asyncio
async def test_task_context_includes_project_facts(stores):
    context = await ResourceContextResolver(stores).for_task(10)

    assert context.task == Task(id="10", project_id="100", assigned_to=frozenset({"3"}))
    assert context.project.id == "100"
    assert context.creator.id == "4"
    assert context.members == frozenset({"3"})

    facts = context.facts_for(Subject(id="3"))
    assert facts.is_assignee
    assert facts.is_member
    assert not facts.is_creator


@pytest.mark.asyncio
async def test_personal_task_context_has_no_project(stores):
    context = await ResourceContextResolver(stores).for_task(12)

    assert context.task.is_personal
    assert context.project is None
    assert context.members is ABSENT


@pytest.mark.asyncio
async def test_subordinates_are_listed_for_managers_only(stores):
    resolver = ResourceContextResolver(stores)
    manager = await resolver.resolve_subject(2)
    staff = await resolver.resolve_subject(3)

    subordinates = await resolver.list_subordinates(manager)

    assert sorted(u["id"] for u in subordinates) == [3, 4, 6]
    assert await resolver.list_subordinates(staff) == []


def test_snapshot_is_serializable():
    context = ResourceContext(project=Project(id="1", creator_id="2"), failures={"members": OSError()})

    assert context.snapshot() == {
        "project": "1",
        "project_status": "active",
        "task": "None",
        "creator": None,
        "member_count": None,
        "failures": ["members"],
    }
