"""Tests for the event people service."""

from __future__ import annotations

import uuid

import pytest

from hackportal.core.results import Err, Ok
from hackportal.services import people as people_service
from hackportal_shared.schemas.common import ErrorKind, PersonType
from hackportal_shared.schemas.people import EventPersonCreate, EventPersonUpdate


async def _create(ctx, **fields):
    fields.setdefault("person_type", "mentor")
    result = await people_service.create_event_person(ctx, EventPersonCreate(**fields))
    assert isinstance(result, Ok), result
    return result.data


class TestCreatePerson:
    async def test_create_trims_text_and_skills(self, seed, make_ctx):
        ctx = make_ctx(seed.alice, seed.org_a)
        person = await _create(
            ctx,
            full_name="  Grace Hopper ",
            email=" grace@example.com ",
            company="",
            skills=[" COBOL ", "", "compilers"],
        )
        assert person.full_name == "Grace Hopper"
        assert person.email == "grace@example.com"
        assert person.company is None
        assert person.skills == ["COBOL", "compilers"]
        assert person.person_type == PersonType.MENTOR
        assert person.created_by == seed.alice

    async def test_full_name_is_required(self, seed, make_ctx):
        ctx = make_ctx(seed.alice, seed.org_a)
        result = await people_service.create_event_person(
            ctx, EventPersonCreate(person_type="judge", full_name="  ")
        )
        assert result == Err(ErrorKind.VALIDATION_FAILED, "Full name is required", field="full_name")

    @pytest.mark.parametrize("person_type", ["speaker", "Mentor", ""])
    async def test_invalid_person_type(self, seed, make_ctx, person_type):
        ctx = make_ctx(seed.alice, seed.org_a)
        result = await people_service.create_event_person(
            ctx, EventPersonCreate(person_type=person_type, full_name="Ada")
        )
        assert result == Err(ErrorKind.VALIDATION_FAILED, "Invalid person type", field="person_type")

    async def test_non_member_cannot_create(self, seed, make_ctx):
        result = await people_service.create_event_person(
            make_ctx(seed.carol, seed.org_a), EventPersonCreate(person_type="judge", full_name="Ada")
        )
        assert result.kind == ErrorKind.NOT_A_MEMBER

    async def test_create_invalidates_people_route(self, seed, make_ctx, cache):
        await _create(make_ctx(seed.alice, seed.org_a), full_name="Linus")
        assert cache.paths == ["/people"]


class TestListPeople:
    async def test_filter_by_type_and_tenant(self, seed, make_ctx):
        alice = make_ctx(seed.alice, seed.org_a)
        judge = await _create(alice, full_name="Judge Judy", person_type="judge")
        await _create(alice, full_name="Volunteer Val", person_type="volunteer")
        await _create(make_ctx(seed.carol, seed.org_b), full_name="Other Judge", person_type="judge")

        judges = await people_service.list_event_people(alice, PersonType.JUDGE)
        everyone = await people_service.list_event_people(alice)

        assert [p.id for p in judges.data] == [judge.id]
        assert {p.full_name for p in everyone.data} == {"Judge Judy", "Volunteer Val"}

    async def test_invalid_filter(self, seed, make_ctx):
        result = await people_service.list_event_people(make_ctx(seed.alice, seed.org_a), "alien")
        assert result.message == "Invalid person type"


class TestUpdateDeletePerson:
    async def test_partial_update(self, seed, make_ctx, cache):
        ctx = make_ctx(seed.alice, seed.org_a)
        person = await _create(ctx, full_name="Margaret", company="NASA", phone="555-0100")
        cache.paths.clear()

        result = await people_service.update_event_person(
            ctx, person.id, EventPersonUpdate(company=None, notes="Keynote")
        )
        updated = result.data
        assert updated.company is None
        assert updated.notes == "Keynote"
        assert updated.phone == "555-0100"
        assert cache.paths == ["/people"]

    async def test_empty_name_is_rejected(self, seed, make_ctx):
        ctx = make_ctx(seed.alice, seed.org_a)
        person = await _create(ctx, full_name="Margaret")
        result = await people_service.update_event_person(ctx, person.id, EventPersonUpdate(full_name=""))
        assert result.message == "Full name cannot be empty"
        assert (await people_service.get_event_person(ctx, person.id)).data.full_name == "Margaret"

    async def test_other_tenant_sees_not_found(self, seed, make_ctx):
        person = await _create(make_ctx(seed.alice, seed.org_a), full_name="Private")
        carol = make_ctx(seed.carol, seed.org_b)

        assert (await people_service.get_event_person(carol, person.id)).message == "Person not found"
        assert (await people_service.delete_event_person(carol, person.id)).kind == ErrorKind.NOT_FOUND

    async def test_delete(self, seed, make_ctx):
        ctx = make_ctx(seed.bob, seed.org_a)
        person = await _create(ctx, full_name="Short-lived")
        assert await people_service.delete_event_person(ctx, person.id) == Ok(None)
        assert (await people_service.get_event_person(ctx, person.id)).kind == ErrorKind.NOT_FOUND

    async def test_delete_unknown(self, seed, make_ctx):
        result = await people_service.delete_event_person(make_ctx(seed.alice, seed.org_a), uuid.uuid4())
        assert result == Err(ErrorKind.NOT_FOUND, "Person not found")
