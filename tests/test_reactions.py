import pytest
from pymongo.errors import DuplicateKeyError

from identities import ALICE, BOB, CAROL, email
from lessonhub.community.reactions import (
    LOVE_REACTS, FAVORITES, ReactionState, toggle_reaction, reaction_state, subjects_for
)
from lessonhub.errors import ValidationFailed


@pytest.mark.asyncio
async def test_first_reaction_creates_record(db):
    state = await toggle_reaction(db[LOVE_REACTS], "L1", ALICE)

    assert state == ReactionState(is_member=True, total_count=1)
    record = await db[LOVE_REACTS].find_one({"lessonId": "L1"})
    assert record["users"] == [ALICE]


@pytest.mark.asyncio
async def test_toggle_twice_restores_original_state(db):
    coll = db[LOVE_REACTS]
    await toggle_reaction(coll, "L1", BOB)
    before = await reaction_state(coll, "L1", ALICE)

    await toggle_reaction(coll, "L1", ALICE)
    after = await toggle_reaction(coll, "L1", ALICE)

    assert after == before
    assert after == ReactionState(is_member=False, total_count=1)


@pytest.mark.asyncio
async def test_like_then_unlike_example(db):
    coll = db[LOVE_REACTS]
    first = await toggle_reaction(coll, "L1", ALICE)
    second = await toggle_reaction(coll, "L1", ALICE)

    assert (first.is_member, first.total_count) == (True, 1)
    assert (second.is_member, second.total_count) == (False, 0)


@pytest.mark.asyncio
async def test_n_distinct_participants_then_one_leaves(db):
    coll = db[FAVORITES]
    emails = [email(f"user{i}") for i in range(7)]
    for participant in emails:
        await toggle_reaction(coll, "L9", participant)

    for participant in emails:
        state = await reaction_state(coll, "L9", participant)
        assert state.is_member
        assert state.total_count == len(emails)

    state = await toggle_reaction(coll, "L9", emails[3])
    assert state == ReactionState(is_member=False, total_count=len(emails) - 1)
    record = await coll.find_one({"lessonId": "L9"})
    assert emails[3] not in record["users"]
    assert len(record["users"]) == len(set(record["users"]))


@pytest.mark.asyncio
async def test_participant_email_case_and_spacing_are_ignored(db):
    coll = db[LOVE_REACTS]
    shouted = f"  {ALICE.upper()} "

    liked = await toggle_reaction(coll, "L1", shouted)
    unliked = await toggle_reaction(coll, "L1", ALICE)

    assert liked == ReactionState(is_member=True, total_count=1)
    assert unliked == ReactionState(is_member=False, total_count=0)

    await toggle_reaction(coll, "L2", ALICE)
    assert (await reaction_state(coll, "L2", ALICE.upper())).is_member
    assert await subjects_for(coll, shouted) == ["L2"]


@pytest.mark.asyncio
async def test_missing_participant_is_rejected_before_storage(db):
    coll = db[LOVE_REACTS]
    with pytest.raises(ValidationFailed):
        await toggle_reaction(coll, "L1", "")
    with pytest.raises(ValidationFailed):
        await toggle_reaction(coll, "L1", "   ")
    assert coll.docs == []


@pytest.mark.asyncio
async def test_returned_state_is_reread_from_store(db):
    coll = db[LOVE_REACTS]
    await toggle_reaction(coll, "L1", BOB)

    # Another caller adds itself between our write and our read
    original_update = coll.update_one

    async def update_then_interleave(query, update, upsert=False):
        result = await original_update(query, update, upsert=upsert)
        await original_update({"lessonId": "L1"}, {"$addToSet": {"users": CAROL}})
        return result

    coll.update_one = update_then_interleave
    state = await toggle_reaction(coll, "L1", ALICE)

    assert state == ReactionState(is_member=True, total_count=3)


@pytest.mark.asyncio
async def test_lost_upsert_race_falls_back_to_add(db):
    coll = db[LOVE_REACTS]
    original_update = coll.update_one

    async def racing_update(query, update, upsert=False):
        if upsert:
            # Someone else created the record first
            await coll.insert_one({"lessonId": "L1", "users": [BOB]})
            raise DuplicateKeyError("E11000 duplicate key")
        return await original_update(query, update, upsert=upsert)

    coll.update_one = racing_update
    state = await toggle_reaction(coll, "L1", ALICE)

    assert state == ReactionState(is_member=True, total_count=2)


@pytest.mark.asyncio
async def test_state_for_unknown_subject(db):
    state = await reaction_state(db[FAVORITES], "nope", ALICE)
    assert state == ReactionState(is_member=False, total_count=0)


@pytest.mark.asyncio
async def test_subjects_for_lists_favorites(db):
    coll = db[FAVORITES]
    await toggle_reaction(coll, "L1", ALICE)
    await toggle_reaction(coll, "L2", ALICE)
    await toggle_reaction(coll, "L3", BOB)

    assert sorted(await subjects_for(coll, ALICE)) == ["L1", "L2"]
