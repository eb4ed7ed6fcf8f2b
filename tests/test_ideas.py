"""Idea listing, creation, deletion and AI expansion."""

import pytest
from sqlalchemy import func, select

from app.models.idea import Idea
from app.models.idea_comment import IdeaComment
from app.models.idea_upvote import IdeaUpvote
from app.models.idea_vote import IdeaVote, VoteType
from app.models.market_research import MarketResearch
from app.schemas.idea import GeneratedIdea
from app.services import ai_client


# ===========================================
# CREATE / LIST / READ
# ===========================================


@pytest.mark.asyncio
async def test_create_idea(client, user, auth_headers):
    resp = await client.post("/ideas", json={"title": "X", "description": "Y"}, headers=auth_headers)

    assert resp.status_code == 200
    idea = resp.json()["data"]
    assert idea["title"] == "X"
    assert idea["description"] == "Y"
    assert idea["created_by"] == user.id
    assert idea["parent_idea_id"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"title": "X"}, {"description": "Y"}, {"title": "  ", "description": "Y"}])
async def test_create_idea_requires_title_and_description(client, auth_headers, payload):
    resp = await client.post("/ideas", json=payload, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Title and description are required"


@pytest.mark.asyncio
async def test_create_child_idea(client, user, auth_headers, make_idea):
    parent = await make_idea(user)

    resp = await client.post(
        "/ideas",
        json={"title": "Child", "description": "More", "parentIdeaId": parent.id},
        headers=auth_headers,
    )

    assert resp.json()["data"]["parent_idea_id"] == parent.id


@pytest.mark.asyncio
async def test_create_idea_with_unknown_parent(client, auth_headers):
    resp = await client.post(
        "/ideas",
        json={"title": "Child", "description": "More", "parentIdeaId": 42},
        headers=auth_headers,
    )

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_ideas_newest_first_with_author(client, user, auth_headers, make_idea):
    await make_idea(user, title="first")
    await make_idea(user, title="second")

    resp = await client.get("/ideas", headers=auth_headers)

    assert resp.status_code == 200
    ideas = resp.json()["data"]
    assert [i["title"] for i in ideas] == ["second", "first"]
    assert ideas[0]["user_email"] == user.email
    assert ideas[0]["comments_count"] == 0
    assert ideas[0]["vote_counts"] == {
        "help_build_count": 0,
        "use_service_count": 0,
        "upvote_count": 0,
        "downvote_count": 0,
        "net_votes": 0,
        "user_help_build_vote": False,
        "user_use_service_vote": False,
        "user_upvote_status": None,
    }


@pytest.mark.asyncio
async def test_list_ideas_aggregates_votes_per_viewer(
    client, user, make_user, make_idea, headers_for, session_factory
):
    other = await make_user("other@example.com")
    idea = await make_idea(user)
    async with session_factory() as session:
        session.add_all([
            IdeaVote(idea_id=idea.id, user_id=user.id, vote_type=VoteType.help_build),
            IdeaVote(idea_id=idea.id, user_id=other.id, vote_type=VoteType.help_build),
            IdeaVote(idea_id=idea.id, user_id=other.id, vote_type=VoteType.use_service),
            IdeaUpvote(idea_id=idea.id, user_id=user.id, vote_value=1),
            IdeaUpvote(idea_id=idea.id, user_id=other.id, vote_value=-1),
            IdeaComment(idea_id=idea.id, user_id=other.id, comment="nice"),
        ])
        await session.commit()

    mine = (await client.get("/ideas", headers=headers_for(user))).json()["data"][0]
    theirs = (await client.get("/ideas", headers=headers_for(other))).json()["data"][0]

    assert mine["vote_counts"]["help_build_count"] == 2
    assert mine["vote_counts"]["use_service_count"] == 1
    assert mine["vote_counts"]["upvote_count"] == 1
    assert mine["vote_counts"]["downvote_count"] == 1
    assert mine["vote_counts"]["net_votes"] == 0
    assert mine["comments_count"] == 1
    assert mine["vote_counts"]["user_help_build_vote"] is True
    assert mine["vote_counts"]["user_use_service_vote"] is False
    assert mine["vote_counts"]["user_upvote_status"] == 1
    assert theirs["vote_counts"]["user_use_service_vote"] is True
    assert theirs["vote_counts"]["user_upvote_status"] == -1


@pytest.mark.asyncio
async def test_read_single_idea(client, user, auth_headers, make_idea):
    idea = await make_idea(user, title="solo")

    resp = await client.get(f"/ideas/{idea.id}", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json()["data"]["title"] == "solo"
    assert "vote_counts" in resp.json()["data"]


@pytest.mark.asyncio
async def test_read_missing_idea(client, auth_headers):
    resp = await client.get("/ideas/999", headers=auth_headers)

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_non_integer_idea_id_is_bad_request(client, auth_headers):
    resp = await client.get("/ideas/abc", headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["success"] is False


# ===========================================
# DELETE
# ===========================================


@pytest.mark.asyncio
async def test_only_creator_can_delete(client, user, make_user, make_idea, headers_for):
    idea = await make_idea(user)
    intruder = await make_user("intruder@example.com")

    resp = await client.delete(f"/ideas/{idea.id}", headers=headers_for(intruder))

    assert resp.status_code == 403
    still_there = await client.get(f"/ideas/{idea.id}", headers=headers_for(user))
    assert still_there.status_code == 200


@pytest.mark.asyncio
async def test_delete_missing_idea(client, auth_headers):
    resp = await client.delete("/ideas/999", headers=auth_headers)

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_cascades_to_dependents(client, user, auth_headers, make_idea, session_factory):
    idea = await make_idea(user)
    child = await make_idea(user, title="child", parent_idea_id=idea.id)
    async with session_factory() as session:
        session.add_all([
            IdeaVote(idea_id=idea.id, user_id=user.id, vote_type=VoteType.use_service),
            IdeaUpvote(idea_id=idea.id, user_id=user.id, vote_value=1),
            IdeaComment(idea_id=idea.id, user_id=user.id, comment="mine"),
            MarketResearch(idea_id=idea.id, research_data="# Report"),
        ])
        await session.commit()

    resp = await client.delete(f"/ideas/{idea.id}", headers=auth_headers)

    assert resp.status_code == 200
    async with session_factory() as session:
        for model in (IdeaVote, IdeaUpvote, IdeaComment, MarketResearch):
            count = (await session.execute(select(func.count()).select_from(model))).scalar()
            assert count == 0, model.__name__
        orphan = (await session.execute(select(Idea).where(Idea.id == child.id))).scalar_one()
    assert orphan.parent_idea_id is None


# ===========================================
# POST /ideas/generate
# ===========================================


@pytest.mark.asyncio
async def test_generate_saves_children_of_root(client, user, auth_headers, make_idea, monkeypatch):
    root = await make_idea(user, title="Root", description="Root desc")
    calls = []

    async def fake_generate(title, description, context, max_ideas):
        calls.append((title, description, context, max_ideas))
        return [GeneratedIdea(title=f"Idea {n}", description="d") for n in range(2)]

    monkeypatch.setattr(ai_client, "generate_ideas", fake_generate)

    resp = await client.post(
        "/ideas/generate",
        json={"rootIdeaId": root.id, "context": "for students", "maxIdeas": 25},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    assert calls == [("Root", "Root desc", "for students", 10)]
    saved = resp.json()["data"]
    assert [i["title"] for i in saved] == ["Idea 0", "Idea 1"]
    assert {i["parent_idea_id"] for i in saved} == {root.id}
    assert {i["created_by"] for i in saved} == {user.id}
    assert resp.json()["message"] == "Generated 2 new ideas"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"context": "c", "maxIdeas": 3},
    {"rootIdeaId": 1, "maxIdeas": 3},
    {"rootIdeaId": 1, "context": "c"},
    {"rootIdeaId": 1, "context": "c", "maxIdeas": 0},
])
async def test_generate_requires_all_fields(client, auth_headers, payload):
    resp = await client.post("/ideas/generate", json=payload, headers=auth_headers)

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_generate_with_unknown_root(client, auth_headers):
    resp = await client.post(
        "/ideas/generate", json={"rootIdeaId": 7, "context": "c", "maxIdeas": 3}, headers=auth_headers
    )

    assert resp.status_code == 404
    assert resp.json()["message"] == "Root idea not found"


@pytest.mark.asyncio
async def test_generate_reports_ai_failure(client, user, auth_headers, make_idea, monkeypatch, session_factory):
    root = await make_idea(user)

    async def broken(*args, **kwargs):
        raise ai_client.AIServiceError("boom")

    monkeypatch.setattr(ai_client, "generate_ideas", broken)

    resp = await client.post(
        "/ideas/generate", json={"rootIdeaId": root.id, "context": "c", "maxIdeas": 3}, headers=auth_headers
    )

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Failed to generate ideas"}
    async with session_factory() as session:
        assert (await session.execute(select(func.count(Idea.id)))).scalar() == 1
