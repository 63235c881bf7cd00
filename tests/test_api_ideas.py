from datetime import timedelta

from sqlalchemy import select

from ideation.models.evaluation import Evaluation, evaluation_id
from ideation.models.notification import Notification
from ideation.models.vote import Vote
from ideation.utils.timeutil import utcnow


def idea_payload(title="Solar roofs", **overrides):
    payload = {
        "idea_title": title,
        "short_description": f"{title} for every site",
        "reasoning": "Cuts the energy bill",
        "cost_estimate": "$1M+",
        "feasibility_estimate": "Very Easy To do",
        "ideation_mission": "E2E Touchless Innovation",
        "areas": ["Energy"],
    }
    payload.update(overrides)
    return payload


async def notifications_for(session_factory, user_id):
    async with session_factory() as db:
        result = await db.execute(
            select(Notification).where(Notification.recipient_user_id == user_id)
        )
        return result.scalars().all()


# ── Submission ──

async def test_create_idea_numbers_and_self_evaluation(client_for, session_factory, alice):
    api = client_for(alice.user_id)

    first = await api.post("/ideas", json=idea_payload())
    second = await api.post("/ideas", json=idea_payload("Rain tanks"))

    assert first.status_code == 201
    assert [first.json()["idea_number"], second.json()["idea_number"]] == [1, 2]
    assert first.json()["approved"] is False
    assert first.json()["image_url"]

    idea_id = first.json()["id"]
    async with session_factory() as db:
        evaluation = await db.get(Evaluation, evaluation_id(alice.user_id, idea_id))
    assert evaluation.impact == "$1M+"
    assert evaluation.feasibility == "Very Easy To do"
    assert evaluation.idea_owner_user_id == alice.user_id


async def test_create_idea_validates_input(client_for, alice):
    api = client_for(alice.user_id)

    too_short = await api.post("/ideas", json=idea_payload("No"))
    too_long = await api.post("/ideas", json=idea_payload("x" * 31))
    blank = await api.post("/ideas", json=idea_payload(reasoning="  "))
    bad_cost = await api.post("/ideas", json=idea_payload(cost_estimate="a lot"))
    too_many = await api.post("/ideas", json=idea_payload(inspired_by=["a", "b", "c", "d"]))

    assert too_short.status_code == 400
    assert too_long.status_code == 400
    assert blank.status_code == 400
    assert bad_cost.status_code == 400
    assert too_many.status_code == 422


async def test_inspirations_are_cached(client_for, alice, bob):
    original = (await client_for(alice.user_id).post("/ideas", json=idea_payload())).json()

    response = await client_for(bob.user_id).post(
        "/ideas", json=idea_payload("Solar car park", inspired_by=[original["id"]])
    )

    assert response.status_code == 201
    [ref] = response.json()["inspired_by"]
    assert ref == {
        "id": original["id"],
        "idea_title": "Solar roofs",
        "image_url": original["image_url"],
        "idea_number": 1,
    }


async def test_unknown_inspiration_is_rejected(client_for, alice):
    response = await client_for(alice.user_id).post("/ideas", json=idea_payload(inspired_by=["missing"]))
    assert response.status_code == 404


# ── Tags and mentions ──

async def test_tagging_notifies_new_players_only(client_for, session_factory, alice, bob, admin):
    api = client_for(alice.user_id)
    idea = (await api.post("/ideas", json=idea_payload(tagged_users=[bob.user_id]))).json()

    assert len(await notifications_for(session_factory, bob.user_id)) == 1

    same = await api.put(f"/ideas/{idea['id']}/tags", json={"tagged_users": [bob.user_id]})
    assert same.status_code == 200
    assert len(await notifications_for(session_factory, bob.user_id)) == 1

    more = await api.put(f"/ideas/{idea['id']}/tags", json={"tagged_users": [bob.user_id, admin.user_id]})
    assert more.json()["tagged_users"] == [bob.user_id, admin.user_id]
    [notification] = await notifications_for(session_factory, admin.user_id)
    assert notification.message == 'Alice mentioned you in an idea: "Solar roofs for every site"'


async def test_only_creator_can_retag(client_for, alice, bob):
    idea = (await client_for(alice.user_id).post("/ideas", json=idea_payload())).json()

    response = await client_for(bob.user_id).put(f"/ideas/{idea['id']}/tags", json={"tagged_users": []})

    assert response.status_code == 403


async def test_tagging_unknown_player_is_rejected(client_for, alice):
    response = await client_for(alice.user_id).post("/ideas", json=idea_payload(tagged_users=["ghost"]))
    assert response.status_code == 400


async def test_comment_mentions_by_name(client_for, session_factory, alice, bob):
    idea = (await client_for(alice.user_id).post("/ideas", json=idea_payload())).json()

    response = await client_for(bob.user_id).post(
        f"/ideas/{idea['id']}/comments", json={"text": "Great one @Alice Archer, count me in"}
    )

    assert response.status_code == 201
    assert response.json()["tagged_users"] == [alice.user_id]
    [notification] = await notifications_for(session_factory, alice.user_id)
    assert notification.entity_id == response.json()["id"]
    assert notification.idea_id == idea["id"]
    assert notification.message == 'Bob mentioned you in a comment on: "Solar roofs for every site"'


async def test_comments_replies_and_likes(client_for, alice, bob):
    idea = (await client_for(alice.user_id).post("/ideas", json=idea_payload())).json()
    api = client_for(bob.user_id)

    first = (await api.post(f"/ideas/{idea['id']}/comments", json={"text": "First"})).json()
    reply = await api.post(f"/ideas/{idea['id']}/comments", json={"text": "Reply", "parent_id": first["id"]})
    assert reply.status_code == 201

    listing = await api.get(f"/ideas/{idea['id']}/comments")
    assert [c["text"] for c in listing.json()] == ["First", "Reply"]

    liked = await client_for(alice.user_id).post(f"/comments/{first['id']}/like")
    assert liked.json()["likes"] == [alice.user_id]
    unliked = await client_for(alice.user_id).post(f"/comments/{first['id']}/like")
    assert unliked.json()["likes"] == []


async def test_empty_comment_is_rejected(client_for, alice):
    idea = (await client_for(alice.user_id).post("/ideas", json=idea_payload())).json()
    response = await client_for(alice.user_id).post(f"/ideas/{idea['id']}/comments", json={"text": "   "})
    assert response.status_code == 400


# ── Votes ──

async def test_vote_toggle_and_overwrite(client_for, session_factory, alice, bob):
    idea = (await client_for(alice.user_id).post("/ideas", json=idea_payload())).json()
    api = client_for(bob.user_id)
    url = f"/ideas/{idea['id']}/vote"

    assert (await api.post(url, json={"vote": "agree"})).json()["vote"] == "agree"
    assert (await api.post(url, json={"vote": "agree"})).json()["vote"] is None
    async with session_factory() as db:
        assert (await db.execute(select(Vote))).scalars().all() == []

    await api.post(url, json={"vote": "agree"})
    assert (await api.post(url, json={"vote": "disagree"})).json()["vote"] == "disagree"

    tally = (await api.get(f"/ideas/{idea['id']}/votes")).json()
    assert tally == {"idea_id": idea["id"], "agree": 0, "disagree": 1, "my_vote": "disagree"}


# ── Evaluations ──

async def test_evaluation_upsert_and_category(client_for, alice, bob):
    idea = (await client_for(alice.user_id).post("/ideas", json=idea_payload())).json()
    api = client_for(bob.user_id)
    url = f"/ideas/{idea['id']}/evaluation"

    first = await api.put(url, json={"impact": "$50K-$100K", "feasibility": "Challenging"})
    assert first.json()["category"] == "red"
    second = await api.put(url, json={"impact": "$1M+", "feasibility": "Manageable"})
    assert second.json()["category"] == "green"
    assert second.json()["id"] == f"{bob.user_id}_{idea['id']}"

    listing = (await api.get(f"/ideas/{idea['id']}/evaluations")).json()
    assert len(listing) == 2
    assert {e["evaluator_user_id"] for e in listing} == {alice.user_id, bob.user_id}

    bad = await api.put(url, json={"impact": "huge", "feasibility": "Manageable"})
    assert bad.status_code == 400


async def test_assessments_and_savings(client_for, alice, bob):
    idea = (await client_for(alice.user_id).post("/ideas", json=idea_payload())).json()
    await client_for(bob.user_id).put(
        f"/ideas/{idea['id']}/evaluation", json={"impact": "Negative", "feasibility": "Very Challenging"}
    )
    api = client_for(bob.user_id)

    [assessment] = (await api.get("/assessments")).json()
    assert assessment["evaluation_count"] == 2
    assert assessment["avg_impact"] == (7 + 1) / 2
    assert assessment["avg_feasibility"] == (5 + 1) / 2

    savings = (await api.get("/assessments/savings")).json()
    assert savings["total_identified_savings"] == (1_500_000 * 0.9 + 0) / 2
    assert savings["ideas_with_evaluations"] == 1

    scales = (await api.get("/evaluation-scales")).json()
    assert scales["impact_options"][-1] == "$1M+"


# ── Listing filters ──

async def test_idea_filters(client_for, alice, bob):
    alice_api = client_for(alice.user_id)
    bob_api = client_for(bob.user_id)
    mine = (await alice_api.post("/ideas", json=idea_payload())).json()
    theirs = (await bob_api.post("/ideas", json=idea_payload("Bike sheds", ideation_mission="Other"))).json()

    async def ids(**params):
        response = await alice_api.get("/ideas", params=params)
        return [i["id"] for i in response.json()]

    assert await ids() == [theirs["id"], mine["id"]]
    assert await ids(filter="mine") == [mine["id"]]
    assert await ids(mission="Other") == [theirs["id"]]

    await alice_api.post(f"/ideas/{theirs['id']}/vote", json={"vote": "agree"})
    assert await ids(filter="voted") == [theirs["id"]]
    assert await ids(filter="unvoted") == [mine["id"]]

    await alice_api.post(f"/ideas/{theirs['id']}/comments", json={"text": "nice"})
    assert await ids(filter="commented") == [theirs["id"]]

    await alice_api.put(
        f"/ideas/{theirs['id']}/evaluation", json={"impact": "Negative", "feasibility": "Manageable"}
    )
    assert await ids(filter="top") == [mine["id"]]
    assert await ids(filter="medium") == [theirs["id"]]
    assert await ids(filter="low") == []


# ── Phases ──

async def test_closed_phases_reject_writes(client_for, alice, admin):
    admin_api = client_for(admin.user_id)
    idea = (await client_for(alice.user_id).post("/ideas", json=idea_payload())).json()
    past = (utcnow() - timedelta(hours=1)).isoformat()

    response = await admin_api.put("/admin/closing-dates/idea_sharing", json={"closes_at": past})
    assert response.status_code == 200
    assert response.json()["open"] == {"idea_sharing": False, "commenting": True, "evaluation": True}
    assert response.json()["disclaimer"].startswith("The idea sharing period has ended")

    api = client_for(alice.user_id)
    assert (await api.post("/ideas", json=idea_payload("Too late"))).status_code == 403
    assert (await api.post(f"/ideas/{idea['id']}/comments", json={"text": "still fine"})).status_code == 201

    await admin_api.put("/admin/closing-dates/commenting", json={"closes_at": past})
    assert (await api.post(f"/ideas/{idea['id']}/comments", json={"text": "late"})).status_code == 403

    phases = (await api.get("/phases")).json()
    assert set(phases["closing_dates"]) == {"idea_sharing", "commenting"}


# ── Rankings ──

async def test_rankings_endpoint(client_for, alice, bob):
    await client_for(alice.user_id).post("/ideas", json=idea_payload())
    api = client_for(bob.user_id)

    ranking = (await api.get("/rankings")).json()
    assert [p["user_id"] for p in ranking["players"]] == [alice.user_id, bob.user_id]
    # idea 20, own evaluation 2, one active day 5
    assert ranking["players"][0]["xp"] == 27
    assert ranking["totals"]["xp"] == 27

    by_name = (await api.get("/rankings", params={"sort": "display_name", "direction": "ascending"})).json()
    assert [p["display_name"] for p in by_name["players"]] == ["Alice", "Bob"]


async def test_player_stats_and_activity(client_for, alice):
    api = client_for(alice.user_id)
    await api.post("/ideas", json=idea_payload())

    stats = (await api.get(f"/players/{alice.user_id}/stats")).json()
    assert (stats["ideas_created"], stats["evaluations_made"], stats["xp"]) == (1, 1, 27)

    [today] = (await api.get("/players/me/activity")).json()
    assert today["ideas_created"] == 1
    assert today["xp_collected"] == 22
