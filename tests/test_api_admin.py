from datetime import timedelta

from conftest import add_idea
from ideation.models.notification import Notification, NotificationType
from ideation.utils.timeutil import utcnow


async def add_notifications(session_factory, recipient, sender, count):
    now = utcnow()
    async with session_factory() as db:
        for n in range(count):
            db.add(Notification(
                recipient_user_id=recipient,
                sender_user_id=sender,
                type=NotificationType.idea_mention,
                entity_id=f"idea-{n}",
                idea_id=f"idea-{n}",
                message=f"mention {n}",
                created_at=now - timedelta(minutes=n),
            ))
        await db.commit()


# ── Notifications ──

async def test_notification_list_and_read(client_for, session_factory, alice, bob):
    await add_notifications(session_factory, alice.user_id, bob.user_id, 25)
    api = client_for(alice.user_id)

    listing = (await api.get("/notifications")).json()
    assert listing["unread_count"] == 25
    assert len(listing["notifications"]) == 20
    assert listing["notifications"][0]["message"] == "mention 0"

    first_id = listing["notifications"][0]["id"]
    read = await api.post(f"/notifications/{first_id}/read")
    assert read.json()["read"] is True
    assert (await api.get("/notifications")).json()["unread_count"] == 24

    assert (await api.post("/notifications/read-all")).status_code == 200
    assert (await api.get("/notifications")).json()["unread_count"] == 0


async def test_cannot_read_someone_elses_notification(client_for, session_factory, alice, bob):
    await add_notifications(session_factory, alice.user_id, bob.user_id, 1)
    [notification] = (await client_for(alice.user_id).get("/notifications")).json()["notifications"]

    response = await client_for(bob.user_id).post(f"/notifications/{notification['id']}/read")

    assert response.status_code == 404


# ── Admin ──

async def test_admin_routes_require_admin(client, client_for, alice):
    assert (await client.get("/admin/players")).status_code == 401
    assert (await client_for(alice.user_id).get("/admin/players")).status_code == 403
    assert (await client_for(alice.user_id).post("/admin/recap")).status_code == 403


async def test_admin_lists_players_and_invites(client_for, alice, admin):
    api = client_for(admin.user_id)

    players = (await api.get("/admin/players")).json()
    assert {(p["email"], p["is_admin"]) for p in players} == {
        ("alice@corp.io", False),
        ("root@corp.io", True),
    }

    created = await api.post("/admin/invites", json={"email": "Dana@Corp.io", "first_name": "Dana"})
    assert created.status_code == 201
    assert created.json()["email"] == "dana@corp.io"

    duplicate = await api.post("/admin/invites", json={"email": "dana@corp.io"})
    assert duplicate.status_code == 400

    emails = [i["email"] for i in (await api.get("/admin/invites")).json()]
    assert "dana@corp.io" in emails


async def test_admin_runs_recap(client_for, session_factory, alice, bob, admin):
    await add_notifications(session_factory, alice.user_id, bob.user_id, 2)

    first = (await client_for(admin.user_id).post("/admin/recap")).json()
    second = (await client_for(admin.user_id).post("/admin/recap")).json()

    assert first["notifications_marked"] == 2
    assert first["emails_sent"] == 1
    assert second["notifications_marked"] == 0


async def test_admin_approves_ideas(client_for, session_factory, alice, admin):
    idea = await add_idea(session_factory, alice.user_id, 1)

    denied = await client_for(alice.user_id).post(f"/ideas/{idea.id}/approve")
    approved = await client_for(admin.user_id).post(f"/ideas/{idea.id}/approve")

    assert denied.status_code == 403
    assert approved.json()["approved"] is True


# ── Profile ──

async def test_update_profile(client_for, alice):
    api = client_for(alice.user_id)

    response = await api.patch("/players/me", json={"team": "Ops", "receive_recap_emails": False})

    assert response.status_code == 200
    assert response.json()["team"] == "Ops"
    assert response.json()["receive_recap_emails"] is False
    assert response.json()["display_name"] == "Alice"


async def test_upload_profile_picture(client_for, alice, tmp_path, monkeypatch):
    monkeypatch.setattr("ideation.services.storage.settings.MEDIA_ROOT", str(tmp_path))
    api = client_for(alice.user_id)

    response = await api.post(
        "/players/me/picture",
        files={"file": ("me.png", b"\x89PNG fake", "image/png")},
    )

    assert response.status_code == 200
    assert response.json()["profile_pic"] == f"/media/profile_pics/{alice.user_id}/me.png"
    assert (tmp_path / "profile_pics" / alice.user_id / "me.png").read_bytes() == b"\x89PNG fake"
