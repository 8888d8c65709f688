import pytest


@pytest.fixture
def post(make_community, join, make_post, alumni):
    community = make_community()
    join(community["id"], alumni)
    return make_post(community["id"], alumni)


def comment(client, auth, user, post_id, content="Count me in", parent=None):
    payload = {"content": content}
    if parent is not None:
        payload["parent_comment_id"] = parent
    return client.post(f"/community-comments/post/{post_id}", json=payload, headers=auth(user))


def test_comment_and_reply(client, auth, alumni, post):
    top = comment(client, auth, alumni, post["id"])
    assert top.status_code == 201
    top_id = top.json()["data"]["id"]

    reply = comment(client, auth, alumni, post["id"], "Me too", parent=top_id)
    assert reply.status_code == 201
    assert reply.json()["data"]["parent_comment_id"] == top_id

    listing = client.get(f"/community-comments/post/{post['id']}", headers=auth(alumni))
    items = listing.json()["data"]["items"]
    assert len(items) == 1
    assert items[0]["reply_count"] == 1
    assert [r["content"] for r in items[0]["replies"]] == ["Me too"]

    detail = client.get(f"/community-posts/{post['id']}", headers=auth(alumni)).json()["data"]
    assert detail["comment_count"] == 2


def test_replies_are_one_level_deep(client, auth, alumni, post):
    top = comment(client, auth, alumni, post["id"]).json()["data"]
    reply = comment(client, auth, alumni, post["id"], "Reply", parent=top["id"]).json()["data"]

    nested = comment(client, auth, alumni, post["id"], "Nested", parent=reply["id"])

    assert nested.status_code == 400
    assert nested.json()["error"] == "Replies can only be one level deep"


def test_parent_must_belong_to_post(client, auth, alumni, post):
    response = comment(client, auth, alumni, post["id"], parent=9999)

    assert response.status_code == 404
    assert response.json()["error"] == "Parent comment not found"


def test_non_member_cannot_comment(client, auth, make_user, post):
    outsider = make_user()

    response = comment(client, auth, outsider, post["id"])

    assert response.status_code == 403


def test_cannot_comment_on_pending_post(client, auth, alumni, make_community, join, make_post):
    community = make_community(settings={"require_post_approval": True})
    join(community["id"], alumni)
    pending = make_post(community["id"], alumni)

    response = comment(client, auth, alumni, pending["id"])

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot comment on a post that is not approved"


def test_edit_and_soft_delete(client, auth, make_user, alumni, post):
    created = comment(client, auth, alumni, post["id"]).json()["data"]

    edited = client.patch(
        f"/community-comments/{created['id']}", json={"content": "Edited"}, headers=auth(alumni)
    )
    assert edited.json()["data"]["is_edited"] is True
    assert edited.json()["data"]["edited_at"] is not None

    stranger = make_user()
    denied = client.delete(f"/community-comments/{created['id']}", headers=auth(stranger))
    assert denied.status_code == 403

    deleted = client.delete(f"/community-comments/{created['id']}", headers=auth(alumni))
    assert deleted.json()["data"]["status"] == "deleted"

    listing = client.get(f"/community-comments/post/{post['id']}", headers=auth(alumni))
    assert listing.json()["data"]["total"] == 0


def test_moderator_rejects_comment(client, auth, staff, alumni, post):
    created = comment(client, auth, alumni, post["id"]).json()["data"]

    rejected = client.post(f"/community-comments/{created['id']}/reject", headers=auth(staff))

    assert rejected.json()["data"]["status"] == "rejected"
    detail = client.get(f"/community-posts/{post['id']}", headers=auth(alumni)).json()["data"]
    assert detail["comment_count"] == 0

    by_member = client.post(f"/community-comments/{created['id']}/approve", headers=auth(alumni))
    assert by_member.status_code == 403


def test_comment_likes_are_idempotent(client, auth, alumni, post):
    created = comment(client, auth, alumni, post["id"]).json()["data"]

    client.post(f"/community-comments/{created['id']}/like", headers=auth(alumni))
    liked = client.post(f"/community-comments/{created['id']}/like", headers=auth(alumni))
    assert liked.json()["data"] == {"comment_id": created["id"], "liked": True, "like_count": 1}

    client.delete(f"/community-comments/{created['id']}/like", headers=auth(alumni))
    unliked = client.delete(f"/community-comments/{created['id']}/like", headers=auth(alumni))
    assert unliked.json()["data"]["like_count"] == 0
