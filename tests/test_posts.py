from datetime import timedelta

from alumni.core import permissions
from alumni.models import CommunityPost, PollVote


def test_member_creates_approved_post(client, auth, alumni, make_community, join):
    community = make_community()
    join(community["id"], alumni)

    response = client.post(
        f"/community-posts/community/{community['id']}",
        json={"title": "  Homecoming  ", "content": "See you there", "tags": ["Events", " reunion "]},
        headers=auth(alumni),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Post created successfully"
    assert body["data"]["status"] == "approved"
    assert body["data"]["title"] == "Homecoming"
    assert body["data"]["tags"] == ["events", "reunion"]
    assert body["data"]["author"]["id"] == alumni.id


def test_non_member_cannot_post(client, auth, alumni, make_community):
    community = make_community()

    response = client.post(
        f"/community-posts/community/{community['id']}",
        json={"title": "Hi", "content": "Let me in"},
        headers=auth(alumni),
    )

    assert response.status_code == 403


def test_require_post_approval(client, auth, make_user, make_community, join, make_moderator):
    community = make_community(settings={"require_post_approval": True})
    member = make_user()
    moderator = make_user()
    join(community["id"], member)
    make_moderator(community["id"], moderator)

    member_post = client.post(
        f"/community-posts/community/{community['id']}",
        json={"title": "Job lead", "content": "Hiring engineers"},
        headers=auth(member),
    )
    moderator_post = client.post(
        f"/community-posts/community/{community['id']}",
        json={"title": "Welcome", "content": "Read the rules"},
        headers=auth(moderator),
    )

    assert member_post.json()["data"]["status"] == "pending"
    assert member_post.json()["message"] == "Post submitted for approval"
    assert moderator_post.json()["data"]["status"] == "approved"

    # Pending posts stay out of the feed and the post count
    feed = client.get(f"/community-posts/community/{community['id']}", headers=auth(member))
    assert [p["id"] for p in feed.json()["data"]["items"]] == [moderator_post.json()["data"]["id"]]

    pending = client.get(
        f"/community-posts/community/{community['id']}/pending", headers=auth(moderator)
    )
    assert [p["id"] for p in pending.json()["data"]["items"]] == [member_post.json()["data"]["id"]]

    forbidden = client.get(
        f"/community-posts/community/{community['id']}/pending", headers=auth(member)
    )
    assert forbidden.status_code == 403


def test_approve_and_reject_pending_posts(client, auth, staff, alumni, make_community, join, make_post):
    community = make_community(settings={"require_post_approval": True})
    join(community["id"], alumni)
    first = make_post(community["id"], alumni)
    second = make_post(community["id"], alumni, title="Another")

    approved = client.post(f"/community-posts/{first['id']}/approve", headers=auth(staff))
    rejected = client.post(
        f"/community-posts/{second['id']}/reject",
        json={"reason": "Off topic"},
        headers=auth(staff),
    )

    assert approved.json()["data"]["status"] == "approved"
    assert rejected.json()["data"]["status"] == "rejected"

    again = client.post(f"/community-posts/{first['id']}/approve", headers=auth(staff))
    assert again.status_code == 400

    log = client.get(
        f"/communities/{community['id']}/moderation-log?entity_type=post", headers=auth(staff)
    ).json()["data"]["items"]
    assert {entry["action"] for entry in log} == {"approve", "reject"}
    assert next(e for e in log if e["action"] == "reject")["reason"] == "Off topic"


def test_like_is_idempotent(client, auth, alumni, make_community, join, make_post):
    community = make_community()
    join(community["id"], alumni)
    post = make_post(community["id"], alumni)

    first = client.post(f"/community-posts/{post['id']}/like", headers=auth(alumni))
    second = client.post(f"/community-posts/{post['id']}/like", headers=auth(alumni))

    assert first.json()["data"] == {"post_id": post["id"], "liked": True, "like_count": 1}
    assert second.json()["data"]["like_count"] == 1

    detail = client.get(f"/community-posts/{post['id']}", headers=auth(alumni)).json()["data"]
    assert detail["like_count"] == 1
    assert detail["liked_by_me"] is True


def test_unlike_without_like_is_noop(client, auth, alumni, make_community, join, make_post):
    community = make_community()
    join(community["id"], alumni)
    post = make_post(community["id"], alumni)

    response = client.delete(f"/community-posts/{post['id']}/like", headers=auth(alumni))

    assert response.status_code == 200
    assert response.json()["data"] == {"post_id": post["id"], "liked": False, "like_count": 0}


def test_poll_vote_replaces_previous(client, auth, alumni, make_community, join, make_post, db):
    community = make_community()
    join(community["id"], alumni)
    poll = make_post(
        community["id"],
        alumni,
        type="poll",
        title="Venue",
        content="Where should we meet?",
        poll_options=["Campus", "Downtown", "Online"],
    )
    assert [o["position"] for o in poll["poll_options"]] == [0, 1, 2]

    client.post(f"/community-posts/{poll['id']}/vote", json={"option_index": 0}, headers=auth(alumni))
    response = client.post(
        f"/community-posts/{poll['id']}/vote", json={"option_index": 1}, headers=auth(alumni)
    )

    data = response.json()["data"]
    assert data["total_votes"] == 1
    assert data["my_vote"] == 1
    assert [o["vote_count"] for o in data["options"]] == [0, 1, 0]
    assert db.query(PollVote).filter(PollVote.user_id == alumni.id).count() == 1


def test_poll_validation(client, auth, alumni, make_community, join, make_post):
    community = make_community()
    join(community["id"], alumni)

    one_option = client.post(
        f"/community-posts/community/{community['id']}",
        json={"title": "Q", "content": "?", "type": "poll", "poll_options": ["Only"]},
        headers=auth(alumni),
    )
    assert one_option.status_code == 400

    text_post = make_post(community["id"], alumni)
    not_poll = client.post(
        f"/community-posts/{text_post['id']}/vote", json={"option_index": 0}, headers=auth(alumni)
    )
    assert not_poll.status_code == 400
    assert not_poll.json()["error"] == "This post is not a poll"

    poll = make_post(
        community["id"], alumni, type="poll", poll_options=["Yes", "No"]
    )
    out_of_range = client.post(
        f"/community-posts/{poll['id']}/vote", json={"option_index": 5}, headers=auth(alumni)
    )
    assert out_of_range.status_code == 400
    assert out_of_range.json()["error"] == "Invalid poll option"


def test_closed_poll_rejects_votes(client, auth, alumni, make_community, join, make_post, db):
    community = make_community()
    join(community["id"], alumni)
    poll = make_post(community["id"], alumni, type="poll", poll_options=["Yes", "No"])

    row = db.get(CommunityPost, poll["id"])
    row.poll_end_date = permissions.utcnow() - timedelta(minutes=1)
    db.commit()

    response = client.post(
        f"/community-posts/{poll['id']}/vote", json={"option_index": 0}, headers=auth(alumni)
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Poll has ended"


def test_soft_delete_hides_post_and_updates_count(
    client, auth, alumni, make_community, join, make_post
):
    community = make_community()
    join(community["id"], alumni)
    post = make_post(community["id"], alumni)
    make_post(community["id"], alumni, title="Second")

    response = client.delete(f"/community-posts/{post['id']}", headers=auth(alumni))
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "deleted"

    gone = client.get(f"/community-posts/{post['id']}", headers=auth(alumni))
    assert gone.status_code == 404

    detail = client.get(f"/communities/{community['id']}", headers=auth(alumni)).json()["data"]
    assert detail["post_count"] == 1


def test_only_author_or_manager_can_edit(client, auth, staff, make_user, make_community, join, make_post):
    community = make_community()
    author = make_user()
    other = make_user()
    join(community["id"], author)
    join(community["id"], other)
    post = make_post(community["id"], author)

    denied = client.patch(
        f"/community-posts/{post['id']}", json={"title": "Hijacked"}, headers=auth(other)
    )
    assert denied.status_code == 403

    by_author = client.patch(
        f"/community-posts/{post['id']}", json={"content": "Updated details"}, headers=auth(author)
    )
    assert by_author.json()["data"]["content"] == "Updated details"

    by_creator = client.patch(
        f"/community-posts/{post['id']}", json={"title": "Edited"}, headers=auth(staff)
    )
    assert by_creator.json()["data"]["title"] == "Edited"


def test_pinned_posts_come_first(client, auth, staff, alumni, make_community, join, make_post):
    community = make_community()
    join(community["id"], alumni)
    older = make_post(community["id"], alumni, title="Older")
    make_post(community["id"], alumni, title="Newer")

    pinned = client.post(f"/community-posts/{older['id']}/pin", headers=auth(staff))
    assert pinned.json()["data"]["is_pinned"] is True

    feed = client.get(f"/community-posts/community/{community['id']}", headers=auth(alumni))
    assert feed.json()["data"]["items"][0]["id"] == older["id"]

    member_pin = client.post(f"/community-posts/{older['id']}/unpin", headers=auth(alumni))
    assert member_pin.status_code == 403


def test_view_count_increments(client, auth, alumni, make_community, join, make_post):
    community = make_community()
    join(community["id"], alumni)
    post = make_post(community["id"], alumni)

    client.get(f"/community-posts/{post['id']}", headers=auth(alumni))
    response = client.get(f"/community-posts/{post['id']}", headers=auth(alumni))

    assert response.json()["data"]["view_count"] == 2


def test_trending_orders_by_likes(client, auth, make_user, make_community, join, make_post):
    community = make_community()
    users = [make_user() for _ in range(3)]
    for user in users:
        join(community["id"], user)
    quiet = make_post(community["id"], users[0], title="Quiet")
    popular = make_post(community["id"], users[0], title="Popular")
    for user in users:
        client.post(f"/community-posts/{popular['id']}/like", headers=auth(user))
    client.post(f"/community-posts/{quiet['id']}/like", headers=auth(users[1]))

    response = client.get(
        f"/community-posts/community/{community['id']}/trending", headers=auth(users[0])
    )

    items = response.json()["data"]
    assert [p["id"] for p in items] == [popular["id"], quiet["id"]]
    assert items[0]["like_count"] == 3


def test_popular_tags(client, auth, alumni, make_community, join, make_post):
    community = make_community()
    join(community["id"], alumni)
    make_post(community["id"], alumni, tags=["careers", "events"])
    make_post(community["id"], alumni, title="Two", tags=["careers"])

    response = client.get(
        f"/community-posts/community/{community['id']}/tags", headers=auth(alumni)
    )

    assert response.json()["data"] == [
        {"name": "careers", "count": 2},
        {"name": "events", "count": 1},
    ]


def test_closed_community_content_needs_membership(
    client, auth, staff, alumni, make_community, make_post
):
    community = make_community(type="closed")
    make_post(community["id"], staff)

    response = client.get(f"/community-posts/community/{community['id']}", headers=auth(alumni))

    assert response.status_code == 403


def test_comments_disabled_setting_blocks_comments(
    client, auth, alumni, make_community, join, make_post
):
    community = make_community(settings={"allow_comments": False})
    join(community["id"], alumni)
    post = make_post(community["id"], alumni)

    response = client.post(
        f"/community-comments/post/{post['id']}", json={"content": "Hi"}, headers=auth(alumni)
    )

    assert response.status_code == 403
    assert response.json()["error"] == "Comments are disabled in this community"


def test_media_setting_applies_to_edits(client, auth, alumni, make_community, join, make_post):
    community = make_community(settings={"allow_media_uploads": False})
    join(community["id"], alumni)
    post = make_post(community["id"], alumni)

    response = client.patch(
        f"/community-posts/{post['id']}",
        json={"media_urls": ["http://x/y.png"]},
        headers=auth(alumni),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Media uploads are disabled in this community"
    detail = client.get(f"/community-posts/{post['id']}", headers=auth(alumni)).json()["data"]
    assert detail["media_urls"] == []
