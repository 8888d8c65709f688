import pytest


@pytest.fixture
def community(make_community):
    return make_community()


@pytest.fixture
def author_post(community, join, make_post, alumni):
    join(community["id"], alumni)
    return make_post(community["id"], alumni)


def report(client, auth, user, entity_id, entity_type="post", reason="spam"):
    return client.post(
        "/reports/",
        json={"entity_type": entity_type, "entity_id": entity_id, "reason": reason},
        headers=auth(user),
    )


def test_report_post(client, auth, make_user, author_post):
    reporter = make_user()

    response = report(client, auth, reporter, author_post["id"])

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["community_id"] == author_post["community_id"]
    assert data["reporter_id"] == reporter.id


def test_duplicate_report_fails(client, auth, make_user, author_post):
    reporter = make_user()
    report(client, auth, reporter, author_post["id"])

    response = report(client, auth, reporter, author_post["id"], reason="harassment")

    assert response.status_code == 400
    assert response.json()["error"] == "You have already reported this content"


def test_cannot_report_own_post(client, auth, alumni, author_post):
    first = report(client, auth, alumni, author_post["id"])
    second = report(client, auth, alumni, author_post["id"])

    for response in (first, second):
        assert response.status_code == 400
        assert response.json()["error"] == "You cannot report your own post"


def test_report_missing_entity(client, auth, alumni):
    response = report(client, auth, alumni, 4242, entity_type="comment")

    assert response.status_code == 404
    assert response.json()["error"] == "Comment not found"


def test_invalid_reason_is_rejected(client, auth, make_user, author_post):
    response = report(client, auth, make_user(), author_post["id"], reason="boring")

    assert response.status_code == 400
    assert response.json()["message"] == "Validation error"


def test_only_super_admin_triages(client, auth, make_user, staff, author_post):
    reporter = make_user()
    created = report(client, auth, reporter, author_post["id"]).json()["data"]

    by_creator = client.patch(
        f"/reports/{created['id']}/status", json={"status": "resolved"}, headers=auth(staff)
    )
    assert by_creator.status_code == 403

    admin = make_user(role="super_admin")
    resolved = client.patch(
        f"/reports/{created['id']}/status",
        json={"status": "resolved", "resolution": "Post removed"},
        headers=auth(admin),
    )
    assert resolved.status_code == 200
    data = resolved.json()["data"]
    assert data["status"] == "resolved"
    assert data["reviewed_by"] == admin.id
    assert data["reviewed_at"] is not None
    assert data["resolution"] == "Post removed"

    again = client.patch(
        f"/reports/{created['id']}/status", json={"status": "dismissed"}, headers=auth(admin)
    )
    assert again.status_code == 400


def test_report_listings(client, auth, make_user, staff, community, author_post):
    reporter = make_user()
    report(client, auth, reporter, author_post["id"])

    mine = client.get("/reports/me", headers=auth(reporter))
    assert mine.json()["data"]["total"] == 1

    for_community = client.get(f"/reports/community/{community['id']}", headers=auth(staff))
    assert for_community.json()["data"]["total"] == 1

    for_entity = client.get(f"/reports/entity/post/{author_post['id']}", headers=auth(staff))
    assert for_entity.json()["data"]["total"] == 1

    member_view = client.get(f"/reports/community/{community['id']}", headers=auth(reporter))
    assert member_view.status_code == 403

    college_admin = make_user(role="college_admin")
    pending = client.get("/reports/pending", headers=auth(college_admin))
    assert pending.json()["data"]["total"] == 1

    alumni_pending = client.get("/reports/pending", headers=auth(reporter))
    assert alumni_pending.status_code == 403


def test_pending_reports_are_tenant_scoped(client, auth, make_user, author_post, other_tenant):
    report(client, auth, make_user(), author_post["id"])
    foreign_admin = make_user(role="college_admin", tenant_id=other_tenant.id)

    response = client.get("/reports/pending", headers=auth(foreign_admin))

    assert response.json()["data"]["total"] == 0
