from datetime import timedelta

import pytest

from alumni.core import permissions
from alumni.core.config import settings
from alumni.models import CommunityMembership


@pytest.mark.parametrize("role", ["super_admin", "college_admin", "hod", "staff"])
def test_privileged_roles_create_communities(client, auth, make_user, role):
    creator = make_user(role=role)

    response = client.post(
        "/communities/",
        json={"name": f"{role} circle", "description": "Alumni working in the same field"},
        headers=auth(creator),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["created_by"] == creator.id
    assert data["member_count"] == 1
    assert data["moderator_ids"] == [creator.id]
    assert data["membership_role"] == "admin"
    assert data["settings"]["allow_comments"] is True


@pytest.mark.parametrize("role", ["alumni", "student"])
def test_other_roles_cannot_create(client, auth, make_user, role):
    response = client.post(
        "/communities/",
        json={"name": "Study group", "description": "Let us study together"},
        headers=auth(make_user(role=role)),
    )

    assert response.status_code == 403
    assert response.json() == {
        "success": False,
        "message": "Insufficient permissions to create community",
        "data": None,
        "error": "Insufficient permissions to create community",
    }


def test_creator_gets_admin_membership(staff, make_community, db):
    community = make_community()

    membership = (
        db.query(CommunityMembership)
        .filter(CommunityMembership.community_id == community["id"])
        .one()
    )
    assert membership.user_id == staff.id
    assert membership.role == "admin"
    assert membership.status == "approved"
    assert membership.joined_at is not None


def test_duplicate_name_in_tenant(client, auth, staff, make_community):
    make_community(name="Class of 2015")

    response = client.post(
        "/communities/",
        json={"name": "Class of 2015", "description": "Another one with the same name"},
        headers=auth(staff),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Community with this name already exists"


def test_validation_errors_use_envelope(client, auth, staff):
    response = client.post(
        "/communities/", json={"name": "X", "description": "short"}, headers=auth(staff)
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"
    assert {tuple(e["loc"])[-1] for e in body["errors"]} == {"name", "description"}


def test_other_tenant_sees_not_found(client, auth, make_user, make_community, other_tenant):
    community = make_community()
    outsider = make_user(tenant_id=other_tenant.id)

    response = client.get(f"/communities/{community['id']}", headers=auth(outsider))

    assert response.status_code == 404
    assert response.json()["error"] == "Community not found"


def test_super_admin_crosses_tenants(client, auth, make_user, make_community, other_tenant):
    community = make_community()
    admin = make_user(role="super_admin", tenant_id=other_tenant.id)

    response = client.get(f"/communities/{community['id']}", headers=auth(admin))

    assert response.status_code == 200


def test_hidden_community_requires_membership(client, auth, alumni, make_community):
    hidden = make_community(type="hidden")
    make_community(name="Visible")

    detail = client.get(f"/communities/{hidden['id']}", headers=auth(alumni))
    assert detail.status_code == 403
    assert detail.json()["error"] == "Access denied. This is a hidden community."

    listing = client.get("/communities/", headers=auth(alumni))
    names = [c["name"] for c in listing.json()["data"]["items"]]
    assert names == ["Visible"]


def test_list_filters(client, auth, alumni, make_community):
    make_community(name="Robotics Alumni", tags=["engineering"])
    make_community(name="Book Club", type="closed", tags=["reading"])

    by_query = client.get("/communities/?q=robot", headers=auth(alumni))
    by_type = client.get("/communities/?type=closed", headers=auth(alumni))
    by_tag = client.get("/communities/?tag=reading", headers=auth(alumni))

    assert [c["name"] for c in by_query.json()["data"]["items"]] == ["Robotics Alumni"]
    assert [c["name"] for c in by_type.json()["data"]["items"]] == ["Book Club"]
    assert [c["name"] for c in by_tag.json()["data"]["items"]] == ["Book Club"]


def test_update_merges_settings(client, auth, staff, alumni, make_community, join):
    community = make_community(settings={"allow_polls": False})

    response = client.patch(
        f"/communities/{community['id']}",
        json={"description": "Updated description text", "settings": {"allow_comments": False}},
        headers=auth(staff),
    )

    settings = response.json()["data"]["settings"]
    assert settings["allow_comments"] is False
    assert settings["allow_polls"] is False
    assert settings["allow_member_posts"] is True

    join(community["id"], alumni)
    denied = client.patch(
        f"/communities/{community['id']}", json={"type": "closed"}, headers=auth(alumni)
    )
    assert denied.status_code == 403


def test_archive_community(client, auth, staff, alumni, make_community, join):
    community = make_community()
    join(community["id"], alumni)

    by_member = client.delete(f"/communities/{community['id']}", headers=auth(alumni))
    assert by_member.status_code == 403

    archived = client.delete(f"/communities/{community['id']}", headers=auth(staff))
    assert archived.json()["data"]["status"] == "archived"

    listing = client.get("/communities/", headers=auth(alumni))
    assert listing.json()["data"]["total"] == 0

    post = client.post(
        f"/community-posts/community/{community['id']}",
        json={"title": "Still here?", "content": "Hello"},
        headers=auth(alumni),
    )
    assert post.status_code == 400
    assert post.json()["error"] == "Community is archived"


def test_requires_authentication(client):
    response = client.get("/communities/")

    assert response.status_code == 401
    assert response.json()["error"] == "Not authenticated"


def test_suspended_member_loses_hidden_community(client, auth, staff, alumni, make_community, db):
    hidden = make_community(type="hidden")
    client.post(
        f"/communities/{hidden['id']}/invite", json={"user_id": alumni.id}, headers=auth(staff)
    )
    membership = client.post(f"/communities/{hidden['id']}/join", headers=auth(alumni)).json()["data"]
    client.post(
        f"/community-memberships/{membership['id']}/suspend",
        json={
            "reason": "Cooling off",
            "end_date": (permissions.utcnow() + timedelta(hours=1)).isoformat(),
        },
        headers=auth(staff),
    )

    listing = client.get("/communities/", headers=auth(alumni))
    detail = client.get(f"/communities/{hidden['id']}", headers=auth(alumni))
    assert listing.json()["data"]["total"] == 0
    assert detail.status_code == 403

    # Once the suspension runs out both views agree again
    row = db.get(CommunityMembership, membership["id"])
    row.suspension_end_date = permissions.utcnow() - timedelta(minutes=1)
    db.commit()

    listing = client.get("/communities/", headers=auth(alumni))
    detail = client.get(f"/communities/{hidden['id']}", headers=auth(alumni))
    assert [c["id"] for c in listing.json()["data"]["items"]] == [hidden["id"]]
    assert detail.status_code == 200


def test_update_ignores_null_for_required_fields(client, auth, staff, make_community):
    community = make_community(name="Class of 2010", cover_image="http://x/cover.png")

    response = client.patch(
        f"/communities/{community['id']}",
        json={"name": None, "description": None, "type": None, "cover_image": None},
        headers=auth(staff),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Class of 2010"
    assert data["description"] == community["description"]
    assert data["type"] == "open"
    assert data["cover_image"] is None


def test_list_uses_configured_page_size(client, auth, alumni, make_community):
    make_community()

    response = client.get("/communities/", headers=auth(alumni))

    assert response.json()["data"]["size"] == settings.default_page_size
