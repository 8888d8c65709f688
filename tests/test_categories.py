import pytest

from alumni.models import Event, JobPost
from alumni.services.category import slugify


@pytest.mark.parametrize(
    "name,slug",
    [("Job Fairs", "job-fairs"), ("  AI & ML  ", "ai-ml"), ("Class of 2010", "class-of-2010")],
)
def test_slugify(name, slug):
    assert slugify(name) == slug


def create(client, auth, user, name="Careers", entity_type="community"):
    return client.post(
        "/categories/",
        json={"name": name, "entity_type": entity_type},
        headers=auth(user),
    )


def test_create_category(client, auth, staff):
    response = create(client, auth, staff)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["slug"] == "careers"
    assert data["tenant_id"] == staff.tenant_id
    assert data["created_by"] == staff.id


def test_alumni_cannot_create_category(client, auth, alumni):
    response = create(client, auth, alumni)

    assert response.status_code == 403


def test_duplicate_name_within_entity_type(client, auth, staff):
    create(client, auth, staff)

    duplicate = create(client, auth, staff, name="careers")
    other_type = create(client, auth, staff, entity_type="event_type")

    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "A community category with this name already exists"
    assert other_type.status_code == 201


def test_rename_regenerates_slug(client, auth, staff):
    category = create(client, auth, staff).json()["data"]

    response = client.patch(
        f"/categories/{category['id']}", json={"name": "Career Talks"}, headers=auth(staff)
    )

    assert response.json()["data"]["slug"] == "career-talks"


def test_list_filters_by_entity_type(client, auth, staff):
    create(client, auth, staff, name="Tech")
    create(client, auth, staff, name="Gala", entity_type="event_type")

    response = client.get("/categories/?entity_type=event_type", headers=auth(staff))

    assert [c["name"] for c in response.json()["data"]["items"]] == ["Gala"]


def test_delete_unused_category(client, auth, make_user, staff):
    category = create(client, auth, staff).json()["data"]

    by_staff = client.delete(f"/categories/{category['id']}", headers=auth(staff))
    assert by_staff.status_code == 403

    hod = make_user(role="hod")
    response = client.delete(f"/categories/{category['id']}", headers=auth(hod))
    assert response.status_code == 200

    missing = client.get(f"/categories/{category['id']}", headers=auth(hod))
    assert missing.status_code == 404


def test_delete_category_in_use_by_communities(client, auth, make_user, staff, make_community):
    category = create(client, auth, staff).json()["data"]
    make_community(category_id=category["id"])
    make_community(category_id=category["id"])

    response = client.delete(f"/categories/{category['id']}", headers=auth(make_user(role="hod")))

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete category. It is used by 2 items."


def test_delete_category_in_use_by_events_and_jobs(client, auth, make_user, staff, tenant, db):
    event_type = create(client, auth, staff, name="Reunion", entity_type="event_type").json()["data"]
    industry = create(client, auth, staff, name="Finance", entity_type="job_industry").json()["data"]
    db.add(Event(tenant_id=tenant.id, title="Spring reunion", event_type_id=event_type["id"]))
    db.add(JobPost(tenant_id=tenant.id, title="Analyst", industry_id=industry["id"]))
    db.commit()
    hod = make_user(role="hod")

    event_response = client.delete(f"/categories/{event_type['id']}", headers=auth(hod))
    job_response = client.delete(f"/categories/{industry['id']}", headers=auth(hod))

    assert event_response.json()["error"] == "Cannot delete category. It is used by 1 item."
    assert job_response.json()["error"] == "Cannot delete category. It is used by 1 item."


def test_categories_are_tenant_scoped(client, auth, make_user, staff, other_tenant):
    category = create(client, auth, staff).json()["data"]
    outsider = make_user(role="staff", tenant_id=other_tenant.id)

    response = client.get(f"/categories/{category['id']}", headers=auth(outsider))

    assert response.status_code == 404
