from jobboard import models
from jobboard.config import settings
from jobboard.routes import application_routes


def apply(client, role, candidate, **extra):
    return client.post(
        "/applications", json={"role_id": role.id, "candidate_id": candidate.id, **extra}
    )


def test_submit_application(client, hiring_setup):
    response = apply(client, hiring_setup["role"], hiring_setup["candidate"], cover_note="Excited")

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "new"
    assert body["cover_note"] == "Excited"
    assert body["messaging_available"] is False
    assert body["role"]["company"]["name"] == "Acme"


def test_second_application_conflicts(client, hiring_setup, db):
    assert apply(client, hiring_setup["role"], hiring_setup["candidate"]).status_code == 201

    response = apply(client, hiring_setup["role"], hiring_setup["candidate"])

    assert response.status_code == 409
    assert response.json()["error"]["message"] == "You have already applied to this role"
    assert db.query(models.Application).count() == 1


def test_race_on_unique_constraint_conflicts(client, hiring_setup, make_application, monkeypatch, db):
    # The pre-check misses the row a concurrent request just inserted.
    make_application(hiring_setup["role"], hiring_setup["candidate"])
    monkeypatch.setattr(application_routes, "find_application", lambda *args: None)

    response = apply(client, hiring_setup["role"], hiring_setup["candidate"])

    assert response.status_code == 409
    assert db.query(models.Application).count() == 1


def test_closed_role_is_not_open(client, hiring_setup):
    client.patch(f"/roles/{hiring_setup['role'].id}", json={"status": "closed"})

    response = apply(client, hiring_setup["role"], hiring_setup["candidate"])

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Role is not open for applications"


def test_draft_role_is_not_open(client, hiring_setup, make_role):
    draft = make_role(hiring_setup["company"], hiring_setup["hiring_manager"], status="draft")

    response = apply(client, draft, hiring_setup["candidate"])

    assert response.status_code == 400


def test_published_but_soft_deleted_role_is_not_open(client, hiring_setup, db):
    role = hiring_setup["role"]
    role.deleted_at = role.created_at
    db.commit()

    response = apply(client, role, hiring_setup["candidate"])

    assert response.json()["error"]["message"] == "Role is not open for applications"


def test_error_order_role_before_candidate(client, hiring_setup):
    response = client.post("/applications", json={"role_id": 999, "candidate_id": 999})
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Role not found"

    response = client.post(
        "/applications", json={"role_id": hiring_setup["role"].id, "candidate_id": 999}
    )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Candidate not found"


def test_cover_note_is_bounded(client, hiring_setup):
    too_long = "x" * (settings.cover_note_max_length + 1)

    response = apply(client, hiring_setup["role"], hiring_setup["candidate"], cover_note=too_long)

    assert response.status_code == 400
    assert "cover_note" in response.json()["error"]["details"]["fields"]


def test_status_write_is_permissive_by_default(client, hiring_setup, make_application):
    application = make_application(hiring_setup["role"], hiring_setup["candidate"], status="rejected")

    response = client.patch(f"/applications/{application.id}", json={"status": "new"})

    assert response.status_code == 200
    assert response.json()["status"] == "new"


def test_status_write_enforced(client, hiring_setup, make_application, monkeypatch):
    monkeypatch.setattr(settings, "enforce_status_transitions", True)
    application = make_application(hiring_setup["role"], hiring_setup["candidate"], status="rejected")

    response = client.patch(f"/applications/{application.id}", json={"status": "interview"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "business_rule"

    response = client.patch(f"/applications/{application.id}", json={"status": "rejected"})
    assert response.status_code == 200


def test_status_update_unlocks_messaging(client, hiring_setup, make_application):
    application = make_application(hiring_setup["role"], hiring_setup["candidate"])

    body = client.patch(f"/applications/{application.id}", json={"status": "interview"}).json()

    assert body["messaging_available"] is True


def test_status_update_unknown_application(client):
    assert client.patch("/applications/999", json={"status": "interview"}).status_code == 404


def test_list_by_role_and_candidate(client, hiring_setup, make_role, make_candidate, make_application):
    role, alex = hiring_setup["role"], hiring_setup["candidate"]
    other_role = make_role(hiring_setup["company"], hiring_setup["hiring_manager"], "Designer")
    jordan = make_candidate("Jordan")
    make_application(role, alex)
    make_application(role, jordan)
    make_application(other_role, alex, status="accepted")

    by_role = client.get("/applications", params={"role_id": role.id}).json()
    assert {a["candidate"]["name"] for a in by_role["items"]} == {"Alex", "Jordan"}
    assert by_role["pagination"]["total_pages"] == 1

    by_candidate = client.get("/applications", params={"candidate_id": alex.id, "limit": 1}).json()
    assert by_candidate["pagination"]["total"] == 2
    assert by_candidate["pagination"]["total_pages"] == 2
    assert len(by_candidate["items"]) == 1


def test_list_requires_a_filter(client):
    response = client.get("/applications")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation_error"


def test_get_application(client, hiring_setup, make_application):
    application = make_application(hiring_setup["role"], hiring_setup["candidate"], status="accepted")

    body = client.get(f"/applications/{application.id}").json()

    assert body["messaging_available"] is True
    assert body["candidate"]["name"] == "Alex"
    assert client.get("/applications/999").status_code == 404
