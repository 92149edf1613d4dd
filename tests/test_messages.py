import pytest

from jobboard import models


@pytest.fixture
def interview(hiring_setup, make_application):
    return make_application(hiring_setup["role"], hiring_setup["candidate"], status="interview")


def send(client, application, content="Hello", **sender):
    return client.post(
        "/messages", json={"application_id": application.id, "content": content, **sender}
    )


def test_candidate_sends_message(client, hiring_setup, interview):
    response = send(client, interview, "  Hello  ", candidate_id=hiring_setup["candidate"].id)

    assert response.status_code == 201
    body = response.json()
    assert body["content"] == "Hello"
    assert body["candidate_id"] == hiring_setup["candidate"].id
    assert body["hiring_manager_id"] is None


@pytest.mark.parametrize("status", ["new", "reviewing", "rejected"])
def test_gate_rejects_ineligible_stages(client, hiring_setup, make_application, status, db):
    application = make_application(hiring_setup["role"], hiring_setup["candidate"], status=status)

    response = send(client, application, candidate_id=hiring_setup["candidate"].id)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "business_rule"
    assert db.query(models.Message).count() == 0


@pytest.mark.parametrize("sender", [
    {},
    {"hiring_manager_id": 1, "candidate_id": 1},
])
def test_exactly_one_sender(client, interview, sender):
    response = send(client, interview, **sender)

    assert response.status_code == 400
    assert response.json()["error"]["details"]["form"] == [
        "Exactly one sender (hiring manager or candidate) must be specified"
    ]


def test_wrong_identity_is_forbidden(client, hiring_setup, interview, make_hiring_manager, make_candidate):
    stranger_hm = make_hiring_manager("Marcus", companies=[hiring_setup["company"]])
    stranger = make_candidate("Sam")

    assert send(client, interview, hiring_manager_id=stranger_hm.id).status_code == 403
    assert send(client, interview, candidate_id=stranger.id).status_code == 403
    assert send(client, interview, hiring_manager_id=hiring_setup["hiring_manager"].id).status_code == 201


def test_blank_and_oversized_content(client, hiring_setup, interview):
    alex = hiring_setup["candidate"].id

    assert send(client, interview, "   ", candidate_id=alex).status_code == 400
    assert send(client, interview, "x" * 2001, candidate_id=alex).status_code == 400


def test_unknown_application(client):
    response = client.post(
        "/messages", json={"application_id": 999, "content": "Hi", "candidate_id": 1}
    )

    assert response.status_code == 404


def test_client_token_deduplicates(client, hiring_setup, interview, db):
    alex = hiring_setup["candidate"].id

    first = send(client, interview, candidate_id=alex, client_token="tok-1")
    replay = send(client, interview, candidate_id=alex, client_token="tok-1")

    assert first.status_code == 201
    assert replay.status_code == 200
    assert replay.json()["id"] == first.json()["id"]
    assert db.query(models.Message).count() == 1


def test_client_token_is_scoped_to_sender(client, hiring_setup, interview, db):
    sarah, alex = hiring_setup["hiring_manager"], hiring_setup["candidate"]

    first = send(client, interview, "From Sarah", hiring_manager_id=sarah.id, client_token="t1")
    second = send(client, interview, "From Alex", candidate_id=alex.id, client_token="t1")

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "conflict"
    stored = db.query(models.Message).all()
    assert [(m.content, m.hiring_manager_id) for m in stored] == [("From Sarah", sarah.id)]


def test_thread_is_ordered_with_senders(client, hiring_setup, interview):
    sarah, alex = hiring_setup["hiring_manager"], hiring_setup["candidate"]
    send(client, interview, "Hi Alex", hiring_manager_id=sarah.id)
    send(client, interview, "Hi Sarah", candidate_id=alex.id)

    body = client.get("/messages", params={"application_id": interview.id}).json()

    assert [m["content"] for m in body["messages"]] == ["Hi Alex", "Hi Sarah"]
    assert body["messages"][0]["sender"] == {
        "type": "hiring-manager", "id": sarah.id, "name": "Sarah", "avatar_url": None,
    }
    assert body["messages"][1]["sender"]["type"] == "candidate"


def test_thread_for_missing_application(client):
    assert client.get("/messages", params={"application_id": 999}).status_code == 404


def test_inbox_requires_a_filter(client):
    assert client.get("/messages").status_code == 400


def test_inbox_summaries(client, hiring_setup, interview, make_candidate, make_application):
    sarah, alex = hiring_setup["hiring_manager"], hiring_setup["candidate"]
    jordan = make_candidate("Jordan")
    accepted = make_application(hiring_setup["role"], jordan, status="accepted")
    make_application(
        hiring_setup["role"], make_candidate("Sam"), status="new"
    )
    send(client, interview, "Hi Alex", hiring_manager_id=sarah.id)
    send(client, interview, "Thanks!", candidate_id=alex.id)

    hm_threads = client.get("/messages", params={"hiring_manager_id": sarah.id}).json()["threads"]
    assert [t["application_id"] for t in hm_threads] == [interview.id, accepted.id]
    latest = hm_threads[0]
    assert latest["other_party"]["name"] == "Alex"
    assert latest["message_count"] == 2
    assert latest["last_message"]["content"] == "Thanks!"
    assert latest["last_message"]["is_from_me"] is False
    assert hm_threads[1]["last_message"] is None

    candidate_threads = client.get("/messages", params={"candidate_id": alex.id}).json()["threads"]
    assert len(candidate_threads) == 1
    assert candidate_threads[0]["other_party"]["name"] == "Sarah"
    assert candidate_threads[0]["last_message"]["is_from_me"] is True
    assert candidate_threads[0]["company_name"] == "Acme"


def test_rejected_thread_with_history_stays_in_manager_inbox(client, hiring_setup, interview):
    sarah = hiring_setup["hiring_manager"]
    send(client, interview, "Hi Alex", hiring_manager_id=sarah.id)
    client.patch(f"/applications/{interview.id}", json={"status": "rejected"})

    hm_threads = client.get("/messages", params={"hiring_manager_id": sarah.id}).json()["threads"]
    candidate_threads = client.get(
        "/messages", params={"candidate_id": hiring_setup["candidate"].id}
    ).json()["threads"]

    assert [t["application_status"] for t in hm_threads] == ["rejected"]
    assert candidate_threads == []


def test_single_sender_constraint_in_database(db, interview, hiring_setup):
    from sqlalchemy.exc import IntegrityError

    db.add(models.Message(application_id=interview.id, content="orphan"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
