from tunely import sessions
from tunely.models import ArtistSession, Payment, SongQueueEntry


def test_start_and_end_session(client, db, artist, caller):
    caller["id"] = artist

    response = client.post("/sessions", json={"location": "Main Street"})

    assert response.status_code == 200
    body = response.json()
    assert body["isActive"] is True
    assert body["location"] == "Main Street"
    assert len(body["sessionCode"]) == sessions.SESSION_CODE_LENGTH
    assert body["sessionCode"].isalnum() and body["sessionCode"] == body["sessionCode"].upper()

    active = client.get("/sessions/active")
    assert active.status_code == 200
    assert active.json()["id"] == body["id"]

    ended = client.post(f"/sessions/{body['id']}/end")
    assert ended.status_code == 200
    assert ended.json()["isActive"] is False
    assert ended.json()["endedAt"] is not None

    assert client.get("/sessions/active").status_code == 404


def test_session_codes_are_unique_among_active_sessions(db, artist, mocker):
    db.add(ArtistSession(artist_id=artist, session_code="TAKEN000", is_active=True))
    db.commit()
    mocker.patch("tunely.sessions.generate_session_code", side_effect=["TAKEN000", "FRESH000"])

    session = sessions.create_session(db, artist)

    assert session.session_code == "FRESH000"


def test_cannot_end_someone_elses_session(client, live_session, caller):
    caller["id"] = "someone-else"

    response = client.post(f"/sessions/{live_session}/end")

    assert response.status_code == 404
    assert response.json() == {"error": "Session not found"}


def test_queue_is_ordered_and_entries_can_be_completed(client, db, live_session, caller):
    caller["id"] = "artist-1"
    for position, song in ((2, "Yesterday"), (1, "Wonderwall")):
        payment = Payment(artist_id="artist-1", stripe_payment_intent_id=f"pi_{position}", amount_total=1000)
        db.add(payment)
        db.flush()
        db.add(SongQueueEntry(
            id=f"entry-{position}",
            payment_id=payment.id,
            artist_session_id=live_session,
            song_request=song,
            customer_name="Anonymous",
            tip_amount=1000,
            queue_position=position,
        ))
    db.commit()

    queue = client.get(f"/sessions/{live_session}/queue")
    assert queue.status_code == 200
    assert [e["songRequest"] for e in queue.json()] == ["Wonderwall", "Yesterday"]

    playing = client.patch("/queue/entry-1", json={"status": "playing"})
    assert playing.status_code == 200
    assert playing.json()["playedAt"] is None

    done = client.patch("/queue/entry-1", json={"status": "completed"})
    assert done.status_code == 200
    assert done.json()["status"] == "completed"
    assert done.json()["playedAt"] is not None


def test_invalid_queue_status(client, live_session, caller):
    caller["id"] = "artist-1"

    response = client.patch("/queue/entry-1", json={"status": "encore"})

    assert response.status_code == 400


def test_list_artist_payments(client, db, artist, caller):
    caller["id"] = artist
    db.add(Payment(
        artist_id=artist,
        customer_id="fan-1",
        stripe_payment_intent_id="pi_list",
        amount_total=2000,
        amount_platform_fee=20,
        amount_stripe_fee=88,
        amount_artist=1892,
        currency="usd",
        status="succeeded",
    ))
    db.add(Payment(
        artist_id="artist-2",
        stripe_payment_intent_id="pi_other",
        amount_total=1000,
        amount_platform_fee=10,
        amount_stripe_fee=59,
        amount_artist=931,
        currency="usd",
        status="pending",
    ))
    db.commit()

    response = client.get("/payments")

    assert response.status_code == 200
    assert [p["stripePaymentIntentId"] for p in response.json()] == ["pi_list"]
    assert response.json()[0]["amountArtist"] == 1892
