"""Tests for comments, media attachments, upload URLs and object downloads."""
from tests.conftest import PRIVATE_DIR, create_event, register_user


def _comment(client, event_id: str, content: str = "Count me in!", **extra) -> dict:
    resp = client.post(f"/api/events/{event_id}/comments", json={"content": content, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestComments:
    """Event comment threads."""

    def test_comment_and_list(self, client):
        user = register_user(client)
        event = create_event(client)
        comment = _comment(client, event["event_id"], "  See you there  ")
        assert comment["user_id"] == user["user_id"]
        assert comment["content"] == "See you there"

        resp = client.get(f"/api/events/{event['event_id']}/comments")
        assert resp.status_code == 200
        assert [c["comment_id"] for c in resp.json()] == [comment["comment_id"]]

    def test_reply_to_comment(self, client):
        register_user(client)
        event = create_event(client)
        parent = _comment(client, event["event_id"])
        reply = _comment(client, event["event_id"], "Me too", parent_comment_id=parent["comment_id"])
        assert reply["parent_comment_id"] == parent["comment_id"]

    def test_reply_must_target_same_event(self, client):
        register_user(client)
        first = create_event(client, title="First")
        second = create_event(client, title="Second")
        parent = _comment(client, first["event_id"])
        resp = client.post(f"/api/events/{second['event_id']}/comments", json={
            "content": "Wrong thread",
            "parent_comment_id": parent["comment_id"],
        })
        assert resp.status_code == 400

    def test_comment_on_missing_event(self, client):
        register_user(client)
        resp = client.post("/api/events/nope/comments", json={"content": "Hello"})
        assert resp.status_code == 404

    def test_empty_comment_rejected(self, client):
        register_user(client)
        event = create_event(client)
        resp = client.post(f"/api/events/{event['event_id']}/comments", json={"content": ""})
        assert resp.status_code == 400

    def test_comment_requires_auth(self, client):
        register_user(client)
        event = create_event(client)
        client.cookies.clear()
        resp = client.post(f"/api/events/{event['event_id']}/comments", json={"content": "Hi"})
        assert resp.status_code == 401

    def test_guest_comment(self, client):
        register_user(client)
        event = create_event(client)
        client.cookies.clear()
        resp = client.post(f"/api/events/{event['event_id']}/comments/guest", json={
            "content": "Is parking free?",
            "guest_name": "Gus",
            "guest_email": "gus@example.com",
        })
        assert resp.status_code == 201
        assert resp.json()["user_id"] is None
        assert resp.json()["guest_name"] == "Gus"

    def test_guest_comment_needs_identity(self, client):
        register_user(client)
        event = create_event(client)
        resp = client.post(f"/api/events/{event['event_id']}/comments/guest", json={"content": "Anonymous"})
        assert resp.status_code == 400


class TestMedia:
    """Media attachments and upload URLs."""

    def test_upload_url(self, client, storage_session):
        resp = client.post("/api/objects/upload")
        assert resp.status_code == 200
        upload_url = resp.json()["upload_url"]
        assert upload_url.startswith("https://storage.googleapis.com/campus-bucket/.private/uploads/")

        url, body = storage_session.posts[0]
        assert url == "http://sidecar.test/object-storage/signed-object-url"
        assert body["bucket_name"] == "campus-bucket"
        assert body["object_name"].startswith(".private/uploads/")
        assert body["method"] == "PUT"

    def test_attach_media_to_event_normalizes_url(self, client):
        user = register_user(client)
        event = create_event(client)
        raw_url = f"https://storage.googleapis.com{PRIVATE_DIR}/uploads/abc123"
        resp = client.post("/api/media", json={
            "event_id": event["event_id"],
            "type": "image",
            "url": raw_url,
            "filename": "party.jpg",
            "file_size": 2048,
        })
        assert resp.status_code == 201
        media = resp.json()
        assert media["url"] == "/objects/uploads/abc123"
        assert media["user_id"] == user["user_id"]

        listed = client.get(f"/api/events/{event['event_id']}/media").json()
        assert [m["media_id"] for m in listed] == [media["media_id"]]

    def test_external_urls_pass_through(self, client):
        register_user(client)
        event = create_event(client)
        resp = client.post("/api/media", json={
            "event_id": event["event_id"],
            "type": "video",
            "url": "https://videos.example.com/clip.mp4",
        })
        assert resp.json()["url"] == "https://videos.example.com/clip.mp4"

    def test_attach_media_to_comment(self, client):
        register_user(client)
        event = create_event(client)
        comment = _comment(client, event["event_id"])
        resp = client.post("/api/media", json={
            "comment_id": comment["comment_id"],
            "type": "image",
            "url": "/objects/uploads/xyz",
        })
        assert resp.status_code == 201

        listed = client.get(f"/api/comments/{comment['comment_id']}/media").json()
        assert len(listed) == 1
        assert listed[0]["comment_id"] == comment["comment_id"]

    def test_media_needs_a_target(self, client):
        register_user(client)
        resp = client.post("/api/media", json={"type": "image", "url": "/objects/uploads/xyz"})
        assert resp.status_code == 400

    def test_media_comment_must_belong_to_event(self, client):
        register_user(client)
        first = create_event(client, title="First")
        second = create_event(client, title="Second")
        comment = _comment(client, first["event_id"])
        resp = client.post("/api/media", json={
            "event_id": second["event_id"],
            "comment_id": comment["comment_id"],
            "type": "image",
            "url": "/objects/uploads/xyz",
        })
        assert resp.status_code == 400

    def test_media_requires_auth(self, client):
        register_user(client)
        event = create_event(client)
        client.cookies.clear()
        resp = client.post("/api/media", json={
            "event_id": event["event_id"],
            "type": "image",
            "url": "/objects/uploads/xyz",
        })
        assert resp.status_code == 401

    def test_guest_media(self, client):
        register_user(client)
        event = create_event(client)
        client.cookies.clear()
        resp = client.post("/api/media/guest", json={
            "event_id": event["event_id"],
            "type": "image",
            "url": "/objects/uploads/xyz",
            "guest_name": "Gus",
            "guest_email": "gus@example.com",
        })
        assert resp.status_code == 201
        assert resp.json()["guest_name"] == "Gus"

    def test_unknown_media_type(self, client):
        register_user(client)
        event = create_event(client)
        resp = client.post("/api/media", json={
            "event_id": event["event_id"],
            "type": "audio",
            "url": "/objects/uploads/xyz",
        })
        assert resp.status_code == 400


class TestObjectDownload:
    """GET /objects/{path} serves what /api/media and the profile image flow store."""

    def test_redirects_to_signed_download(self, client, storage_session):
        resp = client.get("/objects/uploads/abc123", follow_redirects=False)
        assert resp.status_code == 302
        assert resp.headers["location"].startswith(
            "https://storage.googleapis.com/campus-bucket/.private/uploads/abc123?"
        )
        assert [body["method"] for _, body in storage_session.posts] == ["HEAD", "GET"]
        assert storage_session.posts[-1][1]["object_name"] == ".private/uploads/abc123"

    def test_stored_media_url_resolves(self, client):
        register_user(client)
        event = create_event(client)
        media = client.post("/api/media", json={
            "event_id": event["event_id"],
            "type": "image",
            "url": "https://storage.googleapis.com/campus-bucket/.private/uploads/photo1?X-Goog-Signature=1",
        }).json()
        assert client.get(media["url"], follow_redirects=False).status_code == 302

    def test_missing_object(self, client, storage_session):
        storage_session.missing.add(".private/uploads/gone")
        resp = client.get("/objects/uploads/gone", follow_redirects=False)
        assert resp.status_code == 404

