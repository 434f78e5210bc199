from conftest import PNG_BYTES, auth_headers, upload_post
from instalike.modules.posts.comments.models.comment import Comment
from instalike.modules.posts.likes.models.like import Like
from instalike.modules.posts.models.post import Post


def test_register_post_and_like_flow(client, alice):
    created = upload_post(client, alice, caption="hi")
    assert created.status_code == 200
    post = created.json()
    assert post["id"] == 1
    assert post["caption"] == "hi"
    assert post["username"] == "alice"
    assert post["image_url"].startswith("/uploads/")
    assert post["image_url"].endswith(".png")

    feed = client.get("/api/posts", headers=auth_headers(alice)).json()
    assert len(feed) == 1
    assert feed[0]["like_count"] == 0
    assert feed[0]["is_liked"] is False

    liked = client.post("/api/posts/1/like", headers=auth_headers(alice)).json()
    assert liked["action"] == "liked"
    assert liked["like_count"] == 1

    unliked = client.post("/api/posts/1/like", headers=auth_headers(alice)).json()
    assert unliked["action"] == "unliked"
    assert unliked["like_count"] == 0


def test_uploaded_image_is_served(client, alice):
    post = upload_post(client, alice).json()

    response = client.get(post["image_url"])
    assert response.status_code == 200
    assert response.content == PNG_BYTES


def test_oversize_upload_rejected_without_rows(client, alice, db_session, settings, tmp_path):
    response = upload_post(client, alice, content=b"\x00" * (6 * 1024 * 1024))

    assert response.status_code == 400
    assert "File too large" in response.json()["detail"]
    assert db_session.query(Post).count() == 0
    assert list((tmp_path / "uploads").iterdir()) == []


def test_unsupported_extension_rejected_without_rows(client, alice, db_session):
    response = upload_post(client, alice, filename="notes.txt", content=b"hello")

    assert response.status_code == 400
    assert "Unsupported file format" in response.json()["detail"]
    assert db_session.query(Post).count() == 0


def test_missing_image_rejected(client, alice):
    response = client.post("/api/posts", headers=auth_headers(alice), data={"caption": "no image"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Image is required"


def test_posts_listed_newest_first_with_paging(client, alice):
    for caption in ("first", "second", "third"):
        assert upload_post(client, alice, caption=caption).status_code == 200

    feed = client.get("/api/posts", headers=auth_headers(alice)).json()
    assert [p["caption"] for p in feed] == ["third", "second", "first"]

    page = client.get("/api/posts?skip=1&limit=1", headers=auth_headers(alice)).json()
    assert [p["caption"] for p in page] == ["second"]


def test_is_liked_is_per_viewer(client, alice, bob):
    upload_post(client, alice)
    client.post("/api/posts/1/like", headers=auth_headers(bob))

    alice_view = client.get("/api/posts", headers=auth_headers(alice)).json()[0]
    bob_view = client.get("/api/posts", headers=auth_headers(bob)).json()[0]

    assert alice_view["like_count"] == bob_view["like_count"] == 1
    assert alice_view["is_liked"] is False
    assert bob_view["is_liked"] is True


def test_get_post_detail_includes_comments(client, alice):
    upload_post(client, alice, caption="detail")
    client.post("/api/posts/1/comments", headers=auth_headers(alice), json={"content": "nice"})

    response = client.get("/api/posts/1", headers=auth_headers(alice))
    assert response.status_code == 200
    body = response.json()
    assert body["caption"] == "detail"
    assert body["comment_count"] == 1
    assert [c["content"] for c in body["comments"]] == ["nice"]


def test_unknown_post_is_404(client, alice):
    response = client.get("/api/posts/42", headers=auth_headers(alice))

    assert response.status_code == 404
    assert response.json()["detail"] == "Post not found"


def test_only_owner_can_delete_post(client, alice, bob):
    upload_post(client, alice)

    response = client.delete("/api/posts/1", headers=auth_headers(bob))
    assert response.status_code == 403


def test_delete_post_cascades_and_removes_file(client, alice, bob, db_session, settings):
    post = upload_post(client, alice).json()
    client.post("/api/posts/1/like", headers=auth_headers(bob))
    client.post("/api/posts/1/comments", headers=auth_headers(bob), json={"content": "hello"})

    response = client.delete("/api/posts/1", headers=auth_headers(alice))

    assert response.status_code == 200
    assert db_session.query(Post).count() == 0
    assert db_session.query(Like).count() == 0
    assert db_session.query(Comment).count() == 0
    assert client.get(post["image_url"]).status_code == 404


def test_feed_items_carry_their_comments(client, alice, bob):
    upload_post(client, alice, caption="quiet")
    upload_post(client, alice, caption="busy")
    client.post("/api/posts/2/comments", headers=auth_headers(bob), json={"content": "first!"})
    client.post("/api/posts/2/comments", headers=auth_headers(alice), json={"content": "thanks"})

    feed = client.get("/api/posts", headers=auth_headers(alice)).json()

    busy, quiet = feed
    assert quiet["comments"] == []
    assert [(c["username"], c["content"]) for c in busy["comments"]] == [
        ("alice", "thanks"),
        ("bob", "first!"),
    ]
    assert busy["comment_count"] == len(busy["comments"])


def test_post_detail_returns_every_comment(client, alice, db_session):
    upload_post(client, alice)
    db_session.add_all(
        [Comment(user_id=alice["id"], post_id=1, content=f"comment {i}") for i in range(105)]
    )
    db_session.commit()

    body = client.get("/api/posts/1", headers=auth_headers(alice)).json()

    assert body["comment_count"] == 105
    assert len(body["comments"]) == 105
    assert body["comments"][0]["content"] == "comment 104"


def test_default_feed_page_is_not_cut_at_twenty(client, alice, db_session):
    db_session.add_all(
        [Post(user_id=alice["id"], image_url=f"/uploads/{i}.png", caption=str(i)) for i in range(25)]
    )
    db_session.commit()

    feed = client.get("/api/posts", headers=auth_headers(alice)).json()

    assert len(feed) == 25
