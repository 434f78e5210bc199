import io

from conftest import PNG_BYTES, auth_headers, register, upload_post
from instalike.modules.follows.models.follow import Follow


def test_profile_counts(client, alice, bob):
    carol = register(client, "carol")
    for _ in range(3):
        upload_post(client, alice)
    client.post(f"/api/users/{alice['id']}/follow", headers=auth_headers(bob))
    client.post(f"/api/users/{alice['id']}/follow", headers=auth_headers(carol))
    client.post(f"/api/users/{carol['id']}/follow", headers=auth_headers(alice))

    response = client.get(f"/api/users/{alice['id']}", headers=auth_headers(bob))

    assert response.status_code == 200
    profile = response.json()
    assert profile["post_count"] == 3
    assert profile["followers_count"] == 2
    assert profile["following_count"] == 1
    assert profile["is_following"] is True

    own_view = client.get(f"/api/users/{alice['id']}", headers=auth_headers(alice)).json()
    assert own_view["is_following"] is False


def test_unknown_user_is_404(client, alice):
    response = client.get("/api/users/99", headers=auth_headers(alice))

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_user_posts(client, alice, bob):
    upload_post(client, alice, caption="a1")
    upload_post(client, bob, caption="b1")
    upload_post(client, alice, caption="a2")

    response = client.get(f"/api/users/{alice['id']}/posts", headers=auth_headers(bob))

    assert response.status_code == 200
    assert [p["caption"] for p in response.json()] == ["a2", "a1"]
    assert client.get("/api/users/99/posts", headers=auth_headers(bob)).status_code == 404


def test_self_follow_rejected(client, alice):
    response = client.post(f"/api/users/{alice['id']}/follow", headers=auth_headers(alice))

    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot follow yourself"


def test_duplicate_follow_conflicts(client, alice, bob, db_session):
    first = client.post(f"/api/users/{alice['id']}/follow", headers=auth_headers(bob))
    second = client.post(f"/api/users/{alice['id']}/follow", headers=auth_headers(bob))

    assert first.status_code == 200
    assert first.json() == {
        "message": "You are now following alice",
        "following": True,
        "followers_count": 1,
    }
    assert second.status_code == 400
    assert second.json()["detail"] == "You are already following this user"
    assert db_session.query(Follow).count() == 1


def test_follow_unknown_user_is_404(client, alice):
    assert client.post("/api/users/99/follow", headers=auth_headers(alice)).status_code == 404
    assert client.delete("/api/users/99/follow", headers=auth_headers(alice)).status_code == 404


def test_unfollow_is_idempotent(client, alice, bob):
    client.post(f"/api/users/{alice['id']}/follow", headers=auth_headers(bob))

    first = client.delete(f"/api/users/{alice['id']}/follow", headers=auth_headers(bob))
    second = client.delete(f"/api/users/{alice['id']}/follow", headers=auth_headers(bob))

    assert first.status_code == second.status_code == 200
    assert first.json()["following"] is False
    assert first.json()["followers_count"] == 0
    assert second.json()["followers_count"] == 0


def test_update_bio_only(client, alice):
    response = client.put("/api/users/profile", headers=auth_headers(alice), data={"bio": "hello there"})

    assert response.status_code == 200
    body = response.json()
    assert body["bio"] == "hello there"
    assert body["profile_picture"] is None
    assert body["username"] == "alice"


def test_update_picture_keeps_bio_and_replaces_old_file(client, alice, tmp_path):
    client.put("/api/users/profile", headers=auth_headers(alice), data={"bio": "kept"})

    first = client.put(
        "/api/users/profile",
        headers=auth_headers(alice),
        files={"profile_picture": ("me.jpg", io.BytesIO(PNG_BYTES), "image/jpeg")},
    ).json()
    second = client.put(
        "/api/users/profile",
        headers=auth_headers(alice),
        files={"profile_picture": ("me2.png", io.BytesIO(PNG_BYTES), "image/png")},
    ).json()

    assert first["bio"] == second["bio"] == "kept"
    assert first["profile_picture"].startswith("/uploads/")
    assert second["profile_picture"] != first["profile_picture"]
    assert client.get(first["profile_picture"]).status_code == 404
    assert client.get(second["profile_picture"]).status_code == 200


def test_update_with_nothing_is_400(client, alice):
    response = client.put("/api/users/profile", headers=auth_headers(alice))

    assert response.status_code == 400
    assert response.json()["detail"] == "No updates provided"


def test_update_rejects_bad_picture(client, alice):
    response = client.put(
        "/api/users/profile",
        headers=auth_headers(alice),
        files={"profile_picture": ("me.txt", io.BytesIO(b"text"), "text/plain")},
    )

    assert response.status_code == 400
    me = client.get("/api/users/me", headers=auth_headers(alice)).json()
    assert me["profile_picture"] is None


def test_blank_bio_clears_it(client, alice):
    client.put("/api/users/profile", headers=auth_headers(alice), data={"bio": "hello"})

    response = client.put("/api/users/profile", headers=auth_headers(alice), data={"bio": ""})

    assert response.status_code == 200
    assert response.json()["bio"] is None


def test_user_posts_carry_comments(client, alice, bob):
    upload_post(client, alice)
    client.post("/api/posts/1/comments", headers=auth_headers(bob), json={"content": "wow"})

    posts = client.get(f"/api/users/{alice['id']}/posts", headers=auth_headers(bob)).json()

    assert [c["content"] for c in posts[0]["comments"]] == ["wow"]
    assert posts[0]["comments"][0]["username"] == "bob"
