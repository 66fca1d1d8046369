from tests.conftest import auth_headers


def _create_song(client, username, **overrides):
    payload = {
        "title": "How Great Thou Art",
        "artist": "Carl Boberg",
        "themes": ["praise"],
        "lyrics": "O Lord my God",
        "slug": "how-great-thou-art",
    }
    payload.update(overrides)
    return client.post("/api/songs", json=payload, headers=auth_headers(client, username))


def test_create_personal_song(client, seed_users):
    resp = _create_song(client, "alice")
    assert resp.status_code == 200
    data = resp.json()
    assert data["created_by"] == seed_users["alice"].user_id
    assert data["owner_type"] is None
    assert data["themes"] == ["praise"]

    resp = client.get(f"/api/songs/{data['song_id']}")
    assert resp.status_code == 200
    assert resp.json()["owner"] == {
        "type": "user",
        "id": seed_users["alice"].user_id,
        "display_name": "Alice Kim",
        "slug": None,
    }


def test_create_song_requires_login(client, seed_users):
    resp = client.post("/api/songs", json={"title": "x", "slug": "x"})
    assert resp.status_code == 401


def test_create_song_duplicate_slug(client, seed_users):
    assert _create_song(client, "alice").status_code == 200
    assert _create_song(client, "bob").status_code == 400


def test_create_song_owned_by_group(client, seed_users, band):
    resp = _create_song(client, "frank", owner_type="group", owner_id=band.group_id)
    assert resp.status_code == 200
    assert resp.json()["owner_id"] == band.group_id

    resp = client.get("/api/songs/by-slug/how-great-thou-art")
    assert resp.json()["owner"]["display_name"] == "Sunday Band"


def test_create_song_for_group_requires_admin(client, seed_users, band):
    resp = _create_song(client, "bob", owner_type="group", owner_id=band.group_id)
    assert resp.status_code == 403


def test_create_song_directly_in_community_rejected(client, seed_users, community):
    resp = _create_song(client, "carol", owner_type="group", owner_id=community.group_id)
    assert resp.status_code == 400


def test_get_missing_song(client, seed_users):
    assert client.get("/api/songs/9999").status_code == 404
    assert client.get("/api/songs/by-slug/missing").status_code == 404


def test_update_personal_song(client, seed_users, make_song):
    song = make_song(seed_users["alice"])
    resp = client.put(
        f"/api/songs/{song.song_id}", json={"title": "Renamed"}, headers=auth_headers(client, "alice"),
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Renamed"
    # 부분 수정: 보내지 않은 필드는 유지
    assert resp.json()["lyrics"] == "Amazing grace"

    resp = client.put(
        f"/api/songs/{song.song_id}", json={"title": "Hijacked"}, headers=auth_headers(client, "bob"),
    )
    assert resp.status_code == 403


def test_update_personal_song_records_no_history(client, seed_users, community, make_song):
    song = make_song(seed_users["alice"])
    headers = auth_headers(client, "alice")
    client.put(f"/api/songs/{song.song_id}", json={"title": "One"}, headers=headers)
    client.put(f"/api/songs/{song.song_id}", json={"title": "Two"}, headers=headers)

    resp = client.get(f"/api/versions/song/{song.song_id}", headers=auth_headers(client, "carol"))
    assert resp.status_code == 200
    assert resp.json() == []


def test_can_edit_endpoint(client, seed_users, community, make_song):
    song = make_song(seed_users["alice"], community)

    resp = client.get(f"/api/songs/{song.song_id}/can-edit", headers=auth_headers(client, "bob"))
    assert resp.json() == {"can_edit": True, "is_owner": False, "is_original_creator": False}

    resp = client.get(f"/api/songs/{song.song_id}/can-edit", headers=auth_headers(client, "carol"))
    assert resp.json() == {"can_edit": True, "is_owner": True, "is_original_creator": False}

    resp = client.get(f"/api/songs/{song.song_id}/can-edit", headers=auth_headers(client, "dave"))
    assert resp.json()["can_edit"] is False

    resp = client.get("/api/songs/9999/can-edit", headers=auth_headers(client, "alice"))
    assert resp.json()["can_edit"] is False


def test_transfer_and_reclaim_endpoints(client, seed_users, community, make_song):
    song = make_song(seed_users["alice"])

    resp = client.post(f"/api/songs/{song.song_id}/transfer", headers=auth_headers(client, "bob"))
    assert resp.status_code == 403

    alice = auth_headers(client, "alice")
    resp = client.post(f"/api/songs/{song.song_id}/transfer", headers=alice)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert client.get(f"/api/songs/{song.song_id}").json()["owner"]["display_name"] == "Community"

    resp = client.post(f"/api/songs/{song.song_id}/transfer", headers=alice)
    assert resp.status_code == 400

    resp = client.post(f"/api/songs/{song.song_id}/reclaim", headers=auth_headers(client, "carol"))
    assert resp.status_code == 403

    resp = client.post(f"/api/songs/{song.song_id}/reclaim", headers=alice)
    assert resp.status_code == 200
    assert client.get(f"/api/songs/{song.song_id}").json()["owner_type"] is None


def test_community_edit_and_rollback_flow(client, seed_users, community, make_song):
    song = make_song(seed_users["alice"], title="Original Title")
    song_id = song.song_id
    alice = auth_headers(client, "alice")
    bob = auth_headers(client, "bob")
    carol = auth_headers(client, "carol")

    # 원작자가 Community로 이관하면 원본이 v1로 남는다
    assert client.post(f"/api/songs/{song_id}/transfer", headers=alice).status_code == 200
    history = client.get(f"/api/versions/song/{song_id}", headers=carol).json()
    assert [v["version"] for v in history] == [1]
    assert history[0]["change_description"] == "Original version (before community transfer)"

    # 일반 멤버 B는 편집할 수 있다. 첫 수정의 직전 상태는 v1과 같으므로 새 버전은 없다.
    resp = client.put(f"/api/songs/{song_id}", json={"title": "Bob Edit"}, headers=bob)
    assert resp.status_code == 200
    assert [v["version"] for v in client.get(f"/api/versions/song/{song_id}", headers=carol).json()] == [1]

    # 다음 수정은 직전 상태("Bob Edit")가 v1과 달라서 v2로 남는다.
    resp = client.put(f"/api/songs/{song_id}", json={"lyrics": "Bob lyrics"}, headers=bob)
    assert resp.status_code == 200
    history = client.get(f"/api/versions/song/{song_id}", headers=carol).json()
    assert [v["version"] for v in history] == [2, 1]
    assert history[0]["snapshot"]["title"] == "Bob Edit"
    assert history[0]["changed_by_user"]["username"] == "bob"

    # 일반 멤버는 이력을 볼 수 없고 롤백도 못 한다
    assert client.get(f"/api/versions/song/{song_id}", headers=bob).json() == []
    assert client.get(f"/api/versions/song/{song_id}/can-access", headers=bob).json() == {"can_access": False}
    assert client.post(f"/api/versions/song/{song_id}/rollback/1", headers=bob).status_code == 403

    # Community 관리자 C가 v1로 롤백
    resp = client.post(f"/api/versions/song/{song_id}/rollback/1", headers=carol)
    assert resp.status_code == 200
    assert resp.json()["latest_version"] == 4

    history = client.get(f"/api/versions/song/{song_id}", headers=carol).json()
    assert [v["version"] for v in history] == [4, 3, 2, 1]

    current = client.get(f"/api/songs/{song_id}").json()
    assert current["title"] == "Original Title"
    assert current["lyrics"] == "Amazing grace"

    resp = client.get(f"/api/versions/song/{song_id}/2", headers=carol)
    assert resp.status_code == 200
    assert resp.json()["snapshot"]["title"] == "Bob Edit"

    resp = client.get(f"/api/versions/song/{song_id}?limit=2", headers=alice)
    assert [v["version"] for v in resp.json()] == [4, 3]


def test_version_endpoints_for_missing_rows(client, seed_users, community, make_song):
    song = make_song(seed_users["alice"], community)
    carol = auth_headers(client, "carol")
    assert client.get(f"/api/versions/song/{song.song_id}/7", headers=carol).status_code == 404
    assert client.post(f"/api/versions/song/{song.song_id}/rollback/7", headers=carol).status_code == 404
    assert client.post("/api/versions/song/9999/rollback/1", headers=carol).status_code == 404
    assert client.get(f"/api/versions/lyrics/{song.song_id}", headers=carol).status_code == 422


def test_moderator_endpoint(client, seed_users, community):
    resp = client.get("/api/versions/moderator", headers=auth_headers(client, "carol"))
    assert resp.json() == {"is_moderator": True}
    resp = client.get("/api/versions/moderator", headers=auth_headers(client, "bob"))
    assert resp.json() == {"is_moderator": False}
