import pytest
from sqlalchemy.exc import IntegrityError

from app.models.group import Group
from app.schemas.group import GroupCreate
from app.services import membership_service
from app.utils.errors import InvalidStateError, PermissionDeniedError
from tests.conftest import auth_headers


def test_resolve_community_group(db, seed_users, community, band):
    assert membership_service.resolve_community_group(db).group_id == community.group_id
    assert membership_service.is_community_group(db, community.group_id) is True
    assert membership_service.is_community_group(db, band.group_id) is False
    assert membership_service.is_community_group(db, None) is False


def test_resolve_community_group_absent(db, seed_users, band):
    assert membership_service.resolve_community_group(db) is None


def test_only_one_system_group(db, seed_users, community):
    db.add(Group(name="Another", slug="another", is_system_group=True))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_ensure_community_group_is_idempotent(db, seed_users):
    first = membership_service.ensure_community_group(db, owner=seed_users["carol"])
    second = membership_service.ensure_community_group(db)
    assert first.group_id == second.group_id
    assert first.is_system_group is True
    assert membership_service.membership_of(db, first.group_id, seed_users["carol"].user_id) == "owner"


def test_membership_lookup(db, seed_users, community, band):
    assert membership_service.membership_of(db, community.group_id, seed_users["carol"].user_id) == "admin"
    assert membership_service.membership_of(db, band.group_id, seed_users["dave"].user_id) is None
    assert membership_service.is_admin_or_owner(db, band.group_id, seed_users["frank"].user_id) is True
    assert membership_service.is_admin_or_owner(db, band.group_id, seed_users["bob"].user_id) is False
    assert membership_service.is_member(db, band.group_id, seed_users["bob"].user_id) is True


def test_create_group_makes_creator_owner(client, seed_users):
    headers = auth_headers(client, "dave")
    resp = client.post("/api/groups", json={"name": "Youth Worship Team", "join_policy": "open"}, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["slug"] == "youth-worship-team"
    assert data["role"] == "owner"
    assert data["is_system_group"] is False

    resp = client.post("/api/groups", json={"name": "Youth Worship Team"}, headers=headers)
    assert resp.json()["slug"] == "youth-worship-team-1"

    resp = client.get("/api/groups", headers=headers)
    assert len(resp.json()) == 2


def test_get_community_group(client, seed_users, community):
    resp = client.get("/api/groups/community", headers=auth_headers(client, "carol"))
    assert resp.status_code == 200
    assert resp.json()["is_system_group"] is True
    assert resp.json()["role"] == "admin"


def test_get_community_group_missing(client, seed_users):
    resp = client.get("/api/groups/community", headers=auth_headers(client, "carol"))
    assert resp.status_code == 404


def test_get_group_by_slug(client, seed_users, band):
    resp = client.get("/api/groups/by-slug/sunday-band", headers=auth_headers(client, "dave"))
    assert resp.status_code == 200
    assert resp.json()["role"] is None


def test_join_community_and_open_groups(client, seed_users, community):
    headers = auth_headers(client, "dave")
    resp = client.post(f"/api/groups/{community.group_id}/join", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"joined": True, "requested": False, "role": "member"}

    resp = client.post(f"/api/groups/{community.group_id}/join", headers=headers)
    assert resp.status_code == 400


def test_join_approval_group_creates_request(client, seed_users, band):
    dave = auth_headers(client, "dave")
    resp = client.post(f"/api/groups/{band.group_id}/join", headers=dave)
    assert resp.status_code == 200
    assert resp.json() == {"joined": False, "requested": True, "role": None}

    # 대기 중인 요청이 있으면 다시 요청할 수 없다
    assert client.post(f"/api/groups/{band.group_id}/join", headers=dave).status_code == 400

    frank = auth_headers(client, "frank")
    assert client.get(f"/api/groups/{band.group_id}/join-requests", headers=auth_headers(client, "bob")).status_code == 403
    requests = client.get(f"/api/groups/{band.group_id}/join-requests", headers=frank).json()
    assert [(r["username"], r["status"]) for r in requests] == [("dave", "pending")]
    path = f"/api/groups/join-requests/{requests[0]['request_id']}"

    assert client.post(f"{path}/approve", headers=auth_headers(client, "bob")).status_code == 403

    resp = client.post(f"{path}/approve", headers=frank)
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"
    assert resp.json()["resolved_by"] == seed_users["frank"].user_id

    members = client.get(f"/api/groups/{band.group_id}/members", headers=dave).json()
    assert "dave" in [m["username"] for m in members]

    # 이미 처리된 요청은 다시 처리할 수 없다
    assert client.post(f"{path}/reject", headers=frank).status_code == 404


def test_reject_join_request(db, seed_users, band):
    dave, frank = seed_users["dave"], seed_users["frank"]
    membership_service.join_group(db, band.group_id, dave)
    request = membership_service.list_join_requests(db, band.group_id, frank)[0]

    rejected = membership_service.reject_join_request(db, request.request_id, frank)

    assert rejected.status == "rejected"
    assert rejected.resolved_at is not None
    assert membership_service.membership_of(db, band.group_id, dave.user_id) is None
    assert membership_service.list_join_requests(db, band.group_id, frank) == []
    # 거절된 뒤에는 다시 요청할 수 있다
    assert membership_service.join_group(db, band.group_id, dave)["requested"] is True


def test_cancel_join_request(client, seed_users, band):
    dave = auth_headers(client, "dave")
    assert client.delete(f"/api/groups/{band.group_id}/join-requests/me", headers=dave).status_code == 404

    client.post(f"/api/groups/{band.group_id}/join", headers=dave)
    assert client.delete(f"/api/groups/{band.group_id}/join-requests/me", headers=dave).status_code == 200
    assert client.get(f"/api/groups/{band.group_id}/join-requests", headers=auth_headers(client, "frank")).json() == []


def test_add_member(client, seed_users, band):
    dave_id = seed_users["dave"].user_id
    resp = client.post(
        f"/api/groups/{band.group_id}/members", json={"user_id": dave_id}, headers=auth_headers(client, "bob"),
    )
    assert resp.status_code == 403

    resp = client.post(
        f"/api/groups/{band.group_id}/members", json={"user_id": dave_id}, headers=auth_headers(client, "frank"),
    )
    assert resp.status_code == 200
    assert resp.json()["username"] == "dave"

    resp = client.get(f"/api/groups/{band.group_id}/members", headers=auth_headers(client, "dave"))
    assert [m["username"] for m in resp.json()] == ["frank", "bob", "cara", "dave"]


def test_admin_seniority(db, seed_users, band):
    frank, bob, cara = seed_users["frank"], seed_users["bob"], seed_users["cara"]
    membership_service.set_member_role(db, band.group_id, bob.user_id, "admin", frank)
    membership_service.set_member_role(db, band.group_id, cara.user_id, "admin", frank)

    # 나중에 승격된 관리자는 선임 관리자를 강등할 수 없다
    with pytest.raises(PermissionDeniedError):
        membership_service.set_member_role(db, band.group_id, bob.user_id, "member", cara)

    demoted = membership_service.set_member_role(db, band.group_id, cara.user_id, "member", bob)
    assert demoted.role == "member"
    assert demoted.promoted_at is None


def test_owner_role_cannot_change(db, seed_users, band):
    membership_service.set_member_role(db, band.group_id, seed_users["bob"].user_id, "admin", seed_users["frank"])
    with pytest.raises(InvalidStateError):
        membership_service.set_member_role(
            db, band.group_id, seed_users["frank"].user_id, "member", seed_users["bob"],
        )


def test_member_cannot_change_roles(client, seed_users, band):
    resp = client.put(
        f"/api/groups/{band.group_id}/members/{seed_users['cara'].user_id}",
        json={"role": "admin"},
        headers=auth_headers(client, "bob"),
    )
    assert resp.status_code == 403


def test_remove_member(client, seed_users, band):
    cara_id = seed_users["cara"].user_id
    resp = client.delete(f"/api/groups/{band.group_id}/members/{cara_id}", headers=auth_headers(client, "bob"))
    assert resp.status_code == 403

    resp = client.delete(f"/api/groups/{band.group_id}/members/{cara_id}", headers=auth_headers(client, "frank"))
    assert resp.status_code == 200


def test_owner_cannot_remove_self_or_be_removed(db, seed_users, band):
    frank, bob = seed_users["frank"], seed_users["bob"]
    with pytest.raises(InvalidStateError):
        membership_service.remove_member(db, band.group_id, frank.user_id, frank)

    membership_service.set_member_role(db, band.group_id, bob.user_id, "admin", frank)
    with pytest.raises(PermissionDeniedError):
        membership_service.remove_member(db, band.group_id, frank.user_id, bob)

    assert membership_service.membership_of(db, band.group_id, frank.user_id) == "owner"


def test_owner_self_removal_over_http_keeps_owner(client, seed_users, band):
    frank_id = seed_users["frank"].user_id
    resp = client.delete(f"/api/groups/{band.group_id}/members/{frank_id}", headers=auth_headers(client, "frank"))
    assert resp.status_code == 400
    members = client.get(f"/api/groups/{band.group_id}/members", headers=auth_headers(client, "frank")).json()
    assert [m["username"] for m in members if m["role"] == "owner"] == ["frank"]


def test_owner_leave_passes_ownership_to_senior_admin(db, seed_users, band):
    frank, cara = seed_users["frank"], seed_users["cara"]
    membership_service.set_member_role(db, band.group_id, cara.user_id, "admin", frank)

    membership_service.leave_group(db, band.group_id, frank)

    assert membership_service.membership_of(db, band.group_id, frank.user_id) is None
    assert membership_service.membership_of(db, band.group_id, cara.user_id) == "owner"
    assert membership_service.membership_of(db, band.group_id, seed_users["bob"].user_id) == "member"


def test_owner_leave_without_admin_promotes_oldest_member(db, seed_users, band):
    membership_service.leave_group(db, band.group_id, seed_users["frank"])
    assert membership_service.membership_of(db, band.group_id, seed_users["bob"].user_id) == "owner"


def test_sole_owner_cannot_leave(db, seed_users):
    solo = membership_service.create_group(db, GroupCreate(name="Solo"), seed_users["dave"])
    with pytest.raises(InvalidStateError):
        membership_service.leave_group(db, solo.group_id, seed_users["dave"])
    assert membership_service.membership_of(db, solo.group_id, seed_users["dave"].user_id) == "owner"


def test_leave_when_not_member(client, seed_users, band):
    resp = client.post(f"/api/groups/{band.group_id}/leave", headers=auth_headers(client, "dave"))
    assert resp.status_code == 400
