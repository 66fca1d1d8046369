import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.database import Base, get_db
from app.main import app
from app.models.user import User
from app.models.group import Group, GroupMember
from app.models.song import Song
from app.models.arrangement import Arrangement

TEST_DB_URL = "sqlite:///./test_chordhub.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        # 원작자
        "alice": User(username="alice", name="Alice Kim", display_name="alice_k", show_real_name=True),
        # Community/밴드 일반 멤버
        "bob": User(username="bob", display_name="Bobby"),
        # Community 관리자
        "carol": User(username="carol", name="Carol Lee", display_name="carol"),
        # 어떤 그룹에도 속하지 않은 사용자
        "dave": User(username="dave"),
        # 밴드 관리자
        "frank": User(username="frank"),
        # 협업자(그룹 없음)
        "cole": User(username="cole"),
        # 공동저자(Community/밴드 일반 멤버)
        "cara": User(username="cara"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def community(db, seed_users):
    group = Group(name="Community", slug="community", join_policy="open", is_system_group=True)
    db.add(group)
    db.commit()
    db.refresh(group)
    for username, role in (("carol", "admin"), ("bob", "member"), ("cara", "member")):
        db.add(GroupMember(group_id=group.group_id, user_id=seed_users[username].user_id, role=role))
    db.commit()
    return group


@pytest.fixture
def band(db, seed_users):
    group = Group(name="Sunday Band", slug="sunday-band", join_policy="approval", is_system_group=False)
    db.add(group)
    db.commit()
    db.refresh(group)
    for username, role in (("frank", "owner"), ("bob", "member"), ("cara", "member")):
        db.add(GroupMember(group_id=group.group_id, user_id=seed_users[username].user_id, role=role))
    db.commit()
    return group


@pytest.fixture
def make_song(db):
    counter = {"n": 0}

    def _make(creator: User, owner: Group = None, **fields) -> Song:
        counter["n"] += 1
        song = Song(
            title=fields.pop("title", f"Song {counter['n']}"),
            slug=fields.pop("slug", f"song-{counter['n']}"),
            themes=fields.pop("themes", ["worship"]),
            lyrics=fields.pop("lyrics", "Amazing grace"),
            created_by=creator.user_id,
            owner_type="group" if owner else None,
            owner_id=owner.group_id if owner else None,
            **fields,
        )
        db.add(song)
        db.commit()
        db.refresh(song)
        return song

    return _make


@pytest.fixture
def make_arrangement(db, make_song):
    counter = {"n": 0}

    def _make(creator: User, owner: Group = None, **fields) -> Arrangement:
        counter["n"] += 1
        song = fields.pop("song", None) or make_song(creator)
        arrangement = Arrangement(
            song_id=song.song_id,
            name=fields.pop("name", f"Arrangement {counter['n']}"),
            slug=fields.pop("slug", f"arrangement-{counter['n']}"),
            key=fields.pop("key", "G"),
            tempo=fields.pop("tempo", 72),
            chord_pro_content=fields.pop("chord_pro_content", "[G]Amazing [C]grace"),
            tags=fields.pop("tags", ["acoustic"]),
            created_by=creator.user_id,
            owner_type="group" if owner else None,
            owner_id=owner.group_id if owner else None,
            **fields,
        )
        db.add(arrangement)
        db.commit()
        db.refresh(arrangement)
        return arrangement

    return _make


def get_token(client, username: str) -> str:
    resp = client.post("/api/auth/login", json={"username": username})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, username: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, username)}"}
