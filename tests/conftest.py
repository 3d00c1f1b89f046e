import pytest

from app import create_app
from auth import create_token
from models import Post, User, db


def seed():
    """Three users plus an admin; u1 follows u2 and u3, u3 follows u2.

    Posts 1-6 are two per user in order u1, u2, u3. Likes: u1->3, u2->1,
    u3->5, u3->3.
    """
    for n in (1, 2, 3):
        User.register(
            username=f"u{n}",
            password=f"password{n}",
            displayName=f"U{n}D",
            email=f"user{n}@user.com",
            isAdmin=False,
        )
    User.register(
        username="admin",
        password="password-admin",
        displayName="Admin",
        email="admin@user.com",
        isAdmin=True,
    )

    User.follow_user("u1", "u2")
    User.follow_user("u1", "u3")
    User.follow_user("u3", "u2")

    for n in (1, 2, 3):
        Post.create(username=f"u{n}", content=f"User {n} Post 1")
        Post.create(username=f"u{n}", content=f"User {n} Post 2")

    User.like_post("u1", 3)
    User.like_post("u2", 1)
    User.like_post("u3", 5)
    User.like_post("u3", 3)


@pytest.fixture()
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        seed()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def _headers(username, is_admin=False):
    token = create_token({"username": username, "isAdmin": is_admin})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def u1_headers(app):
    return _headers("u1")


@pytest.fixture()
def u2_headers(app):
    return _headers("u2")


@pytest.fixture()
def admin_headers(app):
    return _headers("admin", is_admin=True)
