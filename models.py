# Database models and the user/post data-access operations
import logging
from datetime import datetime, timezone

from flask_bcrypt import Bcrypt
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import IntegrityError

from errors import BadRequestError, NotFoundError, UnauthorizedError

db = SQLAlchemy()
bcrypt = Bcrypt()

logger = logging.getLogger(__name__)


def _utcnow():
    return datetime.now(timezone.utc)


def _as_utc(value):
    # SQLite hands back naive datetimes; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Follow(db.Model):
    __tablename__ = 'follows'
    user_following = db.Column(db.String(25), db.ForeignKey('users.username', ondelete='CASCADE'),
                               primary_key=True)
    user_followed = db.Column(db.String(25), db.ForeignKey('users.username', ondelete='CASCADE'),
                              primary_key=True)


class Like(db.Model):
    __tablename__ = 'likes'
    username = db.Column(db.String(25), db.ForeignKey('users.username', ondelete='CASCADE'),
                         primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True)


class User(db.Model):
    __tablename__ = 'users'
    username = db.Column(db.String(25), primary_key=True)
    password = db.Column(db.String(255), nullable=False)
    display_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(100), nullable=False)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)

    posts = db.relationship('Post', backref='author', lazy=True, cascade='all, delete')
    likes = db.relationship('Like', backref='user', lazy=True, cascade='all, delete')
    following = db.relationship('Follow', foreign_keys=[Follow.user_following], lazy=True,
                                cascade='all, delete')
    followers = db.relationship('Follow', foreign_keys=[Follow.user_followed], lazy=True,
                                cascade='all, delete')

    # Wire names accepted by update(), mapped to columns
    UPDATABLE = {
        'displayName': 'display_name',
        'email': 'email',
        'password': 'password',
        'isAdmin': 'is_admin',
    }

    def to_dict(self):
        """Public representation; never includes the password hash."""
        return {
            "username": self.username,
            "displayName": self.display_name,
            "email": self.email,
            "isAdmin": bool(self.is_admin),
        }

    @staticmethod
    def _hash(password):
        return bcrypt.generate_password_hash(password).decode('utf-8')

    @classmethod
    def _get_or_404(cls, username):
        user = db.session.get(cls, username)
        if user is None:
            raise NotFoundError(f"No user: {username}")
        return user

    @classmethod
    def authenticate(cls, username, password):
        """Return the user's data if the credentials match.

        Raises UnauthorizedError for an unknown username and for a wrong
        password alike, so callers cannot tell which one failed.
        """
        user = db.session.get(cls, username)
        if user and bcrypt.check_password_hash(user.password, password):
            return user.to_dict()
        raise UnauthorizedError("Invalid username/password")

    @classmethod
    def register(cls, username, password, displayName, email, isAdmin=False):
        """Create a user and return its data. Duplicate usernames are a BadRequestError."""
        if db.session.get(cls, username) is not None:
            raise BadRequestError(f"Duplicate username: {username}")

        user = cls(
            username=username,
            password=cls._hash(password),
            display_name=displayName,
            email=email,
            is_admin=bool(isAdmin),
        )
        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise BadRequestError(f"Duplicate username: {username}")
        logger.info("Registered user %s (admin=%s)", username, user.is_admin)
        return user.to_dict()

    @classmethod
    def find_all(cls):
        return [u.to_dict() for u in cls.query.order_by(cls.username).all()]

    @classmethod
    def get(cls, username):
        return cls._get_or_404(username).to_dict()

    @classmethod
    def update(cls, username, data):
        """Partial update: only the fields present in `data` change.

        `data` may hold displayName, email, password and isAdmin. Passwords are
        re-hashed. Every supplied field is applied as given, including the admin
        flag, so callers must decide which fields a requester may change.
        """
        if not data:
            raise BadRequestError("No data")

        unknown = sorted(set(data) - set(cls.UPDATABLE))
        if unknown:
            raise BadRequestError(f"Cannot update fields: {', '.join(unknown)}")

        user = cls._get_or_404(username)
        for key, value in data.items():
            if key == 'password':
                value = cls._hash(value)
            setattr(user, cls.UPDATABLE[key], value)

        db.session.commit()
        logger.info("Updated user %s: %s", username, sorted(data))
        return user.to_dict()

    @classmethod
    def get_following(cls, username):
        """Usernames that `username` follows."""
        cls._get_or_404(username)
        rows = Follow.query.filter_by(user_following=username)\
            .order_by(Follow.user_followed).all()
        return [row.user_followed for row in rows]

    @classmethod
    def get_followers(cls, username):
        """Usernames following `username`."""
        cls._get_or_404(username)
        rows = Follow.query.filter_by(user_followed=username)\
            .order_by(Follow.user_following).all()
        return [row.user_following for row in rows]

    @classmethod
    def get_likes(cls, username):
        """Posts liked by `username`, newest first."""
        cls._get_or_404(username)
        posts = Post.query.join(Like, Like.post_id == Post.id)\
            .filter(Like.username == username)\
            .order_by(*Post.NEWEST_FIRST).all()
        return [p.to_dict() for p in posts]

    @classmethod
    def _check_like_targets(cls, username, post_id):
        cls._get_or_404(username)
        if db.session.get(Post, post_id) is None:
            raise NotFoundError(f"No post with id: {post_id}")

    @classmethod
    def like_post(cls, username, post_id):
        cls._check_like_targets(username, post_id)
        if db.session.get(Like, (username, post_id)) is not None:
            raise BadRequestError(f"{username} already likes post {post_id}")
        try:
            db.session.add(Like(username=username, post_id=post_id))
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise BadRequestError(f"{username} already likes post {post_id}")
        logger.info("%s liked post %s", username, post_id)
        return post_id

    @classmethod
    def un_like_post(cls, username, post_id):
        cls._check_like_targets(username, post_id)
        like = db.session.get(Like, (username, post_id))
        if like is not None:
            db.session.delete(like)
            db.session.commit()
            logger.info("%s unliked post %s", username, post_id)
        return post_id

    @classmethod
    def follow_user(cls, username1, username2):
        """username1 follows username2; returns username2."""
        cls._get_or_404(username1)
        cls._get_or_404(username2)
        if db.session.get(Follow, (username1, username2)) is not None:
            raise BadRequestError(f"{username1} already follows {username2}")
        try:
            db.session.add(Follow(user_following=username1, user_followed=username2))
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise BadRequestError(f"{username1} already follows {username2}")
        logger.info("%s followed %s", username1, username2)
        return username2

    @classmethod
    def un_follow_user(cls, username1, username2):
        cls._get_or_404(username1)
        cls._get_or_404(username2)
        edge = db.session.get(Follow, (username1, username2))
        if edge is not None:
            db.session.delete(edge)
            db.session.commit()
            logger.info("%s unfollowed %s", username1, username2)
        return username2

    @classmethod
    def remove(cls, username):
        """Delete a user along with their posts, likes and follow edges."""
        user = cls._get_or_404(username)
        db.session.delete(user)
        db.session.commit()
        logger.info("Deleted user %s", username)
        return username


class Post(db.Model):
    __tablename__ = 'posts'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(25), db.ForeignKey('users.username', ondelete='CASCADE'),
                         nullable=False)
    content = db.Column(db.Text, nullable=False)
    time_posted = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    likes = db.relationship('Like', backref='post', lazy=True, cascade='all, delete')

    # Ties on time_posted fall back to insertion order
    NEWEST_FIRST = (time_posted.desc(), id.desc())

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "content": self.content,
            "timePosted": _as_utc(self.time_posted).isoformat(),
        }

    @classmethod
    def create(cls, username, content):
        if db.session.get(User, username) is None:
            raise NotFoundError(f"No user: {username}")

        post = cls(username=username, content=content)
        db.session.add(post)
        db.session.commit()
        logger.info("Created post %s by %s", post.id, username)
        return post.to_dict()

    @classmethod
    def find_all(cls):
        return [p.to_dict() for p in cls.query.order_by(*cls.NEWEST_FIRST).all()]

    @classmethod
    def get_following_posts(cls, username):
        """Posts by everyone `username` follows, newest first."""
        posts = cls.query.join(Follow, Follow.user_followed == cls.username)\
            .filter(Follow.user_following == username)\
            .order_by(*cls.NEWEST_FIRST).all()
        return [p.to_dict() for p in posts]

    @classmethod
    def get_posts_from(cls, username):
        posts = cls.query.filter_by(username=username)\
            .order_by(*cls.NEWEST_FIRST).all()
        return [p.to_dict() for p in posts]

    @classmethod
    def _get_or_404(cls, post_id):
        post = db.session.get(cls, post_id)
        if post is None:
            raise NotFoundError(f"No such post: {post_id}")
        return post

    @classmethod
    def get(cls, post_id):
        return cls._get_or_404(post_id).to_dict()

    @classmethod
    def get_likes(cls, post_id):
        """Usernames of those who liked this post."""
        rows = Like.query.filter_by(post_id=post_id).order_by(Like.username).all()
        return [row.username for row in rows]

    @classmethod
    def remove(cls, post_id):
        post = cls._get_or_404(post_id)
        db.session.delete(post)
        db.session.commit()
        logger.info("Deleted post %s", post_id)
        return post_id
