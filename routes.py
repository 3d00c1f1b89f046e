# Routes for handling requests
from flask import Blueprint, g, jsonify, request

from auth import create_token, ensure_admin, ensure_correct_user_or_admin, ensure_logged_in
from errors import UnauthorizedError
from forms import (PostNewForm, UserAuthForm, UserNewForm, UserRegisterForm, UserUpdateForm,
                   validate_form)
from models import Post, User

# Create blueprints for different route categories
main_bp = Blueprint('main', __name__)
auth_bp = Blueprint('auth', __name__)
users_bp = Blueprint('users', __name__)
posts_bp = Blueprint('posts', __name__)


def _json_body():
    return request.get_json(silent=True)


@main_bp.route('/', methods=['GET'])
def welcome():
    """Health check for the API"""
    return jsonify({"status": "ok"}), 200


# Authentication Endpoints
@auth_bp.route('/token', methods=['POST'])
def get_token():
    """{ username, password } => { token }"""
    data = validate_form(UserAuthForm, _json_body())
    user = User.authenticate(data['username'], data['password'])
    return jsonify({"token": create_token(user)}), 200


@auth_bp.route('/register', methods=['POST'])
def register():
    """{ username, password, displayName, email } => { token }

    Self-registration always creates a non-admin user.
    """
    data = validate_form(UserRegisterForm, _json_body())
    user = User.register(**data, isAdmin=False)
    return jsonify({"token": create_token(user)}), 201


# User Endpoints
@users_bp.route('', methods=['POST'])
@ensure_admin
def create_user():
    """Admin-only: add a user (possibly an admin) => { user, token }"""
    data = validate_form(UserNewForm, _json_body())
    user = User.register(**data)
    return jsonify({"user": user, "token": create_token(user)}), 201


@users_bp.route('', methods=['GET'])
@ensure_logged_in
def list_users():
    return jsonify({"users": User.find_all()}), 200


@users_bp.route('/<username>', methods=['GET'])
@ensure_logged_in
def get_user(username):
    return jsonify({"user": User.get(username)}), 200


@users_bp.route('/<username>/follows', methods=['GET'])
@ensure_logged_in
def get_following(username):
    return jsonify({"usernames": User.get_following(username)}), 200


@users_bp.route('/<username>/followers', methods=['GET'])
@ensure_logged_in
def get_followers(username):
    return jsonify({"usernames": User.get_followers(username)}), 200


@users_bp.route('/<username>/likes', methods=['GET'])
@ensure_logged_in
def get_user_likes(username):
    return jsonify({"posts": User.get_likes(username)}), 200


@users_bp.route('/<username>', methods=['PATCH'])
@ensure_correct_user_or_admin
def update_user(username):
    """{ displayName, email, password, isAdmin } (any subset) => { user }

    Only admins may change the admin flag.
    """
    data = validate_form(UserUpdateForm, _json_body())
    if 'isAdmin' in data and not g.user['isAdmin']:
        raise UnauthorizedError("Only admins may change admin status")
    user = User.update(username, data)
    return jsonify({"user": user}), 200


@users_bp.route('/<username>', methods=['DELETE'])
@ensure_correct_user_or_admin
def delete_user(username):
    return jsonify({"deleted": User.remove(username)}), 200


@users_bp.route('/<username>/follow/<username2>', methods=['POST'])
@ensure_correct_user_or_admin
def follow_user(username, username2):
    return jsonify({"followed": User.follow_user(username, username2)}), 200


@users_bp.route('/<username>/unFollow/<username2>', methods=['POST'])
@ensure_correct_user_or_admin
def unfollow_user(username, username2):
    return jsonify({"unFollowed": User.un_follow_user(username, username2)}), 200


@users_bp.route('/<username>/like/<int:post_id>', methods=['POST'])
@ensure_correct_user_or_admin
def like_post(username, post_id):
    return jsonify({"liked": User.like_post(username, post_id)}), 200


@users_bp.route('/<username>/unLike/<int:post_id>', methods=['POST'])
@ensure_correct_user_or_admin
def unlike_post(username, post_id):
    return jsonify({"unLiked": User.un_like_post(username, post_id)}), 200


# Post Endpoints
@posts_bp.route('', methods=['POST'])
@ensure_logged_in
def create_post():
    """{ content } => { post }, authored by the caller"""
    data = validate_form(PostNewForm, _json_body())
    post = Post.create(username=g.user['username'], content=data['content'])
    return jsonify({"post": post}), 201


@posts_bp.route('', methods=['GET'])
@ensure_logged_in
def list_posts():
    return jsonify({"posts": Post.find_all()}), 200


@posts_bp.route('/<username>/followFeed', methods=['GET'])
@ensure_correct_user_or_admin
def follow_feed(username):
    """Posts from everyone the user follows, newest first"""
    return jsonify({"posts": Post.get_following_posts(username)}), 200


@posts_bp.route('/<username>/posts', methods=['GET'])
@ensure_logged_in
def user_posts(username):
    return jsonify({"posts": Post.get_posts_from(username)}), 200


@posts_bp.route('/<int:post_id>', methods=['GET'])
@ensure_logged_in
def get_post(post_id):
    return jsonify({"post": Post.get(post_id)}), 200


@posts_bp.route('/<int:post_id>/likes', methods=['GET'])
@ensure_logged_in
def get_post_likes(post_id):
    return jsonify({"usernames": Post.get_likes(post_id)}), 200


@posts_bp.route('/<int:post_id>', methods=['DELETE'])
@ensure_logged_in
def delete_post(post_id):
    """Only the post's author or an admin may delete it"""
    post = Post.get(post_id)
    if not (g.user['isAdmin'] or post['username'] == g.user['username']):
        raise UnauthorizedError("Only the post's owner or an admin may delete a post")
    return jsonify({"deleted": Post.remove(post_id)}), 200
