from flask import request, jsonify
from app.extensions import db
from app.services.user_service import UserService


def create_user():
    """Creates a staff account with a bcrypt-hashed password."""
    user = UserService(db.session).create(request.get_json(silent=True))
    return jsonify(user.to_dict()), 201


def get_user_by_id(user_id):
    return jsonify(UserService(db.session).get(user_id).to_dict()), 200


def update_user(user_id):
    user = UserService(db.session).update(user_id, request.get_json(silent=True))
    return jsonify(user.to_dict()), 200


def delete_user(user_id):
    UserService(db.session).delete(user_id)
    return '', 204
