from flask import Blueprint, request, jsonify, g
from flask_jwt_extended import create_access_token, get_jwt_identity, verify_jwt_in_request
from functools import wraps
from extensions import db
from models.user import User
import logging

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


# Decorator to resolve the calling user from the bearer token
def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        verify_jwt_in_request()
        try:
            user_id = int(get_jwt_identity())
        except (TypeError, ValueError):
            return jsonify({'message': 'Token is invalid!'}), 401

        current_user = db.session.get(User, user_id)
        if not current_user:
            return jsonify({'message': 'User not found!'}), 401

        g.user_id = current_user.id
        return f(current_user, *args, **kwargs)
    return decorated


# ---------------- GOOGLE SIGN-IN ----------------
@auth_bp.route("/google", methods=["POST"])
def google_login():
    """
    Signs a user in from the Google profile the client already obtained.
    The profile is trusted as sent; no token verification happens here.
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data.get("user"), dict):
        return jsonify({"message": "Authentication failed", "error": "user profile is required"}), 401

    profile = data["user"]
    email, name, sub = profile.get("email"), profile.get("name"), profile.get("sub")
    if not isinstance(email, str) or "@" not in email or not name or not sub:
        return jsonify({"message": "Authentication failed", "error": "email, name and sub are required"}), 401

    user = User.query.filter_by(google_id=str(sub)).first()
    if not user:
        user = User.query.filter_by(email=email).first()
        if user:
            user.google_id = str(sub)
        else:
            user = User(email=email, name=name, avatar=profile.get("picture"), google_id=str(sub))
            db.session.add(user)
        db.session.commit()
        logger.info("Signed in new Google account %s as user %s", email, user.id)

    token = create_access_token(identity=str(user.id))
    return jsonify({"user": user.to_dict(), "token": token}), 200


@auth_bp.route("/me", methods=["GET"])
@token_required
def me(current_user):
    return jsonify(current_user.to_dict()), 200
