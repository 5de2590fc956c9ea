from flask import Blueprint, jsonify, current_app, g

from classes.user_manager import UserManager
from models.users import ROLE_MENTOR
from utils.tokens import get_jwt_token
from utils.utils import login_required, api_errors, get_json_body, current_user_id

auth_bp = Blueprint('auth_bp', __name__)


def issue_token(user):
    return get_jwt_token({"user_id": user.id, "role": user.role})


# Register
@auth_bp.route('/register', methods=['POST'])
@api_errors("register")
def register():
    data = get_json_body()

    user = UserManager.register(
        email=data.get("email"),
        password=data.get("password"),
        full_name=data.get("full_name"),
        role=data.get("role"),
        password_min_length=current_app.config.get("PASSWORD_MIN_LENGTH", 8),
    )

    if user.role == ROLE_MENTOR:
        return jsonify({
            "message": "Registration successful. Your mentor account is awaiting admin approval",
            "user": user.to_dict(),
        }), 201

    return jsonify({
        "message": "Registration successful",
        "token": issue_token(user),
        "user": user.to_dict(),
    }), 201


# Login
@auth_bp.route('/login', methods=['POST'])
@api_errors("log in")
def login():
    data = get_json_body()

    user = UserManager.authenticate(data.get("email"), data.get("password"))
    if not user:
        return jsonify({"error": "Invalid credentials"}), 401

    if user.role == ROLE_MENTOR and not user.is_approved:
        return jsonify({
            "error": "Account pending approval",
            "message": "Your mentor account is awaiting admin approval",
        }), 403

    token = issue_token(user)

    response = jsonify({
        "message": "Login successful",
        "token": token,
        "user": user.to_dict(),
    })
    response.set_cookie(
        "access_token", token,
        httponly=True,
        secure=current_app.config.get("AUTH_COOKIE_SECURE", True),
        samesite=current_app.config.get("AUTH_COOKIE_SAMESITE", "Lax"),
        path="/",
        max_age=current_app.config.get("JWT_EXPIRATION_HOURS", 24) * 3600,
    )
    return response, 200


# Logout
@auth_bp.route('/logout', methods=['POST'])
def logout():
    response = jsonify({"message": "Logout successful"})
    response.set_cookie("access_token", "", httponly=True, path="/", max_age=0)
    return response


# Profile
@auth_bp.route('/profile', methods=['GET'])
@login_required
@api_errors("fetch profile")
def get_profile():
    user = UserManager.get_user(current_user_id())
    return jsonify({"user": user.to_dict()}), 200
