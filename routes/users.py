from flask import Blueprint, jsonify

from classes.user_manager import UserManager
from utils.utils import login_required, roles_required, api_errors

users_bp = Blueprint('users', __name__)


@users_bp.route("", methods=["GET"])
@login_required
@roles_required("user:manage")
@api_errors("fetch users")
def get_all_users():
    return jsonify({"users": [u.to_dict() for u in UserManager.list_users()]}), 200


@users_bp.route("/analytics", methods=["GET"])
@login_required
@roles_required("analytics:view")
@api_errors("fetch analytics")
def get_platform_analytics():
    return jsonify({"analytics": UserManager.platform_analytics()}), 200


@users_bp.route("/<int:user_id>", methods=["GET"])
@login_required
@roles_required("user:manage")
@api_errors("fetch user")
def get_user(user_id):
    return jsonify({"user": UserManager.get_user(user_id).to_dict()}), 200


@users_bp.route("/<int:user_id>/approve-mentor", methods=["PUT"])
@login_required
@roles_required("user:manage")
@api_errors("approve mentor")
def approve_mentor(user_id):
    user = UserManager.approve_mentor(user_id)
    return jsonify({"message": "Mentor approved successfully", "user": user.to_dict()}), 200


@users_bp.route("/<int:user_id>/reject-mentor", methods=["PUT"])
@login_required
@roles_required("user:manage")
@api_errors("reject mentor")
def reject_mentor(user_id):
    UserManager.reject_mentor(user_id)
    return jsonify({"message": "Mentor rejected and removed successfully"}), 200


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@login_required
@roles_required("user:manage")
@api_errors("delete user")
def delete_user(user_id):
    UserManager.delete_user(user_id)
    return jsonify({"message": "User deleted successfully"}), 200
