from flask import Blueprint, jsonify, request

from classes.progress_manager import ProgressManager
from utils.utils import login_required, roles_required, api_errors, current_user_id

progress_bp = Blueprint("progress", __name__)


#Mark a chapter complete
@progress_bp.route("/<int:chapter_id>/complete", methods=["POST"])
@login_required
@roles_required("progress:complete")
@api_errors("complete chapter")
def complete_chapter(chapter_id):
    result = ProgressManager.complete_chapter(current_user_id(), chapter_id)
    return jsonify({"message": "Chapter marked as completed", **result}), 200


@progress_bp.route("/my", methods=["GET"])
@login_required
@roles_required("progress:view")
@api_errors("fetch progress")
def get_my_progress():
    course_id = request.args.get("courseId", type=int)
    if course_id is None and request.args.get("courseId"):
        return jsonify({"error": "courseId must be an integer"}), 400

    progress = ProgressManager.get_my_progress(current_user_id(), course_id)
    return jsonify({"progress": progress}), 200


@progress_bp.route("/course/<int:course_id>", methods=["GET"])
@login_required
@roles_required("progress:view")
@api_errors("fetch course progress")
def get_course_progress(course_id):
    progress = ProgressManager.get_course_progress(current_user_id(), course_id)
    return jsonify({"progress": progress}), 200


@progress_bp.route("/course/<int:course_id>/reset", methods=["DELETE"])
@login_required
@roles_required("progress:reset")
@api_errors("reset progress")
def reset_progress(course_id):
    ProgressManager.reset_progress(current_user_id(), course_id)
    return jsonify({"message": "Course progress reset successfully"}), 200
