from flask import Blueprint, jsonify

from classes.chapter_manager import ChapterManager
from classes.course_manager import CourseManager
from classes.enrolment_manager import EnrolmentManager
from utils.utils import (
    login_required, roles_required, api_errors, get_json_body, current_user_id, current_role,
)

course_bp = Blueprint("courses", __name__)

#__________________________________________________________________________________________ * Courses *__________________________________________________

@course_bp.route("", methods=["POST"])
@login_required
@roles_required("course:create")
@api_errors("create course")
def create_course():
    data = get_json_body()
    course = CourseManager.create_course(current_user_id(), data.get("title"), data.get("description"))
    return jsonify({"message": "Course created successfully", "course": course.to_dict()}), 201


@course_bp.route("/my", methods=["GET"])
@login_required
@roles_required("course:list_mine")
@api_errors("fetch courses")
def get_my_courses():
    courses = CourseManager.get_my_courses(current_user_id(), current_role())
    return jsonify({"courses": courses}), 200


@course_bp.route("/<int:course_id>", methods=["GET"])
@login_required
@roles_required("course:view")
@api_errors("fetch course")
def get_course(course_id):
    course = CourseManager.get_course(course_id, current_user_id(), current_role())
    return jsonify({"course": course}), 200


@course_bp.route("/<int:course_id>", methods=["PUT"])
@login_required
@roles_required("course:update")
@api_errors("update course")
def update_course(course_id):
    data = get_json_body()
    course = CourseManager.update_course(
        course_id, current_user_id(),
        title=data.get("title"),
        description=data.get("description"),
    )
    return jsonify({"message": "Course updated successfully", "course": course.to_dict()}), 200


@course_bp.route("/<int:course_id>", methods=["DELETE"])
@login_required
@roles_required("course:delete")
@api_errors("delete course")
def delete_course(course_id):
    CourseManager.delete_course(course_id, current_user_id())
    return jsonify({"message": "Course deleted successfully"}), 200


# Assign students to a course
@course_bp.route("/<int:course_id>/assign", methods=["POST"])
@login_required
@roles_required("course:assign")
@api_errors("assign course")
def assign_course(course_id):
    data = get_json_body()
    course = CourseManager.get_owned_course(course_id, current_user_id(), "course:assign")
    result = EnrolmentManager.assign_students(course, data.get("student_ids"))
    return jsonify({"message": "Course assignment completed", **result}), 200


@course_bp.route("/<int:course_id>/students", methods=["GET"])
@login_required
@roles_required("course:students")
@api_errors("fetch enrolled students")
def get_enrolled_students(course_id):
    CourseManager.get_owned_course(course_id, current_user_id(), "course:students")
    return jsonify({"students": EnrolmentManager.get_enrolled_students(course_id)}), 200

#__________________________________________________________________________________________ * Chapters *__________________________________________________

@course_bp.route("/<int:course_id>/chapters", methods=["POST"])
@login_required
@roles_required("chapter:create")
@api_errors("create chapter")
def create_chapter(course_id):
    data = get_json_body()
    chapter = ChapterManager.create_chapter(
        course_id, current_user_id(),
        title=data.get("title"),
        description=data.get("description"),
        image_url=data.get("image_url"),
        video_url=data.get("video_url"),
    )
    return jsonify({"message": "Chapter created successfully", "chapter": chapter.to_dict()}), 201


@course_bp.route("/<int:course_id>/chapters", methods=["GET"])
@login_required
@roles_required("chapter:view")
@api_errors("fetch chapters")
def get_chapters(course_id):
    chapters = ChapterManager.get_chapters(course_id, current_user_id(), current_role())
    return jsonify({"chapters": chapters}), 200


@course_bp.route("/<int:course_id>/chapters/<int:chapter_id>", methods=["GET"])
@login_required
@roles_required("chapter:view")
@api_errors("fetch chapter")
def get_chapter(course_id, chapter_id):
    chapter = ChapterManager.get_chapter(course_id, chapter_id, current_user_id(), current_role())
    return jsonify({"chapter": chapter}), 200


@course_bp.route("/<int:course_id>/chapters/<int:chapter_id>", methods=["PUT"])
@login_required
@roles_required("chapter:update")
@api_errors("update chapter")
def update_chapter(course_id, chapter_id):
    data = get_json_body()
    chapter = ChapterManager.update_chapter(
        course_id, chapter_id, current_user_id(),
        title=data.get("title"),
        description=data.get("description"),
        image_url=data.get("image_url"),
        video_url=data.get("video_url"),
    )
    return jsonify({"message": "Chapter updated successfully", "chapter": chapter.to_dict()}), 200


@course_bp.route("/<int:course_id>/chapters/<int:chapter_id>", methods=["DELETE"])
@login_required
@roles_required("chapter:delete")
@api_errors("delete chapter")
def delete_chapter(course_id, chapter_id):
    ChapterManager.delete_chapter(course_id, chapter_id, current_user_id())
    return jsonify({"message": "Chapter deleted successfully"}), 200
