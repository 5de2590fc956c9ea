from flask import Blueprint, jsonify

from classes.certificate_manager import CertificateManager
from utils.utils import login_required, roles_required, api_errors, current_user_id

certificate_bp = Blueprint("certificates", __name__)


@certificate_bp.route("/my", methods=["GET"])
@login_required
@roles_required("certificate:view")
@api_errors("fetch certificates")
def get_my_certificates():
    return jsonify({"certificates": CertificateManager.get_my_certificates(current_user_id())}), 200


@certificate_bp.route("/<int:course_id>", methods=["GET"])
@login_required
@roles_required("certificate:view")
@api_errors("generate certificate")
def get_certificate(course_id):
    """Issues or fetches the certificate record as JSON. Rendering a PDF from it is left to an external
    renderer, which can publish the document through `certificate_url`.
    """
    certificate = CertificateManager.get_certificate(current_user_id(), course_id)
    return jsonify({"certificate": certificate}), 200


@certificate_bp.route("/<int:course_id>/status", methods=["GET"])
@login_required
@roles_required("certificate:view")
@api_errors("check certificate status")
def get_certificate_status(course_id):
    return jsonify(CertificateManager.get_status(current_user_id(), course_id)), 200
