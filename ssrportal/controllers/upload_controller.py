# ssrportal/controllers/upload_controller.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from ssrportal.services.cloudinary_upload_service import CloudinaryUploadService

bp_upload = Blueprint('upload', __name__, url_prefix='/api/upload')

# upload errors are plain text; the form shows the body verbatim
PLAIN = {"Content-Type": "text/plain; charset=utf-8"}


@bp_upload.post('')
def upload_file():
    try:
        verify_jwt_in_request()
    except (JWTExtendedException, PyJWTError):
        return "Unauthorized", 401, PLAIN
    uploader_id = get_jwt_identity()

    file_storage = request.files.get("file")
    error = CloudinaryUploadService.validate_file(file_storage)
    if error:
        current_app.logger.info(f"Rejected upload from user {uploader_id}: {error}")
        return error, 400, PLAIN

    result = CloudinaryUploadService.upload_file(file_storage, uploader_id)
    if not result['success']:
        return "Failed to upload file", 500, PLAIN

    return jsonify({
        "url": result['url'],
        "filename": result['filename'],
        "type": result['type'],
        "size": result['size'],
    }), 200
