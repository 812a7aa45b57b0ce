"""
Cloudinary service for proposal attachments (reports, posters, slides, videos).
Files are uploaded to the CLOUDINARY_UPLOAD_FOLDER folder ('SSR_UPLOADS' by default).
"""

import cloudinary
import cloudinary.uploader
from flask import current_app
from datetime import datetime, timezone
from werkzeug.utils import secure_filename


class CloudinaryUploadService:

    @staticmethod
    def is_cloudinary_configured():
        return all([
            current_app.config.get('CLOUDINARY_CLOUD_NAME'),
            current_app.config.get('CLOUDINARY_API_KEY'),
            current_app.config.get('CLOUDINARY_API_SECRET')
        ])

    @staticmethod
    def configure_cloudinary():
        if not CloudinaryUploadService.is_cloudinary_configured():
            current_app.logger.warning("Cloudinary credentials not configured")
            return False

        cloudinary.config(
            cloud_name=current_app.config.get('CLOUDINARY_CLOUD_NAME'),
            api_key=current_app.config.get('CLOUDINARY_API_KEY'),
            api_secret=current_app.config.get('CLOUDINARY_API_SECRET'),
            secure=True
        )
        return True

    @staticmethod
    def file_size(file_storage):
        stream = file_storage.stream
        stream.seek(0, 2)
        size = stream.tell()
        stream.seek(0)
        return size

    @staticmethod
    def validate_file(file_storage):
        """Return an error message for a rejected file, or None if it may be uploaded."""
        if not file_storage or not file_storage.filename:
            return "No file provided"

        allowed = current_app.config.get('UPLOAD_ALLOWED_TYPES', ())
        if file_storage.mimetype not in allowed:
            return "Invalid file type. Allowed: PDF, DOC, DOCX, PPT, PPTX, MP4, MOV, AVI, JPEG, JPG, PNG, GIF"

        max_bytes = current_app.config.get('UPLOAD_MAX_BYTES')
        if max_bytes and CloudinaryUploadService.file_size(file_storage) > max_bytes:
            return f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB"

        return None

    @staticmethod
    def public_id_for(filename):
        # timestamp prefix keeps same-named uploads from overwriting each other
        stem = secure_filename(filename.rsplit('.', 1)[0]) or "file"
        return f"{int(datetime.now(timezone.utc).timestamp() * 1000)}_{stem}"

    @staticmethod
    def upload_file(file_storage, uploader_id):
        """Upload one attachment; returns the dict the upload endpoint serialises."""
        if not CloudinaryUploadService.configure_cloudinary():
            return {'success': False, 'error': 'Storage not configured', 'url': None}

        folder_path = current_app.config.get('CLOUDINARY_UPLOAD_FOLDER', 'SSR_UPLOADS')
        public_id = CloudinaryUploadService.public_id_for(file_storage.filename)
        size = CloudinaryUploadService.file_size(file_storage)

        current_app.logger.info(f"Uploading {file_storage.filename} ({size} bytes) for user {uploader_id}: "
                                f"{folder_path}/{public_id}")
        try:
            upload_result = cloudinary.uploader.upload(
                file_storage.stream,
                folder=folder_path,
                public_id=public_id,
                resource_type="auto",
                overwrite=False,
                use_filename=False
            )
        except Exception as e:
            current_app.logger.error(f"Upload of {file_storage.filename} failed: {str(e)}")
            return {'success': False, 'error': str(e), 'url': None}

        if 'secure_url' not in upload_result:
            return {'success': False, 'error': 'Invalid Cloudinary response', 'url': None}

        return {
            'success': True,
            'url': upload_result['secure_url'],
            'filename': file_storage.filename,
            'type': file_storage.mimetype,
            'size': upload_result.get('bytes', size),
            'error': None
        }
