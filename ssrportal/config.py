import os
from datetime import timedelta


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "DEV")
    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URI",
        "postgresql://postgres:postgres@db:5432/ssr_portal"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,   # test connection before use
        "pool_recycle": 1800,    # recycle every 30min
        "pool_size": 5,
        "max_overflow": 10
    }

    # JWT
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_HEADER_NAME = "Authorization"
    JWT_HEADER_TYPE = "Bearer"
    JWT_ALGORITHM = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=8)

    # Cloudinary
    CLOUDINARY_CLOUD_NAME = os.getenv('CLOUDINARY_CLOUD_NAME')
    CLOUDINARY_API_KEY = os.getenv('CLOUDINARY_API_KEY')
    CLOUDINARY_API_SECRET = os.getenv('CLOUDINARY_API_SECRET')
    CLOUDINARY_UPLOAD_FOLDER = os.getenv('CLOUDINARY_UPLOAD_FOLDER', 'SSR_UPLOADS')

    # Uploads
    UPLOAD_MAX_BYTES = 50 * 1024 * 1024  # 50MB per file
    # request body ceiling sits above the per-file limit so oversize files get a 400, not a 413
    MAX_CONTENT_LENGTH = 60 * 1024 * 1024
    UPLOAD_ALLOWED_TYPES = (
        'application/pdf',
        'application/msword',
        'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
        'application/vnd.ms-powerpoint',
        'application/vnd.openxmlformats-officedocument.presentationml.presentation',
        'video/mp4',
        'video/quicktime',
        'video/x-msvideo',
        'image/jpeg',
        'image/jpg',
        'image/png',
        'image/gif',
    )

    # Socket.IO
    SOCKETIO_ASYNC_MODE = os.getenv("SOCKETIO_ASYNC_MODE", "gevent")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SOCKETIO_ASYNC_MODE = "threading"
    CLOUDINARY_CLOUD_NAME = "test-cloud"
    CLOUDINARY_API_KEY = "test-key"
    CLOUDINARY_API_SECRET = "test-secret"
