# ssrportal/extension/extensions.py
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_socketio import SocketIO

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()

# async_mode is picked in create_app from config (gevent in prod, threading in tests)
socketio = SocketIO()
