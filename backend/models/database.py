"""
Shared Flask-SQLAlchemy handle. Initialized by create_app() via db.init_app(app).
"""
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
