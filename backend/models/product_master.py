"""
ProductMaster Model - Product catalogue entries with display images
"""
from models.database import db
from datetime import datetime


class ProductMaster(db.Model):
    __tablename__ = 'product_master'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False, index=True)
    image_url = db.Column(db.String(1024), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
