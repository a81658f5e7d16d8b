"""
Models package - SQLAlchemy models
"""
from models.database import db
from models.goal import Goal
from models.platform_metric import PlatformMetric
from models.product_master import ProductMaster

__all__ = [
    'db',
    'Goal',
    'PlatformMetric',
    'ProductMaster',
]
