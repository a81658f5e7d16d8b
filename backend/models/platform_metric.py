"""
PlatformMetric Model - Per-platform financial totals and daily series

One row per marketplace, rebuilt by the upload pipeline. per_day and
per_day_paid hold JSON arrays of {date, revenue, fees, adjustments} keyed by
order date and payment date respectively.
"""
from models.database import db
from datetime import datetime


class PlatformMetric(db.Model):
    __tablename__ = 'platform_metrics'

    id = db.Column(db.Integer, primary_key=True)
    platform = db.Column(db.String(20), unique=True, nullable=False, index=True)
    revenue = db.Column(db.Float, default=0)
    fees = db.Column(db.Float, default=0)
    adjustments = db.Column(db.Float, default=0)
    per_day = db.Column(db.JSON, default=list)
    per_day_paid = db.Column(db.JSON, nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
