"""
Goal Model - Monthly revenue/profit targets per platform

A goal is identified by (platform, year, month, type). Saving a goal for an
existing key replaces its target; the unique constraint guarantees the
table never holds two rows for one key.
"""
from models.database import db
from datetime import datetime


class Goal(db.Model):
    __tablename__ = 'goals'
    __table_args__ = (
        db.UniqueConstraint('platform', 'year', 'month', 'type', name='uq_goals_platform_year_month_type'),
    )

    id = db.Column(db.Integer, primary_key=True)
    platform = db.Column(db.String(20), nullable=False, index=True)  # 'all', 'Shopee', 'TikTok', 'Lazada'
    year = db.Column(db.Integer, nullable=False, index=True)
    month = db.Column(db.Integer, nullable=False)  # 1..12
    type = db.Column(db.String(20), nullable=False)  # 'revenue', 'profit'
    target = db.Column(db.Float, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def upsert(cls, platform, year, month, type, target):
        """Insert a goal or replace the target of the goal sharing its key."""
        record = cls.query.filter_by(platform=platform, year=year, month=month, type=type).first()

        if record:
            record.target = target
            record.updated_at = datetime.utcnow()
        else:
            record = cls(platform=platform, year=year, month=month, type=type, target=target)
            db.session.add(record)

        db.session.commit()
        return record
