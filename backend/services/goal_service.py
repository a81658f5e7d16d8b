"""
Goal Service - Persistence of monthly targets.

Point lookups by year / month (optionally narrowed by platform and type) and
upsert on the composite key (platform, year, month, type).
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from models.database import db
from models.goal import Goal
from services.goal_tracker import GoalRecord

logger = logging.getLogger('dashboard.goals')


def list_goals(
    year: Optional[int] = None,
    month: Optional[int] = None,
    platform: Optional[str] = None,
    goal_type: Optional[str] = None,
) -> List[Goal]:
    query = Goal.query
    if year is not None:
        query = query.filter(Goal.year == year)
    if month is not None:
        query = query.filter(Goal.month == month)
    if platform is not None:
        query = query.filter(Goal.platform == platform)
    if goal_type is not None:
        query = query.filter(Goal.type == goal_type)
    return query.order_by(Goal.year.asc(), Goal.month.asc(), Goal.platform.asc(), Goal.type.asc()).all()


def load_goal_records(year: Optional[int] = None) -> List[GoalRecord]:
    return [GoalRecord.from_model(g) for g in list_goals(year=year)]


def save_goal(platform: str, year: int, month: int, goal_type: str, target: float) -> Goal:
    """
    Insert or replace the goal for (platform, year, month, type).

    Raises:
        SQLAlchemyError: The write failed (the session is rolled back)
    """
    try:
        goal = Goal.upsert(platform=platform, year=year, month=month, type=goal_type, target=target)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("goal_upsert_failed platform=%s year=%s month=%s type=%s",
                         platform, year, month, goal_type)
        raise
    logger.info("goal_saved platform=%s year=%s month=%s type=%s target=%s",
                platform, year, month, goal_type, target)
    return goal
