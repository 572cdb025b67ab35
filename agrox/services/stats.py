"""
Counters for the super-admin dashboard.
"""
from datetime import date, datetime, timedelta
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.models import Activity, Machine, User, UserRole
from .permissions import ROLES


STATUSES = ("PENDING_VALIDATION", "APPROVED", "REJECTED")
TOP_MACHINES = 5
TREND_DAYS = 7


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def super_admin_stats(db: Session, today: date = None) -> Dict:
    today = today or datetime.utcnow().date()

    status_counts = dict(
        db.query(Activity.status, func.count(Activity.id)).group_by(Activity.status).all()
    )
    by_status = [{"name": s, "value": int(status_counts.get(s, 0))} for s in STATUSES]

    top = (
        db.query(Machine.name, func.count(Activity.id).label("n"))
        .join(Activity, Activity.machine_id == Machine.id)
        .group_by(Machine.id, Machine.name)
        .order_by(func.count(Activity.id).desc(), Machine.name.asc())
        .limit(TOP_MACHINES)
        .all()
    )

    since = datetime.combine(today - timedelta(days=TREND_DAYS - 1), datetime.min.time())
    per_day: Dict[date, int] = {}
    for (start_time,) in db.query(Activity.start_time).filter(Activity.start_time >= since).all():
        d = _as_date(start_time)
        per_day[d] = per_day.get(d, 0) + 1
    last_days: List[Dict] = []
    for i in range(TREND_DAYS - 1, -1, -1):
        d = today - timedelta(days=i)
        last_days.append({"date": d.isoformat(), "count": per_day.get(d, 0)})

    role_counts = dict(db.query(UserRole.role, func.count(UserRole.id)).group_by(UserRole.role).all())
    roles = [{"name": r, "value": int(role_counts.get(r, 0))} for r in ROLES]

    return {
        "total_users": db.query(func.count(User.id)).scalar() or 0,
        "total_machines": db.query(func.count(Machine.id)).scalar() or 0,
        "total_activities": db.query(func.count(Activity.id)).scalar() or 0,
        "pending_activities": int(status_counts.get("PENDING_VALIDATION", 0)),
        "approved_activities": int(status_counts.get("APPROVED", 0)),
        "rejected_activities": int(status_counts.get("REJECTED", 0)),
        "activity_by_status": [s for s in by_status if s["value"] > 0],
        "top_machines": [{"name": name, "value": int(n)} for name, n in top],
        "last_7_days": last_days,
        "role_distribution": [r for r in roles if r["value"] > 0],
    }
