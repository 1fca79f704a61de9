from typing import List

from sqlalchemy.orm import Session

from perfpay.models.performance import BonusRecord
from perfpay.services.periods import PeriodWindow


def history_for(db: Session, user_id: int, period: str, count: int) -> List[BonusRecord]:
    """
    Bonus records for the ``count`` months ending at ``period``, oldest first.
    Months without a record are left out rather than zero-filled.
    """
    window = PeriodWindow(period, count)
    return db.query(BonusRecord).filter(
        BonusRecord.user_id == user_id,
        BonusRecord.period.in_(list(window))
    ).order_by(BonusRecord.period.asc()).all()
