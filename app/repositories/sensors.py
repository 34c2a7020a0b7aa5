from sqlalchemy import select, func, and_
from sqlalchemy.orm import sessionmaker

from app.core.discrepancy import SensorReading
from app.db.models import Scale
from app.repositories.rows import num


class SensorRepository:
    """Machine database: weight readings from shelf scales."""

    source = "machine"

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def latest_readings(self) -> list[SensorReading]:
        latest = (
            select(Scale.variant_id.label("variant_id"), func.max(Scale.updated_at).label("updated_at"))
            .group_by(Scale.variant_id)
            .subquery()
        )
        stmt = select(
            Scale.variant_id.label("variant_id"),
            Scale.current_weight.label("current_weight"),
            Scale.updated_at.label("updated_at"),
        ).join(
            latest,
            and_(latest.c.variant_id == Scale.variant_id, latest.c.updated_at == Scale.updated_at),
        )
        db = self.session_factory()
        try:
            return [
                SensorReading(variant_id=r.variant_id, current_weight=num(r.current_weight), updated_at=r.updated_at)
                for r in db.execute(stmt).all()
            ]
        finally:
            db.close()
