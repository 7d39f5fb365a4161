from sqlalchemy.orm import Session
from investtrack.models.coverage import Coverage


class CoverageRepository:
    """Repository for Coverage data access, always scoped to a broker"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_firm(self, firm_id: int) -> list[Coverage]:
        """Get all coverages of a broker, latest period first"""
        return (
            self.db.query(Coverage)
            .filter(Coverage.firm_id == firm_id)
            .order_by(Coverage.fiscal_year.desc(), Coverage.quarter.desc(), Coverage.id.desc())
            .all()
        )

    def get_by_id_and_firm(self, coverage_id: int, firm_id: int) -> Coverage | None:
        """
        Get coverage ensuring it belongs to the broker.

        Returns None if coverage doesn't exist or belongs to another broker.
        """
        return (
            self.db.query(Coverage)
            .filter(Coverage.id == coverage_id, Coverage.firm_id == firm_id)
            .first()
        )

    def add(self, coverage: Coverage) -> Coverage:
        self.db.add(coverage)
        self.db.flush()
        return coverage

    def delete(self, coverage: Coverage) -> None:
        self.db.delete(coverage)
        self.db.flush()
