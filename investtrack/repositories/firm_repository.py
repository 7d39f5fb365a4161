from typing import Optional
from sqlalchemy.orm import Session

from investtrack.models.firm import Firm, FirmType, FundFactsheet, LocationType
from investtrack.repositories.filters import json_array_contains_any, paginate


class FirmRepository:
    """Repository for Firm (Broker / Investor) data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, firm_id: int) -> Firm | None:
        """Get firm of either variant; inactive firms included"""
        return self.db.query(Firm).filter(Firm.id == firm_id).first()

    def get_with_filters(
        self,
        firm_type: Optional[FirmType] = None,
        name: Optional[str] = None,
        location_type: Optional[LocationType] = None,
        sectors: Optional[list[str]] = None,
        regional_focus: Optional[list[str]] = None,
        localities: Optional[list[str]] = None,
        is_active: Optional[bool] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> tuple[list[Firm], int]:
        """
        Get firms with filters.

        Args:
            firm_type: Restrict to brokers or investors
            name: Case-insensitive partial match on name
            location_type: Domestic / Foreign
            sectors: Broker sectors (ANY match)
            regional_focus: Investor regions (ANY match)
            localities: address.locality (ANY match)
            is_active: Active / deactivated firms
            page: 1-based page number (needs per_page)
            per_page: Page size

        Returns:
            Tuple of (firms list, total count before pagination)
        """
        query = self.db.query(Firm)

        if firm_type is not None:
            query = query.filter(Firm.firm_type == firm_type)

        if name is not None:
            query = query.filter(Firm.name.ilike(f"%{name}%"))

        if location_type is not None:
            query = query.filter(Firm.location_type == location_type)

        if sectors:
            query = query.filter(json_array_contains_any(Firm.__table__.c.sectors, sectors))

        if regional_focus:
            query = query.filter(json_array_contains_any(Firm.__table__.c.regional_focus, regional_focus))

        if localities:
            query = query.filter(Firm.address["locality"].as_string().in_(localities))

        if is_active is not None:
            query = query.filter(Firm.is_active == is_active)

        total = query.count()

        firms = paginate(query.order_by(Firm.firm_type, Firm.id), page, per_page).all()

        return firms, total

    def add(self, firm: Firm) -> Firm:
        """Stage a new firm and assign its id (caller commits)"""
        self.db.add(firm)
        self.db.flush()
        return firm

    def get_factsheet(self, firm_id: int, file_id: int) -> FundFactsheet | None:
        return (
            self.db.query(FundFactsheet)
            .filter(FundFactsheet.firm_id == firm_id, FundFactsheet.file_id == file_id)
            .first()
        )

    def add_factsheet(self, factsheet: FundFactsheet) -> FundFactsheet:
        self.db.add(factsheet)
        self.db.flush()
        return factsheet

    def delete_factsheet(self, factsheet: FundFactsheet) -> None:
        self.db.delete(factsheet)
        self.db.flush()
