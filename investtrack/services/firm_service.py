import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from investtrack.core.exceptions import InvalidOperationException, NotFoundException
from investtrack.core.uploads import UploadedPayload
from investtrack.database import atomic
from investtrack.models.base import utcnow
from investtrack.models.firm import Firm, FirmType, FundFactsheet, Investor, LocationType
from investtrack.models.user import User
from investtrack.repositories.file_repository import FileRepository
from investtrack.repositories.firm_repository import FirmRepository
from investtrack.services.relationship_service import RelationshipService
from investtrack.services.type_resolver import (
    reject_cleared_required,
    resolve_firm_variant,
    validate_payload,
)

logger = logging.getLogger(__name__)


class FirmService:
    """Service layer for broker and investor firms"""

    def __init__(self, db: Session):
        self.db = db
        self.firm_repo = FirmRepository(db)
        self.file_repo = FileRepository(db)
        self.relationships = RelationshipService(db)

    def create_firm(self, payload: dict, user: User) -> Firm:
        """
        Create a firm of the variant named by payload["firm_type"].

        Args:
            payload: Raw request body
            user: Creator; recorded as created_by

        Returns:
            Created firm

        Raises:
            InvalidTypeException: Unknown firm_type
            ValidationException: Payload invalid for the variant
            DuplicateKeyException: Name already taken
        """
        variant = resolve_firm_variant(payload.get("firm_type"))
        data = validate_payload(variant.create_schema, payload)

        firm = variant.model(
            **data.model_dump(mode="json", exclude={"firm_type"}),
            created_by_id=user.id,
        )

        with atomic(self.db):
            self.firm_repo.add(firm)

        logger.info("Created %s firm %s (%s) by user %s", variant.tag.value, firm.id, firm.name, user.id)
        return firm

    def get_firm(self, firm_id: int) -> Firm:
        """
        Raises:
            NotFoundException: If firm doesn't exist
        """
        firm = self.firm_repo.get_by_id(firm_id)
        if not firm:
            raise NotFoundException(f"Firm {firm_id} not found")
        return firm

    def get_firms(
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
        return self.firm_repo.get_with_filters(
            firm_type=firm_type,
            name=name,
            location_type=location_type,
            sectors=sectors,
            regional_focus=regional_focus,
            localities=localities,
            is_active=is_active,
            page=page,
            per_page=per_page,
        )

    def update_firm(self, firm_id: int, payload: dict) -> Firm:
        """
        Partially update a firm using the update schema of its stored variant.

        firm_type is not part of any update schema, so sending it is rejected.

        Raises:
            NotFoundException: If firm doesn't exist
            ValidationException: Payload invalid for the variant
            DuplicateKeyException: New name already taken
        """
        firm = self.get_firm(firm_id)
        variant = resolve_firm_variant(firm.firm_type)
        data = validate_payload(variant.update_schema, payload)

        updates = data.model_dump(mode="json", exclude_unset=True)
        reject_cleared_required(variant.create_schema, updates)

        with atomic(self.db):
            for field, value in updates.items():
                setattr(firm, field, value)
            self.db.flush()

        logger.info("Updated firm %s: %s", firm.id, ", ".join(sorted(updates)) or "no changes")
        return firm

    def deactivate_firm(self, firm_id: int) -> Firm:
        """
        Soft delete: mark the firm inactive.

        Members, coverages and every other reference to the firm are kept.
        """
        firm = self.get_firm(firm_id)

        with atomic(self.db):
            firm.is_active = False
            self.db.flush()

        logger.info("Deactivated firm %s", firm.id)
        return firm

    def set_remark(self, firm_id: int, remark: str) -> Firm:
        firm = self.get_firm(firm_id)

        with atomic(self.db):
            firm.remark = remark
            self.db.flush()

        return firm

    def _get_investor(self, firm_id: int) -> Investor:
        firm = self.get_firm(firm_id)
        if not isinstance(firm, Investor):
            raise InvalidOperationException(
                f"Fund factsheets only exist for investor firms; firm {firm_id} is "
                f"{firm.firm_type.value}"
            )
        return firm

    def get_factsheets(self, firm_id: int) -> list[FundFactsheet]:
        return list(self._get_investor(firm_id).fund_factsheets)

    def add_factsheet(
        self, firm_id: int, payload: UploadedPayload, document_date: date | None = None
    ) -> FundFactsheet:
        """
        Attach a fund factsheet document to an investor firm.

        Raises:
            NotFoundException: If firm doesn't exist
            InvalidOperationException: If firm is a broker
        """
        investor = self._get_investor(firm_id)

        with atomic(self.db):
            file = self.relationships.store_file(payload, firm_id=investor.id, tags=["fund-factsheet"])
            factsheet = self.firm_repo.add_factsheet(
                FundFactsheet(
                    firm_id=investor.id,
                    file_id=file.id,
                    document_date=document_date or utcnow().date(),
                )
            )

        logger.info("Added factsheet file %s to investor %s", file.id, investor.id)
        return factsheet

    def delete_factsheet(self, firm_id: int, file_id: int) -> None:
        """Remove a factsheet entry and delete its file"""
        investor = self._get_investor(firm_id)
        factsheet = self.firm_repo.get_factsheet(investor.id, file_id)
        if not factsheet:
            raise NotFoundException(f"Factsheet {file_id} not found for firm {firm_id}")

        with atomic(self.db):
            self.firm_repo.delete_factsheet(factsheet)
            self.file_repo.delete_by_ids([file_id])

        logger.info("Deleted factsheet file %s from investor %s", file_id, investor.id)
