import logging

from sqlalchemy.orm import Session

from investtrack.core.exceptions import InvalidOperationException, NotFoundException
from investtrack.core.uploads import UploadedPayload
from investtrack.database import atomic
from investtrack.models.base import utcnow
from investtrack.models.coverage import Coverage
from investtrack.models.firm import Broker
from investtrack.repositories.coverage_repository import CoverageRepository
from investtrack.repositories.firm_repository import FirmRepository
from investtrack.schemas.coverage_schemas import CoverageCreate, CoverageUpdate
from investtrack.services.relationship_service import RelationshipService
from investtrack.services.type_resolver import reject_cleared_required, validate_payload

logger = logging.getLogger(__name__)


class CoverageService:
    """Service layer for broker coverages (target price + recommendation)"""

    def __init__(self, db: Session):
        self.db = db
        self.coverage_repo = CoverageRepository(db)
        self.firm_repo = FirmRepository(db)
        self.relationships = RelationshipService(db)

    def _get_broker(self, broker_id: int) -> Broker:
        firm = self.firm_repo.get_by_id(broker_id)
        if not firm:
            raise NotFoundException(f"Firm {broker_id} not found")
        if not isinstance(firm, Broker):
            raise InvalidOperationException(f"Firm {broker_id} is not a broker")
        return firm

    def get_coverages(self, broker_id: int) -> list[Coverage]:
        broker = self._get_broker(broker_id)
        return self.coverage_repo.get_by_firm(broker.id)

    def get_coverage(self, broker_id: int, coverage_id: int) -> Coverage:
        """
        Raises:
            NotFoundException: Coverage doesn't exist under this broker
        """
        self._get_broker(broker_id)
        coverage = self.coverage_repo.get_by_id_and_firm(coverage_id, broker_id)
        if not coverage:
            raise NotFoundException(f"Coverage {coverage_id} not found for firm {broker_id}")
        return coverage

    def create_coverage(
        self, broker_id: int, payload: dict, document: UploadedPayload | None = None
    ) -> Coverage:
        """
        Create a coverage under a broker, optionally with its document.

        Raises:
            NotFoundException: Firm doesn't exist
            InvalidOperationException: Firm is an investor
            ValidationException: Invalid tp / fiscal_year / quarter / recommendation
            DuplicateKeyException: Coverage for that fiscal year and quarter exists
        """
        data = validate_payload(CoverageCreate, payload)
        firm = self.firm_repo.get_by_id(broker_id)
        if not firm:
            raise NotFoundException(f"Firm {broker_id} not found")

        coverage = Coverage(
            tp=data.tp,
            fiscal_year=data.fiscal_year,
            quarter=data.quarter,
            recommendation=data.recommendation,
            coverage_date=data.coverage_date or utcnow(),
        )

        with atomic(self.db):
            self.relationships.attach_coverage(coverage, firm)
            self.coverage_repo.add(coverage)
            if document is not None:
                self.relationships.replace_attachment(
                    coverage, "coverage_file_id", document, firm_id=firm.id, tags=["coverage"]
                )

        logger.info(
            "Created coverage %s for broker %s (FY%s Q%s)",
            coverage.id,
            firm.id,
            coverage.fiscal_year,
            coverage.quarter,
        )
        return coverage

    def update_coverage(
        self,
        broker_id: int,
        coverage_id: int,
        payload: dict,
        document: UploadedPayload | None = None,
    ) -> Coverage:
        """Partially update a coverage; a new document replaces the old one"""
        data = validate_payload(CoverageUpdate, payload)
        coverage = self.get_coverage(broker_id, coverage_id)

        updates = data.model_dump(exclude_unset=True)
        reject_cleared_required(CoverageCreate, updates)

        with atomic(self.db):
            for field, value in updates.items():
                setattr(coverage, field, value)
            self.db.flush()
            if document is not None:
                self.relationships.replace_attachment(
                    coverage, "coverage_file_id", document, firm_id=broker_id, tags=["coverage"]
                )

        logger.info("Updated coverage %s of broker %s", coverage.id, broker_id)
        return coverage

    def delete_coverage(self, broker_id: int, coverage_id: int) -> None:
        """Delete a coverage and its document"""
        coverage = self.get_coverage(broker_id, coverage_id)

        with atomic(self.db):
            self.relationships.detach_coverage(coverage)

        logger.info("Deleted coverage %s of broker %s", coverage_id, broker_id)
