import logging
from typing import Optional

from sqlalchemy.orm import Session

from investtrack.core.exceptions import NotFoundException
from investtrack.database import atomic
from investtrack.models.interaction import Interaction
from investtrack.repositories.firm_repository import FirmRepository
from investtrack.repositories.interaction_repository import InteractionRepository
from investtrack.repositories.member_repository import MemberRepository
from investtrack.schemas.interaction_schemas import InteractionCreate, InteractionUpdate
from investtrack.services.relationship_service import RelationshipService
from investtrack.services.type_resolver import reject_cleared_required

logger = logging.getLogger(__name__)


class InteractionService:
    """Service layer for interactions logged against members"""

    def __init__(self, db: Session):
        self.db = db
        self.interaction_repo = InteractionRepository(db)
        self.member_repo = MemberRepository(db)
        self.firm_repo = FirmRepository(db)
        self.relationships = RelationshipService(db)

    def create_interaction(self, interaction_data: InteractionCreate) -> Interaction:
        """
        Log an interaction with a member of a firm.

        Raises:
            NotFoundException: Firm or member doesn't exist
            InvalidOperationException: Member doesn't belong to the firm
        """
        firm = self.firm_repo.get_by_id(interaction_data.firm_id)
        if not firm:
            raise NotFoundException(f"Firm {interaction_data.firm_id} not found")

        member = self.member_repo.get_by_id(interaction_data.member_id)
        if not member:
            raise NotFoundException(f"Member {interaction_data.member_id} not found")

        interaction = Interaction(
            content=interaction_data.content,
            date_of_interaction=interaction_data.date_of_interaction,
        )

        with atomic(self.db):
            self.relationships.attach_interaction(interaction, member, firm.id)
            self.interaction_repo.add(interaction)

        logger.info("Logged interaction %s with member %s", interaction.id, member.id)
        return interaction

    def get_interaction(self, interaction_id: int) -> Interaction:
        interaction = self.interaction_repo.get_by_id(interaction_id)
        if not interaction:
            raise NotFoundException(f"Interaction {interaction_id} not found")
        return interaction

    def get_interactions(
        self,
        firm_id: Optional[int] = None,
        member_id: Optional[int] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> tuple[list[Interaction], int]:
        return self.interaction_repo.get_with_filters(
            firm_id=firm_id, member_id=member_id, page=page, per_page=per_page
        )

    def update_interaction(
        self, interaction_id: int, interaction_data: InteractionUpdate
    ) -> Interaction:
        interaction = self.get_interaction(interaction_id)

        updates = interaction_data.model_dump(exclude_unset=True)
        reject_cleared_required(InteractionCreate, updates)

        with atomic(self.db):
            for field, value in updates.items():
                setattr(interaction, field, value)
            self.db.flush()

        return interaction

    def delete_interaction(self, interaction_id: int) -> None:
        interaction = self.get_interaction(interaction_id)

        with atomic(self.db):
            self.interaction_repo.delete(interaction)

        logger.info("Deleted interaction %s", interaction_id)
