from typing import Optional
from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from investtrack.models.interaction import Interaction
from investtrack.repositories.filters import paginate


class InteractionRepository:
    """Repository for Interaction data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, interaction_id: int) -> Interaction | None:
        return self.db.query(Interaction).filter(Interaction.id == interaction_id).first()

    def get_with_filters(
        self,
        firm_id: Optional[int] = None,
        member_id: Optional[int] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> tuple[list[Interaction], int]:
        """Get interactions, most recent first"""
        query = self.db.query(Interaction)

        if firm_id is not None:
            query = query.filter(Interaction.firm_id == firm_id)

        if member_id is not None:
            query = query.filter(Interaction.member_id == member_id)

        total = query.count()

        interactions = paginate(
            query.order_by(Interaction.date_of_interaction.desc(), Interaction.id.desc()),
            page,
            per_page,
        ).all()

        return interactions, total

    def add(self, interaction: Interaction) -> Interaction:
        self.db.add(interaction)
        self.db.flush()
        return interaction

    def delete(self, interaction: Interaction) -> None:
        self.db.delete(interaction)
        self.db.flush()

    def delete_by_member(self, member_id: int) -> int:
        """Delete every interaction of a member; returns the number removed"""
        result = self.db.execute(
            delete(Interaction)
            .where(Interaction.member_id == member_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def reassign_member(self, old_member_id: int, new_member_id: int) -> int:
        """Point every interaction of old_member_id at new_member_id"""
        result = self.db.execute(
            update(Interaction)
            .where(Interaction.member_id == old_member_id)
            .values(member_id=new_member_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
