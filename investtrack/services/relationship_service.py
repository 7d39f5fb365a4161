"""
Relationship maintainer.

Keeps the associations between firms, members, coverages, interactions and
attachments consistent. Every method only stages changes (flush); the calling
service wraps the whole operation in `atomic()` so a failure anywhere leaves
nothing half-applied.
"""

import logging

from sqlalchemy.orm import Session

from investtrack.core.exceptions import InvalidOperationException
from investtrack.core.uploads import UploadedPayload
from investtrack.models.base import utcnow
from investtrack.models.coverage import Coverage
from investtrack.models.event import Event
from investtrack.models.file import File
from investtrack.models.firm import Broker, Firm
from investtrack.models.interaction import Interaction
from investtrack.models.member import FirmHistoryEntry, Member
from investtrack.repositories.coverage_repository import CoverageRepository
from investtrack.repositories.event_repository import EventRepository
from investtrack.repositories.file_repository import FileRepository
from investtrack.repositories.interaction_repository import InteractionRepository
from investtrack.repositories.member_repository import MemberRepository
from investtrack.services.type_resolver import member_variant_for_firm

logger = logging.getLogger(__name__)


class RelationshipService:
    """Maintains back-references and owned attachments across entities"""

    def __init__(self, db: Session):
        self.db = db
        self.member_repo = MemberRepository(db)
        self.coverage_repo = CoverageRepository(db)
        self.interaction_repo = InteractionRepository(db)
        self.event_repo = EventRepository(db)
        self.file_repo = FileRepository(db)

    # Members

    def attach_member(self, member: Member, firm: Firm) -> None:
        """
        Bind a new member to its firm and open its firm history.

        Raises:
            InvalidOperationException: firm is deactivated, or the member
                variant doesn't match the firm variant
        """
        if not firm.is_active:
            raise InvalidOperationException(f"Firm {firm.id} is deactivated")

        expected = member_variant_for_firm(firm)
        if not isinstance(member, expected.model):
            raise InvalidOperationException(
                f"A {firm.firm_type.value} firm only accepts {expected.tag.value} members"
            )

        member.firm_id = firm.id
        member.firm_history.append(FirmHistoryEntry(firm_id=firm.id, date_of_joining=utcnow()))

    def detach_member(self, member: Member) -> None:
        """Delete a member together with its interactions, events and business cards"""
        member_id = member.id
        card_ids = member.business_card_ids
        interactions = self.interaction_repo.delete_by_member(member_id)
        events = self.event_repo.delete_by_member(member_id)

        self.member_repo.delete(member)
        self.file_repo.delete_by_ids(card_ids)

        logger.info(
            "Detached member %s: %s interaction(s), %s event(s), %s card file(s) removed",
            member_id,
            interactions,
            events,
            len(card_ids),
        )

    def repoint_member(self, old_member_id: int, new_member_id: int, firm_id: int) -> None:
        """Move every reference to a replaced member record onto its successor"""
        interactions = self.interaction_repo.reassign_member(old_member_id, new_member_id)
        events = self.event_repo.reassign_member(old_member_id, new_member_id)
        files = self.file_repo.reassign_member(old_member_id, new_member_id, firm_id)

        logger.info(
            "Re-pointed member %s -> %s: %s interaction(s), %s event(s), %s file(s)",
            old_member_id,
            new_member_id,
            interactions,
            events,
            files,
        )

    # Coverages

    def attach_coverage(self, coverage: Coverage, firm: Firm) -> None:
        """
        Raises:
            InvalidOperationException: firm is not a broker
        """
        if not isinstance(firm, Broker):
            raise InvalidOperationException(
                f"Coverage can only be attached to a broker firm; firm {firm.id} is "
                f"{firm.firm_type.value}"
            )
        coverage.firm_id = firm.id

    def detach_coverage(self, coverage: Coverage) -> None:
        """Delete a coverage and its attached document"""
        file_id = coverage.coverage_file_id
        self.coverage_repo.delete(coverage)
        if file_id is not None:
            self.file_repo.delete_by_ids([file_id])

    # Interactions

    @staticmethod
    def _require_membership(member: Member, firm_id: int) -> None:
        if member.firm_id != firm_id:
            raise InvalidOperationException(
                f"Member {member.id} does not belong to firm {firm_id}"
            )

    def attach_interaction(self, interaction: Interaction, member: Member, firm_id: int) -> None:
        """
        Raises:
            InvalidOperationException: the member doesn't currently belong to firm_id
        """
        self._require_membership(member, firm_id)
        interaction.member_id = member.id
        interaction.firm_id = firm_id

    # Events

    def attach_event(self, event: Event, member: Member, firm_id: int) -> None:
        """
        Raises:
            InvalidOperationException: the member doesn't currently belong to firm_id
        """
        self._require_membership(member, firm_id)
        event.member_id = member.id
        event.firm_id = firm_id

    # Attachments

    def store_file(
        self,
        payload: UploadedPayload,
        firm_id: int,
        member_id: int | None = None,
        tags: list[str] | None = None,
    ) -> File:
        """Persist a validated upload and return the new File (id assigned)"""
        file = File(
            firm_id=firm_id,
            member_id=member_id,
            original_name=payload.original_name,
            mime_type=payload.mime_type,
            size=payload.size,
            content=payload.content,
            tags=tags if tags is not None else list(payload.tags),
        )
        return self.file_repo.add(file)

    def replace_attachment(
        self,
        parent,
        attribute: str,
        payload: UploadedPayload,
        firm_id: int,
        member_id: int | None = None,
        tags: list[str] | None = None,
    ) -> File:
        """
        Swap the file referenced by parent.<attribute>.

        The new file is saved first, then the parent reference is updated,
        then the old file (if any) is deleted.
        """
        old_file_id = getattr(parent, attribute)
        new_file = self.store_file(payload, firm_id=firm_id, member_id=member_id, tags=tags)

        setattr(parent, attribute, new_file.id)
        self.db.flush()

        if old_file_id is not None:
            self.file_repo.delete_by_ids([old_file_id])
            logger.info("Replaced file %s with %s on %r", old_file_id, new_file.id, parent)

        return new_file

    def drop_attachment(self, parent, attribute: str) -> int | None:
        """Clear parent.<attribute> and delete the file it referenced"""
        file_id = getattr(parent, attribute)
        if file_id is None:
            return None
        setattr(parent, attribute, None)
        self.db.flush()
        self.file_repo.delete_by_ids([file_id])
        return file_id
