import logging
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.orm import Session

from investtrack.core.exceptions import (
    InvalidOperationException,
    NotFoundException,
    ValidationException,
)
from investtrack.core.uploads import UploadedPayload
from investtrack.database import atomic
from investtrack.models.base import utcnow
from investtrack.models.member import FirmHistoryEntry, Member, MemberType
from investtrack.repositories.firm_repository import FirmRepository
from investtrack.repositories.member_repository import MemberRepository
from investtrack.schemas.member_schemas import MemberMoveRequest
from investtrack.services.relationship_service import RelationshipService
from investtrack.services.type_resolver import (
    MemberVariant,
    member_variant_for_firm,
    reject_cleared_required,
    resolve_member_variant,
    validate_payload,
)

logger = logging.getLogger(__name__)

# Set by the service, never copied or overridden
_MANAGED_FIELDS = {"firm_id", "member_type"}


def _holding_rule(member: Member) -> None:
    """holding_size and last_holding_date are required for an existing investor"""
    if not getattr(member, "is_existing_investor", False):
        return
    missing = [
        name for name in ("holding_size", "last_holding_date") if getattr(member, name) is None
    ]
    if missing:
        raise ValidationException(
            f"{' and '.join(missing)} required for an existing investor",
            fields=[{"field": name, "message": "Field required"} for name in missing],
        )


class MemberService:
    """Service layer for firm members, their transfers and business cards"""

    def __init__(self, db: Session):
        self.db = db
        self.member_repo = MemberRepository(db)
        self.firm_repo = FirmRepository(db)
        self.relationships = RelationshipService(db)

    def create_member(self, payload: dict) -> Member:
        """
        Create a member of the variant named by payload["member_type"].

        Args:
            payload: Raw request body, including firm_id

        Returns:
            Created member with a one-entry firm history

        Raises:
            InvalidTypeException: Unknown member_type
            ValidationException: Payload invalid for the variant
            NotFoundException: Firm doesn't exist
            InvalidOperationException: Firm inactive or of the other variant
            DuplicateKeyException: Email or mobile number already taken
        """
        variant = resolve_member_variant(payload.get("member_type"))
        data = validate_payload(variant.create_schema, payload)

        firm = self.firm_repo.get_by_id(data.firm_id)
        if not firm:
            raise NotFoundException(f"Firm {data.firm_id} not found")

        member = variant.model(**data.model_dump(exclude=_MANAGED_FIELDS))

        with atomic(self.db):
            self.relationships.attach_member(member, firm)
            self.member_repo.add(member)

        logger.info("Created %s member %s under firm %s", variant.tag.value, member.id, firm.id)
        return member

    def get_member(self, member_id: int) -> Member:
        """
        Raises:
            NotFoundException: If member doesn't exist
        """
        member = self.member_repo.get_by_id(member_id)
        if not member:
            raise NotFoundException(f"Member {member_id} not found")
        return member

    def get_members(
        self,
        member_type: Optional[MemberType] = None,
        firm_id: Optional[int] = None,
        name: Optional[str] = None,
        designation: Optional[str] = None,
        is_gift: Optional[bool] = None,
        sectors: Optional[list[str]] = None,
        localities: Optional[list[str]] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> tuple[list[Member], int]:
        return self.member_repo.get_with_filters(
            member_type=member_type,
            firm_id=firm_id,
            name=name,
            designation=designation,
            is_gift=is_gift,
            sectors=sectors,
            localities=localities,
            page=page,
            per_page=per_page,
        )

    def update_member(self, member_id: int, payload: dict) -> Member:
        """
        Partially update a member using the update schema of its stored variant.

        firm_id and member_type cannot be changed here; use move_member.
        """
        member = self.get_member(member_id)
        variant = resolve_member_variant(member.member_type)
        data = validate_payload(variant.update_schema, payload)

        updates = data.model_dump(exclude_unset=True)
        reject_cleared_required(variant.create_schema, updates)

        with atomic(self.db):
            for field, value in updates.items():
                setattr(member, field, value)
            _holding_rule(member)
            self.db.flush()

        logger.info("Updated member %s: %s", member.id, ", ".join(sorted(updates)) or "no changes")
        return member

    def delete_member(self, member_id: int) -> None:
        """Delete a member with its interactions, events and business cards"""
        member = self.get_member(member_id)

        with atomic(self.db):
            self.relationships.detach_member(member)

        logger.info("Deleted member %s", member_id)

    def _transfer_payload(
        self, member: Member, variant: MemberVariant, overrides: dict[str, Any], firm_id: int
    ) -> dict:
        """
        Field values for the member record that replaces `member` after a move.

        Shared fields and variant fields the target variant also has are
        copied, then overrides are applied.
        """
        data = {}
        for name in variant.create_schema.model_fields:
            if name in _MANAGED_FIELDS:
                continue
            value = getattr(member, name, None)
            if value is None:
                continue
            data[name] = float(value) if isinstance(value, Decimal) else value

        data.update({k: v for k, v in overrides.items() if k not in _MANAGED_FIELDS})
        data["firm_id"] = firm_id
        data["member_type"] = variant.tag.value
        return data

    def move_member(self, member_id: int, move: MemberMoveRequest) -> Member:
        """
        Transfer a member to another firm.

        The member is re-created as the variant matching the target firm. The
        old record is deleted and every interaction, event and business card
        of it is re-pointed at the new record. Firm history carries over
        unchanged with one entry appended for the target firm.

        Runs as a single transaction: on any failure the source member, its
        firm and its interactions are left untouched.

        Args:
            member_id: Member to move
            move: Target firm and optional field overrides

        Returns:
            The new member record

        Raises:
            NotFoundException: Member or target firm doesn't exist
            InvalidOperationException: Member already in target firm, or target inactive
            ValidationException: Copied fields + overrides invalid for the target variant
        """
        member = self.get_member(member_id)

        target = self.firm_repo.get_by_id(move.firm_id)
        if not target:
            raise NotFoundException(f"Firm {move.firm_id} not found")
        if target.id == member.firm_id:
            raise InvalidOperationException("Member is already in target firm")
        if not target.is_active:
            raise InvalidOperationException(f"Firm {target.id} is deactivated")

        variant = member_variant_for_firm(target)
        data = validate_payload(
            variant.create_schema, self._transfer_payload(member, variant, move.overrides, target.id)
        )

        old_id = member.id
        source_firm_id = member.firm_id
        history = [(entry.firm_id, entry.date_of_joining) for entry in member.firm_history]
        cards = {
            "business_card_front_id": member.business_card_front_id,
            "business_card_back_id": member.business_card_back_id,
        }

        with atomic(self.db):
            # Old row goes first: email and mobile number are unique
            self.member_repo.delete(member)

            new_member = variant.model(
                **data.model_dump(exclude=_MANAGED_FIELDS), firm_id=target.id, **cards
            )
            new_member.firm_history = [
                FirmHistoryEntry(firm_id=firm_id, date_of_joining=joined)
                for firm_id, joined in history
            ]
            new_member.firm_history.append(
                FirmHistoryEntry(firm_id=target.id, date_of_joining=utcnow())
            )
            self.member_repo.add(new_member)

            self.relationships.repoint_member(old_id, new_member.id, target.id)

        logger.info(
            "Moved member %s from firm %s to firm %s as %s member %s",
            old_id,
            source_firm_id,
            target.id,
            variant.tag.value,
            new_member.id,
        )
        return new_member

    def replace_business_card(
        self,
        member_id: int,
        front: UploadedPayload | None = None,
        back: UploadedPayload | None = None,
    ) -> Member:
        """
        Upload a new front and/or back business card image.

        Any card being replaced is deleted once the member points at the new file.
        """
        if front is None and back is None:
            raise ValidationException(
                "At least one of front or back is required",
                fields=[
                    {"field": "front", "message": "Field required"},
                    {"field": "back", "message": "Field required"},
                ],
            )
        member = self.get_member(member_id)

        with atomic(self.db):
            for side, payload in (("front", front), ("back", back)):
                if payload is None:
                    continue
                self.relationships.replace_attachment(
                    member,
                    f"business_card_{side}_id",
                    payload,
                    firm_id=member.firm_id,
                    member_id=member.id,
                    tags=["business-card", side],
                )

        logger.info("Updated business card of member %s", member.id)
        return member

    def delete_business_card(self, member_id: int) -> Member:
        """Drop both business card files of a member"""
        member = self.get_member(member_id)

        with atomic(self.db):
            self.relationships.drop_attachment(member, "business_card_front_id")
            self.relationships.drop_attachment(member, "business_card_back_id")

        logger.info("Deleted business card of member %s", member.id)
        return member
