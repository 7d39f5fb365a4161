"""
Polymorphic type resolver.

Maps a firm/member type tag to the concrete model class and the pydantic
schemas that validate it. Every create, update and transfer of a firm or a
member goes through here before the database is touched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ValidationError as PydanticValidationError

from investtrack.core.exceptions import InvalidTypeException, ValidationException, error_fields
from investtrack.models.firm import Broker, Firm, FirmType, Investor
from investtrack.models.member import BrokerMember, InvestorMember, Member, MemberType
from investtrack.schemas.firm_schemas import (
    BrokerCreate,
    BrokerUpdate,
    InvestorCreate,
    InvestorUpdate,
)
from investtrack.schemas.member_schemas import (
    BrokerMemberCreate,
    BrokerMemberUpdate,
    InvestorMemberCreate,
    InvestorMemberUpdate,
)


@dataclass(frozen=True)
class MemberVariant:
    tag: MemberType
    model: type[Member]
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]


@dataclass(frozen=True)
class FirmVariant:
    tag: FirmType
    model: type[Firm]
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]
    # Members of this firm variant
    member_tag: MemberType


MEMBER_VARIANTS: dict[MemberType, MemberVariant] = {
    MemberType.BROKER: MemberVariant(
        tag=MemberType.BROKER,
        model=BrokerMember,
        create_schema=BrokerMemberCreate,
        update_schema=BrokerMemberUpdate,
    ),
    MemberType.INVESTOR: MemberVariant(
        tag=MemberType.INVESTOR,
        model=InvestorMember,
        create_schema=InvestorMemberCreate,
        update_schema=InvestorMemberUpdate,
    ),
}

FIRM_VARIANTS: dict[FirmType, FirmVariant] = {
    FirmType.BROKER: FirmVariant(
        tag=FirmType.BROKER,
        model=Broker,
        create_schema=BrokerCreate,
        update_schema=BrokerUpdate,
        member_tag=MemberType.BROKER,
    ),
    FirmType.INVESTOR: FirmVariant(
        tag=FirmType.INVESTOR,
        model=Investor,
        create_schema=InvestorCreate,
        update_schema=InvestorUpdate,
        member_tag=MemberType.INVESTOR,
    ),
}


def _coerce_tag(enum_cls: type[Enum], tag: Any, field: str):
    if tag is None or tag == "":
        raise ValidationException(
            f"{field} is required", fields=[{"field": field, "message": "Field required"}]
        )
    try:
        return enum_cls(tag)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise InvalidTypeException(f"Unknown {field} '{tag}'. Expected one of: {allowed}")


def resolve_firm_variant(tag: Any) -> FirmVariant:
    """
    Look up a firm variant by its tag.

    Raises:
        ValidationException: tag missing
        InvalidTypeException: tag is not a known firm type
    """
    return FIRM_VARIANTS[_coerce_tag(FirmType, tag, "firm_type")]


def resolve_member_variant(tag: Any) -> MemberVariant:
    """
    Look up a member variant by its tag.

    Raises:
        ValidationException: tag missing
        InvalidTypeException: tag is not a known member type
    """
    return MEMBER_VARIANTS[_coerce_tag(MemberType, tag, "member_type")]


def member_variant_for_firm(firm: Firm) -> MemberVariant:
    """The member variant a firm's members must have"""
    return MEMBER_VARIANTS[resolve_firm_variant(firm.firm_type).member_tag]


def validate_payload(schema: type[BaseModel], data: dict) -> BaseModel:
    """
    Validate a raw payload against a schema.

    Raises:
        ValidationException: listing every offending field
    """
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        fields = error_fields(e.errors())
        summary = "; ".join(f"{item['field']}: {item['message']}" for item in fields)
        raise ValidationException(f"Invalid data: {summary}", fields=fields) from e


def reject_cleared_required(create_schema: type[BaseModel], updates: dict) -> None:
    """Partial updates may not null out a field the create schema requires"""
    fields = [
        {"field": name, "message": "Field cannot be null"}
        for name, value in updates.items()
        if value is None
        and name in create_schema.model_fields
        and create_schema.model_fields[name].is_required()
    ]
    if fields:
        raise ValidationException(
            f"Required field(s) cannot be cleared: {', '.join(f['field'] for f in fields)}",
            fields=fields,
        )
