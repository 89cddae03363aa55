"""Business-rule validation for expense, group and user profile submissions.

Checks run in a fixed order and stop at the first violated rule, so the
caller always gets a single message to show:

1. description
2. original amount bounds, currency, then decimal places for that currency
3. date
4. group
5. participants
6. tags

Split sums are not checked here; they need the converted total and are part
of split resolution.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Optional, Sequence

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from splitsmart.models.expense import SplitType
from splitsmart.schemas.expense import ExpenseDraft
from splitsmart.services.currency_service import (
    check_amount,
    check_amount_bounds,
    is_supported_currency,
)
from splitsmart.services.errors import ErrorKind, Result, SplitSmartError, ValidationError

logger = logging.getLogger(__name__)

DESCRIPTION_MIN_LENGTH = 2
DESCRIPTION_MAX_LENGTH = 200
SUSPICIOUS_CONTENT = re.compile(r"<script|javascript:|data:|vbscript:", re.IGNORECASE)

MAX_YEARS_IN_PAST = 10
MAX_YEARS_IN_FUTURE = 1

MAX_TAGS = 10
MAX_TAG_LENGTH = 30
MAX_TAGS_TEXT_LENGTH = 200

GROUP_NAME_MIN_LENGTH = 2
GROUP_NAME_MAX_LENGTH = 50
MIN_GROUP_MEMBERS = 2

USER_NAME_MAX_LENGTH = 50
USER_NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-'.]+$")
EMAIL_MAX_LENGTH = 100

_email_adapter = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class ValidatedExpense:
    """Expense submission whose shape has passed every rule."""

    group_id: str
    description: str
    original_amount: Decimal
    original_currency: str
    date: datetime
    paid_by: str
    split_type: SplitType
    participants: list[str]
    split_values: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    attachments: list[str] = field(default_factory=list)
    location: Optional[str] = None

    @property
    def directive(self):
        """Split directive matching split_type."""
        if self.split_type == SplitType.EQUAL:
            return list(self.participants)
        return dict(self.split_values)


@dataclass(frozen=True)
class ValidatedGroup:
    """Group creation request that has passed every rule."""

    name: str
    master_currency: str
    member_ids: list[str]


@dataclass(frozen=True)
class ValidatedUserProfile:
    """User profile that has passed every rule."""

    name: str
    email: Optional[str] = None


def _shift_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return moment.replace(year=moment.year + years, day=28)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_tags(tags: str | Sequence[str] | None) -> list[str]:
    """Split comma-separated tags, trimming and dropping empties."""
    if not tags:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [tag.strip() for tag in tags if tag and tag.strip()]


def check_description(description: str) -> str:
    text = (description or "").strip()
    if not text:
        raise ValidationError(ErrorKind.INVALID_DESCRIPTION, "Description is required")
    if len(text) < DESCRIPTION_MIN_LENGTH:
        raise ValidationError(
            ErrorKind.INVALID_DESCRIPTION, "Description must be at least 2 characters"
        )
    if len(text) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            ErrorKind.INVALID_DESCRIPTION, "Description cannot exceed 200 characters"
        )
    if SUSPICIOUS_CONTENT.search(text):
        raise ValidationError(ErrorKind.INVALID_DESCRIPTION, "Description contains invalid content")
    return text


def check_date(value: Any, now: Optional[datetime] = None) -> datetime:
    """Parse an expense date and check it is within the allowed window.

    Args:
        value: ISO date/datetime string, date or datetime
        now: Reference time (default: current UTC time)

    Returns:
        Timezone-aware UTC datetime

    Raises:
        ValidationError: INVALID_DATE if unparsable or out of range
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        try:
            moment = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise ValidationError(ErrorKind.INVALID_DATE, "Please enter a valid date") from e
    else:
        raise ValidationError(ErrorKind.INVALID_DATE, "Date is required")

    reference = _as_utc(now or datetime.now(timezone.utc))
    try:
        # Offsets near year 1 or 9999 can push the UTC value out of range
        moment = _as_utc(moment)
        too_old = moment < _shift_years(reference, -MAX_YEARS_IN_PAST)
        too_new = moment > _shift_years(reference, MAX_YEARS_IN_FUTURE)
    except (OverflowError, ValueError) as e:
        raise ValidationError(ErrorKind.INVALID_DATE, "Please enter a valid date") from e

    if too_old:
        raise ValidationError(
            ErrorKind.INVALID_DATE, "Date cannot be more than 10 years in the past"
        )
    if too_new:
        raise ValidationError(
            ErrorKind.INVALID_DATE, "Date cannot be more than 1 year in the future"
        )
    return moment


def check_tags(tags: str | Sequence[str] | None) -> list[str]:
    raw = tags if isinstance(tags, str) else ", ".join(tags or [])
    if len(raw) > MAX_TAGS_TEXT_LENGTH:
        raise ValidationError(ErrorKind.TOO_MANY_TAGS, "Tags cannot exceed 200 characters")

    tag_list = parse_tags(tags)
    if len(tag_list) > MAX_TAGS:
        raise ValidationError(ErrorKind.TOO_MANY_TAGS, "Cannot have more than 10 tags")
    if any(len(tag) > MAX_TAG_LENGTH for tag in tag_list):
        raise ValidationError(ErrorKind.TAG_TOO_LONG, "Each tag cannot exceed 30 characters")
    return tag_list


def check_currency(currency_code: str) -> str:
    code = (currency_code or "").strip().upper()
    if not is_supported_currency(code):
        raise ValidationError(ErrorKind.UNSUPPORTED_CURRENCY, "Currency is not supported")
    return code


def selected_participants(draft: ExpenseDraft) -> list[str]:
    """User ids taking part in the split, before zero rows are dropped."""
    if draft.split_type == SplitType.EQUAL or not draft.split_values:
        return list(dict.fromkeys(draft.participants))
    return list(draft.split_values.keys())


class ExpenseValidator:
    """Validate expense drafts against submission rules."""

    def __init__(self, now: Optional[datetime] = None):
        """Initialize validator.

        Args:
            now: Fixed reference time for date bounds (default: wall clock
                at validation time)
        """
        self.now = now

    def validate(self, draft: ExpenseDraft) -> ValidatedExpense:
        """Run every rule in order.

        Raises:
            SplitSmartError: First violated rule
        """
        description = check_description(draft.description)
        check_amount_bounds(draft.original_amount)
        currency = check_currency(draft.original_currency)
        amount = check_amount(draft.original_amount, currency)
        expense_date = check_date(draft.date, self.now)

        group_id = (draft.group_id or "").strip()
        if not group_id:
            raise ValidationError(ErrorKind.MISSING_GROUP, "Please select a group")

        participants = selected_participants(draft)
        if not participants:
            raise ValidationError(
                ErrorKind.NO_PARTICIPANTS, "At least one participant is required"
            )

        tags = check_tags(draft.tags)

        return ValidatedExpense(
            group_id=group_id,
            description=description,
            original_amount=amount,
            original_currency=currency,
            date=expense_date,
            paid_by=draft.paid_by,
            split_type=draft.split_type,
            participants=participants,
            split_values=dict(draft.split_values),
            tags=tags,
            attachments=list(draft.attachments),
            location=draft.location,
        )


def validate_expense_submission(
    draft: ExpenseDraft, now: Optional[datetime] = None
) -> Result[ValidatedExpense]:
    """Validate an expense draft.

    Args:
        draft: Form state as submitted
        now: Reference time for date bounds (default: current time)

    Returns:
        Result with the normalized expense, or the first violated rule
    """
    try:
        return Result.success(ExpenseValidator(now).validate(draft))
    except SplitSmartError as e:
        logger.info(f"Expense submission rejected ({e.kind.value}): {e.message}")
        return Result.failure(e)


def validate_group_creation(
    name: str, currency: str, member_ids: Sequence[str]
) -> Result[ValidatedGroup]:
    """Validate a new group's name, master currency and initial members."""
    try:
        group_name = (name or "").strip()
        if len(group_name) < GROUP_NAME_MIN_LENGTH:
            raise ValidationError(
                ErrorKind.INVALID_GROUP_NAME, "Group name must be at least 2 characters"
            )
        if len(group_name) > GROUP_NAME_MAX_LENGTH:
            raise ValidationError(
                ErrorKind.INVALID_GROUP_NAME, "Group name cannot exceed 50 characters"
            )
        code = check_currency(currency)
        members = list(dict.fromkeys(m for m in member_ids if m))
        if len(members) < MIN_GROUP_MEMBERS:
            raise ValidationError(
                ErrorKind.NOT_ENOUGH_MEMBERS, "Group must have at least 2 members"
            )
    except SplitSmartError as e:
        logger.info(f"Group creation rejected ({e.kind.value}): {e.message}")
        return Result.failure(e)

    return Result.success(ValidatedGroup(name=group_name, master_currency=code, member_ids=members))


def check_user_name(name: str) -> str:
    text = (name or "").strip()
    if not text:
        raise ValidationError(ErrorKind.INVALID_USER_NAME, "Name is required")
    if len(text) > USER_NAME_MAX_LENGTH:
        raise ValidationError(ErrorKind.INVALID_USER_NAME, "Name cannot exceed 50 characters")
    if not USER_NAME_PATTERN.match(text):
        raise ValidationError(
            ErrorKind.INVALID_USER_NAME,
            "Name can only contain letters, spaces, hyphens, and apostrophes",
        )
    return text


def check_email(email: str) -> str:
    """Validate an email address.

    Returns:
        Normalized address as returned by pydantic's EmailStr

    Raises:
        ValidationError: INVALID_EMAIL if empty, malformed or too long
    """
    text = (email or "").strip()
    if not text:
        raise ValidationError(ErrorKind.INVALID_EMAIL, "Email is required")
    try:
        address = _email_adapter.validate_python(text)
    except PydanticValidationError as e:
        raise ValidationError(
            ErrorKind.INVALID_EMAIL, "Please enter a valid email address"
        ) from e
    if len(address) > EMAIL_MAX_LENGTH:
        raise ValidationError(ErrorKind.INVALID_EMAIL, "Email address is too long")
    return address


def validate_user_profile(
    name: str, email: Optional[str] = None
) -> Result[ValidatedUserProfile]:
    """Validate a user's display name and optional email.

    Args:
        name: Display name as typed
        email: Email address, or None when the user has not given one

    Returns:
        Result with the trimmed profile, or the first violated rule
    """
    try:
        user_name = check_user_name(name)
        address = check_email(email) if email is not None else None
    except SplitSmartError as e:
        logger.info(f"User profile rejected ({e.kind.value}): {e.message}")
        return Result.failure(e)

    return Result.success(ValidatedUserProfile(name=user_name, email=address))


__all__ = [
    "ValidatedExpense",
    "ValidatedGroup",
    "ValidatedUserProfile",
    "ExpenseValidator",
    "parse_tags",
    "check_description",
    "check_date",
    "check_tags",
    "check_currency",
    "selected_participants",
    "validate_expense_submission",
    "validate_group_creation",
    "check_user_name",
    "check_email",
    "validate_user_profile",
]
