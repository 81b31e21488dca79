"""
Core Data Models for Expense Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the same JSON shape the backup files have always used

DESIGN DECISION: JSON field names are camelCase (``dateFormat``,
``monthlyBudget``) while Python attributes stay snake_case. Backup documents
written by older versions of the app therefore import unchanged.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional, Union
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
)
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Fresh unique identifier for user-created records."""
    return str(uuid4())


def utc_now() -> datetime:
    """Current time as a naive UTC datetime (the form every stored date takes)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# FIELD TYPES
# =============================================================================

def _parse_timestamp(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    return value


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    # Millisecond precision, the same as the stored form
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def _timestamp_to_json(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds") + "Z"


def _money_to_json(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# Stored dates are naive UTC at millisecond precision. Accepts datetimes,
# dates and ISO strings (with or without a time part, "Z" suffix allowed).
Timestamp = Annotated[
    datetime,
    BeforeValidator(_parse_timestamp),
    AfterValidator(_to_naive_utc),
    PlainSerializer(_timestamp_to_json, when_used="json"),
]

_TIMESTAMP_ADAPTER = TypeAdapter(Timestamp)


def parse_timestamp(value: Any) -> datetime:
    """Parse anything a stored expense date accepts into a naive UTC datetime."""
    return _TIMESTAMP_ADAPTER.validate_python(value)


# Amounts serialize as plain JSON numbers.
Money = Annotated[
    Decimal,
    PlainSerializer(_money_to_json, when_used="json"),
]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class CategoryColor(str, Enum):
    """Display color tokens a category can carry."""
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"
    PURPLE = "purple"
    PINK = "pink"
    ORANGE = "orange"
    GRAY = "gray"
    TEAL = "teal"


class DateFormat(str, Enum):
    """Date display patterns."""
    DAY_FIRST = "DD/MM/YYYY"
    MONTH_FIRST = "MM/DD/YYYY"
    ISO = "YYYY-MM-DD"


def _known_date_format(value: Any) -> Any:
    if isinstance(value, DateFormat):
        return value
    try:
        return DateFormat(value)
    except ValueError:
        return DateFormat.DAY_FIRST


class Language(str, Enum):
    """Interface languages."""
    ENGLISH = "en"
    HINDI = "hi"
    TAMIL = "ta"
    TELUGU = "te"


SUPPORTED_CURRENCIES: dict[str, str] = {
    "₹": "Indian Rupee (INR)",
    "$": "US Dollar (USD)",
    "€": "Euro (EUR)",
    "£": "British Pound (GBP)",
}

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = CategoryColor.GRAY


class _Record(BaseModel):
    """Shared config: strip whitespace, camelCase aliases, accept either name."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict:
        """Dictionary in the persisted/exported JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# IDENTITY
# =============================================================================

class User(_Record):
    """The public record of a registered user."""

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique user ID; namespaces every per-user collection"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
    )


class StoredUser(User):
    """
    A user as kept in the global ``users`` collection.

    The password is plaintext: login is a local convenience check,
    not a security boundary.
    """

    password: str = Field(..., min_length=1)

    def public(self) -> User:
        return User(id=self.id, name=self.name, email=self.email)


# =============================================================================
# CATEGORIES
# =============================================================================

class NewCategory(_Record):
    """Category fields supplied by the user; the store assigns the id."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    color: CategoryColor = Field(
        default=CategoryColor.GREEN,
        description="Display color token"
    )


class Category(NewCategory):
    """
    A spending category.

    Seeded categories carry fixed ids ("food", "travel"); user-created
    ones get a generated id.
    """

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique within one user's categories"
    )


def uncategorized(category_id: str) -> Category:
    """Display fallback for an expense whose category no longer exists."""
    return Category.model_construct(
        id=category_id,
        name=UNCATEGORIZED_NAME,
        color=UNCATEGORIZED_COLOR,
    )


# =============================================================================
# EXPENSES
# =============================================================================

class NewExpense(_Record):
    """Expense fields supplied by the user; the store assigns the id."""

    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was spent on"
    )
    amount: Annotated[
        Money,
        Field(gt=0, description="Amount in the user's currency (required, positive)")
    ]
    category: str = Field(
        ...,
        description="Category id. A soft reference: not checked against the categories"
    )
    date: Timestamp = Field(
        ...,
        description="When the expense happened (naive UTC)"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
    )


class Expense(NewExpense):
    """A stored expense."""

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique expense ID"
    )


# =============================================================================
# SETTINGS
# =============================================================================

class UserSettings(_Record):
    """Per-user preferences. Exactly one record per user."""

    currency: str = Field(
        default="₹",
        min_length=1,
        max_length=8,
        description="Currency symbol prefixed to amounts"
    )
    date_format: Annotated[DateFormat, BeforeValidator(_known_date_format)] = Field(
        default=DateFormat.DAY_FIRST,
        description="Unrecognised patterns fall back to DD/MM/YYYY",
    )
    monthly_budget: Annotated[
        Money,
        Field(gt=0, description="Budget for one calendar month")
    ] = Decimal("20000")
    notifications_enabled: bool = True
    dark_mode: bool = False
    language: Language = Language.ENGLISH


# =============================================================================
# IMPORT / EXPORT
# =============================================================================

class ExportDocument(_Record):
    """
    A full backup of one user's data.

    All three sections are required; a document missing any of them
    is rejected as a whole.
    """

    expenses: list[Expense]
    categories: list[Category]
    settings: UserSettings
