"""Result and form-validation types shared by the write actions."""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from src.models.statuses import FinanceEntryType
from src.models.store import ID_TYPES, categories_for

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

SIGN_IN_MESSAGE = "Please sign in to continue"

FormT = TypeVar("FormT", bound=BaseModel)


class ActionResult(BaseModel):
    """User-facing outcome of a write action."""

    ok: bool
    title: str
    message: str
    field_errors: dict[str, str] = Field(default_factory=dict)
    data: Any = None

    @classmethod
    def success(cls, message: str, data: Any = None, title: str = "Success") -> "ActionResult":
        return cls(ok=True, title=title, message=message, data=data)

    @classmethod
    def failure(
        cls,
        message: str,
        title: str = "Error",
        field_errors: Optional[dict[str, str]] = None,
    ) -> "ActionResult":
        return cls(ok=False, title=title, message=message, field_errors=field_errors or {})


class FormValidationError(Exception):
    """Raised when a form fails validation; carries a field -> message map."""

    def __init__(self, field_errors: dict[str, str], message: str = "Please fill in all required fields"):
        super().__init__(message)
        self.message = message
        self.field_errors = field_errors

    def to_result(self) -> ActionResult:
        return ActionResult.failure(
            self.message, title="Validation Error", field_errors=self.field_errors
        )


def validate_form(form_type: type[FormT], data: dict[str, Any]) -> FormT:
    """Build a form model, turning pydantic errors into a FormValidationError.

    Raises:
        FormValidationError: With the first message per field
    """
    try:
        return form_type(**data)
    except ValidationError as e:
        field_errors: dict[str, str] = {}
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "general"
            ctx_error = (error.get("ctx") or {}).get("error")
            field_errors.setdefault(field, str(ctx_error) if ctx_error else error["msg"])
        if "general" in field_errors:
            raise FormValidationError(field_errors, message=field_errors["general"]) from e
        raise FormValidationError(field_errors) from e


def _text(value: Any) -> str:
    """Form input as stripped text; numbers typed into text fields become strings."""
    return "" if value is None else str(value).strip()


def _required(value: Any, message: str) -> str:
    value = _text(value)
    if not value:
        raise ValueError(message)
    return value


def _optional(value: Any) -> Optional[str]:
    value = _text(value)
    return value or None


class SignInForm(BaseModel):
    email: str = ""
    password: str = ""

    model_config = ConfigDict(validate_default=True)

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        email = _required(v, "Email is required")
        if not EMAIL_PATTERN.match(email):
            raise ValueError("Please enter a valid email address")
        return email

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, v):
        v = "" if v is None else str(v)
        if not v:
            raise ValueError("Password is required")
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return v


class GuestForm(BaseModel):
    """Guest add/edit form. Name, email and phone are required."""

    name: str = ""
    email: str = ""
    phone: str = ""
    nationality: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    special_requests: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        return _required(v, "Name is required")

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        email = _required(v, "Email is required").lower()
        if not EMAIL_PATTERN.match(email):
            raise ValueError("Please enter a valid email address")
        return email

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, v):
        return _required(v, "Phone is required")

    @field_validator("id_type", mode="before")
    @classmethod
    def check_id_type(cls, v):
        v = _optional(v)
        if v is not None and v not in ID_TYPES:
            raise ValueError("Select a valid identification type")
        return v

    @field_validator(
        "nationality",
        "id_number",
        "address",
        "emergency_contact",
        "emergency_phone",
        "special_requests",
        "notes",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        return _optional(v)


class FinanceEntryForm(BaseModel):
    """Manual ledger entry form. Title, amount and category are required."""

    title: str = ""
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    type: FinanceEntryType = FinanceEntryType.INCOME
    category: str = ""
    entry_date: date = Field(default_factory=date.today)

    model_config = ConfigDict(validate_default=True)

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, v):
        return _required(v, "Title is required")

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, v):
        return _optional(v)

    @field_validator("amount", mode="before")
    @classmethod
    def check_amount(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Amount is required")
        try:
            amount = Decimal(str(v).strip())
        except InvalidOperation:
            raise ValueError("Amount must be a number")
        if not amount.is_finite():
            raise ValueError("Amount must be a number")
        return amount

    @field_validator("category", mode="before")
    @classmethod
    def check_category(cls, v, info: ValidationInfo):
        category = _required(v, "Category is required")
        entry_type = info.data.get("type")
        if entry_type is not None and category not in categories_for(entry_type):
            raise ValueError(f"Select a valid {entry_type.value} category")
        return category


class ProfileForm(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    company_name: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _optional(v)


class PasswordChangeForm(BaseModel):
    current_password: str = ""
    new_password: str = ""
    confirm_password: str = ""

    model_config = ConfigDict(validate_default=True)

    @field_validator("current_password", mode="before")
    @classmethod
    def check_current(cls, v):
        if not v:
            raise ValueError("Current password is required")
        return v

    @model_validator(mode="after")
    def check_new_password(self):
        if self.new_password != self.confirm_password:
            raise ValueError("New passwords do not match")
        if len(self.new_password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return self


class BillingForm(BaseModel):
    """Payout bank and PAN details. Blank values are stored as null."""

    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    pan_number: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _optional(v)
