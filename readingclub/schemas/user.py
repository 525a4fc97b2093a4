"""Pydantic schemas for login, PIN management, registration and profiles."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import (BaseModel, Field, computed_field, field_validator,
                      model_validator)

from readingclub.core.config import settings
from readingclub.core.pricing import PRICE_TIERS
from readingclub.core.security import is_valid_pin

_VALID_SEXES = {"Homme", "Femme"}
_VALID_PAYMENT_TYPES = {"card", "sepa_debit"}

_ALIASED = {"populate_by_name": True}


def _normalise_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("Invalid email address")
    return v


# ── Login ───────────────────────────────────────────────────────────
class LoginRequest(BaseModel):
    email: str
    pin: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()


class UserRead(BaseModel):
    id: int
    email: str
    role: str
    first_name: str | None
    last_name: str | None
    country: str | None
    currency: str
    subscription_status: str
    notifications_accepted: bool
    welcome_seen: bool = False
    created_at: datetime | None
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    user: UserRead


# ── PIN management ──────────────────────────────────────────────────
class ChangePinRequest(BaseModel):
    current_pin: str = Field(alias="currentPin")
    new_pin: str = Field(alias="newPin")

    model_config = _ALIASED


class ResetClientPinRequest(BaseModel):
    client_email: str = Field(alias="clientEmail")

    model_config = _ALIASED

    @field_validator("client_email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)


class ResetClientPinResponse(BaseModel):
    success: bool = True
    generated_pin: str
    info: str


class SecurityInfo(BaseModel):
    last_pin_change: datetime | None
    last_login: datetime | None


class NotificationPreference(BaseModel):
    accepted: bool


# ── Registration ────────────────────────────────────────────────────
class RegisterRequest(BaseModel):
    """Both registration phases in one payload.

    Profile + credential fields come from the form; ``payment_method_id`` is
    the opaque token the payment processor's client SDK returned.
    """

    first_name: str = Field(alias="prenom")
    last_name: str = Field(alias="nom")
    email: str
    birth_date: str = Field(alias="date_naissance")
    sex: str = Field(alias="sexe")
    country: str = Field(alias="pays")
    pin: str
    confirm_pin: str = Field(alias="confirmPin")
    payment_method_id: str = Field(alias="paymentMethodId")
    payment_method_type: str = Field(default="card", alias="paymentMethodType")
    notifications_accepted: bool = Field(default=False, alias="notificationsAccepted")

    model_config = _ALIASED

    @field_validator("first_name", "last_name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        if len(v) > 100:
            raise ValueError("Name must not exceed 100 characters")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("birth_date")
    @classmethod
    def _birth_date(cls, v: str) -> str:
        try:
            parsed = date.fromisoformat(v.strip())
        except ValueError:
            raise ValueError("Birth date must be YYYY-MM-DD") from None
        if parsed >= date.today():
            raise ValueError("Birth date must be in the past")
        return parsed.isoformat()

    @field_validator("sex")
    @classmethod
    def _sex(cls, v: str) -> str:
        if v not in _VALID_SEXES:
            raise ValueError(f"Sex must be one of: {sorted(_VALID_SEXES)}")
        return v

    @field_validator("country")
    @classmethod
    def _country(cls, v: str) -> str:
        v = v.strip()
        if v not in PRICE_TIERS:
            raise ValueError(f"Country must be one of: {list(PRICE_TIERS)}")
        return v

    @field_validator("pin")
    @classmethod
    def _pin(cls, v: str) -> str:
        if not is_valid_pin(v, "user"):
            raise ValueError(f"PIN must be exactly {settings.USER_PIN_LENGTH} digits")
        return v

    @field_validator("payment_method_id")
    @classmethod
    def _payment_method(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Payment method is required")
        return v

    @field_validator("payment_method_type")
    @classmethod
    def _payment_type(cls, v: str) -> str:
        if v not in _VALID_PAYMENT_TYPES:
            raise ValueError(f"Payment method type must be one of: {sorted(_VALID_PAYMENT_TYPES)}")
        return v

    @model_validator(mode="after")
    def _pins_match(self) -> "RegisterRequest":
        if self.pin != self.confirm_pin:
            raise ValueError("PIN and confirmation do not match")
        return self


class RegisterResponse(BaseModel):
    success: bool = True
    user: UserRead


# ── Admin views ─────────────────────────────────────────────────────
DISPLAY_STATUS = {
    "active": "Actif",
    "pending": "En attente",
    "cancelled": "Résilié",
    "payment_issue": "Problème de paiement",
}


class ClientRead(UserRead):
    birth_date: str | None
    sex: str | None
    payment_method_type: str | None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_status(self) -> str:
        return DISPLAY_STATUS.get(self.subscription_status, DISPLAY_STATUS["pending"])
