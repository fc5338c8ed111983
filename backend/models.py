"""
Pydantic models used across the backend.
No business logic — only shapes for API requests / responses.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, BaseModel, Field

RoleName = Literal["visitor", "stand", "admin"]
ProfileStatus = Literal["pending", "approved", "rejected"]
LeadStatus = Literal["Pendente", "Contactado", "Vendido", "Cancelado"]
Fuel = Literal["Gasolina", "Diesel", "Elétrico", "Híbrido"]
Transmission = Literal["Manual", "Automático"]
Category = Literal["SUV", "Sedan", "Coupe", "Hatchback", "Utilitário"]


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if "@" not in value or value.startswith("@") or value.endswith("@"):
        raise ValueError("Invalid email address.")
    return value


Email = Annotated[str, AfterValidator(_normalize_email)]


# ── Health ────────────────────────────
class HealthStatus(BaseModel):
    """Response model for the /health endpoint."""
    mongodb: str = Field(..., description="UP or DOWN")


# ── Auth ──────────────────────────────
class SignInRequest(BaseModel):
    email: Email
    password: str


class SignUpRequest(BaseModel):
    """Credential pair plus the metadata captured by the registration form."""
    email: Email
    password: str = Field(..., min_length=6)
    data: dict[str, Any] = Field(default_factory=dict)


class UpdateUserRequest(BaseModel):
    password: Optional[str] = Field(default=None, min_length=6)
    data: Optional[dict[str, Any]] = None


class RecoverRequest(BaseModel):
    email: Email
    redirect_to: str = ""


class UserOut(BaseModel):
    id: str
    email: str
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    last_sign_in: Optional[datetime] = None


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserOut


# ── Profiles ──────────────────────────
class ProfileCreate(BaseModel):
    id: str
    full_name: str = ""
    email: Email
    role: RoleName = "visitor"
    stand_name: Optional[str] = None
    status: ProfileStatus = "approved"


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    stand_name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProfileStatus] = None
    role: Optional[RoleName] = None


class Profile(BaseModel):
    id: str
    full_name: str = ""
    email: str
    role: RoleName = "visitor"
    stand_name: Optional[str] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    status: ProfileStatus = "pending"
    created_at: datetime
    last_sign_in: Optional[datetime] = None


# ── Cars ──────────────────────────────
class CarCreate(BaseModel):
    brand: str = Field(..., min_length=1, max_length=60)
    model: str = Field(..., min_length=1, max_length=80)
    year: int = Field(..., ge=1900, le=2100)
    price: float = Field(default=0, ge=0)
    mileage: int = Field(default=0, ge=0)
    fuel: Fuel = "Gasolina"
    transmission: Transmission = "Automático"
    category: Category = "Sedan"
    location: str = ""
    description: str = ""
    subdomain: Optional[str] = None
    images: list[str] = Field(..., min_length=1, max_length=10)


class CarUpdate(BaseModel):
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    price: Optional[float] = Field(default=None, ge=0)
    mileage: Optional[int] = Field(default=None, ge=0)
    fuel: Optional[Fuel] = None
    transmission: Optional[Transmission] = None
    category: Optional[Category] = None
    location: Optional[str] = None
    description: Optional[str] = None
    subdomain: Optional[str] = None
    images: Optional[list[str]] = Field(default=None, min_length=1, max_length=10)
    verified: Optional[bool] = None
    active: Optional[bool] = None


class Car(BaseModel):
    id: str
    brand: str
    model: str
    year: int
    price: float
    mileage: int
    fuel: str
    transmission: str
    category: str
    location: str = ""
    description: str = ""
    subdomain: Optional[str] = None
    image: str
    images: list[str] = Field(default_factory=list)
    stand_name: str
    user_id: str
    verified: bool = False
    active: bool = True
    created_at: datetime


# ── Leads ─────────────────────────────
class LeadCreate(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=120)
    customer_email: Email
    customer_phone: str = ""
    car_id: Optional[str] = None
    stand_name: Optional[str] = None
    message: str = ""


class LeadStatusUpdate(BaseModel):
    status: LeadStatus


class Lead(BaseModel):
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str = ""
    car_id: Optional[str] = None
    stand_name: str
    message: str = ""
    status: LeadStatus = "Pendente"
    created_at: datetime
