from typing import Optional

from pydantic import BaseModel, ValidationError, validator

from src.services.errors import ValidationMissing


def _required(v):
    if v is None:
        raise ValueError("required")
    v = str(v).strip()
    if not v:
        raise ValueError("required")
    return v


def _optional(v):
    if v is None:
        return None
    v = str(v).strip()
    return v or None


class PatientIn(BaseModel):
    name: str
    phone: str
    email: Optional[str] = None
    birth_date: Optional[str] = None
    address: Optional[str] = None
    allergies: Optional[str] = None

    @validator("name", "phone", pre=True)
    def check_required(cls, v):
        return _required(v)

    @validator("email", "birth_date", "address", "allergies", pre=True)
    def blank_to_none(cls, v):
        return _optional(v)


class PatientPatch(BaseModel):
    """Edit form: every field optional, but name/phone can't be blanked out."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[str] = None
    address: Optional[str] = None
    allergies: Optional[str] = None

    @validator("name", "phone", pre=True)
    def check_required(cls, v):
        return _required(v)

    @validator("email", "birth_date", "address", "allergies", pre=True)
    def blank_to_none(cls, v):
        return _optional(v)


class VisitIn(BaseModel):
    date: str
    treatment: str
    notes: Optional[str] = None
    cost: Optional[float] = None

    @validator("date", "treatment", pre=True)
    def check_required(cls, v):
        return _required(v)

    @validator("notes", "cost", pre=True)
    def blank_to_none(cls, v):
        return _optional(v)


class AppointmentIn(BaseModel):
    patient_id: str
    date: str
    time: str
    reason: Optional[str] = None

    @validator("patient_id", "date", "time", pre=True)
    def check_required(cls, v):
        return _required(v)

    @validator("reason", pre=True)
    def blank_to_none(cls, v):
        return _optional(v)


class SignUpIn(BaseModel):
    email: str
    clinic_name: str
    password: Optional[str] = None  # accepted, never stored or checked

    @validator("email", "clinic_name", pre=True)
    def check_required(cls, v):
        return _required(v)


class SignInIn(BaseModel):
    email: str
    password: Optional[str] = None

    @validator("email", pre=True)
    def check_required(cls, v):
        return _required(v)


def parse(schema, data: dict | None, partial: bool = False) -> dict:
    """
    Validate form data against `schema`.
    Raises ValidationMissing naming the first offending field.
    With partial=True only the submitted fields are returned.
    """
    try:
        model = schema(**(data or {}))
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else "form"
        if "missing" in str(first.get("type", "")) or "required" in str(first.get("msg", "")):
            raise ValidationMissing(field) from e
        raise ValidationMissing(field, f"The field '{field}' is invalid.") from e
    return model.dict(exclude_unset=partial)
