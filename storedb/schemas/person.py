# storedb/schemas/person.py
from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^[A-Za-z0-9+_.-]+@(.+)$"
PHONE_PATTERN = r"^[0-9]{3}-[0-9]{3}-[0-9]{4}$"


def _not_blank(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("cannot be empty")
    return value


# Shared contact details for people
class PersonBase(BaseModel):
    first_name: str
    last_name: str
    email: str = Field(pattern=EMAIL_PATTERN)
    phone: str = Field(pattern=PHONE_PATTERN)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        return _not_blank(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _not_blank(v).lower()

    @field_validator("phone", mode="before")
    @classmethod
    def strip_phone(cls, v):
        return _not_blank(v)


# Schema for a client added by an admin (no password yet)
class ClientCreate(PersonBase):
    pass


# Schema for self-registration
class PersonRegister(PersonBase):
    password: str

    @field_validator("password")
    @classmethod
    def password_present(cls, v):
        if not v:
            raise ValueError("cannot be empty")
        return v


class EmailLookup(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _not_blank(v).lower()


# Output schema, also used as the logged-in identity
class PersonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    role: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:
        return (f"ID: {self.id}, Name: {self.full_name}, Phone: {self.phone}, "
                f"Email: {self.email}, Role: {self.role}")
