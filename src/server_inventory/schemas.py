"""
Wire models for the inventory API.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from server_inventory.exceptions import RecordValidationError

EMAIL_RE = re.compile(r"^\S+@\S+$")


class Environment(str, Enum):
    DEVELOPMENT = "Development"
    STAGING = "Staging"
    PRODUCTION = "Production"


class User(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Any = None
    username: str
    email: Optional[str] = None
    role: Optional[str] = None


class LoginArgs(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterArgs(BaseModel):
    username: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if not EMAIL_RE.match(value):
            raise ValueError("Invalid email address")
        return value


class LoginResponse(BaseModel):
    token: str
    user: User


class ServerFields(BaseModel):
    """
    Everything the client may write on a server record; create and update both send the full set.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    project_name: str = Field(min_length=1)
    project_purpose: str = Field(min_length=1)
    environment: Environment
    vm_name: str = Field(min_length=1)
    cpu: int = Field(ge=1)
    ram: int = Field(ge=1)
    storage: int = Field(ge=1)
    total_cost: float = Field(ge=0)
    os_version: str = Field(min_length=1)
    ip: str = Field(min_length=1)
    hostname: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    server_no: str = Field(min_length=1)
    created_by: str = Field(min_length=1)
    remarks: str = ""
    delete_date: Optional[datetime] = None

    def payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class ServerRecord(ServerFields):
    """
    A record as returned by the API.  Server-side data is trusted as is, so the
    client-side minimums are not re-applied here.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    project_name: str = ""
    project_purpose: str = ""
    environment: str = ""
    vm_name: str = ""
    cpu: int = 0
    ram: int = 0
    storage: int = 0
    total_cost: float = 0.0
    os_version: str = ""
    ip: str = ""
    hostname: str = ""
    username: str = ""
    password: str = ""
    server_no: str = ""
    created_by: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        return str(value)

    def fields(self) -> Dict[str, Any]:
        """
        The writable subset, as a plain dict suitable for seeding an edit draft.
        """
        return self.model_dump(include=set(ServerFields.model_fields), mode="json")


class ServerList(BaseModel):
    servers: Optional[List[ServerRecord]] = None
    total: Optional[int] = None
    page: Optional[int] = None
    limit: Optional[int] = None


def format_validation_error(exc: ValidationError) -> List[str]:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        errors.append(f"{location}: {error['msg']}" if location else error["msg"])
    return errors


def validate(model, data: Dict[str, Any]):
    """
    Build `model` from user-supplied data, translating pydantic errors into RecordValidationError.
    """
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RecordValidationError(format_validation_error(exc)) from exc
