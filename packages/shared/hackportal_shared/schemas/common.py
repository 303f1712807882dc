from enum import Enum
from typing import Optional

from pydantic import BaseModel


class TaskStatus(str, Enum):
    TODO = "todo"
    DOING = "doing"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Team(str, Enum):
    TECH = "tech"
    LOGISTICS = "logistics"
    SPONSORSHIP = "sponsorship"
    OUTREACH = "outreach"


class PersonType(str, Enum):
    VOLUNTEER = "volunteer"
    MENTOR = "mentor"
    JUDGE = "judge"
    SPONSOR = "sponsor"
    PARTNER = "partner"


class ResourceType(str, Enum):
    DOCUMENT = "document"
    LINK = "link"
    GUIDE = "guide"
    OTHER = "other"


class ErrorKind(str, Enum):
    AUTH_REQUIRED = "auth_required"
    NO_ORG_SELECTED = "no_org_selected"
    NOT_A_MEMBER = "not_a_member"
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    BACKEND = "backend"


TITLE_MAX_LENGTH = 500
DESCRIPTION_MAX_LENGTH = 5000


def enum_values(enum_cls: type[Enum]) -> set[str]:
    return {member.value for member in enum_cls}


class ErrorDetail(BaseModel):
    code: ErrorKind
    message: str
    field: Optional[str] = None
    status: int


class ErrorResponse(BaseModel):
    error: ErrorDetail
