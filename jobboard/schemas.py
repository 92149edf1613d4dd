from typing import Annotated, List, Literal, Optional, Union
from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    HttpUrl,
    StringConstraints,
    TypeAdapter,
    ValidationInfo,
    field_validator,
    model_validator,
)
from datetime import datetime

from .config import settings
from .status import (
    ApplicationStatus,
    EmploymentType,
    ExperienceLevel,
    LocationType,
    RoleStatus,
    SenderType,
)

_url_adapter = TypeAdapter(HttpUrl)


def _check_url(value: Optional[str]) -> Optional[str]:
    """Validate an optional URL, keeping "" as an explicit blank."""
    if value is None or value == "":
        return value
    try:
        _url_adapter.validate_python(value)
    except ValueError:
        raise ValueError("Must be a valid URL")
    return value


# Pagination
class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


# Company Schemas
class CompanyBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    industry: Optional[str] = Field(default=None, max_length=50)
    location: Optional[str] = Field(default=None, max_length=100)
    website: Optional[str] = None

    @field_validator("website")
    @classmethod
    def website_is_url(cls, value):
        return _check_url(value)


class CompanyCreate(CompanyBase):
    hiring_manager_id: int


class CompanySummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class CompanyOut(CompanyBase):
    id: int
    logo_url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CompanyList(BaseModel):
    companies: List[CompanySummary]


# Hiring manager / candidate Schemas
class HiringManagerSummary(BaseModel):
    id: int
    name: str
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class HiringManagerOut(HiringManagerSummary):
    type: Literal["hiring-manager"] = "hiring-manager"
    email: str
    title: Optional[str] = None
    is_persona: bool
    companies: List[CompanySummary] = []


class CandidateSummary(BaseModel):
    id: int
    name: str
    email: str
    headline: Optional[str] = None
    skills: Optional[str] = None
    years_experience: Optional[int] = None
    linkedin_url: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class CandidateOut(CandidateSummary):
    type: Literal["candidate"] = "candidate"
    bio: Optional[str] = None
    is_persona: bool
    created_at: Optional[datetime] = None


class CandidateUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    linkedin_url: Optional[str] = None  # "" clears the stored URL
    headline: Optional[str] = Field(default=None, max_length=100)
    years_experience: Optional[int] = Field(default=None, ge=0, le=50)
    skills: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("linkedin_url")
    @classmethod
    def linkedin_is_url(cls, value):
        return _check_url(value)


# Persona Schemas
class HiringManagerPersonaCreate(BaseModel):
    type: Literal["hiring-manager"]
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    title: Optional[str] = Field(default=None, max_length=100)
    company_name: str = Field(min_length=1, max_length=100)
    company_description: Optional[str] = Field(default=None, max_length=500)
    company_industry: Optional[str] = Field(default=None, max_length=50)
    company_location: Optional[str] = Field(default=None, max_length=100)


class CandidatePersonaCreate(BaseModel):
    type: Literal["candidate"]
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    headline: Optional[str] = Field(default=None, max_length=100)


PersonaCreate = Union[HiringManagerPersonaCreate, CandidatePersonaCreate]


class PersonasOut(BaseModel):
    hiring_managers: List[HiringManagerOut]
    candidates: List[CandidateOut]


# Role Schemas
class RoleBase(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=10, max_length=5000)
    location: str = Field(min_length=1, max_length=100)
    location_type: LocationType
    salary_min: Optional[int] = Field(default=None, ge=0)
    salary_max: Optional[int] = Field(default=None, ge=0)
    salary_currency: str = "USD"
    employment_type: EmploymentType
    experience_level: Optional[ExperienceLevel] = None

    class Config:
        use_enum_values = True


class RoleCreate(RoleBase):
    company_id: int
    hiring_manager_id: int
    status: Literal["draft", "published"] = RoleStatus.DRAFT.value

    @field_validator("salary_max")
    @classmethod
    def salary_range_is_ordered(cls, value: Optional[int], info: ValidationInfo):
        salary_min = info.data.get("salary_min")
        if value is not None and salary_min is not None and value < salary_min:
            raise ValueError("Maximum salary must be greater than minimum salary")
        return value


class RoleStatusUpdate(BaseModel):
    status: RoleStatus


class RoleOut(RoleBase):
    id: int
    status: str
    is_open: bool
    deleted_at: Optional[datetime] = None
    company_id: int
    hiring_manager_id: int
    created_at: Optional[datetime] = None
    company: CompanySummary
    hiring_manager: HiringManagerSummary

    class Config:
        from_attributes = True
        use_enum_values = True


class RoleDetail(RoleOut):
    company: CompanyOut
    application_count: int = 0


class RoleList(BaseModel):
    items: List[RoleOut]
    pagination: Pagination


# Application Schemas
class ApplicationCreate(BaseModel):
    role_id: int
    candidate_id: int
    cover_note: Optional[str] = Field(default=None, max_length=settings.cover_note_max_length)


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class ApplicationOut(BaseModel):
    id: int
    role_id: int
    candidate_id: int
    status: str
    cover_note: Optional[str] = None
    messaging_available: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApplicationDetail(ApplicationOut):
    role: RoleOut
    candidate: CandidateSummary


class ApplicationList(BaseModel):
    items: List[ApplicationDetail]
    pagination: Pagination


# Message Schemas
MessageContent = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=settings.message_max_length),
]


class MessageCreate(BaseModel):
    application_id: int
    content: MessageContent
    hiring_manager_id: Optional[int] = None
    candidate_id: Optional[int] = None
    client_token: Optional[str] = Field(default=None, min_length=1, max_length=64)

    @model_validator(mode="after")
    def exactly_one_sender(self):
        if (self.hiring_manager_id is None) == (self.candidate_id is None):
            raise ValueError("Exactly one sender (hiring manager or candidate) must be specified")
        return self


class MessageOut(BaseModel):
    id: int
    application_id: int
    content: str
    hiring_manager_id: Optional[int] = None
    candidate_id: Optional[int] = None
    client_token: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MessageSender(BaseModel):
    type: SenderType
    id: int
    name: str
    avatar_url: Optional[str] = None


class ThreadMessage(BaseModel):
    id: int
    content: str
    created_at: datetime
    sender: MessageSender
    client_token: Optional[str] = None


class MessageThreadOut(BaseModel):
    messages: List[ThreadMessage]


class OtherParty(BaseModel):
    name: str
    avatar_url: Optional[str] = None


class LastMessage(BaseModel):
    content: str
    created_at: datetime
    is_from_me: bool


class ThreadSummary(BaseModel):
    application_id: int
    application_status: str
    role_id: int
    role_title: str
    company_id: int
    company_name: str
    other_party: OtherParty
    last_message: Optional[LastMessage] = None
    message_count: int


class ThreadList(BaseModel):
    threads: List[ThreadSummary]
