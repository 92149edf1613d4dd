from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .status import ApplicationStatus, RoleStatus, messaging_available


hiring_manager_companies = Table(
    "hiring_manager_companies",
    Base.metadata,
    Column("hiring_manager_id", Integer, ForeignKey("hiring_managers.id", ondelete="CASCADE"), primary_key=True),
    Column("company_id", Integer, ForeignKey("companies.id", ondelete="CASCADE"), primary_key=True),
)


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    industry = Column(String)
    location = Column(String)
    website = Column(String)
    logo_url = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    hiring_managers = relationship(
        "HiringManager", secondary=hiring_manager_companies, back_populates="companies"
    )
    roles = relationship("Role", back_populates="company")


class HiringManager(Base):
    __tablename__ = "hiring_managers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    title = Column(String)
    avatar_url = Column(String)
    is_persona = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    companies = relationship(
        "Company",
        secondary=hiring_manager_companies,
        back_populates="hiring_managers",
        order_by="Company.name",
    )
    roles = relationship("Role", back_populates="hiring_manager")


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    headline = Column(String)
    years_experience = Column(Integer)
    skills = Column(String)
    bio = Column(Text)
    linkedin_url = Column(String)
    avatar_url = Column(String)
    is_persona = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    applications = relationship("Application", back_populates="candidate")


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String, nullable=False)
    location_type = Column(String, nullable=False)
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    salary_currency = Column(String, default="USD", nullable=False)
    employment_type = Column(String, nullable=False)
    experience_level = Column(String)
    status = Column(String, default=RoleStatus.DRAFT.value, nullable=False, index=True)
    deleted_at = Column(DateTime(timezone=True))
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    hiring_manager_id = Column(Integer, ForeignKey("hiring_managers.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="roles")
    hiring_manager = relationship("HiringManager", back_populates="roles")
    applications = relationship("Application", back_populates="role")

    @property
    def is_open(self) -> bool:
        return self.status == RoleStatus.PUBLISHED.value and self.deleted_at is None


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("role_id", "candidate_id", name="uq_application_role_candidate"),
    )

    id = Column(Integer, primary_key=True, index=True)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=False, index=True)
    status = Column(String, default=ApplicationStatus.NEW.value, nullable=False)
    cover_note = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    role = relationship("Role", back_populates="applications")
    candidate = relationship("Candidate", back_populates="applications")
    messages = relationship(
        "Message", back_populates="application", order_by=lambda: [Message.created_at, Message.id]
    )

    @property
    def messaging_available(self) -> bool:
        return messaging_available(self.status)


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint(
            "(hiring_manager_id IS NULL) <> (candidate_id IS NULL)",
            name="ck_message_single_sender",
        ),
        UniqueConstraint("application_id", "client_token", name="uq_message_client_token"),
    )

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    hiring_manager_id = Column(Integer, ForeignKey("hiring_managers.id"))
    candidate_id = Column(Integer, ForeignKey("candidates.id"))
    client_token = Column(String(64))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    application = relationship("Application", back_populates="messages")
    hiring_manager = relationship("HiringManager")
    candidate = relationship("Candidate")
