import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import models, schemas
from ..config import settings
from ..database import get_db
from ..errors import Forbidden, NotFound
from ..pagination import paginate
from ..status import ROLE_TRANSITIONS, RoleStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/roles", tags=["roles"])


def open_roles_filter():
    return (models.Role.status == RoleStatus.PUBLISHED.value) & (models.Role.deleted_at.is_(None))


@router.get("", response_model=schemas.RoleList)
def list_roles(
    company_id: Optional[int] = None,
    hiring_manager_id: Optional[int] = None,
    location: Optional[str] = None,
    salary_min: Optional[int] = None,
    salary_max: Optional[int] = None,
    search: Optional[str] = None,
    candidate_id: Optional[int] = None,
    include_all: bool = False,
    page: int = 1,
    limit: int = settings.page_size_default,
    db: Session = Depends(get_db),
):
    """
    Candidates only ever see open roles. A hiring manager listing a company's
    (or their own) roles may pass include_all to see drafts and closed roles.
    """
    query = db.query(models.Role)

    scoped = company_id is not None or hiring_manager_id is not None
    if not (include_all and scoped):
        query = query.filter(open_roles_filter())

    if company_id is not None:
        query = query.filter(models.Role.company_id == company_id)
    if hiring_manager_id is not None:
        query = query.filter(models.Role.hiring_manager_id == hiring_manager_id)
    if location:
        query = query.filter(models.Role.location.ilike(f"%{location}%"))
    # Salary filters select roles whose range overlaps the requested one.
    if salary_min is not None:
        query = query.filter(models.Role.salary_max >= salary_min)
    if salary_max is not None:
        query = query.filter(models.Role.salary_min <= salary_max)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(models.Role.title.ilike(pattern), models.Role.description.ilike(pattern))
        )
    if candidate_id is not None:
        query = query.filter(
            ~models.Role.applications.any(models.Application.candidate_id == candidate_id)
        )

    query = query.order_by(models.Role.created_at.desc(), models.Role.id.desc())
    items, pagination = paginate(query, page, limit)
    return {"items": items, "pagination": pagination}


@router.post("", response_model=schemas.RoleOut, status_code=status.HTTP_201_CREATED)
def create_role(
    role_in: schemas.RoleCreate,
    db: Session = Depends(get_db),
):
    hiring_manager = db.get(models.HiringManager, role_in.hiring_manager_id)
    if not hiring_manager:
        raise NotFound("Hiring manager not found")
    company = db.get(models.Company, role_in.company_id)
    if not company:
        raise NotFound("Company not found")
    if company not in hiring_manager.companies:
        raise Forbidden("You are not a hiring manager for this company")

    role = models.Role(**role_in.model_dump())
    db.add(role)
    db.commit()
    db.refresh(role)
    logger.info("Created role %s (%s) for company %s", role.id, role.status, company.id)
    return role


@router.get("/{role_id}", response_model=schemas.RoleDetail)
def get_role(
    role_id: int,
    for_hm: bool = False,
    db: Session = Depends(get_db),
):
    role = db.get(models.Role, role_id)
    if not role or (not for_hm and not role.is_open):
        raise NotFound("Role not found")

    application_count = (
        db.query(models.Application).filter(models.Application.role_id == role.id).count()
    )
    detail = schemas.RoleDetail.model_validate(role)
    return detail.model_copy(update={"application_count": application_count})


@router.patch("/{role_id}", response_model=schemas.RoleOut)
def update_role_status(
    role_id: int,
    status_in: schemas.RoleStatusUpdate,
    db: Session = Depends(get_db),
):
    role = db.get(models.Role, role_id)
    if not role:
        raise NotFound("Role not found")

    target = status_in.status.value
    ROLE_TRANSITIONS.check(role.status, target, settings.enforce_status_transitions)

    previous = role.status
    role.status = target
    # Closing soft-deletes; only publishing clears the marker again.
    if target == RoleStatus.CLOSED.value and role.deleted_at is None:
        role.deleted_at = datetime.now(timezone.utc)
    elif target == RoleStatus.PUBLISHED.value:
        role.deleted_at = None

    db.commit()
    db.refresh(role)
    logger.info("Role %s moved %s -> %s", role.id, previous, target)
    return role
