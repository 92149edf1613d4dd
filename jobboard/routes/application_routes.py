import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..config import settings
from ..database import get_db
from ..errors import BusinessRuleViolation, Conflict, NotFound, ValidationFailed
from ..pagination import paginate
from ..status import APPLICATION_TRANSITIONS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("", response_model=schemas.ApplicationList)
def list_applications(
    role_id: Optional[int] = None,
    candidate_id: Optional[int] = None,
    page: int = 1,
    limit: int = settings.page_size_default,
    db: Session = Depends(get_db),
):
    """
    Applications for a role (hiring manager review, single page) or for a
    candidate (paginated). One of role_id or candidate_id is required.
    """
    if role_id is not None:
        applications = (
            db.query(models.Application)
            .filter(models.Application.role_id == role_id)
            .order_by(models.Application.created_at.desc(), models.Application.id.desc())
            .all()
        )
        total = len(applications)
        pagination = schemas.Pagination(page=1, limit=total, total=total, total_pages=1)
        return {"items": applications, "pagination": pagination}

    if candidate_id is None:
        raise ValidationFailed("candidate_id or role_id is required")

    query = (
        db.query(models.Application)
        .filter(models.Application.candidate_id == candidate_id)
        .order_by(models.Application.created_at.desc(), models.Application.id.desc())
    )
    items, pagination = paginate(query, page, limit)
    return {"items": items, "pagination": pagination}


@router.post("", response_model=schemas.ApplicationDetail, status_code=status.HTTP_201_CREATED)
def create_application(
    application_in: schemas.ApplicationCreate,
    db: Session = Depends(get_db),
):
    # Existence and openness are checked before uniqueness so each bad
    # input maps to one stable error.
    role = db.get(models.Role, application_in.role_id)
    if not role:
        raise NotFound("Role not found")
    if not role.is_open:
        raise BusinessRuleViolation("Role is not open for applications")

    candidate = db.get(models.Candidate, application_in.candidate_id)
    if not candidate:
        raise NotFound("Candidate not found")

    if find_application(db, role.id, candidate.id) is not None:
        raise Conflict("You have already applied to this role")

    application = models.Application(
        role_id=role.id,
        candidate_id=candidate.id,
        cover_note=application_in.cover_note or None,
    )
    db.add(application)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent submission won the unique constraint.
        db.rollback()
        raise Conflict("You have already applied to this role")
    db.refresh(application)
    logger.info("Candidate %s applied to role %s (application %s)", candidate.id, role.id, application.id)
    return application


def find_application(db: Session, role_id: int, candidate_id: int) -> Optional[models.Application]:
    return (
        db.query(models.Application)
        .filter(
            models.Application.role_id == role_id,
            models.Application.candidate_id == candidate_id,
        )
        .first()
    )


@router.get("/{application_id}", response_model=schemas.ApplicationDetail)
def get_application(application_id: int, db: Session = Depends(get_db)):
    application = db.get(models.Application, application_id)
    if not application:
        raise NotFound("Application not found")
    return application


@router.patch("/{application_id}", response_model=schemas.ApplicationDetail)
def update_application_status(
    application_id: int,
    status_in: schemas.ApplicationStatusUpdate,
    db: Session = Depends(get_db),
):
    application = db.get(models.Application, application_id)
    if not application:
        raise NotFound("Application not found")

    target = status_in.status.value
    APPLICATION_TRANSITIONS.check(application.status, target, settings.enforce_status_transitions)

    previous = application.status
    application.status = target
    db.commit()
    db.refresh(application)
    logger.info("Application %s moved %s -> %s", application.id, previous, target)
    return application
