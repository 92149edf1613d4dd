import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..errors import Conflict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/personas", tags=["personas"])


@router.get("", response_model=schemas.PersonasOut)
def list_personas(db: Session = Depends(get_db)):
    """Persona-flagged hiring managers and candidates for the landing page."""
    hiring_managers = (
        db.query(models.HiringManager)
        .filter(models.HiringManager.is_persona.is_(True))
        .order_by(models.HiringManager.name)
        .all()
    )
    candidates = (
        db.query(models.Candidate)
        .filter(models.Candidate.is_persona.is_(True))
        .order_by(models.Candidate.name)
        .all()
    )
    return {"hiring_managers": hiring_managers, "candidates": candidates}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_persona(
    persona_in: Annotated[schemas.PersonaCreate, Body(discriminator="type")],
    db: Session = Depends(get_db),
):
    if isinstance(persona_in, schemas.HiringManagerPersonaCreate):
        return schemas.HiringManagerOut.model_validate(_create_hiring_manager(persona_in, db))
    return schemas.CandidateOut.model_validate(_create_candidate(persona_in, db))


def _create_hiring_manager(persona_in: schemas.HiringManagerPersonaCreate, db: Session) -> models.HiringManager:
    existing = db.query(models.HiringManager).filter(models.HiringManager.email == persona_in.email).first()
    if existing:
        raise Conflict("A hiring manager with this email already exists")

    company = models.Company(
        name=persona_in.company_name,
        description=persona_in.company_description or None,
        industry=persona_in.company_industry or None,
        location=persona_in.company_location or None,
    )
    hiring_manager = models.HiringManager(
        name=persona_in.name,
        email=persona_in.email,
        title=persona_in.title or None,
        is_persona=True,
        companies=[company],
    )
    db.add(hiring_manager)
    db.commit()
    db.refresh(hiring_manager)
    logger.info("Created hiring manager persona %s with company %s", hiring_manager.id, company.id)
    return hiring_manager


def _create_candidate(persona_in: schemas.CandidatePersonaCreate, db: Session) -> models.Candidate:
    existing = db.query(models.Candidate).filter(models.Candidate.email == persona_in.email).first()
    if existing:
        raise Conflict("A candidate with this email already exists")

    candidate = models.Candidate(
        name=persona_in.name,
        email=persona_in.email,
        headline=persona_in.headline or None,
        is_persona=True,
    )
    db.add(candidate)
    db.commit()
    db.refresh(candidate)
    logger.info("Created candidate persona %s", candidate.id)
    return candidate
