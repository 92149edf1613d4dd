import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..errors import Conflict, NotFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/candidates", tags=["candidates"])


@router.get("/{candidate_id}", response_model=schemas.CandidateOut)
def get_candidate(candidate_id: int, db: Session = Depends(get_db)):
    candidate = db.get(models.Candidate, candidate_id)
    if not candidate:
        raise NotFound("Candidate not found")
    return candidate


@router.patch("/{candidate_id}", response_model=schemas.CandidateOut)
def update_candidate(
    candidate_id: int,
    profile_in: schemas.CandidateUpdate,
    db: Session = Depends(get_db),
):
    candidate = db.get(models.Candidate, candidate_id)
    if not candidate:
        raise NotFound("Candidate not found")

    if profile_in.email != candidate.email:
        taken = (
            db.query(models.Candidate)
            .filter(models.Candidate.email == profile_in.email, models.Candidate.id != candidate.id)
            .first()
        )
        if taken:
            raise Conflict("A candidate with this email already exists")

    candidate.name = profile_in.name
    candidate.email = profile_in.email
    # None leaves a field untouched; an empty LinkedIn URL clears it.
    if profile_in.linkedin_url is not None:
        candidate.linkedin_url = profile_in.linkedin_url or None
    for field in ("headline", "years_experience", "skills", "bio"):
        value = getattr(profile_in, field)
        if value is not None:
            setattr(candidate, field, value)

    db.commit()
    db.refresh(candidate)
    logger.info("Updated profile for candidate %s", candidate.id)
    return candidate
