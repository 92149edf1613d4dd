import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..errors import NotFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("", response_model=schemas.CompanyList)
def list_companies(
    hiring_manager_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    query = db.query(models.Company)
    if hiring_manager_id is not None:
        query = query.filter(
            models.Company.hiring_managers.any(models.HiringManager.id == hiring_manager_id)
        )
    return {"companies": query.order_by(models.Company.name).all()}


@router.post("", response_model=schemas.CompanyOut, status_code=status.HTTP_201_CREATED)
def create_company(
    company_in: schemas.CompanyCreate,
    db: Session = Depends(get_db),
):
    hiring_manager = db.get(models.HiringManager, company_in.hiring_manager_id)
    if not hiring_manager:
        raise NotFound("Hiring manager not found")

    company = models.Company(
        **company_in.model_dump(exclude={"hiring_manager_id"}, exclude_none=True)
    )
    company.website = company.website or None
    hiring_manager.companies.append(company)
    db.commit()
    db.refresh(company)
    logger.info("Hiring manager %s created company %s", hiring_manager.id, company.id)
    return company


@router.get("/{company_id}", response_model=schemas.CompanyOut)
def get_company(company_id: int, db: Session = Depends(get_db)):
    company = db.get(models.Company, company_id)
    if not company:
        raise NotFound("Company not found")
    return company
