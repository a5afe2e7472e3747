from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from tuitiontrust.app.db import get_db
from tuitiontrust.app.services import school_service


router = APIRouter(prefix="/api/schools", tags=["schools"])


class SchoolIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    contact_email: Optional[str] = None
    website_url: Optional[str] = None
    country: Optional[str] = None
    did: Optional[str] = None
    wallet_address: Optional[str] = None
    description: Optional[str] = None


class SchoolOut(BaseModel):
    id: str
    name: str
    contact_email: Optional[str]
    website_url: Optional[str]
    country: Optional[str]
    did: Optional[str]
    wallet_address: Optional[str]
    description: Optional[str]
    is_verified: bool
    created_at: datetime

    class Config:
        from_attributes = True


@router.get("", response_model=list[SchoolOut])
def list_schools(db: Session = Depends(get_db)):
    return school_service.list_schools(db)


@router.post("", response_model=SchoolOut, status_code=201)
def register_school(req: SchoolIn, db: Session = Depends(get_db)):
    return school_service.register_school(
        db,
        name=req.name.strip(),
        contact_email=req.contact_email,
        website_url=req.website_url,
        country=req.country,
        did=req.did,
        wallet_address=req.wallet_address,
        description=req.description,
    )
