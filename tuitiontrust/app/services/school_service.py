from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tuitiontrust.app.errors import ConflictError
from tuitiontrust.app.models import School


def list_schools(db: Session) -> list[School]:
    return list(db.execute(select(School).order_by(School.name.asc())).scalars().all())


def list_eligible_recipients(db: Session) -> list[School]:
    return list(
        db.execute(
            select(School)
            .where(School.is_verified.is_(True), School.wallet_address.is_not(None))
            .order_by(School.name.asc(), School.id.asc())
        )
        .scalars()
        .all()
    )


def verified_names_by_address(db: Session, addresses: Iterable[str]) -> dict[str, str]:
    wanted = sorted({addr for addr in addresses if addr})
    if not wanted:
        return {}
    rows = db.execute(
        select(School.wallet_address, School.name).where(
            School.wallet_address.in_(wanted),
            School.is_verified.is_(True),
        )
    ).all()
    return {wallet: name for wallet, name in rows if wallet and name}


def register_school(
    db: Session,
    *,
    name: str,
    contact_email: Optional[str] = None,
    website_url: Optional[str] = None,
    country: Optional[str] = None,
    did: Optional[str] = None,
    wallet_address: Optional[str] = None,
    description: Optional[str] = None,
) -> School:
    school = School(
        name=name,
        contact_email=contact_email,
        website_url=website_url or None,
        country=country or None,
        did=did,
        wallet_address=wallet_address or None,
        description=description or None,
        is_verified=False,
    )
    db.add(school)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("A school with this DID is already registered.") from exc
    db.refresh(school)
    return school
