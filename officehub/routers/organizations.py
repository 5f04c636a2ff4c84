from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from officehub.core.deps import get_current_admin, get_current_user
from officehub.core.errors import Forbidden, NotFound, ValidationError
from officehub.core.scope import resolve_scope
from officehub.db.session import get_db
from officehub.models.organization import Organization
from officehub.models.user import User
from officehub.schemas.organization import OrganizationCreate, OrganizationRead, OrganizationUpdate, slugify
from officehub.services.activity import log_activity

router = APIRouter(prefix="/api/organizations", tags=["organizations"])


def _get_organization_or_404(db: Session, organization_id: int) -> Organization:
    organization = db.get(Organization, organization_id)
    if not organization:
        raise NotFound("Organization not found")
    return organization


def _ensure_visible(user: User, organization: Organization) -> None:
    if resolve_scope(user).is_global:
        return
    if user.organization_id != organization.id:
        raise Forbidden("Organization is outside your scope")


@router.get("", response_model=List[OrganizationRead])
def list_organizations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[OrganizationRead]:
    query = db.query(Organization)
    if not resolve_scope(current_user).is_global:
        if current_user.organization_id is None:
            return []
        query = query.filter(Organization.id == current_user.organization_id)
    return [OrganizationRead.model_validate(o) for o in query.order_by(Organization.name.asc()).all()]


@router.post("", response_model=OrganizationRead, status_code=status.HTTP_201_CREATED)
def create_organization(
    org_in: OrganizationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> OrganizationRead:
    if not resolve_scope(current_user).is_global:
        raise Forbidden("Only admins without an organization can create organizations")
    slug = slugify(org_in.slug or org_in.name)
    if db.query(Organization).filter(Organization.slug == slug).first():
        raise ValidationError("Organization with this slug already exists", field="slug")

    organization = Organization(
        name=org_in.name.strip(),
        slug=slug,
        email=org_in.email,
        phone=org_in.phone,
        address=org_in.address,
    )
    db.add(organization)
    db.flush()
    log_activity(
        db,
        actor_user_id=current_user.id,
        activity_type="ORGANIZATION_CREATED",
        message=f"Organization created: {organization.name}",
        payload={"organization_id": organization.id},
    )
    db.commit()
    db.refresh(organization)
    return OrganizationRead.model_validate(organization)


@router.get("/{organization_id}", response_model=OrganizationRead)
def get_organization(
    organization_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OrganizationRead:
    organization = _get_organization_or_404(db, organization_id)
    _ensure_visible(current_user, organization)
    return OrganizationRead.model_validate(organization)


@router.patch("/{organization_id}", response_model=OrganizationRead)
def update_organization(
    organization_id: int,
    org_update: OrganizationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> OrganizationRead:
    organization = _get_organization_or_404(db, organization_id)
    _ensure_visible(current_user, organization)
    for key, value in org_update.model_dump(exclude_unset=True).items():
        if key == "name" and value is None:
            continue
        setattr(organization, key, value)
    db.add(organization)
    db.commit()
    db.refresh(organization)
    return OrganizationRead.model_validate(organization)
