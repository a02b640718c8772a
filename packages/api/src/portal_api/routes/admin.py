# This project was developed with assistance from AI tools.
"""Admin endpoints: staff directory management and audit trail queries."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from portal_db import get_db
from portal_db.enums import UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import require_roles
from ..schemas.admin import (
    AuditChainVerifyResponse,
    AuditEventItem,
    AuditEventsResponse,
    PortalUserItem,
    PortalUserListResponse,
    PortalUserUpsert,
)
from ..services import directory
from ..services.audit import get_events_by_job, verify_audit_chain

router = APIRouter(dependencies=[Depends(require_roles(UserRole.ADMIN))])


@router.get(
    "/users",
    response_model=PortalUserListResponse,
)
async def list_users(
    include_inactive: bool = False,
    session: AsyncSession = Depends(get_db),
) -> PortalUserListResponse:
    users = await directory.list_users(session, active_only=not include_inactive)
    return PortalUserListResponse(
        data=[PortalUserItem.model_validate(u) for u in users],
        count=len(users),
    )


@router.post(
    "/users",
    response_model=PortalUserItem,
)
async def upsert_user(
    body: PortalUserUpsert,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> PortalUserItem:
    """Create a directory entry, or update and reactivate an existing one."""
    user, created = await directory.upsert_user(
        session,
        email=body.email,
        name=body.name,
        role=body.role,
        sub_role=body.sub_role,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return PortalUserItem.model_validate(user)


@router.delete(
    "/users/{email}",
    response_model=PortalUserItem,
)
async def deactivate_user(
    email: str,
    session: AsyncSession = Depends(get_db),
) -> PortalUserItem:
    """Deactivate a directory entry. Users are never hard-deleted."""
    user = await directory.deactivate_user(session, email)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return PortalUserItem.model_validate(user)


@router.get(
    "/audit",
    response_model=AuditEventsResponse,
)
async def get_audit_events(
    job_id: int = Query(..., description="Onboarding job ID"),
    session: AsyncSession = Depends(get_db),
) -> AuditEventsResponse:
    """Audit trail for one job."""
    events = await get_events_by_job(session, job_id)
    return AuditEventsResponse(
        job_id=job_id,
        count=len(events),
        events=[
            AuditEventItem(
                id=e.id,
                timestamp=str(e.timestamp),
                event_type=e.event_type,
                user_id=e.user_id,
                user_role=e.user_role,
                job_id=e.job_id,
                event_data=e.event_data,
            )
            for e in events
        ],
    )


@router.get(
    "/audit/verify",
    response_model=AuditChainVerifyResponse,
)
async def verify_audit(
    session: AsyncSession = Depends(get_db),
) -> AuditChainVerifyResponse:
    """Verify audit trail hash chain integrity."""
    result = await verify_audit_chain(session)
    return AuditChainVerifyResponse(**result)
