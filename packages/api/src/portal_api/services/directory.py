# This project was developed with assistance from AI tools.
"""Staff directory: role listings, mention targets, round-robin assignment
and admin user management."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from portal_db import PortalUser
from portal_db.enums import OnboardingSubRole, UserRole
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_MENTIONABLE_ROLES = (UserRole.CSM, UserRole.TEAM_LEAD, UserRole.OPERATIONS_INTERN)


@dataclass(frozen=True)
class DirectoryUser:
    email: str
    name: str


async def list_users(session: AsyncSession, *, active_only: bool = True) -> list[PortalUser]:
    stmt = select(PortalUser).order_by(PortalUser.name.asc(), PortalUser.id.asc())
    if active_only:
        stmt = stmt.where(PortalUser.is_active.is_(True))
    result = await session.execute(stmt)
    return list(result.scalars().all())


def _entry(user: PortalUser) -> DirectoryUser:
    return DirectoryUser(email=user.email, name=user.name or user.email)


def _has(user: PortalUser, role: UserRole, sub_role: OnboardingSubRole | None = None) -> bool:
    if user.role != role:
        return False
    return sub_role is None or user.sub_role == sub_role


def mentionable_from(users: list[PortalUser]) -> list[DirectoryUser]:
    """CSMs, then team leads, then operations interns; one entry per email.

    A repeated email keeps its first position and takes the later record.
    """
    seen: dict[str, DirectoryUser] = {}
    for role in _MENTIONABLE_ROLES:
        for user in users:
            if user.role == role and user.email:
                seen[user.email.lower()] = _entry(user)
    return list(seen.values())


async def get_role_directory(session: AsyncSession) -> dict[str, list[DirectoryUser]]:
    """Active users grouped the way the board's assignment pickers need them."""
    users = await list_users(session)
    return {
        "csms": [_entry(u) for u in users if _has(u, UserRole.CSM)],
        "resume_makers": [
            _entry(u)
            for u in users
            if _has(u, UserRole.ONBOARDING_TEAM, OnboardingSubRole.RESUME_MAKER)
        ],
        "linkedin_members": [
            _entry(u)
            for u in users
            if _has(
                u,
                UserRole.ONBOARDING_TEAM,
                OnboardingSubRole.LINKEDIN_AND_COVER_LETTER_OPTIMIZATION,
            )
        ],
        "team_leads": [_entry(u) for u in users if _has(u, UserRole.TEAM_LEAD)],
        "admins": [_entry(u) for u in users if _has(u, UserRole.ADMIN)],
        "mentionable_users": mentionable_from(users),
    }


async def get_mentionable_users(session: AsyncSession) -> list[DirectoryUser]:
    return mentionable_from(await list_users(session))


async def active_emails(
    session: AsyncSession,
    role: UserRole,
    sub_role: OnboardingSubRole | None = None,
) -> list[str]:
    """Emails of active users holding ``role`` (and ``sub_role`` when given)."""
    stmt = select(PortalUser.email).where(
        PortalUser.role == role,
        PortalUser.is_active.is_(True),
    )
    if sub_role is not None:
        stmt = stmt.where(PortalUser.sub_role == sub_role)
    result = await session.execute(stmt)
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Round-robin assignment
# ---------------------------------------------------------------------------


async def _next_assignee(
    session: AsyncSession,
    sub_role: OnboardingSubRole,
    stamp_column,
) -> PortalUser | None:
    """Active member of ``sub_role`` assigned least recently; stamps them now."""
    stmt = (
        select(PortalUser)
        .where(
            PortalUser.role == UserRole.ONBOARDING_TEAM,
            PortalUser.sub_role == sub_role,
            PortalUser.is_active.is_(True),
        )
        .order_by(stamp_column.asc().nulls_first(), PortalUser.id.asc())
        .limit(1)
        .with_for_update(skip_locked=True)
    )
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()
    if user is None:
        logger.warning("No active %s available for assignment", sub_role.value)
        return None
    setattr(user, stamp_column.key, datetime.now(UTC))
    return user


async def next_resume_maker(session: AsyncSession) -> PortalUser | None:
    return await _next_assignee(
        session, OnboardingSubRole.RESUME_MAKER, PortalUser.last_resume_assigned_at,
    )


async def next_linkedin_member(session: AsyncSession) -> PortalUser | None:
    return await _next_assignee(
        session,
        OnboardingSubRole.LINKEDIN_AND_COVER_LETTER_OPTIMIZATION,
        PortalUser.last_linkedin_assigned_at,
    )


# ---------------------------------------------------------------------------
# Admin user management
# ---------------------------------------------------------------------------


async def get_user(session: AsyncSession, email: str) -> PortalUser | None:
    stmt = select(PortalUser).where(PortalUser.email == email.strip().lower())
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def upsert_user(
    session: AsyncSession,
    *,
    email: str,
    name: str,
    role: UserRole,
    sub_role: OnboardingSubRole | None = None,
) -> tuple[PortalUser, bool]:
    """Create or update a directory entry. Returns (user, created).

    Sub-roles only apply to onboarding team members and are dropped otherwise.
    Upserting a deactivated user reactivates them.
    """
    if role != UserRole.ONBOARDING_TEAM:
        sub_role = None

    user = await get_user(session, email)
    created = user is None
    if created:
        user = PortalUser(email=email.strip().lower())
        session.add(user)

    user.name = name.strip() or user.email
    user.role = role
    user.sub_role = sub_role
    user.is_active = True
    await session.commit()
    logger.info("%s portal user %s (%s)", "Created" if created else "Updated", user.email, role.value)
    return user, created


async def deactivate_user(session: AsyncSession, email: str) -> PortalUser | None:
    user = await get_user(session, email)
    if user is None:
        return None
    user.is_active = False
    await session.commit()
    logger.info("Deactivated portal user %s", user.email)
    return user
