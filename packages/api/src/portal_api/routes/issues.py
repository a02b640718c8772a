# This project was developed with assistance from AI tools.
"""Unresolved tagged-comment ("issue") routes."""

from fastapi import APIRouter, Depends
from portal_db import get_db
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas.notification import IssueItem, IssueListResponse
from ..services.issues import list_unresolved_issues

router = APIRouter()


@router.get("/non-resolved", response_model=IssueListResponse)
async def non_resolved_issues(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> IssueListResponse:
    """Comments that tag the caller and still await their resolution."""
    comments = await list_unresolved_issues(session, user)
    items = [
        IssueItem(
            job_id=c.job_id,
            job_number=c.job.job_number,
            client_number=c.job.client_number,
            client_name=c.job.client_name,
            comment_id=c.id,
            body=c.body,
            author_email=c.author_email,
            author_name=c.author_name,
            created_at=c.created_at,
        )
        for c in comments
    ]
    return IssueListResponse(data=items, count=len(items))
