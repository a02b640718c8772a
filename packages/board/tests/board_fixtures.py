# This project was developed with assistance from AI tools.
"""Record builders and a routing mock transport for board tests."""

from datetime import UTC, datetime, timedelta

import httpx
from portal_db.enums import OnboardingSubRole, UserRole

from portal_board.client import BoardClient
from portal_board.models import BoardUser, JobCard, JobDetail

BASE_URL = "http://portal.test"
UPDATED = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)


def job_payload(**overrides) -> dict:
    payload = {
        "id": 1,
        "job_number": 5801,
        "client_number": 5809,
        "client_email": "dana@client.test",
        "client_name": "Dana Client",
        "plan_type": "executive",
        "status": "resume_in_progress",
        "csm_email": "casey@portal.test",
        "csm_name": "Casey Csm",
        "linkedin_phase_started": False,
        "created_at": UPDATED.isoformat(),
        "updated_at": UPDATED.isoformat(),
        "plan": "executive",
    }
    payload.update(overrides)
    return payload


def detail_payload(**overrides) -> dict:
    payload = job_payload(
        comments=[
            {
                "id": 11,
                "body": "Draft uploaded @casey",
                "author_email": "rita@portal.test",
                "author_name": "Rita Resume",
                "tagged_emails": ["casey@portal.test"],
                "tagged_names": ["Casey Csm"],
                "resolutions": [],
                "created_at": UPDATED.isoformat(),
            }
        ],
        move_history=[],
        attachments=[],
        pending_move_request=None,
    )
    payload.update(overrides)
    return payload


def later(minutes: int) -> str:
    return (UPDATED + timedelta(minutes=minutes)).isoformat()


def make_card(**overrides) -> JobCard:
    return JobCard.model_validate(job_payload(**overrides))


def make_detail(**overrides) -> JobDetail:
    return JobDetail.model_validate(detail_payload(**overrides))


def make_board_user(role=UserRole.TEAM_LEAD, sub_role=None, email="tara@portal.test"):
    return BoardUser(email=email, name=email.split("@")[0].title(), role=role, sub_role=sub_role)


LINKEDIN_USER = make_board_user(
    UserRole.ONBOARDING_TEAM,
    OnboardingSubRole.LINKEDIN_AND_COVER_LETTER_OPTIMIZATION,
    email="lena@portal.test",
)
INTERN = make_board_user(UserRole.OPERATIONS_INTERN, email="ivan@portal.test")


class Api:
    """Routes ``(METHOD, path)`` to canned responses and records every request.

    A route value may be a dict (JSON 200), an ``httpx.Response``, an
    exception instance to raise, or a callable taking the request.
    """

    def __init__(self, routes: dict | None = None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def client(self) -> BoardClient:
        return BoardClient(BASE_URL, "test-token", transport=httpx.MockTransport(self))
