# This project was developed with assistance from AI tools.
"""Async HTTP client for the onboarding REST API."""

import logging
from typing import Any

import httpx
from portal_db.enums import OnboardingStatus
from portal_db.pipeline import RejectReason

from .config import board_settings
from .errors import ApiError, BoardError, NetworkError, ValidationError, rejection_error
from .models import (
    Attachment,
    Issue,
    JobCard,
    JobDetail,
    MoveRequest,
    NotificationFeed,
    RoleDirectory,
)

logger = logging.getLogger(__name__)

JOBS = "/api/onboarding/jobs"
NOTIFICATIONS = "/api/onboarding/notifications"
ISSUES = "/api/onboarding/issues"


def _problem_detail(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def error_from_response(response: httpx.Response) -> BoardError:
    """Map a non-2xx response to the board error taxonomy."""
    body = _problem_detail(response)
    detail = body.get("detail") or body.get("error") or response.reason_phrase
    reason = body.get("reason")
    if reason in {r.value for r in RejectReason}:
        return rejection_error(reason, detail, body.get("permitted") or (), response.status_code)
    if 400 <= response.status_code < 500:
        return ValidationError(response.status_code, detail)
    return ApiError(response.status_code, detail)


class BoardClient:
    """Thin wrapper around ``httpx.AsyncClient`` returning parsed records.

    Transport failures raise ``NetworkError``; error responses raise the
    matching ``BoardError`` subclass with the server's problem ``detail``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        token = token or board_settings.AUTH_TOKEN
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._http = httpx.AsyncClient(
            base_url=base_url or board_settings.API_BASE_URL,
            headers=headers,
            timeout=timeout or board_settings.REQUEST_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "BoardClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError() from exc
        if response.is_success:
            return response.json() if response.content else None
        error = error_from_response(response)
        logger.info("%s %s -> %s: %s", method, path, response.status_code, error)
        raise error

    # -- Jobs --

    async def list_jobs(self, status: OnboardingStatus | None = None) -> list[JobCard]:
        params = {"status": status.value} if status else None
        body = await self._request("GET", f"{JOBS}/", params=params)
        return [JobCard.model_validate(item) for item in body["data"]]

    async def get_job(self, job_id: int) -> JobDetail:
        return JobDetail.model_validate(await self._request("GET", f"{JOBS}/{job_id}"))

    async def create_job(self, **fields) -> JobDetail:
        return JobDetail.model_validate(await self._request("POST", f"{JOBS}/", json=fields))

    async def update_job(self, job_id: int, **fields) -> JobDetail:
        body = await self._request("PATCH", f"{JOBS}/{job_id}", json=fields)
        return JobDetail.model_validate(body)

    async def move_job(self, job_id: int, status: OnboardingStatus) -> JobDetail:
        return await self.update_job(job_id, status=OnboardingStatus(status).value)

    async def get_roles(self) -> RoleDirectory:
        return RoleDirectory.model_validate(await self._request("GET", f"{JOBS}/roles"))

    # -- Move requests --

    async def request_move(
        self, job_id: int, target: OnboardingStatus, note: str | None = None
    ) -> MoveRequest:
        body = await self._request(
            "POST",
            f"{JOBS}/{job_id}/request-move",
            json={"target_status": OnboardingStatus(target).value, "note": note},
        )
        return MoveRequest.model_validate(body)

    async def approve_move(self, job_id: int, note: str | None = None) -> JobDetail:
        body = await self._request("POST", f"{JOBS}/{job_id}/approve-move", json={"note": note})
        return JobDetail.model_validate(body)

    async def reject_move(self, job_id: int, note: str | None = None) -> JobDetail:
        body = await self._request("POST", f"{JOBS}/{job_id}/reject-move", json={"note": note})
        return JobDetail.model_validate(body)

    # -- Comments and attachments --

    async def add_comment(
        self,
        job_id: int,
        body: str,
        tagged_emails: list[str] | None = None,
        tagged_names: list[str] | None = None,
    ) -> JobDetail:
        payload = {"body": body, "tagged_emails": tagged_emails, "tagged_names": tagged_names}
        return JobDetail.model_validate(
            await self._request("POST", f"{JOBS}/{job_id}/comments", json=payload)
        )

    async def edit_comment(self, job_id: int, comment_id: int, body: str) -> JobDetail:
        return JobDetail.model_validate(
            await self._request(
                "PATCH", f"{JOBS}/{job_id}/comments/{comment_id}", json={"body": body}
            )
        )

    async def resolve_comment(self, job_id: int, comment_id: int) -> tuple[JobDetail, bool]:
        """Resolve a comment; the flag is True when it was already resolved."""
        body = await self._request("POST", f"{JOBS}/{job_id}/comments/{comment_id}/resolve")
        return JobDetail.model_validate(body["job"]), bool(body.get("already_resolved"))

    async def add_attachment(
        self, job_id: int, url: str, filename: str, name: str | None = None
    ) -> Attachment:
        body = await self._request(
            "POST",
            f"{JOBS}/{job_id}/attachments",
            json={"url": url, "filename": filename, "name": name},
        )
        return Attachment.model_validate(body)

    # -- Notifications and issues --

    async def list_notifications(self) -> NotificationFeed:
        return NotificationFeed.model_validate(await self._request("GET", f"{NOTIFICATIONS}/"))

    async def mark_notification_read(self, notification_id: int) -> None:
        await self._request("PATCH", f"{NOTIFICATIONS}/{notification_id}/read")

    async def mark_job_notifications_read(self, job_id: int) -> int:
        body = await self._request("PATCH", f"{NOTIFICATIONS}/jobs/{job_id}/read")
        return int(body["updated"])

    async def list_issues(self) -> list[Issue]:
        body = await self._request("GET", f"{ISSUES}/non-resolved")
        return [Issue.model_validate(item) for item in body["data"]]
