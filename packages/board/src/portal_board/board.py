# This project was developed with assistance from AI tools.
"""Kanban board controller.

Drives the store from user gestures: drag and drop, the long-press move
sheet, comment editing, hover prefetch and detail open. Every status change
is checked locally with the same pipeline rules the API enforces, so a move
the server would refuse is rejected before any request goes out.
"""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass

from portal_db.enums import OnboardingStatus
from portal_db.mentions import Mention, resolve_mentions
from portal_db.pipeline import (
    MoveDecision,
    MoveOutcome,
    can_approve_moves,
    check_drop,
    evaluate_move,
    move_options,
    status_label,
)

from .client import BoardClient
from .commands import CommandExecutor, EditCommentCommand, MoveJobCommand, RenameClientCommand
from .config import BoardSettings, board_settings
from .errors import BoardError, MoveInProgressError, NetworkError, ValidationError, error_for_decision
from .models import BoardUser, JobCard, JobDetail, MoveRequest
from .store import BoardStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DragState:
    job_id: int
    source_status: OnboardingStatus


class OnboardingBoard:
    def __init__(
        self,
        client: BoardClient,
        user: BoardUser,
        store: BoardStore | None = None,
        settings: BoardSettings | None = None,
    ):
        self.client = client
        self.user = user
        self.store = store or BoardStore()
        self.settings = settings or board_settings
        self.executor = CommandExecutor(self.store, client, on_settled=self.invalidate)
        self.prefetch_cache: OrderedDict[int, JobDetail] = OrderedDict()
        self._drag: DragState | None = None
        self._move_in_flight = False
        self._hover_task: asyncio.Task | None = None
        self._opening: int | None = None
        self._stopped = asyncio.Event()

    @property
    def columns(self) -> tuple[OnboardingStatus, ...]:
        return self.store.columns_for(self.user.role, self.user.sub_role)

    # -- Loading --

    async def refresh(self) -> list[JobCard]:
        self.store.set_loading("jobs")
        try:
            jobs = await self.client.list_jobs()
        finally:
            self.store.set_loading("jobs", False)
        self.store.set_jobs(jobs)
        return self.store.jobs

    async def load_roles(self) -> None:
        self.store.set_roles(await self.client.get_roles())

    async def poll_forever(self, interval: float | None = None) -> None:
        """Refresh the job list until ``stop`` is called.

        A failed refresh keeps the current board and tries again next tick.
        """
        interval = self.settings.POLL_INTERVAL if interval is None else interval
        self._stopped.clear()
        while not self._stopped.is_set():
            try:
                await self.refresh()
            except NetworkError as exc:
                logger.warning("Board refresh failed: %s", exc)
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=interval)
            except TimeoutError:
                continue

    def stop(self) -> None:
        self._stopped.set()

    # -- Moves --

    def _require_job(self, job_id: int) -> JobCard:
        job = self.store.find(job_id)
        if job is None:
            raise ValidationError(404, f"Job {job_id} is not on the board")
        return job

    def drag_start(self, job_id: int) -> DragState:
        job = self._require_job(job_id)
        self._drag = DragState(job_id=job.id, source_status=job.status)
        return self._drag

    def drag_cancel(self) -> None:
        self._drag = None

    async def drop(self, target: OnboardingStatus, note: str | None = None) -> MoveOutcome:
        """Drop the dragged card on a column."""
        drag, self._drag = self._drag, None
        if drag is None:
            raise BoardError("No card is being dragged")
        job = self._require_job(drag.job_id)
        if job.status != drag.source_status:
            logger.info(
                "Dropped job %s moved from %s to %s during the drag",
                job.id,
                drag.source_status.value,
                job.status.value,
            )
            raise ValidationError(
                409, f"{job.display_name} moved to {status_label(job.status)} while being dragged"
            )
        decision = check_drop(
            current=job.status,
            target=target,
            plan=job.plan_type,
            role=self.user.role,
            sub_role=self.user.sub_role,
            linkedin_phase_started=job.linkedin_phase_started,
        )
        return await self._carry_out(job, OnboardingStatus(target), decision, note)

    def move_options(self, job_id: int) -> tuple[OnboardingStatus, ...]:
        job = self._require_job(job_id)
        return move_options(
            current=job.status,
            plan=job.plan_type,
            role=self.user.role,
            sub_role=self.user.sub_role,
        )

    def press(self, job_id: int, held_seconds: float) -> tuple[OnboardingStatus, ...] | None:
        """Options for the move sheet, or None when the press was too short."""
        if held_seconds < self.settings.LONG_PRESS_SECONDS:
            return None
        return self.move_options(job_id)

    async def move_to(
        self, job_id: int, target: OnboardingStatus, note: str | None = None
    ) -> MoveOutcome:
        """Move chosen from the move sheet; adjacency is not required."""
        job = self._require_job(job_id)
        decision = evaluate_move(
            current=job.status,
            target=target,
            plan=job.plan_type,
            role=self.user.role,
            sub_role=self.user.sub_role,
            linkedin_phase_started=job.linkedin_phase_started,
        )
        return await self._carry_out(job, OnboardingStatus(target), decision, note)

    async def _carry_out(
        self,
        job: JobCard,
        target: OnboardingStatus,
        decision: MoveDecision,
        note: str | None,
    ) -> MoveOutcome:
        if decision.outcome == MoveOutcome.REJECT:
            raise error_for_decision(decision)
        if decision.outcome == MoveOutcome.NOOP:
            return decision.outcome
        if self._move_in_flight:
            raise MoveInProgressError()

        self._move_in_flight = True
        try:
            if decision.outcome == MoveOutcome.APPLY:
                await self.executor.execute(MoveJobCommand(job.id, target))
            else:
                await self.client.request_move(job.id, target, note)
                self.invalidate(job.id)
                logger.info("Requested move of job %s to %s", job.id, target.value)
        finally:
            self._move_in_flight = False
        return decision.outcome

    async def request_move(
        self, job_id: int, target: OnboardingStatus, note: str | None = None
    ) -> MoveRequest:
        request = await self.client.request_move(job_id, target, note)
        self.invalidate(job_id)
        return request

    async def approve_move(self, job_id: int, note: str | None = None) -> JobDetail:
        self._require_approver()
        return self._settle(await self.client.approve_move(job_id, note))

    async def reject_move(self, job_id: int, note: str | None = None) -> JobDetail:
        self._require_approver()
        return self._settle(await self.client.reject_move(job_id, note))

    def _require_approver(self) -> None:
        if not can_approve_moves(self.user.role):
            raise ValidationError(403, "Only admins and team leads can decide move requests")

    # -- Edits and comments --

    async def rename_client(self, job_id: int, client_name: str) -> JobCard:
        return await self.executor.execute(RenameClientCommand(job_id, client_name))

    async def edit_comment(self, job_id: int, comment_id: int, body: str) -> JobCard:
        return await self.executor.execute(EditCommentCommand(job_id, comment_id, body))

    async def add_comment(
        self, job_id: int, body: str, tagged_emails: list[str] | None = None
    ) -> JobDetail:
        return self._settle(await self.client.add_comment(job_id, body, tagged_emails))

    async def resolve_comment(self, job_id: int, comment_id: int) -> bool:
        """Resolve a comment; returns True if it was already resolved."""
        job, already_resolved = await self.client.resolve_comment(job_id, comment_id)
        self._settle(job)
        return already_resolved

    def mention_preview(self, body: str) -> list[Mention]:
        """Who a comment body would notify, resolved against the loaded directory."""
        return resolve_mentions(body, self.store.roles.mentionable_users)

    def _settle(self, job: JobDetail) -> JobDetail:
        self.store.replace_job(job)
        self.invalidate(job.id)
        return job

    # -- Detail view --

    def invalidate(self, job_id: int) -> None:
        self.prefetch_cache.pop(job_id, None)

    def _cache(self, detail: JobDetail) -> None:
        self.prefetch_cache[detail.id] = detail
        self.prefetch_cache.move_to_end(detail.id)
        while len(self.prefetch_cache) > self.settings.PREFETCH_CACHE_SIZE:
            self.prefetch_cache.popitem(last=False)

    def hover(self, job_id: int) -> asyncio.Task:
        """Start the debounced prefetch; a new hover cancels the previous one."""
        self.hover_end()
        self._hover_task = asyncio.get_running_loop().create_task(self._prefetch(job_id))
        return self._hover_task

    def hover_end(self) -> None:
        if self._hover_task is not None and not self._hover_task.done():
            self._hover_task.cancel()
        self._hover_task = None

    async def _prefetch(self, job_id: int) -> None:
        await asyncio.sleep(self.settings.PREFETCH_DEBOUNCE)
        if job_id in self.prefetch_cache:
            return
        try:
            self._cache(await self.client.get_job(job_id))
        except BoardError as exc:
            logger.warning("Prefetch of job %s failed: %s", job_id, exc)

    async def open_job(self, job_id: int) -> JobDetail | None:
        """Select a job and show its detail.

        Returns None when another job was opened before the fetch finished;
        that result is dropped.
        """
        self._opening = job_id
        detail = self.prefetch_cache.get(job_id)
        if detail is not None:
            self.prefetch_cache.move_to_end(job_id)
        else:
            self.store.set_loading("detail")
            try:
                detail = await self.client.get_job(job_id)
            finally:
                self.store.set_loading("detail", False)
            if self._opening != job_id:
                logger.debug("Discarding stale detail for job %s", job_id)
                return None
            self._cache(detail)
        self.store.set_selected_job(detail)
        await self.client.mark_job_notifications_read(job_id)
        return detail

    def close_job(self) -> None:
        self._opening = None
        self.store.clear_selected()
