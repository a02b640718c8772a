# This project was developed with assistance from AI tools.
"""In-memory board state.

The store is only touched from the event loop, so it holds no locks. Records
are frozen pydantic models; updates replace them rather than mutating, which
lets ``snapshot`` be a shallow copy.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from portal_db.enums import OnboardingStatus, OnboardingSubRole, UserRole
from portal_db.pipeline import (
    allowed_statuses_for_plan,
    shows_in_linkedin_column,
    visible_columns_for_user,
)

from .models import JobCard, JobDetail, RoleDirectory

logger = logging.getLogger(__name__)


def dedupe_jobs(jobs: Iterable[JobCard]) -> list[JobCard]:
    """Collapse duplicate records, keeping the latest ``updated_at``.

    Same id first, then same client email within one status. Order of first
    appearance is kept and repeated calls give the same result.
    """
    by_id: dict[int, JobCard] = {}
    for job in jobs:
        current = by_id.get(job.id)
        if current is None or job.updated_at > current.updated_at:
            by_id[job.id] = job

    by_client: dict[tuple[str, OnboardingStatus], JobCard] = {}
    for job in by_id.values():
        key = (job.client_email.strip().lower(), job.status)
        current = by_client.get(key)
        if current is not None:
            logger.warning(
                "Duplicate jobs %s and %s for %s in %s; keeping the latest",
                current.id,
                job.id,
                key[0],
                job.status.value,
            )
            if job.updated_at <= current.updated_at:
                continue
        by_client[key] = job
    return list(by_client.values())


@dataclass(frozen=True)
class StoreSnapshot:
    jobs: tuple[JobCard, ...]
    selected_job: JobDetail | None


class BoardStore:
    def __init__(self):
        self.jobs: list[JobCard] = []
        self.selected_job: JobDetail | None = None
        self.roles = RoleDirectory()
        self._loading: set[str] = set()

    # -- Loading --

    def set_jobs(self, jobs: Iterable[JobCard]) -> None:
        self.jobs = dedupe_jobs(jobs)
        if self.selected_job is None:
            return
        card = self.find(self.selected_job.id)
        if card is None:
            logger.info("Selected job %s is no longer on the board", self.selected_job.id)
            self.selected_job = None
        elif not isinstance(card, JobDetail):
            self.selected_job = self.selected_job.model_copy(update=dict(card))
        else:
            self.selected_job = card

    def set_selected_job(self, job: JobDetail | None) -> None:
        self.selected_job = job

    def clear_selected(self) -> None:
        self.selected_job = None

    def set_roles(self, roles: RoleDirectory) -> None:
        self.roles = roles

    def set_loading(self, key: str, loading: bool = True) -> None:
        if loading:
            self._loading.add(key)
        else:
            self._loading.discard(key)

    def is_loading(self, key: str) -> bool:
        return key in self._loading

    # -- Queries --

    def find(self, job_id: int) -> JobCard | None:
        return next((job for job in self.jobs if job.id == job_id), None)

    def jobs_by_status(self, status: OnboardingStatus) -> list[JobCard]:
        return [job for job in self.jobs if job.status == status]

    def column_jobs(self, status: OnboardingStatus) -> list[JobCard]:
        """Cards shown in a column.

        A card only appears in columns its plan includes. Jobs whose LinkedIn
        phase started while still ``resume_approved`` also show under
        ``linkedin_in_progress``.
        """
        status = OnboardingStatus(status)
        cards = []
        for job in self.jobs:
            if job.status == status and status in allowed_statuses_for_plan(job.plan_type):
                cards.append(job)
            elif status == OnboardingStatus.LINKEDIN_IN_PROGRESS and shows_in_linkedin_column(
                job.status, job.plan_type, job.linkedin_phase_started
            ):
                cards.append(job)
        return cards

    @staticmethod
    def columns_for(
        role: UserRole, sub_role: OnboardingSubRole | None = None
    ) -> tuple[OnboardingStatus, ...]:
        return visible_columns_for_user(role, sub_role)

    # -- Mutation --

    def replace_job(self, job: JobCard) -> None:
        """Swap in a newer record for a card and, when open, the detail view."""
        for index, existing in enumerate(self.jobs):
            if existing.id == job.id:
                self.jobs[index] = job
                break
        else:
            self.jobs.append(job)
        if self.selected_job is not None and self.selected_job.id == job.id:
            if isinstance(job, JobDetail):
                self.selected_job = job
            else:
                self.selected_job = self.selected_job.model_copy(update=dict(job))

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(jobs=tuple(self.jobs), selected_job=self.selected_job)

    def restore(self, snapshot: StoreSnapshot) -> None:
        self.jobs = list(snapshot.jobs)
        self.selected_job = snapshot.selected_job
