# This project was developed with assistance from AI tools.
"""Optimistic mutations.

A command changes the store before the request is sent so the board reacts
immediately. If the request fails, only the fields the command touched are
put back, and only where they still hold the optimistic value. A poll or
another command that wrote the same job in the meantime keeps its data.
"""

import logging
from collections.abc import Callable

from portal_db.enums import OnboardingStatus

from .client import BoardClient
from .errors import BoardError
from .models import JobCard, JobDetail
from .store import BoardStore

logger = logging.getLogger(__name__)


class OptimisticCommand:
    """Base class for commands that overwrite card fields.

    Subclasses set ``changes`` and implement ``send``. Commands that touch
    something other than card fields override ``mutate`` and ``rollback``.
    """

    def __init__(self, job_id: int, **changes):
        self.job_id = job_id
        self.changes = changes
        self._previous: dict = {}

    def apply(self, store: BoardStore) -> None:
        record = store.find(self.job_id) or self._selected(store)
        if record is not None:
            self._previous = {field: getattr(record, field) for field in self.changes}
        self.mutate(store)

    def rollback(self, store: BoardStore) -> None:
        card = store.find(self.job_id)
        if card is not None:
            reverted = self._reverted(card)
            if reverted is not None:
                store.replace_job(reverted)
        selected = self._selected(store)
        if selected is not None:
            reverted = self._reverted(selected)
            if reverted is not None:
                store.set_selected_job(reverted)

    def commit(self, store: BoardStore, result: JobCard) -> None:
        store.replace_job(result)

    def mutate(self, store: BoardStore) -> None:
        card = store.find(self.job_id)
        if card is not None:
            store.replace_job(card.model_copy(update=self.changes))
        elif (selected := self._selected(store)) is not None:
            store.set_selected_job(selected.model_copy(update=self.changes))

    async def send(self, client: BoardClient) -> JobCard:
        raise NotImplementedError

    def _selected(self, store: BoardStore) -> JobDetail | None:
        job = store.selected_job
        return job if job is not None and job.id == self.job_id else None

    def _reverted(self, record: JobCard) -> JobCard | None:
        # Fields overwritten since apply belong to whoever wrote them.
        restore = {
            field: self._previous[field]
            for field, value in self.changes.items()
            if field in self._previous and getattr(record, field) == value
        }
        return record.model_copy(update=restore) if restore else None


class MoveJobCommand(OptimisticCommand):
    def __init__(self, job_id: int, target: OnboardingStatus):
        self.target = OnboardingStatus(target)
        super().__init__(job_id, status=self.target)

    async def send(self, client: BoardClient) -> JobDetail:
        return await client.move_job(self.job_id, self.target)


class RenameClientCommand(OptimisticCommand):
    def __init__(self, job_id: int, client_name: str):
        self.client_name = client_name.strip()
        super().__init__(job_id, client_name=self.client_name)

    async def send(self, client: BoardClient) -> JobDetail:
        return await client.update_job(self.job_id, client_name=self.client_name)


class EditCommentCommand(OptimisticCommand):
    def __init__(self, job_id: int, comment_id: int, body: str):
        super().__init__(job_id)
        self.comment_id = comment_id
        self.body = body
        self._previous_body: str | None = None

    def apply(self, store: BoardStore) -> None:
        job = self._selected(store)
        if job is not None:
            for comment in job.comments:
                if comment.id == self.comment_id:
                    self._previous_body = comment.body
        self.mutate(store)

    def mutate(self, store: BoardStore) -> None:
        self._set_body(store, self.body)

    def rollback(self, store: BoardStore) -> None:
        if self._previous_body is not None:
            self._set_body(store, self._previous_body, expected=self.body)

    def _set_body(self, store: BoardStore, body: str, expected: str | None = None) -> None:
        job = self._selected(store)
        if job is None:
            return
        comments = tuple(
            c.model_copy(update={"body": body})
            if c.id == self.comment_id and (expected is None or c.body == expected)
            else c
            for c in job.comments
        )
        store.set_selected_job(job.model_copy(update={"comments": comments}))


class CommandExecutor:
    """Runs commands against the store and the API."""

    def __init__(
        self,
        store: BoardStore,
        client: BoardClient,
        on_settled: Callable[[int], None] | None = None,
    ):
        self.store = store
        self.client = client
        self.on_settled = on_settled

    async def execute(self, command: OptimisticCommand) -> JobCard:
        command.apply(self.store)
        try:
            result = await command.send(self.client)
        except BoardError as exc:
            logger.info(
                "%s for job %s failed, rolling back: %s",
                type(command).__name__,
                command.job_id,
                exc,
            )
            command.rollback(self.store)
            raise
        finally:
            if self.on_settled is not None:
                self.on_settled(command.job_id)
        command.commit(self.store, result)
        return result
