# This project was developed with assistance from AI tools.
"""Sequential job and client numbers backed by the counters table."""

import logging

from portal_db import Counter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

JOB_NUMBER = "job_number"
CLIENT_NUMBER = "client_number"

# Last issued value when a counter row does not exist yet.
_SEEDS = {JOB_NUMBER: 5799, CLIENT_NUMBER: 5808}
CLIENT_NUMBER_FLOOR = 5809


async def next_value(session: AsyncSession, name: str, *, floor: int | None = None) -> int:
    """Increment and return the named counter.

    The row is locked FOR UPDATE until the caller's transaction ends, so
    concurrent job creations receive distinct numbers.
    """
    stmt = select(Counter).where(Counter.name == name).with_for_update()
    result = await session.execute(stmt)
    counter = result.scalar_one_or_none()

    if counter is None:
        counter = Counter(name=name, value=_SEEDS.get(name, 0))
        session.add(counter)
        logger.info("Initialised counter %s at %d", name, counter.value)

    current = counter.value
    if floor is not None:
        current = max(current, floor - 1)
    counter.value = current + 1
    await session.flush()
    return counter.value


async def next_job_number(session: AsyncSession) -> int:
    return await next_value(session, JOB_NUMBER)


async def next_client_number(session: AsyncSession) -> int:
    return await next_value(session, CLIENT_NUMBER, floor=CLIENT_NUMBER_FLOOR)
