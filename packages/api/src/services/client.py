# This project was developed with assistance from AI tools.
"""Client records and the applications that belong to them.

Applications carry the client's details as free text, so a client's
applications are found by fuzzy matching against every application the
caller is allowed to see.
"""

import logging

from db import Client, LoanApplication
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from ..schemas.client import ClientCreate
from .matching import ClientStatistics, MatchResult, client_statistics, rank_matches
from .scope import apply_data_scope

logger = logging.getLogger(__name__)


async def create_client(
    session: AsyncSession,
    user: UserContext,
    payload: ClientCreate,
) -> Client:
    client = Client(
        full_name=payload.full_name.strip(),
        phone_number=payload.phone_number,
        id_number=payload.id_number,
        email=payload.email,
        address=payload.address,
        created_by=user.user_id,
    )
    session.add(client)
    await session.commit()
    await session.refresh(client)
    logger.info("Client %s created by %s", client.id, user.user_id)
    return client


async def get_client(
    session: AsyncSession,
    user: UserContext,
    client_id: int,
) -> Client | None:
    """Return a client if visible to the current user.

    Field officers see the clients they registered; everyone else sees all.
    """
    stmt = select(Client).where(Client.id == client_id)
    stmt = apply_data_scope(stmt, user.data_scope, user, model=Client)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def find_client_applications(
    session: AsyncSession,
    user: UserContext,
    client: Client,
) -> tuple[list[MatchResult], ClientStatistics]:
    """Applications matched to ``client``, best first, with summary counts.

    Statistics cover the matched applications only.
    """
    stmt = select(LoanApplication).order_by(LoanApplication.created_at.desc(), LoanApplication.id.desc())
    stmt = apply_data_scope(stmt, user.data_scope, user)
    result = await session.execute(stmt)
    candidates = list(result.scalars().all())

    matches = rank_matches(client, candidates, min_score=settings.MATCH_MIN_SCORE)
    logger.debug(
        "Client %s matched %d of %d applications", client.id, len(matches), len(candidates)
    )
    stats = client_statistics([m.application for m in matches])
    return matches, stats
