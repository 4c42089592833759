"""Transaction store — where assembled drafts are handed off for signing."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from tx_composer.datastore.models import DbTransaction
from tx_composer.errors.chain_errors import PersistenceError

if TYPE_CHECKING:
    from tx_composer.datastore.client import Datastore
    from tx_composer.engine.assembler import TransactionDraft

logger = logging.getLogger(__name__)


class TransactionStore(Protocol):
    """Persistence collaborator of the transaction assembler."""

    async def create_transaction(
        self, sender_address: str, chain_id: str, draft: TransactionDraft
    ) -> str:
        """Persist *draft* and return its identifier (at most once, no retry)."""
        ...


class SqlTransactionStore:
    """``TransactionStore`` backed by the ``db_transactions`` table."""

    def __init__(self, datastore: Datastore) -> None:
        self._datastore = datastore

    async def create_transaction(
        self, sender_address: str, chain_id: str, draft: TransactionDraft
    ) -> str:
        """Insert a new row for *draft*.

        Raises:
            PersistenceError: On any database failure.
        """
        row = DbTransaction(
            id=uuid.uuid4().hex,
            sender_address=sender_address,
            chain_id=chain_id,
            data=draft.to_dict(),
        )
        try:
            async with self._datastore.session() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as exc:
            msg = f"Could not save transaction: {exc}"
            raise PersistenceError(msg) from exc
        logger.debug("Stored transaction %s for %s", row.id, sender_address)
        return row.id

    async def get_transaction(self, tx_id: str) -> dict[str, Any] | None:
        """Return the stored draft JSON, or ``None`` if *tx_id* is unknown."""
        async with self._datastore.session() as session:
            result = await session.execute(
                select(DbTransaction).where(DbTransaction.id == tx_id)
            )
            row = result.scalar_one_or_none()
        return row.data if row is not None else None

    async def list_transactions(self, sender_address: str) -> list[DbTransaction]:
        """All stored transactions of *sender_address*, newest first."""
        async with self._datastore.session() as session:
            result = await session.execute(
                select(DbTransaction)
                .where(DbTransaction.sender_address == sender_address)
                .order_by(DbTransaction.created_at.desc())
            )
            return list(result.scalars().all())
