"""ComposerEngine — central client owning the shared composition services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tx_composer.chain.validators import LCDValidatorLoader
from tx_composer.datastore.client import Datastore
from tx_composer.datastore.store import SqlTransactionStore
from tx_composer.engine.assembler import TransactionAssembler
from tx_composer.engine.context import ComposeContext, SecretBackend
from tx_composer.engine.message_list import MessageListController
from tx_composer.engine.validator_cache import ValidatorCache

if TYPE_CHECKING:
    from tx_composer.chain.models import AccountInfo, ChainInfo
    from tx_composer.config.settings import AppConfig

logger = logging.getLogger(__name__)

# Error messages
_ERR_NOT_INITIALIZED = "Engine not initialized. Call initialize() first."


@dataclass
class ComposeSession:
    """Message list and assembler of one transaction being composed."""

    context: ComposeContext
    controller: MessageListController
    assembler: TransactionAssembler


class ComposerEngine:
    """Owns the datastore, the validator cache and the confidential backend.

    The validator cache is shared by every session the engine opens, so the
    bonded set is fetched at most once per engine.

    Usage::

        engine = ComposerEngine(AppConfig())
        await engine.initialize()
        session = engine.new_session(account)
        session.controller.add_message_type(MsgTypeUrl.SEND)
        ...
        tx_id = await session.assembler.submit()
        await engine.close()
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._chain: ChainInfo = config.chain.to_chain_info()
        self._initialized = False

        self._datastore: Datastore | None = None
        self._store: SqlTransactionStore | None = None
        self._validators: ValidatorCache | None = None
        self._confidential: SecretBackend | None = None

    async def initialize(self) -> None:
        """Open the datastore and create the shared services.

        Raises:
            RuntimeError: If already initialized.
        """
        if self._initialized:
            msg = "Engine already initialized"
            raise RuntimeError(msg)

        self._datastore = Datastore(self._config.db)
        await self._datastore.open()
        self._store = SqlTransactionStore(self._datastore)

        self._validators = ValidatorCache(
            LCDValidatorLoader(
                self._chain.lcd_url, timeout=self._config.confidential.request_timeout
            )
        )
        if self._chain.confidential_encryption:
            self._confidential = SecretBackend(self._chain.chain_id, self._config.confidential)

        self._initialized = True
        logger.info("Composer engine initialized for %s", self._chain.chain_id)

    async def close(self) -> None:
        """Shut down services and connections (idempotent)."""
        if not self._initialized:
            return

        if self._confidential is not None:
            await self._confidential.close()
            self._confidential = None

        self._validators = None
        self._store = None

        if self._datastore is not None:
            await self._datastore.close()
            self._datastore = None

        self._initialized = False
        logger.info("Composer engine shut down")

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def chain(self) -> ChainInfo:
        return self._chain

    @property
    def datastore(self) -> Datastore:
        if self._datastore is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._datastore

    @property
    def store(self) -> SqlTransactionStore:
        if self._store is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._store

    @property
    def validators(self) -> ValidatorCache:
        if self._validators is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._validators

    @property
    def confidential_backend(self) -> SecretBackend | None:
        """Secret Network backend, or ``None`` on ordinary chains."""
        return self._confidential

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def new_session(self, account: AccountInfo) -> ComposeSession:
        """Start composing a transaction signed by *account*.

        Raises:
            RuntimeError: If engine not initialized.
        """
        context = ComposeContext(
            chain=self._chain,
            sender_address=account.address,
            validators=self.validators,
            confidential_backend=self._confidential,
        )
        controller = MessageListController(
            context,
            flat_gas=self._config.gas.flat_gas,
            gas_overrides=self._config.gas.weights,
        )
        assembler = TransactionAssembler(self._chain, account, controller, store=self.store)
        return ComposeSession(context=context, controller=controller, assembler=assembler)
