"""Shared bonded-validator cache with coalesced lazy loading."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable

from tx_composer.chain.validators import Validator
from tx_composer.errors.compose_errors import ComposerError

logger = logging.getLogger(__name__)

ValidatorLoader = Callable[[], Awaitable[list[Validator]]]


class LoadState(enum.StrEnum):
    """Lifecycle of the cached reference set."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


class ValidatorCache:
    """The bonded validator set, loaded at most once and shared by all slots.

    ``ensure_loaded()`` never blocks: it starts a background load when the set
    is unloaded, returns the in-flight task while loading, and does nothing
    once loaded. Readers see an empty list until the load completes.
    """

    def __init__(self, loader: ValidatorLoader) -> None:
        self._loader = loader
        self._state = LoadState.UNLOADED
        self._validators: list[Validator] = []
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def validators(self) -> list[Validator]:
        """The loaded validators, or an empty list while not loaded."""
        return list(self._validators)

    def ensure_loaded(self) -> asyncio.Task[None] | None:
        """Trigger a load unless one is running or the set is already loaded.

        Must be called from a running event loop.

        Returns:
            The load task in flight, or ``None`` when already loaded.
        """
        if self._state is LoadState.LOADED:
            return None
        if self._state is LoadState.LOADING and self._task is not None:
            return self._task

        self._state = LoadState.LOADING
        self._task = asyncio.get_running_loop().create_task(self._load())
        return self._task

    async def wait(self) -> None:
        """Wait for an in-flight load to finish (no-op otherwise)."""
        if self._task is not None and not self._task.done():
            await asyncio.shield(self._task)

    async def _load(self) -> None:
        try:
            validators = await self._loader()
        except ComposerError as exc:
            logger.warning("Validator set could not be loaded: %s", exc.message)
            self._state = LoadState.UNLOADED
            return
        self._validators = sorted(validators, key=lambda v: v.moniker.lower())
        self._state = LoadState.LOADED
        logger.info("Loaded %d bonded validators", len(self._validators))
