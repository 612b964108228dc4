"""In-process application state for the directory.

State is immutable; every change goes through :func:`reduce` so the update
paths stay in one place.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Union

from directory_api.models import BANNERS_TABLE, HOSPITALS_TABLE, HeroBanner, Hospital
from directory_api.repositories.base import BackendError, BannerRepository, HospitalRepository
from directory_api.sync import ChangeEvent, apply_change

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryState:
    hospitals: tuple[Hospital, ...] = ()
    banners: tuple[HeroBanner, ...] = ()
    is_loading: bool = False
    last_error: str | None = None


@dataclass(frozen=True)
class LoadStarted:
    pass


@dataclass(frozen=True)
class HospitalsLoaded:
    hospitals: tuple[Hospital, ...]


@dataclass(frozen=True)
class BannersLoaded:
    banners: tuple[HeroBanner, ...]


@dataclass(frozen=True)
class LoadFinished:
    pass


@dataclass(frozen=True)
class LoadFailed:
    message: str


@dataclass(frozen=True)
class ChangeApplied:
    event: ChangeEvent


Action = Union[LoadStarted, HospitalsLoaded, BannersLoaded, LoadFinished, LoadFailed, ChangeApplied]


def reduce(state: DirectoryState, action: Action) -> DirectoryState:
    if isinstance(action, LoadStarted):
        return replace(state, is_loading=True, last_error=None)
    if isinstance(action, HospitalsLoaded):
        return replace(state, hospitals=tuple(action.hospitals))
    if isinstance(action, BannersLoaded):
        return replace(state, banners=tuple(action.banners))
    if isinstance(action, LoadFinished):
        return replace(state, is_loading=False)
    if isinstance(action, LoadFailed):
        return replace(state, is_loading=False, last_error=action.message)
    if isinstance(action, ChangeApplied):
        event = action.event
        if event.table == HOSPITALS_TABLE:
            return replace(state, hospitals=tuple(apply_change(state.hospitals, event)))
        if event.table == BANNERS_TABLE:
            # new banners join the end of the carousel
            return replace(state, banners=tuple(apply_change(state.banners, event, insert_at_head=False)))
        return state
    raise TypeError(f"unsupported action: {action!r}")


@dataclass
class DirectoryStore:
    state: DirectoryState = field(default_factory=DirectoryState)

    def dispatch(self, action: Action) -> DirectoryState:
        self.state = reduce(self.state, action)
        return self.state

    def hospitals(self) -> list[Hospital]:
        return list(self.state.hospitals)

    def banners(self) -> list[HeroBanner]:
        return list(self.state.banners)

    def get_hospital(self, hospital_id: str) -> Hospital | None:
        return next((item for item in self.state.hospitals if item.id == hospital_id), None)

    def get_banner(self, banner_id: str) -> HeroBanner | None:
        return next((item for item in self.state.banners if item.id == banner_id), None)


async def bootstrap(
    store: DirectoryStore,
    hospitals: HospitalRepository,
    banners: BannerRepository,
) -> DirectoryState:
    """Load both tables into the store. Failures are logged, never raised."""
    store.dispatch(LoadStarted())
    try:
        loaded = await hospitals.list_hospitals()
    except BackendError as exc:
        logger.error("hospitals_fetch_failed", extra={"component": "store", "error": exc.message})
        return store.dispatch(LoadFailed(exc.message))
    store.dispatch(HospitalsLoaded(tuple(loaded)))

    try:
        loaded_banners = await banners.list_banners()
    except BackendError as exc:
        logger.error("banners_fetch_failed", extra={"component": "store", "error": exc.message})
        store.dispatch(LoadFailed(exc.message))
    else:
        store.dispatch(BannersLoaded(tuple(loaded_banners)))
        store.dispatch(LoadFinished())

    logger.info(
        "directory_loaded",
        extra={
            "component": "store",
            "hospitals": len(store.state.hospitals),
            "banners": len(store.state.banners),
        },
    )
    return store.state


class DirectoryStoreLoader:
    """Runs :func:`bootstrap` at most once per process.

    A failed load stays recorded in ``last_error``; reads never trigger
    another backend round-trip.
    """

    def __init__(self, store: DirectoryStore, hospitals: HospitalRepository, banners: BannerRepository) -> None:
        self.store = store
        self._hospitals = hospitals
        self._banners = banners
        self._lock = asyncio.Lock()
        self._attempted = False

    @property
    def attempted(self) -> bool:
        return self._attempted

    async def load(self) -> DirectoryStore:
        async with self._lock:
            if not self._attempted:
                self._attempted = True
                await bootstrap(self.store, self._hospitals, self._banners)
        return self.store
