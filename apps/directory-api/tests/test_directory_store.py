import asyncio
import logging

import pytest

from directory_api.models import BANNERS_TABLE, HOSPITALS_TABLE, HeroBanner, Hospital
from directory_api.repositories.base import BackendError
from directory_api.repositories.memory import InMemoryBannerRepository, InMemoryHospitalRepository
from directory_api.store import (
    BannersLoaded,
    ChangeApplied,
    DirectoryState,
    DirectoryStore,
    DirectoryStoreLoader,
    HospitalsLoaded,
    LoadFailed,
    LoadStarted,
    bootstrap,
    reduce,
)
from directory_api.sync import Deleted, Inserted


class FailingHospitalRepository(InMemoryHospitalRepository):
    def __init__(self) -> None:
        super().__init__()
        self.list_calls = 0

    async def list_hospitals(self) -> list[Hospital]:
        self.list_calls += 1
        raise BackendError("BACKEND_UNAVAILABLE", "Backend request failed")


def test_new_hospitals_are_prepended_and_new_banners_appended() -> None:
    state = DirectoryState(
        hospitals=(Hospital(id="h1", name="Lama"),),
        banners=(HeroBanner(id="b1", title="Lama"),),
    )

    state = reduce(state, ChangeApplied(Inserted(HOSPITALS_TABLE, Hospital(id="h2", name="Baru"))))
    state = reduce(state, ChangeApplied(Inserted(BANNERS_TABLE, HeroBanner(id="b2", title="Baru"))))

    assert [item.id for item in state.hospitals] == ["h2", "h1"]
    assert [item.id for item in state.banners] == ["b1", "b2"]


def test_load_actions_track_loading_flag() -> None:
    state = reduce(DirectoryState(), LoadStarted())
    assert state.is_loading is True

    state = reduce(state, LoadFailed("boom"))
    assert state.is_loading is False
    assert state.last_error == "boom"


def test_store_lookup_and_delete() -> None:
    store = DirectoryStore()
    store.dispatch(HospitalsLoaded((Hospital(id="h1", name="A"), Hospital(id="h2", name="B"))))
    store.dispatch(BannersLoaded((HeroBanner(id="b1", title="T"),)))

    store.dispatch(ChangeApplied(Deleted(HOSPITALS_TABLE, "h1")))

    assert store.get_hospital("h1") is None
    assert store.get_hospital("h2").name == "B"
    assert store.get_banner("b1").title == "T"


@pytest.mark.asyncio
async def test_bootstrap_loads_both_tables() -> None:
    store = DirectoryStore()

    state = await bootstrap(store, InMemoryHospitalRepository(), InMemoryBannerRepository())

    assert state.is_loading is False
    assert state.last_error is None
    assert [item.id for item in state.hospitals] == ["rs-1", "rs-2", "rs-3", "rs-4"]
    assert [item.order for item in state.banners] == [1, 2]


@pytest.mark.asyncio
async def test_bootstrap_logs_backend_failure_without_raising(caplog) -> None:
    store = DirectoryStore()

    with caplog.at_level(logging.ERROR, logger="directory_api.store"):
        state = await bootstrap(store, FailingHospitalRepository(), InMemoryBannerRepository())

    assert state.hospitals == ()
    assert state.is_loading is False
    assert state.last_error == "Backend request failed"
    assert any(record.getMessage() == "hospitals_fetch_failed" for record in caplog.records)


@pytest.mark.asyncio
async def test_loader_does_not_retry_a_failed_load() -> None:
    hospitals = FailingHospitalRepository()
    loader = DirectoryStoreLoader(DirectoryStore(), hospitals, InMemoryBannerRepository())

    for _ in range(3):
        store = await loader.load()

    assert hospitals.list_calls == 1
    assert loader.attempted
    assert store.state.last_error == "Backend request failed"
    assert store.state.is_loading is False


@pytest.mark.asyncio
async def test_loader_runs_bootstrap_once_for_concurrent_callers() -> None:
    calls = []

    class CountingHospitalRepository(InMemoryHospitalRepository):
        async def list_hospitals(self) -> list[Hospital]:
            calls.append(1)
            await asyncio.sleep(0)
            return await super().list_hospitals()

    loader = DirectoryStoreLoader(DirectoryStore(), CountingHospitalRepository(), InMemoryBannerRepository())

    stores = await asyncio.gather(*(loader.load() for _ in range(5)))

    assert all(store is loader.store for store in stores)
    assert len(calls) == 1
    assert len(loader.store.hospitals()) == 4
