"""
Unit tests for the fetch-cycle collection stores.
"""

import time
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from investpro.state.stores import (
    CollectionStore,
    DataStore,
    FetchState,
    InvestmentStore,
    SubscriptionStore,
)

from .conftest import COMPANY_ID, make_investment, make_subscription


def _store(loader, max_age=30.0) -> CollectionStore:
    return CollectionStore("things", loader, max_age=max_age)


class TestFetchCycle:
    def test_starts_idle_and_empty(self):
        store = _store(AsyncMock(return_value=[]))
        assert store.state == FetchState.IDLE
        assert store.items == []
        assert not store.loading

    @pytest.mark.asyncio
    async def test_successful_fetch_populates(self):
        store = _store(AsyncMock(return_value=[{"id": "a"}, {"id": "b"}]))
        items = await store.fetch()
        assert items == [{"id": "a"}, {"id": "b"}]
        assert store.state == FetchState.POPULATED
        assert not store.loading
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_loading_flag_is_set_while_fetching(self):
        seen = []
        store = None

        async def loader():
            seen.append((store.loading, store.state))
            return []

        store = _store(loader)
        await store.fetch()
        assert seen == [(True, FetchState.LOADING)]

    @pytest.mark.asyncio
    async def test_failure_resets_to_empty_and_does_not_raise(self, caplog):
        store = _store(AsyncMock(return_value=[{"id": "old"}]))
        await store.fetch()

        store._loader = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))
        items = await store.fetch()

        assert items == []
        assert store.state == FetchState.EMPTY_ON_ERROR
        assert "OperationalError" in store.last_error
        assert not store.loading
        assert "Failed to fetch things" in caplog.text

    @pytest.mark.asyncio
    async def test_failure_rolls_the_session_back(self):
        rollback = AsyncMock()
        store = CollectionStore(
            "things",
            AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("aborted"))),
            rollback=rollback,
        )
        await store.fetch()
        rollback.assert_awaited_once()
        assert store.state == FetchState.EMPTY_ON_ERROR

    @pytest.mark.asyncio
    async def test_success_does_not_roll_back(self):
        rollback = AsyncMock()
        store = CollectionStore("things", AsyncMock(return_value=[]), rollback=rollback)
        await store.fetch()
        rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_rollback_is_logged_not_raised(self, caplog):
        store = CollectionStore(
            "things",
            AsyncMock(side_effect=ConnectionError("down")),
            rollback=AsyncMock(side_effect=ConnectionError("gone")),
        )
        assert await store.fetch() == []
        assert store.state == FetchState.EMPTY_ON_ERROR
        assert "Rollback after failed things fetch failed" in caplog.text

    @pytest.mark.asyncio
    async def test_refetch_replaces_wholesale(self):
        loader = AsyncMock(side_effect=[[{"id": "a"}, {"id": "b"}], [{"id": "c"}]])
        store = _store(loader)
        await store.fetch()
        await store.fetch()
        assert store.items == [{"id": "c"}]


class TestLookupAndFreshness:
    @pytest.mark.asyncio
    async def test_get_by_id_on_models_and_dicts(self):
        store = _store(AsyncMock(return_value=[make_investment(), {"id": "plain"}]))
        await store.fetch()
        assert store.get_by_id("inv-test-1").name == "Acme Growth Fund"
        assert store.get_by_id("plain") == {"id": "plain"}
        assert store.get_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_is_stale(self):
        store = _store(AsyncMock(return_value=[]), max_age=10.0)
        assert store.is_stale()
        await store.fetch()
        assert not store.is_stale()
        store.last_fetch = time.monotonic() - 11.0
        assert store.is_stale()
        assert not store.is_stale(max_age=60.0)

    @pytest.mark.asyncio
    async def test_failed_store_is_always_stale(self):
        store = _store(AsyncMock(side_effect=RuntimeError("boom")))
        await store.fetch()
        assert store.is_stale()

    @pytest.mark.asyncio
    async def test_ensure_fresh_skips_fresh_store(self):
        loader = AsyncMock(return_value=[{"id": "a"}])
        store = _store(loader)
        await store.ensure_fresh()
        await store.ensure_fresh()
        loader.assert_awaited_once()


class TestScopedStores:
    @pytest.mark.asyncio
    async def test_investment_store_scoped_to_company(self, investment_repo):
        investment_repo.list_by_company.return_value = [make_investment()]
        store = InvestmentStore(investment_repo, company_id=COMPANY_ID)
        await store.fetch()
        investment_repo.list_by_company.assert_awaited_once_with(COMPANY_ID)
        investment_repo.list_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_subscription_store_follows_company_investments(
        self, investment_repo, subscription_repo
    ):
        investment_repo.list_by_company.return_value = [make_investment(id="x")]
        subscription_repo.get_by_investments.return_value = [make_subscription()]
        investments = InvestmentStore(investment_repo, company_id=COMPANY_ID)
        subscriptions = SubscriptionStore(subscription_repo, investments=investments)

        await investments.fetch()
        await subscriptions.fetch()

        subscription_repo.get_by_investments.assert_awaited_once_with(["x"])

    @pytest.mark.asyncio
    async def test_subscription_store_scoped_to_user(self, subscription_repo):
        subscription_repo.get_by_user.return_value = []
        await SubscriptionStore(subscription_repo, user_id="u-1").fetch()
        subscription_repo.get_by_user.assert_awaited_once_with("u-1")


def _data_store(**loaders) -> DataStore:
    def store(name):
        return CollectionStore(name, loaders.get(name, AsyncMock(return_value=[])))

    return DataStore(
        users=store("users"),
        companies=store("companies"),
        investments=store("investments"),
        subscriptions=store("subscriptions"),
    )


class TestDataStore:
    @pytest.mark.asyncio
    async def test_refresh_loads_every_collection(self):
        data = await _data_store(
            investments=AsyncMock(return_value=[make_investment()])
        ).refresh()
        assert data.status() == {
            "users": "populated",
            "companies": "populated",
            "investments": "populated",
            "subscriptions": "populated",
        }
        assert data.get_investment("inv-test-1") is not None
        assert not data.loading

    @pytest.mark.asyncio
    async def test_one_failing_collection_leaves_the_rest(self):
        data = await _data_store(
            users=AsyncMock(side_effect=ConnectionError("down")),
            investments=AsyncMock(return_value=[make_investment()]),
        ).refresh()
        assert data.users == []
        assert data.status()["users"] == "empty_on_error"
        assert len(data.investments) == 1

    @pytest.mark.asyncio
    async def test_refresh_skips_fresh_stores_unless_forced(self):
        loader = AsyncMock(return_value=[])
        data = _data_store(companies=loader)
        await data.refresh()
        await data.refresh()
        assert loader.await_count == 1
        await data.refresh(force=True)
        assert loader.await_count == 2

    def test_for_session_wires_repositories(self, mock_db):
        data = DataStore.for_session(mock_db, company_id=COMPANY_ID)
        assert data.investment_store.company_id == COMPANY_ID
        assert [s.name for s in data.stores] == [
            "users",
            "companies",
            "investments",
            "subscriptions",
        ]

    def test_for_session_rolls_back_on_the_shared_session(self, mock_db):
        data = DataStore.for_session(mock_db, user_id="u-1")
        assert all(store._rollback is mock_db.rollback for store in data.stores)

    @pytest.mark.asyncio
    async def test_failed_query_is_rolled_back_before_the_next_store(self, mock_db):
        calls = []

        async def execute(statement):
            calls.append("execute")
            raise OperationalError("SELECT", {}, Exception("current transaction is aborted"))

        async def rollback():
            calls.append("rollback")

        mock_db.execute = AsyncMock(side_effect=execute)
        mock_db.rollback = AsyncMock(side_effect=rollback)

        data = await DataStore.for_session(mock_db).refresh()

        assert set(data.status().values()) == {"empty_on_error"}
        assert calls == ["execute", "rollback"] * 4
