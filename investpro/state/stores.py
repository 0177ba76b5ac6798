"""
Cache-on-read collection containers.

A :class:`CollectionStore` holds one collection loaded through an async
loader, a ``loading`` flag and a lookup by id. Its fetch cycle is::

    idle -> loading -> populated
                    -> empty_on_error

A fetch can be started from any state and always replaces the collection
wholesale. A loader failure is logged and leaves the store empty; it never
propagates, so a dashboard built on the stores renders a zeroed "no data"
view instead of failing the request.
"""

import logging
import time
from collections.abc import Mapping
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Sequence,
    TypeVar,
)

from sqlalchemy.ext.asyncio import AsyncSession

from investpro.core.config import settings
from investpro.models.company import Company
from investpro.models.investment import Investment
from investpro.models.subscription import InvestorInvestment
from investpro.models.user import User
from investpro.repositories.company_repo import CompanyRepository
from investpro.repositories.investment_repo import InvestmentRepository
from investpro.repositories.subscription_repo import SubscriptionRepository
from investpro.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")
Loader = Callable[[], Awaitable[Sequence[T]]]
Rollback = Callable[[], Awaitable[None]]


class FetchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    POPULATED = "populated"
    EMPTY_ON_ERROR = "empty_on_error"


class CollectionStore(Generic[T]):
    """
    One fetched collection.

    Parameters
    ----------
    name : str
        Used in log lines and :meth:`DataStore.status`.
    loader : callable
        Coroutine function returning the full collection.
    max_age : float, optional
        Seconds a successful fetch stays fresh (default ``CACHE_TTL``).
    rollback : callable, optional
        Awaited after a failed fetch so the shared session can run the
        next store's query.
    """

    def __init__(
        self,
        name: str,
        loader: Loader,
        max_age: Optional[float] = None,
        rollback: Optional[Rollback] = None,
    ):
        self.name = name
        self._loader = loader
        self._rollback = rollback
        self.max_age = settings.CACHE_TTL if max_age is None else max_age
        self.items: List[T] = []
        self.loading = False
        self.state = FetchState.IDLE
        self.last_fetch: Optional[float] = None
        self.last_error: Optional[str] = None

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    async def fetch(self) -> List[T]:
        """Load the collection, replacing whatever was held before."""
        self.loading = True
        self.state = FetchState.LOADING
        try:
            items = list(await self._loader())
        except Exception as exc:
            logger.exception("Failed to fetch %s", self.name, extra={"store": self.name})
            self.items = []
            self.state = FetchState.EMPTY_ON_ERROR
            self.last_error = f"{type(exc).__name__}: {exc}"
            await self._reset_session()
        else:
            self.items = items
            self.state = FetchState.POPULATED
            self.last_error = None
            logger.debug("Fetched %d %s", len(items), self.name)
        finally:
            self.loading = False
            self.last_fetch = time.monotonic()
        return self.items

    async def _reset_session(self) -> None:
        if self._rollback is None:
            return
        try:
            await self._rollback()
        except Exception:
            logger.exception("Rollback after failed %s fetch failed", self.name, extra={"store": self.name})

    def is_stale(self, max_age: Optional[float] = None) -> bool:
        """True until a successful fetch younger than ``max_age`` exists."""
        if self.state != FetchState.POPULATED or self.last_fetch is None:
            return True
        limit = self.max_age if max_age is None else max_age
        return time.monotonic() - self.last_fetch > limit

    async def ensure_fresh(self) -> List[T]:
        if self.is_stale():
            return await self.fetch()
        return self.items

    def get_by_id(self, id: Any) -> Optional[T]:
        for item in self.items:
            item_id = item.get("id") if isinstance(item, Mapping) else getattr(item, "id", None)
            if item_id == id:
                return item
        return None


class UserStore(CollectionStore[User]):
    def __init__(
        self,
        repo: UserRepository,
        max_age: Optional[float] = None,
        rollback: Optional[Rollback] = None,
    ):
        super().__init__("users", repo.list_all, max_age, rollback)


class CompanyStore(CollectionStore[Company]):
    def __init__(
        self,
        repo: CompanyRepository,
        max_age: Optional[float] = None,
        rollback: Optional[Rollback] = None,
    ):
        super().__init__("companies", repo.list_all, max_age, rollback)


class InvestmentStore(CollectionStore[Investment]):
    """All investments, or only one company's when ``company_id`` is given."""

    def __init__(
        self,
        repo: InvestmentRepository,
        company_id: Optional[str] = None,
        max_age: Optional[float] = None,
        rollback: Optional[Rollback] = None,
    ):
        if company_id is None:
            loader: Loader = repo.list_all
        else:

            async def loader() -> List[Investment]:
                return await repo.list_by_company(company_id)

        super().__init__("investments", loader, max_age, rollback)
        self.company_id = company_id


class SubscriptionStore(CollectionStore[InvestorInvestment]):
    """
    Investor subscriptions.

    Scoped to one investor with ``user_id``, or to the investments held by
    ``investments`` (read at fetch time) when that store is scoped.
    """

    def __init__(
        self,
        repo: SubscriptionRepository,
        user_id: Optional[str] = None,
        investments: Optional[InvestmentStore] = None,
        max_age: Optional[float] = None,
        rollback: Optional[Rollback] = None,
    ):
        async def loader() -> List[InvestorInvestment]:
            if user_id is not None:
                return await repo.get_by_user(user_id)
            if investments is not None and investments.company_id is not None:
                return await repo.get_by_investments([inv.id for inv in investments.items])
            return await repo.list_all()

        super().__init__("subscriptions", loader, max_age, rollback)


class DataStore:
    """
    The collections one dashboard is computed from.

    :meth:`refresh` fetches the stale containers one after another; the
    subscription store goes last because a company-scoped one reads the
    investment store's ids.
    """

    def __init__(
        self,
        users: UserStore,
        companies: CompanyStore,
        investments: InvestmentStore,
        subscriptions: SubscriptionStore,
    ):
        self.user_store = users
        self.company_store = companies
        self.investment_store = investments
        self.subscription_store = subscriptions

    @classmethod
    def for_session(
        cls,
        db: AsyncSession,
        company_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> "DataStore":
        """One session shared by all four stores, rolled back after a failed fetch."""
        investments = InvestmentStore(
            InvestmentRepository(Investment, db), company_id, rollback=db.rollback
        )
        return cls(
            users=UserStore(UserRepository(User, db), rollback=db.rollback),
            companies=CompanyStore(CompanyRepository(Company, db), rollback=db.rollback),
            investments=investments,
            subscriptions=SubscriptionStore(
                SubscriptionRepository(InvestorInvestment, db),
                user_id=user_id,
                investments=investments,
                rollback=db.rollback,
            ),
        )

    @property
    def stores(self) -> List[CollectionStore]:
        return [
            self.user_store,
            self.company_store,
            self.investment_store,
            self.subscription_store,
        ]

    async def refresh(self, force: bool = False) -> "DataStore":
        for store in self.stores:
            if force or store.is_stale():
                await store.fetch()
        return self

    @property
    def loading(self) -> bool:
        return any(store.loading for store in self.stores)

    @property
    def users(self) -> List[User]:
        return self.user_store.items

    @property
    def companies(self) -> List[Company]:
        return self.company_store.items

    @property
    def investments(self) -> List[Investment]:
        return self.investment_store.items

    @property
    def subscriptions(self) -> List[InvestorInvestment]:
        return self.subscription_store.items

    def get_company(self, company_id: str) -> Optional[Company]:
        return self.company_store.get_by_id(company_id)

    def get_investment(self, investment_id: str) -> Optional[Investment]:
        return self.investment_store.get_by_id(investment_id)

    def get_user(self, user_id: str) -> Optional[User]:
        return self.user_store.get_by_id(user_id)

    def status(self) -> Dict[str, str]:
        return {store.name: store.state.value for store in self.stores}
