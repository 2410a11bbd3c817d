import asyncio
import os
from datetime import date
from pathlib import Path
from typing import Any
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

ENV_TEST_PATH = Path(__file__).parents[1] / ".env.test"


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key, value)


_load_env_file(ENV_TEST_PATH)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-budget-api-tests")

from budget_api.api.deps import get_aggregator_registry, get_email_sender  # noqa: E402
from budget_api.core.exceptions import EmailDeliveryError, UpstreamUnavailableError  # noqa: E402
from budget_api.db.session import get_db  # noqa: E402
from budget_api.main import app  # noqa: E402
from budget_api.models.budget import AggregatorProvider  # noqa: E402
from budget_api.schemas.bank import (  # noqa: E402
    AccountBalance,
    ExchangedConnection,
    ExternalAccount,
    LinkToken,
)
from budget_api.services.mailer import EmailSender  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def setup_database():
    """Create tables for tests that need the database, and drop them after.

    Not autouse so pure unit tests (classification, dates) run without a
    database.
    """
    from budget_api.models.base import Base

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await test_engine.dispose()


@pytest.fixture
async def db_session(setup_database):
    """Provide test database session with fresh connection per test."""
    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


async def create_user(db: AsyncSession, email: str, name: str, password: str = "password123"):
    from budget_api.core.security import hash_password
    from budget_api.models.user import User
    from budget_api.repositories.user import UserRepository

    user = User(email=email, password_hash=hash_password(password), name=name)
    return await UserRepository(db).create(user)


async def create_budget(db: AsyncSession, owner_id: UUID, name: str = "Test Budget"):
    from budget_api.models.budget import Budget
    from budget_api.repositories.budget import BudgetRepository

    repo = BudgetRepository(db)
    budget = await repo.create(Budget.create(name=name, owner_id=owner_id))
    return await repo.reload(budget)


def headers_for(user_id: UUID) -> dict[str, str]:
    from budget_api.core.security import create_access_token

    return {"Authorization": f"Bearer {create_access_token(user_id=user_id)}"}


@pytest.fixture
async def test_user(db_session: AsyncSession):
    """Create a test user for authentication tests."""
    return await create_user(db_session, "testuser@example.com", "Test User")


@pytest.fixture
async def other_user(db_session: AsyncSession):
    """A second user with no access to the test budget."""
    return await create_user(db_session, "other@example.com", "Other User")


@pytest.fixture
async def auth_headers(test_user):
    """Provide authentication headers with valid JWT token."""
    return headers_for(test_user.id)


@pytest.fixture
async def other_headers(other_user):
    return headers_for(other_user.id)


@pytest.fixture
async def test_budget(db_session: AsyncSession, test_user):
    """Budget owned by the test user."""
    return await create_budget(db_session, test_user.id, "Test User's Budget")


@pytest.fixture
async def test_categories(db_session: AsyncSession, test_budget):
    """Two categories in the test budget: Groceries and Dining."""
    from budget_api.models.category import Category

    categories = [
        Category(budget_id=test_budget.id, name="Groceries", budget_amount=400, order=0),
        Category(budget_id=test_budget.id, name="Dining", budget_amount=150, order=1),
    ]
    db_session.add_all(categories)
    await db_session.commit()
    return categories


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeInstitution:
    """What one linked credential returns from the fake aggregator."""

    def __init__(
        self,
        accounts: list[ExternalAccount] | None = None,
        transactions: list[dict[str, Any]] | None = None,
        delay: float = 0,
        fail: bool = False,
    ):
        self.accounts = accounts or []
        self.transactions = transactions or []
        self.delay = delay
        self.fail = fail


class FakeAggregatorClient:
    """In-memory aggregator keyed by access token.

    Records every call so tests can assert that no network work happened.
    """

    def __init__(self, provider: AggregatorProvider, configured: bool = True):
        self.provider = provider
        self._configured = configured
        self.institutions: dict[str, FakeInstitution] = {}
        self.calls: list[tuple[str, str]] = []
        self.removed: list[str] = []

    @property
    def configured(self) -> bool:
        return self._configured

    def add(self, access_token: str, institution: FakeInstitution) -> None:
        self.institutions[access_token] = institution

    async def _institution(self, access_token: str) -> FakeInstitution:
        institution = self.institutions.get(access_token, FakeInstitution())
        if institution.delay:
            await asyncio.sleep(institution.delay)
        if institution.fail:
            raise UpstreamUnavailableError("SYNC_002")
        return institution

    async def create_link_token(self, user_id: UUID) -> LinkToken:
        self.calls.append(("link_token", str(user_id)))
        return LinkToken(link_token=f"link-{self.provider.value}", environment="sandbox")

    async def exchange_token(self, token: str, institution_name: str | None = None) -> ExchangedConnection:
        self.calls.append(("exchange", token))
        return ExchangedConnection(
            connection_id=f"item-{token}",
            access_token=f"access-{token}",
            institution_id="ins_1",
            institution_name=institution_name or "Fake Bank",
        )

    async def list_accounts(self, access_token: str) -> list[ExternalAccount]:
        self.calls.append(("accounts", access_token))
        return list((await self._institution(access_token)).accounts)

    async def get_balance(self, access_token: str, account_id: str) -> AccountBalance:
        return AccountBalance(current="100.00", available="90.00", currency="USD")

    async def list_transactions(
        self, access_token: str, start_date: date, end_date: date, account_id: str | None = None
    ) -> list[dict[str, Any]]:
        self.calls.append(("transactions", access_token))
        institution = await self._institution(access_token)
        return [
            dict(txn)
            for txn in institution.transactions
            if start_date.isoformat() <= txn["date"][:10] <= end_date.isoformat()
            and (account_id is None or txn.get("account_id") == account_id)
        ]

    async def remove_connection(self, access_token: str) -> None:
        self.removed.append(access_token)

    async def aclose(self) -> None:
        pass


class FakeEmailSender(EmailSender):
    """Records sent invites instead of talking to SMTP."""

    def __init__(self):
        self.sent: list[dict[str, str]] = []
        self.fail = False

    async def send_invite(self, recipient: str, token: str, budget_name: str) -> None:
        if self.fail:
            raise EmailDeliveryError("EMAIL_001")
        self.sent.append({"recipient": recipient, "token": token, "budget_name": budget_name})


@pytest.fixture
def plaid_client():
    return FakeAggregatorClient(AggregatorProvider.PLAID)


@pytest.fixture
def teller_client():
    return FakeAggregatorClient(AggregatorProvider.TELLER)


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
async def client(db_session: AsyncSession, plaid_client, teller_client, email_sender):
    """Provide test client with database, aggregator and email overrides."""

    async def override_get_db():
        yield db_session

    async def override_registry():
        return {
            AggregatorProvider.PLAID: plaid_client,
            AggregatorProvider.TELLER: teller_client,
        }

    async def override_email_sender():
        return email_sender

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_aggregator_registry] = override_registry
    app.dependency_overrides[get_email_sender] = override_email_sender

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory for extra users: ``await make_user(email, name)``."""

    async def _make(email: str, name: str):
        return await create_user(db_session, email, name)

    return _make


@pytest.fixture
def make_headers():
    """Factory for bearer headers of any user id."""
    return headers_for


@pytest.fixture
def link_institution(db_session: AsyncSession, plaid_client, teller_client):
    """Store a bank connection on a budget and script what the fake aggregator returns for it.

    ``await link_institution(budget_id, "access-1", accounts=[...], transactions=[...])``
    returns the connection's primary key.
    """
    from budget_api.models.budget import BankConnection

    clients = {AggregatorProvider.PLAID: plaid_client, AggregatorProvider.TELLER: teller_client}

    async def _link(
        budget_id: UUID,
        access_token: str,
        institution_name: str = "Chase",
        provider: AggregatorProvider = AggregatorProvider.PLAID,
        **institution: Any,
    ) -> UUID:
        clients[provider].add(access_token, FakeInstitution(**institution))
        connection = BankConnection(
            budget_id=budget_id,
            provider=provider.value,
            connection_id=f"item-{access_token}",
            access_token=access_token,
            institution_name=institution_name,
        )
        db_session.add(connection)
        await db_session.commit()
        return connection.id

    return _link
