import httpx
import pytest
import pytest_asyncio

from quizbank.core.auth import create_token
from quizbank.core.database import db
from quizbank.core.errors import Conflict, Unauthorized
from quizbank.core.identity import IdentityProvider, get_identity_provider
from quizbank.main import app
from quizbank.services.catalog import ChoiceDraft, QuestionDraft
from quizbank.services.users import create_user

class FakeIdentityProvider(IdentityProvider):
    def __init__(self):
        self.accounts = {}

    async def create_account(self, email, password):
        if email in self.accounts:
            raise Conflict("Email is already in use")
        uid = f"uid-{len(self.accounts) + 1}"
        self.accounts[email] = (uid, password)
        return uid

    async def sign_in(self, email, password):
        uid, stored = self.accounts.get(email, (None, None))
        if uid is None or stored != password:
            raise Unauthorized("Invalid email or password")
        return uid

def make_questions(n=3, choices=4, prefix="Q"):
    return [
        QuestionDraft(
            text=f"{prefix}{i}",
            choices=[ChoiceDraft(text=f"{prefix}{i}-c{j}", is_correct=(j == 0)) for j in range(choices)],
        )
        for i in range(n)
    ]

@pytest_asyncio.fixture
async def database(tmp_path):
    await db.connect(f"sqlite+aiosqlite:///{tmp_path / 'quizbank.db'}")
    await db.create_all()
    yield db
    await db.disconnect()

@pytest_asyncio.fixture
async def session(database):
    async with database.session() as s:
        yield s

@pytest_asyncio.fixture
async def user(session):
    return await create_user(session, "firebase-1", "student@example.com")

@pytest.fixture
def identity():
    return FakeIdentityProvider()

@pytest_asyncio.fixture
async def client(database, identity):
    app.dependency_overrides[get_identity_provider] = lambda: identity
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture
def auth_header(user):
    return {"Authorization": f"Bearer {create_token(user.firebase_id)}"}
