import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from formbuilder.config import Settings
from formbuilder.database import close_db, init_db
from formbuilder.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret_key="test-secret",
        create_tables=False,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings):
    app = create_app(settings)
    await init_db(app.state.engine)
    yield app
    await close_db(app.state.engine)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def _register(client, username, password="secret-pass"):
    resp = await client.post("/api/register", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['accessToken']}"}


@pytest_asyncio.fixture
async def owner_headers(client):
    return await _register(client, "alice")


@pytest_asyncio.fixture
async def other_headers(client):
    return await _register(client, "bob")


@pytest.fixture
def make_form(client, owner_headers):
    """Creates a form (published by default) with the given questions."""
    async def _make_form(questions=(), published=True, title="Customer feedback", headers=None):
        headers = headers or owner_headers
        resp = await client.post(
            "/api/forms",
            json={"title": title, "isPublished": published},
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        form = resp.json()

        question_ids = []
        for index, question in enumerate(questions):
            body = {"orderIndex": index, **question}
            resp = await client.post(f"/api/forms/{form['id']}/questions", json=body, headers=headers)
            assert resp.status_code == 201, resp.text
            question_ids.append(resp.json()["id"])
        return form, question_ids

    return _make_form


@pytest.fixture
def count_rows(app):
    async def _count_rows(model, *criteria):
        async with app.state.session_maker() as session:
            result = await session.execute(select(func.count()).select_from(model).where(*criteria))
            return result.scalar()

    return _count_rows
