from typing import AsyncGenerator, Callable, Dict

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from order_harvest.api.routes.orders import get_order_runner
from order_harvest.domain.models import CredentialError
from order_harvest.main import create_app
from tests.fakes import FakeCredentialProvider, SleepRecorder


@pytest.fixture()
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def credential_provider() -> FakeCredentialProvider:
    return FakeCredentialProvider()


@pytest.fixture()
def failing_credential_provider() -> FakeCredentialProvider:
    return FakeCredentialProvider(error=CredentialError("Token refresh failed: 401 - expired"))


@pytest.fixture()
def fake_runner_state() -> Dict:
    return {"result": None, "error": None, "ranges": []}


@pytest.fixture()
def app(fake_runner_state) -> FastAPI:
    app = create_app()

    async def fake_runner(date_range):
        fake_runner_state["ranges"].append(date_range)
        if fake_runner_state["error"] is not None:
            raise fake_runner_state["error"]
        return fake_runner_state["result"]

    def override_runner() -> Callable:
        return fake_runner

    app.dependency_overrides[get_order_runner] = override_runner
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
