"""
Shared fixtures: in-memory database, fake sensor APIs and an API client
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SENSOR_POLL_SECONDS"] = "0"
os.environ["GISMETEO_API_KEY"] = ""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agro_monitor.database import Base, get_db
from agro_monitor.main import app
from agro_monitor.models import Company, Profile, Zone, Sensor
from agro_monitor.providers import get_http_client
from agro_monitor.services.sensor_collector import collect_sensor_readings


class FakeRemoteApi:
    """Routes outbound requests by URL (query string ignored).

    Unknown URLs behave like an unreachable host.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, url, status_code=200, json=None, content=None):
        self.routes[url] = (status_code, json, content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        if key not in self.routes:
            raise httpx.ConnectError(f"Could not connect to {request.url.host}", request=request)

        status_code, json, content = self.routes[key]
        if content is not None:
            return httpx.Response(status_code, content=content)
        return httpx.Response(status_code, json=json)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def remote_api():
    return FakeRemoteApi()


@pytest.fixture
def company(db_session):
    company = Company(name="Agro Test")
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture
def users(db_session, company):
    profiles = [Profile(company_id=company.id, first_name=f"User {i}") for i in range(3)]
    db_session.add_all(profiles)
    db_session.commit()
    return profiles


@pytest.fixture
def zone(db_session, company):
    zone = Zone(company_id=company.id, name="Field 1")
    db_session.add(zone)
    db_session.commit()
    return zone


@pytest.fixture
def make_sensor(db_session, zone):
    def _make_sensor(api_url=None, **kwargs):
        last_reading = kwargs.pop("last_reading", None)
        if last_reading is None and api_url is not None:
            last_reading = {"apiUrl": api_url}
        sensor = Sensor(
            zone_id=kwargs.pop("zone_id", zone.id),
            name=kwargs.pop("name", "Moisture #1"),
            sensor_type=kwargs.pop("sensor_type", "moisture"),
            last_reading=last_reading,
            **kwargs,
        )
        db_session.add(sensor)
        db_session.commit()
        return sensor
    return _make_sensor


@pytest.fixture
def run_collector(db_session, remote_api):
    def _run():
        async def _collect():
            async with httpx.AsyncClient(transport=remote_api.transport()) as client:
                return await collect_sensor_readings(db_session, client)
        return asyncio.run(_collect())
    return _run


@pytest.fixture
def client(db_session, remote_api):
    def override_get_db():
        yield db_session

    async def override_get_http_client():
        async with httpx.AsyncClient(transport=remote_api.transport()) as http_client:
            yield http_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_http_client] = override_get_http_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
