from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ADMIN_USERNAME", "yugdeep")
os.environ.setdefault("ADMIN_PASSWORD", "989814yug")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from expense_manager.db import engine, init_db
from expense_manager.main import app

ADMIN = {"username": os.environ["ADMIN_USERNAME"], "password": os.environ["ADMIN_PASSWORD"]}


@pytest.fixture(autouse=True)
def fresh_db():
    SQLModel.metadata.drop_all(engine)
    init_db()
    yield


@pytest.fixture()
def db_session():
    with Session(engine) as session:
        yield session


@pytest.fixture()
def anon_client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def client(anon_client):
    resp = anon_client.post("/api/login", json=ADMIN, follow_redirects=False)
    assert resp.status_code == 303
    return anon_client


@pytest.fixture()
def workspace(client):
    resp = client.post("/api/workspaces", json={"name": "Trip", "amount": 1000})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture()
def member(client, workspace):
    resp = client.post(
        "/api/members",
        json={"name": "Asha", "contactNumber": "555-0100", "workspaceId": workspace["id"]},
    )
    assert resp.status_code == 201
    return resp.json()
