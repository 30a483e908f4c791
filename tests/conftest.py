"""Shared pytest fixtures: a FastAPI app with a LindyHop bound to it."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lindyhop import LindyHop, Rule
from lindyhop.config import Settings
from lindyhop.errors import Err, not_found


class Users:
    """In-memory stand-in for a model with an async lookup."""

    records = {"123": {"_id": "123", "name": "Ann"}}

    @classmethod
    async def find_by_id(cls, user_id):
        return cls.records.get(user_id)


class ObjectRule(Rule):
    """Extension validator resolving an id through a model lookup."""

    def model(self, repo):
        return self._configure(repo=repo)

    async def validate(self, value):
        found = await self.repo.find_by_id(value)
        if found is None:
            return Err(not_found(f"{self.field} not found"))
        return found


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def app() -> FastAPI:
    return FastAPI()


@pytest.fixture
def api(app: FastAPI, settings: Settings) -> LindyHop:
    lindy = LindyHop(app, settings)
    lindy.register_validator("object", ObjectRule)
    return lindy


@pytest.fixture
def client(app: FastAPI, api: LindyHop) -> TestClient:
    return TestClient(app)


@pytest.fixture
def users_model() -> type[Users]:
    return Users
