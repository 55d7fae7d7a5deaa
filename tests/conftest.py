"""
tests/conftest.py
"""
from __future__ import annotations

import os
import tempfile
from typing import Generator

import pytest
from flask.testing import FlaskClient

# app.py refuses to import without these, so they have to exist first
os.environ.setdefault("SECRET_KEY", "00112233445566778899aabbccddeeff" * 2)
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="inkwell-"))

from app import app  # noqa: E402
from cipher import Cipher, load_key  # noqa: E402
from store import MemoryStore  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _configure_app() -> None:
    app.config.update(TESTING=True)


@pytest.fixture
def store() -> Generator[MemoryStore, None, None]:
    """A fresh in-memory store, also wired into the app for this test."""
    mem = MemoryStore()
    previous = app.extensions["blog_store"]
    app.extensions["blog_store"] = mem
    yield mem
    app.extensions["blog_store"] = previous


@pytest.fixture
def cipher() -> Cipher:
    return app.extensions["blog_cipher"]


@pytest.fixture
def other_cipher() -> Cipher:
    """A cipher under a different key, for foreign tokens."""
    return Cipher(load_key("ff" * 32))


@pytest.fixture
def client(store) -> Generator[FlaskClient, None, None]:
    with app.test_client() as client:
        yield client
