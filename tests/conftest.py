from __future__ import annotations

import json
from typing import Any

import pytest

from tests._fixtures.archive_builder import ArchiveBuilder


@pytest.fixture
def archive_builder() -> ArchiveBuilder:
    """Provide a fresh in-memory archive builder."""
    return ArchiveBuilder()


class FakeResponse:
    """Minimal stand-in for the object returned by urllib's urlopen."""

    def __init__(self, body: Any, status: int = 200) -> None:
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = body
        self.status = status

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        return False


@pytest.fixture
def fake_response() -> type[FakeResponse]:
    return FakeResponse
