"""Shared fixtures for Google Traffic tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from custom_components.google_traffic.models import Destination
from custom_components.google_traffic.repository import Repository


class MemoryRepository(Repository):
    """Repository keeping categories and variables in dictionaries."""

    def __init__(self):
        self.categories = {}
        self.variables = {}
        self.profiles = {}
        self.created = 0

    def create_or_update_category(self, parent, ident, name, position):
        if ident not in self.categories:
            self.created += 1
        self.categories[ident] = {"parent": parent, "name": name, "position": position}
        return ident

    def create_or_update_variable(self, parent, ident, name, value, profile, position):
        if ident not in self.variables:
            self.created += 1
        self.variables[ident] = {
            "parent": parent,
            "name": name,
            "value": value,
            "profile": profile.name,
            "position": position,
        }
        self.profiles[ident] = profile


def make_element(duration=600, in_traffic=600, status="OK", distance="12.3 km"):
    """Build one distance matrix element."""
    if status != "OK":
        return {"status": status}
    return {
        "status": "OK",
        "distance": {"text": distance, "value": 12300},
        "duration": {"text": f"{duration // 60} mins", "value": duration},
        "duration_in_traffic": {"text": f"{in_traffic // 60} mins", "value": in_traffic},
    }


def make_response(*elements, status="OK", origin="Hauptstraße 1, 10115 Berlin, Germany"):
    """Build a distance matrix response."""
    return {
        "status": status,
        "origin_addresses": [origin],
        "destination_addresses": [f"Address {i}" for i in range(len(elements))],
        "rows": [{"elements": list(elements)}],
    }


def mock_session(json_data=None, status=200):
    """aiohttp session whose get() yields a response with the given data."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=json_data)

    session = MagicMock()
    session.get.return_value.__aenter__.return_value = response
    session.get.return_value.__aexit__.return_value = False
    return session


@pytest.fixture
def destinations():
    return (
        Destination(name="Work", destination="Alexanderplatz 1, Berlin"),
        Destination(name="Gym", destination="52.5200,13.4050"),
    )


@pytest.fixture
def memory_repository():
    return MemoryRepository()
