from __future__ import annotations

import sqlite3

import pytest

from conftest import freelance_attachments, freelance_fields
from intake.errors import NotFoundError, PersistenceError, ValidationError


@pytest.fixture
def seeded(submission_service):
    first = submission_service.submit("freelance", freelance_fields("Robotics Kit"), freelance_attachments())
    submission_service.submit("freelance", freelance_fields("Weather Station", domainName="IoT", projectDetail="solar powered"))
    second = submission_service.submit("freelance", freelance_fields("Robotics Kit", sellerName="Kiran"))
    return first, second


def test_search_is_case_insensitive_and_returns_duplicates(seeded, listing_service):
    first, second = seeded

    projects = listing_service.search("freelance", "ROBOT")

    assert [p["id"] for p in projects] == [first.id, second.id]
    assert {p["seller_name"] for p in projects} == {"Asha", "Kiran"}


def test_search_covers_domain_and_detail_columns(seeded, listing_service):
    assert [p["title"] for p in listing_service.search("freelance", "iot")] == ["Weather Station"]
    assert [p["title"] for p in listing_service.search("freelance", "Solar")] == ["Weather Station"]


def test_search_wildcards_are_literal(seeded, listing_service):
    assert listing_service.search("freelance", "%") == []
    assert listing_service.search("freelance", "_") == []


@pytest.mark.parametrize("term", [None, "", "   "])
def test_search_requires_a_term(listing_service, term):
    with pytest.raises(ValidationError, match="Search term is required"):
        listing_service.search("freelance", term)


def test_list_all_is_ordered_by_id_and_decodes_file_columns(seeded, listing_service):
    projects = listing_service.list_all("freelance")

    assert [p["id"] for p in projects] == [1, 2, 3]
    assert isinstance(projects[0]["images"], list) and len(projects[0]["images"]) == 2
    assert projects[1]["images"] == []
    assert projects[1]["zip_file"] is None


def test_get_by_natural_key(seeded, listing_service):
    first, _ = seeded

    project = listing_service.get_by_natural_key("freelance", "Robotics Kit")

    assert project["id"] == first.id
    with pytest.raises(NotFoundError):
        listing_service.get_by_natural_key("freelance", "robotics kit")


def test_unlisted_kinds_are_not_readable(listing_service):
    with pytest.raises(ValidationError, match="not listed"):
        listing_service.list_all("contact")


def test_store_failures_surface_as_persistence_errors(listing_service, database, monkeypatch):
    def _broken(*args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(database, "fetch_all", _broken)

    with pytest.raises(PersistenceError):
        listing_service.list_all("freelance")


def test_search_folds_non_ascii_case(submission_service, listing_service):
    submission_service.submit("freelance", freelance_fields("École Robot"))
    submission_service.submit("freelance", freelance_fields("Straße Sensor"))

    assert [p["title"] for p in listing_service.search("freelance", "école")] == ["École Robot"]
    assert [p["title"] for p in listing_service.search("freelance", "STRASSE")] == ["Straße Sensor"]
