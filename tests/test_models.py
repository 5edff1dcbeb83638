import dataclasses

import pytest

from osm_geocode.geocoding import (
    CandidateRecord,
    GeoResult,
    RunConfig,
    accept_base_url,
    accept_max_results,
    accept_scope_filter,
    accept_throttle_micros,
)
from osm_geocode.settings import Settings


def test_defaults():
    config = RunConfig.builder().build()

    assert config.scope_filter is None
    assert config.contact_email == "info@yourdomain.com"
    assert config.provider_base_url == "https://nominatim.openstreetmap.org"
    assert config.throttle_delay_micros == 2_000_000
    assert config.max_results == 100


def test_builder_applies_valid_values():
    config = (
        RunConfig.builder()
        .scope_filter("12")
        .contact_email(" ops@example.org ")
        .provider_base_url(" https://geo.example.org/ ")
        .throttle_delay_micros("1000")
        .max_results(5)
        .build()
    )

    assert config == RunConfig(12, "ops@example.org", "https://geo.example.org", 1000, 5)


def test_builder_keeps_prior_values_on_invalid_input():
    config = (
        RunConfig.builder()
        .throttle_delay_micros(500)
        .throttle_delay_micros(-1)
        .max_results(7)
        .max_results(0)
        .max_results(-3)
        .provider_base_url("")
        .build()
    )

    assert config.throttle_delay_micros == 500
    assert config.max_results == 7
    assert config.provider_base_url == "https://nominatim.openstreetmap.org"


def test_run_config_is_immutable():
    config = RunConfig()

    with pytest.raises(AttributeError):
        config.max_results = 1


@pytest.mark.parametrize(
    "value, expected",
    [(None, None), ("", None), (0, None), ("0", None), (7, 7), ("7", 7), ("abc", 3)],
)
def test_accept_scope_filter(value, expected):
    assert accept_scope_filter(value, prior=3) == expected


def test_validation_functions_fall_back_to_prior():
    assert accept_throttle_micros(-1, 2_000_000) == 2_000_000
    assert accept_throttle_micros("soon", 10) == 10
    assert accept_throttle_micros(0, 10) == 0
    assert accept_max_results(0, 100) == 100
    assert accept_max_results("x", 100) == 100
    assert accept_max_results(1, 100) == 1
    assert accept_base_url("   ", "https://a") == "https://a"
    assert accept_base_url("https://b///", "https://a") == "https://b"


def test_from_settings_uses_environment(monkeypatch):
    monkeypatch.setenv("GEOCODE_CONTACT_EMAIL", "env@example.org")
    monkeypatch.setenv("GEOCODE_MAX_RESULTS", "25")

    config = RunConfig.from_settings(Settings())

    assert config.contact_email == "env@example.org"
    assert config.max_results == 25


@pytest.mark.parametrize(
    "latitude, longitude, candidate",
    [
        (None, None, True),
        (0, 5.0, True),
        (5.0, 0.0, True),
        (1.0, None, True),
        (1.0, 1.0, False),
    ],
)
def test_candidate_predicate_is_or_across_axes(latitude, longitude, candidate):
    record = CandidateRecord(uid=1, latitude=latitude, longitude=longitude)

    assert record.is_candidate() is candidate


def test_candidate_record_builds_query_from_raw_fields():
    record = CandidateRecord(uid=1, address=" Hauptstrasse 1 ", zip=10115, city=None, country="DE")

    query = record.to_query()

    assert (query.street, query.postal_code, query.city, query.country) == ("Hauptstrasse 1", "10115", "", "DE")


def test_geo_result_is_a_plain_coordinate_pair():
    result = GeoResult(52.5, 13.4)

    assert dataclasses.asdict(result) == {"latitude": 52.5, "longitude": 13.4}
    assert not hasattr(result, "to_dict")
