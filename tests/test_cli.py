import pandas as pd

from conftest import FakeResponse, FakeSession
from osm_geocode import cli
from osm_geocode.geocoding import DuckDBGeocodeCache, DuckDBRecordStore, GeoResult, NominatimClient


def write_addresses(path):
    pd.DataFrame(
        [
            {"uid": 1, "pid": 3, "address": "Hauptstrasse 1", "zip": "10115", "city": "Berlin", "country": "DE"},
            {"uid": 2, "pid": 4, "address": "Markt 2", "zip": "04109", "city": "Leipzig", "country": "DE"},
        ]
    ).to_csv(path, index=False)


def test_cli_imports_and_geocodes_scoped_records(tmp_path, monkeypatch, capsys):
    csv_path = tmp_path / "addresses.csv"
    db_path = tmp_path / "addresses.duckdb"
    write_addresses(csv_path)
    session = FakeSession(FakeResponse(200, [{"lat": "52.5", "lon": "13.4"}]))
    monkeypatch.setattr(cli, "NominatimClient", lambda **kwargs: NominatimClient(session=session, **kwargs))

    code = cli.main([
        "3", "ops@example.org", "https://geo.example.org/", "0", "10",
        "--db", str(db_path), "--memory-cache", "--import-csv", str(csv_path),
    ])

    assert code == 0
    assert session.calls[0]["url"] == "https://geo.example.org/search"
    assert "ops@example.org" in session.calls[0]["headers"]["User-Agent"]
    assert "Complete" in capsys.readouterr().out
    with DuckDBRecordStore(db_path) as store:
        assert [r.uid for r in store.select_missing_coordinates(None, 10)] == [2]


def test_cli_returns_one_when_cache_cannot_open(tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    code = cli.main(["--db", str(tmp_path / "a.duckdb"), "--cache-db", str(blocker / "cache.duckdb")])

    assert code == 1
    assert "Failed" in capsys.readouterr().out


def test_cli_closes_http_session(tmp_path, monkeypatch):
    csv_path = tmp_path / "addresses.csv"
    write_addresses(csv_path)
    session = FakeSession(FakeResponse(200, [{"lat": "52.5", "lon": "13.4"}]))
    monkeypatch.setattr(cli, "NominatimClient", lambda **kwargs: NominatimClient(session=session, **kwargs))

    code = cli.main([
        "3", "ops@example.org", "https://geo.example.org", "0",
        "--db", str(tmp_path / "a.duckdb"), "--memory-cache", "--import-csv", str(csv_path),
    ])

    assert code == 0
    assert session.closed


def test_cli_purges_expired_cache_entries(tmp_path, monkeypatch):
    cache_path = tmp_path / "cache.duckdb"
    with DuckDBGeocodeCache(cache_path, clock=lambda: 0.0) as cache:
        cache.set("geocode-osm-stale", GeoResult(52.5, 13.4), ttl_seconds=60)
    monkeypatch.setattr(cli, "NominatimClient", lambda **kwargs: NominatimClient(session=FakeSession(), **kwargs))

    code = cli.main(["--db", str(tmp_path / "a.duckdb"), "--cache-db", str(cache_path)])

    assert code == 0
    with DuckDBGeocodeCache(cache_path) as cache:
        assert cache.con.execute("SELECT COUNT(*) FROM geocode_cache").fetchone()[0] == 0


def test_help_describes_table_option():
    assert "Address table name" in cli.build_parser().format_help()
