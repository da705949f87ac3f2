"""CLIのテスト"""
import json

import pytest

from location_resolver import entrypoint
from location_resolver.features.geocoding.domain.models import GeoQuery, LocationQuery


def test_query_from_args() -> None:
    args = entrypoint.build_parser().parse_args(
        [
            "--latitude",
            "48.85",
            "--longitude",
            "2.35",
            "--max-distance",
            "1000",
            "--country",
            "FR",
            "--no-cache",
        ]
    )

    assert entrypoint.query_from_args(args) == LocationQuery(
        location=GeoQuery(coordinates=(2.35, 48.85), max_distance=1000),
        country="FR",
        from_cache=False,
    )


def test_coordinates_need_both_values() -> None:
    args = entrypoint.build_parser().parse_args(["--latitude", "48.85"])
    assert entrypoint.query_from_args(args).location is None


@pytest.fixture
def patched_resolver(monkeypatch: pytest.MonkeyPatch, make_resolver):
    resolver = make_resolver()
    monkeypatch.setattr(entrypoint, "create_resolver", lambda settings: resolver)
    return resolver


def test_main_prints_locations(patched_resolver, capsys: pytest.CaptureFixture) -> None:
    exit_code = entrypoint.main(["--country", "FR", "--env-file", "missing.env"])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output[0]["country"] == "FR"


def test_main_one_without_match(patched_resolver, provider) -> None:
    provider.geocode_results = []
    assert entrypoint.main(["--id", "missing", "--one", "--env-file", "missing.env"]) == 2


def test_main_autocomplete(patched_resolver, provider, capsys: pytest.CaptureFixture) -> None:
    provider.predictions = [{"place_id": "p1", "description": "Paris, France"}]

    exit_code = entrypoint.main(
        ["--autocomplete", "Par", "--country", "fr", "--env-file", "missing.env"]
    )

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == [
        {"place_id": "p1", "description": "Paris, France"}
    ]
    assert provider.calls_to("autocomplete")[0]["components"] == {"country": ["fr"]}


def test_main_reports_resolution_failure(patched_resolver, provider) -> None:
    provider.geocode_results = [{"place_id": "no-geometry"}]
    assert entrypoint.main(["--country", "FR", "--env-file", "missing.env"]) == 1
