from unittest.mock import MagicMock

import requests

from domain.models import Coordinate
from services.geocoding import LocationContextResolver, pick_locality
from settings import Settings

SF = Coordinate(37.7749, -122.4194)


def _resolver(json_body=None, ok=True, status_code=200, exc=None):
    session = MagicMock()
    if exc is not None:
        session.get.side_effect = exc
    else:
        resp = MagicMock()
        resp.ok = ok
        resp.status_code = status_code
        resp.json.return_value = json_body
        session.get.return_value = resp
    settings = Settings(google_maps_api_key="test-key", http_timeout_seconds=2.0)
    return LocationContextResolver(settings, session=session), session


def _component(name, *types):
    return {"long_name": name, "short_name": name, "types": list(types)}


def test_pick_locality_prefers_city():
    components = [
        _component("Mission District", "neighborhood", "political"),
        _component("California", "administrative_area_level_1", "political"),
        _component("San Francisco", "locality", "political"),
    ]
    assert pick_locality(components) == "San Francisco"


def test_pick_locality_falls_back_to_region():
    components = [
        _component("Marin County", "administrative_area_level_2", "political"),
        _component("California", "administrative_area_level_1", "political"),
    ]
    assert pick_locality(components) == "California"


def test_pick_locality_empty_when_neither_present():
    assert pick_locality([_component("United States", "country", "political")]) == ""


def test_resolve_context_reads_first_result():
    body = {
        "status": "OK",
        "results": [
            {"address_components": [_component("San Francisco", "locality", "political")]},
            {"address_components": [_component("Oakland", "locality", "political")]},
        ],
    }
    resolver, session = _resolver(body)

    assert resolver.resolve_context(SF) == "San Francisco"
    _, kwargs = session.get.call_args
    assert kwargs["params"] == {"latlng": "37.7749,-122.4194", "key": "test-key"}
    assert kwargs["timeout"] == 2.0


def test_resolve_context_empty_on_zero_results():
    resolver, _ = _resolver({"status": "ZERO_RESULTS", "results": []})
    assert resolver.resolve_context(SF) == ""


def test_resolve_context_empty_on_http_error():
    resolver, _ = _resolver({"results": []}, ok=False, status_code=500)
    assert resolver.resolve_context(SF) == ""


def test_resolve_context_empty_on_network_error():
    resolver, _ = _resolver(exc=requests.ConnectionError("boom"))
    assert resolver.resolve_context(SF) == ""


def test_resolve_context_empty_on_timeout():
    resolver, _ = _resolver(exc=requests.Timeout("slow"))
    assert resolver.resolve_context(SF) == ""


def test_resolve_context_empty_on_invalid_json():
    resolver, session = _resolver()
    session.get.return_value.json.side_effect = ValueError("not json")
    assert resolver.resolve_context(SF) == ""


def test_lookup_reports_failure_reason():
    resolver, _ = _resolver({"status": "REQUEST_DENIED", "results": []})
    outcome = resolver.lookup(SF)
    assert not outcome.ok
    assert "REQUEST_DENIED" in outcome.failure


def test_resolve_context_empty_when_results_is_not_a_list():
    resolver, _ = _resolver({"status": "OK", "results": {"a": 1}})
    assert resolver.resolve_context(SF) == ""


def test_resolve_context_skips_non_dict_components():
    body = {"status": "OK", "results": [{"address_components": [None]}]}
    resolver, _ = _resolver(body)
    assert resolver.resolve_context(SF) == ""


def test_resolve_context_reads_city_past_non_dict_components():
    body = {
        "status": "OK",
        "results": [{"address_components": [None, "x", _component("Springfield", "locality", "political")]}],
    }
    resolver, _ = _resolver(body)
    assert resolver.resolve_context(SF) == "Springfield"


def test_resolve_context_empty_when_components_not_iterable():
    resolver, _ = _resolver({"status": "OK", "results": [{"address_components": 5}]})
    assert resolver.resolve_context(SF) == ""
