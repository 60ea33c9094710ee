"""Tests for the HTTP and websocket API."""

from fastapi.testclient import TestClient

from nutrition_lookup.api.app import create_app
from nutrition_lookup.errors import ProviderError
from tests.conftest import MILK_PRODUCT


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_search_returns_ranked_items_from_primary(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods/search", params={"q": "mjölk"})

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "openfoodfacts"
    assert data["from_cache"] is False
    assert [item["name"] for item in data["items"]] == [
        "Mjölk",
        "Mjölkchoklad",
        "Havremjölk",
    ]
    assert data["items"][0]["id"] == "off_mjölk"
    assert data["items"][0]["serving_size"] == "100g"


def test_search_falls_back_to_secondary(container, primary_provider) -> None:
    primary_provider.error = ProviderError("openfoodfacts", "down", status_code=502)
    client = TestClient(create_app(container))

    response = client.get("/foods/search", params={"q": "mjölk"})

    data = response.json()
    assert data["source"] == "livsmedelsverket"
    assert [item["name"] for item in data["items"]] == ["Mjölk 3%"]


def test_search_limit_and_blank_query(container, primary_provider) -> None:
    client = TestClient(create_app(container))

    limited = client.get("/foods/search", params={"q": "mjölk", "limit": 1}).json()
    blank = client.get("/foods/search", params={"q": "  "}).json()
    too_many = client.get("/foods/search", params={"q": "mjölk", "limit": 51})

    assert [item["name"] for item in limited["items"]] == ["Mjölk"]
    assert blank["items"] == []
    assert blank["source"] is None
    assert too_many.status_code == 422
    assert primary_provider.calls == ["mjölk"]


def test_barcode_found(container) -> None:
    client = TestClient(create_app(container))

    response = client.get(f"/foods/barcode/{MILK_PRODUCT['code']}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "off_7310865004703"
    assert data["display_name"] == "Mellanmjölk (Arla)"
    assert data["nutri_score"] == "B"
    assert data["nova_group"] == 1


def test_barcode_errors(container, barcode_client) -> None:
    client = TestClient(create_app(container))

    invalid = client.get("/foods/barcode/abc")
    missing = client.get("/foods/barcode/12345678")
    barcode_client.error = ProviderError("openfoodfacts", "down", status_code=503)
    failed = client.get("/foods/barcode/12345678")

    assert invalid.status_code == 422
    assert missing.status_code == 404
    assert failed.status_code == 503


def test_live_search_pushes_settled_results(container) -> None:
    client = TestClient(create_app(container))

    with client.websocket_connect("/foods/search/live") as websocket:
        websocket.send_json({"query": "mjölk"})
        searching = websocket.receive_json()
        settled = websocket.receive_json()
        websocket.send_json({"query": ""})
        idle = websocket.receive_json()

    assert searching["state"] == "searching"
    assert searching["is_loading"] is True
    assert settled["state"] == "settled"
    assert settled["source"] == "openfoodfacts"
    assert [item["name"] for item in settled["results"]][0] == "Mjölk"
    assert idle["state"] == "idle"
    assert idle["results"] == []


def test_live_search_barcode_and_invalid_frames(container) -> None:
    client = TestClient(create_app(container))

    with client.websocket_connect("/foods/search/live") as websocket:
        websocket.send_text("not json")
        error = websocket.receive_json()
        websocket.send_json({"barcode": MILK_PRODUCT["code"]})
        scanned = websocket.receive_json()

    assert error == {"error": "invalid message"}
    assert scanned["barcode"]["status"] == "found"
    assert scanned["barcode"]["item"]["name"] == "Mellanmjölk"
    assert scanned["results"] == []


def test_admin_requires_token(container) -> None:
    client = TestClient(create_app(container))

    missing = client.get("/admin/providers")
    wrong = client.get("/admin/providers", headers={"X-Admin-Token": "nope"})

    assert missing.status_code == 401
    assert wrong.status_code == 401


def test_admin_lists_providers_and_clears_cache(container) -> None:
    client = TestClient(create_app(container))
    headers = {"X-Admin-Token": "admin-token"}
    client.get("/foods/search", params={"q": "mjölk"})

    providers = client.get("/admin/providers", headers=headers)
    cleared = client.post("/admin/cache/clear", headers=headers)
    cleared_again = client.post("/admin/cache/clear", headers=headers)

    assert providers.json() == {"providers": ["openfoodfacts", "livsmedelsverket"]}
    assert cleared.json() == {"cleared": 1}
    assert cleared_again.json() == {"cleared": 0}
