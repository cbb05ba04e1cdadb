"""
Tests for the Cities API endpoints.

CRUD, normalization, conditional requests, pagination and cascade
behaviour of /cities.
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from destinations.main import create_app


@pytest.mark.api
class TestCityCrud:
    """Create, read, update and delete cities."""

    def test_create_city_normalizes_input(self, client):
        response = client.post(
            "/cities",
            json={"name": "  Paris ", "country_code": "fr", "currency": "eur"},
        )

        assert response.status_code == 201
        city = response.json()
        assert city["name"] == "Paris"
        assert city["country_code"] == "FR"
        assert city["currency"] == "EUR"
        uuid.UUID(city["id"])
        assert response.headers["Location"].endswith(f"/cities/{city['id']}")
        assert response.headers["ETag"].startswith('"')
        assert city["_links"]["self"]["href"].endswith(f"/cities/{city['id']}")
        assert city["_links"]["seasons"]["href"].endswith(f"/cities/{city['id']}/seasons")
        assert city["_links"]["update"]["method"] == "PUT"
        assert city["_links"]["delete"]["method"] == "DELETE"

    def test_create_city_with_client_id(self, client):
        city_id = str(uuid.uuid4())
        response = client.post(
            "/cities",
            json={"id": city_id, "name": "Lisbon", "country_code": "PT", "currency": "EUR"},
        )
        assert response.status_code == 201
        assert response.json()["id"] == city_id

    def test_create_city_missing_field(self, client):
        response = client.post("/cities", json={"name": "Paris", "country_code": "FR"})

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        fields = [error["field"] for error in body["details"]["field_errors"]]
        assert fields == ["currency"]

    @pytest.mark.parametrize("payload", [
        {"name": "", "country_code": "FR", "currency": "EUR"},
        {"name": "Paris", "country_code": "FRA", "currency": "EUR"},
        {"name": "Paris", "country_code": "F1", "currency": "EUR"},
        {"name": "Paris", "country_code": "FR", "currency": "EU"},
        {"name": "x" * 256, "country_code": "FR", "currency": "EUR"},
    ])
    def test_create_city_invalid_payload(self, client, payload):
        response = client.post("/cities", json=payload)
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_create_city_malformed_json(self, client):
        response = client.post(
            "/cities", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

    def test_duplicate_city_conflicts(self, client, create_city):
        create_city("Paris", "FR", "EUR")

        response = client.post(
            "/cities", json={"name": "Paris", "country_code": "fr", "currency": "EUR"}
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "CONFLICT"
        assert body["message"] == "City already exists for this country"

    def test_reused_client_id_conflicts(self, client, create_city):
        city = create_city("Lisbon", "PT", "EUR")

        response = client.post(
            "/cities",
            json={"id": city["id"], "name": "Porto", "country_code": "PT", "currency": "EUR"},
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "CONFLICT"
        assert body["message"] == "City id already exists"
        assert body["details"]["resource_id"] == city["id"]
        assert client.get("/cities", params={"search": "Porto"}).json()["data"] == []

    def test_same_name_other_country_allowed(self, client, create_city):
        create_city("Paris", "FR", "EUR")
        response = client.post(
            "/cities", json={"name": "Paris", "country_code": "US", "currency": "USD"}
        )
        assert response.status_code == 201

    def test_get_city(self, client, create_city):
        city = create_city()

        response = client.get(f"/cities/{city['id']}")

        assert response.status_code == 200
        assert response.json()["name"] == "Paris"
        assert response.headers["Cache-Control"] == "public, max-age=60"
        assert response.headers["ETag"]

    def test_get_city_not_found(self, client):
        response = client.get(f"/cities/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"

    def test_update_city_without_if_match(self, client, create_city):
        city = create_city()

        response = client.put(f"/cities/{city['id']}", json={"currency": "chf"})

        assert response.status_code == 200
        body = response.json()
        assert body["currency"] == "CHF"
        assert body["name"] == "Paris"

    def test_update_city_empty_body_keeps_row(self, client, create_city):
        city = create_city()
        etag = client.get(f"/cities/{city['id']}").headers["ETag"]

        response = client.put(f"/cities/{city['id']}", json={})

        assert response.status_code == 200
        assert response.headers["ETag"] == etag

    def test_update_city_rejects_null(self, client, create_city):
        city = create_city()
        response = client.put(f"/cities/{city['id']}", json={"name": None})
        assert response.status_code == 400

    def test_update_city_not_found(self, client):
        response = client.put(f"/cities/{uuid.uuid4()}", json={"name": "Nowhere"})
        assert response.status_code == 404

    def test_update_missing_city_with_invalid_body_is_404(self, client):
        response = client.put(f"/cities/{uuid.uuid4()}", json={"country_code": "TOOLONG"})

        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"

    def test_update_city_non_object_body(self, client, create_city):
        city = create_city()

        response = client.put(f"/cities/{city['id']}", json=["Lyon"])

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_update_city_into_duplicate_conflicts(self, client, create_city):
        create_city("Paris", "FR", "EUR")
        lyon = create_city("Lyon", "FR", "EUR")

        response = client.put(f"/cities/{lyon['id']}", json={"name": "Paris"})

        assert response.status_code == 409

    def test_delete_city(self, client, create_city):
        city = create_city()

        response = client.delete(f"/cities/{city['id']}")

        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"/cities/{city['id']}").status_code == 404
        assert client.delete(f"/cities/{city['id']}").status_code == 404

    def test_delete_city_cascades_to_seasons(self, client, create_city, create_season):
        city = create_city()
        season = create_season(city["id"])

        assert client.delete(f"/cities/{city['id']}").status_code == 204

        assert client.get(f"/seasons/{season['id']}").status_code == 404
        listing = client.get("/seasons", params={"city_id": city["id"]}).json()
        assert listing["pagination"]["total"] == 0


@pytest.mark.api
class TestConditionalRequests:
    """ETag, If-None-Match and If-Match handling."""

    def test_if_none_match_returns_304(self, client, create_city):
        city = create_city()
        etag = client.get(f"/cities/{city['id']}").headers["ETag"]

        response = client.get(f"/cities/{city['id']}", headers={"If-None-Match": etag})

        assert response.status_code == 304
        assert response.content == b""
        assert response.headers["ETag"] == etag

    def test_etag_is_stable_and_matches_create(self, client):
        created = client.post(
            "/cities", json={"name": "Oslo", "country_code": "NO", "currency": "NOK"}
        )
        city_id = created.json()["id"]

        first = client.get(f"/cities/{city_id}").headers["ETag"]
        second = client.get(f"/cities/{city_id}").headers["ETag"]

        assert first == second == created.headers["ETag"]

    def test_if_match_current_etag_updates(self, client, create_city):
        city = create_city()
        etag = client.get(f"/cities/{city['id']}").headers["ETag"]

        response = client.put(
            f"/cities/{city['id']}", json={"name": "Paris Centre"}, headers={"If-Match": etag}
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Paris Centre"
        assert response.headers["ETag"] != etag
        assert client.get(f"/cities/{city['id']}").headers["ETag"] == response.headers["ETag"]

    def test_stale_if_match_is_rejected_and_row_unchanged(self, client, create_city):
        city = create_city()
        etag = client.get(f"/cities/{city['id']}").headers["ETag"]
        client.put(f"/cities/{city['id']}", json={"currency": "USD"})

        response = client.put(
            f"/cities/{city['id']}", json={"name": "Changed"}, headers={"If-Match": etag}
        )

        assert response.status_code == 412
        body = response.json()
        assert body["error_code"] == "PRECONDITION_FAILED"
        assert body["message"] == "Precondition Failed: Resource has been modified"
        current = client.get(f"/cities/{city['id']}").json()
        assert current["name"] == "Paris"
        assert current["currency"] == "USD"

    def test_if_match_on_missing_city_is_404(self, client):
        response = client.put(
            f"/cities/{uuid.uuid4()}", json={"name": "Ghost"}, headers={"If-Match": '"abc"'}
        )
        assert response.status_code == 404

    def test_stale_if_match_wins_over_invalid_body(self, client, create_city):
        city = create_city()

        response = client.put(
            f"/cities/{city['id']}", json={"currency": "E"}, headers={"If-Match": '"stale"'}
        )

        assert response.status_code == 412
        assert response.json()["error_code"] == "PRECONDITION_FAILED"
        assert client.get(f"/cities/{city['id']}").json()["currency"] == "EUR"

    def test_current_if_match_with_invalid_body_is_400(self, client, create_city):
        city = create_city()
        etag = client.get(f"/cities/{city['id']}").headers["ETag"]

        response = client.put(
            f"/cities/{city['id']}", json={"currency": "E"}, headers={"If-Match": etag}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"]["field_errors"][0]["field"] == "currency"

    def test_list_if_none_match_returns_304(self, client, create_city):
        create_city()
        etag = client.get("/cities").headers["ETag"]

        assert client.get("/cities", headers={"If-None-Match": etag}).status_code == 304

        create_city("Lyon", "FR", "EUR")
        assert client.get("/cities", headers={"If-None-Match": etag}).status_code == 200


@pytest.mark.api
class TestCityListing:
    """Filtering, ordering and pagination of /cities."""

    @pytest.fixture
    def cities(self, create_city):
        return [
            create_city("Paris", "FR", "EUR"),
            create_city("Lyon", "FR", "EUR"),
            create_city("Marseille", "FR", "EUR"),
            create_city("Zurich", "CH", "CHF"),
        ]

    def test_list_defaults(self, client, cities):
        response = client.get("/cities")

        assert response.status_code == 200
        body = response.json()
        assert [city["name"] for city in body["data"]] == ["Lyon", "Marseille", "Paris", "Zurich"]
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 4, "total_pages": 1}
        assert set(body["_links"]) == {"self"}
        assert "_links" in body["data"][0]

    def test_list_empty(self, client):
        body = client.get("/cities").json()
        assert body["data"] == []
        assert body["pagination"]["total"] == 0
        assert body["pagination"]["total_pages"] == 0

    def test_pagination_links(self, client, cities):
        first = client.get("/cities", params={"limit": 2}).json()
        assert first["pagination"]["total_pages"] == 2
        assert set(first["_links"]) == {"self", "next", "last"}
        assert "page=2" in first["_links"]["next"]["href"]

        second = client.get("/cities", params={"limit": 2, "page": 2}).json()
        assert [city["name"] for city in second["data"]] == ["Paris", "Zurich"]
        assert set(second["_links"]) == {"self", "first", "prev"}

    def test_page_beyond_last_is_empty(self, client, cities):
        body = client.get("/cities", params={"page": 5, "limit": 2}).json()
        assert body["data"] == []
        assert body["pagination"]["total"] == 4

    @pytest.mark.parametrize("params", [
        {"page": 0},
        {"limit": 0},
        {"limit": 101},
        {"page": "abc"},
    ])
    def test_invalid_pagination(self, client, params):
        response = client.get("/cities", params=params)
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_limit_bound_follows_settings(self, settings):
        app = create_app(settings.model_copy(update={"MAX_PAGE_SIZE": 150}))

        with TestClient(app) as client:
            allowed = client.get("/cities", params={"limit": 120})
            assert allowed.status_code == 200
            assert allowed.json()["pagination"]["limit"] == 120

            rejected = client.get("/cities", params={"limit": 151})
            assert rejected.status_code == 400
            assert rejected.json()["details"]["field_errors"][0]["field"] == "limit"

    def test_filter_by_country_is_case_insensitive(self, client, cities):
        body = client.get("/cities", params={"country_code": "ch"}).json()
        assert [city["name"] for city in body["data"]] == ["Zurich"]

    def test_filter_by_currency(self, client, cities):
        body = client.get("/cities", params={"currency": "EUR"}).json()
        assert body["pagination"]["total"] == 3

    def test_search_matches_substring(self, client, cities):
        body = client.get("/cities", params={"search": "AR"}).json()
        assert [city["name"] for city in body["data"]] == ["Marseille", "Paris"]

    def test_links_preserve_filters(self, client, cities):
        body = client.get("/cities", params={"country_code": "FR", "limit": 1}).json()

        assert body["pagination"]["total"] == 3
        for link in body["_links"].values():
            assert "country_code=FR" in link["href"]
            assert "limit=1" in link["href"]


@pytest.mark.api
class TestCitySeasons:

    def test_city_seasons(self, client, create_city, create_season):
        city = create_city()
        create_season(city["id"], "off", 1, 3)
        create_season(city["id"], "peak", 6, 8)

        response = client.get(f"/cities/{city['id']}/seasons")

        assert response.status_code == 200
        body = response.json()
        assert [season["season_name"] for season in body["data"]] == ["off", "peak"]
        assert body["_links"]["city"]["href"].endswith(f"/cities/{city['id']}")

    def test_city_seasons_unknown_city(self, client):
        assert client.get(f"/cities/{uuid.uuid4()}/seasons").status_code == 404
