import httpx

APOD_PATH = "/planetary/apod"


def test_apod_for_date(client, upstream):
    upstream.add(APOD_PATH, json={
        "date": "2025-08-14",
        "title": "Perseid Meteors over Bulgaria",
        "media_type": "image",
        "url": "https://apod.nasa.gov/apod/image/2508/perseids.jpg",
    })

    response = client.get("/api/v1/apod", params={"date": "2025-08-14"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["date"] == "2025-08-14"
    assert body["data"]["title"] == "Perseid Meteors over Bulgaria"
    assert "timestamp" in body


def test_apod_today_omits_date_param(client, upstream):
    upstream.add(APOD_PATH, json={"date": "2026-10-18", "title": "Today"})

    response = client.get("/api/v1/apod")

    assert response.status_code == 200
    assert "date" not in upstream.requests[0].url.params


def test_invalid_date_format(client, upstream):
    response = client.get("/api/v1/apod", params={"date": "14-08-2025"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] is True
    assert body["message"] == "Invalid date format. Use YYYY-MM-DD."
    assert body["path"] == "/api/v1/apod"
    assert body["method"] == "GET"
    assert upstream.requests == []


def test_future_date_rejected(client, upstream):
    response = client.get("/api/v1/apod", params={"date": "2999-01-01"})

    assert response.status_code == 400
    assert response.json()["message"] == "Date cannot be in the future."
    assert upstream.requests == []


def test_unreachable_upstream_serves_fallback(client, upstream):
    upstream.add(APOD_PATH, exc=httpx.ConnectTimeout)

    response = client.get("/api/v1/apod", params={"date": "2025-08-14"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["media_type"] == "image"
    assert body["data"]["date"] == "2025-08-14"
    assert response.headers["cache-control"] == "no-store"
    assert "x-cache" not in response.headers


def test_fallback_is_not_replayed(client, upstream):
    upstream.add(APOD_PATH, exc=httpx.ConnectError)
    client.get("/api/v1/apod", params={"date": "2025-08-14"})

    upstream.add(APOD_PATH, json={"date": "2025-08-14", "title": "Back online"})
    response = client.get("/api/v1/apod", params={"date": "2025-08-14"})

    assert response.json()["data"]["title"] == "Back online"
    assert response.headers["x-cache"] == "MISS"


def test_upstream_rate_limit_is_surfaced(client, upstream):
    upstream.add(APOD_PATH, status=429, json={"error": {"code": "OVER_RATE_LIMIT"}})

    response = client.get("/api/v1/apod", params={"date": "2025-08-14"})

    assert response.status_code == 429
    assert response.json()["message"] == "NASA API rate limit exceeded. Please try again later."


class TestRange:
    def test_range(self, client, upstream):
        upstream.add(APOD_PATH, json=[
            {"date": "2025-08-01", "title": "A"},
            {"date": "2025-08-02", "title": "B"},
            {"date": "2025-08-03", "title": "C"},
        ])

        response = client.get("/api/v1/apod/range",
                              params={"start_date": "2025-08-01", "end_date": "2025-08-03"})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert body["range"] == {"start_date": "2025-08-01", "end_date": "2025-08-03", "days": 3}
        assert [entry["title"] for entry in body["data"]] == ["A", "B", "C"]

    def test_both_dates_required(self, client):
        response = client.get("/api/v1/apod/range", params={"start_date": "2025-08-01"})

        assert response.status_code == 400
        assert response.json()["message"] == "Both start_date and end_date are required."

    def test_range_longer_than_30_days(self, client, upstream):
        response = client.get("/api/v1/apod/range",
                              params={"start_date": "2025-01-01", "end_date": "2025-03-01"})

        assert response.status_code == 400
        assert response.json()["message"] == "Date range cannot exceed 30 days."
        assert upstream.requests == []

    def test_start_after_end(self, client):
        response = client.get("/api/v1/apod/range",
                              params={"start_date": "2025-08-10", "end_date": "2025-08-01"})

        assert response.status_code == 400
        assert "start_date must be before end_date" in response.json()["message"]

    def test_range_unreachable_upstream_is_timeout(self, client, upstream):
        upstream.add(APOD_PATH, exc=httpx.ReadTimeout)

        response = client.get("/api/v1/apod/range",
                              params={"start_date": "2025-08-01", "end_date": "2025-08-03"})

        assert response.status_code == 408


def test_random(client, upstream):
    upstream.add(APOD_PATH, json={"title": "Random"})

    response = client.get("/api/v1/apod/random")

    assert response.status_code == 200
    body = response.json()
    assert body["randomDate"] == upstream.requests[0].url.params["date"]


def test_random_fallback_is_not_replayed(client, upstream):
    upstream.add(APOD_PATH, exc=httpx.ConnectTimeout)
    first = client.get("/api/v1/apod/random")

    assert first.status_code == 200
    assert first.headers["cache-control"] == "no-store"
    assert "x-cache" not in first.headers

    upstream.add(APOD_PATH, json={"title": "Real"})
    second = client.get("/api/v1/apod/random")

    assert second.headers["x-cache"] == "MISS"
    assert second.json()["data"]["title"] == "Real"


def test_range_end_in_future(client):
    response = client.get("/api/v1/apod/range",
                          params={"start_date": "2999-01-01", "end_date": "2999-01-02"})

    assert response.status_code == 400
    assert response.json()["message"] == "end_date cannot be in the future."
