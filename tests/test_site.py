"""
Site tests: parcels, drawings, fence segments and gate positions.
"""
import pytest


@pytest.fixture
def job(client, headers_a):
    response = client.post(
        "/api/jobs",
        json={"name": "Corner lot", "customer_name": "Sam Okafor", "total_linear_feet": 240},
        headers=headers_a,
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def parcel(client, headers_a, job):
    response = client.post(
        "/api/parcels",
        json={"job_id": job["id"], "name": "Lot 14", "parcel_number": "APN-204-118-14", "total_area": 7200},
        headers=headers_a,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def segment(client, headers_a, job, parcel):
    response = client.post(
        "/api/fence-segments",
        json={
            "job_id": job["id"],
            "parcel_id": parcel["id"],
            "name": "North line",
            "length_in_feet": 120,
            "length_in_meters": 36.58,
            "geo_json_geometry": '{"type": "LineString", "coordinates": [[-122.41, 37.77], [-122.40, 37.77]]}',
        },
        headers=headers_a,
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_parcels_by_job(client, headers_a, job, parcel):
    client.post("/api/parcels", json={"job_id": job["id"], "name": "Easement"}, headers=headers_a)

    response = client.get(f"/api/parcels/by-job/{job['id']}", headers=headers_a)
    assert response.status_code == 200
    assert [row["name"] for row in response.json()] == ["Easement", "Lot 14"]
    assert parcel["area_unit"] == "sqft"


def test_parcel_requires_existing_job(client, headers_a):
    response = client.post("/api/parcels", json={"job_id": "missing", "name": "Lot 1"}, headers=headers_a)
    assert response.status_code == 400
    assert response.json()["error"] == "Job not found or access denied"


def test_update_parcel(client, headers_a, parcel):
    response = client.put(
        f"/api/parcels/{parcel['id']}",
        json={"name": "Lot 14A", "notes": "Survey pins found at both corners"},
        headers=headers_a,
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Lot 14A"
    assert response.json()["parcel_number"] == "APN-204-118-14"


def test_drawing_update_only_touches_metadata(client, headers_a, job, parcel):
    created = client.post(
        "/api/drawings",
        json={
            "job_id": job["id"],
            "parcel_id": parcel["id"],
            "name": "Site plan",
            "file_name": "site-plan.pdf",
            "file_path": "uploads/site-plan.pdf",
            "mime_type": "application/pdf",
            "file_size": 48213,
        },
        headers=headers_a,
    ).json()

    response = client.put(
        f"/api/drawings/{created['id']}",
        json={"name": "Site plan rev B", "version": 2, "file_path": "elsewhere.pdf", "job_id": "other"},
        headers=headers_a,
    )
    assert response.status_code == 200
    drawing = response.json()
    assert drawing["name"] == "Site plan rev B"
    assert drawing["version"] == 2
    assert drawing["file_path"] == "uploads/site-plan.pdf"
    assert drawing["job_id"] == job["id"]


def test_drawings_by_parcel(client, headers_a, job, parcel):
    client.post("/api/drawings", json={"parcel_id": parcel["id"], "name": "Survey"}, headers=headers_a)
    client.post("/api/drawings", json={"job_id": job["id"], "name": "Elevation"}, headers=headers_a)

    by_parcel = client.get(f"/api/drawings/by-parcel/{parcel['id']}", headers=headers_a).json()
    by_job = client.get(f"/api/drawings/by-job/{job['id']}", headers=headers_a).json()
    assert [row["name"] for row in by_parcel] == ["Survey"]
    assert [row["name"] for row in by_job] == ["Elevation"]


def test_drawing_with_foreign_parcel(client, headers_a, headers_b, parcel):
    response = client.post("/api/drawings", json={"parcel_id": parcel["id"], "name": "Copy"}, headers=headers_b)
    assert response.status_code == 400
    assert response.json()["error"] == "Parcel not found or access denied"


def test_fence_segment_starts_unverified(client, headers_a, segment):
    assert segment["is_verified_onsite"] is False
    assert segment["length_in_feet"] == 120.0

    response = client.put(
        f"/api/fence-segments/{segment['id']}",
        json={"is_verified_onsite": True, "onsite_verified_length_in_feet": 118.5},
        headers=headers_a,
    )
    assert response.status_code == 200
    assert response.json()["is_verified_onsite"] is True
    assert response.json()["onsite_verified_length_in_feet"] == 118.5


def test_fence_segments_by_parcel(client, headers_a, job, parcel, segment):
    client.post(
        "/api/fence-segments",
        json={"job_id": job["id"], "name": "East line", "length_in_feet": 60},
        headers=headers_a,
    )

    by_job = client.get(f"/api/fence-segments/by-job/{job['id']}", headers=headers_a).json()
    by_parcel = client.get(f"/api/fence-segments/by-parcel/{parcel['id']}", headers=headers_a).json()
    assert [row["name"] for row in by_job] == ["East line", "North line"]
    assert [row["name"] for row in by_parcel] == ["North line"]


def test_fence_segment_with_foreign_fence_type(client, headers_a, headers_b, segment):
    fence = client.post(
        "/api/fences",
        json={"name": "Chain link", "price_per_linear_foot": 18},
        headers=headers_b,
    ).json()

    response = client.put(
        f"/api/fence-segments/{segment['id']}",
        json={"fence_type_id": fence["id"]},
        headers=headers_a,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Fence type not found or access denied"


def test_gate_positions_follow_the_segment(client, headers_a, segment):
    for name, position in [("Drive gate", 0.8), ("Walk gate", 0.1), ("Side gate", 0.5)]:
        response = client.post(
            "/api/gate-positions",
            json={"fence_segment_id": segment["id"], "name": name, "position_along_segment": position},
            headers=headers_a,
        )
        assert response.status_code == 201, response.text
        assert response.json()["is_verified_onsite"] is False

    response = client.get(f"/api/gate-positions/by-segment/{segment['id']}", headers=headers_a)
    assert [row["name"] for row in response.json()] == ["Walk gate", "Side gate", "Drive gate"]


def test_gate_position_must_lie_on_the_segment(client, headers_a, segment):
    response = client.post(
        "/api/gate-positions",
        json={"fence_segment_id": segment["id"], "name": "Gate", "position_along_segment": 1.5},
        headers=headers_a,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_gate_position_on_foreign_segment(client, headers_b, segment):
    response = client.post(
        "/api/gate-positions",
        json={"fence_segment_id": segment["id"], "name": "Gate"},
        headers=headers_b,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Fence segment not found or access denied"


def test_deleting_a_job_removes_its_site(client, headers_a, job, parcel, segment):
    assert client.delete(f"/api/jobs/{job['id']}", headers=headers_a).status_code == 200

    assert client.get(f"/api/parcels/{parcel['id']}", headers=headers_a).status_code == 404
    assert client.get(f"/api/fence-segments/{segment['id']}", headers=headers_a).status_code == 404
