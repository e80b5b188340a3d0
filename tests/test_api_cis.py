"""
Tests for the configuration item and relationship endpoints
"""
import pytest


SERVER_SCHEMA = {
    "name": "server",
    "attributes": [
        {"name": "ip_address", "type": "string", "required": True, "validation": {"format": "ipv4"}},
        {"name": "cpu_cores", "type": "number", "required": True, "validation": {"min": 1}},
        {"name": "environment", "type": "string", "default": "production"},
    ],
}


@pytest.fixture
def server_type(client):
    response = client.post("/api/v1/schemas/ci-types", json=SERVER_SCHEMA)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def depends_on_type(client):
    response = client.post("/api/v1/schemas/templates/relationship/depends_on")
    assert response.status_code == 201
    return response.json()


def create_server(client, name="web-01", **attributes):
    payload = {"ip_address": "10.0.0.1", "cpu_cores": 4}
    payload.update(attributes)
    return client.post("/api/v1/cis", json={"name": name, "type": "server", "attributes": payload})


class TestCIEndpoints:
    """Test /api/v1/cis"""

    def test_create(self, client, server_type):
        response = client.post(
            "/api/v1/cis",
            json={"name": "web-01", "type": "server", "attributes": {"ip_address": "10.0.0.1", "cpu_cores": 4}},
            headers={"X-User-Id": "alice"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["attributes"] == {"ip_address": "10.0.0.1", "cpu_cores": 4, "environment": "production"}
        assert body["created_by"] == "alice"
        assert body["warnings"] == []

    def test_create_missing_required(self, client, server_type):
        response = client.post("/api/v1/cis", json={"name": "web", "type": "server", "attributes": {"cpu_cores": 4}})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_failed"
        assert body["errors"] == [{
            "field": "ip_address",
            "value": None,
            "message": "Required attribute 'ip_address' is missing",
            "rule": None,
        }]

    def test_create_reports_every_problem(self, client, server_type):
        response = create_server(client, ip_address="999.1.1.1", cpu_cores=0, extra="x")

        body = response.json()
        assert response.status_code == 400
        assert [error["field"] for error in body["errors"]] == ["ip_address", "cpu_cores"]
        assert [warning["field"] for warning in body["warnings"]] == ["extra"]

    def test_create_with_warning(self, client, server_type):
        response = create_server(client, extra_field="x")

        assert response.status_code == 201
        assert response.json()["warnings"][0]["field"] == "extra_field"

    def test_create_malformed_attributes(self, client, server_type):
        response = client.post("/api/v1/cis", json={"name": "web", "type": "server", "attributes": "{oops"})

        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == "Invalid JSON in attributes"

    def test_create_unknown_type(self, client):
        response = client.post("/api/v1/cis", json={"name": "web", "type": "mainframe", "attributes": {}})

        assert response.status_code == 404
        assert response.json()["error"] == "schema_not_found"

    def test_create_bad_status(self, client, server_type):
        response = client.post("/api/v1/cis", json={"name": "web", "type": "server", "status": "broken"})
        assert response.status_code == 422

    def test_get_update_delete(self, client, server_type):
        ci_id = create_server(client).json()["id"]

        assert client.get(f"/api/v1/cis/{ci_id}").json()["name"] == "web-01"

        response = client.put(f"/api/v1/cis/{ci_id}", json={"owner": "platform"})
        assert response.status_code == 200
        assert response.json()["owner"] == "platform"
        assert response.json()["attributes"]["cpu_cores"] == 4

        assert client.delete(f"/api/v1/cis/{ci_id}").status_code == 204
        assert client.get(f"/api/v1/cis/{ci_id}").status_code == 404
        assert client.delete(f"/api/v1/cis/{ci_id}").status_code == 404

    def test_update_invalid_attributes(self, client, server_type):
        ci_id = create_server(client).json()["id"]

        response = client.put(f"/api/v1/cis/{ci_id}", json={"attributes": {"ip_address": "10.0.0.1", "cpu_cores": "x"}})

        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == "Expected number, got string"

    def test_get_missing(self, client):
        response = client.get("/api/v1/cis/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_list(self, client, server_type):
        for name in ("web-01", "web-02", "db-01"):
            create_server(client, name=name)

        response = client.get("/api/v1/cis", params={"search": "web", "page_size": 1, "sort_by": "name", "sort_order": "asc"})

        body = response.json()
        assert response.status_code == 200
        assert [item["name"] for item in body["items"]] == ["web-01"]
        assert body["pagination"]["total_items"] == 2
        assert body["pagination"]["has_next"] is True

    def test_list_rejects_oversized_page(self, client):
        assert client.get("/api/v1/cis", params={"page_size": 101}).status_code == 422


class TestRelationshipEndpoints:
    """Test /api/v1/relationships"""

    def test_create_and_list_for_ci(self, client, server_type, depends_on_type):
        a = create_server(client, name="app").json()["id"]
        b = create_server(client, name="db").json()["id"]

        response = client.post("/api/v1/relationships", json={
            "source_ci_id": a, "target_ci_id": b, "type": "depends_on", "attributes": {"is_critical": True},
        })

        assert response.status_code == 201
        rel_id = response.json()["id"]

        related = client.get(f"/api/v1/cis/{b}/relationships").json()
        assert [rel["id"] for rel in related] == [rel_id]

    def test_reverse_edge_conflict(self, client, server_type, depends_on_type):
        a = create_server(client, name="app").json()["id"]
        b = create_server(client, name="db").json()["id"]
        client.post("/api/v1/relationships", json={"source_ci_id": a, "target_ci_id": b, "type": "depends_on"})

        response = client.post("/api/v1/relationships", json={"source_ci_id": b, "target_ci_id": a, "type": "depends_on"})

        assert response.status_code == 400
        assert response.json()["message"] == "Circular dependency detected"
        assert "errors" not in response.json()

    def test_self_reference(self, client, server_type, depends_on_type):
        a = create_server(client).json()["id"]

        response = client.post("/api/v1/relationships", json={"source_ci_id": a, "target_ci_id": a, "type": "depends_on"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_relationship"

    def test_missing_ci(self, client, server_type, depends_on_type):
        a = create_server(client).json()["id"]

        response = client.post("/api/v1/relationships", json={"source_ci_id": a, "target_ci_id": "nope", "type": "depends_on"})
        assert response.status_code == 404

    def test_update_and_delete(self, client, server_type, depends_on_type):
        a = create_server(client, name="app").json()["id"]
        b = create_server(client, name="db").json()["id"]
        rel_id = client.post(
            "/api/v1/relationships", json={"source_ci_id": a, "target_ci_id": b, "type": "depends_on"}
        ).json()["id"]

        response = client.put(f"/api/v1/relationships/{rel_id}", json={"description": "primary database"})
        assert response.status_code == 200
        assert response.json()["description"] == "primary database"

        assert client.delete(f"/api/v1/relationships/{rel_id}").status_code == 204
        assert client.get(f"/api/v1/relationships/{rel_id}").status_code == 404
