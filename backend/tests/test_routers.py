"""
HTTP-level tests for the deployment, alert and learning routers.
"""

import pytest


@pytest.fixture
def configured(client, production_config):
    response = client.post("/deployment", json=production_config)
    assert response.status_code == 201
    return client


class TestDeploymentRoutes:
    def test_create_and_get_config(self, configured):
        response = configured.get("/deployment/production")
        assert response.status_code == 200
        body = response.json()
        assert body["projectName"] == "edpsych-connect"
        assert body["environmentVariables"] == []

    def test_missing_config_is_404(self, client):
        response = client.get("/deployment/staging")
        assert response.status_code == 404
        assert response.json()["detail"] == "Configuration not found for environment: staging"

    def test_unknown_environment_is_422(self, client):
        assert client.get("/deployment/qa").status_code == 422

    def test_patch_config(self, configured):
        assert configured.patch("/deployment/production", json={"nodeVersion": "20.x"}).status_code == 200
        assert configured.get("/deployment/production").json()["nodeVersion"] == "20.x"

    def test_invalid_patch_is_400(self, configured):
        assert configured.patch("/deployment/production", json={"framework": "rails"}).status_code == 400

    def test_environment_variable_upsert(self, configured):
        for value in ("one", "two"):
            response = configured.put("/deployment/production/variables", json={"key": "API_URL", "value": value})
            assert response.status_code == 200
        variables = configured.get("/deployment/production").json()["environmentVariables"]
        assert variables == [{"key": "API_URL", "value": "two", "isSecret": False, "description": None}]
        assert configured.delete("/deployment/production/variables/API_URL").status_code == 200
        assert configured.get("/deployment/production").json()["environmentVariables"] == []

    def test_deploy_and_rollback(self, configured):
        response = configured.post("/deployment/production/deploy")
        assert response.status_code == 200
        result = response.json()
        assert result["success"] is True
        assert result["deploymentUrl"] == "https://edpsychconnect.com"

        deployment_id = result["deploymentId"]
        assert configured.get(f"/deployment/deployments/{deployment_id}").json()["status"] == "ready"
        assert configured.post(f"/deployment/deployments/{deployment_id}/rollback").status_code == 200
        assert configured.post(f"/deployment/deployments/{deployment_id}/rollback").status_code == 409
        assert len(configured.get("/deployment/deployments").json()) == 1

    def test_deploy_without_config_is_404(self, client):
        response = client.post("/deployment/staging/deploy")
        assert response.status_code == 404

    def test_singleton_routes(self, client):
        assert client.get("/deployment/monitoring").status_code == 404
        assert client.patch("/deployment/monitoring", json={"provider": "datadog"}).status_code == 404
        response = client.put("/deployment/monitoring", json={"errorTracking": {"environment": "production"}})
        assert response.status_code == 201
        assert response.json() == {"id": "monitoring-config"}
        assert client.patch("/deployment/monitoring", json={"provider": "datadog"}).status_code == 200
        assert client.get("/deployment/monitoring").json()["provider"] == "datadog"

    def test_dns_routes(self, client):
        response = client.post("/deployment/dns", json={"domain": "edpsychconnect.com", "records": []})
        assert response.status_code == 201
        record = {"type": "A", "name": "www", "value": "76.76.21.21"}
        assert client.post("/deployment/dns/edpsychconnect.com/records", json=record).status_code == 201
        assert client.get("/deployment/dns/edpsychconnect.com").json()["records"][0]["ttl"] == 3600
        assert client.delete("/deployment/dns/edpsychconnect.com/records/www").status_code == 200
        assert client.get("/deployment/dns/edpsychconnect.com").json()["records"] == []
        assert client.get("/deployment/dns/example.org").status_code == 404

    def test_documentation(self, configured):
        body = configured.get("/deployment/documentation").json()
        assert set(body) == {
            "setupInstructions",
            "environmentVariables",
            "cicdConfiguration",
            "dnsConfiguration",
            "securityConfiguration",
            "monitoringConfiguration",
        }


class TestAlertRoutes:
    def test_register_trigger_and_inspect(self, client):
        response = client.post("/alerts", json={"name": "memory", "threshold": 90, "cooldown_seconds": 60})
        assert response.status_code == 201

        response = client.post("/alerts/memory/trigger", json={"value": 92, "context": {"host": "web-1"}})
        body = response.json()
        assert body["triggered"] is True
        assert body["state"]["fire_count"] == 1

        response = client.post("/alerts/memory/trigger", json={"value": 50})
        assert response.json()["triggered"] is False
        assert client.get("/alerts/memory").json()["triggered"] is False
        assert [a["name"] for a in client.get("/alerts").json()] == ["memory"]

    def test_unknown_alert(self, client):
        assert client.get("/alerts/disk").status_code == 404
        assert client.post("/alerts/disk/trigger", json={"value": 1}).status_code == 404
        assert client.delete("/alerts/disk").status_code == 404


class TestLearningRoutes:
    def test_questions(self, client):
        assert len(client.get("/learning/questions").json()) == 8

    def test_assessment_persists_result(self, client):
        answers = {"q1": "visual", "q2": "visual", "q3": "visual", "q4": "auditory"}
        response = client.post("/learning/assessment", json={"user_id": "u1", "answers": answers})
        assert response.status_code == 200
        body = response.json()
        assert body["id"] >= 1
        assert body["result"]["primary_style"] == "visual"
        assert body["result"]["visual"] == 75

    def test_assessment_rejects_empty_answers(self, client):
        response = client.post("/learning/assessment", json={"user_id": "u1", "answers": {}})
        assert response.status_code == 400

    def test_progress_and_recommendations(self, client):
        response = client.post("/learning/progress", json={"user_id": "u1", "module_id": "module1", "activity_id": "module1-a1"})
        assert response.status_code == 200
        assert response.json()["status"] == "in_progress"

        response = client.post("/learning/progress", json={"user_id": "u1", "module_id": "module1", "activity_id": "bogus"})
        assert response.status_code == 400

        response = client.get("/learning/recommendations/u1", params={"count": 2})
        assert [r["module_id"] for r in response.json()] == ["module1", "module3"]

    def test_achievements(self, client):
        ids = [a["id"] for a in client.get("/learning/achievements/u1").json()]
        assert ids == ["first-steps", "knowledge-seeker", "perfect-score"]

    def test_adapted_content(self, client):
        response = client.get("/learning/content/module1", params={"style": "visual", "activity_id": "module1-a1"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "visual-content" in response.text
        assert client.get("/learning/content/module9").status_code == 404

    def test_adapted_content_escapes_query_values(self, client):
        response = client.get(
            "/learning/content/module1",
            params={"style": "visual", "activity_id": "\"><script>alert(1)</script>"},
        )
        assert response.status_code == 200
        assert "<script>" not in response.text
        assert "data-activity=\"&quot;&gt;&lt;script&gt;alert(1)&lt;/script&gt;\"" in response.text


def test_info(client):
    assert client.get("/info").json()["status"] == "ok"
