"""HTTP surface tests using the Flask test client and a stub service."""

from unittest.mock import MagicMock

import pytest

from flowsketch.api.app import create_app
from flowsketch.config.settings import Settings
from flowsketch.core.exceptions import CompletionError, MissingCredentialError, SchemaError
from flowsketch.flowchart.fallback import fallback_flowchart
from flowsketch.generation.service import FlowchartService, GenerationResult


@pytest.fixture
def service():
    return MagicMock(spec=FlowchartService)


@pytest.fixture
def client(service):
    app = create_app(service=service, settings=Settings(api_key=None))
    app.config["TESTING"] = True
    return app.test_client()


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.get_json()
    assert body["ok"] is True
    assert body["service"] == "flowsketch-api"
    assert body["timestamp"]


class TestGenerateRoute:
    def test_short_prompt_is_rejected(self, client, service):
        response = client.post("/api/generate", json={"prompt": "  too short "})
        assert response.status_code == 400
        service.generate.assert_not_called()

    def test_returns_generation_result(self, client, service):
        document = fallback_flowchart("Plan a product launch", "balanced")
        service.generate.return_value = GenerationResult(flowchart=document)

        response = client.post(
            "/api/generate",
            json={"prompt": "  Plan a product launch  ", "detailLevel": "detailed", "audience": "execs"},
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["flowchart"]["title"] == document.title
        assert body["fallbackUsed"] is False
        service.generate.assert_called_once_with(
            "Plan a product launch", detail_level="detailed", audience="execs"
        )

    def test_missing_credentials_is_500(self, client, service):
        service.generate.side_effect = MissingCredentialError("Missing API key")
        response = client.post("/api/generate", json={"prompt": "Plan a product launch"})
        assert response.status_code == 500
        assert response.get_json()["error"] == "Missing API key"

    def test_other_generation_error_is_502(self, client, service):
        service.generate.side_effect = CompletionError("upstream broke")
        response = client.post("/api/generate", json={"prompt": "Plan a product launch"})
        assert response.status_code == 502

    def test_unexpected_error_is_502(self, client, service):
        service.generate.side_effect = RuntimeError("boom")
        response = client.post("/api/generate", json={"prompt": "Plan a product launch"})
        assert response.status_code == 502
        assert response.get_json()["error"] == "boom"


class TestRefineRoute:
    def test_requires_flowchart_object(self, client):
        response = client.post("/api/refine", json={"flowchart": "nope", "followUpPrompt": "add a step"})
        assert response.status_code == 400

    def test_requires_follow_up(self, client, canonical_flowchart):
        response = client.post(
            "/api/refine",
            json={"flowchart": canonical_flowchart.to_dict(), "followUpPrompt": "hi"},
        )
        assert response.status_code == 400

    def test_schema_error_is_400(self, client, service, canonical_flowchart):
        service.refine.side_effect = SchemaError("Flowchart failed schema validation", context={"errors": ["nodes"]})
        response = client.post(
            "/api/refine",
            json={"flowchart": canonical_flowchart.to_dict(), "followUpPrompt": "add a step"},
        )
        assert response.status_code == 400
        assert response.get_json()["details"] == ["nodes"]

    def test_returns_refined_document(self, client, service, canonical_flowchart):
        service.refine.return_value = GenerationResult(
            flowchart=canonical_flowchart, fallback_used=True, notice="kept"
        )
        response = client.post(
            "/api/refine",
            json={"flowchart": canonical_flowchart.to_dict(), "followUpPrompt": "add a step"},
        )
        assert response.status_code == 200
        assert response.get_json()["notice"] == "kept"


class TestImportRoute:
    def test_imports_wrapped_document(self, client, canonical_flowchart):
        response = client.post("/api/import", json={"flowchart": canonical_flowchart.to_dict()})
        assert response.status_code == 200
        assert [node["id"] for node in response.get_json()["flowchart"]["nodes"]] == canonical_flowchart.node_ids()

    def test_unsupported_shape_is_400(self, client):
        response = client.post("/api/import", json={"diagram": []})
        assert response.status_code == 400
        assert "Unsupported" in response.get_json()["error"]

    def test_schema_error_is_400(self, client, raw_factory):
        response = client.post("/api/import", json=raw_factory(nodes=[{"id": "a", "label": "A", "type": "start"}]))
        assert response.status_code == 400


class TestLayoutRoute:
    def test_layout_compact(self, client, canonical_flowchart):
        response = client.post(
            "/api/layout",
            json={"flowchart": canonical_flowchart.to_dict(), "direction": "COMPACT"},
        )
        assert response.status_code == 200
        body = response.get_json()
        assert body["direction"] in ("TB", "LR")
        assert len(body["nodes"]) == len(canonical_flowchart.nodes)
        assert body["edges"][0]["markerEnd"] == {"type": "arrowclosed"}

    def test_layout_requires_flowchart(self, client):
        response = client.post("/api/layout", json={"direction": "TB"})
        assert response.status_code == 400


class StubCompletion:
    def __init__(self, text):
        self.text = text

    def complete(self, *, system, messages):
        return self.text


def _client_with_completion(text):
    service = FlowchartService(StubCompletion(text))
    app = create_app(service=service, settings=Settings(api_key=None))
    app.config["TESTING"] = True
    return app.test_client()


class TestReturnedDocumentsCanBeSentBack:
    def test_failed_refinement_result_lays_out(self, raw_factory):
        client = _client_with_completion("not json")
        current = raw_factory(summary="s" * 990)

        refined = client.post(
            "/api/refine",
            json={"flowchart": current, "followUpPrompt": "Add a refund branch"},
        )
        assert refined.status_code == 200
        document = refined.get_json()["flowchart"]
        assert len(document["summary"]) <= 1000

        response = client.post("/api/layout", json={"flowchart": document, "direction": "TB"})
        assert response.status_code == 200

    def test_long_prompt_result_lays_out(self):
        client = _client_with_completion("not json")
        generated = client.post("/api/generate", json={"prompt": "order process " * 400})
        assert generated.status_code == 200
        document = generated.get_json()["flowchart"]
        assert len(document["sourcePrompt"]) == 5000

        response = client.post("/api/layout", json={"flowchart": document})
        assert response.status_code == 200

    def test_import_with_start_on_last_node(self, client, raw_factory):
        raw = raw_factory(
            nodes=[
                {"id": "a", "label": "A", "type": "process"},
                {"id": "b", "label": "B", "type": "start"},
            ],
            edges=[],
        )
        response = client.post("/api/import", json=raw)
        assert response.status_code == 200
        types = [node["type"] for node in response.get_json()["flowchart"]["nodes"]]
        assert types == ["start", "end"]
