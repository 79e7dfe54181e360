"""Tests for the FastAPI web interface."""

import base64

import pytest
from fastapi.testclient import TestClient

from conftest import FakeEmbedder
from textbook_tutor.interfaces.web_app import create_app
from textbook_tutor.rag.pipeline import StudyPipeline
from textbook_tutor.rag.retriever import Retriever


def _ingest(test_client, pdf_bytes, file_name="biology.pdf"):
    return test_client.post(
        "/api/ingest",
        json={"pdf": base64.b64encode(pdf_bytes).decode(), "fileName": file_name},
    )


@pytest.fixture()
def index_path(test_client, sample_pdf):
    return _ingest(test_client, sample_pdf).json()["vectorStorePath"]


# ── Health ───────────────────────────────────────────────────────────────────


class TestHealth:
    def test_health_ok(self, test_client):
        resp = test_client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["provider"] == "groq"
        assert "api_key" not in body


# ── Method handling ──────────────────────────────────────────────────────────


class TestMethodNotAllowed:
    @pytest.mark.parametrize("path", ["/api/ingest", "/api/query"])
    def test_get_is_rejected_with_envelope(self, test_client, path):
        resp = test_client.get(path)
        assert resp.status_code == 405
        body = resp.json()
        assert body["success"] is False
        assert body["error"]


# ── POST /api/ingest ────────────────────────────────────────────────────────


class TestIngest:
    def test_returns_location_and_count(self, test_client, sample_pdf):
        resp = _ingest(test_client, sample_pdf)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["vectorStorePath"]
        assert body["chunkCount"] > 0
        assert "biology.pdf" in body["message"]

    def test_rejects_invalid_base64(self, test_client):
        resp = test_client.post("/api/ingest", json={"pdf": "***not base64***", "fileName": "a.pdf"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_rejects_non_pdf_bytes(self, test_client):
        resp = _ingest(test_client, b"just some text", "notes.pdf")
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert "notes.pdf" in body["error"]

    def test_rejects_missing_file_name(self, test_client, sample_pdf):
        resp = test_client.post("/api/ingest", json={"pdf": base64.b64encode(sample_pdf).decode()})
        assert resp.status_code == 422
        body = resp.json()
        assert body["success"] is False
        assert "fileName" in body["error"]

    def test_rejects_empty_pdf_field(self, test_client):
        resp = test_client.post("/api/ingest", json={"pdf": "", "fileName": "a.pdf"})
        assert resp.status_code == 422


# ── POST /api/query ─────────────────────────────────────────────────────────


class TestQuery:
    def test_returns_answer(self, test_client, index_path, fake_generator):
        resp = test_client.post(
            "/api/query",
            json={
                "question": "What is osmosis?",
                "vectorStorePath": index_path,
                "modelName": "llama-3.1-8b-instant",
                "learningStyle": "Visual",
                "complexityLevel": "Beginner",
                "includeExamples": True,
                "includeAnalogies": False,
                "includeQuestions": True,
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body == {"success": True, "answer": fake_generator.answer}

        call = fake_generator.calls[0]
        assert call["model_name"] == "llama-3.1-8b-instant"
        assert "Question: What is osmosis?" in call["prompt"]
        assert "Visual learning style" in call["prompt"]

    def test_study_guide_kind(self, test_client, index_path, fake_generator):
        resp = test_client.post(
            "/api/query",
            json={"question": "Photosynthesis", "vectorStorePath": index_path, "kind": "study-guide"},
        )
        assert resp.status_code == 200
        assert "Question: Create a study guide on Photosynthesis." in fake_generator.calls[0]["prompt"]

    def test_client_api_key_is_ignored(self, test_client, index_path, fake_generator):
        resp = test_client.post(
            "/api/query",
            json={
                "question": "What is a cell?",
                "vectorStorePath": index_path,
                "groqApiKey": "client-supplied-key",
            },
        )
        assert resp.status_code == 200
        assert fake_generator.calls[0]["credentials"].api_key == "server-side-key"
        assert "client-supplied-key" not in fake_generator.calls[0]["prompt"]

    def test_unknown_index_is_404(self, test_client, tmp_path, fake_generator):
        resp = test_client.post(
            "/api/query",
            json={"question": "What is a cell?", "vectorStorePath": str(tmp_path / "missing")},
        )
        assert resp.status_code == 404
        assert resp.json()["success"] is False
        assert fake_generator.calls == []

    def test_rejects_empty_question(self, test_client, index_path):
        resp = test_client.post("/api/query", json={"question": "", "vectorStorePath": index_path})
        assert resp.status_code == 422
        assert resp.json()["success"] is False

    def test_rejects_unparseable_body(self, test_client):
        resp = test_client.post(
            "/api/query",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["success"] is False
        assert body["error"].startswith("Invalid request")

    def test_rejects_missing_path(self, test_client):
        resp = test_client.post("/api/query", json={"question": "What is a cell?"})
        assert resp.status_code == 422

    def test_rejects_unknown_kind(self, test_client, index_path):
        resp = test_client.post(
            "/api/query",
            json={"question": "Cells", "vectorStorePath": index_path, "kind": "quiz"},
        )
        assert resp.status_code == 422

    def test_upstream_failure_is_502(self, test_client, index_path, fake_generator):
        def boom(prompt, model_name, credentials):
            raise ConnectionError("LLM unreachable")

        fake_generator.generate = boom
        resp = test_client.post(
            "/api/query",
            json={"question": "What is a cell?", "vectorStorePath": index_path},
        )
        assert resp.status_code == 502
        assert resp.json() == {"success": False, "error": "LLM unreachable"}

    def test_missing_server_key_is_500(self, test_client, index_path, fake_generator):
        from textbook_tutor.errors import MissingCredentialsError

        def no_key(prompt, model_name, credentials):
            raise MissingCredentialsError("No Groq API key configured on the server.")

        fake_generator.generate = no_key
        resp = test_client.post(
            "/api/query",
            json={"question": "What is a cell?", "vectorStorePath": index_path},
        )
        assert resp.status_code == 500
        assert "API key" in resp.json()["error"]

    def test_embedding_model_mismatch_is_409(
        self, index_path, tmp_path, fake_generator, credentials
    ):
        other_app = create_app(
            pipeline=StudyPipeline(
                retriever=Retriever(embedder=FakeEmbedder("other-model")),
                generator=fake_generator,
                vector_store_dir=tmp_path / "vector_stores",
                upload_dir=tmp_path / "uploads",
            ),
            credentials=credentials,
        )
        resp = TestClient(other_app).post(
            "/api/query",
            json={"question": "What is a cell?", "vectorStorePath": index_path},
        )
        assert resp.status_code == 409
        body = resp.json()
        assert body["success"] is False
        assert "other-model" in body["error"]
        assert fake_generator.calls == []
