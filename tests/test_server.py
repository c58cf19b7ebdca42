"""HTTP tests for the chat cache API."""

from unittest.mock import patch

import pytest
from starlette.testclient import TestClient

from ChatEntry import ChatEntry
from Config import Settings
from Errors import StorageError, UpstreamError
from Server import create_app

ORIGIN = "http://localhost:3000"


@pytest.fixture
def settings():
    return Settings(answer_service_url="http://answers.test", allowed_origins=(ORIGIN,))


@pytest.fixture
def client(settings, store, answer_client):
    return TestClient(create_app(settings, store=store, answer_client=answer_client))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_process_question_round_trip(client, answer_client):
    first = client.post("/process_question", json={"question": "What is X?"})
    second = client.post("/process_question", json={"question": "what IS X?"})

    assert first.status_code == 200
    assert first.json()["answer"] == "Go to settings"
    assert second.json() == first.json()
    assert answer_client.questions == ["What is X?"]


def test_process_question_requires_question(client):
    response = client.post("/process_question", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "question is required"}


def test_process_question_rejects_invalid_json(client):
    response = client.post("/process_question", content=b"{not json", headers={"content-type": "application/json"})
    assert response.status_code == 400


def test_process_question_upstream_failure(client, answer_client):
    answer_client.error = UpstreamError("Answer service request failed")

    response = client.post("/process_question", json={"question": "What is X?"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to process the question."}
    assert ChatEntry.objects.count() == 0


def test_store_chat_create_then_update(client):
    body = {"question": "How to reset password", "category": "password", "answer": "Go to settings", "feedback": "neutral"}

    created = client.post("/storeChat", json=body)
    updated = client.post("/storeChat", json={**body, "feedback": "thumbsUp"})

    assert created.status_code == 200
    assert created.json()["message"] == "Chat history saved."
    assert updated.json() == {"_id": created.json()["_id"], "message": "Chat updated"}

    entry = ChatEntry.objects.get(id=created.json()["_id"])
    assert entry.category == "password"
    assert entry.thumbs_up == 1
    assert entry.count == 1


def test_store_chat_rejects_unknown_feedback(client):
    response = client.post("/storeChat", json={"question": "q", "category": "c", "answer": "a", "feedback": "meh"})
    assert response.status_code == 400


def test_store_chat_storage_failure(client, store):
    with patch.object(store, "update_classification", side_effect=StorageError("update_classification failed")):
        response = client.post("/storeChat", json={"question": "q", "category": "c", "answer": "a"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to save chat history."}


def test_faqs_by_category(client):
    for question in ("Support hours", "Support email", "Billing date"):
        client.post("/storeChat", json={"question": question, "category": question.split()[0], "answer": "a"})

    response = client.get("/faqs", params={"category": "Support"})

    assert response.status_code == 200
    assert {faq["question"] for faq in response.json()} == {"Support hours", "Support email"}


def test_faqs_top_overall(client):
    client.post("/process_question", json={"question": "What is X?"})
    client.post("/process_question", json={"question": "What is X?"})
    client.post("/storeChat", json={"question": "Reset password", "category": "password", "answer": "a"})

    response = client.get("/faqs", params={"category": "faqs"})

    assert [(faq["_id"], faq["count"]) for faq in response.json()] == [("what is x", 2), ("reset password", 1)]


def test_faqs_storage_failure(client, store):
    with patch.object(store, "top_by_thumbs_up", side_effect=StorageError("top_by_thumbs_up failed")):
        response = client.get("/faqs")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch FAQs."}


def test_update_feedback(client):
    chat_id = client.post("/process_question", json={"question": "What is X?"}).json()["_id"]

    client.put(f"/updateFeedback/{chat_id}", json={"feedback": "thumbsUp"})
    response = client.put(f"/updateFeedback/{chat_id}", json={"feedback": "thumbsUp"})

    assert response.status_code == 200
    assert response.json()["message"] == "Feedback updated successfully."
    assert response.json()["chat"]["thumbsUp"] == 2
    assert response.json()["chat"]["feedback"] == "thumbsUp"


def test_update_feedback_without_body_sets_neutral(client):
    chat_id = client.post("/process_question", json={"question": "What is X?"}).json()["_id"]

    response = client.put(f"/updateFeedback/{chat_id}")

    assert response.status_code == 200
    assert response.json()["chat"]["feedback"] == "neutral"


def test_update_feedback_unknown_id(client):
    response = client.put("/updateFeedback/nonexistent-id", json={"feedback": "thumbsUp"})

    assert response.status_code == 404
    assert response.json() == {"error": "Chat not found."}


def test_disallowed_origin_is_rejected(client):
    response = client.get("/faqs", headers={"Origin": "https://evil.example"})

    assert response.status_code == 403
    assert response.json() == {"error": "Not allowed by CORS"}


def test_allowed_origin_gets_cors_headers(client):
    response = client.get("/faqs", headers={"Origin": ORIGIN})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == ORIGIN


def test_preflight_from_allowed_origin(client):
    response = client.options(
        "/storeChat",
        headers={"Origin": ORIGIN, "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
