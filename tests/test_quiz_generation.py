from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from tutor.agents.quiz_generator import QUIZ_TOOL_NAME, extract_tool_arguments
from tutor.core.errors import UpstreamFailureError
from tutor.main import app

QUESTIONS = [
    {
        "question": f"What is {n} + (-{n})?",
        "options": ["0", str(n), str(-n), str(2 * n)],
        "correct": 0,
        "explanation": "A number plus its additive inverse is zero.",
    }
    for n in range(1, 6)
]


def _tool_call_completion(arguments) -> dict:
    return {
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {"name": QUIZ_TOOL_NAME, "arguments": arguments},
                        }
                    ],
                }
            }
        ]
    }


def test_generate_quiz_returns_tool_arguments_verbatim(client, upstream):
    arguments = json.dumps({"questions": QUESTIONS})
    upstream.handler = lambda request: httpx.Response(200, json=_tool_call_completion(arguments))

    resp = client.post("/generate-quiz", json={"topicName": "Integers", "grade": 6, "questionCount": 5})
    assert resp.status_code == 200
    body = resp.json()
    assert body == {"questions": QUESTIONS}
    assert all(len(q["options"]) == 4 for q in body["questions"])
    assert [q["correct"] for q in body["questions"]] == [0] * 5


def test_generate_quiz_forces_the_tool_call(client, upstream):
    upstream.handler = lambda request: httpx.Response(200, json=_tool_call_completion('{"questions": []}'))
    client.post("/generate-quiz", json={"topicName": "Fractions", "grade": 7})

    sent = upstream.last_json()
    assert "stream" not in sent
    assert sent["tool_choice"] == {"type": "function", "function": {"name": "generate_quiz"}}
    assert [t["function"]["name"] for t in sent["tools"]] == ["generate_quiz"]
    assert sent["messages"][0]["role"] == "system"
    assert "Grade 7" in sent["messages"][0]["content"]
    assert '"Fractions"' in sent["messages"][0]["content"]
    # questionCount defaults to 5
    assert "exactly 5 multiple choice questions" in sent["messages"][0]["content"]
    assert sent["messages"][1] == {
        "role": "user",
        "content": 'Generate 5 quiz questions about "Fractions" for Grade 7.',
    }


def test_generate_quiz_does_not_validate_upstream_payload(client, upstream):
    odd = {"questions": [{"question": "Pick one", "options": ["a", "b"], "correct": 9, "explanation": ""}], "extra": 1}
    upstream.handler = lambda request: httpx.Response(200, json=_tool_call_completion(json.dumps(odd)))
    resp = client.post("/generate-quiz", json={"topicName": "Sets", "grade": 11, "questionCount": 3})
    assert resp.status_code == 200
    assert resp.json() == odd


def test_generate_quiz_without_tool_call_is_500(client, upstream):
    upstream.handler = lambda request: httpx.Response(
        200, json={"choices": [{"message": {"role": "assistant", "content": "Here are some questions..."}}]}
    )
    resp = client.post("/generate-quiz", json={"topicName": "Light", "grade": 8})
    assert resp.status_code == 500
    assert resp.json()["error"]


def test_generate_quiz_with_unparsable_arguments_is_500(client, upstream):
    upstream.handler = lambda request: httpx.Response(200, json=_tool_call_completion('{"questions": [{"question": '))
    resp = client.post("/generate-quiz", json={"topicName": "Light", "grade": 8})
    assert resp.status_code == 500
    assert "Invalid quiz payload" in resp.json()["error"]


def test_generate_quiz_upstream_error_is_500(client, upstream):
    upstream.handler = lambda request: httpx.Response(500, text="boom")
    resp = client.post("/generate-quiz", json={"topicName": "Light", "grade": 8})
    assert resp.status_code == 500
    assert len(upstream.requests) == 1


def test_generate_quiz_rate_limit_is_translated(client, upstream):
    upstream.handler = lambda request: httpx.Response(429)
    resp = client.post("/generate-quiz", json={"topicName": "Light", "grade": 8})
    assert resp.status_code == 429
    assert resp.json() == {"error": "Rate limit exceeded"}


def test_generate_quiz_requires_topic_and_grade(client, upstream):
    resp = client.post("/generate-quiz", json={"questionCount": 5})
    assert resp.status_code == 422
    assert upstream.requests == []


def test_extract_tool_arguments_accepts_object_arguments():
    assert extract_tool_arguments(_tool_call_completion({"questions": []})) == {"questions": []}


@pytest.mark.parametrize(
    "completion",
    [
        {},
        {"choices": []},
        {"choices": [{"message": {"tool_calls": []}}]},
        {"choices": [{"message": {"tool_calls": [{"function": {"arguments": 42}}]}}]},
    ],
)
def test_extract_tool_arguments_missing_call_is_fatal(completion):
    with pytest.raises(UpstreamFailureError) as excinfo:
        extract_tool_arguments(completion)
    assert str(excinfo.value) == "Failed to generate quiz"


def test_unserializable_quiz_payload_500_keeps_cors_and_request_id(upstream):
    # NaN parses but cannot be re-encoded, so the catch-all handler answers.
    upstream.handler = lambda request: httpx.Response(200, json=_tool_call_completion('{"questions": [NaN]}'))
    with TestClient(app, raise_server_exceptions=False) as unsafe_client:
        resp = unsafe_client.post(
            "/generate-quiz",
            json={"topicName": "Light", "grade": 8},
            headers={"x-request-id": "req-nan"},
        )
    assert resp.status_code == 500
    assert set(resp.json()) == {"error"}
    assert resp.json()["error"]
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["x-request-id"] == "req-nan"
