from __future__ import annotations

import pytest

from tutor.agents.progress_summary import ProgressSummaryAgent, average_score, chapter_completion

SUBJECTS = [
    {
        "name": "Mathematics",
        "chapters": [
            {"name": "Integers", "topics": [{"id": "m1", "name": "Number line"}, {"id": "m2", "name": "Addition"}, {"id": "m3", "name": "Subtraction"}]},
            {"name": "Coming soon", "topics": []},
        ],
    },
    {
        "name": "Science",
        "chapters": [{"name": "Light", "topics": [{"id": "s1", "name": "Reflection"}]}],
    },
]


def _result(score, total, performance):
    return {"topic_id": "m1", "topic_name": "Number line", "score": score, "total_questions": total, "performance": performance, "weak_areas": []}


def test_average_score_rounds_half_up_and_is_zero_without_tests():
    assert average_score([]) == 0
    # (100 + 40 + 66.67) / 3 = 68.89
    assert average_score([_result(5, 5, "strong"), _result(2, 5, "weak"), _result(2, 3, "average")]) == 69
    # (50 + 75) / 2 = 62.5
    assert average_score([_result(1, 2, "average"), _result(3, 4, "average")]) == 63


def test_chapter_completion_handles_empty_chapter():
    assert chapter_completion({"m1"}, []) == 0
    assert chapter_completion({"m1"}, ["m1", "m2", "m3"]) == 33
    assert chapter_completion({"m1", "m2"}, ["m1", "m2", "m3"]) == 67
    assert chapter_completion({"m1", "m2", "m3"}, ["m1", "m2", "m3"]) == 100


@pytest.mark.asyncio
async def test_summary_with_no_rows():
    out = await ProgressSummaryAgent().run({"subjects": SUBJECTS, "progress": [], "test_results": []})
    assert out["topics_completed"] == 0
    assert out["tests_taken"] == 0
    assert out["average_score"] == 0
    assert (out["strong_count"], out["average_count"], out["weak_count"]) == (0, 0, 0)
    assert [c["percent"] for c in out["chapters"]] == [0, 0, 0]


def test_progress_summary_endpoint(client):
    payload = {
        "subjects": SUBJECTS,
        "progress": [
            {"topicId": "m1", "completed": True},
            {"topicId": "m2", "completed": True},
            {"topicId": "m3", "completed": False},
            {"topicId": "s1", "completed": True},
        ],
        "testResults": [
            {"topicId": "m1", "score": 5, "totalQuestions": 5, "performance": "strong"},
            {"topicId": "m2", "score": 3, "totalQuestions": 5, "performance": "average"},
            {"topicId": "s1", "score": 1, "totalQuestions": 5, "performance": "weak"},
        ],
    }
    resp = client.post("/progress/summary", json=payload)
    assert resp.status_code == 200
    body = resp.json()
    assert body["topicsCompleted"] == 3
    assert body["testsTaken"] == 3
    assert body["averageScore"] == 60
    assert (body["strongCount"], body["averageCount"], body["weakCount"]) == (1, 1, 1)
    assert body["chapters"] == [
        {"subject": "Mathematics", "chapter": "Integers", "completedTopics": 2, "totalTopics": 3, "percent": 67},
        {"subject": "Mathematics", "chapter": "Coming soon", "completedTopics": 0, "totalTopics": 0, "percent": 0},
        {"subject": "Science", "chapter": "Light", "completedTopics": 1, "totalTopics": 1, "percent": 100},
    ]
    assert body["subjects"] == [
        {"subject": "Mathematics", "completedTopics": 2},
        {"subject": "Science", "completedTopics": 1},
    ]


def test_progress_summary_rejects_zero_question_results(client):
    resp = client.post(
        "/progress/summary",
        json={"testResults": [{"topicId": "m1", "score": 0, "totalQuestions": 0, "performance": "weak"}]},
    )
    assert resp.status_code == 422
    assert set(resp.json()) == {"error", "details"}
