"""
Progress Summary Agent — the numbers on the dashboard and progress pages.

Completed topics, tests taken, average score and performance counts overall,
plus completion per chapter and completed topics per subject.
"""
from tutor.agents.base import BaseAgent


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def average_score(results: list[dict]) -> int:
    if not results:
        return 0
    total = sum(r["score"] / r["total_questions"] * 100 for r in results)
    return _round_half_up(total / len(results))


def chapter_completion(completed_topic_ids: set[str], topic_ids: list[str]) -> int:
    if not topic_ids:
        return 0
    done = sum(1 for topic_id in set(topic_ids) if topic_id in completed_topic_ids)
    return _round_half_up(done / len(topic_ids) * 100)


class ProgressSummaryAgent(BaseAgent):
    async def run(self, input_data: dict) -> dict:
        subjects = input_data.get("subjects") or []
        progress = input_data.get("progress") or []
        results = input_data.get("test_results") or []

        completed = {row["topic_id"] for row in progress if row.get("completed")}

        chapters = []
        subject_totals = []
        for subject in subjects:
            subject_done = 0
            for chapter in subject.get("chapters", []):
                topic_ids = [t["id"] for t in chapter.get("topics", [])]
                done = len(completed.intersection(topic_ids))
                subject_done += done
                chapters.append(
                    {
                        "subject": subject["name"],
                        "chapter": chapter["name"],
                        "completed_topics": done,
                        "total_topics": len(topic_ids),
                        "percent": chapter_completion(completed, topic_ids),
                    }
                )
            subject_totals.append({"subject": subject["name"], "completed_topics": subject_done})

        return {
            "topics_completed": len(completed),
            "tests_taken": len(results),
            "average_score": average_score(results),
            "strong_count": sum(1 for r in results if r["performance"] == "strong"),
            "average_count": sum(1 for r in results if r["performance"] == "average"),
            "weak_count": sum(1 for r in results if r["performance"] == "weak"),
            "chapters": chapters,
            "subjects": subject_totals,
        }
