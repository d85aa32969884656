"""
Learner Insights Agent — turns progress and quiz-result rows into the profile dashboard.

Four views, all computed from the rows the caller fetched:
mastery map per chapter, recurring mistake patterns, prerequisite risk
warnings and an overall learning snapshot.
"""
from collections import defaultdict

from tutor.agents.base import BaseAgent
from tutor.core.logging import DOMAIN_INSIGHTS, get_domain_logger

logger = get_domain_logger(__name__, DOMAIN_INSIGHTS)

MASTERED_THRESHOLD = 0.8
IN_PROGRESS_THRESHOLD = 0.5
COMPLETION_TARGET_TOPICS = 20
MAX_PATTERNS = 5
MAX_ALERTS = 3

MISTAKE_CATEGORIES = [
    {
        "type": "Sign Errors",
        "keywords": ["negative", "minus", "sign", "integer"],
        "description": "Mistakes with positive/negative numbers",
        "suggestion": "Practice integer operations with number lines",
    },
    {
        "type": "Assumption Without Reasoning",
        "keywords": ["assumption", "reasoning", "proof", "explain"],
        "description": "Jumping to conclusions without steps",
        "suggestion": "Write out each step before answering",
    },
    {
        "type": "Word Problem Misinterpretation",
        "keywords": ["word", "problem", "application", "real"],
        "description": "Difficulty understanding problem context",
        "suggestion": "Underline key information in word problems",
    },
    {
        "type": "Calculation Errors",
        "keywords": ["calculate", "arithmetic", "compute", "math"],
        "description": "Basic arithmetic mistakes",
        "suggestion": "Double-check calculations before submitting",
    },
    {
        "type": "Concept Confusion",
        "keywords": ["concept", "understand", "definition", "theory"],
        "description": "Mixing up related concepts",
        "suggestion": "Create comparison charts for similar concepts",
    },
]

PRACTICE_NEEDED = {
    "type": "Practice Needed",
    "description": "More practice required in tested areas",
    "suggestion": "Review topics and retake quizzes",
}

# advanced topic -> prerequisites, lower-cased
TOPIC_PREREQUISITES: dict[str, list[str]] = {
    "linear equations": ["integers", "fractions", "algebraic expressions"],
    "quadratic equations": ["linear equations", "factorization", "algebraic expressions"],
    "polynomials": ["algebraic expressions", "integers", "exponents"],
    "coordinate geometry": ["linear equations", "graphs", "number systems"],
    "mensuration": ["geometry", "area", "perimeter"],
    "statistics": ["data handling", "graphs", "averages"],
    "probability": ["fractions", "statistics", "ratios"],
    "chemical equations": ["atoms", "molecules", "elements"],
    "chemical reactions": ["chemical equations", "atoms", "periodic table"],
    "electricity": ["atoms", "current", "circuits"],
    "magnetism": ["electricity", "magnetic field"],
    "light": ["reflection", "refraction", "mirrors"],
    "force": ["motion", "newton", "gravity"],
}


def _ratio(result: dict) -> float:
    return result["score"] / result["total_questions"]


def _capitalize_words(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


def _overlaps(a: str, b: str) -> bool:
    return a in b or b in a


def topic_mastery(topic_id: str, progress_by_topic: dict[str, dict], results_by_topic: dict[str, list[dict]]) -> str:
    topic_progress = progress_by_topic.get(topic_id)
    topic_results = results_by_topic.get(topic_id, [])

    if not topic_progress and not topic_results:
        return "not-started"

    if topic_results:
        avg = sum(_ratio(r) for r in topic_results) / len(topic_results)
        if avg >= MASTERED_THRESHOLD:
            return "mastered"
        if avg >= IN_PROGRESS_THRESHOLD:
            return "in-progress"
        return "weak"

    if topic_progress and topic_progress.get("completed"):
        return "in-progress"
    return "not-started"


def chapter_mastery(statuses: list[str]) -> dict:
    total = len(statuses)
    mastered = statuses.count("mastered")
    in_progress = statuses.count("in-progress")
    weak = statuses.count("weak")

    if total == 0:
        status = "not-started"
    elif mastered == total:
        status = "mastered"
    elif weak > mastered:
        status = "weak"
    elif in_progress > 0 or mastered > 0:
        status = "in-progress"
    else:
        status = "not-started"
    return {"status": status, "mastered": mastered, "weak": weak, "total": total}


def build_mastery_map(subjects: list[dict], progress: list[dict], results: list[dict]) -> list[dict]:
    progress_by_topic: dict[str, dict] = {}
    for row in progress:
        progress_by_topic.setdefault(row["topic_id"], row)
    results_by_topic: dict[str, list[dict]] = defaultdict(list)
    for row in results:
        results_by_topic[row["topic_id"]].append(row)

    mastery_map = []
    for subject in subjects:
        for chapter in subject.get("chapters", []):
            topics = {
                t["id"]: topic_mastery(t["id"], progress_by_topic, results_by_topic)
                for t in chapter.get("topics", [])
            }
            summary = chapter_mastery(list(topics.values()))
            mastery_map.append(
                {
                    "subject": subject["name"],
                    "chapter": chapter["name"],
                    "topics": topics,
                    **summary,
                }
            )
    return mastery_map


def detect_mistake_patterns(results: list[dict]) -> list[dict]:
    if not results:
        return []

    counts: dict[str, int] = {}
    unmatched_weak = 0
    for result in results:
        if result["performance"] not in ("weak", "average"):
            continue
        topic_name = (result.get("topic_name") or "").lower()
        weak_areas = [str(area).lower() for area in result.get("weak_areas") or [] if area]

        matched = False
        for category in MISTAKE_CATEGORIES:
            hit = any(
                keyword in topic_name or any(keyword in area for area in weak_areas)
                for keyword in category["keywords"]
            )
            if hit:
                counts[category["type"]] = counts.get(category["type"], 0) + 1
                matched = True
        if not matched and result["performance"] == "weak":
            unmatched_weak += 1

    patterns = [
        {**{k: v for k, v in category.items() if k != "keywords"}, "count": counts[category["type"]]}
        for category in MISTAKE_CATEGORIES
        if category["type"] in counts
    ]
    if unmatched_weak:
        patterns.append({**PRACTICE_NEEDED, "count": unmatched_weak})

    patterns.sort(key=lambda p: p["count"], reverse=True)
    return patterns[:MAX_PATTERNS]


def detect_risk_alerts(progress: list[dict], results: list[dict]) -> list[dict]:
    weak_topics: list[str] = []
    for result in results:
        name = (result.get("topic_name") or "").lower()
        if result["performance"] == "weak" and name and name not in weak_topics:
            weak_topics.append(name)

    completed_topics = {
        (row.get("topic_name") or "").lower()
        for row in progress
        if row.get("completed") and row.get("topic_name")
    }

    alerts: list[dict] = []
    seen: set[tuple[str, str]] = set()
    for advanced, prerequisites in TOPIC_PREREQUISITES.items():
        for prereq in prerequisites:
            if len(alerts) >= MAX_ALERTS:
                return alerts
            is_weak = any(_overlaps(weak, prereq) for weak in weak_topics)
            is_incomplete = not any(_overlaps(done, prereq) for done in completed_topics)
            if not (is_weak or is_incomplete) or (prereq, advanced) in seen:
                continue
            seen.add((prereq, advanced))
            alerts.append(
                {
                    "id": f"{prereq}-{advanced}",
                    "severity": "high" if is_weak else "medium",
                    "title": "Potential Challenge Ahead",
                    "description": (
                        f"You may struggle with {_capitalize_words(advanced)} "
                        f"due to gaps in {_capitalize_words(prereq)}"
                    ),
                    "weak_topic": prereq,
                    "affected_topic": advanced,
                    "suggested_action": f"Revise {_capitalize_words(prereq)}",
                    "suggested_path": "/subjects",
                }
            )

    if not alerts and weak_topics:
        plural = "s" if len(weak_topics) != 1 else ""
        alerts.append(
            {
                "id": "general-weak",
                "severity": "medium",
                "title": "Areas Needing Attention",
                "description": (
                    f"You have {len(weak_topics)} topic{plural} with weak performance "
                    "that may affect future learning"
                ),
                "weak_topic": weak_topics[0],
                "affected_topic": "advanced topics",
                "suggested_action": "Review weak topics before moving forward",
                "suggested_path": "/progress",
            }
        )
    return alerts[:MAX_ALERTS]


def health_score(progress: list[dict], results: list[dict]) -> int:
    if not results and not progress:
        return 0
    avg_test = sum(_ratio(r) * 100 for r in results) / len(results) if results else 50.0
    completed = sum(1 for p in progress if p.get("completed"))
    completion_rate = min(completed / COMPLETION_TARGET_TOPICS * 100, 100.0)
    strong = sum(1 for r in results if r["performance"] == "strong")
    consistency = strong / len(results) * 100 if results else 50.0
    return int(avg_test * 0.4 + completion_rate * 0.3 + consistency * 0.3 + 0.5)


def learning_style(results: list[dict]) -> tuple[str, str]:
    if len(results) < 3:
        return "Exploring", "Take more quizzes to discover your style"
    avg = sum(_ratio(r) for r in results) / len(results)
    strong = sum(1 for r in results if r["performance"] == "strong")
    weak = sum(1 for r in results if r["performance"] == "weak")
    if avg > 0.8 and strong > weak * 2:
        return "Quick Learner", "You grasp concepts rapidly and excel in tests"
    if avg > 0.6:
        return "Steady Builder", "You learn through consistent practice"
    if weak > strong:
        return "Deep Diver", "You benefit from thorough explanations"
    return "Visual Thinker", "You learn best with examples and diagrams"


class LearnerInsightsAgent(BaseAgent):
    async def run(self, input_data: dict) -> dict:
        subjects = input_data.get("subjects") or []
        progress = input_data.get("progress") or []
        results = input_data.get("test_results") or []
        profile = input_data.get("profile") or {}

        style, style_description = learning_style(results)
        snapshot = {
            "health_score": health_score(progress, results),
            "learning_style": style,
            "learning_style_description": style_description,
            "strong_results": sum(1 for r in results if r["performance"] == "strong"),
            "current_streak": int(profile.get("current_streak") or 0),
            "longest_streak": int(profile.get("longest_streak") or 0),
        }
        warnings = detect_risk_alerts(progress, results)
        logger.info(
            "Insights computed | results=%s progress=%s warnings=%s health=%s",
            len(results),
            len(progress),
            len(warnings),
            snapshot["health_score"],
        )
        return {
            "mastery_map": build_mastery_map(subjects, progress, results),
            "mistake_patterns": detect_mistake_patterns(results),
            "warnings": warnings,
            "snapshot": snapshot,
        }
