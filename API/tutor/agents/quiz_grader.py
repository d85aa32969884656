from tutor.agents.base import BaseAgent

STRONG_THRESHOLD = 80
AVERAGE_THRESHOLD = 50


def performance_band(percentage: float) -> str:
    if percentage >= STRONG_THRESHOLD:
        return "strong"
    if percentage >= AVERAGE_THRESHOLD:
        return "average"
    return "weak"


class QuizGradingAgent(BaseAgent):
    async def run(self, input_data: dict) -> dict:
        questions = input_data["questions"]
        answers = input_data["answers"]

        graded = []
        score = 0
        for question, selected in zip(questions, answers):
            is_correct = selected is not None and selected == question["correct"]
            score += int(is_correct)
            graded.append(
                {
                    "question": question["question"],
                    "selected": selected,
                    "correct": question["correct"],
                    "is_correct": is_correct,
                }
            )

        exact = score / len(questions) * 100
        return {
            "score": score,
            "total_questions": len(questions),
            "percentage": int(exact + 0.5),
            "performance": performance_band(exact),
            "answers": graded,
        }
