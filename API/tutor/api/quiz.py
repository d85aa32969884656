from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tutor.agents.quiz_generator import QuizGenerationAgent
from tutor.agents.quiz_grader import QuizGradingAgent
from tutor.core.gateway import AIGatewayClient, get_gateway
from tutor.schemas.quiz import GradeQuizRequest, GradeQuizResponse, QuizRequest

router = APIRouter(tags=["quiz"])
grading_agent = QuizGradingAgent()


@router.post("/generate-quiz")
async def generate_quiz(req: QuizRequest, gateway: AIGatewayClient = Depends(get_gateway)):
    agent = QuizGenerationAgent(gateway)
    quiz = await agent.run(
        {
            "topic_name": req.topic_name,
            "grade": req.grade,
            "question_count": req.question_count,
        }
    )
    # Passed through as parsed; a response_model would coerce or drop fields.
    return JSONResponse(content=quiz)


@router.post("/quiz/grade", response_model=GradeQuizResponse)
async def grade_quiz(req: GradeQuizRequest):
    return await grading_agent.run(
        {
            "questions": [q.model_dump() for q in req.questions],
            "answers": req.answers,
        }
    )
