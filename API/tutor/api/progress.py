from fastapi import APIRouter

from tutor.agents.learner_insights import LearnerInsightsAgent
from tutor.agents.progress_summary import ProgressSummaryAgent
from tutor.agents.streak import StreakAgent
from tutor.schemas.insights import InsightsRequest, InsightsResponse
from tutor.schemas.progress import (
    ProgressSummaryRequest,
    ProgressSummaryResponse,
    StreakRequest,
    StreakResponse,
)

router = APIRouter(tags=["progress"])
streak_agent = StreakAgent()
summary_agent = ProgressSummaryAgent()
insights_agent = LearnerInsightsAgent()


@router.post("/progress/streak", response_model=StreakResponse)
async def record_activity(req: StreakRequest):
    """Apply one completed topic to the learner's streak and return the new profile values."""
    return await streak_agent.run(req.model_dump())


@router.post("/progress/summary", response_model=ProgressSummaryResponse)
async def progress_summary(req: ProgressSummaryRequest):
    return await summary_agent.run(req.model_dump())


@router.post("/profile/insights", response_model=InsightsResponse)
async def profile_insights(req: InsightsRequest):
    """Mastery map, mistake patterns, risk warnings and snapshot for the profile dashboard."""
    return await insights_agent.run(req.model_dump())
