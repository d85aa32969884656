from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException

from tutor.api.chat import router as chat_router
from tutor.api.health import router as health_router
from tutor.api.progress import router as progress_router
from tutor.api.quiz import router as quiz_router
from tutor.core.auth import bearer_auth_middleware
from tutor.core.cors import cors_middleware
from tutor.core.errors import (
    TutorError,
    http_exception_handler,
    request_id_middleware,
    tutor_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from tutor.core.logging import configure_logging
from tutor.core.settings import settings


configure_logging(settings.log_level, known_secrets=(settings.ai_gateway_api_key, settings.gateway_bearer_token))

app = FastAPI(title="NCERT Tutor API", version="0.1.0")
app.include_router(health_router)
app.include_router(chat_router)
app.include_router(quiz_router)
app.include_router(progress_router)
app.middleware("http")(bearer_auth_middleware)
app.middleware("http")(request_id_middleware)
# Outermost: preflight short-circuits before auth, and error responses still get the headers.
app.middleware("http")(cors_middleware)
app.add_exception_handler(TutorError, tutor_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


def run() -> None:
    import uvicorn

    uvicorn.run("tutor.main:app", host=settings.app_host, port=settings.app_port, log_level=settings.log_level.lower())
