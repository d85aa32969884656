from starlette.requests import Request
from starlette.responses import JSONResponse

from tutor.core.settings import settings


EXEMPT_PATH_PREFIXES = (
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
)


def _bearer_token(request: Request) -> str:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


async def bearer_auth_middleware(request: Request, call_next):
    if settings.gateway_auth_enabled and request.method != "OPTIONS":
        path = request.url.path
        if not any(path.startswith(prefix) for prefix in EXEMPT_PATH_PREFIXES):
            provided = _bearer_token(request)
            if not settings.gateway_bearer_token or provided != settings.gateway_bearer_token:
                return JSONResponse(
                    status_code=401,
                    content={"error": "Unauthorized: invalid or missing bearer token"},
                )
    return await call_next(request)
