import logging
import re
import sys
# Domain names for structured logging (chat relay, quiz generation, progress, learner insights).
DOMAIN_CHAT = "chat"
DOMAIN_QUIZ = "quiz"
DOMAIN_PROGRESS = "progress"
DOMAIN_INSIGHTS = "insights"


def get_domain_logger(name: str, domain: str) -> logging.LoggerAdapter[logging.Logger]:
    """Return a logger that adds the given domain to every log record (for filtering by domain)."""
    base = logging.getLogger(name)
    return logging.LoggerAdapter(base, {"domain": domain})


class DomainDefaultFilter(logging.Filter):
    """Ensure record has a 'domain' attribute so format string %(domain)s never fails."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "domain"):
            record.domain = "app"  # type: ignore[attr-defined]
        return True


# The service holds two secrets: the AI gateway key and the app bearer token.
# Both travel as "Authorization: Bearer ..." and may surface in httpx error text
# or a misconfigured env dump (AI_GATEWAY_API_KEY=..., GATEWAY_BEARER_TOKEN=...).
_SECRET_PATTERNS = [
    re.compile(r"(?i)(authorization\s*[=:]\s*bearer\s+)([^\s,;\"']+)"),
    re.compile(r"(?i)(bearer\s+)([A-Za-z0-9._~+/\-]{12,}=*)"),
    re.compile(r"(?i)((?:ai_gateway_api_key|gateway_bearer_token)\s*[=:]\s*)([^\s,;]+)"),
]


def redact_secrets(message: str, known_secrets: tuple[str, ...] = ()) -> str:
    text = str(message or "")
    for secret in known_secrets:
        if secret:
            text = text.replace(secret, "[REDACTED]")
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(r"\1[REDACTED]", text)
    return text


class SecretRedactionFilter(logging.Filter):
    """Masks configured secret values verbatim, then anything shaped like one."""

    def __init__(self, known_secrets: tuple[str, ...] = ()):
        super().__init__()
        self.known_secrets = tuple(s for s in known_secrets if s)

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact_secrets(record.getMessage(), self.known_secrets)
        record.args = ()
        return True


class SuppressHealthCheckFilter(logging.Filter):
    """Drop uvicorn access log lines for GET /health."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage() if hasattr(record, "getMessage") else str(record.msg)
        if "/health" in msg and "200" in msg:
            return False
        return True


def configure_logging(level: str = "INFO", known_secrets: tuple[str, ...] = ()) -> None:
    redaction_filter = SecretRedactionFilter(known_secrets)
    domain_filter = DomainDefaultFilter()
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | [%(domain)s] | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    root = logging.getLogger()
    for handler in root.handlers:
        handler.addFilter(domain_filter)
        handler.addFilter(redaction_filter)
    # Upstream request URLs and headers stay out of the log.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    uv_access = logging.getLogger("uvicorn.access")
    uv_access.addFilter(SuppressHealthCheckFilter())
