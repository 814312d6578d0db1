import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from concierge.api.v1.assistant import router as assistant_router
from concierge.api.v1.onboarding import router as onboarding_router
from concierge.core.config import settings
from concierge.wiring.dependencies import get_backend_client, get_onboarding_sessions


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("session_id", "phase", "step", "code", "category", "source", "path", "status", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await get_onboarding_sessions().close_all()
    client = get_backend_client()
    if client is not None:
        await client.aclose()


app = FastAPI(title="JET AI Concierge", version="1.0.0", lifespan=lifespan)

app.include_router(onboarding_router, prefix="/api/v1/onboarding", tags=["onboarding"])
app.include_router(assistant_router, prefix="/api/v1/assistant", tags=["assistant"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
