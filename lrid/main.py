# lrid/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager

from .db import Base, engine
from . import models  # noqa: F401  (register tables)
from .errors import install_error_handlers
from .instrument_store import instrument_cache
from .logging_config import log_event
from .routes import intake, drafts, approvals, ops


def _ensure_db_ready() -> None:
    Base.metadata.create_all(bind=engine)


# Run schema init at import time so pytest cannot bypass it
_ensure_db_ready()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _ensure_db_ready()
    # Fail fast on a broken instrument before serving any submission
    instrument = instrument_cache.get()
    log_event("STARTUP", "instrument loaded", {"instrument": instrument.id, "version": instrument.version})
    yield


app = FastAPI(title="LRID Draft Engine API", lifespan=lifespan)
install_error_handlers(app)

app.include_router(intake.router)
app.include_router(drafts.router)
app.include_router(approvals.router)
app.include_router(ops.router)


@app.get("/")
def health():
    return {"status": "ok", "service": "lrid-draft-engine"}
