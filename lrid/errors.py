from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarHTTP
import logging

from .engine.approval import ApprovalError
from .engine.instrument import InstrumentConfigError
from .logging_config import log_failure

logger = logging.getLogger("lrid")


def install_error_handlers(app):
    @app.exception_handler(StarHTTP)
    async def http_exc(_: Request, exc: StarHTTP):
        return JSONResponse({"ok": False, "error": f"HTTP_{exc.status_code}", "detail": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(InstrumentConfigError)
    async def instrument_config(_: Request, exc: InstrumentConfigError):
        log_failure("INSTRUMENT_CONFIG", {"detail": str(exc)})
        return JSONResponse({"ok": False, "error": "INSTRUMENT_CONFIG", "detail": str(exc)}, status_code=500)

    @app.exception_handler(ApprovalError)
    async def approval_rejected(_: Request, exc: ApprovalError):
        return JSONResponse({"ok": False, "error": "APPROVAL_REJECTED", "detail": str(exc)}, status_code=422)

    @app.exception_handler(Exception)
    async def unhandled(_: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse({"ok": False, "error": "INTERNAL_ERROR", "detail": "Unexpected error"}, status_code=500)
