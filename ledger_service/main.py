import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from ledger_service.core.config import settings
from ledger_service.core.exceptions import LedgerError
from ledger_service.db.database import Base, engine, check_db_connection
from ledger_service.models import groups, expenses, settlements, currencies  # noqa: F401 register tables
from ledger_service.api.v1.routes.balances import router as balances_router
from ledger_service.api.v1.routes.settlements import router as settlements_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Ledger Service - Balances and Settlements",
    description="Derives group balances, suggests settling transfers and records settlements",
    version="1.0.0"
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


app.include_router(balances_router)
app.include_router(settlements_router)

@app.get("/")
def read_root():
    return {"message": "Ledger Service API", "version": "1.0.0"}

@app.get("/health")
def health_check():
    if not check_db_connection():
        return JSONResponse(status_code=503, content={"status": "unhealthy"})
    return {"status": "healthy"}
