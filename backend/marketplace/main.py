import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.core.config import settings
from marketplace.models import Base  # noqa: F401 - register models
from marketplace.routers import fees, health

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Marketplace Fees API",
    description="Vendor and consumer fee configuration for the marketplace",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Same envelope as service failures: callers check "status", not the HTTP code
    error = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    logger.info("Invalid request to %s: %s", request.url.path, error)
    return JSONResponse(
        status_code=200,
        content={"status": False, "message": "Invalid request", "data": None, "error": error},
    )


app.include_router(health.router, prefix="/health")
app.include_router(fees.router, prefix="/fees")
