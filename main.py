import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from api.customers import router as customers_router
from services.exceptions import CustomerServiceError
from utils.case import dict_keys_to_camel

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    description="Multi-step loan application intake and finalization API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(CustomerServiceError)
async def customer_service_error_handler(request: Request, exc: CustomerServiceError):
    logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    body = {"detail": exc.message, **dict_keys_to_camel(exc.payload())}
    return JSONResponse(status_code=exc.status_code, content=body)


app.include_router(customers_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
