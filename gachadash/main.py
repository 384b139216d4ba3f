import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from gachadash import containers
from gachadash.config import settings
from gachadash.core.exception_handlers import (
    handle_base_api_exception,
    handle_gacha_api_error,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from gachadash.core.exceptions import BaseAPIException
from gachadash.core.logging_middleware import LoggingMiddleware
from gachadash.logging_config import setup_logging
from gachadash.routers import (
    health_router,
    leaderboard_router,
    profile_router,
    report_router,
    wallet_router,
)
from gachadash.services.gacha_client import GachaAPIError

load_dotenv("gachadash/.env")
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"{settings.APP_NAME} starting ({settings.ENVIRONMENT}); "
        f"admin password {settings.admin_password_status}, "
        f"store configured={settings.supabase_configured}"
    )
    if not settings.ADMIN_PASSWORD:
        logger.error("ADMIN_PASSWORD is not set; purchase API calls will fail and fall back to mock data")
    app.container.clients.profile_store()
    yield
    await app.container.clients.redis_service().close()


app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
app.container = containers.Container()  # type: ignore

app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(BaseAPIException, handle_base_api_exception)
app.add_exception_handler(GachaAPIError, handle_gacha_api_error)
app.add_exception_handler(StarletteHTTPException, handle_http_exception)
app.add_exception_handler(RequestValidationError, handle_validation_error)
app.add_exception_handler(Exception, handle_unexpected_error)


@app.get("/")
def hello() -> dict:
    return {"message": settings.APP_NAME, "defaultWallet": settings.DEFAULT_WALLET}


app.include_router(health_router.router)
app.include_router(wallet_router.router, prefix=settings.API_V1_STR)
app.include_router(leaderboard_router.router, prefix=settings.API_V1_STR)
app.include_router(report_router.router, prefix=settings.API_V1_STR)
app.include_router(profile_router.router, prefix=settings.API_V1_STR)

handler = Mangum(app)
