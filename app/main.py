from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi_utils.tasks import repeat_every
from app.api.deps import decode_access_token, require_permission, require_role
from app.api.v1.endpoints.auth import router as auth_router
from app.core.config import settings
from app.core.errors import AuthError
from app.core.i18n import translator_for_request
from app.services.auth import AuthenticatedUser
from app.db.session import engine, Base, get_db
from app.tasks.cleanup import purge_stale_otp_codes
from app.db import models  # noqa: F401  регистрирует модели в Base.metadata
import logging

# Настройка логирования
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)
api_version = settings.API_V1_STR

# Register routers
app.include_router(auth_router, prefix=f"{api_version}/auth", tags=["auth"])


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    translator = translator_for_request(request, settings)
    if exc.http_status >= 500:
        logger.error("%s on %s %s", exc.code, request.method, request.url.path)
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": translator.t(exc.message_key), "code": exc.code},
        headers=exc.headers,
    )


@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} is running!"}


@app.get("/protected")
async def protected(token: dict = Depends(decode_access_token)):
    return {"message": f"This is a protected route. Welcome, user with ID: {token['id']}"}


@app.get("/protected/admin")
async def protected_admin(user: AuthenticatedUser = Depends(require_role("admin"))):
    return {"message": f"Admin area. Welcome, {user.mobile}"}


@app.get("/protected/reports")
async def protected_reports(user: AuthenticatedUser = Depends(require_permission("reports.read"))):
    return {"message": "Reports are available.", "permissions": sorted(user.permissions)}


@app.on_event("startup")
async def startup():
    # Создаем таблицы в базе данных
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Startup event completed. Database tables created.")

# Отдельная регистрация повторяющейся задачи
@app.on_event("startup")
@repeat_every(seconds=settings.OTP_CLEANUP_INTERVAL_SECONDS)
async def schedule_cleanup():
    async for db in get_db():  # Используем get_db как генератор
        await purge_stale_otp_codes(db)
