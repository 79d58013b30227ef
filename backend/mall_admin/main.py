import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from mall_admin import __version__
from mall_admin.config import settings
from mall_admin.core.exceptions import MallAdminError
from mall_admin.core.logging import setup_logging
from mall_admin.core.security import TokenAuthority, hash_password
from mall_admin.database import SessionLocal, init_db
from mall_admin.models.user import AdminUser
from mall_admin.api.utils import error_body
from mall_admin.api.routes import auth, categories, products, users, roles, permissions, resources, logs

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=__version__,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# JWT secret and role -> permission mapping come from Settings
app.state.token_authority = TokenAuthority.from_settings(settings)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============ ERROR HANDLERS ============

@app.exception_handler(MallAdminError)
async def mall_admin_error_handler(request: Request, exc: MallAdminError):
    logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.status_code))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content=error_body(message, exc.status_code),
                        headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request parameters"
    return JSONResponse(status_code=400, content=error_body(message, 400))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=400, content=error_body("Data conflicts with an existing record", 400))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("Internal server error", 500))


# ============ ROUTES ============

@app.get("/health")
def health_check():
    """Health check for monitoring"""
    return {"status": "healthy", "version": __version__}


app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["auth"])
app.include_router(categories.router, prefix=f"{settings.API_PREFIX}/categories", tags=["categories"])
app.include_router(products.router, prefix=f"{settings.API_PREFIX}/products", tags=["products"])
app.include_router(users.router, prefix=f"{settings.API_PREFIX}/users", tags=["users"])
app.include_router(roles.router, prefix=f"{settings.API_PREFIX}/roles", tags=["roles"])
app.include_router(permissions.router, prefix=f"{settings.API_PREFIX}/permissions", tags=["permissions"])
app.include_router(resources.router, prefix=f"{settings.API_PREFIX}/resources", tags=["resources"])
app.include_router(logs.router, prefix=f"{settings.API_PREFIX}/logs", tags=["logs"])


# ============ LIFECYCLE ============

def ensure_first_admin(db) -> bool:
    """Create the configured admin account when there are no users yet"""
    if db.query(AdminUser).first():
        return False
    db.add(AdminUser(
        username=settings.FIRST_ADMIN_USERNAME,
        nickname="Administrator",
        password_hash=hash_password(settings.FIRST_ADMIN_PASSWORD),
        role="admin"
    ))
    db.commit()
    logger.warning("Created first admin user %r, change its password", settings.FIRST_ADMIN_USERNAME)
    return True


@app.on_event("startup")
def startup_event():
    logger.info("%s starting (environment=%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
    init_db()
    logger.info("Database tables created/verified")

    db = SessionLocal()
    try:
        ensure_first_admin(db)
    finally:
        db.close()
