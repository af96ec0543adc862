from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import JSONResponse
from starlette.requests import Request

from newsboard.core.settings import settings
from newsboard.core.errors import StorageError
from newsboard.core.limiter import limiter
from newsboard.core.logging import configure_logging, log
from newsboard.core.middleware import SecurityHeadersMiddleware, RequestLogMiddleware
from newsboard.db.session import create_schema
from newsboard.api import auth, entries, votes, users, admin

configure_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_schema()
    log.info("newsboard started (env={env})", env=settings.env)
    yield

app = FastAPI(title="newsboard API", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse({"detail": "rate limit exceeded"}, status_code=429)

@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    # already logged where it was raised
    return JSONResponse({"detail": "Server database error."}, status_code=500)

@app.exception_handler(SQLAlchemyError)
async def db_error_handler(request: Request, exc: SQLAlchemyError):
    log.error("{path}: database error ({err})", path=request.url.path, err=exc)
    return JSONResponse({"detail": "Server database error."}, status_code=500)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(entries.router)
app.include_router(votes.router)
app.include_router(users.router)
app.include_router(admin.router)

@app.get("/health")
@limiter.limit("30/minute")
async def health(request: Request):
    return {"ok": True}
