# backend/voll/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .clients import build_ai_client
from .config import settings
from .db import Base, engine
from .routers import students, schedules, transactions, chat

# --------------------------------------------------------
# LOGGING
# --------------------------------------------------------
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

# request/response bodies of the AI client carry the API key in headers at DEBUG
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create DB tables (schema migrations are managed outside this service)
    Base.metadata.create_all(bind=engine)
    app.state.ai_client = build_ai_client(settings)
    logger.info("VOLL API ready (model=%s)", settings.AI_MODEL)
    yield
    app.state.ai_client.close()


app = FastAPI(title="VOLL Pilates Studio API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --------------------------------------------------------
# STORE ERRORS -> 500 with the driver's own payload
# --------------------------------------------------------
@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    orig = getattr(exc, "orig", None)
    payload = {
        "message": str(orig or exc),
        "code": getattr(orig, "pgcode", None) or exc.code,
    }
    logger.error("store error on %s %s: %s", request.method, request.url.path, payload["message"])
    return JSONResponse(status_code=500, content=payload)

# --------------------------------------------------------
# ROUTES
# --------------------------------------------------------
app.include_router(students.router)
app.include_router(schedules.router)
app.include_router(transactions.router)
app.include_router(chat.router)

# --------------------------------------------------------
# ROOT ENDPOINT (health probe)
# --------------------------------------------------------
@app.get("/")
def root():
    return {"message": "Backend is running!"}
