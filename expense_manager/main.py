import os
import logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
from starlette.middleware.sessions import SessionMiddleware

from .db import engine, init_db
from .auth import router as auth_router
from .routes.workspace import router as workspace_router
from .routes.member import router as member_router
from .routes.expense import router as expense_router
from .services.credential_service import ensure_seed_user

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


def seed_login_account():
    username = os.environ.get("ADMIN_USERNAME", "yugdeep")
    password = os.environ.get("ADMIN_PASSWORD", "989814yug")
    with Session(engine) as s:
        ensure_seed_user(s, username, password)
        s.commit()


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    seed_login_account()
    logger.info("database ready")
    yield


app = FastAPI(title="Expense Manager", lifespan=lifespan)

origins = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Session middleware
app.add_middleware(SessionMiddleware, secret_key=os.environ.get("SECRET_KEY", "change-me"))

# include routers
app.include_router(auth_router)
app.include_router(workspace_router)
app.include_router(member_router)
app.include_router(expense_router)


@app.get("/")
def index():
    return {"message": "API is running..."}


@app.get("/health", tags=["system"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
