"""FastAPI application entry point."""

import structlog
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from sqlalchemy.orm import Session

from leadintel import __version__
from leadintel.api import geo, health, leads, webhooks
from leadintel.config import settings
from leadintel.database import get_db
from leadintel.middleware.auth import create_admin_token
from leadintel.services.users import SqlUserDirectory

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(0),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
)

app = FastAPI(
    title=settings.app_name,
    description="Phone geo-intelligence and sales lead pipeline",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(health.router, prefix=settings.api_prefix)
app.include_router(webhooks.router, prefix=settings.api_prefix)
app.include_router(leads.router, prefix=settings.api_prefix)
app.include_router(geo.router, prefix=settings.api_prefix)


@app.get("/")
def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    email: str


@app.post(f"{settings.api_prefix}/auth/login", response_model=LoginResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    """Simple admin login. Returns JWT token."""
    if req.email != settings.admin_email or req.password != settings.admin_password:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if SqlUserDirectory(db).id_for_email(req.email) is None:
        # Pipeline writes need a users row to attribute changes to
        raise HTTPException(status_code=403, detail="Admin user not provisioned; run scripts/seed.py")
    return LoginResponse(token=create_admin_token(req.email), email=req.email)
