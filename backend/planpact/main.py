"""FastAPI application entry point."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from planpact.config import settings
from planpact.database import Base, engine
from planpact.logging_config import setup_logging

# Import routers
from planpact.routers import auth, pacts, users

# Import all models so Base.metadata knows about them
from planpact.models.user import User          # noqa: F401
from planpact.models.pact import Pact          # noqa: F401
from planpact.models.guest import Guest, RSVP  # noqa: F401

setup_logging()

app = FastAPI(
    title="PlanPact",
    description="Event invitations and RSVP tracking",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(pacts.router, prefix="/api/pacts", tags=["Pacts"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.STORAGE_BACKEND == "sql" and settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
