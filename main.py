"""
Main application entry point for the contact manager.

This module initializes the FastAPI application, sets up logging,
middleware, CORS and the domain error handlers, initializes the rate
limiter with a Redis backend, and includes routers for authentication,
users, and contacts.

Modules:
- FastAPI: Web framework
- CORSMiddleware: Middleware for handling CORS
- FastAPILimiter: Rate limiting
- redis.asyncio: Async Redis client
- fakeredis.aioredis: In-process Redis used when Redis is unreachable
- contact_manager.database: Database engine
- contact_manager.models: SQLAlchemy models
- contact_manager.contacts: Contacts router
- contact_manager.auth: Authentication router
- contact_manager.users: Users router
- contact_manager.core: Application settings
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_limiter import FastAPILimiter
from fakeredis.aioredis import FakeRedis
import redis.asyncio as redis
from redis.exceptions import RedisError

from contact_manager.database import engine, SessionLocal
from contact_manager import models, contacts
from contact_manager.auth import router as auth_router, ensure_admin_account
from contact_manager.users import router as users_router
from contact_manager.core import configure_logging, get_settings
from contact_manager.errors import register_exception_handlers

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create tables (for development only)
models.Base.metadata.create_all(bind=engine)

# Initialize FastAPI application
app = FastAPI(title="Contact Manager API")

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.on_event("startup")
async def startup_event():
    """
    FastAPI startup event handler.

    Initializes the rate limiter with Redis backend, falling back to
    FakeRedis if Redis is unavailable (e.g., during tests or offline),
    and creates the bootstrap administrator when configured.
    """
    redis_client = redis.from_url(
        settings.REDIS_URL, encoding="utf-8", decode_responses=True
    )
    try:
        await FastAPILimiter.init(redis_client)
    except (RedisError, OSError):
        logger.warning("Redis at %s unreachable, rate limiting in memory", settings.REDIS_URL)
        await FastAPILimiter.init(FakeRedis(decode_responses=True))

    db = SessionLocal()
    try:
        ensure_admin_account(db)
    finally:
        db.close()


@app.on_event("shutdown")
async def shutdown_event():
    """Close the rate limiter's Redis connection."""
    await FastAPILimiter.close()


# Include routers for application areas
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(contacts.router)


@app.get("/")
def root():
    """
    Root endpoint for the API.

    Returns a simple JSON message directing users to the Swagger UI.

    Returns:
        dict: JSON message with information about the API
    """
    return {"msg": "Contact Manager API. Visit /docs for Swagger UI"}
