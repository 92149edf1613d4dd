import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import settings
from .database import engine, Base
from . import models  # registers models with this Base
from .errors import register_error_handlers
from .routes import (
    persona_routes,
    company_routes,
    role_routes,
    application_routes,
    message_routes,
    candidate_routes,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Create tables once when app starts
    Base.metadata.create_all(bind=engine)
    logger.info("%s started", settings.app_name)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(persona_routes.router)
app.include_router(company_routes.router)
app.include_router(role_routes.router)
app.include_router(application_routes.router)
app.include_router(message_routes.router)
app.include_router(candidate_routes.router)


@app.get("/")
def root():
    return {"message": f"{settings.app_name} API"}
