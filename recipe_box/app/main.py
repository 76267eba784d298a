# recipe_box/app/main.py
from __future__ import annotations

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recipe_box.app.config import get_settings
from recipe_box.app.deps import close_mealdb
from recipe_box.app.http_errors import install_error_handlers
from recipe_box.app.routers.auth import router as auth_router
from recipe_box.app.routers.profile import router as profile_router
from recipe_box.app.routers.recipes import router as recipes_router
from recipe_box.app.routers.saved import router as saved_router
from recipe_box.app.routers.search import router as search_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

app = FastAPI(title="Recipe Box API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(recipes_router)
app.include_router(saved_router)
app.include_router(search_router)


@app.on_event("shutdown")
async def shutdown() -> None:
    await close_mealdb()


@app.get("/health")
def health():
    return {"ok": True, "env": settings.APP_ENV}
