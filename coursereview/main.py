# coursereview/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from coursereview.config import settings
from coursereview.database import Base, engine
from coursereview.api import admin, auth, catalog, files, review, stats, tags

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(title="Course Review API", debug=settings.DEBUG)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(auth.router)      # /auth/*
app.include_router(catalog.router)   # /catalog/*
app.include_router(stats.router)     # /courses/*
app.include_router(review.router)    # /reviews/*
app.include_router(files.router)     # /files/*
app.include_router(tags.router)      # /tags/*
app.include_router(admin.router)     # /admin/*

# Uploaded files are served from disk when the local storage backend is used
if settings.STORAGE_BACKEND == "local":
    app.mount(
        "/files/raw",
        StaticFiles(directory=settings.STORAGE_LOCAL_ROOT, check_dir=False),
        name="files-raw",
    )


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "Course Review API is running",
        "environment": settings.APP_ENV,
    }


@app.get("/debug/routes")
def list_routes():
    """List all registered routes for debugging."""
    routes = []
    for route in app.routes:
        if hasattr(route, "methods"):
            routes.append({
                "path": route.path,
                "methods": list(route.methods),
                "name": route.name,
            })
    return {"routes": routes}


logger.info("Course Review API started (env=%s, storage=%s)", settings.APP_ENV, settings.STORAGE_BACKEND)
