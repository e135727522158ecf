# Fichier: app/api/v1/api.py
from fastapi import APIRouter
from .endpoints import (
    course_router,
    generation_router,
    generation_ws,
    topic_router,
)

api_router = APIRouter()

api_router.include_router(generation_router.router, prefix="/generation", tags=["Generation"])
api_router.include_router(topic_router.router, prefix="/topics", tags=["Topics"])
api_router.include_router(course_router.router, prefix="/courses", tags=["Courses"])
api_router.include_router(generation_ws.router, tags=["Generation"])
