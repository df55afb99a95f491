from fastapi import APIRouter

from quizprep.api.v1.endpoints import categories, health, quizzes, results

api_router = APIRouter()
api_router.include_router(categories.router, tags=["categories"])
api_router.include_router(quizzes.router, tags=["quizzes"])
api_router.include_router(results.router, tags=["results"])
api_router.include_router(health.router, tags=["health"])
