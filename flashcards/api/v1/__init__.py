"""
API v1 router aggregation.
"""
from fastapi import APIRouter
from flashcards.api.v1.endpoints import auth, generations, generation_error_logs, flashcards

api_router = APIRouter()

# Each router defines its own prefix
api_router.include_router(auth.router)
api_router.include_router(generations.router)
api_router.include_router(generation_error_logs.router)
api_router.include_router(flashcards.router)
