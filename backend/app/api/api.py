from fastapi import APIRouter
from app.api.endpoints import apod, mars_rovers, neo, epic, cache

api_router = APIRouter()

api_router.include_router(apod.router, prefix="/apod", tags=["apod"])
api_router.include_router(mars_rovers.router, prefix="/mars-rovers", tags=["mars-rovers"])
api_router.include_router(neo.router, prefix="/neo", tags=["neo"])
api_router.include_router(epic.router, prefix="/epic", tags=["epic"])
api_router.include_router(cache.router, prefix="/cache", tags=["cache"])
