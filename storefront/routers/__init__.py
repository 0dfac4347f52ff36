from fastapi import APIRouter

from . import catalog, health, products


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router)
    router.include_router(catalog.router)
    router.include_router(products.router)
    return router
