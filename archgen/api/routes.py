from fastapi import APIRouter
from archgen.api.routes_health import router as health_router
from archgen.api.routes_codegen import router as codegen_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(codegen_router, tags=["codegen"])
