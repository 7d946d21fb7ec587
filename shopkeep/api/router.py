from fastapi import APIRouter
from shopkeep.api.system import router as system_router
from shopkeep.api.v0.auth.main import router as auth_router
from shopkeep.api.v0.products.main import router as products_router

router = APIRouter()
router.include_router(system_router)
router.include_router(auth_router)
router.include_router(products_router)
