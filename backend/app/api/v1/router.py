from fastapi import APIRouter, Depends

from backend.app.api.deps import require_access
from backend.app.api.v1.endpoints.health import router as health_router
from backend.app.api.v1.endpoints.products import router as products_router
from backend.app.api.v1.endpoints.suppliers import router as suppliers_router
from backend.app.api.v1.endpoints.warehouses import router as warehouses_router
from backend.app.api.v1.endpoints.purchase_orders import router as purchase_orders_router
from backend.app.api.v1.endpoints.line_items import router as line_items_router
from backend.app.api.v1.endpoints.lots import router as lots_router
from backend.app.api.v1.endpoints.stock import router as stock_router
from backend.app.api.v1.endpoints.accounting_movements import router as accounting_movements_router
from backend.app.api.v1.endpoints.users import router as users_router
from backend.app.api.v1.endpoints.access_grants import router as access_grants_router

secured = [Depends(require_access)]

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(products_router, tags=["products"], dependencies=secured)
router.include_router(suppliers_router, tags=["suppliers"], dependencies=secured)
router.include_router(warehouses_router, tags=["warehouses"], dependencies=secured)
router.include_router(purchase_orders_router, tags=["purchase_orders"], dependencies=secured)
router.include_router(line_items_router, tags=["line_items"], dependencies=secured)
router.include_router(lots_router, tags=["lots"], dependencies=secured)
router.include_router(stock_router, tags=["stock"], dependencies=secured)
router.include_router(accounting_movements_router, tags=["accounting_movements"], dependencies=secured)
router.include_router(users_router, tags=["users"], dependencies=secured)
router.include_router(access_grants_router, tags=["access_grants"], dependencies=secured)
