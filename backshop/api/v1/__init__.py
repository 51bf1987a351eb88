"""API v1 routes aggregation"""

from fastapi import APIRouter

from .menu.router import router as menu_router
from .products.router import router as products_router
from .cart.router import router as cart_router
from .orders.router import router as orders_router
from .integrations.router import router as integrations_router

# Create v1 router
api_router = APIRouter()

# Include all routers
api_router.include_router(menu_router, prefix="/menu", tags=["Menu"])
api_router.include_router(products_router, prefix="/products", tags=["Products"])
api_router.include_router(cart_router, prefix="/cart", tags=["Cart"])
api_router.include_router(orders_router, prefix="/orders", tags=["Orders"])
api_router.include_router(integrations_router, prefix="/integrations", tags=["Integrations"])

# Export router
router = api_router
