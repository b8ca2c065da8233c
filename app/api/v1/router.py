"""
API v1 router setup
Organized into: public (search), diner (JWT), manager (JWT + role) and admin routes
"""
from fastapi import APIRouter

from app.api.v1 import admin, bookings, restaurants

api_v1_router = APIRouter()

# ============================================================================
# RESTAURANTS (search and detail are public, inventory/bookings need manager)
# ============================================================================
api_v1_router.include_router(
    restaurants.router,
    tags=["Restaurants"]
)

# ============================================================================
# BOOKINGS (JWT authentication required)
# ============================================================================
api_v1_router.include_router(
    bookings.router,
    tags=["Bookings"]
)

# ============================================================================
# ADMIN ROUTES (JWT authentication + admin role required)
# ============================================================================
api_v1_router.include_router(
    admin.router,
    tags=["Admin"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and authentication overview."""
    return {
        "version": "1.0",
        "authentication": {
            "public": "Restaurant search and detail",
            "user": "JWT Bearer token required (bookings)",
            "manager": "JWT Bearer token + manager of the restaurant or admin",
            "admin": "JWT Bearer token + admin role required"
        }
    }
