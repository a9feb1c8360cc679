from fastapi import APIRouter

from app.api.v1.endpoints import billing, notifications, readings, system

api_v1_router = APIRouter()

# System / health endpoints (status, peak monitor state)
api_v1_router.include_router(system.router, tags=["System"])

# Energy and bill summaries computed from raw samples
api_v1_router.include_router(billing.router, tags=["Billing"])

# Raw samples for charts and diagnostics
api_v1_router.include_router(readings.router, tags=["Readings"])

# Push subscriptions and the notification feed
api_v1_router.include_router(notifications.router, tags=["Notifications"])
