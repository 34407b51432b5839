"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from workorders.api.auth import router as auth_router
from workorders.api.work_orders import router as work_orders_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(work_orders_router)
