"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.bill_instances import router as bill_instances_router
from api.v1.routes.bill_instances import bills_instances_router, profile_instances_router
from api.v1.routes.bills import profile_bills_router
from api.v1.routes.bills import router as bills_router
from api.v1.routes.profiles import router as profiles_router

router = APIRouter()
router.include_router(profiles_router)
router.include_router(profile_bills_router)
router.include_router(profile_instances_router)
router.include_router(bills_router)
router.include_router(bills_instances_router)
router.include_router(bill_instances_router)
