from fastapi import APIRouter

from onsite.api.comp_time import comp_time_router
from onsite.api.leave import leave_router
from onsite.api.members import members_router
from onsite.api.org import allowance_router, policy_router

api_router = APIRouter()
api_router.include_router(leave_router)
api_router.include_router(comp_time_router)
api_router.include_router(policy_router)
api_router.include_router(allowance_router)
api_router.include_router(members_router)
