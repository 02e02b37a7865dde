from fastapi import APIRouter

from app.api.v1 import auth, devices, mobile

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(devices.router, prefix="/devices", tags=["devices"])
api_router.include_router(mobile.router, prefix="/mobile", tags=["mobile"])
