from fastapi import APIRouter

from serene.api.api_v1.endpoints import auth, billing, journals, mindfulness, moods, premium, users

api_router = APIRouter()
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(users.router, prefix="/user", tags=["user"])
api_router.include_router(journals.router, prefix="/journals", tags=["journals"])
api_router.include_router(moods.router, prefix="/moods", tags=["moods"])
api_router.include_router(mindfulness.router, prefix="/mindfulness", tags=["mindfulness"])
api_router.include_router(premium.router, prefix="/premium", tags=["premium"])
api_router.include_router(billing.router, tags=["billing"])
