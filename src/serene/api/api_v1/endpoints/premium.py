from fastapi import APIRouter, Response

from serene.api.auth_deps import CurrentUser, StorageDep
from serene.core.security import issue_session
from serene.schemas import PremiumActivationResponse
from serene.services.billing import BillingBridge

router = APIRouter()


@router.post("/activate", response_model=PremiumActivationResponse)
async def activate_premium(response: Response, current_user: CurrentUser, storage: StorageDep):
    """Self-service premium upgrade. Idempotent; refreshes the session."""
    user = await BillingBridge(storage).activate_premium(current_user.id)
    issue_session(response, user)
    return PremiumActivationResponse(success=True, message="Premium activation successful")
