"""
Merchant support contact route.
"""
from fastapi import APIRouter

from smartbundle.routers.deps import CurrentShop, Notifications
from smartbundle.schemas.support import SupportRequest, SupportResponse

router = APIRouter(prefix="/admin/support", tags=["support"])


@router.post("", response_model=SupportResponse)
async def contact_support(
    request: SupportRequest,
    shop: CurrentShop,
    notifications: Notifications,
) -> SupportResponse:
    """Forward a support request by email. Delivery is best effort."""
    email = request.email.strip()
    subject = request.subject.strip()
    message = request.message.strip()
    if not email or not subject or not message:
        return SupportResponse(success=False, error="Please fill in all fields")

    sent, error = await notifications.send_support_email(shop.domain, email, subject, message)
    if sent:
        return SupportResponse(
            success=True,
            message="Your message has been sent! We'll get back to you soon.",
        )
    return SupportResponse(
        success=False,
        error=error or "Failed to send message. Please try again.",
    )
