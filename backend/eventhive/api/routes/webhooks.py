"""
Payment provider webhooks. Provider integration is disabled; payments go
through the simulated verify flow under /api/payments.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from eventhive.api.errors import error_body

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/razorpay")
async def razorpay_webhook():
    return JSONResponse(
        status_code=status.HTTP_410_GONE,
        content=error_body("Payment provider webhooks are disabled", "gone"),
    )
