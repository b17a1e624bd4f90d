from fastapi import APIRouter, Depends

from app.api.deps import require_admin
from app.schemas.payments import MarkPaidOut, MarkPaidRequest, ReconcileOut
from app.services.booking_service import confirm_payment
from app.services.payment_service import reconcile_payment_intents

router = APIRouter(tags=["payments"])


@router.post("/public/payments/ziina/mark-paid", response_model=MarkPaidOut, response_model_exclude_none=True)
def ziina_mark_paid(body: MarkPaidRequest):
    """Called by the Ziina success page. Repeat calls for the same booking are no-ops."""
    return confirm_payment(body.bookingId)


@router.post("/admin/payments/reconcile", response_model=ReconcileOut)
def reconcile(_: str = Depends(require_admin)):
    return reconcile_payment_intents()
