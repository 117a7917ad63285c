"""Payment requests: admin-approved deposits and withdrawals.

The money only moves on approval, through the ledger, inside the same
transaction as the status flip. A withdrawal that no longer fits the balance
at approval time fails with InsufficientBalance and stays pending.
"""
import logging
from django.db import transaction

from . import ledger
from .adapters.notification_adapter import NotificationAdapter
from .constants import to_money
from .errors import InsufficientBalance, InvalidState, NotFound, PermissionDenied, ValidationFailed
from .models import LedgerEntryKind, PaymentRequest, PaymentRequestType, RequestStatus

logger = logging.getLogger(__name__)


def create_payment_request(user, request_type: str, amount) -> PaymentRequest:
	if request_type not in PaymentRequestType.values:
		raise ValidationFailed("request_type must be deposit or withdraw")
	try:
		amount = to_money(amount)
	except (TypeError, ValueError):
		raise ValidationFailed("amount must be a decimal amount")
	if amount <= 0:
		raise ValidationFailed("amount must be > 0")

	if request_type == PaymentRequestType.WITHDRAW:
		wallet = ledger.get_wallet(user)
		if amount > wallet.balance:
			raise InsufficientBalance(required=amount, available=wallet.balance)

	req = PaymentRequest.objects.create(user=user, request_type=request_type, amount=amount)
	logger.info("payment request %s user=%s amount=%s", request_type, user.pk, amount)
	return req


def _pending(request_id, admin) -> PaymentRequest:
	if not admin.is_admin:
		raise PermissionDenied("admin only")
	try:
		req = PaymentRequest.objects.select_for_update().get(pk=request_id)
	except PaymentRequest.DoesNotExist:
		raise NotFound("payment request not found")
	if req.status != RequestStatus.PENDING:
		raise InvalidState(f"request is already {req.status}")
	return req


@transaction.atomic
def approve_payment_request(request_id, admin, note: str = ""):
	"""
	Move the money and close the request. Returns (request, ledger_entry).
	"""
	req = _pending(request_id, admin)
	wallet = ledger.get_wallet(req.user)
	if req.request_type == PaymentRequestType.DEPOSIT:
		entry = ledger.credit(wallet.pk, req.amount, LedgerEntryKind.DEPOSIT, related_id=req.pk, memo="deposit")
	else:
		entry = ledger.debit(wallet.pk, req.amount, LedgerEntryKind.WITHDRAW, related_id=req.pk, memo="withdrawal")

	req.status = RequestStatus.APPROVED
	req.admin_note = note or ""
	req.save(update_fields=["status", "admin_note", "updated_at"])
	NotificationAdapter.notify(req.user_id, f"{req.get_request_type_display()} approved", f"{req.amount:.2f}")
	return req, entry


@transaction.atomic
def reject_payment_request(request_id, admin, note: str = "") -> PaymentRequest:
	req = _pending(request_id, admin)
	req.status = RequestStatus.REJECTED
	req.admin_note = note or ""
	req.save(update_fields=["status", "admin_note", "updated_at"])
	NotificationAdapter.notify(req.user_id, f"{req.get_request_type_display()} rejected", note or "")
	return req


def payment_requests(status: str | None = None):
	qs = PaymentRequest.objects.select_related("user").order_by("-created_at")
	if status:
		qs = qs.filter(status=status)
	return qs
