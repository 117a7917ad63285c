"""Writer promotion desk: users apply to become content writers.

The promotion fee is debited together with the request insert; a rejection
refunds it in full together with the status flip. At most one request per user
is pending (service check + partial unique constraint).
"""
import logging
from django.db import transaction, IntegrityError
from django.utils import timezone

from . import ledger
from .adapters.notification_adapter import NotificationAdapter
from .constants import promotion_fee
from .errors import InvalidState, NotFound, PermissionDenied, ValidationFailed
from .models import LedgerEntryKind, PromotionRequest, RequestStatus, Role, User

logger = logging.getLogger(__name__)


@transaction.atomic
def request_promotion(user: User) -> PromotionRequest:
	if user.role != Role.USER:
		raise InvalidState(f"a {user.role} cannot request promotion")
	if PromotionRequest.objects.filter(user=user, status=RequestStatus.PENDING).exists():
		raise InvalidState("a promotion request is already pending")

	fee = promotion_fee()
	try:
		with transaction.atomic():
			req = PromotionRequest.objects.create(user=user, fee_charged=fee)
	except IntegrityError:
		raise InvalidState("a promotion request is already pending")

	if fee > 0:
		wallet = ledger.get_wallet(user)
		ledger.debit(wallet.pk, fee, LedgerEntryKind.PROMOTION_FEE, related_id=req.pk, memo="writer promotion fee")
	logger.info("promotion requested user=%s fee=%s", user.pk, fee)
	return req


def _pending(request_id, admin) -> PromotionRequest:
	if not admin.is_admin:
		raise PermissionDenied("admin only")
	try:
		req = PromotionRequest.objects.select_for_update().get(pk=request_id)
	except PromotionRequest.DoesNotExist:
		raise NotFound("promotion request not found")
	if req.status != RequestStatus.PENDING:
		raise InvalidState(f"request is already {req.status}")
	return req


@transaction.atomic
def approve_promotion(request_id, admin) -> PromotionRequest:
	req = _pending(request_id, admin)
	req.status = RequestStatus.APPROVED
	req.reviewed_at = timezone.now()
	req.reviewed_by = admin
	req.save(update_fields=["status", "reviewed_at", "reviewed_by"])
	User.objects.filter(pk=req.user_id, role=Role.USER).update(role=Role.WRITER)

	NotificationAdapter.notify(req.user_id, "Promotion approved", "You can now write and publish articles.")
	logger.info("promotion approved user=%s by=%s", req.user_id, admin.pk)
	return req


@transaction.atomic
def reject_promotion(request_id, admin, reason: str = "") -> PromotionRequest:
	req = _pending(request_id, admin)
	reason = (reason or "").strip()
	if not reason:
		raise ValidationFailed("a rejection reason is required")

	if req.fee_charged > 0:
		wallet = ledger.get_wallet(req.user)
		ledger.credit(wallet.pk, req.fee_charged, LedgerEntryKind.PROMOTION_REFUND, related_id=req.pk, memo="writer promotion refund")
	req.status = RequestStatus.REJECTED
	req.rejection_reason = reason
	req.reviewed_at = timezone.now()
	req.reviewed_by = admin
	req.save(update_fields=["status", "rejection_reason", "reviewed_at", "reviewed_by"])

	NotificationAdapter.notify(req.user_id, "Promotion rejected", reason)
	logger.info("promotion rejected user=%s by=%s", req.user_id, admin.pk)
	return req


def my_promotion_request(user: User) -> PromotionRequest | None:
	return PromotionRequest.objects.filter(user=user).order_by("-requested_at").first()


def pending_promotions():
	return PromotionRequest.objects.filter(status=RequestStatus.PENDING).select_related("user").order_by("requested_at")
