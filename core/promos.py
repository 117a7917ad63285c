"""Promo code and referral credit issuer.

redeem_promo_code runs check-then-act race-free: the promo row is locked, the
used_count increment is conditional on used_count < usage_limit, and the
(promo_code, user) unique constraint backs up the per-user check. Increment,
usage record and ledger credit commit together or not at all.
"""
import logging
from decimal import Decimal
from django.db import transaction, IntegrityError
from django.db.models import F
from django.utils import timezone

from . import ledger
from .constants import referral_bonus, to_money
from .errors import (
	AlreadyUsedByUser, Expired, InvalidPromoCode, LimitReached, NotFound, PermissionDenied, ValidationFailed,
)
from .models import LedgerEntryKind, PromoCode, PromoUsage, ReferralBonus

logger = logging.getLogger(__name__)


def normalize_code(code) -> str:
	return str(code or "").strip().upper()


def _find(code, *, lock: bool = False) -> PromoCode:
	qs = PromoCode.objects.select_for_update() if lock else PromoCode.objects.all()
	try:
		return qs.get(code=normalize_code(code))
	except PromoCode.DoesNotExist:
		raise InvalidPromoCode("promo code not found")


def _refusal(promo: PromoCode, user=None) -> Exception | None:
	"""
	First reason this user (or anyone, when user is None) cannot redeem this code.
	"""
	if not promo.is_active:
		return InvalidPromoCode("promo code is not active")
	if timezone.now() >= promo.expiry_date:
		return Expired("promo code has expired")
	if user is not None and PromoUsage.objects.filter(promo_code=promo, user=user).exists():
		return AlreadyUsedByUser("you have already used this promo code")
	if promo.used_count >= promo.usage_limit:
		return LimitReached("promo code usage limit reached")
	return None


@transaction.atomic
def redeem_promo_code(code, user) -> PromoUsage:
	"""
	Credit the code's bonus to the user's wallet. Returns the usage record.
	"""
	promo = _find(code, lock=True)
	refusal = _refusal(promo, user)
	if refusal is not None:
		logger.info("promo %s refused for user=%s: %s", promo.code, user.pk, refusal)
		raise refusal

	taken = PromoCode.objects.filter(pk=promo.pk, used_count__lt=F("usage_limit")).update(used_count=F("used_count") + 1)
	if not taken:
		raise LimitReached("promo code usage limit reached")

	try:
		with transaction.atomic():
			usage = PromoUsage.objects.create(promo_code=promo, user=user, bonus_received=promo.bonus_amount)
	except IntegrityError:
		# lost a race against the same user's other request; the outer block undoes the increment
		raise AlreadyUsedByUser("you have already used this promo code")

	wallet = ledger.get_wallet(user)
	ledger.credit(wallet.pk, promo.bonus_amount, LedgerEntryKind.PROMO_BONUS, related_id=promo.pk, memo=f"promo code {promo.code}")
	logger.info("promo %s redeemed by user=%s bonus=%s", promo.code, user.pk, promo.bonus_amount)
	return usage


def validate_promo_code(code, user) -> dict:
	"""
	Side-effect free preview used by the registration / wallet forms.
	"""
	try:
		promo = _find(code)
	except InvalidPromoCode as e:
		return {"valid": False, "message": e.message, "bonus_amount": None}
	refusal = _refusal(promo, user if user is not None and user.is_authenticated else None)
	if refusal is not None:
		return {"valid": False, "message": str(refusal), "bonus_amount": None}
	return {"valid": True, "message": "promo code is valid", "bonus_amount": promo.bonus_amount}


# --- Admin ---------------------------------------------------------------------

def _clean_limit(value) -> int:
	try:
		limit = int(value)
	except (TypeError, ValueError):
		raise ValidationFailed("usage_limit must be an integer")
	if limit < 1:
		raise ValidationFailed("usage_limit must be at least 1")
	return limit


def _clean_bonus(value) -> Decimal:
	try:
		bonus = to_money(value)
	except (TypeError, ValueError):
		raise ValidationFailed("bonus_amount must be a decimal amount")
	if bonus <= 0:
		raise ValidationFailed("bonus_amount must be > 0")
	return bonus


def _clean_flag(value) -> bool:
	if not isinstance(value, bool):
		raise ValidationFailed("is_active must be true or false")
	return value


def create_promo_code(admin, code, bonus_amount, usage_limit, expiry_date, is_active: bool = True) -> PromoCode:
	if not admin.is_admin:
		raise PermissionDenied("admin only")
	code = normalize_code(code)
	if not code:
		raise ValidationFailed("code is required")
	if expiry_date is None:
		raise ValidationFailed("expiry_date is required")
	try:
		with transaction.atomic():
			promo = PromoCode.objects.create(
				code=code,
				bonus_amount=_clean_bonus(bonus_amount),
				usage_limit=_clean_limit(usage_limit),
				expiry_date=expiry_date,
				is_active=_clean_flag(is_active),
				created_by=admin,
			)
	except IntegrityError:
		raise ValidationFailed(f"promo code {code} already exists")
	logger.info("promo code created %s by=%s", code, admin.pk)
	return promo


@transaction.atomic
def update_promo_code(admin, promo_id, **fields) -> PromoCode:
	if not admin.is_admin:
		raise PermissionDenied("admin only")
	try:
		promo = PromoCode.objects.select_for_update().get(pk=promo_id)
	except PromoCode.DoesNotExist:
		raise NotFound("promo code not found")

	if "bonus_amount" in fields:
		promo.bonus_amount = _clean_bonus(fields["bonus_amount"])
	if "usage_limit" in fields:
		limit = _clean_limit(fields["usage_limit"])
		if limit < promo.used_count:
			raise ValidationFailed(f"usage_limit cannot be below used count ({promo.used_count})")
		promo.usage_limit = limit
	if "expiry_date" in fields and fields["expiry_date"] is not None:
		promo.expiry_date = fields["expiry_date"]
	if "is_active" in fields:
		promo.is_active = _clean_flag(fields["is_active"])
	promo.save()
	return promo


@transaction.atomic
def delete_promo_code(admin, promo_id) -> bool:
	"""
	Delete an unused code; a code with usages is only deactivated. Returns True if deleted.
	"""
	if not admin.is_admin:
		raise PermissionDenied("admin only")
	try:
		promo = PromoCode.objects.select_for_update().get(pk=promo_id)
	except PromoCode.DoesNotExist:
		raise NotFound("promo code not found")
	if promo.usages.exists():
		promo.is_active = False
		promo.save(update_fields=["is_active"])
		return False
	promo.delete()
	return True


def promo_code_usage(admin, promo_id) -> dict:
	if not admin.is_admin:
		raise PermissionDenied("admin only")
	try:
		promo = PromoCode.objects.get(pk=promo_id)
	except PromoCode.DoesNotExist:
		raise NotFound("promo code not found")
	usages = promo.usages.select_related("user").order_by("-used_at")
	return {
		"promo_code": promo.code,
		"total_usages": usages.count(),
		"usages": [
			{
				"user_id": str(u.user_id),
				"username": u.user.username,
				"email": u.user.email,
				"used_at": u.used_at,
				"bonus_received": u.bonus_received,
			}
			for u in usages
		],
	}


# --- Referrals -----------------------------------------------------------------

@transaction.atomic
def grant_referral_bonus(referrer, referee) -> ReferralBonus | None:
	"""
	Pay the referrer once per referee. A repeat call returns None and credits nothing.
	"""
	if referrer.pk == referee.pk:
		raise ValidationFailed("users cannot refer themselves")
	amount = referral_bonus()
	try:
		with transaction.atomic():
			bonus = ReferralBonus.objects.create(referee=referee, referrer=referrer, amount=amount)
	except IntegrityError:
		logger.info("referral bonus already granted for referee=%s", referee.pk)
		return None

	wallet = ledger.get_wallet(referrer)
	ledger.credit(wallet.pk, amount, LedgerEntryKind.REFERRAL_BONUS, related_id=referee.pk, memo=f"referral: {referee.username}")
	logger.info("referral bonus granted referrer=%s referee=%s amount=%s", referrer.pk, referee.pk, amount)
	return bonus
