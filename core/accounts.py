"""Registration, verification and referral statistics.

Credential checks and OTP/email flows live outside the engine; these helpers only
create the rows the economy depends on (user + wallet + who referred whom) and
fire the one-time referral bonus when a referred user completes verification.
"""
import logging
from decimal import Decimal
from django.db import transaction
from django.db.models import Sum

from .errors import ValidationFailed
from .models import LedgerEntry, LedgerEntryKind, User, Wallet
from .promos import grant_referral_bonus

logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(username: str, email: str, password: str, referral_code: str | None = None) -> User:
	"""
	Create a user and their (empty) wallet; referral_code links the referrer.
	"""
	username = (username or "").strip()
	if not username:
		raise ValidationFailed("username is required")
	if User.objects.filter(username=username).exists():
		raise ValidationFailed(f"username {username} is taken")

	referrer = None
	if referral_code:
		referrer = User.objects.filter(referral_code=referral_code.strip().upper()).first()
		if referrer is None:
			raise ValidationFailed("unknown referral code")

	user = User.objects.create_user(username=username, email=(email or "").strip().lower(), password=password, referred_by=referrer)
	Wallet.objects.create(user=user)
	logger.info("user registered id=%s referred_by=%s", user.pk, referrer.pk if referrer else None)
	return user


@transaction.atomic
def verify_user(user: User):
	"""
	Mark the user verified; pays the referrer's bonus the first time. Returns the
	ReferralBonus when one was granted by this call.
	"""
	User.objects.filter(pk=user.pk, is_verified=False).update(is_verified=True)
	user.is_verified = True
	if user.referred_by_id is None:
		return None
	return grant_referral_bonus(user.referred_by, user)


def referral_stats(user: User) -> dict:
	referrals = user.referrals.order_by("-date_joined")
	earned = (
		LedgerEntry.objects
		.filter(wallet__user=user, kind=LedgerEntryKind.REFERRAL_BONUS)
		.aggregate(s=Sum("amount"))["s"]
	) or Decimal("0.00")
	return {
		"referral_code": user.referral_code,
		"referred_by": user.referred_by.username if user.referred_by_id else None,
		"total_referrals": referrals.count(),
		"verified_referrals": referrals.filter(is_verified=True).count(),
		"total_rewards_earned": earned,
		"recent_referrals": [
			{"username": r.username, "date_joined": r.date_joined, "is_verified": r.is_verified}
			for r in referrals[:10]
		],
	}
