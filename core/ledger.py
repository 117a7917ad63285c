"""Wallet ledger: the only code path that mutates Wallet balances.

Every credit/debit locks the wallet row (select_for_update), applies the change
with an F() expression and appends one immutable LedgerEntry, all inside one
@transaction.atomic block. When called from an outer atomic block (publish,
collect, redeem...) the ledger write commits or rolls back together with it.
"""
import logging
from decimal import Decimal
from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from .constants import to_money
from .errors import InsufficientBalance, ValidationFailed
from .models import Wallet, LedgerEntry, LedgerEntryKind as K

logger = logging.getLogger(__name__)

CREDIT_KINDS = {
	K.DEPOSIT, K.PUBLISH_REFUND, K.PROMOTION_REFUND, K.REWARD_PAYOUT,
	K.WRITER_REWARD, K.PROMO_BONUS, K.REFERRAL_BONUS,
}
DEBIT_KINDS = {K.WITHDRAW, K.PUBLISH_FEE, K.PROMOTION_FEE}

EARNING_KINDS = {K.REWARD_PAYOUT, K.WRITER_REWARD, K.PROMO_BONUS, K.REFERRAL_BONUS}
REWARD_POINT_KINDS = {K.REWARD_PAYOUT, K.WRITER_REWARD}
SPENDING_KINDS = {K.PUBLISH_FEE, K.PROMOTION_FEE}
REFUND_KINDS = {K.PUBLISH_REFUND, K.PROMOTION_REFUND}


def get_wallet(user) -> Wallet:
	"""
	Fetch the user's wallet, creating it for users registered before wallets existed.
	"""
	wallet, _ = Wallet.objects.get_or_create(user=user)
	return wallet


def _positive(amount) -> Decimal:
	try:
		amount = to_money(amount)
	except (TypeError, ValueError) as e:
		raise ValidationFailed(str(e))
	if amount <= 0:
		raise ValidationFailed("amount must be > 0")
	return amount


def _counter_changes(kind: str, amount: Decimal) -> dict:
	changes = {}
	if kind in EARNING_KINDS:
		changes["total_earned"] = F("total_earned") + amount
	if kind in REWARD_POINT_KINDS:
		changes["reward_points"] = F("reward_points") + amount
	if kind in SPENDING_KINDS:
		changes["total_spent"] = F("total_spent") + amount
	if kind in REFUND_KINDS:
		changes["total_spent"] = F("total_spent") - amount
	return changes


def _append(wallet: Wallet, amount: Decimal, kind: str, related_id, memo: str) -> LedgerEntry:
	wallet.refresh_from_db()
	entry = LedgerEntry.objects.create(
		wallet=wallet,
		amount=amount,
		kind=kind,
		related_id=str(related_id or ""),
		balance_after=wallet.balance,
		memo=(memo or "")[:255],
	)
	logger.info(
		"ledger %s wallet=%s amount=%s balance_after=%s related=%s",
		kind, wallet.pk, amount, wallet.balance, entry.related_id,
	)
	return entry


@transaction.atomic
def credit(wallet_id, amount, kind: str, related_id="", memo: str = "") -> LedgerEntry:
	"""
	Add funds. Fails only on a non-positive amount.
	"""
	if kind not in CREDIT_KINDS:
		raise ValueError(f"{kind} is not a credit kind")
	amount = _positive(amount)

	wallet = Wallet.objects.select_for_update().get(pk=wallet_id)
	Wallet.objects.filter(pk=wallet.pk).update(
		balance=F("balance") + amount,
		updated_at=timezone.now(),
		**_counter_changes(kind, amount),
	)
	return _append(wallet, amount, kind, related_id, memo)


@transaction.atomic
def debit(wallet_id, amount, kind: str, related_id="", memo: str = "") -> LedgerEntry:
	"""
	Remove funds or raise InsufficientBalance without touching anything.

	The balance check and the decrement happen under the wallet row lock; the
	conditional UPDATE (balance >= amount) keeps the check honest on backends
	without row locks.
	"""
	if kind not in DEBIT_KINDS:
		raise ValueError(f"{kind} is not a debit kind")
	amount = _positive(amount)

	wallet = Wallet.objects.select_for_update().get(pk=wallet_id)
	if amount > wallet.balance:
		logger.info("ledger %s refused wallet=%s required=%s available=%s", kind, wallet.pk, amount, wallet.balance)
		raise InsufficientBalance(required=amount, available=wallet.balance)

	updated = Wallet.objects.filter(pk=wallet.pk, balance__gte=amount).update(
		balance=F("balance") - amount,
		updated_at=timezone.now(),
		**_counter_changes(kind, amount),
	)
	if not updated:
		wallet.refresh_from_db(fields=["balance"])
		raise InsufficientBalance(required=amount, available=wallet.balance)
	return _append(wallet, -amount, kind, related_id, memo)


def history(user, kind: str | None = None, limit: int = 50, offset: int = 0):
	"""
	Newest-first ledger entries for the user's wallet; returns (entries, total_count).
	"""
	qs = LedgerEntry.objects.filter(wallet__user=user).order_by("-created_at")
	if kind:
		qs = qs.filter(kind=kind)
	return list(qs[offset:offset + limit]), qs.count()


def ledger_sum(wallet: Wallet) -> Decimal:
	return wallet.entries.aggregate(s=Sum("amount"))["s"] or Decimal("0.00")


def reconcile(wallet: Wallet) -> dict:
	"""
	Compare the stored balance with the sum of its ledger entries.
	"""
	wallet.refresh_from_db(fields=["balance"])
	total = ledger_sum(wallet)
	return {"balance": wallet.balance, "ledger_sum": total, "match": total == wallet.balance}


def reconcile_all() -> list[dict]:
	"""
	Wallets whose balance does not match their entries (should be empty).
	"""
	mismatches = []
	for wallet in Wallet.objects.annotate(s=Sum("entries__amount")).iterator():
		total = wallet.s or Decimal("0.00")
		if total != wallet.balance:
			mismatches.append({"wallet_id": str(wallet.pk), "balance": wallet.balance, "ledger_sum": total})
	if mismatches:
		logger.error("ledger reconciliation found %d mismatched wallets", len(mismatches))
	return mismatches
