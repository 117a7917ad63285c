"""Database models for the reward economy engine.


Tables:
- User: platform identity with a role (user / writer / admin) and referral linkage
- Wallet: one per user; balance and running totals (mutated only by core.ledger)
- LedgerEntryKind
- LedgerEntry: immutable, append-only record of every balance mutation
- ArticleStatus
- Article: the publication state machine (core.articles)
- ArticleReaction: like / bookmark toggles
- ReadingSession: accumulated read time per (article, reader) + collection flags
- PromoCode / PromoUsage: capped one-time bonuses
- ReferralBonus: at most one referral payout per referee
- PromotionRequest: application to become a writer
- PaymentRequest: admin-approved deposits and withdrawals
"""

import uuid
import secrets
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q
from django.conf import settings
from django.utils.html import strip_tags


MONEY = dict(max_digits=12, decimal_places=2)


def gen_referral_code():
	# Named function = migration-friendly
	return secrets.token_hex(4).upper()


class Role(models.TextChoices):
	USER = "user", "User"
	WRITER = "writer", "Writer"
	ADMIN = "admin", "Admin"


class User(AbstractUser):
	"""
	Authenticated caller. Verification and roles are granted outside the engine,
	except for writer promotion which core.promotions performs.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	role = models.CharField(max_length=10, choices=Role.choices, default=Role.USER)
	is_verified = models.BooleanField(default=False)
	referral_code = models.CharField(max_length=16, unique=True, default=gen_referral_code)
	referred_by = models.ForeignKey("self", null=True, blank=True, on_delete=models.SET_NULL, related_name="referrals")

	@property
	def is_admin(self) -> bool:
		return self.role == Role.ADMIN or self.is_superuser

	@property
	def can_write(self) -> bool:
		return self.role in (Role.WRITER, Role.ADMIN) or self.is_superuser


class Wallet(models.Model):
	"""
	Balance holder. Never written directly: every change goes through core.ledger,
	which pairs it with a LedgerEntry.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="wallet")
	balance = models.DecimalField(default=0, **MONEY)
	total_earned = models.DecimalField(default=0, **MONEY)
	total_spent = models.DecimalField(default=0, **MONEY)
	reward_points = models.DecimalField(default=0, **MONEY)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		constraints = [
			models.CheckConstraint(condition=Q(balance__gte=0), name="wallet_balance_non_negative"),
		]

	def __str__(self):
		return f"Wallet {self.id} (balance={self.balance})"


class LedgerEntryKind(models.TextChoices):
	DEPOSIT = "deposit", "Deposit"
	WITHDRAW = "withdraw", "Withdraw"
	PUBLISH_FEE = "publish_fee", "Publish fee"
	PUBLISH_REFUND = "publish_refund", "Publish refund"
	PROMOTION_FEE = "promotion_fee", "Promotion fee"
	PROMOTION_REFUND = "promotion_refund", "Promotion refund"
	REWARD_PAYOUT = "reward_payout", "Reward payout"
	WRITER_REWARD = "writer_reward", "Writer reward"
	PROMO_BONUS = "promo_bonus", "Promo bonus"
	REFERRAL_BONUS = "referral_bonus", "Referral bonus"


class LedgerEntry(models.Model):
	"""
	One balance mutation. amount is signed (credits > 0, debits < 0) so
	sum(amount) over a wallet equals its balance.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	wallet = models.ForeignKey(Wallet, on_delete=models.PROTECT, related_name="entries")
	amount = models.DecimalField(**MONEY)
	kind = models.CharField(max_length=20, choices=LedgerEntryKind.choices)
	related_id = models.CharField(max_length=64, blank=True, default="") # article / request / promo id
	balance_after = models.DecimalField(**MONEY)
	memo = models.CharField(max_length=255, blank=True, default="")
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		ordering = ["-created_at"]
		indexes = [
			models.Index(fields=["wallet", "kind"], name="ledger_wallet_kind_idx"),
			models.Index(fields=["kind", "related_id"], name="ledger_kind_related_idx"),
		]

	def save(self, *args, **kwargs):
		if not self._state.adding:
			raise ValueError("ledger entries are immutable")
		super().save(*args, **kwargs)

	def delete(self, *args, **kwargs):
		raise ValueError("ledger entries are append-only")


class ArticleStatus(models.TextChoices):
	DRAFT = "draft", "Draft"
	PENDING = "pending", "Pending"
	PUBLISHED = "published", "Published"
	REJECTED = "rejected", "Rejected"


class Article(models.Model):
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	slug = models.SlugField(max_length=120, unique=True)
	author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="articles")
	title = models.CharField(max_length=200)
	description = models.TextField(blank=True, default="")
	content = models.TextField(blank=True, default="")
	word_count = models.PositiveIntegerField(default=0)
	status = models.CharField(max_length=10, choices=ArticleStatus.choices, default=ArticleStatus.DRAFT)
	publish_fee_charged = models.BooleanField(default=False)
	rejection_reason = models.TextField(null=True, blank=True)
	reward_amount = models.DecimalField(default=0, **MONEY) # per-read reader reward, fixed at approval
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)
	published_at = models.DateTimeField(null=True, blank=True)

	class Meta:
		indexes = [
			models.Index(fields=["author", "status"], name="article_author_status_idx"),
		]

	def save(self, *args, **kwargs):
		self.word_count = len(strip_tags(self.content or "").split())
		update_fields = kwargs.get("update_fields")
		if update_fields is not None and "content" in update_fields:
			kwargs["update_fields"] = set(update_fields) | {"word_count"}
		super().save(*args, **kwargs)

	def __str__(self):
		return f"{self.title} [{self.status}]"


class ReactionKind(models.TextChoices):
	LIKE = "like", "Like"
	BOOKMARK = "bookmark", "Bookmark"


class ArticleReaction(models.Model):
	id = models.BigAutoField(primary_key=True)
	article = models.ForeignKey(Article, on_delete=models.CASCADE, related_name="reactions")
	user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="reactions")
	kind = models.CharField(max_length=10, choices=ReactionKind.choices)
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		constraints = [
			models.UniqueConstraint(fields=["article", "user", "kind"], name="unique_reaction_per_user"),
		]


class ReadingSession(models.Model):
	"""
	Time a reader spent on an article. One row per (article, reader); re-reading
	resumes it. reward_collected flips false → true exactly once (core.rewards).
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	article = models.ForeignKey(Article, on_delete=models.PROTECT, related_name="reading_sessions")
	reader = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="reading_sessions")
	started_at = models.DateTimeField(auto_now_add=True)
	last_heartbeat_at = models.DateTimeField(null=True, blank=True)
	accumulated_seconds = models.FloatField(default=0)
	reward_collected = models.BooleanField(default=False)
	collected_at = models.DateTimeField(null=True, blank=True)
	writer_collected = models.BooleanField(default=False) # author paid for this read

	class Meta:
		constraints = [
			models.UniqueConstraint(fields=["article", "reader"], name="unique_session_per_reader"),
		]


class PromoCode(models.Model):
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	code = models.CharField(max_length=32, unique=True) # stored upper-case
	bonus_amount = models.DecimalField(**MONEY)
	usage_limit = models.PositiveIntegerField()
	used_count = models.PositiveIntegerField(default=0)
	expiry_date = models.DateTimeField()
	is_active = models.BooleanField(default=True)
	created_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		constraints = [
			models.CheckConstraint(condition=Q(used_count__lte=models.F("usage_limit")), name="promo_used_within_limit"),
		]

	@property
	def usage_percentage(self) -> float:
		if not self.usage_limit:
			return 100.0
		return round(self.used_count * 100 / self.usage_limit, 2)


class PromoUsage(models.Model):
	"""
	Unique (promo_code, user): a code can never be redeemed twice by one user.
	"""
	id = models.BigAutoField(primary_key=True)
	promo_code = models.ForeignKey(PromoCode, on_delete=models.PROTECT, related_name="usages")
	user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="promo_usages")
	bonus_received = models.DecimalField(**MONEY)
	used_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		constraints = [
			models.UniqueConstraint(fields=["promo_code", "user"], name="unique_promo_usage_per_user"),
		]


class ReferralBonus(models.Model):
	"""
	Idempotent record of a referral payout; the OneToOne on referee is the guard.
	"""
	id = models.BigAutoField(primary_key=True)
	referee = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="referral_bonus")
	referrer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="referral_bonuses_paid")
	amount = models.DecimalField(**MONEY)
	created_at = models.DateTimeField(auto_now_add=True)


class RequestStatus(models.TextChoices):
	PENDING = "pending", "Pending"
	APPROVED = "approved", "Approved"
	REJECTED = "rejected", "Rejected"


class PromotionRequest(models.Model):
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="promotion_requests")
	status = models.CharField(max_length=10, choices=RequestStatus.choices, default=RequestStatus.PENDING)
	fee_charged = models.DecimalField(default=0, **MONEY)
	rejection_reason = models.TextField(blank=True, default="")
	requested_at = models.DateTimeField(auto_now_add=True)
	reviewed_at = models.DateTimeField(null=True, blank=True)
	reviewed_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")

	class Meta:
		constraints = [
			models.UniqueConstraint(
				fields=["user"],
				condition=Q(status="pending"),
				name="one_pending_promotion_per_user",
			),
		]


class PaymentRequestType(models.TextChoices):
	DEPOSIT = "deposit", "Deposit"
	WITHDRAW = "withdraw", "Withdraw"


class PaymentRequest(models.Model):
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="payment_requests")
	request_type = models.CharField(max_length=10, choices=PaymentRequestType.choices)
	amount = models.DecimalField(**MONEY)
	status = models.CharField(max_length=10, choices=RequestStatus.choices, default=RequestStatus.PENDING)
	admin_note = models.TextField(blank=True, default="")
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)
