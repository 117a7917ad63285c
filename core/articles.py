"""Article lifecycle: the draft → pending → published / rejected state machine.

Transitions that move money (request_publish debits the publish fee, reject_article
refunds half of it) lock the article row and run the ledger call inside the same
@transaction.atomic block, so a failed debit/credit leaves the status untouched.
"""
import logging
import uuid
from django.db import transaction, IntegrityError
from django.utils import timezone
from django.utils.text import slugify
from django.conf import settings

from . import ledger
from .adapters.notification_adapter import NotificationAdapter
from .constants import publish_fee, publish_refund, reader_reward
from .errors import InvalidState, NotFound, PermissionDenied, ValidationFailed
from .models import Article, ArticleReaction, ArticleStatus, LedgerEntryKind, ReactionKind

logger = logging.getLogger(__name__)

EDITABLE = (ArticleStatus.DRAFT, ArticleStatus.REJECTED)


def get_article(ref, *, lock: bool = False) -> Article:
	"""
	Resolve an article by id (UUID) or slug.
	"""
	qs = Article.objects.select_for_update() if lock else Article.objects.all()
	try:
		pk = ref if isinstance(ref, uuid.UUID) else uuid.UUID(str(ref))
		lookup = {"pk": pk}
	except ValueError:
		lookup = {"slug": str(ref)}
	try:
		return qs.get(**lookup)
	except Article.DoesNotExist:
		raise NotFound(f"article {ref} not found")


def _unique_slug(title: str) -> str:
	base = slugify(title)[:100] or "article"
	return f"{base}-{uuid.uuid4().hex[:6]}"


def _ensure_author(article: Article, user) -> None:
	if article.author_id != user.pk:
		raise PermissionDenied("only the author can change this article")


def create_article(author, title: str, description: str = "", content: str = "") -> Article:
	"""
	New articles always start as free drafts.
	"""
	if not author.can_write:
		raise PermissionDenied("only writers can create articles")
	title = (title or "").strip()
	if not title:
		raise ValidationFailed("title is required")
	article = Article.objects.create(
		slug=_unique_slug(title),
		author=author,
		title=title,
		description=(description or "").strip(),
		content=content or "",
	)
	logger.info("article created id=%s author=%s", article.pk, author.pk)
	return article


@transaction.atomic
def update_article(ref, user, *, title=None, description=None, content=None) -> Article:
	"""
	Save a draft. Allowed only while draft or rejected; a rejected article goes
	back to draft so the next publish request charges the fee again.
	"""
	article = get_article(ref, lock=True)
	_ensure_author(article, user)
	if article.status not in EDITABLE:
		raise InvalidState(f"cannot edit a {article.status} article")

	if title is not None:
		title = title.strip()
		if not title:
			raise ValidationFailed("title is required")
		article.title = title
	if description is not None:
		article.description = description.strip()
	if content is not None:
		article.content = content
	article.status = ArticleStatus.DRAFT
	article.save()
	return article


@transaction.atomic
def delete_article(ref, user) -> None:
	article = get_article(ref, lock=True)
	_ensure_author(article, user)
	if article.status not in EDITABLE:
		raise InvalidState(f"cannot delete a {article.status} article")
	article.reactions.all().delete()
	article.delete()
	logger.info("article deleted id=%s", ref)


def publish_errors(article: Article) -> list[str]:
	"""
	Guards for draft → pending; empty list means ready.
	"""
	errors = []
	if article.word_count < settings.MIN_ARTICLE_WORDS:
		errors.append(f"content must have at least {settings.MIN_ARTICLE_WORDS} words (has {article.word_count})")
	if len(article.title.strip()) < settings.MIN_TITLE_LENGTH:
		errors.append(f"title must be at least {settings.MIN_TITLE_LENGTH} characters")
	if len(article.description.strip()) < settings.MIN_DESCRIPTION_LENGTH:
		errors.append(f"description must be at least {settings.MIN_DESCRIPTION_LENGTH} characters")
	return errors


@transaction.atomic
def request_publish(ref, user):
	"""
	draft → pending, debiting the publish fee from the author's wallet.

	Raises InsufficientBalance (nothing changes) when the wallet cannot cover the fee.
	Returns (article, ledger_entry).
	"""
	article = get_article(ref, lock=True)
	_ensure_author(article, user)
	if article.status not in EDITABLE:
		raise InvalidState(f"cannot request publishing of a {article.status} article")

	errors = publish_errors(article)
	if errors:
		raise ValidationFailed("article is not ready to publish", errors)

	wallet = ledger.get_wallet(user)
	entry = ledger.debit(
		wallet.pk, publish_fee(), LedgerEntryKind.PUBLISH_FEE,
		related_id=article.pk, memo=f"publish fee: {article.title}",
	)

	article.status = ArticleStatus.PENDING
	article.publish_fee_charged = True
	article.rejection_reason = None
	article.save(update_fields=["status", "publish_fee_charged", "rejection_reason", "updated_at"])
	logger.info("article pending id=%s fee=%s", article.pk, -entry.amount)
	return article, entry


@transaction.atomic
def approve_article(ref, admin) -> Article:
	"""
	pending → published. Fixes the per-read reader reward at the current rate.
	"""
	if not admin.is_admin:
		raise PermissionDenied("admin only")
	article = get_article(ref, lock=True)
	if article.status != ArticleStatus.PENDING:
		raise InvalidState(f"cannot approve a {article.status} article")

	article.status = ArticleStatus.PUBLISHED
	article.published_at = timezone.now()
	article.reward_amount = reader_reward()
	article.save(update_fields=["status", "published_at", "reward_amount", "updated_at"])

	NotificationAdapter.notify(article.author_id, "Article published", f'"{article.title}" is now live.')
	logger.info("article published id=%s by=%s", article.pk, admin.pk)
	return article


@transaction.atomic
def reject_article(ref, admin, reason: str):
	"""
	pending → rejected with a reason; half the publish fee goes back to the author.

	The refund and the status flip share one transaction. Returns (article, refund_entry).
	"""
	if not admin.is_admin:
		raise PermissionDenied("admin only")
	reason = (reason or "").strip()
	if not reason:
		raise ValidationFailed("a rejection reason is required")

	article = get_article(ref, lock=True)
	if article.status != ArticleStatus.PENDING:
		raise InvalidState(f"cannot reject a {article.status} article")

	entry = None
	refund = publish_refund()
	if article.publish_fee_charged and refund > 0:
		wallet = ledger.get_wallet(article.author)
		entry = ledger.credit(
			wallet.pk, refund, LedgerEntryKind.PUBLISH_REFUND,
			related_id=article.pk, memo=f"publish refund: {article.title}",
		)

	article.status = ArticleStatus.REJECTED
	article.rejection_reason = reason
	article.publish_fee_charged = False
	article.save(update_fields=["status", "rejection_reason", "publish_fee_charged", "updated_at"])

	NotificationAdapter.notify(article.author_id, "Article rejected", f'"{article.title}": {reason}')
	logger.info("article rejected id=%s by=%s", article.pk, admin.pk)
	return article, entry


def check_publish_balance(user) -> dict:
	wallet = ledger.get_wallet(user)
	required = publish_fee()
	return {
		"has_sufficient_balance": wallet.balance >= required,
		"current_balance": wallet.balance,
		"required_balance": required,
		"missing_amount": max(required - wallet.balance, 0),
	}


def toggle_reaction(ref, user, kind: str) -> dict:
	"""
	Idempotent like/bookmark toggle returning the authoritative state.
	"""
	if kind not in ReactionKind.values:
		raise ValidationFailed(f"unknown reaction {kind}")
	article = get_article(ref)
	if article.status != ArticleStatus.PUBLISHED:
		raise InvalidState("only published articles can be liked or bookmarked")

	with transaction.atomic():
		deleted, _ = ArticleReaction.objects.filter(article=article, user=user, kind=kind).delete()
		active = not deleted
		if active:
			try:
				with transaction.atomic():
					ArticleReaction.objects.create(article=article, user=user, kind=kind)
			except IntegrityError:
				# a concurrent toggle created it first; state is "active" either way
				pass
	count = ArticleReaction.objects.filter(article=article, kind=kind).count()
	return {"active": active, "count": count}


def published_articles():
	return Article.objects.filter(status=ArticleStatus.PUBLISHED).select_related("author").order_by("-published_at")


def pending_articles():
	return Article.objects.filter(status=ArticleStatus.PENDING).select_related("author").order_by("updated_at")


def articles_by(author):
	return Article.objects.filter(author=author).order_by("-updated_at")
