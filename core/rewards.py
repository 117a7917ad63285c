"""Reward collector: pays readers for qualifying reads and writers for their readers.

Reader payout is at-most-once per (article, reader): the reward_collected flag
flips through a compare-and-swap UPDATE and the ledger credit happens in the
same transaction, so no state is ever collected-but-unpaid or paid-but-recollectable.

Writer figures (points_earned, uncollected_reads) are projections over reading
sessions and ledger entries, never separately maintained counters.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from django.db import transaction
from django.db.models import Sum, Count, Q
from django.utils import timezone

from . import ledger
from .articles import get_article
from .constants import min_read_seconds, reader_reward, to_money, writer_reward_per_read
from .errors import AlreadyCollected, IsAuthor, NotEligible, PermissionDenied
from .models import Article, LedgerEntry, LedgerEntryKind, ReadingSession

logger = logging.getLogger(__name__)


@dataclass
class Payout:
	article_id: str
	reader_id: str
	amount: Decimal
	entry: LedgerEntry

	@property
	def balance(self) -> Decimal:
		return self.entry.balance_after


@transaction.atomic
def collect(ref, reader) -> Payout:
	"""
	Pay the reader's reward for one article, exactly once.

	Checked in order: IsAuthor, NotEligible (no session / not published),
	AlreadyCollected, NotEligible (not enough reading time).
	"""
	article = get_article(ref)
	if article.author_id == reader.pk:
		raise IsAuthor("authors cannot collect rewards on their own articles")
	if article.published_at is None:
		raise NotEligible("article has not been published")

	session = ReadingSession.objects.filter(article=article, reader=reader).first()
	if session is None:
		raise NotEligible("start reading the article first")
	if session.reward_collected:
		raise AlreadyCollected("reward already collected for this article")

	required = min_read_seconds()
	flipped = ReadingSession.objects.filter(
		pk=session.pk, reward_collected=False, accumulated_seconds__gte=required,
	).update(reward_collected=True, collected_at=timezone.now())
	if not flipped:
		session.refresh_from_db()
		if session.reward_collected:
			raise AlreadyCollected("reward already collected for this article")
		raise NotEligible(f"read for {required - session.accumulated_seconds:.0f} more seconds")

	amount = article.reward_amount if article.reward_amount > 0 else reader_reward()
	wallet = ledger.get_wallet(reader)
	entry = ledger.credit(
		wallet.pk, amount, LedgerEntryKind.REWARD_PAYOUT,
		related_id=article.pk, memo=f"reading reward: {article.title}",
	)
	logger.info("reader reward collected article=%s reader=%s amount=%s", article.pk, reader.pk, amount)
	return Payout(article_id=str(article.pk), reader_id=str(reader.pk), amount=amount, entry=entry)


def _paid_to_writer(article_ids, writer) -> dict:
	rows = (
		LedgerEntry.objects
		.filter(wallet__user=writer, kind=LedgerEntryKind.WRITER_REWARD, related_id__in=[str(a) for a in article_ids])
		.values("related_id")
		.annotate(s=Sum("amount"))
	)
	return {r["related_id"]: r["s"] or Decimal("0.00") for r in rows}


def _article_figures(article: Article, paid: dict) -> dict:
	# article carries the total / uncollected annotations from _read_counts
	return {
		"id": str(article.pk),
		"title": article.title,
		"points_earned": paid.get(str(article.pk), Decimal("0.00")),
		"uncollected_reads": article.uncollected or 0,
		"total_reads": article.total or 0,
	}


def _read_counts(article_qs):
	return article_qs.annotate(
		total=Count("reading_sessions", filter=Q(reading_sessions__reward_collected=True)),
		uncollected=Count(
			"reading_sessions",
			filter=Q(reading_sessions__reward_collected=True, reading_sessions__writer_collected=False),
		),
	)


def article_earnings(ref, writer) -> dict:
	article = get_article(ref)
	if article.author_id != writer.pk and not writer.is_admin:
		raise PermissionDenied("only the author can see article earnings")
	annotated = _read_counts(Article.objects.filter(pk=article.pk)).get()
	paid = _paid_to_writer([article.pk], article.author)
	return _article_figures(annotated, paid)


def writer_earnings(writer) -> dict:
	articles = list(_read_counts(Article.objects.filter(author=writer, published_at__isnull=False)).order_by("-published_at"))
	paid = _paid_to_writer([a.pk for a in articles], writer)
	rows = [_article_figures(a, paid) for a in articles]
	return {
		"total_points_earned": sum((r["points_earned"] for r in rows), Decimal("0.00")),
		"articles": rows,
	}


@transaction.atomic
def collect_writer_rewards(ref, writer) -> dict:
	"""
	Pay the author for every reader-collected read not yet paid to them.

	Exactly the sessions flipped to writer_collected here are paid for, inside one
	transaction with the ledger credit.
	"""
	article = get_article(ref)
	if article.author_id != writer.pk:
		raise PermissionDenied("only the author can collect writer rewards")

	session_ids = list(
		ReadingSession.objects.select_for_update()
		.filter(article=article, reward_collected=True, writer_collected=False)
		.values_list("pk", flat=True)
	)
	reads = 0
	if session_ids:
		reads = ReadingSession.objects.filter(pk__in=session_ids, writer_collected=False).update(writer_collected=True)
	if not reads:
		raise NotEligible("no new reads to collect")

	amount = to_money(writer_reward_per_read() * reads)
	wallet = ledger.get_wallet(writer)
	ledger.credit(
		wallet.pk, amount, LedgerEntryKind.WRITER_REWARD,
		related_id=article.pk, memo=f"writer reward for {reads} reads: {article.title}",
	)
	logger.info("writer reward collected article=%s reads=%s amount=%s", article.pk, reads, amount)
	figures = article_earnings(article.pk, writer)
	return {
		"points_collected": amount,
		"reads_collected": reads,
		"total_points_earned": figures["points_earned"],
	}
