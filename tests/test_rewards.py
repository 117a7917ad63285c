"""
Tests for reward collection (reader payouts, writer earnings)
"""
import pytest
from decimal import Decimal

from core import ledger, reading, rewards
from core.errors import AlreadyCollected, IsAuthor, NotEligible, PermissionDenied
from core.models import LedgerEntry, LedgerEntryKind, ReadingSession

from .conftest import balance_of, idle


class TestCollect:

	def test_reader_paid_once(self, published, reader, read_for):
		read_for(published, reader, 30)
		payout = rewards.collect(published.pk, reader)

		assert payout.amount == Decimal("0.50")
		assert payout.balance == Decimal("0.50")
		assert payout.entry.kind == LedgerEntryKind.REWARD_PAYOUT
		assert payout.entry.related_id == str(published.pk)
		session = ReadingSession.objects.get(article=published, reader=reader)
		assert session.reward_collected is True
		assert session.collected_at is not None

	def test_second_collect_is_already_collected(self, published, reader, read_for):
		read_for(published, reader, 30)
		rewards.collect(published.pk, reader)
		with pytest.raises(AlreadyCollected):
			rewards.collect(published.pk, reader)

		assert balance_of(reader) == Decimal("0.50")
		assert LedgerEntry.objects.filter(kind=LedgerEntryKind.REWARD_PAYOUT).count() == 1

	def test_more_reading_does_not_reopen_collection(self, published, reader, read_for):
		read_for(published, reader, 30)
		rewards.collect(published.pk, reader)
		session = read_for(published, reader, 30)
		assert not reading.is_eligible(session)
		with pytest.raises(AlreadyCollected):
			rewards.collect(published.pk, reader)

	def test_not_enough_reading_is_not_eligible(self, published, reader, read_for, settings):
		settings.READING_HEARTBEAT_MAX_SECONDS = 60
		session = reading.start_or_resume(published.pk, reader)
		idle(session, 30)
		reading.heartbeat(session.pk, reader, 29)
		with pytest.raises(NotEligible):
			rewards.collect(published.pk, reader)

		idle(session, 3)
		reading.heartbeat(session.pk, reader, 2)
		assert rewards.collect(published.pk, reader).amount == Decimal("0.50")

	def test_without_a_session_is_not_eligible(self, published, reader):
		with pytest.raises(NotEligible):
			rewards.collect(published.pk, reader)

	def test_author_is_always_refused(self, published, writer, read_for, settings):
		settings.MIN_READ_SECONDS = 1
		with pytest.raises(IsAuthor):
			rewards.collect(published.pk, writer)
		read_for(published, writer, 5)
		with pytest.raises(IsAuthor):
			rewards.collect(published.pk, writer)

	def test_reward_fixed_at_approval(self, published, reader, read_for, settings):
		settings.READER_REWARD_AMOUNT = Decimal("9.00")
		read_for(published, reader, 30)
		assert rewards.collect(published.pk, reader).amount == Decimal("0.50")

	def test_unpublished_article_is_not_eligible(self, pending, reader):
		with pytest.raises(NotEligible):
			rewards.collect(pending.pk, reader)


class TestWriterEarnings:

	@pytest.fixture
	def two_reads(self, published, make_user, read_for):
		for name in ("r1", "r2"):
			user = make_user(name)
			read_for(published, user, 30)
			rewards.collect(published.pk, user)
		# started reading but never collected: not counted
		read_for(published, make_user("r3"), 10)
		return published

	def test_projection_counts_collected_reads(self, two_reads, writer):
		data = rewards.writer_earnings(writer)
		row = data["articles"][0]
		assert row["total_reads"] == 2
		assert row["uncollected_reads"] == 2
		assert row["points_earned"] == Decimal("0.00")
		assert data["total_points_earned"] == Decimal("0.00")

	def test_collect_pays_per_read_once(self, two_reads, writer):
		result = rewards.collect_writer_rewards(two_reads.pk, writer)
		assert result["reads_collected"] == 2
		assert result["points_collected"] == Decimal("1.00")
		assert result["total_points_earned"] == Decimal("1.00")

		wallet = ledger.get_wallet(writer)
		assert wallet.reward_points == Decimal("1.00")
		assert rewards.article_earnings(two_reads.pk, writer)["uncollected_reads"] == 0

		with pytest.raises(NotEligible):
			rewards.collect_writer_rewards(two_reads.pk, writer)

	def test_new_reads_after_collection(self, two_reads, writer, make_user, read_for):
		rewards.collect_writer_rewards(two_reads.pk, writer)
		late = make_user("late")
		read_for(two_reads, late, 30)
		rewards.collect(two_reads.pk, late)

		assert rewards.article_earnings(two_reads.pk, writer)["uncollected_reads"] == 1
		result = rewards.collect_writer_rewards(two_reads.pk, writer)
		assert result["total_points_earned"] == Decimal("1.50")

	def test_only_the_author_sees_or_collects(self, two_reads, reader, admin):
		with pytest.raises(PermissionDenied):
			rewards.article_earnings(two_reads.pk, reader)
		with pytest.raises(PermissionDenied):
			rewards.collect_writer_rewards(two_reads.pk, reader)
		assert rewards.article_earnings(two_reads.pk, admin)["total_reads"] == 2

	def test_every_wallet_reconciles(self, two_reads, writer):
		rewards.collect_writer_rewards(two_reads.pk, writer)
		assert ledger.reconcile_all() == []
