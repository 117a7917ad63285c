"""
Race tests for the three guarded hot spots: wallet debits, reward collection,
and the last promo slot. They need real row locks, so they only run against
PostgreSQL:

    DB_ENGINE=postgres POSTGRES_HOST=localhost pytest tests/test_concurrency.py

with the postgres and test extras installed.
"""
import threading
import pytest
from datetime import timedelta
from decimal import Decimal
from django.db import connection
from django.utils import timezone

from core import articles, ledger, promos, rewards
from core.errors import AlreadyCollected, EngineError, InsufficientBalance, LimitReached
from core.models import ArticleStatus, LedgerEntryKind, PromoUsage

from .conftest import CONTENT, balance_of

pytestmark = [
	pytest.mark.django_db(transaction=True),
	pytest.mark.skipif(connection.vendor == "sqlite", reason="needs row-level locking"),
]


def race(fn, args_list):
	"""Run fn(*args) for each args tuple at once; return the results or raised EngineErrors."""
	barrier = threading.Barrier(len(args_list))
	results = [None] * len(args_list)

	def worker(i, args):
		try:
			barrier.wait()
			results[i] = fn(*args)
		except EngineError as e:
			results[i] = e
		finally:
			connection.close()

	threads = [threading.Thread(target=worker, args=(i, a)) for i, a in enumerate(args_list)]
	for t in threads:
		t.start()
	for t in threads:
		t.join()
	return results


def test_one_fee_two_publish_requests(writer, fund):
	fund(writer, "150")
	first = articles.create_article(writer, "First article", "A description here", CONTENT)
	second = articles.create_article(writer, "Second article", "A description here", CONTENT)

	results = race(articles.request_publish, [(first.pk, writer), (second.pk, writer)])

	failures = [r for r in results if isinstance(r, InsufficientBalance)]
	assert len(failures) == 1
	assert balance_of(writer) == Decimal("0.00")
	first.refresh_from_db()
	second.refresh_from_db()
	assert sorted([first.status, second.status]) == [ArticleStatus.DRAFT, ArticleStatus.PENDING]
	assert ledger.reconcile_all() == []


def test_collect_pays_once_under_races(published, reader, read_for):
	read_for(published, reader, 30)

	results = race(rewards.collect, [(published.pk, reader)] * 5)

	assert sum(isinstance(r, rewards.Payout) for r in results) == 1
	assert sum(isinstance(r, AlreadyCollected) for r in results) == 4
	assert ledger.get_wallet(reader).entries.filter(kind=LedgerEntryKind.REWARD_PAYOUT).count() == 1
	assert balance_of(reader) == Decimal("0.50")


def test_promo_cap_under_races(admin, make_user):
	promo = promos.create_promo_code(admin, "RUSH", "10", 3, timezone.now() + timedelta(days=1))
	users = [make_user(f"u{i}") for i in range(8)]

	results = race(promos.redeem_promo_code, [(promo.code, u) for u in users])

	assert sum(isinstance(r, PromoUsage) for r in results) == 3
	assert sum(isinstance(r, LimitReached) for r in results) == 5
	promo.refresh_from_db()
	assert promo.used_count == 3
	assert sum(balance_of(u) for u in users) == Decimal("30.00")
	assert ledger.reconcile_all() == []
