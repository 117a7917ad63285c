"""
Pytest fixtures for the engine tests: users in each role, funded wallets and
articles in each lifecycle state.
"""
import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone

from core import articles, ledger, reading
from core.models import LedgerEntryKind, ReadingSession, Role, User


CONTENT = " ".join(f"word{i}" for i in range(120))


def balance_of(user) -> Decimal:
	return ledger.get_wallet(user).balance


def idle(session, seconds):
	"""Let `seconds` of wall time pass since the session's last heartbeat"""
	ReadingSession.objects.filter(pk=session.pk).update(
		last_heartbeat_at=timezone.now() - timedelta(seconds=seconds),
	)


@pytest.fixture
def make_user(db):
	"""Factory: user with an empty wallet"""
	def _make(username, role=Role.USER, **extra):
		user = User.objects.create_user(username=username, password="pw", role=role, **extra)
		ledger.get_wallet(user)
		return user
	return _make


@pytest.fixture
def fund():
	"""Factory: deposit an amount into a user's wallet through the ledger"""
	def _fund(user, amount):
		wallet = ledger.get_wallet(user)
		return ledger.credit(wallet.pk, amount, LedgerEntryKind.DEPOSIT, memo="test deposit")
	return _fund


@pytest.fixture
def admin(make_user):
	return make_user("admin", role=Role.ADMIN)


@pytest.fixture
def writer(make_user):
	return make_user("writer", role=Role.WRITER)


@pytest.fixture
def reader(make_user):
	return make_user("reader")


@pytest.fixture
def draft(writer):
	"""Draft that passes every publish guard"""
	return articles.create_article(
		writer, "A perfectly fine title", "A description long enough", CONTENT,
	)


@pytest.fixture
def pending(draft, writer, fund):
	fund(writer, "150.00")
	article, _ = articles.request_publish(draft.pk, writer)
	return article


@pytest.fixture
def published(pending, admin):
	return articles.approve_article(pending.pk, admin)


@pytest.fixture
def read_for():
	"""Factory: start/resume a session and report `seconds` of reading in 1s ticks"""
	def _read(article, user, seconds):
		session = reading.start_or_resume(article.pk, user)
		for _ in range(int(seconds)):
			session = reading.heartbeat(session.pk, user, 1)
		return session
	return _read
