"""Reading session tracker.

One ReadingSession per (article, reader). Clients report elapsed active-reading
time in small heartbeats; each delta is clamped per call and against wall time,
so a tampered client cannot claim a long read quickly. Eligibility is computed
on access, never by timers.
"""
import logging
import math
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .articles import get_article
from .constants import (
	heartbeat_cap_seconds, heartbeat_slack_seconds, heartbeat_wall_clock_check, min_read_seconds,
)
from .errors import InvalidState, NotFound, ValidationFailed
from .models import ArticleStatus, ReadingSession

logger = logging.getLogger(__name__)


def start_or_resume(ref, reader) -> ReadingSession:
	"""
	Return the reader's session for the article, creating it on first read.
	"""
	article = get_article(ref)
	if article.status != ArticleStatus.PUBLISHED:
		raise InvalidState("only published articles can be read")
	# get_or_create retries the get when a concurrent insert wins the unique constraint
	session, created = ReadingSession.objects.get_or_create(article=article, reader=reader)
	if created:
		logger.info("reading session started article=%s reader=%s", article.pk, reader.pk)
	return session


def get_session(ref, reader) -> ReadingSession:
	article = get_article(ref)
	try:
		return ReadingSession.objects.get(article=article, reader=reader)
	except ReadingSession.DoesNotExist:
		raise NotFound("no reading session for this article")


def _elapsed(value) -> float:
	if isinstance(value, bool):
		raise ValidationFailed("elapsedSeconds must be a number")
	try:
		seconds = float(value)
	except (TypeError, ValueError):
		raise ValidationFailed("elapsedSeconds must be a number")
	if not math.isfinite(seconds) or seconds < 0:
		raise ValidationFailed("elapsedSeconds must be a non-negative number")
	return seconds


@transaction.atomic
def heartbeat(session_id, reader, elapsed_seconds) -> ReadingSession:
	"""
	Add one clamped delta of active reading time; accumulated time never decreases.

	The delta is bounded by the per-call cap and by the wall time since the
	previous heartbeat (or the session start) plus a small slack, so a burst of
	back-to-back calls cannot add more time than actually passed.
	"""
	elapsed = _elapsed(elapsed_seconds)
	session = ReadingSession.objects.select_for_update().filter(pk=session_id, reader=reader).first()
	if session is None:
		raise NotFound("no reading session for this reader")

	now = timezone.now()
	delta = min(elapsed, heartbeat_cap_seconds())
	if heartbeat_wall_clock_check():
		since = (now - (session.last_heartbeat_at or session.started_at)).total_seconds()
		delta = min(delta, max(since, 0) + heartbeat_slack_seconds())
	if delta < elapsed:
		logger.warning("heartbeat clamped session=%s reported=%s applied=%s", session_id, elapsed, delta)

	ReadingSession.objects.filter(pk=session.pk).update(
		accumulated_seconds=F("accumulated_seconds") + delta,
		last_heartbeat_at=now,
	)
	session.refresh_from_db()
	return session


def is_eligible(session: ReadingSession) -> bool:
	return session.accumulated_seconds >= min_read_seconds() and not session.reward_collected


def reading_state(ref, reader) -> dict:
	"""
	Snapshot the reading page needs: progress, threshold and whether the reward is taken.
	"""
	article = get_article(ref)
	session = ReadingSession.objects.filter(article=article, reader=reader).first()
	required = min_read_seconds()
	accumulated = session.accumulated_seconds if session else 0.0
	return {
		"session_id": str(session.pk) if session else None,
		"accumulated_seconds": accumulated,
		"required_seconds": required,
		"remaining_seconds": max(required - accumulated, 0),
		"is_eligible": bool(session) and is_eligible(session) and article.author_id != reader.pk,
		"is_rewarded": bool(session and session.reward_collected),
		"is_author": article.author_id == reader.pk,
	}
