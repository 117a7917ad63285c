"""
Tests for reading sessions: start/resume, clamped heartbeats, eligibility
"""
import pytest

from core import reading
from core.errors import InvalidState, NotFound, ValidationFailed
from core.models import ReadingSession

from .conftest import idle


def test_start_is_idempotent(published, reader):
	first = reading.start_or_resume(published.pk, reader)
	second = reading.start_or_resume(published.slug, reader)
	assert first.pk == second.pk
	assert first.accumulated_seconds == 0
	assert ReadingSession.objects.count() == 1


@pytest.mark.parametrize("fixture", ["draft", "pending"])
def test_unpublished_articles_cannot_be_read(request, reader, fixture):
	article = request.getfixturevalue(fixture)
	with pytest.raises(InvalidState):
		reading.start_or_resume(article.pk, reader)


def test_heartbeats_accumulate(published, reader):
	session = reading.start_or_resume(published.pk, reader)
	idle(session, 10)
	reading.heartbeat(session.pk, reader, 2)
	idle(session, 10)
	session = reading.heartbeat(session.pk, reader, "1.5")
	assert session.accumulated_seconds == pytest.approx(3.5)
	assert session.last_heartbeat_at is not None


def test_oversized_heartbeat_is_clamped(published, reader):
	session = reading.start_or_resume(published.pk, reader)
	idle(session, 60)
	session = reading.heartbeat(session.pk, reader, 3600)
	assert session.accumulated_seconds == 5


@pytest.mark.parametrize("value", [-1, "abc", None, True, float("nan")])
def test_bad_heartbeats_are_refused(published, reader, value):
	session = reading.start_or_resume(published.pk, reader)
	with pytest.raises(ValidationFailed):
		reading.heartbeat(session.pk, reader, value)
	session.refresh_from_db()
	assert session.accumulated_seconds == 0


def test_heartbeat_on_someone_elses_session(published, reader, make_user):
	session = reading.start_or_resume(published.pk, reader)
	with pytest.raises(NotFound):
		reading.heartbeat(session.pk, make_user("intruder"), 1)


def test_eligible_after_29_then_2_seconds(published, reader, settings):
	settings.READING_HEARTBEAT_MAX_SECONDS = 60
	session = reading.start_or_resume(published.pk, reader)

	idle(session, 30)
	session = reading.heartbeat(session.pk, reader, 29)
	assert not reading.is_eligible(session)

	idle(session, 3)
	session = reading.heartbeat(session.pk, reader, 2)
	assert reading.is_eligible(session)


def test_burst_of_heartbeats_is_bounded_by_wall_time(published, reader):
	session = reading.start_or_resume(published.pk, reader)
	for _ in range(6):
		session = reading.heartbeat(session.pk, reader, 5)
	assert session.accumulated_seconds < 7
	assert not reading.is_eligible(session)


def test_wall_time_since_last_heartbeat_is_credited(published, reader):
	session = reading.start_or_resume(published.pk, reader)
	session = reading.heartbeat(session.pk, reader, 5)
	assert session.accumulated_seconds < 1.5

	idle(session, 10)
	before = session.accumulated_seconds
	session = reading.heartbeat(session.pk, reader, 5)
	assert session.accumulated_seconds == pytest.approx(before + 5)


def test_wall_clock_check_can_be_turned_off(published, reader, settings):
	settings.READING_HEARTBEAT_WALL_CLOCK = False
	session = reading.start_or_resume(published.pk, reader)
	reading.heartbeat(session.pk, reader, 5)
	session = reading.heartbeat(session.pk, reader, 5)
	assert session.accumulated_seconds == 10


def test_min_read_seconds_is_configurable(published, reader, settings, read_for):
	settings.MIN_READ_SECONDS = 3
	session = read_for(published, reader, 3)
	assert reading.is_eligible(session)


def test_reading_state_for_the_author(published, writer):
	state = reading.reading_state(published.pk, writer)
	assert state["is_author"] is True
	assert state["is_eligible"] is False
	assert state["session_id"] is None
	assert state["remaining_seconds"] == 30


def test_reading_state_tracks_progress(published, reader, read_for):
	session = read_for(published, reader, 10)
	state = reading.reading_state(published.pk, reader)
	assert state["session_id"] == str(session.pk)
	assert state["remaining_seconds"] == 20
	assert state["is_rewarded"] is False
