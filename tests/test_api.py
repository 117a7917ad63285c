"""
Tests for the JSON API: status codes, error payloads and fixed-point amounts
"""
import json
import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone

from core import articles, promos
from core.models import ArticleStatus, ReadingSession

from .conftest import balance_of, idle


def post(client, url, data=None):
	return client.post(url, data=json.dumps(data or {}), content_type="application/json")


@pytest.fixture
def as_user(client):
	def _as(user):
		client.force_login(user)
		return client
	return _as


class TestAuth:

	def test_anonymous_gets_401(self, client, draft):
		resp = post(client, f"/api/articles/{draft.slug}/request-publish")
		assert resp.status_code == 401
		assert resp.json()["error"] == "not_authenticated"

	def test_wrong_method_is_400(self, as_user, writer, draft):
		resp = as_user(writer).get(f"/api/articles/{draft.slug}/request-publish")
		assert resp.status_code == 400

	def test_non_admin_cannot_approve(self, as_user, writer, pending):
		resp = post(as_user(writer), f"/api/articles/{pending.pk}/approve")
		assert resp.status_code == 403

	def test_health(self, client):
		assert client.get("/api/health").json() == {"ok": True}


class TestArticleEndpoints:

	def test_create_and_save_draft(self, as_user, writer):
		client = as_user(writer)
		resp = post(client, "/api/articles/create", {"title": "Hello world", "content": "one two"})
		assert resp.status_code == 201
		slug = resp.json()["slug"]

		resp = post(client, f"/api/articles/{slug}/save", {"content": "one two three"})
		assert resp.status_code == 200
		assert resp.json()["word_count"] == 3

	def test_request_publish_insufficient_balance_is_402(self, as_user, writer, draft, fund):
		fund(writer, "100")
		resp = post(as_user(writer), f"/api/articles/{draft.slug}/request-publish")

		assert resp.status_code == 402
		body = resp.json()
		assert body["error"] == "insufficient_balance"
		assert body["required"] == "150.00"
		assert body["available"] == "100.00"
		draft.refresh_from_db()
		assert draft.status == ArticleStatus.DRAFT

	def test_request_publish_returns_new_balance(self, as_user, writer, draft, fund):
		fund(writer, "200")
		resp = post(as_user(writer), f"/api/articles/{draft.slug}/request-publish")
		assert resp.status_code == 200
		assert resp.json()["fee"] == "150.00"
		assert resp.json()["balance"] == "50.00"
		assert resp.json()["article"]["status"] == "pending"

	def test_validation_errors_are_listed(self, as_user, writer, fund):
		fund(writer, "200")
		client = as_user(writer)
		slug = post(client, "/api/articles/create", {"title": "Short article"}).json()["slug"]
		resp = post(client, f"/api/articles/{slug}/request-publish")
		assert resp.status_code == 400
		assert len(resp.json()["errors"]) == 2

	def test_edit_pending_is_409(self, as_user, writer, pending):
		resp = post(as_user(writer), f"/api/articles/{pending.slug}/save", {"title": "Changed title"})
		assert resp.status_code == 409
		assert resp.json()["error"] == "invalid_state"

	def test_reject_with_reason(self, as_user, admin, writer, pending):
		resp = post(as_user(admin), f"/api/articles/{pending.pk}/reject", {"reason": "too short"})
		assert resp.status_code == 200
		body = resp.json()
		assert body["article"]["status"] == "rejected"
		assert body["article"]["rejection_reason"] == "too short"
		assert body["refund"]["amount"] == "75.00"
		assert balance_of(writer) == Decimal("75.00")

	def test_drafts_are_hidden_from_readers(self, as_user, reader, draft):
		assert as_user(reader).get(f"/api/articles/{draft.slug}").status_code == 404

	def test_published_detail_with_reactions(self, as_user, reader, published):
		client = as_user(reader)
		like = post(client, f"/api/articles/{published.slug}/like").json()
		assert like == {"is_liked": True, "likes_count": 1}

		body = client.get(f"/api/articles/{published.slug}").json()
		assert body["likes_count"] == 1
		assert body["is_liked"] is True
		assert body["is_bookmarked"] is False
		assert body["reward"] == "0.50"

	def test_public_feed(self, client, writer, published):
		articles.create_article(writer, "Still a draft", "", "")
		slugs = [a["slug"] for a in client.get("/api/articles").json()]
		assert slugs == [published.slug]


class TestReadingEndpoints:

	def test_read_then_collect(self, as_user, reader, published, settings):
		settings.READING_HEARTBEAT_MAX_SECONDS = 60
		client = as_user(reader)
		base = f"/api/articles/{published.pk}"

		started = post(client, f"{base}/reading/start")
		assert started.status_code == 200
		session = ReadingSession.objects.get(pk=started.json()["id"])
		idle(session, 30)
		beat = post(client, f"{base}/reading/heartbeat", {"elapsedSeconds": 29})
		assert beat.json()["is_eligible"] is False

		early = post(client, f"{base}/collect-reward")
		assert early.status_code == 403
		assert early.json()["error"] == "not_eligible"

		idle(session, 3)
		beat = post(client, f"{base}/reading/heartbeat", {"elapsedSeconds": 2.5})
		assert beat.json()["accumulated_seconds"] == pytest.approx(31.5)
		assert beat.json()["is_eligible"] is True

		paid = post(client, f"{base}/collect-reward")
		assert paid.status_code == 200
		assert paid.json() == {"reward_points": "0.50", "balance": "0.50"}

		again = post(client, f"{base}/collect-reward")
		assert again.status_code == 409
		assert again.json()["error"] == "already_collected"

		state = client.get(f"{base}/reading").json()
		assert state["is_rewarded"] is True

	def test_author_collect_is_403(self, as_user, writer, published):
		resp = post(as_user(writer), f"/api/articles/{published.pk}/collect-reward")
		assert resp.status_code == 403
		assert resp.json()["error"] == "is_author"

	def test_heartbeat_without_session_is_404(self, as_user, reader, published):
		resp = post(as_user(reader), f"/api/articles/{published.pk}/reading/heartbeat", {"elapsedSeconds": 1})
		assert resp.status_code == 404


class TestWalletEndpoints:

	def test_wallet_amounts_are_strings(self, as_user, reader, fund):
		fund(reader, "12.5")
		body = as_user(reader).get("/api/wallet").json()
		assert body["balance"] == "12.50"
		assert body["total_spending"] == "0.00"

	def test_reward_points_are_not_extra_funds(self, as_user, reader, published, read_for):
		read_for(published, reader, 30)
		client = as_user(reader)
		assert post(client, f"/api/articles/{published.pk}/collect-reward").status_code == 200

		body = client.get("/api/wallet").json()
		assert body["balance"] == "0.50"
		assert body["reward_points_earned"] == "0.50"
		assert "reward_points" not in body

	def test_ledger_history(self, as_user, writer, pending):
		body = as_user(writer).get("/api/wallet/ledger?kind=publish_fee").json()
		assert body["total_count"] == 1
		assert body["entries"][0]["amount"] == "-150.00"
		assert body["current_balance"] == "0.00"

	def test_nan_amount_is_400(self, as_user, reader):
		resp = post(as_user(reader), "/api/payment-requests", {"request_type": "deposit", "amount": "NaN"})
		assert resp.status_code == 400
		assert resp.json()["error"] == "validation_failed"

	def test_ledger_rejects_unknown_kind(self, as_user, writer):
		assert as_user(writer).get("/api/wallet/ledger?kind=magic").status_code == 400

	def test_reconcile(self, as_user, writer, admin, pending):
		assert as_user(writer).get("/api/wallet/reconcile").json()["match"] is True
		assert as_user(admin).get("/api/admin/reconcile").json() == {"ok": True, "mismatches": []}


class TestPromoEndpoints:

	@pytest.fixture
	def code(self, admin):
		return promos.create_promo_code(admin, "SPRING", "25", 1, timezone.now() + timedelta(days=1)).code

	def test_redeem_statuses(self, as_user, reader, make_user, code):
		client = as_user(reader)
		ok = post(client, "/api/promo-codes/redeem", {"code": code})
		assert ok.status_code == 200
		assert ok.json() == {"code": "SPRING", "bonus_amount": "25.00", "balance": "25.00"}

		assert post(client, "/api/promo-codes/redeem", {"code": code}).status_code == 409
		assert post(client, "/api/promo-codes/redeem", {"code": "NOPE"}).status_code == 404

		other = as_user(make_user("other"))
		limit = post(other, "/api/promo-codes/redeem", {"code": code})
		assert limit.status_code == 409
		assert limit.json()["error"] == "limit_reached"

	def test_expired_is_410(self, as_user, reader, admin):
		promos.create_promo_code(admin, "OLD", "25", 5, timezone.now() - timedelta(days=1))
		resp = post(as_user(reader), "/api/promo-codes/redeem", {"code": "old"})
		assert resp.status_code == 410

	def test_admin_creates_codes(self, as_user, admin):
		resp = post(as_user(admin), "/api/admin/promo-codes/create", {
			"code": "launch", "bonus_amount": "10.00", "usage_limit": 100, "expiry_date": "2099-01-01",
		})
		assert resp.status_code == 201
		assert resp.json()["code"] == "LAUNCH"
		assert resp.json()["expiry_date"].startswith("2099-01-01T23:59:59")

	def test_string_flag_is_400(self, as_user, admin):
		resp = post(as_user(admin), "/api/admin/promo-codes/create", {
			"code": "quiet", "bonus_amount": "10.00", "usage_limit": 1, "expiry_date": "2099-01-01", "is_active": "false",
		})
		assert resp.status_code == 400
		assert resp.json()["error"] == "validation_failed"

	def test_validate_for_anonymous(self, client, code):
		body = post(client, "/api/promo-codes/validate", {"code": code}).json()
		assert body == {"valid": True, "message": "promo code is valid", "bonus_amount": "25.00"}


class TestDemoSeed:

	def test_hidden_unless_debug(self, client, db, settings):
		settings.DEBUG = False
		assert client.post("/api/demo/seed").status_code == 404

	def test_seed_and_top_up(self, client, db, settings):
		settings.DEBUG = True
		body = post(client, "/api/demo/seed", {"amount": "500"}).json()
		assert set(body["users"]) == {"admin", "writer", "reader"}
		assert body["balances"] == {"writer": "500.00", "reader": "500.00"}


class TestNotifications:

	def test_inbox_and_mark_read(self, as_user, admin, writer, pending, django_capture_on_commit_callbacks):
		with django_capture_on_commit_callbacks(execute=True):
			post(as_user(admin), f"/api/articles/{pending.pk}/approve")

		client = as_user(writer)
		inbox = client.get("/stub/notifications/inbox").json()
		assert [n["title"] for n in inbox] == ["Article published"]

		assert post(client, f"/stub/notifications/{inbox[0]['id']}/read").status_code == 200
		assert client.get("/stub/notifications/inbox").json()[0]["is_read"] is True
