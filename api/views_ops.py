"""Operational endpoints that move the system forward
(article transitions, reading heartbeats, reward collection, promo redemption)."""

from django.http import JsonResponse
from django.middleware.csrf import get_token

from core import articles, ledger, payments, promos, promotions, reading, rewards
from .http import endpoint, json_body, article_json, entry_json, money, payment_json, promotion_json, session_json


def health(request):
	return JsonResponse({"ok": True})


def csrf(request):
	# Forces creation/rotation of the CSRF token AND sets 'csrftoken' cookie
	return JsonResponse({"csrftoken": get_token(request)})


# --- Articles ------------------------------------------------------------------

@endpoint("POST")
def create_article(request):
	"""
	POST: Create a draft {title, description, content}
	"""
	body = json_body(request)
	article = articles.create_article(
		request.user, body.get("title"), body.get("description", ""), body.get("content", ""),
	)
	return JsonResponse(article_json(article, with_content=True), status=201)


@endpoint("POST")
def save_article(request, ref):
	"""
	POST: Save draft edits; only draft / rejected articles are editable
	"""
	body = json_body(request)
	article = articles.update_article(
		ref, request.user,
		title=body.get("title"), description=body.get("description"), content=body.get("content"),
	)
	return JsonResponse(article_json(article, with_content=True))


@endpoint("POST")
def delete_article(request, ref):
	articles.delete_article(ref, request.user)
	return JsonResponse({"ok": True})


@endpoint("POST")
def request_publish(request, ref):
	"""
	POST: draft → pending; debits the publish fee (402 with required/available if short)
	"""
	article, entry = articles.request_publish(ref, request.user)
	return JsonResponse({
		"article": article_json(article),
		"fee": money(-entry.amount),
		"balance": money(entry.balance_after),
	})


@endpoint("POST", admin=True)
def approve_article(request, ref):
	article = articles.approve_article(ref, request.user)
	return JsonResponse({"article": article_json(article)})


@endpoint("POST", admin=True)
def reject_article(request, ref):
	"""
	POST: pending → rejected {reason}; refunds half the publish fee
	"""
	body = json_body(request)
	article, entry = articles.reject_article(ref, request.user, body.get("reason", ""))
	return JsonResponse({
		"article": article_json(article),
		"refund": entry_json(entry) if entry else None,
	})


@endpoint("POST")
def toggle_like(request, ref):
	state = articles.toggle_reaction(ref, request.user, "like")
	return JsonResponse({"is_liked": state["active"], "likes_count": state["count"]})


@endpoint("POST")
def toggle_bookmark(request, ref):
	state = articles.toggle_reaction(ref, request.user, "bookmark")
	return JsonResponse({"is_bookmarked": state["active"], "bookmarks_count": state["count"]})


# --- Reading & rewards -----------------------------------------------------------

@endpoint("POST")
def reading_start(request, ref):
	session = reading.start_or_resume(ref, request.user)
	return JsonResponse(session_json(session))


@endpoint("POST")
def reading_heartbeat(request, ref):
	"""
	POST: Report {elapsedSeconds} of active reading since the previous heartbeat
	"""
	body = json_body(request)
	session = reading.get_session(ref, request.user)
	session = reading.heartbeat(session.pk, request.user, body.get("elapsedSeconds"))
	data = session_json(session)
	data["is_eligible"] = reading.is_eligible(session)
	return JsonResponse(data)


@endpoint("POST")
def collect_reward(request, ref):
	"""
	POST: Pay the reader's reward once (409 already collected, 403 not eligible / author)
	"""
	payout = rewards.collect(ref, request.user)
	return JsonResponse({"reward_points": money(payout.amount), "balance": money(payout.balance)})


@endpoint("POST")
def collect_writer_rewards(request, ref):
	result = rewards.collect_writer_rewards(ref, request.user)
	return JsonResponse({
		"success": True,
		"points_collected": money(result["points_collected"]),
		"reads_collected": result["reads_collected"],
		"total_points_earned": money(result["total_points_earned"]),
	})


# --- Promo codes, promotions, payments ----------------------------------------------

@endpoint("POST")
def redeem_promo_code(request):
	"""
	POST: Redeem {code} (404 invalid, 410 expired, 409 limit reached / already used)
	"""
	body = json_body(request)
	usage = promos.redeem_promo_code(body.get("code"), request.user)
	wallet = ledger.get_wallet(request.user)
	return JsonResponse({
		"code": usage.promo_code.code,
		"bonus_amount": money(usage.bonus_received),
		"balance": money(wallet.balance),
	})


@endpoint("POST", login=False)
def validate_promo_code(request):
	body = json_body(request)
	result = promos.validate_promo_code(body.get("code"), request.user)
	return JsonResponse({
		"valid": result["valid"],
		"message": result["message"],
		"bonus_amount": money(result["bonus_amount"]),
	})


@endpoint("POST")
def request_promotion(request):
	req = promotions.request_promotion(request.user)
	return JsonResponse(promotion_json(req), status=201)


@endpoint("POST")
def create_payment_request(request):
	"""
	POST: Ask for a {request_type: deposit|withdraw, amount}; moves money only once approved
	"""
	body = json_body(request)
	req = payments.create_payment_request(request.user, body.get("request_type"), body.get("amount"))
	return JsonResponse(payment_json(req), status=201)
