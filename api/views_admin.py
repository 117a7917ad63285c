"""Admin-only endpoints: review queues, promo code management, payment approvals,
user verification and the global reconciliation check."""

from django.http import JsonResponse

from core import accounts, articles, ledger, payments, promos, promotions
from core.errors import NotFound
from core.models import PromoCode, User
from .http import (
	endpoint, json_body, parse_when, article_json, entry_json, iso, money, payment_json, promo_json, promotion_json,
)


@endpoint("GET", admin=True)
def pending_articles(request):
	return JsonResponse([article_json(a) for a in articles.pending_articles()], safe=False)


@endpoint("GET", admin=True)
def pending_promotions(request):
	return JsonResponse([promotion_json(r) for r in promotions.pending_promotions()], safe=False)


@endpoint("POST", admin=True)
def approve_promotion(request, request_id):
	req = promotions.approve_promotion(request_id, request.user)
	return JsonResponse(promotion_json(req))


@endpoint("POST", admin=True)
def reject_promotion(request, request_id):
	body = json_body(request)
	req = promotions.reject_promotion(request_id, request.user, body.get("reason", ""))
	return JsonResponse(promotion_json(req))


@endpoint("GET", admin=True)
def promo_codes(request):
	rows = PromoCode.objects.select_related("created_by").order_by("-created_at")
	return JsonResponse([promo_json(p) for p in rows], safe=False)


@endpoint("POST", admin=True)
def create_promo_code(request):
	"""
	POST: {code, bonus_amount, usage_limit, expiry_date, is_active}
	"""
	body = json_body(request)
	promo = promos.create_promo_code(
		request.user,
		body.get("code"),
		body.get("bonus_amount"),
		body.get("usage_limit"),
		parse_when(body.get("expiry_date")),
		body.get("is_active", True),
	)
	return JsonResponse(promo_json(promo), status=201)


@endpoint("POST", admin=True)
def update_promo_code(request, promo_id):
	body = json_body(request)
	fields = {k: body[k] for k in ("bonus_amount", "usage_limit", "is_active") if k in body}
	if "expiry_date" in body:
		fields["expiry_date"] = parse_when(body["expiry_date"])
	promo = promos.update_promo_code(request.user, promo_id, **fields)
	return JsonResponse(promo_json(promo))


@endpoint("POST", admin=True)
def delete_promo_code(request, promo_id):
	deleted = promos.delete_promo_code(request.user, promo_id)
	return JsonResponse({"deleted": deleted, "deactivated": not deleted})


@endpoint("GET", admin=True)
def promo_code_usage(request, promo_id):
	data = promos.promo_code_usage(request.user, promo_id)
	data["usages"] = [
		dict(u, used_at=iso(u["used_at"]), bonus_received=money(u["bonus_received"])) for u in data["usages"]
	]
	return JsonResponse(data)


@endpoint("GET", admin=True)
def payment_requests(request):
	rows = payments.payment_requests(request.GET.get("status") or None)[:100]
	return JsonResponse([payment_json(r) for r in rows], safe=False)


@endpoint("POST", admin=True)
def approve_payment_request(request, request_id):
	body = json_body(request)
	req, entry = payments.approve_payment_request(request_id, request.user, body.get("admin_note", ""))
	return JsonResponse({"request": payment_json(req), "entry": entry_json(entry)})


@endpoint("POST", admin=True)
def reject_payment_request(request, request_id):
	body = json_body(request)
	req = payments.reject_payment_request(request_id, request.user, body.get("admin_note", ""))
	return JsonResponse(payment_json(req))


@endpoint("POST", admin=True)
def verify_user(request, user_id):
	"""
	POST: Called once the auth service has verified the user; fires the referral bonus
	"""
	try:
		user = User.objects.get(pk=user_id)
	except User.DoesNotExist:
		raise NotFound("user not found")
	bonus = accounts.verify_user(user)
	return JsonResponse({
		"user_id": str(user.pk),
		"is_verified": True,
		"referral_bonus": money(bonus.amount) if bonus else None,
	})


@endpoint("GET", admin=True)
def reconcile(request):
	"""
	GET: Every wallet whose balance differs from its ledger sum (expected: none)
	"""
	mismatches = ledger.reconcile_all()
	return JsonResponse({
		"ok": not mismatches,
		"mismatches": [
			dict(m, balance=money(m["balance"]), ledger_sum=money(m["ledger_sum"])) for m in mismatches
		],
	})
