"""Read-only endpoints (articles, wallet, ledger, earnings, referrals, own requests)."""

from django.http import JsonResponse

from core import accounts, articles, ledger, payments, promotions, reading, rewards
from core.errors import NotFound, ValidationFailed
from core.models import ArticleStatus, LedgerEntryKind
from .http import endpoint, article_json, entry_json, iso, money, payment_json, promotion_json, wallet_json


@endpoint("GET", login=False)
def published_articles(request):
	"""
	GET: Public feed of published articles
	"""
	rows = articles.published_articles()[:100]
	return JsonResponse([article_json(a) for a in rows], safe=False)


@endpoint("GET")
def my_articles(request):
	rows = articles.articles_by(request.user)
	return JsonResponse([article_json(a) for a in rows], safe=False)


@endpoint("GET", login=False)
def article_detail(request, ref):
	"""
	GET: One article; unpublished ones are visible to their author and admins only
	"""
	article = articles.get_article(ref)
	user = request.user
	if article.status != ArticleStatus.PUBLISHED:
		if not user.is_authenticated or (article.author_id != user.pk and not user.is_admin):
			raise NotFound(f"article {ref} not found")
	data = article_json(article, with_content=True)
	data["likes_count"] = article.reactions.filter(kind="like").count()
	data["bookmarks_count"] = article.reactions.filter(kind="bookmark").count()
	if user.is_authenticated:
		mine = set(article.reactions.filter(user=user).values_list("kind", flat=True))
		data["is_liked"] = "like" in mine
		data["is_bookmarked"] = "bookmark" in mine
	return JsonResponse(data)


@endpoint("GET")
def reading_state(request, ref):
	return JsonResponse(reading.reading_state(ref, request.user))


@endpoint("GET")
def wallet(request):
	"""
	GET: The caller's wallet (balance and running totals as fixed-point strings)
	"""
	return JsonResponse(wallet_json(ledger.get_wallet(request.user)))


@endpoint("GET")
def wallet_ledger(request):
	"""
	GET: Newest-first ledger entries; ?kind=&limit=&offset=
	"""
	kind = request.GET.get("kind") or None
	if kind and kind not in LedgerEntryKind.values:
		raise ValidationFailed(f"unknown kind {kind}")
	try:
		limit = min(int(request.GET.get("limit", 50)), 200)
		offset = max(int(request.GET.get("offset", 0)), 0)
	except ValueError:
		raise ValidationFailed("limit and offset must be integers")
	entries, total = ledger.history(request.user, kind=kind, limit=limit, offset=offset)
	return JsonResponse({
		"entries": [entry_json(e) for e in entries],
		"total_count": total,
		"current_balance": money(ledger.get_wallet(request.user).balance),
	})


@endpoint("GET")
def check_publish_balance(request):
	result = articles.check_publish_balance(request.user)
	return JsonResponse({
		"has_sufficient_balance": result["has_sufficient_balance"],
		"current_balance": money(result["current_balance"]),
		"required_balance": money(result["required_balance"]),
		"missing_amount": money(result["missing_amount"]),
	})


@endpoint("GET")
def wallet_reconcile(request):
	"""
	GET: Stored balance vs sum of ledger entries for the caller's wallet
	"""
	result = ledger.reconcile(ledger.get_wallet(request.user))
	return JsonResponse({
		"balance": money(result["balance"]),
		"ledger_sum": money(result["ledger_sum"]),
		"match": result["match"],
	})


def _earnings_row(row: dict) -> dict:
	return dict(row, points_earned=money(row["points_earned"]))


@endpoint("GET")
def writer_earnings(request):
	data = rewards.writer_earnings(request.user)
	return JsonResponse({
		"total_points_earned": money(data["total_points_earned"]),
		"articles": [_earnings_row(r) for r in data["articles"]],
	})


@endpoint("GET")
def article_earnings(request, ref):
	return JsonResponse(_earnings_row(rewards.article_earnings(ref, request.user)))


@endpoint("GET")
def referral_stats(request):
	data = accounts.referral_stats(request.user)
	data["total_rewards_earned"] = money(data["total_rewards_earned"])
	data["recent_referrals"] = [dict(r, date_joined=iso(r["date_joined"])) for r in data["recent_referrals"]]
	return JsonResponse(data)


@endpoint("GET")
def my_promotion_request(request):
	req = promotions.my_promotion_request(request.user)
	if req is None:
		raise NotFound("no promotion request")
	return JsonResponse(promotion_json(req))


@endpoint("GET")
def my_payment_requests(request):
	rows = payments.payment_requests().filter(user=request.user)[:50]
	return JsonResponse([payment_json(r) for r in rows], safe=False)
