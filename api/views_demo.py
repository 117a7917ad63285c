"""Demo helpers: seed the demo users and push a simulated deposit (DEBUG only)."""

import json
from django.conf import settings
from django.http import JsonResponse, HttpResponseBadRequest, HttpResponseNotFound
from core.services import DemoServices
from .http import money


def seed(request):
	"""
	POST: Create/fetch the demo admin, writer and reader; optional {amount} top-up each
	"""
	if not settings.DEBUG:
		return HttpResponseNotFound()
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = json.loads(request.body or b"{}")
	users = DemoServices.seed_demo_users()
	amount = body.get("amount")
	balances = {}
	for key in ("writer", "reader"):
		if amount:
			entry = DemoServices.top_up(users[key], users["admin"], str(amount))
			balances[key] = money(entry.balance_after)
	return JsonResponse({
		"users": {key: {"user_id": str(u.pk), "username": u.username} for key, u in users.items()},
		"balances": balances,
	})
