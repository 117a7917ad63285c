"""Shared plumbing for the JSON views: method/auth checks, body parsing,
domain-error → response translation, and the fixed-point serializers.
"""

import json
import logging
from datetime import datetime, time, timezone as dt_timezone
from decimal import Decimal
from functools import wraps
from django.http import JsonResponse, HttpResponseBadRequest
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from core.constants import format_money
from core.errors import EngineError, NotAuthenticated, PermissionDenied, ValidationFailed

logger = logging.getLogger(__name__)


def endpoint(method: str = "GET", *, login: bool = True, admin: bool = False):
	"""
	Wrap a view: enforce the HTTP method and the caller's identity, and turn
	EngineError subclasses into JSON error responses. Other exceptions propagate (500).
	"""
	def decorator(view):
		@wraps(view)
		def wrapper(request, *args, **kwargs):
			if request.method != method:
				return HttpResponseBadRequest(f"{method} only")
			try:
				if (login or admin) and not request.user.is_authenticated:
					raise NotAuthenticated("login required")
				if admin and not request.user.is_admin:
					raise PermissionDenied("admin only")
				return view(request, *args, **kwargs)
			except EngineError as e:
				logger.info("%s %s -> %s %s", request.method, request.path, e.status, e.code)
				return JsonResponse(e.payload(), status=e.status)
		return wrapper
	return decorator


def json_body(request) -> dict:
	try:
		body = json.loads(request.body or b"{}", parse_float=Decimal)
	except (ValueError, UnicodeDecodeError):
		raise ValidationFailed("invalid JSON body")
	if not isinstance(body, dict):
		raise ValidationFailed("JSON body must be an object")
	return body


def parse_when(value) -> datetime | None:
	"""
	Accept an ISO datetime or a bare date (end of that day, UTC).
	"""
	if not value:
		return None
	try:
		d = parse_date(str(value))
		dt = datetime.combine(d, time.max) if d else parse_datetime(str(value))
	except ValueError:
		dt = None
	if dt is None:
		raise ValidationFailed(f"not a date: {value}")
	if timezone.is_naive(dt):
		dt = timezone.make_aware(dt, dt_timezone.utc)
	return dt


def iso(dt) -> str | None:
	return dt.isoformat().replace("+00:00", "Z") if dt else None


def money(amount: Decimal | None) -> str | None:
	return format_money(amount) if amount is not None else None


# --- Serializers -----------------------------------------------------------------

def article_json(a, *, with_content: bool = False) -> dict:
	data = {
		"id": str(a.id),
		"slug": a.slug,
		"title": a.title,
		"description": a.description,
		"author_id": str(a.author_id),
		"word_count": a.word_count,
		"status": a.status,
		"publish_fee_charged": a.publish_fee_charged,
		"rejection_reason": a.rejection_reason,
		"reward": money(a.reward_amount),
		"created_at": iso(a.created_at),
		"updated_at": iso(a.updated_at),
		"published_at": iso(a.published_at),
	}
	if with_content:
		data["content"] = a.content
	return data


def wallet_json(w) -> dict:
	return {
		"id": str(w.id),
		"user_id": str(w.user_id),
		"balance": money(w.balance),
		"reward_points_earned": money(w.reward_points),
		"total_earning": money(w.total_earned),
		"total_spending": money(w.total_spent),
	}


def entry_json(e) -> dict:
	return {
		"id": str(e.id),
		"kind": e.kind,
		"amount": money(e.amount),
		"balance_after": money(e.balance_after),
		"related_id": e.related_id,
		"memo": e.memo,
		"created_at": iso(e.created_at),
	}


def session_json(s) -> dict:
	return {
		"id": str(s.id),
		"article_id": str(s.article_id),
		"accumulated_seconds": s.accumulated_seconds,
		"reward_collected": s.reward_collected,
		"started_at": iso(s.started_at),
		"last_heartbeat_at": iso(s.last_heartbeat_at),
	}


def promo_json(p) -> dict:
	return {
		"id": str(p.id),
		"code": p.code,
		"bonus_amount": money(p.bonus_amount),
		"usage_limit": p.usage_limit,
		"used_count": p.used_count,
		"usage_percentage": p.usage_percentage,
		"expiry_date": iso(p.expiry_date),
		"is_expired": timezone.now() >= p.expiry_date,
		"is_active": p.is_active,
		"created_by_username": p.created_by.username if p.created_by_id else None,
		"created_at": iso(p.created_at),
	}


def promotion_json(r) -> dict:
	return {
		"id": str(r.id),
		"user": {"id": str(r.user_id), "username": r.user.username, "email": r.user.email},
		"status": r.status,
		"fee_charged": money(r.fee_charged),
		"rejection_reason": r.rejection_reason,
		"requested_at": iso(r.requested_at),
		"reviewed_at": iso(r.reviewed_at),
	}


def payment_json(r) -> dict:
	return {
		"id": str(r.id),
		"user": str(r.user_id),
		"user_name": r.user.username,
		"request_type": r.request_type,
		"amount": money(r.amount),
		"status": r.status,
		"admin_note": r.admin_note,
		"created_at": iso(r.created_at),
		"updated_at": iso(r.updated_at),
	}
