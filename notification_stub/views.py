"""HTTP endpoints for the notification stub.

The adapter writes rows through the ORM; these endpoints mirror what a real
in-app notification provider might expose (inbox, mark as read).
"""

from django.http import JsonResponse, HttpResponseBadRequest
from .models import Notification


def inbox(request):
	"""
	GET: Newest notifications for the logged-in user
	"""
	if not request.user.is_authenticated:
		return JsonResponse({"error": "not_authenticated"}, status=401)
	qs = Notification.objects.filter(user_id=request.user.pk).order_by("-created_at")[:50]
	data = [
		{
			"id": str(n.id),
			"title": n.title,
			"message": n.message,
			"is_read": n.is_read,
			"created_at": n.created_at.isoformat().replace("+00:00", "Z"),
		}
		for n in qs
	]
	return JsonResponse(data, safe=False)


def mark_read(request, notification_id):
	"""
	POST: Flag one of the user's notifications as read
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	if not request.user.is_authenticated:
		return JsonResponse({"error": "not_authenticated"}, status=401)
	updated = Notification.objects.filter(id=notification_id, user_id=request.user.pk).update(is_read=True)
	if not updated:
		return JsonResponse({"error": "not_found"}, status=404)
	return JsonResponse({"ok": True})
