"""Adapter over the local notification stub.

In production, this would hand messages to an email / push provider over HTTP.
Here we write the stub's ORM model directly for repeatable, deterministic tests.

Delivery is fire-and-forget: the write is queued with transaction.on_commit, so a
rolled back operation never notifies, and a failing write is logged, not raised.
"""

import logging
from django.db import transaction
from notification_stub.models import Notification

logger = logging.getLogger(__name__)


class NotificationAdapter:
	"""
	Static helpers the services call after a state change worth telling a user about
	"""

	provider_name = "stub-notifications"


	@staticmethod
	def notify(user_id, title: str, message: str = "") -> None:
		"""
		Queue a notification for after the current transaction commits.
		"""
		transaction.on_commit(lambda: NotificationAdapter._deliver(user_id, title, message))


	@staticmethod
	def _deliver(user_id, title: str, message: str) -> None:
		try:
			Notification.objects.create(user_id=user_id, title=title[:200], message=message)
		except Exception:
			logger.exception("notification delivery failed user=%s title=%r", user_id, title)
