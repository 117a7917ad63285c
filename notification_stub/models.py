"""Deterministic in-process notification sink.

Stores one row per notification the engine asked to deliver. A real provider
(email, push, in-app feed service) replaces this table in production.
"""

import uuid
from django.db import models
from django.utils.timezone import now


class Notification(models.Model):
	"""
	Append-only inbox entry; only is_read ever changes
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	user_id = models.UUIDField(db_index=True)
	title = models.CharField(max_length=200)
	message = models.TextField(blank=True)
	is_read = models.BooleanField(default=False)
	created_at = models.DateTimeField(default=now)
