"""Demo orchestration for local development.

Seeds an admin, a writer and a reader, funds the non-admin wallets through
approved deposit requests (so the ledger stays the only balance writer), and
can top up the demo wallets later.
"""
from django.contrib.auth import get_user_model
from django.db import transaction
from django.conf import settings

from . import ledger, payments
from .models import Role


class DemoServices:

	@staticmethod
	@transaction.atomic
	def seed_demo_users(password: str = "demo-password"):
		"""
		Create (or fetch) the demo admin / writer / reader and their wallets
		"""
		User = get_user_model()
		users = {}
		for key, username, role in (
			("admin", settings.DEMO_ADMIN_USERNAME, Role.ADMIN),
			("writer", settings.DEMO_WRITER_USERNAME, Role.WRITER),
			("reader", settings.DEMO_READER_USERNAME, Role.USER),
		):
			user, created = User.objects.get_or_create(
				username=username,
				defaults={"email": f"{username}@example.com", "role": role, "is_verified": True},
			)
			if created:
				user.set_password(password)
				user.save(update_fields=["password"])
			ledger.get_wallet(user)
			users[key] = user
		return users

	@staticmethod
	@transaction.atomic
	def top_up(user, admin, amount: str):
		"""
		Deposit through the normal request → approval path
		"""
		req = payments.create_payment_request(user, "deposit", amount)
		_, entry = payments.approve_payment_request(req.pk, admin, note="demo top-up")
		return entry
