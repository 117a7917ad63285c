"""Public API surface for the engine.

- /articles/*: lifecycle transitions, reading sessions, reward collection, reactions
- /wallet/*: read-only wallet, ledger history, publish balance check, reconciliation
- /writer/earnings/*: writer reward projections and collection
- /promo-codes/*, /promotions/*, /payment-requests/*, /referrals: credit issuance and requests
- /admin/*: review queues and management (admin role)
- /demo/seed: local seeding helper (DEBUG only)
"""

from django.urls import path
from . import views_admin, views_ops, views_read
from .views_demo import seed


urlpatterns = [
	path("health", views_ops.health),
	path("csrf", views_ops.csrf),
	path("demo/seed", seed),

	# articles
	path("articles", views_read.published_articles),
	path("articles/create", views_ops.create_article),
	path("articles/mine", views_read.my_articles),
	path("articles/<str:ref>", views_read.article_detail),
	path("articles/<str:ref>/save", views_ops.save_article),
	path("articles/<str:ref>/delete", views_ops.delete_article),
	path("articles/<str:ref>/request-publish", views_ops.request_publish),
	path("articles/<str:ref>/approve", views_ops.approve_article),
	path("articles/<str:ref>/reject", views_ops.reject_article),
	path("articles/<str:ref>/like", views_ops.toggle_like),
	path("articles/<str:ref>/bookmark", views_ops.toggle_bookmark),
	path("articles/<str:ref>/reading", views_read.reading_state),
	path("articles/<str:ref>/reading/start", views_ops.reading_start),
	path("articles/<str:ref>/reading/heartbeat", views_ops.reading_heartbeat),
	path("articles/<str:ref>/collect-reward", views_ops.collect_reward),

	# wallet
	path("wallet", views_read.wallet),
	path("wallet/ledger", views_read.wallet_ledger),
	path("wallet/check-publish-balance", views_read.check_publish_balance),
	path("wallet/reconcile", views_read.wallet_reconcile),

	# writer earnings
	path("writer/earnings", views_read.writer_earnings),
	path("writer/earnings/article/<str:ref>", views_read.article_earnings),
	path("writer/earnings/collect/<str:ref>", views_ops.collect_writer_rewards),

	# promo codes, referrals, promotions, payments
	path("promo-codes/redeem", views_ops.redeem_promo_code),
	path("promo-codes/validate", views_ops.validate_promo_code),
	path("referrals", views_read.referral_stats),
	path("promotions/request", views_ops.request_promotion),
	path("promotions/mine", views_read.my_promotion_request),
	path("payment-requests", views_ops.create_payment_request),
	path("payment-requests/mine", views_read.my_payment_requests),

	# admin
	path("admin/articles/pending", views_admin.pending_articles),
	path("admin/promotions/pending", views_admin.pending_promotions),
	path("admin/promotions/<uuid:request_id>/approve", views_admin.approve_promotion),
	path("admin/promotions/<uuid:request_id>/reject", views_admin.reject_promotion),
	path("admin/promo-codes", views_admin.promo_codes),
	path("admin/promo-codes/create", views_admin.create_promo_code),
	path("admin/promo-codes/<uuid:promo_id>/update", views_admin.update_promo_code),
	path("admin/promo-codes/<uuid:promo_id>/delete", views_admin.delete_promo_code),
	path("admin/promo-codes/<uuid:promo_id>/usage", views_admin.promo_code_usage),
	path("admin/payment-requests", views_admin.payment_requests),
	path("admin/payment-requests/<uuid:request_id>/approve", views_admin.approve_payment_request),
	path("admin/payment-requests/<uuid:request_id>/reject", views_admin.reject_payment_request),
	path("admin/users/<uuid:user_id>/verify", views_admin.verify_user),
	path("admin/reconcile", views_admin.reconcile),
]
