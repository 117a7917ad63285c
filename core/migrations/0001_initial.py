import core.models
import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("role", models.CharField(choices=[("user", "User"), ("writer", "Writer"), ("admin", "Admin")], default="user", max_length=10)),
                ("is_verified", models.BooleanField(default=False)),
                ("referral_code", models.CharField(default=core.models.gen_referral_code, max_length=16, unique=True)),
                ("referred_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="referrals", to=settings.AUTH_USER_MODEL)),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="Wallet",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("balance", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("total_earned", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("total_spent", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("reward_points", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="wallet", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.CheckConstraint(condition=models.Q(("balance__gte", 0)), name="wallet_balance_non_negative")],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("kind", models.CharField(choices=[("deposit", "Deposit"), ("withdraw", "Withdraw"), ("publish_fee", "Publish fee"), ("publish_refund", "Publish refund"), ("promotion_fee", "Promotion fee"), ("promotion_refund", "Promotion refund"), ("reward_payout", "Reward payout"), ("writer_reward", "Writer reward"), ("promo_bonus", "Promo bonus"), ("referral_bonus", "Referral bonus")], max_length=20)),
                ("related_id", models.CharField(blank=True, default="", max_length=64)),
                ("balance_after", models.DecimalField(decimal_places=2, max_digits=12)),
                ("memo", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("wallet", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="entries", to="core.wallet")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["wallet", "kind"], name="ledger_wallet_kind_idx"),
                    models.Index(fields=["kind", "related_id"], name="ledger_kind_related_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Article",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("slug", models.SlugField(max_length=120, unique=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("content", models.TextField(blank=True, default="")),
                ("word_count", models.PositiveIntegerField(default=0)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("pending", "Pending"), ("published", "Published"), ("rejected", "Rejected")], default="draft", max_length=10)),
                ("publish_fee_charged", models.BooleanField(default=False)),
                ("rejection_reason", models.TextField(blank=True, null=True)),
                ("reward_amount", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("published_at", models.DateTimeField(blank=True, null=True)),
                ("author", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="articles", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["author", "status"], name="article_author_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="ArticleReaction",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("kind", models.CharField(choices=[("like", "Like"), ("bookmark", "Bookmark")], max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("article", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reactions", to="core.article")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reactions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("article", "user", "kind"), name="unique_reaction_per_user")],
            },
        ),
        migrations.CreateModel(
            name="ReadingSession",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("started_at", models.DateTimeField(auto_now_add=True)),
                ("last_heartbeat_at", models.DateTimeField(blank=True, null=True)),
                ("accumulated_seconds", models.FloatField(default=0)),
                ("reward_collected", models.BooleanField(default=False)),
                ("collected_at", models.DateTimeField(blank=True, null=True)),
                ("writer_collected", models.BooleanField(default=False)),
                ("article", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="reading_sessions", to="core.article")),
                ("reader", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="reading_sessions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("article", "reader"), name="unique_session_per_reader")],
            },
        ),
        migrations.CreateModel(
            name="PromoCode",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=32, unique=True)),
                ("bonus_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("usage_limit", models.PositiveIntegerField()),
                ("used_count", models.PositiveIntegerField(default=0)),
                ("expiry_date", models.DateTimeField()),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.CheckConstraint(condition=models.Q(("used_count__lte", models.F("usage_limit"))), name="promo_used_within_limit")],
            },
        ),
        migrations.CreateModel(
            name="PromoUsage",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("bonus_received", models.DecimalField(decimal_places=2, max_digits=12)),
                ("used_at", models.DateTimeField(auto_now_add=True)),
                ("promo_code", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="usages", to="core.promocode")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="promo_usages", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("promo_code", "user"), name="unique_promo_usage_per_user")],
            },
        ),
        migrations.CreateModel(
            name="ReferralBonus",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("referee", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="referral_bonus", to=settings.AUTH_USER_MODEL)),
                ("referrer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="referral_bonuses_paid", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="PromotionRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], default="pending", max_length=10)),
                ("fee_charged", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("rejection_reason", models.TextField(blank=True, default="")),
                ("requested_at", models.DateTimeField(auto_now_add=True)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("reviewed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="promotion_requests", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(condition=models.Q(("status", "pending")), fields=("user",), name="one_pending_promotion_per_user")],
            },
        ),
        migrations.CreateModel(
            name="PaymentRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("request_type", models.CharField(choices=[("deposit", "Deposit"), ("withdraw", "Withdraw")], max_length=10)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], default="pending", max_length=10)),
                ("admin_note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payment_requests", to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
