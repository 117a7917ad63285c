"""URL routing for the engine API + the local notification stub.


The /api/ namespace exposes article, reading, reward, wallet and promo operations;
/stub/notifications/ exposes the fire-and-forget notification sink used by the adapter.
In production, the stub is replaced by a real delivery provider.
"""

from django.contrib import admin
from django.urls import path, include


urlpatterns = [
	path("admin/", admin.site.urls),
	path("api/", include("api.urls")),
	path("stub/notifications/", include("notification_stub.urls")),
]
