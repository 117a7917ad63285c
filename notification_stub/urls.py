from django.urls import path
from .views import inbox, mark_read


urlpatterns = [
	path("inbox", inbox),
	path("<uuid:notification_id>/read", mark_read),
]
