"""
URL configuration for the visa_portal project.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

# ======================
# URL Patterns
# ======================

urlpatterns = [
    # Django admin (the administrator path)
    path("admin/", admin.site.urls),
]

client_urls = [
    path('users/', include('users.urls.client_urls')),
    path('visas/', include('visas.urls.client_urls')),
    path('payments/', include('finance.urls.client_urls')),
]
urlpatterns += client_urls

# ======================
# Static & Media
# ======================

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL,
                          document_root=settings.STATIC_ROOT)
    urlpatterns += static(settings.MEDIA_URL,
                          document_root=settings.MEDIA_ROOT)
