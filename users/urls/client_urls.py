from django.urls import path
from .. import views


urlpatterns = [
    # Bearer token for the JSON API
    path('api/token/', views.obtain_token_api, name='api_token'),
]
