from django.urls import path
from .. import views

app_name = 'visas'

urlpatterns = [
    # --- Validation Gateway ---
    path('api/applications/save/', views.save_application_api,
         name='api_application_save'),

    # --- Submission ---
    path('api/applications/submit/', views.submit_application_api,
         name='api_application_submit'),

    # --- Read ---
    path('api/applications/', views.list_applications_api,
         name='api_application_list'),
    path('api/applications/<uuid:application_id>/', views.get_application_api,
         name='api_application_detail'),

    # --- Documents ---
    path('api/applications/<uuid:application_id>/documents/',
         views.upload_document_api, name='api_document_upload'),
    path('documents/<str:token>/', views.download_document,
         name='document_download'),
]
