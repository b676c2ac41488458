# apps/reports/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('summary/', views.executive_summary_view, name='executive_summary'),
    path('activity/', views.activity_log_view, name='activity_log'),
]
