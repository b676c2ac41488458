# apps/tasks/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('<int:pk>/status/', views.task_status_view, name='task_status'),
    path('<int:pk>/complete/', views.task_complete_view, name='task_complete'),
    path('<int:pk>/notes/', views.task_notes_view, name='task_notes'),
    path('risks/', views.risk_list_view, name='risk_list'),
    path('risks/new/', views.risk_create_view, name='risk_create'),
    path('risks/<int:pk>/edit/', views.risk_edit_view, name='risk_edit'),
]
