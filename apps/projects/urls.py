from django.urls import path
from . import views

urlpatterns = [
    path('', views.project_list_view, name='project_list'),
    path('new/', views.project_create_view, name='project_create'),
    path('<int:pk>/', views.project_detail_view, name='project_detail'),
    path('<int:pk>/edit/', views.project_edit_view, name='project_edit'),
    path('<int:pk>/status/', views.project_status_view, name='project_status'),
    path('<int:pk>/timer/', views.project_timer_view, name='project_timer'),
    path('<int:pk>/complete/', views.project_complete_view, name='project_complete'),
    path('<int:pk>/not-satisfied/', views.project_not_satisfied_view, name='project_not_satisfied'),
    path('<int:pk>/completed-blocked/', views.project_completed_blocked_view, name='project_completed_blocked'),
    path('<int:pk>/tools/', views.project_tools_view, name='project_tools'),
    path('<int:pk>/usage/', views.project_usage_view, name='project_usage'),
    path('<int:pk>/delete/', views.project_delete_view, name='project_delete'),
]
