# apps/tasks/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('', views.todo_list_view, name='todo_list'),
    path('new/', views.todo_create_view, name='todo_create'),
    path('<int:pk>/edit/', views.todo_edit_view, name='todo_edit'),
    path('<int:pk>/toggle/', views.todo_toggle_view, name='todo_toggle'),
    path('<int:pk>/delete/', views.todo_delete_view, name='todo_delete'),
]
