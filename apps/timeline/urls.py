# apps/timeline/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('', views.timeline_view, name='timeline'),
    path('week/', views.timeline_week_view, name='timeline_week'),
]
