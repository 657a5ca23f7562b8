# goal_tracker/urls.py
from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    path('admin/', admin.site.urls),
    path('goals/', include('apps.goals.urls')),
    path('todos/', include('apps.tasks.urls')),
    path('timeline/', include('apps.timeline.urls')),
]
