"""
URL configuration for the stat cards project.
"""
from django.urls import include, path

urlpatterns = [
    path('', include('statcards.urls')),
]
