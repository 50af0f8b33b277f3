"""
URL configuration for statcards app.
"""
from django.urls import path
from . import views

urlpatterns = [
    path('api/stats', views.stats_view, name='stats'),
    path('api/image', views.image_view, name='image'),
]
