"""
URL configuration for the mediaview project.

Everything below the root redirect is served by the ``browse`` app.
"""
from django.urls import include, path
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(pattern_name='browse:root', permanent=False), name='home'),
    path('', include(('browse.urls', 'browse'), namespace='browse')),
]
