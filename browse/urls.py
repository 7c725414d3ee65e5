"""Browse app URL configuration."""
from django.urls import path

from . import views

app_name = 'browse'

urlpatterns = [
    path('browse/', views.browse, name='root'),
    path('browse/<path:path>', views.browse, name='browse'),
    path('view/<path:path>', views.view, name='view'),
    path('media/<path:path>', views.media, name='media'),
    path('thumbs/<path:path>', views.thumbnail, name='thumbnail'),
]
