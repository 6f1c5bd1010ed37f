"""
API v1 URL Configuration.

All API endpoints for version 1.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .views.compliance import CertificationViewSet
from .views.project import ProjectViewSet

# Create router
router = DefaultRouter()

# Projects
router.register(r'projects', ProjectViewSet, basename='projects')

# Compliance (nested under a project)
router.register(
    r'projects/(?P<project_pk>[0-9a-f-]{36})/certifications',
    CertificationViewSet,
    basename='project-certifications',
)

app_name = 'api_v1'

urlpatterns = [
    # Auth (JWT)
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    path('', include(router.urls)),
]
