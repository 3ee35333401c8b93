"""
URL routing for authentication endpoints.
"""
from django.urls import path
from apps.rbac.views_auth import LoginView, RegisterView, LogoutView, ProfileView

app_name = 'auth'

urlpatterns = [
    path('login', LoginView.as_view(), name='login'),
    path('register', RegisterView.as_view(), name='register'),
    path('logout', LogoutView.as_view(), name='logout'),
    path('profile', ProfileView.as_view(), name='profile'),
]
