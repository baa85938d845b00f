"""URL configuration for account endpoints."""

from django.urls import path

from server.apps.users import views

app_name = 'users'

urlpatterns = [
    path('csrf', views.csrf, name='csrf'),
    path('register', views.register, name='register'),
    path('login', views.login_view, name='login'),
    path('logout', views.logout_view, name='logout'),
    path('user', views.current_user, name='current-user'),
]
