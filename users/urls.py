from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import api

urlpatterns = [
    path('register/', api.RegisterView.as_view(), name='register'),
    path('login/', api.LoginView.as_view(), name='login'),
    path('logout/', api.LogoutView.as_view(), name='logout'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('me', api.ProfileView.as_view(), name='profile'),
    path('edit-profile', api.EditProfileView.as_view(), name='edit-profile'),
    path('users/<int:user_id>/follow', api.FollowUserView.as_view(), name='follow-user'),
    path('users/<int:user_id>/unfollow', api.UnfollowUserView.as_view(), name='unfollow-user'),
    path('admin', api.AdminUserListView.as_view(), name='admin-users'),
    path('suggested-friends', api.SuggestedFriendsView.as_view(), name='suggested-friends'),
    path('unfollowed-followers', api.UnfollowedFollowersView.as_view(), name='unfollowed-followers'),
]
