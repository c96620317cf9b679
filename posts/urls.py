from django.urls import path
from . import api


urlpatterns = [
    path('', api.PostListCreateView.as_view(), name='post-list-create'),
    path('feed', api.FollowingFeedView.as_view(), name='post-feed'),
    path('repost/<int:pk>', api.RepostView.as_view(), name='post-repost'),
    path('<int:pk>', api.PostDetailView.as_view(), name='post-detail'),
    path('<int:pk>/comments/', api.PostCommentsView.as_view(), name='post-comments'),
    path('<int:pk>/reactions/', api.PostReactionView.as_view(), name='post-reactions'),
    path('comments/<int:pk>/', api.CommentDetailView.as_view(), name='comment-detail'),
]
