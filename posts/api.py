import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from rest_framework import generics, permissions, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.views import APIView

from core import media
from core.exceptions import DomainRuleError, NotFoundError, ValidationError
from core.responses import envelope, ensure_not_empty
from users.models import User
from users.permissions import IsOwnerOrAdmin
from .models import Comment, Post, Reaction, Repost
from .serializers import (
    CommentSerializer,
    PostDetailSerializer,
    PostSerializer,
    PostWriteSerializer,
    ReactionCreateSerializer,
    ReactionSerializer,
)

logger = logging.getLogger(__name__)


def get_post_or_404(pk):
    post = Post.objects.select_related('posted_by').filter(pk=pk).first()
    if post is None:
        raise NotFoundError("Post not found")
    return post


def thumbnail_fields(asset):
    return {
        'thumbnail_public_id': asset.public_id,
        'thumbnail_secure_url': asset.secure_url,
        'thumbnail_resource_type': asset.resource_type,
    }


def save_with_thumbnail(serializer, thumbnail_file, error_message, **extra):
    """
    Uploads the optional file, then saves. A failed upload saves nothing; a failed
    save discards the freshly uploaded asset.
    """
    if not thumbnail_file:
        return serializer.save(**extra)

    asset = media.store_upload(thumbnail_file, media.POST_IMAGES_FOLDER, media.POST_VIDEOS_FOLDER,
                               error_message=error_message)
    try:
        return serializer.save(**extra, **thumbnail_fields(asset))
    except DatabaseError:
        media.discard(asset.public_id, asset.resource_type)
        raise


# --- List and Create Posts ---
class PostListCreateView(generics.ListCreateAPIView):
    queryset = Post.objects.select_related('posted_by').order_by('-created_at', '-id')
    serializer_class = PostSerializer
    parser_classes = (MultiPartParser, FormParser, JSONParser)

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def list(self, request, *args, **kwargs):
        posts = ensure_not_empty(list(self.get_queryset()), "No posts found")
        return envelope("Posts fetched successfully.", posts=PostSerializer(posts, many=True).data)

    def create(self, request, *args, **kwargs):
        content = request.data.get('content')
        if not content or not str(content).strip():
            raise ValidationError("Content is required")

        serializer = PostWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        post = save_with_thumbnail(serializer, request.FILES.get('thumbnail'),
                                   "Error while uploading thumbnail", posted_by=request.user)

        logger.info(f"User {request.user.pk} created post {post.pk}")
        return envelope("Thank you for sharing your post.", status.HTTP_201_CREATED,
                        post=PostSerializer(post).data)


# --- Retrieve / Edit / Delete a Post ---
class PostDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = PostDetailSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrAdmin]
    parser_classes = (MultiPartParser, FormParser, JSONParser)
    owner_field = 'posted_by'

    def get_object(self):
        post = get_post_or_404(self.kwargs['pk'])
        self.check_object_permissions(self.request, post)
        return post

    def retrieve(self, request, *args, **kwargs):
        post = self.get_object()
        return envelope("Post fetched successfully", post=PostDetailSerializer(post).data)

    def update(self, request, *args, **kwargs):
        post = self.get_object()
        serializer = PostWriteSerializer(post, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        thumbnail_file = request.FILES.get('thumbnail')
        previous = (post.thumbnail_public_id, post.thumbnail_resource_type or 'image')
        post = save_with_thumbnail(serializer, thumbnail_file, "Error while uploading post thumbnail")
        post.refresh_from_db(fields=['number_of_reposts'])
        if thumbnail_file and previous[0]:
            media.discard(*previous)

        logger.info(f"User {request.user.pk} updated post {post.pk}")
        return envelope("Post updated successfully.", post=PostSerializer(post).data)

    def destroy(self, request, *args, **kwargs):
        post = self.get_object()
        if post.has_thumbnail:
            media.destroy(post.thumbnail_public_id, post.thumbnail_resource_type or 'image')
        post_id = post.pk
        post.delete()

        logger.info(f"User {request.user.pk} deleted post {post_id}")
        return envelope("Post deleted successfully.")


# --- Repost ---
class RepostView(APIView):
    def get(self, request, pk):
        user = User.objects.filter(pk=request.user.pk).first()
        post = Post.objects.filter(pk=pk).first()

        if not user or not post:
            raise NotFoundError("User or post not found")

        if post.posted_by_id == user.pk:
            raise DomainRuleError("You can't repost your post")

        with transaction.atomic():
            Repost.objects.create(user=user, post=post)
            Post.objects.filter(pk=post.pk).update(number_of_reposts=F('number_of_reposts') + 1)

        logger.info(f"User {user.pk} reposted post {post.pk}")
        return envelope("Post reposted successfully", status.HTTP_201_CREATED)


# --- Following Feed ---
class FollowingFeedView(APIView):
    def get(self, request):
        user = User.objects.filter(pk=request.user.pk).first()
        if user is None:
            raise NotFoundError("User not found")

        following_ids = list(user.following.values_list('pk', flat=True))
        if not following_ids:
            raise DomainRuleError("You aren't following anyone.")

        posts = list(
            Post.objects.filter(posted_by__in=following_ids)
            .select_related('posted_by')
            .order_by('-created_at', '-id')
        )
        ensure_not_empty(posts, "Feed post not found")
        return envelope("Feed fetched successfully.", posts=PostSerializer(posts, many=True).data)


# --- Pagination Class for Comments ---
class CommentPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = 'page_size'

    def get_paginated_response(self, data):
        return envelope("Comments fetched successfully.",
                        count=self.page.paginator.count,
                        next=self.get_next_link(),
                        previous=self.get_previous_link(),
                        comments=data)


# --- List / Add Comments on a Post ---
class PostCommentsView(generics.ListCreateAPIView):
    serializer_class = CommentSerializer
    pagination_class = CommentPagination

    def get_queryset(self):
        post = get_post_or_404(self.kwargs['pk'])
        return Comment.objects.filter(post=post).select_related('commented_by').order_by('-created_at', '-id')

    def create(self, request, *args, **kwargs):
        post = get_post_or_404(self.kwargs['pk'])
        text = request.data.get('text')
        if not text or not str(text).strip():
            raise ValidationError("Comment text is required")

        comment = Comment.objects.create(post=post, commented_by=request.user, text=text)
        logger.info(f"User {request.user.pk} commented on post {post.pk}")
        return envelope("Comment added successfully.", status.HTTP_201_CREATED,
                        comment=CommentSerializer(comment).data)


# --- Update/Delete a Comment ---
class CommentDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = CommentSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrAdmin]
    owner_field = 'commented_by'

    def get_object(self):
        comment = Comment.objects.select_related('commented_by').filter(pk=self.kwargs['pk']).first()
        if comment is None:
            raise NotFoundError("Comment not found")
        self.check_object_permissions(self.request, comment)
        return comment

    def retrieve(self, request, *args, **kwargs):
        return envelope("Comment fetched successfully.", comment=CommentSerializer(self.get_object()).data)

    def update(self, request, *args, **kwargs):
        comment = self.get_object()
        text = request.data.get('text')
        if not text or not str(text).strip():
            raise ValidationError("Comment text is required")

        comment.text = text
        comment.save(update_fields=['text', 'updated_at'])
        return envelope("Comment updated successfully.", comment=CommentSerializer(comment).data)

    def destroy(self, request, *args, **kwargs):
        comment = self.get_object()
        comment.delete()
        logger.info(f"User {request.user.pk} deleted comment {self.kwargs['pk']}")
        return envelope("Comment deleted successfully.")


# --- React to Post (Like, Love, etc.) ---
class PostReactionView(APIView):
    def post(self, request, pk):
        post = get_post_or_404(pk)
        serializer = ReactionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lookup = {'reacted_by': request.user, 'post': post}
        defaults = {'kind': serializer.validated_data['kind']}
        try:
            with transaction.atomic():
                reaction, created = Reaction.objects.update_or_create(**lookup, defaults=defaults)
        except IntegrityError:
            # Lost the insert race for this user and post; the row exists now
            reaction, created = Reaction.objects.update_or_create(**lookup, defaults=defaults)
        return envelope("Reaction recorded" if created else "Reaction updated",
                        status.HTTP_201_CREATED if created else status.HTTP_200_OK,
                        reaction=ReactionSerializer(reaction).data)

    def delete(self, request, pk):
        post = get_post_or_404(pk)
        deleted, _ = Reaction.objects.filter(reacted_by=request.user, post=post).delete()
        if not deleted:
            raise NotFoundError("You haven't reacted to this post")
        return envelope("Reaction removed")
