import logging

from django.conf import settings
from django.db import DatabaseError
from rest_framework import generics, permissions, status, views
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from core import media
from core.exceptions import DomainRuleError, NotFoundError, ValidationError
from core.responses import envelope
from .models import ROLE_ADMIN, User
from .permissions import authorized_roles
from .serializers import (
    LoginSerializer,
    ProfileSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserSerializer,
    UserSummarySerializer,
)

logger = logging.getLogger(__name__)


def get_user_or_404(user_id):
    user = User.objects.filter(pk=user_id, is_active=True).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


class RegisterView(generics.CreateAPIView):
    serializer_class = RegisterSerializer
    permission_classes = [permissions.AllowAny]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"Registered user {user.pk} ({user.username})")
        return envelope("Account created successfully.", status.HTTP_201_CREATED,
                        user=UserSerializer(user).data)


class LoginView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']
        refresh = RefreshToken.for_user(user)
        return envelope("Logged in successfully.",
                        refresh=str(refresh),
                        access=str(refresh.access_token),
                        user=UserSerializer(user).data)


class LogoutView(views.APIView):
    def post(self, request):
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            raise ValidationError("Refresh token is required")
        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError as e:
            raise ValidationError(str(e)) from e
        return envelope("Logged out successfully.")


class ProfileView(views.APIView):
    def get(self, request):
        return envelope("User details fetched successfully.",
                        user=ProfileSerializer(request.user).data)


class EditProfileView(views.APIView):
    parser_classes = (MultiPartParser, FormParser, JSONParser)

    def put(self, request):
        user = request.user
        serializer = ProfileUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        avatar_file = request.FILES.get('avatar')
        if not avatar_file:
            serializer.save()
        else:
            if media.category_for(avatar_file.content_type) != 'image':
                raise ValidationError("Avatar must be an image")
            # A failed upload leaves the profile untouched
            asset = media.store_upload(avatar_file, media.AVATARS_FOLDER,
                                       error_message="Error while uploading avatar")
            replaced = user.avatar_public_id
            try:
                serializer.save(avatar_public_id=asset.public_id, avatar_secure_url=asset.secure_url)
            except DatabaseError:
                media.discard(asset.public_id)
                raise
            if replaced:
                media.discard(replaced)

        logger.info(f"User {user.pk} updated their profile")
        return envelope("Profile updated successfully.", user=ProfileSerializer(user).data)


class FollowUserView(views.APIView):
    def get(self, request, user_id):
        target = get_user_or_404(user_id)
        me = request.user

        if target.pk == me.pk:
            raise DomainRuleError("You can't follow yourself")
        if me.is_following(target):
            raise DomainRuleError("You are already following this user")

        me.following.add(target)
        logger.info(f"User {me.pk} followed {target.pk}")
        return envelope(f"You are now following {target.username}.")


class UnfollowUserView(views.APIView):
    def get(self, request, user_id):
        target = get_user_or_404(user_id)
        me = request.user

        if not me.is_following(target):
            raise DomainRuleError("You are not following this user")

        me.following.remove(target)
        logger.info(f"User {me.pk} unfollowed {target.pk}")
        return envelope(f"You unfollowed {target.username}.")


class AdminUserListView(generics.ListAPIView):
    queryset = User.objects.all().order_by('-date_joined')
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated, authorized_roles(ROLE_ADMIN)]

    def list(self, request, *args, **kwargs):
        users = self.get_serializer(self.get_queryset(), many=True).data
        return envelope("Users fetched successfully.", users=users)


class SuggestedFriendsView(views.APIView):
    def get(self, request):
        me = request.user
        suggestions = (
            User.objects.filter(is_active=True)
            .exclude(pk=me.pk)
            .exclude(pk__in=me.following.values('pk'))
            .order_by('-date_joined', '-id')[:settings.SUGGESTED_FRIENDS_LIMIT]
        )
        return envelope("Suggested friends fetched successfully.",
                        users=UserSummarySerializer(suggestions, many=True).data)


class UnfollowedFollowersView(views.APIView):
    def get(self, request):
        me = request.user
        followers = me.followers.exclude(pk__in=me.following.values('pk')).order_by('username')
        return envelope("Unfollowed followers fetched successfully.",
                        users=UserSummarySerializer(followers, many=True).data)
