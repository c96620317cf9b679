from rest_framework import serializers
from django.contrib.auth import authenticate

from core.media import asset_reference
from .models import User


class AvatarField(serializers.Field):
    def __init__(self, **kwargs):
        kwargs['source'] = '*'
        kwargs['read_only'] = True
        super().__init__(**kwargs)

    def to_representation(self, user):
        return asset_reference(user.avatar_public_id, user.avatar_secure_url)


class UserSummarySerializer(serializers.ModelSerializer):
    """Username and avatar, joined into posts, comments and reactions."""
    avatar = AvatarField()

    class Meta:
        model = User
        fields = ['id', 'username', 'avatar']


class UserSerializer(serializers.ModelSerializer):
    avatar = AvatarField()
    following_count = serializers.IntegerField(source='following.count', read_only=True)
    followers_count = serializers.IntegerField(source='followers.count', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'username', 'full_name', 'bio', 'avatar', 'role',
                  'following_count', 'followers_count', 'date_joined']


class ProfileSerializer(UserSerializer):
    following = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    reposts = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['following', 'reposts']

    def get_reposts(self, user):
        return [
            {'post': repost.post_id, 'reposted_at': repost.created_at}
            for repost in user.reposts.order_by('created_at', 'id')
        ]


class ProfileUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['username', 'full_name', 'bio']
        extra_kwargs = {'username': {'required': False}}


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ['id', 'email', 'username', 'full_name', 'password']

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()

    def validate(self, data):
        user = authenticate(email=data['email'], password=data['password'])
        if user is None:
            raise serializers.ValidationError("Invalid credentials")
        data['user'] = user
        return data
