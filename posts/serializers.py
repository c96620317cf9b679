from django.db import models
from rest_framework import serializers

from core.media import asset_reference
from users.serializers import UserSummarySerializer
from .models import Comment, Post, Reaction


class CommentSerializer(serializers.ModelSerializer):
    commented_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'post', 'text', 'commented_by', 'created_at', 'updated_at']
        read_only_fields = ['post']


class ReactionSerializer(serializers.ModelSerializer):
    reacted_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Reaction
        fields = ['id', 'post', 'kind', 'reacted_by', 'created_at']
        read_only_fields = ['post']


class ReactionCreateSerializer(serializers.ModelSerializer):
    kind = serializers.ChoiceField(choices=Reaction._meta.get_field('kind').choices)

    class Meta:
        model = Reaction
        fields = ['kind']


class PostSerializer(serializers.ModelSerializer):
    posted_by = UserSummarySerializer(read_only=True)
    thumbnail = serializers.SerializerMethodField()
    comment_count = serializers.SerializerMethodField()
    reaction_count = serializers.SerializerMethodField()

    class Meta:
        model = Post
        fields = [
            'id',
            'content',
            'title',
            'description',
            'thumbnail',
            'posted_by',
            'number_of_reposts',
            'comment_count',
            'reaction_count',
            'created_at',
            'updated_at',
        ]

    def get_thumbnail(self, post):
        return asset_reference(post.thumbnail_public_id, post.thumbnail_secure_url)

    def get_comment_count(self, post):
        return post.comments.count()

    def get_reaction_count(self, post):
        return post.reactions.count()


class PostDetailSerializer(PostSerializer):
    comments = serializers.SerializerMethodField()
    reactions = serializers.SerializerMethodField()
    reaction_summary = serializers.SerializerMethodField()

    class Meta(PostSerializer.Meta):
        fields = PostSerializer.Meta.fields + ['comments', 'reactions', 'reaction_summary']

    def get_comments(self, post):
        comments = post.comments.select_related('commented_by').order_by('created_at')
        return CommentSerializer(comments, many=True).data

    def get_reactions(self, post):
        reactions = post.reactions.select_related('reacted_by').order_by('created_at')
        return ReactionSerializer(reactions, many=True).data

    def get_reaction_summary(self, post):
        reaction_counts = post.reactions.values('kind').order_by().annotate(count=models.Count('kind'))
        return {r['kind']: r['count'] for r in reaction_counts}


class PostWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Post
        fields = ['content', 'title', 'description']
        extra_kwargs = {
            'content': {'required': False},
            'title': {'required': False},
            'description': {'required': False},
        }

    def update(self, instance, validated_data):
        # number_of_reposts is only ever written through RepostView's F() update
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save(update_fields=[*validated_data, 'updated_at'])
        return instance
