from django.conf import settings
from django.db import models

REACTION_CHOICES = [
    ('like', '👍 Like'),
    ('love', '❤️ Love'),
    ('haha', '😂 Haha'),
    ('wow', '😮 Wow'),
    ('sad', '😢 Sad'),
    ('angry', '😠 Angry'),
]


class Post(models.Model):
    posted_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='posts')
    content = models.TextField()
    title = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    thumbnail_public_id = models.CharField(max_length=255, blank=True)
    thumbnail_secure_url = models.URLField(max_length=500, blank=True)
    thumbnail_resource_type = models.CharField(max_length=10, blank=True)
    number_of_reposts = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [models.Index(fields=['posted_by', '-created_at'], name='post_author_created_idx')]

    def __str__(self):
        return f"{self.posted_by.username} - {self.content[:30]}"

    @property
    def has_thumbnail(self):
        return bool(self.thumbnail_public_id)


class Comment(models.Model):
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='comments')
    commented_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='comments')
    text = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.commented_by.username} on Post {self.post_id}"


class Reaction(models.Model):
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='reactions')
    reacted_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reactions')
    kind = models.CharField(max_length=10, choices=REACTION_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('reacted_by', 'post')

    def __str__(self):
        return f"{self.reacted_by.username} reacted with {self.kind} to post {self.post_id}"


class Repost(models.Model):
    """One entry of a user's repost list. The same post may appear more than once."""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reposts')
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='reposts')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.user.username} reposted post {self.post_id}"
