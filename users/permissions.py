from rest_framework import permissions


def authorized_roles(*roles):
    """
    Builds a permission class admitting authenticated callers whose role is one of `roles`.
    """
    class HasRole(permissions.BasePermission):
        message = "You do not have permission to access this route."

        def has_permission(self, request, view):
            user = request.user
            return bool(user and user.is_authenticated and user.role in roles)

    HasRole.__name__ = f"HasRole_{'_'.join(roles)}"
    return HasRole


class IsOwnerOrAdmin(permissions.BasePermission):
    """
    Only the owner of an object (or an admin) may edit or delete it.
    Views name the owning field with `owner_field`.
    """

    def has_object_permission(self, request, view, obj):
        # SAFE_METHODS = GET, HEAD, OPTIONS
        if request.method in permissions.SAFE_METHODS:
            return True
        if request.user.is_admin:
            return True
        owner_field = getattr(view, 'owner_field', 'posted_by')
        return getattr(obj, f"{owner_field}_id") == request.user.pk
