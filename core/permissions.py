from rest_framework.permissions import BasePermission

def _in_group(user, name): 
    return user.is_authenticated and user.groups.filter(name=name).exists()

class IsFinance(BasePermission):
    """Staff, superusers and members of the Finance group may read donor receipts."""
    def has_permission(self, request, view):
        user = request.user
        if not user.is_authenticated:
            return False
        return user.is_staff or user.is_superuser or _in_group(user, "Finance")
