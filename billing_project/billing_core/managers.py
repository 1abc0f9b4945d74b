from django.db import models

from .exceptions import EntityNotFound


# -----------------------------------------
# Enforce per-user ownership across all
# billing models
# -----------------------------------------
class OwnedQuerySet(models.QuerySet):
    def for_owner(self, owner):         # every read/write starts here
        return self.filter(owner=owner)

    def newest_first(self):
        return self.order_by("-created_at", "-pk")


class OwnedManager(models.Manager):
    # ensure .for_owner() is available straight off .objects
    def get_queryset(self):
        return OwnedQuerySet(self.model, using=self._db)

    def for_owner(self, owner):
        return self.get_queryset().for_owner(owner)

    # Quote.objects.get_owned(request.user, pk)
    def get_owned(self, owner, pk):
        try:
            return self.for_owner(owner).get(pk=pk)
        except (self.model.DoesNotExist, ValueError, TypeError):
            # same answer for "absent" and "someone else's"
            raise EntityNotFound(f"{self.model.__name__} not found")
