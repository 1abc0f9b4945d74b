from django.conf import settings  # To access global project settings
from django.db import models

from ..managers import OwnedManager


# ---------- Audit / Event log ----------
class AuditLog(
    models.Model
):  # Gives accountability and traceability for every billing write
    # Which user's books were touched
    # (Nullable in case the action was automated, e.g. an import script)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL,
        related_name="audit_logs",
    )
    # Type of event being logged
    action = models.CharField(
        max_length=50
    )  # Common choices: create, update, delete
    # What kind of object was affected
    object_type = models.CharField(
        max_length=100
    )  # (e.g., "Invoice", "Quote", "Payment")
    # The primary key (or identifier) of the object
    object_id = models.CharField(max_length=100)
    # What changed, in JSON format
    changes = models.JSONField(null=True, blank=True)
    # Timestamp when the event was logged
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce owner scoping
    objects = OwnedManager()

    class Meta:
        # Filter logs quickly
        indexes = [
            models.Index(fields=["owner", "created_at"], name="auditlog_owner_created_idx"),
            models.Index(fields=["object_type", "object_id"], name="auditlog_object_idx"),
        ]

    def __str__(self):
        time = self.created_at
        usr = self.owner
        action = self.action
        objType = self.object_type
        objId = self.object_id
        return f"[{time:%Y-%m-%d %H:%M}] {usr} {action} {objType}({objId})"
