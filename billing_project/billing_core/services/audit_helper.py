from ..models import AuditLog


def log_action(
    *,
    action: str,
    instance,
    owner=None,
    object_id=None,
    changes: dict | None = None,
):
    """
    Central audit logger.
    Call it inside the same atomic block as the write it records.
    """

    if owner is None:
        owner = getattr(instance, "owner", None)

    AuditLog.objects.create(
        owner=owner,
        action=action,
        object_type=instance.__class__.__name__,
        # deleted instances have lost their pk, so callers pass it in
        object_id=str(object_id if object_id is not None else instance.pk),
        changes=changes,
    )
