class OwnerAdminMixin:
    """
    Enforce per-user isolation in Django admin.
    Superusers see every row; staff users only see their own books.
    """

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        return qs.filter(owner=request.user)

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        """
        Restrict foreignkey dropdowns (customer, quote, invoice) to the
        current user's rows.
        """
        rel_model = getattr(db_field, "related_model", None)
        if (
            db_field.name != "owner"
            and rel_model is not None
            and hasattr(rel_model, "owner")
            and not request.user.is_superuser
        ):
            kwargs["queryset"] = rel_model.objects.for_owner(request.user)
        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def save_model(self, request, obj, form, change):
        # Ensure new rows are owned by whoever creates them
        if not change and not getattr(obj, "owner_id", None):
            obj.owner = request.user
        super().save_model(request, obj, form, change)
