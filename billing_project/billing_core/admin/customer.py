from django.contrib import admin

from ..models import Customer
from .mixins import OwnerAdminMixin


# Register `Customer` model
@admin.register(Customer)
class CustomerAdmin(OwnerAdminMixin, admin.ModelAdmin):
    list_display = ("id", "owner", "name", "email", "company", "created_at")
    search_fields = ("name", "email", "company")
    list_filter = ("owner",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("owner")
