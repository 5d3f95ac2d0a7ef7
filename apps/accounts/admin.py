# apps/accounts/admin.py

"""
Django admin configuration for customers and their addresses.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserChangeForm, UserCreationForm

from apps.accounts.models import CustomerAddress, User


class CustomUserCreationForm(UserCreationForm):
    class Meta(UserCreationForm.Meta):
        model = User
        fields = ("email", "user_type", "customer_type")


class CustomUserChangeForm(UserChangeForm):
    class Meta(UserChangeForm.Meta):
        model = User
        fields = "__all__"


class CustomerAddressInline(admin.TabularInline):
    model = CustomerAddress
    fk_name = "user"
    extra = 0
    fields = ("label", "street", "number", "city", "state", "zip_code", "is_default")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.
    Staff switch customers between retail and wholesale pricing here.
    """

    form = CustomUserChangeForm
    add_form = CustomUserCreationForm
    inlines = [CustomerAddressInline]

    list_display = (
        "email",
        "full_name",
        "user_type",
        "customer_type",
        "cpf_cnpj",
        "is_active",
        "date_joined_display",
    )
    list_filter = ("user_type", "customer_type", "is_active", "is_staff", "date_joined")
    search_fields = ("email", "first_name", "last_name", "phone_number", "cpf_cnpj")
    ordering = ("-date_joined",)

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (
            "Personal Info",
            {"fields": ("first_name", "last_name", "phone_number", "cpf_cnpj")},
        ),
        ("Account Settings", {"fields": ("user_type", "customer_type")}),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
                "classes": ("collapse",),
            },
        ),
        (
            "Important Dates",
            {"fields": ("last_login", "date_joined"), "classes": ("collapse",)},
        ),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "password1",
                    "password2",
                    "user_type",
                    "customer_type",
                    "first_name",
                    "last_name",
                ),
            },
        ),
    )

    readonly_fields = ("date_joined", "last_login", "created_at", "updated_at", "id")

    @admin.display(description="Joined", ordering="date_joined")
    def date_joined_display(self, obj):
        return obj.date_joined.strftime("%Y-%m-%d %H:%M")


admin.site.site_header = "HP Marcas Administration"
admin.site.site_title = "HP Marcas Admin"
admin.site.index_title = "Painel administrativo"
