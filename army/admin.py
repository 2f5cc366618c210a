from django import forms
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .forms import to_snake_case
from .models import AdminUser, Personnel, PointEntry, Promotion, Rank, SpecialPosition
from .services import DomainError, check_rank_placement, insert_rank


@admin.register(AdminUser)
class AdminUserAdmin(DjangoUserAdmin):
    list_display = ("username", "email", "is_active", "last_login")


class RankAdminForm(forms.ModelForm):
    class Meta:
        model = Rank
        fields = ("level", "name", "points_required")

    def clean(self):
        cleaned = super().clean()
        if self.instance.pk is None and not self.has_error("level") and not self.has_error("points_required"):
            try:
                check_rank_placement(cleaned["level"], cleaned["points_required"])
            except DomainError as exc:
                for field, messages in (exc.details or {}).items():
                    for message in messages:
                        self.add_error(to_snake_case(field), message)
        return cleaned


@admin.register(Rank)
class RankAdmin(admin.ModelAdmin):
    form = RankAdminForm
    list_display = ("level", "name", "points_required", "points_from_previous")
    ordering = ("level",)
    # Thresholds are fixed once a rank is on the ladder; only the name may change.
    readonly_fields = ("level", "points_required", "points_from_previous")

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return ("points_from_previous",)
        return self.readonly_fields

    def has_delete_permission(self, request, obj=None):
        return False

    def save_model(self, request, obj, form, change):
        if change:
            super().save_model(request, obj, form, change)
        else:
            insert_rank(obj)


@admin.register(SpecialPosition)
class SpecialPositionAdmin(admin.ModelAdmin):
    list_display = ("name", "difficulty", "bonus_points_per_week")
    list_filter = ("difficulty",)


@admin.register(Personnel)
class PersonnelAdmin(admin.ModelAdmin):
    list_display = ("army_id", "last_name", "first_name", "current_rank", "total_points", "special_position", "is_active")
    list_filter = ("is_active", "current_rank", "special_position")
    search_fields = ("army_id", "first_name", "last_name")
    # Rank and points only move through promotions and the weekly ledger.
    readonly_fields = ("current_rank", "total_points", "created_at", "updated_at")

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return ("total_points", "created_at", "updated_at")
        return self.readonly_fields


class LedgerAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PointEntry)
class PointEntryAdmin(LedgerAdmin):
    list_display = ("personnel", "week_start", "activity_points", "special_position_points", "total_week_points", "entered_by")
    list_filter = ("week_start",)
    search_fields = ("personnel__army_id", "personnel__last_name", "notes")


@admin.register(Promotion)
class PromotionAdmin(LedgerAdmin):
    list_display = ("personnel", "from_rank", "to_rank", "points_at_promotion", "promoted_by", "promotion_date")
    list_filter = ("to_rank",)
    search_fields = ("personnel__army_id", "personnel__last_name", "notes")
