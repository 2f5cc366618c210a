from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

MIN_RANK_LEVEL = 2
MAX_RANK_LEVEL = 15
MAX_ACTIVITY_POINTS = 35


class AdminUser(AbstractUser):
    def __str__(self) -> str:
        return self.username


class Rank(models.Model):
    level = models.PositiveSmallIntegerField(unique=True)
    name = models.CharField(max_length=100)
    points_required = models.PositiveIntegerField()
    points_from_previous = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["level"]
        constraints = [
            models.CheckConstraint(
                condition=Q(level__gte=MIN_RANK_LEVEL) & Q(level__lte=MAX_RANK_LEVEL),
                name="rank_level_range",
            )
        ]

    def __str__(self) -> str:
        return f"{self.level} {self.name}"


class SpecialPosition(models.Model):
    class Difficulty(models.TextChoices):
        EASY = "easy", "easy"
        MEDIUM = "medium", "medium"
        HARD = "hard", "hard"

    name = models.CharField(max_length=100, unique=True)
    difficulty = models.CharField(max_length=20, choices=Difficulty.choices)
    bonus_points_per_week = models.PositiveIntegerField(default=0)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Personnel(models.Model):
    army_id = models.CharField(max_length=20, unique=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    current_rank = models.ForeignKey(Rank, on_delete=models.PROTECT, related_name="personnel")
    total_points = models.PositiveIntegerField(default=0)
    special_position = models.ForeignKey(
        SpecialPosition,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="personnel",
    )
    is_active = models.BooleanField(default=True)
    join_date = models.DateField(default=timezone.localdate)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["last_name", "first_name"]
        verbose_name_plural = "personnel"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:
        return f"{self.army_id} {self.full_name}"


class PointEntry(models.Model):
    personnel = models.ForeignKey(Personnel, on_delete=models.PROTECT, related_name="point_entries")
    week_start = models.DateField()
    activity_points = models.PositiveSmallIntegerField()
    special_position_points = models.PositiveIntegerField(default=0)
    total_week_points = models.PositiveIntegerField()
    notes = models.TextField(blank=True)
    entered_by = models.CharField(max_length=150)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-week_start", "-created_at"]
        verbose_name_plural = "point entries"
        indexes = [
            models.Index(fields=["week_start"], name="pointentry_week_idx"),
        ]
        constraints = [
            models.UniqueConstraint(fields=["personnel", "week_start"], name="unique_point_entry_per_week"),
            models.CheckConstraint(
                condition=Q(activity_points__gte=0) & Q(activity_points__lte=MAX_ACTIVITY_POINTS),
                name="pointentry_activity_points_range",
            ),
            models.CheckConstraint(
                condition=Q(total_week_points=F("activity_points") + F("special_position_points")),
                name="pointentry_total_is_sum",
            ),
        ]

    def save(self, *args, **kwargs):
        self.total_week_points = self.activity_points + self.special_position_points
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.personnel} {self.week_start} {self.total_week_points}"


class Promotion(models.Model):
    personnel = models.ForeignKey(Personnel, on_delete=models.PROTECT, related_name="promotions")
    from_rank = models.ForeignKey(Rank, on_delete=models.PROTECT, related_name="+")
    to_rank = models.ForeignKey(Rank, on_delete=models.PROTECT, related_name="+")
    points_at_promotion = models.PositiveIntegerField()
    promoted_by = models.CharField(max_length=150)
    promotion_date = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-promotion_date", "-id"]
        indexes = [
            models.Index(fields=["promotion_date"], name="promotion_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.personnel} {self.from_rank.level} -> {self.to_rank.level}"
