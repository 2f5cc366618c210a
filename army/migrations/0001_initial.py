# Generated manually for initial schema
import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="AdminUser",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                (
                    "groups",
                    models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups"),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions"),
                ),
            ],
            options={"abstract": False, "verbose_name": "user", "verbose_name_plural": "users"},
            managers=[("objects", django.contrib.auth.models.UserManager())],
        ),
        migrations.CreateModel(
            name="Rank",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("level", models.PositiveSmallIntegerField(unique=True)),
                ("name", models.CharField(max_length=100)),
                ("points_required", models.PositiveIntegerField()),
                ("points_from_previous", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["level"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("level__gte", 2), ("level__lte", 15)),
                        name="rank_level_range",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="SpecialPosition",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                (
                    "difficulty",
                    models.CharField(choices=[("easy", "easy"), ("medium", "medium"), ("hard", "hard")], max_length=20),
                ),
                ("bonus_points_per_week", models.PositiveIntegerField(default=0)),
                ("description", models.TextField(blank=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Personnel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("army_id", models.CharField(max_length=20, unique=True)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("total_points", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("join_date", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "current_rank",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="personnel", to="army.rank"),
                ),
                (
                    "special_position",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="personnel",
                        to="army.specialposition",
                    ),
                ),
            ],
            options={"ordering": ["last_name", "first_name"], "verbose_name_plural": "personnel"},
        ),
        migrations.CreateModel(
            name="PointEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("week_start", models.DateField()),
                ("activity_points", models.PositiveSmallIntegerField()),
                ("special_position_points", models.PositiveIntegerField(default=0)),
                ("total_week_points", models.PositiveIntegerField()),
                ("notes", models.TextField(blank=True)),
                ("entered_by", models.CharField(max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "personnel",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="point_entries", to="army.personnel"),
                ),
            ],
            options={
                "ordering": ["-week_start", "-created_at"],
                "verbose_name_plural": "point entries",
                "indexes": [models.Index(fields=["week_start"], name="pointentry_week_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("personnel", "week_start"), name="unique_point_entry_per_week"),
                    models.CheckConstraint(
                        condition=models.Q(("activity_points__gte", 0), ("activity_points__lte", 35)),
                        name="pointentry_activity_points_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("total_week_points", models.F("activity_points") + models.F("special_position_points"))
                        ),
                        name="pointentry_total_is_sum",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Promotion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("points_at_promotion", models.PositiveIntegerField()),
                ("promoted_by", models.CharField(max_length=150)),
                ("promotion_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("notes", models.TextField(blank=True)),
                (
                    "from_rank",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="+", to="army.rank"),
                ),
                (
                    "to_rank",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="+", to="army.rank"),
                ),
                (
                    "personnel",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="promotions", to="army.personnel"),
                ),
            ],
            options={
                "ordering": ["-promotion_date", "-id"],
                "indexes": [models.Index(fields=["promotion_date"], name="promotion_date_idx")],
            },
        ),
    ]
