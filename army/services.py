import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar, Iterable

from django.contrib.auth import authenticate, login
from django.db import IntegrityError, transaction
from django.db.models import Count, Sum
from django.db.models.functions import Coalesce
from django.http import HttpRequest
from django.utils import timezone

from .ladder import RankLadder
from .models import (
    MAX_ACTIVITY_POINTS,
    MAX_RANK_LEVEL,
    MIN_RANK_LEVEL,
    AdminUser,
    Personnel,
    PointEntry,
    Promotion,
    Rank,
    SpecialPosition,
)
from .seed import DEFAULT_RANKS, DEFAULT_SPECIAL_POSITIONS

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


@dataclass
class DomainError(Exception):
    message: str
    details: dict | None = None

    status_code: ClassVar[int] = 400
    code: ClassVar[str] = "domain_error"


class ValidationError(DomainError):
    code = "validation_error"


class ConflictError(DomainError):
    status_code = 409
    code = "conflict"


class DuplicatePointEntry(ConflictError):
    # Point-entry clients have always received 400 for a repeated week.
    status_code = 400
    code = "duplicate_point_entry"


class NotFoundError(DomainError):
    status_code = 404
    code = "not_found"


class AuthenticationError(DomainError):
    status_code = 401
    code = "not_authenticated"


@dataclass
class DashboardStats:
    total_personnel: int
    active_members: int
    promotions_this_week: int
    average_points: int


@dataclass
class BootstrapResult:
    user: AdminUser
    ranks_created: int
    special_positions_created: int


def week_start_for(day: date) -> date:
    return day - timedelta(days=day.weekday())


def current_week_window(today: date | None = None) -> tuple[datetime, datetime]:
    today = today or timezone.localdate()
    start = timezone.make_aware(datetime.combine(week_start_for(today), time.min))
    return start, start + timedelta(days=7)


def get_rank_ladder() -> RankLadder:
    return RankLadder(Rank.objects.all())


def get_rank(rank_id: int) -> Rank:
    try:
        return Rank.objects.get(pk=rank_id)
    except Rank.DoesNotExist as exc:
        raise NotFoundError("Rank not found.") from exc


def get_special_position(position_id: int) -> SpecialPosition:
    try:
        return SpecialPosition.objects.get(pk=position_id)
    except SpecialPosition.DoesNotExist as exc:
        raise NotFoundError("Special position not found.") from exc


def get_personnel(personnel_id: int) -> Personnel:
    try:
        return Personnel.objects.select_related("current_rank", "special_position").get(pk=personnel_id)
    except Personnel.DoesNotExist as exc:
        raise NotFoundError("Personnel not found.") from exc


def _lock_personnel(personnel_id: int) -> Personnel:
    try:
        return Personnel.objects.select_for_update().get(pk=personnel_id)
    except Personnel.DoesNotExist as exc:
        raise NotFoundError("Personnel not found.") from exc


def list_personnel(active: bool | None = None, army_id: str | None = None) -> Iterable[Personnel]:
    queryset = Personnel.objects.select_related("current_rank", "special_position").order_by(
        "last_name", "first_name"
    )
    if active is not None:
        queryset = queryset.filter(is_active=active)
    if army_id:
        queryset = queryset.filter(army_id=army_id)
    return queryset


def create_personnel(
    army_id: str,
    first_name: str,
    last_name: str,
    current_rank_id: int,
    special_position_id: int | None = None,
    join_date: date | None = None,
    is_active: bool = True,
) -> Personnel:
    army_id = army_id.strip()
    if not army_id:
        raise ValidationError("Invalid data", {"armyId": ["This field is required."]})
    if Personnel.objects.filter(army_id=army_id).exists():
        raise ValidationError("Invalid data", {"armyId": ["Army ID is already in use."]})

    rank = get_rank(current_rank_id)
    position = get_special_position(special_position_id) if special_position_id is not None else None

    try:
        with transaction.atomic():
            person = Personnel.objects.create(
                army_id=army_id,
                first_name=first_name,
                last_name=last_name,
                current_rank=rank,
                special_position=position,
                join_date=join_date or timezone.localdate(),
                is_active=is_active,
            )
    except IntegrityError as exc:
        raise ValidationError("Invalid data", {"armyId": ["Army ID is already in use."]}) from exc
    logger.info("Personnel %s created at rank level %s", person.army_id, rank.level)
    return person


PERSONNEL_EDITABLE_FIELDS = ("first_name", "last_name", "special_position_id", "is_active", "join_date")


def update_personnel(personnel_id: int, **changes) -> Personnel:
    unknown = sorted(set(changes) - set(PERSONNEL_EDITABLE_FIELDS))
    if unknown:
        raise ValidationError("Invalid data", {name: ["This field cannot be changed here."] for name in unknown})

    with transaction.atomic():
        person = _lock_personnel(personnel_id)
        if "special_position_id" in changes:
            position_id = changes.pop("special_position_id")
            person.special_position = get_special_position(position_id) if position_id is not None else None
            changes["special_position"] = person.special_position
        for field, value in changes.items():
            setattr(person, field, value)
        person.save(update_fields=[*changes.keys(), "updated_at"])
    logger.info("Personnel %s updated: %s", person.army_id, ", ".join(sorted(changes)) or "no fields")
    return get_personnel(person.pk)


def recompute_total_points(person: Personnel) -> int:
    total = (
        PointEntry.objects.filter(personnel=person)
        .aggregate(total=Coalesce(Sum("total_week_points"), 0))
        .get("total")
    )
    total = int(total or 0)
    Personnel.objects.filter(pk=person.pk).update(total_points=total, updated_at=timezone.now())
    person.total_points = total
    return total


def submit_point_entry(
    personnel_id: int,
    week_start: date,
    activity_points: int,
    notes: str,
    entered_by: str,
) -> PointEntry:
    if isinstance(activity_points, bool) or not isinstance(activity_points, int):
        raise ValidationError("Invalid data", {"activityPoints": ["Activity points must be a whole number."]})
    if not 0 <= activity_points <= MAX_ACTIVITY_POINTS:
        raise ValidationError(
            "Invalid data",
            {"activityPoints": [f"Activity points must be between 0 and {MAX_ACTIVITY_POINTS}."]},
        )
    week_key = week_start_for(week_start)

    with transaction.atomic():
        person = _lock_personnel(personnel_id)
        if PointEntry.objects.filter(personnel=person, week_start=week_key).exists():
            logger.warning("Rejected duplicate point entry for %s week %s", person.army_id, week_key)
            raise DuplicatePointEntry("Points already entered for this week")

        position = person.special_position
        bonus = position.bonus_points_per_week if position else 0
        try:
            with transaction.atomic():
                entry = PointEntry.objects.create(
                    personnel=person,
                    week_start=week_key,
                    activity_points=activity_points,
                    special_position_points=bonus,
                    notes=notes or "",
                    entered_by=entered_by,
                )
        except IntegrityError as exc:
            logger.warning("Rejected duplicate point entry for %s week %s", person.army_id, week_key)
            raise DuplicatePointEntry("Points already entered for this week") from exc

        total = recompute_total_points(person)
    logger.info(
        "Recorded %s points for %s week %s by %s, total now %s",
        entry.total_week_points,
        person.army_id,
        week_key,
        entered_by,
        total,
    )
    return entry


def list_point_entries(personnel_id: int | None = None, week_start: date | None = None) -> Iterable[PointEntry]:
    queryset = PointEntry.objects.select_related("personnel").order_by("-week_start", "-created_at")
    if personnel_id is not None:
        queryset = queryset.filter(personnel_id=personnel_id)
    if week_start is not None:
        queryset = queryset.filter(week_start=week_start_for(week_start))
    return queryset


def is_eligible_for_promotion(person: Personnel, ladder: RankLadder | None = None) -> bool:
    ladder = ladder or get_rank_ladder()
    return ladder.is_eligible(person.total_points, person.current_rank.level)


def eligible_personnel() -> list[tuple[Personnel, Rank]]:
    ladder = get_rank_ladder()
    candidates = []
    for person in list_personnel(active=True):
        level = person.current_rank.level
        if ladder.is_eligible(person.total_points, level):
            candidates.append((person, ladder.next_rank(level)))
    return candidates


def promote(personnel_id: int, to_rank_id: int, promoted_by: str, notes: str = "") -> Promotion:
    with transaction.atomic():
        person = _lock_personnel(personnel_id)
        to_rank = get_rank(to_rank_id)
        if person.current_rank_id == to_rank.pk:
            raise ValidationError("Invalid data", {"toRankId": ["Personnel already holds this rank."]})

        from_rank_id = person.current_rank_id
        promotion = Promotion.objects.create(
            personnel=person,
            from_rank_id=from_rank_id,
            to_rank=to_rank,
            points_at_promotion=person.total_points,
            promoted_by=promoted_by,
            notes=notes or "",
        )
        person.current_rank = to_rank
        person.save(update_fields=["current_rank", "updated_at"])
    logger.info(
        "Promoted %s from rank id %s to level %s by %s at %s points",
        person.army_id,
        from_rank_id,
        to_rank.level,
        promoted_by,
        promotion.points_at_promotion,
    )
    return promotion


def list_promotions(personnel_id: int | None = None) -> Iterable[Promotion]:
    queryset = Promotion.objects.select_related("personnel", "from_rank", "to_rank").order_by(
        "-promotion_date", "-id"
    )
    if personnel_id is not None:
        queryset = queryset.filter(personnel_id=personnel_id)
    return queryset


def dashboard_stats(today: date | None = None) -> DashboardStats:
    week_begin, week_end = current_week_window(today)
    active = Personnel.objects.filter(is_active=True)
    active_members = active.count()
    active_total = active.aggregate(total=Coalesce(Sum("total_points"), 0)).get("total") or 0
    if active_members:
        average = int((Decimal(active_total) / active_members).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    else:
        average = 0
    return DashboardStats(
        total_personnel=Personnel.objects.count(),
        active_members=active_members,
        promotions_this_week=Promotion.objects.filter(
            promotion_date__gte=week_begin,
            promotion_date__lt=week_end,
        ).count(),
        average_points=average,
    )


def rank_distribution() -> Iterable[Rank]:
    return Rank.objects.annotate(holder_count=Count("personnel")).order_by("level")


def login_admin(request: HttpRequest, username: str, password: str) -> AdminUser:
    user = authenticate(request, username=username, password=password)
    if user is None:
        logger.warning("Failed login for username %r", username)
        raise AuthenticationError(INVALID_CREDENTIALS)
    login(request, user)
    logger.info("Admin %s logged in", user.username)
    return user


def seed_ranks() -> int:
    created_count = 0
    for seed in DEFAULT_RANKS:
        _, created = Rank.objects.get_or_create(
            level=seed.level,
            defaults={
                "name": seed.name,
                "points_required": seed.points_required,
                "points_from_previous": seed.points_from_previous,
            },
        )
        created_count += int(created)
    return created_count


def seed_special_positions() -> int:
    created_count = 0
    for seed in DEFAULT_SPECIAL_POSITIONS:
        _, created = SpecialPosition.objects.get_or_create(
            name=seed.name,
            defaults={
                "difficulty": seed.difficulty,
                "bonus_points_per_week": seed.bonus_points_per_week,
                "description": seed.description,
            },
        )
        created_count += int(created)
    return created_count


def bootstrap(
    username: str,
    password: str,
    first_name: str = "",
    last_name: str = "",
    email: str = "",
) -> BootstrapResult:
    with transaction.atomic():
        if AdminUser.objects.exists():
            raise ConflictError("Admin user already exists")
        try:
            with transaction.atomic():
                user = AdminUser.objects.create_superuser(
                    username=username,
                    email=email,
                    password=password,
                    first_name=first_name,
                    last_name=last_name,
                )
        except IntegrityError as exc:
            logger.warning("Bootstrap lost the race for admin %s", username)
            raise ConflictError("Admin user already exists") from exc
        ranks_created = seed_ranks()
        positions_created = seed_special_positions()
    logger.info(
        "Bootstrap created admin %s, %s ranks, %s special positions",
        user.username,
        ranks_created,
        positions_created,
    )
    return BootstrapResult(user=user, ranks_created=ranks_created, special_positions_created=positions_created)


def check_rank_placement(level: int, points_required: int) -> RankLadder:
    """Validate a new rung against the current ladder and return that ladder."""
    if not MIN_RANK_LEVEL <= level <= MAX_RANK_LEVEL:
        raise ValidationError(
            "Invalid data",
            {"level": [f"Level must be between {MIN_RANK_LEVEL} and {MAX_RANK_LEVEL}."]},
        )
    if points_required < 0:
        raise ValidationError("Invalid data", {"pointsRequired": ["Points required cannot be negative."]})
    if Rank.objects.filter(level=level).exists():
        raise ValidationError("Invalid data", {"level": ["A rank with this level already exists."]})
    ladder = get_rank_ladder()
    if not ladder.fits(level, points_required):
        raise ValidationError(
            "Invalid data",
            {"pointsRequired": ["Points required must not drop below a lower rank or exceed a higher one."]},
        )
    return ladder


def insert_rank(rank: Rank) -> Rank:
    with transaction.atomic():
        ladder = check_rank_placement(rank.level, rank.points_required)
        rank.points_from_previous = ladder.delta_for(rank.level, rank.points_required)
        rank.save()
        following = ladder.next_rank(rank.level)
        if following is not None:
            Rank.objects.filter(pk=following.pk).update(
                points_from_previous=following.points_required - rank.points_required
            )
    logger.info("Rank level %s %r created at %s points", rank.level, rank.name, rank.points_required)
    return rank


def create_rank(level: int, name: str, points_required: int) -> Rank:
    return insert_rank(Rank(level=level, name=name, points_required=points_required))


def create_special_position(
    name: str,
    difficulty: str,
    bonus_points_per_week: int,
    description: str = "",
) -> SpecialPosition:
    if difficulty not in SpecialPosition.Difficulty.values:
        raise ValidationError("Invalid data", {"difficulty": ["Difficulty must be easy, medium or hard."]})
    if bonus_points_per_week < 0:
        raise ValidationError("Invalid data", {"bonusPointsPerWeek": ["Bonus points cannot be negative."]})
    if SpecialPosition.objects.filter(name=name).exists():
        raise ValidationError("Invalid data", {"name": ["A special position with this name already exists."]})

    position = SpecialPosition.objects.create(
        name=name,
        difficulty=difficulty,
        bonus_points_per_week=bonus_points_per_week,
        description=description or "",
    )
    logger.info("Special position %r created (+%s/week)", name, bonus_points_per_week)
    return position
