from .ladder import RankLadder
from .models import AdminUser, Personnel, PointEntry, Promotion, Rank, SpecialPosition
from .services import DashboardStats


def serialize_user(user: AdminUser) -> dict:
    return {
        "id": user.pk,
        "username": user.username,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "isActive": user.is_active,
        "lastLogin": user.last_login,
    }


def serialize_rank(rank: Rank) -> dict:
    return {
        "id": rank.pk,
        "level": rank.level,
        "name": rank.name,
        "pointsRequired": rank.points_required,
        "pointsFromPrevious": rank.points_from_previous,
    }


def serialize_special_position(position: SpecialPosition | None) -> dict | None:
    if position is None:
        return None
    return {
        "id": position.pk,
        "name": position.name,
        "difficulty": position.difficulty,
        "bonusPointsPerWeek": position.bonus_points_per_week,
        "description": position.description,
    }


def serialize_personnel(person: Personnel, ladder: RankLadder | None = None) -> dict:
    payload = {
        "id": person.pk,
        "armyId": person.army_id,
        "firstName": person.first_name,
        "lastName": person.last_name,
        "currentRankId": person.current_rank_id,
        "totalPoints": person.total_points,
        "specialPositionId": person.special_position_id,
        "isActive": person.is_active,
        "joinDate": person.join_date,
        "createdAt": person.created_at,
        "updatedAt": person.updated_at,
        "currentRank": serialize_rank(person.current_rank),
        "specialPosition": serialize_special_position(person.special_position),
    }
    if ladder is not None:
        level = person.current_rank.level
        next_rank = ladder.next_rank(level)
        payload.update(
            {
                "nextRank": serialize_rank(next_rank) if next_rank else None,
                "eligibleForPromotion": ladder.is_eligible(person.total_points, level),
                "pointsToNextRank": ladder.points_to_next(person.total_points, level),
                "progressToNextRank": ladder.progress_to_next(person.total_points, level),
            }
        )
    return payload


def serialize_point_entry(entry: PointEntry) -> dict:
    return {
        "id": entry.pk,
        "personnelId": entry.personnel_id,
        "weekStart": entry.week_start,
        "activityPoints": entry.activity_points,
        "specialPositionPoints": entry.special_position_points,
        "totalWeekPoints": entry.total_week_points,
        "notes": entry.notes,
        "enteredBy": entry.entered_by,
        "createdAt": entry.created_at,
    }


def serialize_promotion(promotion: Promotion) -> dict:
    return {
        "id": promotion.pk,
        "personnelId": promotion.personnel_id,
        "fromRankId": promotion.from_rank_id,
        "toRankId": promotion.to_rank_id,
        "pointsAtPromotion": promotion.points_at_promotion,
        "promotedBy": promotion.promoted_by,
        "promotionDate": promotion.promotion_date,
        "notes": promotion.notes,
    }


def serialize_dashboard_stats(stats: DashboardStats) -> dict:
    return {
        "totalPersonnel": stats.total_personnel,
        "activeMembers": stats.active_members,
        "promotionsThisWeek": stats.promotions_this_week,
        "averagePoints": stats.average_points,
    }
