"""Rank ladder arithmetic.

Works on any objects exposing ``level`` and ``points_required`` so it can be
used with ``Rank`` rows as well as plain seed rows.
"""
from typing import Iterable, Optional, Protocol


class RankLike(Protocol):
    level: int
    points_required: int


class RankLadder:
    def __init__(self, ranks: Iterable[RankLike]) -> None:
        self.ranks = sorted(ranks, key=lambda rank: rank.level)

    def rank_at(self, level: int) -> Optional[RankLike]:
        for rank in self.ranks:
            if rank.level == level:
                return rank
        return None

    def previous_rank(self, level: int) -> Optional[RankLike]:
        lower = [rank for rank in self.ranks if rank.level < level]
        return lower[-1] if lower else None

    def next_rank(self, level: int) -> Optional[RankLike]:
        for rank in self.ranks:
            if rank.level > level:
                return rank
        return None

    def is_eligible(self, total_points: int, level: int) -> bool:
        """A person at ``level`` may move up once they hold the next rank's threshold."""
        target = self.next_rank(level)
        if target is None:
            return False
        return total_points >= target.points_required

    def points_to_next(self, total_points: int, level: int) -> int:
        target = self.next_rank(level)
        if target is None:
            return 0
        return max(target.points_required - total_points, 0)

    def progress_to_next(self, total_points: int, level: int) -> int:
        """Percentage of the way from the current threshold to the next one."""
        target = self.next_rank(level)
        if target is None:
            return 100
        current = self.rank_at(level)
        floor = current.points_required if current else 0
        span = target.points_required - floor
        if span <= 0:
            return 100
        earned = max(total_points - floor, 0)
        return min(100, earned * 100 // span)

    def delta_for(self, level: int, points_required: int) -> int:
        previous = self.previous_rank(level)
        if previous is None:
            return 0
        return points_required - previous.points_required

    def fits(self, level: int, points_required: int) -> bool:
        """Whether a rank at ``level`` keeps thresholds non-decreasing."""
        previous = self.previous_rank(level)
        following = self.next_rank(level)
        if previous is not None and points_required < previous.points_required:
            return False
        if following is not None and points_required > following.points_required:
            return False
        return True
