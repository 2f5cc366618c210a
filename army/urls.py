from django.urls import path

from .views import (
    csrf_token,
    current_user,
    dashboard_rank_distribution,
    dashboard_stats_view,
    login_view,
    logout_view,
    personnel_collection,
    personnel_detail,
    point_entries,
    promotion_candidates,
    promotions,
    ranks,
    setup,
    special_positions,
)

urlpatterns = [
    path("csrf", csrf_token, name="csrf_token"),
    path("login", login_view, name="login"),
    path("logout", logout_view, name="logout"),
    path("user", current_user, name="current_user"),
    path("setup", setup, name="setup"),
    path("personnel", personnel_collection, name="personnel"),
    path("personnel/<int:personnel_id>", personnel_detail, name="personnel_detail"),
    path("point-entries", point_entries, name="point_entries"),
    path("promotions", promotions, name="promotions"),
    path("promotions/eligible", promotion_candidates, name="promotion_candidates"),
    path("ranks", ranks, name="ranks"),
    path("special-positions", special_positions, name="special_positions"),
    path("dashboard/stats", dashboard_stats_view, name="dashboard_stats"),
    path("dashboard/rank-distribution", dashboard_rank_distribution, name="dashboard_rank_distribution"),
]
