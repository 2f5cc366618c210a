import json
from unittest import mock

from django.test import Client, TestCase
from django.urls import reverse

from army.models import AdminUser, Personnel, PointEntry, Promotion, Rank, SpecialPosition
from army.services import seed_ranks, seed_special_positions


class ApiTestCase(TestCase):
    def setUp(self) -> None:
        seed_ranks()
        seed_special_positions()
        self.admin = AdminUser.objects.create_user(username="admin", password="pass-word-1")
        self.feldwebel = Rank.objects.get(level=8)
        self.oberfeldwebel = Rank.objects.get(level=9)
        self.medic = SpecialPosition.objects.get(name="Field Medic")

    def post_json(self, name: str, payload: dict, **kwargs):
        return self.client.post(reverse(name, kwargs=kwargs or None), data=json.dumps(payload), content_type="application/json")


class AuthenticationApiTests(ApiTestCase):
    def test_login_success_sets_session(self) -> None:
        response = self.post_json("login", {"username": "admin", "password": "pass-word-1"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["username"], "admin")
        self.assertNotIn("password", response.json()["user"])

        response = self.client.get(reverse("current_user"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], self.admin.pk)
        self.admin.refresh_from_db()
        self.assertIsNotNone(self.admin.last_login)

    def test_login_failures_are_indistinguishable(self) -> None:
        AdminUser.objects.create_user(username="retired", password="pass-word-1", is_active=False)
        wrong_password = self.post_json("login", {"username": "admin", "password": "nope"})
        unknown_user = self.post_json("login", {"username": "ghost", "password": "pass-word-1"})
        inactive_user = self.post_json("login", {"username": "retired", "password": "pass-word-1"})

        for response in (wrong_password, unknown_user, inactive_user):
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.json()["message"], "Invalid username or password")
        self.assertEqual(wrong_password.json(), unknown_user.json())
        self.assertEqual(unknown_user.json(), inactive_user.json())

    def test_routes_require_session(self) -> None:
        for name in (
            "current_user",
            "personnel",
            "point_entries",
            "promotions",
            "promotion_candidates",
            "ranks",
            "special_positions",
            "dashboard_stats",
            "dashboard_rank_distribution",
        ):
            response = self.client.get(reverse(name))
            self.assertEqual(response.status_code, 401, name)
            self.assertEqual(response.json()["message"], "Authentication required")

    def test_logout_ends_session(self) -> None:
        self.client.force_login(self.admin)
        response = self.client.post(reverse("logout"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get(reverse("current_user")).status_code, 401)

    def test_csrf_route_is_public(self) -> None:
        response = self.client.get(reverse("csrf_token"))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["csrfToken"])

    def test_csrf_failure_is_json(self) -> None:
        client = Client(enforce_csrf_checks=True)
        response = client.post(
            reverse("login"),
            data=json.dumps({"username": "admin", "password": "pass-word-1"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response["Content-Type"], "application/json")
        self.assertEqual(response.json(), {"message": "CSRF verification failed", "code": "csrf_failed"})


class BootstrapApiTests(TestCase):
    def test_setup_runs_once(self) -> None:
        payload = json.dumps({"username": "chief", "password": "long-enough-pass"})
        first = self.client.post(reverse("setup"), data=payload, content_type="application/json")
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json()["ranksCreated"], 14)
        self.assertEqual(first.json()["specialPositionsCreated"], 7)

        second = self.client.post(reverse("setup"), data=payload, content_type="application/json")
        self.assertEqual(second.status_code, 409)
        self.assertEqual(second.json()["code"], "conflict")
        self.assertEqual(second.json()["message"], "Admin user already exists")
        self.assertEqual(AdminUser.objects.count(), 1)
        self.assertEqual(Rank.objects.count(), 14)
        self.assertEqual(SpecialPosition.objects.count(), 7)

    def test_setup_validates_input(self) -> None:
        response = self.client.post(
            reverse("setup"), data=json.dumps({"username": "chief", "password": "short"}), content_type="application/json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.json()["details"])
        self.assertFalse(AdminUser.objects.exists())


class PersonnelApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.force_login(self.admin)

    def test_create_and_list_personnel(self) -> None:
        response = self.post_json(
            "personnel",
            {
                "armyId": "#A247",
                "firstName": "Max",
                "lastName": "Mueller",
                "currentRankId": self.feldwebel.pk,
                "specialPositionId": self.medic.pk,
                "joinDate": "2024-01-15",
            },
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["totalPoints"], 0)
        self.assertEqual(body["currentRank"]["name"], "Feldwebel")
        self.assertEqual(body["specialPosition"]["bonusPointsPerWeek"], 5)
        self.assertEqual(body["nextRank"]["level"], 9)
        self.assertFalse(body["eligibleForPromotion"])
        self.assertEqual(body["pointsToNextRank"], 1500)

        listing = self.client.get(reverse("personnel")).json()
        self.assertEqual([row["armyId"] for row in listing], ["#A247"])

    def test_create_personnel_validation(self) -> None:
        response = self.post_json("personnel", {"armyId": "#A1", "firstName": "Max"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("lastName", response.json()["details"])
        self.assertIn("currentRankId", response.json()["details"])

    def test_create_personnel_unknown_rank(self) -> None:
        response = self.post_json(
            "personnel", {"armyId": "#A1", "firstName": "Max", "lastName": "Mueller", "currentRankId": 9999}
        )
        self.assertEqual(response.status_code, 404)

    def test_invalid_json_body(self) -> None:
        response = self.client.post(reverse("personnel"), data="{not json", content_type="application/json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid JSON body")

    def test_detail_and_patch(self) -> None:
        person = Personnel.objects.create(army_id="#A1", first_name="Max", last_name="Mueller", current_rank=self.feldwebel)
        response = self.client.patch(
            reverse("personnel_detail", kwargs={"personnel_id": person.pk}),
            data=json.dumps({"isActive": False, "totalPoints": 9000}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["isActive"])
        self.assertEqual(response.json()["totalPoints"], 0)

        detail = self.client.get(reverse("personnel_detail", kwargs={"personnel_id": person.pk}))
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.json()["pointEntries"], [])
        self.assertEqual(detail.json()["promotions"], [])

        missing = self.client.get(reverse("personnel_detail", kwargs={"personnel_id": 9999}))
        self.assertEqual(missing.status_code, 404)

    def test_patch_rejects_non_boolean_active_flag(self) -> None:
        person = Personnel.objects.create(army_id="#A1", first_name="Max", last_name="Mueller", current_rank=self.feldwebel)
        for value in (None, "maybe"):
            response = self.client.patch(
                reverse("personnel_detail", kwargs={"personnel_id": person.pk}),
                data=json.dumps({"isActive": value}),
                content_type="application/json",
            )
            self.assertEqual(response.status_code, 400)
            self.assertIn("isActive", response.json()["details"])
        person.refresh_from_db()
        self.assertTrue(person.is_active)

    def test_create_rejects_null_active_flag(self) -> None:
        response = self.post_json(
            "personnel",
            {"armyId": "#A9", "firstName": "Max", "lastName": "Mueller", "currentRankId": self.feldwebel.pk, "isActive": None},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("isActive", response.json()["details"])
        self.assertFalse(Personnel.objects.filter(army_id="#A9").exists())

    def test_active_filter(self) -> None:
        Personnel.objects.create(army_id="#A1", first_name="Max", last_name="Mueller", current_rank=self.feldwebel)
        Personnel.objects.create(
            army_id="#A2", first_name="Anna", last_name="Schmidt", current_rank=self.feldwebel, is_active=False
        )
        active = self.client.get(reverse("personnel"), {"active": "true"}).json()
        self.assertEqual([row["armyId"] for row in active], ["#A1"])


class PointEntryApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.force_login(self.admin)
        self.person = Personnel.objects.create(
            army_id="#A247",
            first_name="Max",
            last_name="Mueller",
            current_rank=self.feldwebel,
            special_position=self.medic,
        )

    def submit(self, week: str, points):
        return self.post_json(
            "point_entries", {"personnelId": self.person.pk, "weekStart": week, "activityPoints": points}
        )

    def test_submit_point_entry(self) -> None:
        response = self.submit("2025-01-13", 28)
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["specialPositionPoints"], 5)
        self.assertEqual(body["totalWeekPoints"], 33)
        self.assertEqual(body["enteredBy"], "admin")
        self.person.refresh_from_db()
        self.assertEqual(self.person.total_points, 33)

    def test_duplicate_week_returns_400(self) -> None:
        self.submit("2025-01-13", 28)
        response = self.submit("2025-01-13", 10)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Points already entered for this week")
        self.assertEqual(PointEntry.objects.count(), 1)
        self.person.refresh_from_db()
        self.assertEqual(self.person.total_points, 33)

    def test_activity_points_range(self) -> None:
        for points in (-1, 36, "abc"):
            response = self.submit("2025-01-13", points)
            self.assertEqual(response.status_code, 400)
            self.assertIn("activityPoints", response.json()["details"])
        self.assertFalse(PointEntry.objects.exists())

    def test_unknown_personnel(self) -> None:
        response = self.post_json("point_entries", {"personnelId": 9999, "weekStart": "2025-01-13", "activityPoints": 3})
        self.assertEqual(response.status_code, 404)

    def test_list_filters(self) -> None:
        self.submit("2025-01-06", 10)
        self.submit("2025-01-13", 20)
        rows = self.client.get(reverse("point_entries"), {"personnelId": self.person.pk}).json()
        self.assertEqual([row["weekStart"] for row in rows], ["2025-01-13", "2025-01-06"])
        rows = self.client.get(reverse("point_entries"), {"weekStart": "2025-01-06"}).json()
        self.assertEqual(len(rows), 1)
        bad = self.client.get(reverse("point_entries"), {"personnelId": "x"})
        self.assertEqual(bad.status_code, 400)


class PromotionApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.force_login(self.admin)
        self.person = Personnel.objects.create(
            army_id="#A247", first_name="Max", last_name="Mueller", current_rank=self.feldwebel, total_points=1583
        )

    def test_promote(self) -> None:
        candidates = self.client.get(reverse("promotion_candidates")).json()
        self.assertEqual(candidates[0]["toRank"]["level"], 9)

        response = self.post_json(
            "promotions", {"personnelId": self.person.pk, "toRankId": self.oberfeldwebel.pk, "notes": "Verdient"}
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["fromRankId"], self.feldwebel.pk)
        self.assertEqual(body["toRankId"], self.oberfeldwebel.pk)
        self.assertEqual(body["pointsAtPromotion"], 1583)
        self.assertEqual(body["promotedBy"], "admin")
        self.person.refresh_from_db()
        self.assertEqual(self.person.current_rank, self.oberfeldwebel)

        history = self.client.get(reverse("promotions"), {"personnelId": self.person.pk}).json()
        self.assertEqual(len(history), 1)
        self.assertEqual(self.client.get(reverse("promotion_candidates")).json(), [])

    def test_promote_unknown_rank(self) -> None:
        response = self.post_json("promotions", {"personnelId": self.person.pk, "toRankId": 9999})
        self.assertEqual(response.status_code, 404)
        self.assertFalse(Promotion.objects.exists())


class ReferenceAndDashboardApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.force_login(self.admin)

    def test_reference_lists(self) -> None:
        ranks = self.client.get(reverse("ranks")).json()
        self.assertEqual([rank["level"] for rank in ranks], list(range(2, 16)))
        positions = self.client.get(reverse("special_positions")).json()
        self.assertEqual(len(positions), 7)

    def test_create_special_position(self) -> None:
        response = self.post_json(
            "special_positions", {"name": "Scharfschütze", "difficulty": "hard", "bonusPointsPerWeek": 10}
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["difficulty"], "hard")

    def test_create_rank_conflicting_level(self) -> None:
        response = self.post_json("ranks", {"level": 8, "name": "Doppelt", "pointsRequired": 1150})
        self.assertEqual(response.status_code, 400)
        self.assertIn("level", response.json()["details"])

    def test_dashboard(self) -> None:
        Personnel.objects.create(army_id="#A1", first_name="A", last_name="A", current_rank=self.feldwebel, total_points=100)
        Personnel.objects.create(
            army_id="#A2", first_name="B", last_name="B", current_rank=self.feldwebel, total_points=0, is_active=False
        )
        stats = self.client.get(reverse("dashboard_stats")).json()
        self.assertEqual(
            stats, {"totalPersonnel": 2, "activeMembers": 1, "promotionsThisWeek": 0, "averagePoints": 100}
        )
        distribution = self.client.get(reverse("dashboard_rank_distribution")).json()
        self.assertEqual(len(distribution), 14)
        self.assertEqual(sum(row["count"] for row in distribution), 2)

    def test_unexpected_errors_are_generic(self) -> None:
        with mock.patch("army.views.dashboard_stats", side_effect=RuntimeError("database exploded")):
            with self.assertLogs("army.decorators", level="ERROR"):
                response = self.client.get(reverse("dashboard_stats"))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Internal server error", "code": "internal_error"})
