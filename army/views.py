import logging
from datetime import date

from django.contrib.auth import logout
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.middleware.csrf import get_token
from django.views.decorators.csrf import ensure_csrf_cookie

from .decorators import api_view, json_body
from .forms import (
    BootstrapForm,
    LoginForm,
    PersonnelForm,
    PersonnelUpdateForm,
    PointEntryForm,
    PromotionForm,
    RankForm,
    SpecialPositionForm,
    form_data,
    form_errors,
)
from .models import Rank, SpecialPosition
from .serializers import (
    serialize_dashboard_stats,
    serialize_personnel,
    serialize_point_entry,
    serialize_promotion,
    serialize_rank,
    serialize_special_position,
    serialize_user,
)
from .services import (
    ValidationError,
    bootstrap,
    create_personnel,
    create_rank,
    create_special_position,
    dashboard_stats,
    eligible_personnel,
    get_personnel,
    get_rank_ladder,
    list_personnel,
    list_point_entries,
    list_promotions,
    login_admin,
    promote,
    rank_distribution,
    submit_point_entry,
    update_personnel,
)

logger = logging.getLogger(__name__)


def _validated(form_class, request: HttpRequest):
    form = form_class(form_data(json_body(request)))
    if not form.is_valid():
        raise ValidationError("Invalid data", form_errors(form))
    return form


def _int_param(request: HttpRequest, name: str) -> int | None:
    raw = (request.GET.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError("Invalid data", {name: ["Enter a whole number."]}) from exc


def _date_param(request: HttpRequest, name: str) -> date | None:
    raw = (request.GET.get(name) or "").strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError("Invalid data", {name: ["Enter a valid date."]}) from exc


def _bool_param(request: HttpRequest, name: str) -> bool | None:
    raw = (request.GET.get(name) or "").strip().lower()
    if not raw:
        return None
    if raw in ("1", "true", "yes"):
        return True
    if raw in ("0", "false", "no"):
        return False
    raise ValidationError("Invalid data", {name: ["Enter true or false."]})


@ensure_csrf_cookie
@api_view(["GET"], login_required=False)
def csrf_token(request: HttpRequest) -> HttpResponse:
    return JsonResponse({"csrfToken": get_token(request)})


def csrf_failure(request: HttpRequest, reason: str = "") -> HttpResponse:
    logger.warning("CSRF check failed for %s %s: %s", request.method, request.path, reason)
    return JsonResponse({"message": "CSRF verification failed", "code": "csrf_failed"}, status=403)


@api_view(["POST"], login_required=False)
def login_view(request: HttpRequest) -> HttpResponse:
    form = _validated(LoginForm, request)
    user = login_admin(request, form.cleaned_data["username"], form.cleaned_data["password"])
    return JsonResponse({"user": serialize_user(user), "message": "Login successful"})


@api_view(["POST"])
def logout_view(request: HttpRequest) -> HttpResponse:
    logout(request)
    return JsonResponse({"message": "Logout successful"})


@api_view(["GET"])
def current_user(request: HttpRequest) -> HttpResponse:
    return JsonResponse(serialize_user(request.user))


@api_view(["POST"], login_required=False)
def setup(request: HttpRequest) -> HttpResponse:
    form = _validated(BootstrapForm, request)
    result = bootstrap(**form.cleaned_data)
    return JsonResponse(
        {
            "user": serialize_user(result.user),
            "ranksCreated": result.ranks_created,
            "specialPositionsCreated": result.special_positions_created,
            "message": "Database initialized successfully",
        },
        status=201,
    )


@api_view(["GET", "POST"])
def personnel_collection(request: HttpRequest) -> HttpResponse:
    if request.method == "POST":
        form = _validated(PersonnelForm, request)
        person = create_personnel(**form.cleaned_data)
        person = get_personnel(person.pk)
        return JsonResponse(serialize_personnel(person, get_rank_ladder()), status=201)

    ladder = get_rank_ladder()
    people = list_personnel(active=_bool_param(request, "active"), army_id=request.GET.get("armyId"))
    return JsonResponse([serialize_personnel(person, ladder) for person in people], safe=False)


@api_view(["GET", "PATCH"])
def personnel_detail(request: HttpRequest, personnel_id: int) -> HttpResponse:
    if request.method == "PATCH":
        form = _validated(PersonnelUpdateForm, request)
        person = update_personnel(personnel_id, **form.changes())
        return JsonResponse(serialize_personnel(person, get_rank_ladder()))

    person = get_personnel(personnel_id)
    payload = serialize_personnel(person, get_rank_ladder())
    payload["pointEntries"] = [serialize_point_entry(entry) for entry in list_point_entries(personnel_id=person.pk)]
    payload["promotions"] = [serialize_promotion(promotion) for promotion in list_promotions(personnel_id=person.pk)]
    return JsonResponse(payload)


@api_view(["GET", "POST"])
def point_entries(request: HttpRequest) -> HttpResponse:
    if request.method == "POST":
        form = _validated(PointEntryForm, request)
        entry = submit_point_entry(
            personnel_id=form.cleaned_data["personnel_id"],
            week_start=form.cleaned_data["week_start"],
            activity_points=form.cleaned_data["activity_points"],
            notes=form.cleaned_data["notes"],
            entered_by=request.user.get_username(),
        )
        return JsonResponse(serialize_point_entry(entry), status=201)

    entries = list_point_entries(
        personnel_id=_int_param(request, "personnelId"),
        week_start=_date_param(request, "weekStart"),
    )
    return JsonResponse([serialize_point_entry(entry) for entry in entries], safe=False)


@api_view(["GET", "POST"])
def promotions(request: HttpRequest) -> HttpResponse:
    if request.method == "POST":
        form = _validated(PromotionForm, request)
        promotion = promote(
            personnel_id=form.cleaned_data["personnel_id"],
            to_rank_id=form.cleaned_data["to_rank_id"],
            promoted_by=request.user.get_username(),
            notes=form.cleaned_data["notes"],
        )
        return JsonResponse(serialize_promotion(promotion), status=201)

    history = list_promotions(personnel_id=_int_param(request, "personnelId"))
    return JsonResponse([serialize_promotion(promotion) for promotion in history], safe=False)


@api_view(["GET"])
def promotion_candidates(request: HttpRequest) -> HttpResponse:
    ladder = get_rank_ladder()
    payload = [
        {"personnel": serialize_personnel(person, ladder), "toRank": serialize_rank(next_rank)}
        for person, next_rank in eligible_personnel()
    ]
    return JsonResponse(payload, safe=False)


@api_view(["GET", "POST"])
def ranks(request: HttpRequest) -> HttpResponse:
    if request.method == "POST":
        form = _validated(RankForm, request)
        rank = create_rank(**form.cleaned_data)
        return JsonResponse(serialize_rank(rank), status=201)

    return JsonResponse([serialize_rank(rank) for rank in Rank.objects.order_by("level")], safe=False)


@api_view(["GET", "POST"])
def special_positions(request: HttpRequest) -> HttpResponse:
    if request.method == "POST":
        form = _validated(SpecialPositionForm, request)
        position = create_special_position(**form.cleaned_data)
        return JsonResponse(serialize_special_position(position), status=201)

    positions = SpecialPosition.objects.order_by("name")
    return JsonResponse([serialize_special_position(position) for position in positions], safe=False)


@api_view(["GET"])
def dashboard_stats_view(request: HttpRequest) -> HttpResponse:
    return JsonResponse(serialize_dashboard_stats(dashboard_stats()))


@api_view(["GET"])
def dashboard_rank_distribution(request: HttpRequest) -> HttpResponse:
    payload = [{"rank": serialize_rank(rank), "count": rank.holder_count} for rank in rank_distribution()]
    return JsonResponse(payload, safe=False)
