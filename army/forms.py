import re

from django import forms

from .models import MAX_ACTIVITY_POINTS, MAX_RANK_LEVEL, MIN_RANK_LEVEL, SpecialPosition

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_camel_case(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


def form_data(payload: dict) -> dict:
    return {to_snake_case(key): value for key, value in payload.items()}


def form_errors(form: forms.Form) -> dict:
    return {
        to_camel_case(field) if field != "__all__" else "nonField": [error["message"] for error in errors]
        for field, errors in form.errors.get_json_data().items()
    }


_BOOLEAN_INPUTS = (True, False, "true", "false", "True", "False", "1", "0", 1, 0)


def strict_boolean(form: forms.Form, name: str) -> None:
    """Reject null or free-text flags that BooleanField would read as False."""
    if name in form.data and form.data[name] not in _BOOLEAN_INPUTS:
        form.add_error(name, "Enter true or false.")


class LoginForm(forms.Form):
    username = forms.CharField(max_length=150)
    password = forms.CharField(strip=False)


class BootstrapForm(forms.Form):
    username = forms.CharField(max_length=150)
    password = forms.CharField(min_length=8, strip=False)
    first_name = forms.CharField(max_length=150, required=False)
    last_name = forms.CharField(max_length=150, required=False)
    email = forms.EmailField(required=False)


class PersonnelForm(forms.Form):
    army_id = forms.CharField(max_length=20)
    first_name = forms.CharField(max_length=100)
    last_name = forms.CharField(max_length=100)
    current_rank_id = forms.IntegerField(min_value=1)
    special_position_id = forms.IntegerField(min_value=1, required=False)
    join_date = forms.DateField(required=False)
    is_active = forms.BooleanField(required=False, initial=True)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.is_active_given = "is_active" in self.data

    def clean_is_active(self):
        if not self.is_active_given:
            return True
        return self.cleaned_data["is_active"]

    def clean(self):
        cleaned = super().clean()
        strict_boolean(self, "is_active")
        return cleaned


class PersonnelUpdateForm(forms.Form):
    first_name = forms.CharField(max_length=100, required=False)
    last_name = forms.CharField(max_length=100, required=False)
    special_position_id = forms.IntegerField(min_value=1, required=False)
    is_active = forms.BooleanField(required=False)
    join_date = forms.DateField(required=False)

    def changes(self) -> dict:
        """Only the fields present in the submitted payload."""
        return {name: self.cleaned_data[name] for name in self.fields if name in self.data}

    def clean(self):
        cleaned = super().clean()
        for name in ("first_name", "last_name", "join_date"):
            if name in self.data and not cleaned.get(name):
                self.add_error(name, "This field cannot be blank.")
        strict_boolean(self, "is_active")
        return cleaned


class PointEntryForm(forms.Form):
    personnel_id = forms.IntegerField(min_value=1)
    week_start = forms.DateField()
    activity_points = forms.IntegerField(min_value=0, max_value=MAX_ACTIVITY_POINTS)
    notes = forms.CharField(required=False)


class PromotionForm(forms.Form):
    personnel_id = forms.IntegerField(min_value=1)
    to_rank_id = forms.IntegerField(min_value=1)
    notes = forms.CharField(required=False)


class RankForm(forms.Form):
    level = forms.IntegerField(min_value=MIN_RANK_LEVEL, max_value=MAX_RANK_LEVEL)
    name = forms.CharField(max_length=100)
    points_required = forms.IntegerField(min_value=0)


class SpecialPositionForm(forms.Form):
    name = forms.CharField(max_length=100)
    difficulty = forms.ChoiceField(choices=SpecialPosition.Difficulty.choices)
    bonus_points_per_week = forms.IntegerField(min_value=0)
    description = forms.CharField(required=False)
