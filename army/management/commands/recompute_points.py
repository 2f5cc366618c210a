from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from army.models import Personnel
from army.services import recompute_total_points


class Command(BaseCommand):
    help = "Rebuild cached personnel point totals from the weekly point ledger."

    def add_arguments(self, parser):
        parser.add_argument("--army-id", help="Only rebuild the total of this army ID.")

    def handle(self, *args, **options):
        people = Personnel.objects.order_by("pk")
        if options["army_id"]:
            people = people.filter(army_id=options["army_id"])
            if not people.exists():
                raise CommandError(f"No personnel with army ID {options['army_id']}.")

        changed = 0
        for person in people:
            with transaction.atomic():
                person = Personnel.objects.select_for_update().get(pk=person.pk)
                before = person.total_points
                if recompute_total_points(person) != before:
                    changed += 1
                    self.stdout.write(f"{person.army_id}: {before} -> {person.total_points}")
        self.stdout.write(self.style.SUCCESS(f"Recomputed {people.count()} totals, {changed} changed."))
