from django.core.management.base import BaseCommand

from assessments.services.attempts import close_overdue_attempts


class Command(BaseCommand):
    help = 'Submits every in-progress attempt whose time limit has run out'

    def handle(self, *args, **options):
        closed = close_overdue_attempts()
        if not closed:
            self.stdout.write("No overdue attempts.")
            return
        self.stdout.write(self.style.SUCCESS(f"Submitted {len(closed)} overdue attempt(s): {', '.join(map(str, closed))}"))
