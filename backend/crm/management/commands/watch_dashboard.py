"""
Terminal dashboard — polls the CRM API and prints the lead table and summary
metrics.

Usage:
    python manage.py watch_dashboard
    python manage.py watch_dashboard --once
    python manage.py watch_dashboard --token internal_user_<uuid> --interval 10
    python manage.py watch_dashboard --record-payment <lead_id> 25000
    python manage.py watch_dashboard --attach-code <lead_id> CRYPT-ABC123 --once

Writes run before polling starts and re-poll on success. With --once a failed
write exits with an error; otherwise polling carries on and the failure stays
on screen.

Reads DASHBOARD_API_URL / DASHBOARD_API_TOKEN / DASHBOARD_POLL_SECONDS from
settings unless overridden on the command line.
"""
import time

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from crm.dashboard.client import ApiClient
from crm.dashboard.view import DashboardView


class Command(BaseCommand):
    help = "Poll the CRM API and render the internal dashboard in the terminal"

    def add_arguments(self, parser):
        parser.add_argument("--url", default=settings.DASHBOARD_API_URL)
        parser.add_argument("--token", default=settings.DASHBOARD_API_TOKEN)
        parser.add_argument("--interval", type=int, default=settings.DASHBOARD_POLL_SECONDS)
        parser.add_argument("--once", action="store_true", help="Render once and exit")
        parser.add_argument(
            "--record-payment", nargs=2, metavar=("LEAD_ID", "AMOUNT"),
            help="Record a client payment against a lead",
        )
        parser.add_argument(
            "--attach-code", nargs=2, metavar=("LEAD_ID", "CODE"),
            help="Record a partner referral code on a lead",
        )

    def handle(self, *args, **options):
        if not options["token"]:
            raise CommandError("An internal user token is required (DASHBOARD_API_TOKEN or --token)")

        view = DashboardView(ApiClient(options["url"], options["token"]), write=self.stdout.write)
        if not view.authenticate():
            raise CommandError(view.error)

        writes = []
        if options["record_payment"]:
            writes.append(view.record_payment(*options["record_payment"]))
        if options["attach_code"]:
            writes.append(view.attach_referral_code(*options["attach_code"]))

        if options["once"]:
            if not all(writes):
                raise CommandError(view.error)
            if not writes:
                view.refresh()
            return

        interval = max(options["interval"], 1)
        # A successful write has just re-polled
        polled = any(writes)
        try:
            while True:
                if not polled:
                    view.refresh()
                polled = False
                time.sleep(interval)
        except KeyboardInterrupt:
            self.stdout.write(self.style.SUCCESS("Stopped dashboard"))
