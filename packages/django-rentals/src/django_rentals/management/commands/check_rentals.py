"""Management command to audit rental counters and per-day capacity."""

from django.core.management.base import BaseCommand

from django_rentals.integrity import verify_all


class Command(BaseCommand):
    help = "Report equipment whose counters or open reservations break capacity invariants"

    def add_arguments(self, parser):
        parser.add_argument(
            "--equipment",
            type=int,
            action="append",
            help="Check only this equipment id (repeatable)",
        )
        parser.add_argument(
            "--detailed",
            action="store_true",
            help="Show detailed output for each check",
        )

    def handle(self, *args, **options):
        detailed = options.get("detailed", False)

        self.stdout.write(self.style.NOTICE("\n" + "=" * 70))
        self.stdout.write(self.style.NOTICE("Rentals - Integrity Check"))
        self.stdout.write(self.style.NOTICE("=" * 70 + "\n"))

        total_pass = 0
        total_fail = 0
        total_skip = 0
        failures = []

        for check_name, passed, detail in verify_all(options.get("equipment")):
            if passed is True:
                total_pass += 1
                status = self.style.SUCCESS("PASS")
            elif passed is False:
                total_fail += 1
                status = self.style.ERROR("FAIL")
                failures.append((check_name, detail))
            else:
                total_skip += 1
                status = self.style.WARNING("SKIP")

            self.stdout.write(f"  {status} {check_name}")
            if detailed and detail:
                self.stdout.write(f"       {detail}")

        self.stdout.write("\n" + "=" * 70)
        self.stdout.write(f"\n  {self.style.SUCCESS('PASS')}: {total_pass}")
        self.stdout.write(f"  {self.style.ERROR('FAIL')}: {total_fail}")
        self.stdout.write(f"  {self.style.WARNING('SKIP')}: {total_skip}\n")

        if total_fail == 0:
            self.stdout.write(self.style.SUCCESS("All rental checks passed!"))
            return

        self.stdout.write(self.style.ERROR(f"{total_fail} check(s) failed!"))
        for check_name, detail in failures:
            self.stdout.write(self.style.ERROR(f"  - {check_name}: {detail}"))

        raise SystemExit(1)
