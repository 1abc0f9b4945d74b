from django.core.management import call_command
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Seeds the database with demo data (wraps create_demo_tenant)."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--customer",  # Define flag
            type=str,
            default="Acme Ltd",
            help="Name of the demo customer (default: Acme Ltd)",
        )

    def handle(self, *args, **options):
        customer = options["customer"]  # Read argument from add_arguments()

        self.stdout.write(self.style.NOTICE(
            f"Seeding demo data for {customer}..."))
        call_command("create_demo_tenant", customer_name=customer)
        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully!"))
