from django.core.management.base import BaseCommand
from warranty.services import expire_warranties


class Command(BaseCommand):
    help = "Mark active warranties whose term has ended as expired."

    def handle(self, *args, **options):
        count = expire_warranties()
        self.stdout.write(self.style.SUCCESS(f"Expired {count} warranties"))
