from django.core.management.base import BaseCommand
from inventory.models import Shipment
from inventory.services import reconcile_shipment_status


class Command(BaseCommand):
    help = "Mark pending shipments as received when none of their units is still pending."

    def handle(self, *args, **options):
        flipped = 0
        for shipment_id in Shipment.objects.filter(status=Shipment.STATUS_PENDING).values_list("id", flat=True):
            if reconcile_shipment_status(shipment_id) == Shipment.STATUS_RECEIVED:
                flipped += 1
        self.stdout.write(self.style.SUCCESS(f"Shipments reconciled: {flipped}"))
