from django.core.management.base import BaseCommand
from shopify_sync.inventory import sync_inventory_for_products
from shopify_sync.models import ShopifyProductMapping


class Command(BaseCommand):
    help = "Push current warehouse availability to Shopify for mapped products."

    def add_arguments(self, parser):
        parser.add_argument("--product", type=int, action="append", dest="product_ids", help="Product id (repeatable)")

    def handle(self, *args, **options):
        product_ids = options.get("product_ids") or list(
            ShopifyProductMapping.objects.order_by("product_id").values_list("product_id", flat=True)
        )
        results = sync_inventory_for_products(product_ids)
        counts = {}
        for result in results:
            counts[result["status"]] = counts.get(result["status"], 0) + 1
            if result["status"] == "error":
                self.stderr.write(f"product {result['product_id']}: {result['message']}")
        summary = ", ".join(f"{status}={count}" for status, count in sorted(counts.items())) or "nothing to sync"
        self.stdout.write(self.style.SUCCESS(f"Shopify inventory sync: {summary}"))
