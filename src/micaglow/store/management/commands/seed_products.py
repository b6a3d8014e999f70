"""Management command to seed the peptide catalog."""

from decimal import Decimal

from django.core.management.base import BaseCommand

from micaglow.store.models import Product


def _product(name, description, category, per_vial, per_box, concentration, volume=None):
    specifications = {"concentration": concentration, "vials_per_kit": 10}
    if volume:
        specifications["volume_per_vial"] = volume
    return {
        "name": name,
        "description": description,
        "category": category,
        "price_per_vial": Decimal(per_vial),
        "price_per_box": Decimal(per_box),
        "vials_per_box": 10,
        "specifications": specifications,
    }


PRODUCTS = [
    _product("Bacteriostatic Water (Benzyl Alcohol 0.9%)", "3 ml/vial, 10 vials/kit", "Bacteriostatic Water",
             "172.50", "1725.00", "0.9%", volume="3ml"),
    _product("Bacteriostatic Water (Benzyl Alcohol 0.9%)", "10 ml/vial, 10 vials/kit", "Bacteriostatic Water",
             "201.25", "2012.50", "0.9%", volume="10ml"),
    _product("Semaglutide", "2 mg/vial, 10 vials/kit", "Semaglutide", "465.75", "4657.50", "2mg"),
    _product("Semaglutide", "5 mg/vial, 10 vials/kit", "Semaglutide", "477.25", "4772.50", "5mg"),
    _product("Semaglutide", "10 mg/vial, 10 vials/kit", "Semaglutide", "523.25", "5232.50", "10mg"),
    _product("Semaglutide", "15 mg/vial, 10 vials/kit", "Semaglutide", "603.75", "6037.50", "15mg"),
    _product("Semaglutide", "20 mg/vial, 10 vials/kit", "Semaglutide", "707.25", "7072.50", "20mg"),
    _product("Tirzepatide", "5 mg/vial, 10 vials/kit", "Tirzepatide", "488.75", "4887.50", "5mg"),
    _product("Tirzepatide", "10 mg/vial, 10 vials/kit", "Tirzepatide", "575.00", "5750.00", "10mg"),
    _product("Tirzepatide", "15 mg/vial, 10 vials/kit", "Tirzepatide", "730.25", "7302.50", "15mg"),
    _product("Tirzepatide", "20 mg/vial, 10 vials/kit", "Tirzepatide", "805.00", "8050.00", "20mg"),
    _product("Tirzepatide", "30 mg/vial, 10 vials/kit", "Tirzepatide", "937.25", "9372.50", "30mg"),
    _product("Tirzepatide", "40 mg/vial, 10 vials/kit", "Tirzepatide", "1035.00", "10350.00", "40mg"),
    _product("Retatrutide", "5 mg/vial, 10 vials/kit", "Retatrutide", "575.00", "5750.00", "5mg"),
    _product("Retatrutide", "10 mg/vial, 10 vials/kit", "Retatrutide", "862.50", "8625.00", "10mg"),
    _product("Retatrutide", "15 mg/vial, 10 vials/kit", "Retatrutide", "1035.00", "10350.00", "15mg"),
    _product("Retatrutide", "20 mg/vial, 10 vials/kit", "Retatrutide", "1150.00", "11500.00", "20mg"),
    _product("MOTS-c", "10 mg/vial, 10 vials/kit", "MOTS-c", "1380.00", "13800.00", "10mg"),
    _product("Ipamorelin", "5 mg/vial, 10 vials/kit", "Ipamorelin", "345.00", "3450.00", "5mg"),
    _product("BPC-157", "5 mg/vial, 10 vials/kit", "BPC-157", "345.00", "3450.00", "5mg"),
    _product("BPC-157", "10 mg/vial, 10 vials/kit", "BPC-157", "500.25", "5002.50", "10mg"),
    _product("TB-500", "5 mg/vial, 10 vials/kit", "TB-500", "534.75", "5347.50", "5mg"),
    _product("TB-500", "10 mg/vial, 10 vials/kit", "TB-500", "862.50", "8625.00", "10mg"),
    _product("HCG", "5000 iu, 10 vials/kit", "HCG", "632.50", "6325.00", "5000iu"),
    _product("HCG", "10000 iu, 10 vials/kit", "HCG", "862.50", "8625.00", "10000iu"),
    _product("NAD+", "100 mg/vial, 10 vials/kit", "NAD+", "373.75", "3737.50", "100mg"),
    _product("NAD+", "500 mg/vial, 10 vials/kit", "NAD+", "603.75", "6037.50", "500mg"),
    _product("HGH 191AA (Somatropin)", "10 iu, 10 vials/kit", "HGH", "460.00", "4600.00", "10iu"),
    _product("HGH 191AA (Somatropin)", "15 iu, 10 vials/kit", "HGH", "575.00", "5750.00", "15iu"),
]


class Command(BaseCommand):
    help = "Seed the product catalog"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite prices and details of products that already exist",
        )

    def handle(self, *args, **options):
        created = updated = skipped = 0

        self.stdout.write("\nSeeding products...")
        for data in PRODUCTS:
            label = f"{data['name']} ({data['description']})"
            existing = Product.objects.filter(name=data["name"], description=data["description"]).first()

            if existing is None:
                Product.objects.create(**data)
                created += 1
                self.stdout.write(self.style.SUCCESS(f"  Created: {label}"))
                continue

            if not options["force"]:
                skipped += 1
                self.stdout.write(f"  Skipping existing product: {label}")
                continue

            for field, value in data.items():
                setattr(existing, field, value)
            existing.save()
            updated += 1
            self.stdout.write(f"  Updated: {label}")

        self.stdout.write(self.style.SUCCESS(
            f"\nDone: {created} created, {updated} updated, {skipped} skipped."
        ))
