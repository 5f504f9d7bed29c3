from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from catalog.models import Product, ProductType, Supplier

SUPPLIERS = [
    {
        "name": "PackRight B.V.",
        "email": "orders@packright.nl",
        "cc_emails": ["sales@packright.nl"],
        "article_group": Supplier.ArticleGroup.PACKAGING,
        "language": "nl",
    },
    {
        "name": "LabelPro International",
        "email": "info@labelpro.com",
        "cc_emails": [],
        "article_group": Supplier.ArticleGroup.LABELS,
        "language": "en",
    },
    {
        "name": "TapeMasters GmbH",
        "email": "bestellungen@tapemasters.de",
        "cc_emails": [],
        "article_group": Supplier.ArticleGroup.TAPE,
        "language": "de",
    },
    {
        "name": "Euro Pallets Co.",
        "email": "orders@europallets.eu",
        "cc_emails": ["logistics@europallets.eu"],
        "article_group": Supplier.ArticleGroup.PALLETS,
        "language": "en",
    },
]

PRODUCT_TYPES = ["Label", "Sleeve", "Box", "Tape", "Pallet wrap", "Other"]

# (article code, name, supplier, product type, units per box, units per pallet, price per unit)
PRODUCTS = [
    ("PKG-001", "Cardboard Box 40x30x20", "PackRight B.V.", "Box", 50, 600, "1.25"),
    ("PKG-002", "Cardboard Box 60x40x30", "PackRight B.V.", "Box", 25, 300, "2.50"),
    ("PKG-003", "Bubble Wrap Roll 100m", "PackRight B.V.", "Pallet wrap", 4, None, "15.00"),
    ("LBL-001", "Shipping Label A6", "LabelPro International", "Label", 1000, 20000, "0.03"),
    ("LBL-002", "Product Label 50x30mm", "LabelPro International", "Label", 5000, None, "0.02"),
    ("LBL-003", "Fragile Sticker", "LabelPro International", "Label", 500, None, "0.05"),
    ("TPE-001", "Packing Tape 50mm x 66m", "TapeMasters GmbH", "Tape", 36, 1440, "1.80"),
    ("TPE-002", 'Printed Tape "FRAGILE"', "TapeMasters GmbH", "Tape", 36, None, "2.50"),
    ("PLT-001", "Euro Pallet 120x80cm", "Euro Pallets Co.", None, None, 1, "12.00"),
    ("PLT-002", "Quarter Pallet 60x40cm", "Euro Pallets Co.", None, None, 1, "6.50"),
]


class Command(BaseCommand):
    help = "Seed demo users, suppliers, product types and products for local development."

    @transaction.atomic
    def handle(self, *args, **options):
        User = get_user_model()

        admin_user, admin_created = User.objects.get_or_create(
            username="admin@example.com",
            defaults={
                "email": "admin@example.com",
                "first_name": "Admin",
                "last_name": "User",
                "role": User.Role.ADMIN,
                "is_staff": True,
                "is_superuser": True,
                "is_active": True,
            },
        )
        if admin_created:
            admin_user.set_password("admin1234")
            admin_user.save(update_fields=["password"])

        employee_user, employee_created = User.objects.get_or_create(
            username="employee@example.com",
            defaults={
                "email": "employee@example.com",
                "first_name": "Jane",
                "last_name": "Smith",
                "role": User.Role.USER,
                "is_active": True,
            },
        )
        if employee_created:
            employee_user.set_password("employee1234")
            employee_user.save(update_fields=["password"])

        suppliers = {}
        for data in SUPPLIERS:
            defaults = {key: value for key, value in data.items() if key != "name"}
            suppliers[data["name"]], _ = Supplier.objects.get_or_create(name=data["name"], defaults=defaults)

        product_types = {}
        for name in PRODUCT_TYPES:
            product_types[name], _ = ProductType.objects.get_or_create(name=name)

        for article_code, name, supplier_name, type_name, per_box, per_pallet, price in PRODUCTS:
            Product.objects.get_or_create(
                article_code=article_code,
                defaults={
                    "name": name,
                    "supplier": suppliers[supplier_name],
                    "product_type": product_types.get(type_name),
                    "units_per_box": per_box,
                    "units_per_pallet": per_pallet,
                    "price_per_unit": Decimal(price),
                },
            )

        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully."))
        self.stdout.write("Credentials: admin@example.com/admin1234, employee@example.com/employee1234")
        self.stdout.write(f"Suppliers: {len(suppliers)} | Product types: {len(product_types)} | Products: {len(PRODUCTS)}")
