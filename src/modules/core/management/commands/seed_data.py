from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.accounts.constants import Role
from modules.accounts.dtos import Caller, RegisterAccountDTO
from modules.accounts.models import Account
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.accounts.services import AccountService
from modules.orders.constants import OrderStatus, PaymentMethod
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, ShippingAddressDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.dtos import CreateProductDTO
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

SEED_PASSWORD = "marketplace123"

FARMERS = [
    ("Kwame Mensah", "kwame@example.com", "+233200000001", "Mensah Farms",
     Decimal("5.614818"), Decimal("-0.186964")),
    ("Ama Owusu", "ama@example.com", "+233200000002", "Savannah Harvest",
     Decimal("7.946500"), Decimal("1.023200")),
]

BUYERS = [
    ("Kofi Boateng", "kofi@example.com", "+233200000011"),
    ("Esi Asante", "esi@example.com", "+233200000012"),
    ("Yaw Darko", "yaw@example.com", "+233200000013"),
]

STAFF = [
    ("Marketplace Admin", "admin@example.com", Role.ADMIN),
    ("Payments Bot", "payments@example.com", Role.PAYMENT_PROCESSOR),
]

CATALOG = [
    ("Organic Cocoa Potash", "Fertilizer", Decimal("35.99"), 120),
    ("Fresh Tomatoes", "Vegetables", Decimal("5.50"), 200),
    ("Maize Seeds", "Seeds", Decimal("12.00"), 500),
    ("African Black Soap", "Body Care", Decimal("9.99"), 80),
    ("Yam Tubers", "Tubers", Decimal("7.25"), 150),
    ("Plantain Bunch", "Fruits", Decimal("4.75"), 90),
]


class Command(BaseCommand):
    help = "Seed database with farmers, buyers, produce and a few orders."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        account_repo = AccountDjangoRepository()
        product_repo = ProductDjangoRepository()
        self._accounts = AccountService(repository=account_repo)
        self._products = ProductService(
            repository=product_repo, account_repository=account_repo
        )
        self._orders = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=product_repo,
            account_repository=account_repo,
        )

        staff = self._seed_staff(account_repo)
        farmers = self._seed_farmers()
        buyers = self._seed_buyers()
        products = self._seed_products(farmers)
        orders_created = self._seed_orders(buyers, products, farmers, staff)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"farmers={len(farmers)}, "
                f"buyers={len(buyers)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_staff(self, account_repo: AccountDjangoRepository) -> list[Account]:
        staff: list[Account] = []
        for name, email, role in STAFF:
            account = account_repo.get_by_email(email)
            if account is None:
                account = account_repo.create_with_user(
                    email=email,
                    password=SEED_PASSWORD,
                    name=name,
                    role=role,
                    contact="+233200000000",
                )
            staff.append(account)
        return staff

    def _seed_farmers(self) -> list[Account]:
        self.stdout.write("Creating farmers...")
        farmers = [
            self._register(
                name=name,
                email=email,
                contact=contact,
                role=Role.FARMER,
                farm_name=farm_name,
                latitude=latitude,
                longitude=longitude,
            )
            for name, email, contact, farm_name, latitude, longitude in FARMERS
        ]
        self.stdout.write(self.style.SUCCESS("Creating farmers... Done!"))
        return farmers

    def _seed_buyers(self) -> list[Account]:
        self.stdout.write("Creating buyers...")
        buyers = [
            self._register(name=name, email=email, contact=contact, role=Role.BUYER)
            for name, email, contact in BUYERS
        ]
        self.stdout.write(self.style.SUCCESS("Creating buyers... Done!"))
        return buyers

    def _register(self, **fields) -> Account:
        existing = Account.objects.filter(email=fields["email"]).first()
        if existing:
            return existing
        return self._accounts.register(
            RegisterAccountDTO(password=SEED_PASSWORD, **fields)
        )

    def _seed_products(self, farmers: list[Account]) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        for index, (name, category, price, quantity) in enumerate(CATALOG):
            farmer = farmers[index % len(farmers)]
            product = Product.objects.alive().filter(farmer=farmer, name=name).first()
            if product is None:
                product = self._products.create_product(
                    CreateProductDTO(
                        farmer_id=farmer.id,
                        name=name,
                        description=f"{category} from {farmer.farm_name}.",
                        price=price,
                        quantity=quantity,
                        category=category,
                    )
                )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(
        self,
        buyers: list[Account],
        products: list[Product],
        farmers: list[Account],
        staff: list[Account],
    ) -> int:
        self.stdout.write("Creating orders...")
        if any(buyer.orders.exists() for buyer in buyers):
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        admin = Caller(id=staff[0].id, role=Role.ADMIN)
        payments = Caller(id=staff[1].id, role=Role.PAYMENT_PROCESSOR)
        orders_created = 0
        for i in range(12):
            buyer = random.choice(buyers)
            picked = random.sample(products, k=random.randint(1, 3))
            order = self._orders.create_order(
                CreateOrderDTO(
                    buyer_id=buyer.id,
                    items=[
                        CreateOrderItemDTO(product_id=p.id, quantity=random.randint(1, 4))
                        for p in picked
                    ],
                    shipping_address=ShippingAddressDTO(
                        street=f"{i + 1} Market Road", city="Accra", country="Ghana"
                    ),
                    payment_method=random.choice(PaymentMethod.values),
                    notes=f"Seed order {i + 1}",
                )
            )
            orders_created += 1

            outcome = random.choice(["open", "shipped", "delivered", "cancelled"])
            if outcome in ("shipped", "delivered"):
                self._orders.update_status(order.id, OrderStatus.SHIPPED, admin)
            if outcome == "delivered":
                self._orders.update_status(order.id, OrderStatus.DELIVERED, admin)
                self._orders.update_payment_status(
                    order.id, "paid", payments, transaction_id=f"SEED-{i + 1:04d}"
                )
            if outcome == "cancelled":
                self._orders.cancel_order(
                    order.id,
                    Caller(id=buyer.id, role=Role.BUYER),
                    reason="Changed my mind",
                )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
