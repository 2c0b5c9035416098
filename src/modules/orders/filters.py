import django_filters
from rest_framework.filters import BaseFilterBackend

from modules.core.exceptions import ValidationError
from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    paymentMethod = django_filters.ChoiceFilter(
        field_name="payment_method", choices=PaymentMethod.choices
    )
    paymentStatus = django_filters.ChoiceFilter(
        field_name="payment_status", choices=PaymentStatus.choices
    )
    startDate = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    endDate = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Order
        fields = ["status", "paymentMethod", "paymentStatus", "startDate", "endDate"]


class SortByFilter(BaseFilterBackend):
    """``?sortBy=<field>&sortOrder=asc|desc`` ordering.

    ``sortBy`` takes the camelCase name of one of ``sort_fields``.
    Defaults to newest first.
    """

    sort_fields = {
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "totalAmount": "total_amount",
        "status": "status",
    }
    default_sort = "createdAt"
    default_order = "desc"

    def filter_queryset(self, request, queryset, view):
        sort_by = request.query_params.get("sortBy") or self.default_sort
        sort_order = (request.query_params.get("sortOrder") or self.default_order).lower()

        field = self.sort_fields.get(sort_by)
        if field is None:
            raise ValidationError(
                f"Cannot sort by '{sort_by}'.",
                details=[
                    {
                        "field": "sortBy",
                        "message": f"Expected one of {', '.join(self.sort_fields)}.",
                    }
                ],
            )
        if sort_order not in ("asc", "desc"):
            raise ValidationError(
                f"Invalid sort order '{sort_order}'.",
                details=[{"field": "sortOrder", "message": "Expected asc or desc."}],
            )

        prefix = "-" if sort_order == "desc" else ""
        return queryset.order_by(f"{prefix}{field}", f"{prefix}id")
