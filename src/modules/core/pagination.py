"""Page-number pagination wrapped in the response envelope."""

from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from modules.core.responses import success_response


class StandardResultsSetPagination(PageNumberPagination):
    """``?page=N&limit=M`` pagination (``limit`` capped at 100)."""

    page_query_param = "page"
    page_size_query_param = "limit"
    max_page_size = 100

    def get_paginated_response(self, data) -> Response:
        return success_response(
            {
                "results": data,
                "count": self.page.paginator.count,
                "page": self.page.number,
                "limit": self.page.paginator.per_page,
                "totalPages": self.page.paginator.num_pages,
            }
        )
