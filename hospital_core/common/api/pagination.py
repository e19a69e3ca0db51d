# hospital_core/common/api/pagination.py
from __future__ import annotations

from django.db.models import QuerySet
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class ScopedListPagination(PageNumberPagination):
    """
    Page size for hospital-scoped registers (patients, bills, lab orders, ...).
    Busy days run to a few hundred rows, so clients may ask for larger pages.
    """
    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 500


def paginate(request, queryset: QuerySet, serializer_class) -> Response:
    """
    Render one page of an already hospital-filtered queryset as
    { count, next, previous, results }.
    """
    paginator = ScopedListPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(serializer_class(page, many=True).data)
