"""
Success envelope helpers and pagination for list endpoints.

Successful responses share the shape::

    {"success": true, "message": "...", "data": ...}
"""
import math

from django.core.paginator import Page
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


def success_response(data=None, message=None, status_code=status.HTTP_200_OK):
    """Wrap ``data`` in the success envelope."""
    payload = {'success': True}
    if message:
        payload['message'] = message
    payload['data'] = data
    return Response(payload, status=status_code)


def created_response(data, message):
    return success_response(data, message, status_code=status.HTTP_201_CREATED)


class StandardResultsSetPagination(PageNumberPagination):
    """Standard pagination for list endpoints."""
    page_size = 15
    page_size_query_param = 'per_page'
    max_page_size = 100

    def paginate_queryset(self, queryset, request, view=None):
        """
        Paginate like PageNumberPagination, but a page past the end yields an
        empty page and a malformed page number falls back to the first page.
        """
        self.request = request
        page_size = self.get_page_size(request)
        paginator = self.django_paginator_class(queryset, page_size)

        try:
            number = max(1, int(request.query_params.get(self.page_query_param, 1)))
        except (TypeError, ValueError):
            number = 1

        if number > paginator.num_pages:
            self.page = Page([], number, paginator)
        else:
            self.page = paginator.page(number)
        return list(self.page)

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        per_page = self.get_page_size(self.request)
        return success_response({
            'results': data,
            'current_page': self.page.number,
            'per_page': per_page,
            'total': total,
            'last_page': max(1, math.ceil(total / per_page)) if per_page else 1,
        })


def paginated_response(request, queryset, serializer_class, **serializer_kwargs):
    """Paginate ``queryset`` and serialize the current page into the envelope."""
    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = serializer_class(page, many=True, **serializer_kwargs)
    return paginator.get_paginated_response(serializer.data)


def parse_bool(value):
    """
    Interpret a query-string flag.

    Returns None when the parameter is absent so callers can skip the filter.
    """
    if value is None or value == '':
        return None
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')
