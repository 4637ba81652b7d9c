"""
API documentation extensions for drf-spectacular.
Shared error schemas, query parameters and request examples for the feed endpoints.
"""
from drf_spectacular.utils import (
    extend_schema, OpenApiExample, OpenApiParameter, OpenApiTypes
)
from rest_framework import status

# Common response schemas
AUTH_ERROR_RESPONSE = {
    status.HTTP_401_UNAUTHORIZED: {
        'type': 'object',
        'properties': {
            'detail': {'type': 'string', 'example': 'Authentication credentials were not provided.'}
        }
    },
    status.HTTP_403_FORBIDDEN: {
        'type': 'object',
        'properties': {
            'detail': {'type': 'string', 'example': 'You do not have permission to perform this action.'}
        }
    }
}

SERVICE_ERROR_RESPONSE = {
    status.HTTP_400_BAD_REQUEST: {
        'type': 'object',
        'properties': {
            'error': {'type': 'string', 'example': 'Insufficient LAYER inventory. Available: 20.00, Required: 30.00'}
        }
    },
}

NOT_FOUND_RESPONSE = {
    status.HTTP_404_NOT_FOUND: {
        'type': 'object',
        'properties': {
            'detail': {'type': 'string', 'example': 'Not found.'}
        }
    },
}

# Common parameters
DATE_RANGE_PARAMETERS = [
    OpenApiParameter(
        name='start_date',
        type=OpenApiTypes.DATE,
        location=OpenApiParameter.QUERY,
        description='Only include records on or after this date.',
        required=False
    ),
    OpenApiParameter(
        name='end_date',
        type=OpenApiTypes.DATE,
        location=OpenApiParameter.QUERY,
        description='Only include records on or before this date.',
        required=False
    ),
    OpenApiParameter(
        name='flock_id',
        type=OpenApiTypes.UUID,
        location=OpenApiParameter.QUERY,
        description='Restrict to a single flock.',
        required=False
    ),
]

PROJECTION_PARAMETERS = [
    OpenApiParameter(
        name='feed_type',
        type=OpenApiTypes.STR,
        location=OpenApiParameter.QUERY,
        description='Project a single feed type only.',
        required=False
    ),
    OpenApiParameter(
        name='days',
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        description='Projection horizon in days.',
        required=False
    ),
    OpenApiParameter(
        name='threshold',
        type=OpenApiTypes.NUMBER,
        location=OpenApiParameter.QUERY,
        description='Low stock threshold in kg.',
        required=False
    ),
    OpenApiParameter(
        name='window_days',
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        description='Trailing usage window used for the daily average.',
        required=False
    ),
]

DAYS_PARAMETER = OpenApiParameter(
    name='days',
    type=OpenApiTypes.INT,
    location=OpenApiParameter.QUERY,
    description='Number of days to compare, ending yesterday.',
    required=False
)


def extend_schema_service(tags=None, responses=None, **kwargs):
    """Decorator for endpoints backed by a feed service call.

    Args:
        tags: List of tags for the endpoint
        responses: Success responses to merge with the default error responses
        **kwargs: Additional arguments to pass to extend_schema
    """
    if tags is None:
        tags = ['Feed']

    default_responses = {
        **SERVICE_ERROR_RESPONSE,
        **AUTH_ERROR_RESPONSE,
    }
    if responses:
        default_responses.update(responses)

    return extend_schema(tags=tags, responses=default_responses, **kwargs)


# View-specific examples
FEED_USAGE_EXAMPLES = [
    OpenApiExample(
        'Record Usage',
        value={
            'flock_id': '3fa85f64-5717-4562-b3fc-2c963f66afa6',
            'date': '2024-05-01',
            'amount_used': '30.00',
            'notes': 'Morning and evening ration'
        },
        request_only=True
    )
]

INVENTORY_ADJUST_EXAMPLES = [
    OpenApiExample(
        'Add Layer Feed',
        value={
            'type': 'FEED',
            'amount': '100.00',
            'details': {'LAYER': '100.00'}
        },
        request_only=True
    ),
    OpenApiExample(
        'Add Eggs',
        value={
            'type': 'EGG',
            'amount': 360
        },
        request_only=True
    )
]

FEED_PURCHASE_EXAMPLES = [
    OpenApiExample(
        'Purchase In Quintals',
        value={
            'feed_type': 'REARING',
            'quantity': '5',
            'unit': 'QUINTAL',
            'cost_per_unit': '4200.00',
            'supplier': '3fa85f64-5717-4562-b3fc-2c963f66afa6'
        },
        request_only=True
    )
]

FEED_PURCHASE_UPDATE_EXAMPLES = [
    OpenApiExample(
        'Correct Price',
        value={
            'cost_per_unit': '4000.00',
            'notes': 'Invoice corrected'
        },
        request_only=True
    )
]
