from django.db.models import ProtectedError
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiTypes, extend_schema, extend_schema_view
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.feed.api_docs import AUTH_ERROR_RESPONSE, DAYS_PARAMETER, NOT_FOUND_RESPONSE
from apps.feed.programs import get_feed_compliance, get_feed_recommendation
from .models import Flock
from .serializers import FlockSerializer


@extend_schema_view(
    list=extend_schema(summary='List flocks', tags=['Flocks']),
    retrieve=extend_schema(summary='Get flock', tags=['Flocks']),
    create=extend_schema(summary='Create flock', tags=['Flocks']),
    update=extend_schema(summary='Update flock', tags=['Flocks']),
    partial_update=extend_schema(summary='Partially update flock', tags=['Flocks']),
    destroy=extend_schema(
        summary='Delete flock',
        description='Flocks with feed usage records cannot be deleted.',
        tags=['Flocks'],
    ),
)
class FlockViewSet(viewsets.ModelViewSet):
    queryset = Flock.objects.all()
    serializer_class = FlockSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['breed', 'status']
    search_fields = ['batch_code', 'notes']
    ordering_fields = ['arrival_date', 'batch_code', 'current_count']
    ordering = ['-arrival_date', 'batch_code']

    def destroy(self, request, *args, **kwargs):
        flock = self.get_object()
        try:
            flock.delete()
        except ProtectedError:
            return Response(
                {'error': 'Flock has feed usage records and cannot be deleted'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary='Feed recommendation',
        description="Recommended feed type and daily ration for the flock's current age.",
        tags=['Flocks'],
        responses={200: OpenApiTypes.OBJECT, **NOT_FOUND_RESPONSE, **AUTH_ERROR_RESPONSE},
    )
    @action(detail=True, methods=['get'])
    def recommendation(self, request, pk=None):
        flock = self.get_object()
        recommendation = get_feed_recommendation(flock.id)
        if recommendation is None:
            return Response(
                {'error': 'No feed program configured'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response(recommendation)

    @extend_schema(
        summary='Feed compliance',
        description='Recommended against recorded feed for each of the last N days.',
        tags=['Flocks'],
        parameters=[DAYS_PARAMETER],
        responses={200: OpenApiTypes.OBJECT, **NOT_FOUND_RESPONSE, **AUTH_ERROR_RESPONSE},
    )
    @action(detail=True, methods=['get'])
    def compliance(self, request, pk=None):
        flock = self.get_object()
        days = request.query_params.get('days')
        if days is not None:
            try:
                days = int(days)
            except ValueError:
                return Response({'error': 'days must be a whole number'}, status=status.HTTP_400_BAD_REQUEST)
            if not 1 <= days <= 365:
                return Response({'error': 'days must be between 1 and 365'}, status=status.HTTP_400_BAD_REQUEST)
        return Response(get_feed_compliance(flock.id, days=days))
