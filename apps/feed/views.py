from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiResponse, OpenApiTypes, extend_schema, extend_schema_view
from rest_framework import filters, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from . import analytics, programs, services
from .api_docs import (
    AUTH_ERROR_RESPONSE, DATE_RANGE_PARAMETERS, FEED_PURCHASE_EXAMPLES, FEED_USAGE_EXAMPLES,
    FEED_PURCHASE_UPDATE_EXAMPLES, INVENTORY_ADJUST_EXAMPLES, NOT_FOUND_RESPONSE, PROJECTION_PARAMETERS,
    extend_schema_service
)
from .ledger import add_to_inventory, deduct_from_inventory
from .models import FeedProgram, FeedPurchase, FeedSupplier, FeedUsage, Inventory
from .serializers import (
    ConsumptionQuerySerializer, FeedProgramSerializer, FeedPurchaseSerializer, FeedSupplierSerializer,
    FeedUsageSerializer, FeedUsageWriteSerializer, InventoryAdjustSerializer, InventorySerializer, ProjectionQuerySerializer
)


class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Custom permission to only allow admin users to edit objects.
    """
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_staff)


def service_error(result):
    return Response({'error': result['error']}, status=status.HTTP_400_BAD_REQUEST)


@extend_schema_view(
    list=extend_schema(summary='List feed programs', tags=['Feed Programs']),
    retrieve=extend_schema(summary='Get feed program', tags=['Feed Programs']),
    create=extend_schema(summary='Create feed program week', tags=['Feed Programs']),
    update=extend_schema(summary='Update feed program week', tags=['Feed Programs']),
    partial_update=extend_schema(summary='Partially update feed program week', tags=['Feed Programs']),
    destroy=extend_schema(summary='Delete feed program week', tags=['Feed Programs']),
)
class FeedProgramViewSet(viewsets.ModelViewSet):
    """
    Weekly feeding schedule. Readable by any authenticated user,
    editable by staff only.
    """
    queryset = FeedProgram.objects.all()
    serializer_class = FeedProgramSerializer
    permission_classes = [IsAuthenticated, IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['feed_type', 'breed', 'is_active']
    ordering_fields = ['age_in_weeks', 'gram_per_hen']
    ordering = ['age_in_weeks']
    pagination_class = None


@extend_schema_view(
    list=extend_schema(summary='List feed usage', tags=['Feed Usage'], parameters=DATE_RANGE_PARAMETERS),
    retrieve=extend_schema(summary='Get feed usage record', tags=['Feed Usage']),
    destroy=extend_schema_service(
        summary='Delete feed usage record',
        description='Deletes the record and returns its amount to the feed inventory.',
        tags=['Feed Usage'],
        responses={204: None, **NOT_FOUND_RESPONSE},
    ),
)
class FeedUsageViewSet(viewsets.ModelViewSet):
    serializer_class = FeedUsageSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['feed_type', 'date']
    ordering_fields = ['date', 'amount_used', 'created_at']
    ordering = ['-date', '-created_at']

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return FeedUsage.objects.none()
        query = ConsumptionQuerySerializer(data=self.request.query_params)
        query.is_valid(raise_exception=True)
        return services.list_feed_usage(**query.validated_data)

    @extend_schema_service(
        summary='Record feed usage',
        description=(
            "Creates a usage record for the flock's recommended feed type and deducts "
            "the amount from the feed inventory in the same transaction."
        ),
        tags=['Feed Usage'],
        request=FeedUsageWriteSerializer,
        responses={201: FeedUsageSerializer},
        examples=FEED_USAGE_EXAMPLES,
    )
    def create(self, request, *args, **kwargs):
        serializer = FeedUsageWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.create_feed_usage(serializer.validated_data, recorded_by=request.user)
        if not result['success']:
            return service_error(result)
        return Response(FeedUsageSerializer(result['data']).data, status=status.HTTP_201_CREATED)

    @extend_schema_service(
        summary='Update feed usage',
        description='Changes to amount_used are reconciled against the feed inventory.',
        tags=['Feed Usage'],
        request=FeedUsageWriteSerializer,
        responses={200: FeedUsageSerializer, **NOT_FOUND_RESPONSE},
    )
    def update(self, request, *args, **kwargs):
        usage = self.get_object()
        partial = kwargs.pop('partial', False)
        serializer = FeedUsageWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        result = services.update_feed_usage(usage.id, serializer.validated_data)
        if not result['success']:
            return service_error(result)
        return Response(FeedUsageSerializer(result['data']).data)

    def destroy(self, request, *args, **kwargs):
        usage = self.get_object()
        result = services.delete_feed_usage(usage.id)
        if not result['success']:
            return service_error(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    list=extend_schema(summary='List inventory', tags=['Inventory']),
    retrieve=extend_schema(summary='Get inventory row', tags=['Inventory']),
)
class InventoryViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = InventorySerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['type', 'is_active']
    pagination_class = None

    def get_queryset(self):
        return Inventory.objects.all()

    def _adjust(self, request, operation):
        serializer = InventoryAdjustSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = operation(data['type'], data['amount'], data.get('details'))
        if not result['success']:
            return service_error(result)
        return Response(InventorySerializer(result['data']).data)

    @extend_schema_service(
        summary='Add stock',
        description='Adds stock to the active row of a type, creating it on first use.',
        tags=['Inventory'],
        request=InventoryAdjustSerializer,
        responses={200: InventorySerializer},
        examples=INVENTORY_ADJUST_EXAMPLES,
    )
    @action(detail=False, methods=['post'])
    def add(self, request):
        return self._adjust(request, add_to_inventory)

    @extend_schema_service(
        summary='Deduct stock',
        description='Deducts stock; fails without changes when the balance is insufficient.',
        tags=['Inventory'],
        request=InventoryAdjustSerializer,
        responses={200: InventorySerializer},
        examples=INVENTORY_ADJUST_EXAMPLES,
    )
    @action(detail=False, methods=['post'])
    def deduct(self, request):
        return self._adjust(request, deduct_from_inventory)

    @extend_schema(summary='Inventory counts', tags=['Inventory'], responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=['get'])
    def counts(self, request):
        return Response(analytics.get_inventory_counts())

    @extend_schema(
        summary='Feed stock with usage',
        tags=['Inventory'],
        parameters=PROJECTION_PARAMETERS[2:],
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=False, methods=['get'])
    def usage(self, request):
        query = ProjectionQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(analytics.get_inventory_with_usage(
            window_days=query.validated_data.get('window_days'),
            low_stock_threshold=query.validated_data.get('threshold'),
        ))

    @extend_schema(
        summary='Low stock alerts',
        tags=['Inventory'],
        parameters=PROJECTION_PARAMETERS[2:3],
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=False, methods=['get'], url_path='low-stock')
    def low_stock(self, request):
        query = ProjectionQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(analytics.get_low_stock_alerts(query.validated_data.get('threshold')))


@extend_schema_view(
    list=extend_schema(summary='List feed purchases', tags=['Feed Purchases']),
    retrieve=extend_schema(summary='Get feed purchase', tags=['Feed Purchases']),
)
class FeedPurchaseViewSet(mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          mixins.CreateModelMixin,
                          mixins.UpdateModelMixin,
                          mixins.DestroyModelMixin,
                          viewsets.GenericViewSet):
    queryset = FeedPurchase.objects.select_related('supplier', 'recorded_by')
    serializer_class = FeedPurchaseSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['feed_type', 'unit', 'supplier', 'purchase_date']
    search_fields = ['supplier__name', 'notes']
    ordering_fields = ['purchase_date', 'quantity_kg', 'total_cost']
    ordering = ['-purchase_date', '-created_at']

    @extend_schema_service(
        summary='Record feed purchase',
        description='Stores the purchase and adds its weight in kg to the feed inventory.',
        tags=['Feed Purchases'],
        responses={201: FeedPurchaseSerializer},
        examples=FEED_PURCHASE_EXAMPLES,
    )
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.record_feed_purchase(serializer.validated_data, recorded_by=request.user)
        if not result['success']:
            return service_error(result)
        return Response(self.get_serializer(result['data']).data, status=status.HTTP_201_CREATED)

    @extend_schema_service(
        summary='Update feed purchase',
        description=(
            'Corrects a purchase. Changes to quantity, unit or feed type are moved '
            'through the feed inventory in the same transaction.'
        ),
        tags=['Feed Purchases'],
        responses={200: FeedPurchaseSerializer, **NOT_FOUND_RESPONSE},
        examples=FEED_PURCHASE_UPDATE_EXAMPLES,
    )
    def update(self, request, *args, **kwargs):
        purchase = self.get_object()
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(purchase, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        result = services.update_feed_purchase(purchase.id, serializer.validated_data)
        if not result['success']:
            return service_error(result)
        return Response(self.get_serializer(result['data']).data)

    @extend_schema_service(
        summary='Delete feed purchase',
        description='Removes the purchase and takes its weight back out of the feed inventory.',
        tags=['Feed Purchases'],
        responses={204: None, **NOT_FOUND_RESPONSE},
    )
    def destroy(self, request, *args, **kwargs):
        purchase = self.get_object()
        result = services.delete_feed_purchase(purchase.id)
        if not result['success']:
            return service_error(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    list=extend_schema(summary='List feed suppliers', tags=['Feed Suppliers']),
    retrieve=extend_schema(summary='Get feed supplier', tags=['Feed Suppliers']),
    create=extend_schema(summary='Create feed supplier', tags=['Feed Suppliers']),
    update=extend_schema(summary='Update feed supplier', tags=['Feed Suppliers']),
    partial_update=extend_schema(summary='Partially update feed supplier', tags=['Feed Suppliers']),
    destroy=extend_schema(summary='Delete feed supplier', tags=['Feed Suppliers']),
)
class FeedSupplierViewSet(viewsets.ModelViewSet):
    """
    Feed suppliers. Deleting a supplier keeps its purchases and clears their
    supplier.
    """
    queryset = FeedSupplier.objects.all()
    serializer_class = FeedSupplierSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active']
    search_fields = ['name', 'contact_name', 'phone']
    ordering_fields = ['name', 'created_at']
    ordering = ['-created_at']
    pagination_class = None


class FeedViewSet(viewsets.ViewSet):
    """
    Farm-wide feed planning and analytics.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary='Recommendations for all flocks',
        tags=['Feed'],
        responses={200: OpenApiTypes.OBJECT, **AUTH_ERROR_RESPONSE},
    )
    @action(detail=False, methods=['get'])
    def recommendations(self, request):
        return Response(programs.get_all_feed_recommendations())

    @extend_schema(
        summary='Daily feed requirements by feed type',
        tags=['Feed'],
        responses={200: OpenApiTypes.OBJECT, **AUTH_ERROR_RESPONSE},
    )
    @action(detail=False, methods=['get'], url_path='requirements/daily', url_name='requirements-daily')
    def daily_requirements(self, request):
        return Response(programs.get_daily_feed_requirements())

    @extend_schema(
        summary='Weekly feed requirements by feed type',
        tags=['Feed'],
        responses={200: OpenApiTypes.OBJECT, **AUTH_ERROR_RESPONSE},
    )
    @action(detail=False, methods=['get'], url_path='requirements/weekly', url_name='requirements-weekly')
    def weekly_requirements(self, request):
        return Response(programs.get_weekly_feed_requirements())

    @extend_schema(
        summary='Feed consumption analytics',
        tags=['Feed'],
        parameters=DATE_RANGE_PARAMETERS,
        responses={200: OpenApiTypes.OBJECT, **AUTH_ERROR_RESPONSE},
    )
    @action(detail=False, methods=['get'], url_path='analytics/consumption', url_name='analytics-consumption')
    def consumption(self, request):
        query = ConsumptionQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(analytics.get_feed_consumption_analytics(**query.validated_data))

    @extend_schema(
        summary='Feed stock projection',
        description='Projects each feed type balance forward using recent average daily usage.',
        tags=['Feed'],
        parameters=PROJECTION_PARAMETERS,
        responses={200: OpenApiResponse(response=OpenApiTypes.OBJECT), **AUTH_ERROR_RESPONSE},
    )
    @action(detail=False, methods=['get'], url_path='analytics/projection', url_name='analytics-projection')
    def projection(self, request):
        query = ProjectionQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        return Response(analytics.get_inventory_projection(
            feed_type=data.get('feed_type'),
            days=data.get('days'),
            low_stock_threshold=data.get('threshold'),
            window_days=data.get('window_days'),
        ))
