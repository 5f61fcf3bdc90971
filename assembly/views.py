"""Bundle and assembly-session endpoints."""

from common.throttling import SettingsScopedRateThrottle
from common.views import envelope_response
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from . import selectors, services
from .serializers import AssemblyScanSerializer, BundleCreateSerializer, BundleListSerializer, StartSessionSerializer


class AssemblyView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "warehouse_write"
    throttle_classes = [SettingsScopedRateThrottle]


class BundleListCreateView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = BundleListSerializer
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_queryset(self):
        return selectors.list_bundles(
            status=self.request.query_params.get("status"),
            search=self.request.query_params.get("search"),
        )

    @extend_schema(
        tags=["Assembly Endpoints"],
        summary="List bundles",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, location="query"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Assembly Endpoints"], summary="Create bundle", request=BundleCreateSerializer)
    def post(self, request):
        serializer = BundleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _create():
            bundle = services.create_bundle(user=request.user, **serializer.validated_data)
            return {"id": bundle.id, "qr_code": bundle.qr_code, "status": bundle.status}

        return envelope_response(
            "assembly.create_bundle", _create, request=request, success_message="Bundle created", success_status=201
        )


class BundleDetailView(AssemblyView):
    throttle_scope = "warehouse"

    @extend_schema(tags=["Assembly Endpoints"], summary="Bundle detail")
    def get(self, request, bundle_id: int):
        return envelope_response("assembly.bundle_detail", lambda: selectors.get_bundle_detail(bundle_id))

    @extend_schema(tags=["Assembly Endpoints"], summary="Delete a pending bundle")
    def delete(self, request, bundle_id: int):
        return envelope_response(
            "assembly.delete_bundle",
            lambda: services.delete_bundle(bundle_id=bundle_id),
            request=request,
            context={"bundle_id": bundle_id},
            success_message="Bundle deleted",
        )


class StartSessionView(AssemblyView):
    @extend_schema(tags=["Assembly Endpoints"], summary="Start assembly session", request=StartSessionSerializer)
    def post(self, request):
        serializer = StartSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return envelope_response(
            "assembly.start_session",
            lambda: services.start_assembly_session(user=request.user, **serializer.validated_data),
            request=request,
            success_message="Assembly session started",
        )


class SessionStateView(AssemblyView):
    throttle_scope = "scanning"

    @extend_schema(
        tags=["Assembly Endpoints"],
        summary="Poll assembly session",
        description="Current phases and counts. `version` changes on every write.",
    )
    def get(self, request, bundle_id: int):
        return envelope_response("assembly.session_state", lambda: selectors.get_assembly_session(bundle_id))


class AssemblyScanView(AssemblyView):
    throttle_scope = "scanning"

    @extend_schema(tags=["Assembly Endpoints"], summary="Scan a component", request=AssemblyScanSerializer)
    def post(self, request, bundle_id: int):
        serializer = AssemblyScanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _scan():
            code = serializer.validated_data["code"]
            return services.scan_assembly(bundle_id=bundle_id, code=code, user=request.user)

        return envelope_response(
            "assembly.scan",
            _scan,
            request=request,
            context={"bundle_id": bundle_id},
            success_message="Scanned",
        )


class ConfirmPhaseView(AssemblyView):
    @extend_schema(tags=["Assembly Endpoints"], summary="Advance to the next phase")
    def post(self, request, bundle_id: int):
        return envelope_response(
            "assembly.confirm_phase",
            lambda: services.confirm_phase_transition(bundle_id=bundle_id),
            request=request,
            context={"bundle_id": bundle_id},
            success_message="Moved to the next phase",
        )


class CompleteAssemblyView(AssemblyView):
    @extend_schema(tags=["Assembly Endpoints"], summary="Complete assembly")
    def post(self, request, bundle_id: int):
        return envelope_response(
            "assembly.complete",
            lambda: services.complete_assembly(bundle_id=bundle_id, user=request.user),
            request=request,
            context={"bundle_id": bundle_id},
            success_message="Bundle assembled",
        )


class AbandonBundleView(AssemblyView):
    @extend_schema(tags=["Assembly Endpoints"], summary="Abandon bundle")
    def post(self, request, bundle_id: int):
        def _abandon():
            bundle = services.abandon_bundle(bundle_id=bundle_id)
            return {"id": bundle.id, "status": bundle.status}

        return envelope_response(
            "assembly.abandon",
            _abandon,
            request=request,
            context={"bundle_id": bundle_id},
            success_message="Bundle abandoned",
        )
