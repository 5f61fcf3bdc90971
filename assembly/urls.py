from django.urls import path

from .views import (
    AbandonBundleView,
    AssemblyScanView,
    BundleDetailView,
    BundleListCreateView,
    CompleteAssemblyView,
    ConfirmPhaseView,
    SessionStateView,
    StartSessionView,
)

urlpatterns = [
    path("bundles/", BundleListCreateView.as_view(), name="bundle-list"),
    path("bundles/<int:bundle_id>/", BundleDetailView.as_view(), name="bundle-detail"),
    path("assembly/sessions/", StartSessionView.as_view(), name="assembly-start"),
    path("assembly/<int:bundle_id>/", SessionStateView.as_view(), name="assembly-session"),
    path("assembly/<int:bundle_id>/scan/", AssemblyScanView.as_view(), name="assembly-scan"),
    path("assembly/<int:bundle_id>/next-phase/", ConfirmPhaseView.as_view(), name="assembly-next-phase"),
    path("assembly/<int:bundle_id>/complete/", CompleteAssemblyView.as_view(), name="assembly-complete"),
    path("assembly/<int:bundle_id>/abandon/", AbandonBundleView.as_view(), name="assembly-abandon"),
]
