from django.urls import path

from .views import CartRemoveView, CartView, CustomerView, PingView, SessionView, SyncView

urlpatterns = [
    path("scanning/session/", SessionView.as_view(), name="scanning-session"),
    path("scanning/session/cart/", CartView.as_view(), name="scanning-cart"),
    path("scanning/session/cart/remove/", CartRemoveView.as_view(), name="scanning-cart-remove"),
    path("scanning/session/customer/", CustomerView.as_view(), name="scanning-customer"),
    path("scanning/session/sync/", SyncView.as_view(), name="scanning-sync"),
    path("scanning/session/ping/", PingView.as_view(), name="scanning-ping"),
]
