from django.urls import path
from .views import FinanceStatisticView, PaymentDetailView, PaymentView

urlpatterns = [
    path("payments", PaymentView.as_view(), name="payments"),
    path("payments/<int:pk>", PaymentDetailView.as_view(), name="payment-detail"),
    path("statistics/finance", FinanceStatisticView.as_view(), name="finance-statistics"),
]
