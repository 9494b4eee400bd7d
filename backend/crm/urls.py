"""
CRM URL configuration, mounted under /api/.
"""
from django.urls import path
from crm.api import auth, dashboard, leads, payments, referrals

urlpatterns = [
    # Leads
    path('leads', leads.LeadListCreateView.as_view()),
    path('leads/<uuid:lead_id>', leads.LeadDetailView.as_view()),
    path('leads/<uuid:lead_id>/status', leads.LeadStatusView.as_view()),
    path('leads/<uuid:lead_id>/activities', leads.LeadActivityView.as_view()),

    # Payments
    path('payments', payments.PaymentListCreateView.as_view()),

    # Referrals
    path('referrals/code/<str:code>', referrals.ReferralCodeView.as_view()),

    # Internal dashboard
    path('internal/dashboard', dashboard.DashboardMetricsView.as_view()),

    # Auth
    path('auth/me', auth.CurrentUserView.as_view()),
]
