"""
URL patterns para o domínio de Frete.

Endpoints API JSON (checkout):
- POST /shipping/quote/ - Cotar frete
- POST /shipping/select/ - Confirmar opção escolhida
- POST /shipping/availability/ - Itens sem perfil de frete

Endpoints API JSON (admin):
- GET/POST /shipping/profiles/ - Listar/criar perfis
- GET/PATCH/DELETE /shipping/profiles/<id>/ - Obter/atualizar/excluir
- POST /shipping/profiles/<id>/toggle-active/ - Ativar/desativar
"""

from django.urls import path
from . import api_views

app_name = 'shipping'

urlpatterns = [
    # =========================================================================
    # Checkout
    # =========================================================================
    path('quote/', api_views.ShippingQuoteAPIView.as_view(), name='quote'),
    path('select/', api_views.ShippingSelectAPIView.as_view(), name='select'),
    path('availability/', api_views.ShippingAvailabilityAPIView.as_view(), name='availability'),

    # =========================================================================
    # Admin - Perfis de Frete
    # =========================================================================
    path('profiles/', api_views.ShippingProfileAPIListView.as_view(), name='profile_list'),
    path('profiles/<str:pk>/', api_views.ShippingProfileAPIDetailView.as_view(), name='profile_detail'),
    path(
        'profiles/<str:pk>/toggle-active/',
        api_views.ShippingProfileAPIToggleView.as_view(),
        name='profile_toggle',
    ),
]
