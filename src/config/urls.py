"""
URL Configuration da loja.

Estrutura:
- /admin/ - Django Admin (perfis de frete, produtos, planos)
- /shipping/ - API JSON de frete
- /health/ - Health check
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include


def health(request):
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    path('admin/', admin.site.urls),

    path('shipping/', include('src.adapters.django_app.shipping.urls')),

    path('health/', health, name='health'),
]
