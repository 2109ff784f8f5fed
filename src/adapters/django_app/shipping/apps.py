"""
Configuração do Django App para Frete.
"""

from django.apps import AppConfig


class ShippingConfig(AppConfig):
    """Configuração do app Shipping."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.shipping'
    label = 'shipping'
    verbose_name = 'Frete'
