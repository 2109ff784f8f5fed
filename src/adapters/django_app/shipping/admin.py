"""
Django Admin para o domínio de Frete.

Gerenciamento de perfis de frete e dos vínculos de produtos/planos
via interface web.
"""

from django.contrib import admin
from django.db.models import Count
from django.utils.html import format_html

from .models import (
    DomainEventModel,
    ProductModel,
    ShippingProfileModel,
    SubscriptionPlanModel,
)


@admin.register(ShippingProfileModel)
class ShippingProfileAdmin(admin.ModelAdmin):
    """Admin para ShippingProfileModel."""

    list_display = [
        'nome',
        'peso_kg',
        'dimensoes',
        'status_badge',
        'total_produtos',
        'total_planos',
        'atualizado_em',
    ]

    list_filter = ['ativo']

    search_fields = ['id', 'nome']

    readonly_fields = ['id', 'criado_em', 'atualizado_em']

    fieldsets = [
        ('Identificação', {
            'fields': ['id', 'nome', 'ativo'],
        }),
        ('Peso e Dimensões', {
            'fields': ['peso_kg', 'largura_cm', 'altura_cm', 'comprimento_cm'],
        }),
        ('Timestamps', {
            'fields': ['criado_em', 'atualizado_em'],
            'classes': ['collapse'],
        }),
    ]

    ordering = ['nome']

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(
            _total_produtos=Count('produtos', distinct=True),
            _total_planos=Count('planos', distinct=True),
        )

    def dimensoes(self, obj):
        return f"{obj.largura_cm}x{obj.altura_cm}x{obj.comprimento_cm}cm"
    dimensoes.short_description = 'Dimensões (LxAxC)'

    def status_badge(self, obj):
        """Exibe status com badge colorido."""
        color = '#28a745' if obj.ativo else '#6c757d'
        label = 'Ativo' if obj.ativo else 'Inativo'
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            color,
            label
        )
    status_badge.short_description = 'Status'

    def total_produtos(self, obj):
        return obj._total_produtos
    total_produtos.short_description = 'Produtos'
    total_produtos.admin_order_field = '_total_produtos'

    def total_planos(self, obj):
        return obj._total_planos
    total_planos.short_description = 'Planos'
    total_planos.admin_order_field = '_total_planos'


class _ItemComFreteAdmin(admin.ModelAdmin):
    list_display = ['nome', 'ativo', 'perfil_frete']
    list_filter = ['ativo', 'perfil_frete']
    search_fields = ['id', 'nome']
    list_select_related = ['perfil_frete']
    autocomplete_fields = ['perfil_frete']


@admin.register(ProductModel)
class ProductAdmin(_ItemComFreteAdmin):
    """Admin para produtos (vínculo com perfil de frete)."""


@admin.register(SubscriptionPlanModel)
class SubscriptionPlanAdmin(_ItemComFreteAdmin):
    """Admin para planos de assinatura (vínculo com perfil de frete)."""


@admin.register(DomainEventModel)
class DomainEventAdmin(admin.ModelAdmin):
    """Admin para eventos de domínio."""

    list_display = [
        'event_id_curto',
        'event_type',
        'aggregate_id_curto',
        'sequence',
        'occurred_at',
        'user_id',
    ]

    list_filter = ['event_type', 'occurred_at']

    search_fields = ['event_id', 'aggregate_id', 'event_type', 'user_id']

    readonly_fields = [
        'event_id',
        'event_type',
        'aggregate_type',
        'aggregate_id',
        'event_data',
        'version',
        'sequence',
        'occurred_at',
        'recorded_at',
        'user_id',
    ]

    def event_id_curto(self, obj):
        return obj.event_id[:8] + '...'
    event_id_curto.short_description = 'Event ID'

    def aggregate_id_curto(self, obj):
        return obj.aggregate_id[:8] + '...'
    aggregate_id_curto.short_description = 'Perfil'
