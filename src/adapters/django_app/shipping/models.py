"""
Django Models para o domínio de Frete.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/shipping/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Validações de peso/dimensão ficam na ShippingProfileEntity
- Models são mapeados para/de Entities via Mappers

Relacionamentos:
- ShippingProfileModel: Catálogo de perfis de frete
- ProductModel / SubscriptionPlanModel: Itens vendáveis que
  referenciam (opcionalmente) um perfil
- DomainEventModel: Event Store
"""

from django.db import models


class ShippingProfileModel(models.Model):
    """
    Model Django para persistência de Perfis de Frete.

    Fields:
        id: UUID como primary key (gerado pela Entity)
        nome: Nome do perfil (ex: "Caixa Pequena")
        peso_kg: Peso em kg (até 3 casas decimais)
        largura_cm / altura_cm / comprimento_cm: Dimensões inteiras
        ativo: Perfis inativos não são aceitos na cotação
        criado_em / atualizado_em: Timestamps
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único do perfil"
    )

    nome = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Nome do perfil de frete"
    )

    peso_kg = models.DecimalField(
        max_digits=6,
        decimal_places=3,
        help_text="Peso em kg"
    )

    largura_cm = models.PositiveIntegerField(help_text="Largura em cm")
    altura_cm = models.PositiveIntegerField(help_text="Altura em cm")
    comprimento_cm = models.PositiveIntegerField(help_text="Comprimento em cm")

    ativo = models.BooleanField(
        default=True,
        db_index=True,
    )

    criado_em = models.DateTimeField()
    atualizado_em = models.DateTimeField()

    class Meta:
        db_table = 'shipping_profiles'
        verbose_name = 'Perfil de Frete'
        verbose_name_plural = 'Perfis de Frete'
        ordering = ['nome']

    def __str__(self):
        return (
            f"{self.nome} ({self.peso_kg}kg, "
            f"{self.largura_cm}x{self.altura_cm}x{self.comprimento_cm}cm)"
        )


class ProductModel(models.Model):
    """
    Produto do catálogo, na visão do frete.

    Apenas os campos usados pela cotação: um produto sem perfil
    usa o pacote padrão.
    """

    id = models.CharField(max_length=36, primary_key=True)

    nome = models.CharField(max_length=200)

    ativo = models.BooleanField(default=True)

    perfil_frete = models.ForeignKey(
        ShippingProfileModel,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name='produtos',
    )

    class Meta:
        db_table = 'products'
        verbose_name = 'Produto'
        verbose_name_plural = 'Produtos'
        ordering = ['nome']

    def __str__(self):
        return self.nome


class SubscriptionPlanModel(models.Model):
    """Plano de assinatura, na visão do frete."""

    id = models.CharField(max_length=36, primary_key=True)

    nome = models.CharField(max_length=200)

    ativo = models.BooleanField(default=True)

    perfil_frete = models.ForeignKey(
        ShippingProfileModel,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name='planos',
    )

    class Meta:
        db_table = 'subscription_plans'
        verbose_name = 'Plano de Assinatura'
        verbose_name_plural = 'Planos de Assinatura'
        ordering = ['nome']

    def __str__(self):
        return self.nome


class DomainEventModel(models.Model):
    """
    Event Store para Domain Events do catálogo de frete.

    Persiste eventos para auditoria e replay.
    """

    event_id = models.CharField(
        max_length=36,
        primary_key=True,
        help_text="UUID único do evento"
    )

    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Tipo do evento (ex: PerfilFreteCriadoEvent)"
    )

    aggregate_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Tipo do agregado (ex: ShippingProfile)"
    )

    aggregate_id = models.CharField(
        max_length=36,
        db_index=True,
        help_text="ID do agregado que gerou o evento"
    )

    event_data = models.JSONField(
        default=dict,
        help_text="Dados serializados do evento"
    )

    version = models.IntegerField(
        default=1,
        help_text="Versão do schema do evento"
    )

    sequence = models.BigIntegerField(
        default=0,
        help_text="Sequência do evento no agregado"
    )

    occurred_at = models.DateTimeField(
        help_text="Quando o evento ocorreu"
    )

    recorded_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Quando o evento foi persistido"
    )

    user_id = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        db_index=True,
        help_text="Usuário que iniciou a ação"
    )

    class Meta:
        db_table = 'domain_events'
        verbose_name = 'Evento de Domínio'
        verbose_name_plural = 'Eventos de Domínio'
        ordering = ['recorded_at']
        indexes = [
            models.Index(fields=['aggregate_id', 'sequence'], name='domain_even_aggrega_seq_idx'),
            models.Index(fields=['event_type', 'recorded_at'], name='domain_even_event_t_rec_idx'),
        ]

    def __str__(self):
        return f"{self.event_type} - {self.aggregate_id[:8]} @ {self.occurred_at}"
