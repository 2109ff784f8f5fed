"""
Migration inicial para o domínio de Frete.

Cria as tabelas:
- shipping_profiles: Catálogo de perfis de frete
- products / subscription_plans: Itens com perfil de frete
- domain_events: Event Store
"""

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: shipping_profiles
        # =================================================================
        migrations.CreateModel(
            name='ShippingProfileModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único do perfil'
                )),
                ('nome', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Nome do perfil de frete'
                )),
                ('peso_kg', models.DecimalField(
                    max_digits=6,
                    decimal_places=3,
                    help_text='Peso em kg'
                )),
                ('largura_cm', models.PositiveIntegerField(help_text='Largura em cm')),
                ('altura_cm', models.PositiveIntegerField(help_text='Altura em cm')),
                ('comprimento_cm', models.PositiveIntegerField(help_text='Comprimento em cm')),
                ('ativo', models.BooleanField(default=True, db_index=True)),
                ('criado_em', models.DateTimeField()),
                ('atualizado_em', models.DateTimeField()),
            ],
            options={
                'verbose_name': 'Perfil de Frete',
                'verbose_name_plural': 'Perfis de Frete',
                'db_table': 'shipping_profiles',
                'ordering': ['nome'],
            },
        ),

        # =================================================================
        # Tabela: products
        # =================================================================
        migrations.CreateModel(
            name='ProductModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False)),
                ('nome', models.CharField(max_length=200)),
                ('ativo', models.BooleanField(default=True)),
                ('perfil_frete', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='produtos',
                    to='shipping.shippingprofilemodel',
                )),
            ],
            options={
                'verbose_name': 'Produto',
                'verbose_name_plural': 'Produtos',
                'db_table': 'products',
                'ordering': ['nome'],
            },
        ),

        # =================================================================
        # Tabela: subscription_plans
        # =================================================================
        migrations.CreateModel(
            name='SubscriptionPlanModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False)),
                ('nome', models.CharField(max_length=200)),
                ('ativo', models.BooleanField(default=True)),
                ('perfil_frete', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='planos',
                    to='shipping.shippingprofilemodel',
                )),
            ],
            options={
                'verbose_name': 'Plano de Assinatura',
                'verbose_name_plural': 'Planos de Assinatura',
                'db_table': 'subscription_plans',
                'ordering': ['nome'],
            },
        ),

        # =================================================================
        # Tabela: domain_events (Event Store)
        # =================================================================
        migrations.CreateModel(
            name='DomainEventModel',
            fields=[
                ('event_id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    help_text='UUID único do evento'
                )),
                ('event_type', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Tipo do evento (ex: PerfilFreteCriadoEvent)'
                )),
                ('aggregate_type', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Tipo do agregado (ex: ShippingProfile)'
                )),
                ('aggregate_id', models.CharField(
                    max_length=36,
                    db_index=True,
                    help_text='ID do agregado que gerou o evento'
                )),
                ('event_data', models.JSONField(
                    default=dict,
                    help_text='Dados serializados do evento'
                )),
                ('version', models.IntegerField(
                    default=1,
                    help_text='Versão do schema do evento'
                )),
                ('sequence', models.BigIntegerField(
                    default=0,
                    help_text='Sequência do evento no agregado'
                )),
                ('occurred_at', models.DateTimeField(
                    help_text='Quando o evento ocorreu'
                )),
                ('recorded_at', models.DateTimeField(
                    auto_now_add=True,
                    help_text='Quando o evento foi persistido'
                )),
                ('user_id', models.CharField(
                    max_length=100,
                    null=True,
                    blank=True,
                    db_index=True,
                    help_text='Usuário que iniciou a ação'
                )),
            ],
            options={
                'verbose_name': 'Evento de Domínio',
                'verbose_name_plural': 'Eventos de Domínio',
                'db_table': 'domain_events',
                'ordering': ['recorded_at'],
            },
        ),
        migrations.AddIndex(
            model_name='domaineventmodel',
            index=models.Index(fields=['aggregate_id', 'sequence'], name='domain_even_aggrega_seq_idx'),
        ),
        migrations.AddIndex(
            model_name='domaineventmodel',
            index=models.Index(fields=['event_type', 'recorded_at'], name='domain_even_event_t_rec_idx'),
        ),
    ]
