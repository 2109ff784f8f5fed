"""
Data Transfer Objects (DTOs) do Domínio de Frete.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento de entidades para as views.

Tipos de DTOs:
- Input DTOs: Recebem dados já validados pelos Forms
- Output DTOs: Formatam dados para as respostas JSON

As chaves JSON seguem o contrato público da API (camelCase):
optionId, carrier, service, price, deliveryDays.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from src.core.shared.exceptions import ValidationError

from .entities import (
    CargoSource,
    OrderShippingData,
    PerfilCargoSource,
    PlanoCargoSource,
    ProdutosCargoSource,
    ShippingOption,
    ShippingProfileEntity,
)


MENSAGEM_SEM_ORIGEM_CARGA = (
    "É necessário informar shippingProfileId, productIds ou planId para calcular o frete"
)


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CotarFreteInputDTO:
    """
    DTO de entrada para cotação de frete.

    Imutável (frozen=True) para que a mesma requisição produza
    sempre a mesma cotação.

    Attributes:
        cep: CEP de destino com 8 dígitos (normalizado na fronteira)
        shipping_profile_id: Perfil de frete explícito
        product_ids: IDs de produtos (repetir o ID = quantidade)
        plan_id: ID do plano de assinatura
    """

    cep: str
    shipping_profile_id: Optional[str] = None
    product_ids: Tuple[str, ...] = field(default_factory=tuple)
    plan_id: Optional[str] = None

    def cargo_source(self) -> CargoSource:
        """
        Converte os campos opcionais na origem de carga.

        Precedência quando mais de um campo é informado:
        perfil, depois produtos, depois plano.

        Raises:
            ValidationError: Se nenhuma origem foi informada
        """
        if self.shipping_profile_id:
            return PerfilCargoSource(self.shipping_profile_id)
        if self.product_ids:
            return ProdutosCargoSource(tuple(self.product_ids))
        if self.plan_id:
            return PlanoCargoSource(self.plan_id)
        raise ValidationError(MENSAGEM_SEM_ORIGEM_CARGA, field="carga")

    def to_dict(self) -> dict:
        return {
            "cep": self.cep,
            "shippingProfileId": self.shipping_profile_id,
            "productIds": list(self.product_ids),
            "planId": self.plan_id,
        }


@dataclass(frozen=True)
class SelecionarFreteInputDTO:
    """
    DTO de entrada para escolha de frete no checkout.

    Attributes:
        cotacao: Mesma requisição usada para cotar
        option_id: ID da opção escolhida pelo cliente
    """

    cotacao: CotarFreteInputDTO
    option_id: str


@dataclass(frozen=True)
class VerificarDisponibilidadeInputDTO:
    """DTO de entrada para checar se itens têm perfil de frete."""

    product_ids: Tuple[str, ...] = field(default_factory=tuple)
    plan_id: Optional[str] = None


@dataclass(frozen=True)
class CriarPerfilFreteInputDTO:
    """
    DTO de entrada para criar perfil de frete.

    Attributes:
        nome: Nome do perfil
        peso_kg: Peso em kg
        largura_cm: Largura em cm
        altura_cm: Altura em cm
        comprimento_cm: Comprimento em cm
        ativo: Se o perfil já nasce ativo
        criado_por_id: ID do admin (para auditoria)
    """

    nome: str
    peso_kg: Decimal
    largura_cm: int
    altura_cm: int
    comprimento_cm: int
    ativo: bool = True
    criado_por_id: Optional[str] = None


@dataclass(frozen=True)
class AtualizarPerfilFreteInputDTO:
    """
    DTO de entrada para atualização parcial de perfil.

    Campos None são mantidos.
    """

    profile_id: str
    nome: Optional[str] = None
    peso_kg: Optional[Decimal] = None
    largura_cm: Optional[int] = None
    altura_cm: Optional[int] = None
    comprimento_cm: Optional[int] = None
    ativo: Optional[bool] = None
    alterado_por_id: Optional[str] = None


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class CotacaoFreteOutputDTO:
    """
    Resultado de uma cotação.

    Attributes:
        cep: CEP de destino formatado (00000-000)
        uf: UF de destino (None se desconhecida)
        opcoes: Opções ordenadas por preço e prazo
        cotado_em: Momento da cotação
    """

    cep: str
    uf: Optional[str]
    opcoes: List[ShippingOption]
    cotado_em: datetime = field(default_factory=datetime.now)

    def options_to_list(self) -> List[dict]:
        return [opcao.to_dict() for opcao in self.opcoes]

    def to_dict(self) -> dict:
        return {
            "zipCode": self.cep,
            "location": self.uf,
            "options": self.options_to_list(),
            "quotedAt": self.cotado_em.isoformat(),
        }


@dataclass
class FreteSelecionadoOutputDTO:
    """Frete escolhido, pronto para ser gravado no pedido."""

    dados: OrderShippingData

    def to_dict(self) -> dict:
        return self.dados.to_dict()


@dataclass
class DisponibilidadeFreteOutputDTO:
    """
    Disponibilidade de frete para um carrinho.

    Attributes:
        disponivel: True se todos os itens têm perfil ativo
        itens_sem_perfil: Itens sem perfil de frete utilizável
    """

    disponivel: bool
    itens_sem_perfil: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "available": self.disponivel,
            "missing": self.itens_sem_perfil,
        }


@dataclass
class PerfilFreteOutputDTO:
    """
    DTO de saída de perfil de frete.

    Contagens de uso só são preenchidas quando solicitadas.
    """

    id: str
    nome: str
    peso_kg: Decimal
    largura_cm: int
    altura_cm: int
    comprimento_cm: int
    ativo: bool
    criado_em: datetime
    atualizado_em: datetime
    total_produtos: Optional[int] = None
    total_planos: Optional[int] = None

    @classmethod
    def from_entity(
        cls,
        entity: ShippingProfileEntity,
        total_produtos: Optional[int] = None,
        total_planos: Optional[int] = None,
    ) -> "PerfilFreteOutputDTO":
        return cls(
            id=entity.id,
            nome=entity.nome,
            peso_kg=entity.peso_kg,
            largura_cm=entity.largura_cm,
            altura_cm=entity.altura_cm,
            comprimento_cm=entity.comprimento_cm,
            ativo=entity.ativo,
            criado_em=entity.criado_em,
            atualizado_em=entity.atualizado_em,
            total_produtos=total_produtos,
            total_planos=total_planos,
        )

    @property
    def em_uso(self) -> bool:
        return bool(self.total_produtos or self.total_planos)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.nome,
            "weightKg": float(self.peso_kg),
            "widthCm": self.largura_cm,
            "heightCm": self.altura_cm,
            "lengthCm": self.comprimento_cm,
            "isActive": self.ativo,
            "createdAt": self.criado_em.isoformat() if self.criado_em else None,
            "updatedAt": self.atualizado_em.isoformat() if self.atualizado_em else None,
        }
        if self.total_produtos is not None or self.total_planos is not None:
            data["_count"] = {
                "products": self.total_produtos or 0,
                "subscriptionPlans": self.total_planos or 0,
            }
        return data
