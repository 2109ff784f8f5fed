"""
Entidades do Domínio de Frete.

Este módulo define as entidades e value objects que encapsulam
as regras de negócio da cotação de frete.

Entidades:
- ShippingProfileEntity: Perfil de frete (caixa/peso padrão) cadastrado pelo admin
- Cep: CEP brasileiro normalizado, com resolução de UF
- Pacote: Carga resolvida (peso e dimensões) a ser cotada
- ShippingOption: Opção de frete oferecida ao cliente
- OrderShippingData: Frete escolhido, gravado no pedido
- Origens de carga: PerfilCargoSource, ProdutosCargoSource, PlanoCargoSource

Regras de Negócio Encapsuladas:
- Validação de CEP (00000-000 ou 00000000)
- Limites de peso (0 < peso ≤ 30kg) e dimensões (inteiros, 0 < d ≤ 100cm)
- Combinação de vários itens em um único pacote (empilhamento)
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import ClassVar, Dict, List, Optional, Sequence, Tuple, Union
import re
import uuid

from src.core.shared.exceptions import ValidationError


CENTAVOS = Decimal("0.01")


def arredondar_preco(valor: Decimal) -> Decimal:
    """Arredonda valor monetário para centavos (meio para cima)."""
    return Decimal(valor).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


# =============================================================================
# CEP
# =============================================================================

# Faixas de CEP por UF (inclusivas), conforme tabela dos Correios
FAIXAS_CEP_UF: Tuple[Tuple[int, int, str], ...] = (
    (1000000, 19999999, "SP"),
    (20000000, 28999999, "RJ"),
    (29000000, 29999999, "ES"),
    (30000000, 39999999, "MG"),
    (40000000, 48999999, "BA"),
    (49000000, 49999999, "SE"),
    (50000000, 56999999, "PE"),
    (57000000, 57999999, "AL"),
    (58000000, 58999999, "PB"),
    (59000000, 59999999, "RN"),
    (60000000, 63999999, "CE"),
    (64000000, 64999999, "PI"),
    (65000000, 65999999, "MA"),
    (66000000, 68899999, "PA"),
    (68900000, 68999999, "AP"),
    (69000000, 69299999, "AM"),
    (69300000, 69399999, "RR"),
    (69400000, 69899999, "AM"),
    (69900000, 69999999, "AC"),
    (70000000, 72799999, "DF"),
    (72800000, 72999999, "GO"),
    (73000000, 73699999, "DF"),
    (73700000, 76799999, "GO"),
    (76800000, 76999999, "RO"),
    (77000000, 77999999, "TO"),
    (78000000, 78899999, "MT"),
    (79000000, 79999999, "MS"),
    (80000000, 87999999, "PR"),
    (88000000, 89999999, "SC"),
    (90000000, 99999999, "RS"),
)

CEP_ENTRADA = re.compile(r"[0-9]{5}-?[0-9]{3}")
CEP_NORMALIZADO = re.compile(r"[0-9]{8}")

MENSAGEM_CEP_INVALIDO = "CEP inválido. Use o formato 00000-000 ou 00000000"


@dataclass(frozen=True)
class Cep:
    """
    Value Object: CEP brasileiro com 8 dígitos.

    Use Cep.parse() na fronteira (aceita hífen) e Cep.from_normalized()
    quando o valor já deveria estar normalizado.

    Example:
        cep = Cep.parse("01310-100")
        cep.digitos     # "01310100"
        cep.formatado   # "01310-100"
        cep.uf          # "SP"
    """

    digitos: str

    @classmethod
    def parse(cls, valor: Optional[str]) -> "Cep":
        """
        Valida e normaliza CEP informado pelo usuário.

        Args:
            valor: CEP no formato 00000-000 ou 00000000

        Returns:
            Cep normalizado

        Raises:
            ValidationError: Se formato inválido
        """
        if not isinstance(valor, str) or not CEP_ENTRADA.fullmatch(valor.strip()):
            raise ValidationError(MENSAGEM_CEP_INVALIDO, field="cep")
        return cls(valor.strip().replace("-", ""))

    @classmethod
    def from_normalized(cls, valor: Optional[str]) -> "Cep":
        """
        Constrói CEP a partir de valor já normalizado.

        Raises:
            ValidationError: Se não tiver exatamente 8 dígitos
        """
        if not isinstance(valor, str) or not CEP_NORMALIZADO.fullmatch(valor):
            raise ValidationError(MENSAGEM_CEP_INVALIDO, field="cep")
        return cls(valor)

    @property
    def formatado(self) -> str:
        return f"{self.digitos[:5]}-{self.digitos[5:]}"

    @property
    def uf(self) -> Optional[str]:
        """UF de destino, ou None se o CEP não pertence a nenhuma faixa."""
        numero = int(self.digitos)
        for inicio, fim, uf in FAIXAS_CEP_UF:
            if inicio <= numero <= fim:
                return uf
        return None

    def __str__(self) -> str:
        return self.digitos


# =============================================================================
# Pacote (carga resolvida)
# =============================================================================

@dataclass(frozen=True)
class Pacote:
    """
    Value Object: carga física a ser cotada.

    Attributes:
        peso_kg: Peso real em kg
        largura_cm: Largura em cm
        altura_cm: Altura em cm
        comprimento_cm: Comprimento em cm
    """

    peso_kg: Decimal
    largura_cm: int
    altura_cm: int
    comprimento_cm: int

    @classmethod
    def from_profile(cls, perfil: "ShippingProfileEntity") -> "Pacote":
        return cls(
            peso_kg=perfil.peso_kg,
            largura_cm=perfil.largura_cm,
            altura_cm=perfil.altura_cm,
            comprimento_cm=perfil.comprimento_cm,
        )

    @classmethod
    def combinar(cls, pacotes: Sequence["Pacote"]) -> "Pacote":
        """
        Combina vários itens em um único volume.

        Regra de empilhamento:
        - peso = soma dos pesos
        - altura = soma das alturas (caixas empilhadas)
        - largura = maior largura
        - comprimento = maior comprimento

        Raises:
            ValidationError: Se a lista estiver vazia
        """
        if not pacotes:
            raise ValidationError("Nenhum item informado para compor a carga", field="carga")

        if len(pacotes) == 1:
            return pacotes[0]

        return cls(
            peso_kg=sum((p.peso_kg for p in pacotes), Decimal("0")),
            largura_cm=max(p.largura_cm for p in pacotes),
            altura_cm=sum(p.altura_cm for p in pacotes),
            comprimento_cm=max(p.comprimento_cm for p in pacotes),
        )

    @property
    def volume_cm3(self) -> int:
        return self.largura_cm * self.altura_cm * self.comprimento_cm

    def peso_cubico(self, divisor: int = 6000) -> Decimal:
        """Peso volumétrico em kg (volume / divisor)."""
        return Decimal(self.volume_cm3) / Decimal(divisor)

    def peso_tarifavel(self, divisor: int = 6000) -> Decimal:
        """Maior entre peso real e peso cúbico."""
        return max(self.peso_kg, self.peso_cubico(divisor))

    def dimensoes(self) -> Dict[str, int]:
        return {
            "widthCm": self.largura_cm,
            "heightCm": self.altura_cm,
            "lengthCm": self.comprimento_cm,
        }


# =============================================================================
# Perfil de Frete
# =============================================================================

@dataclass
class ShippingProfileEntity:
    """
    Entidade de Domínio: Perfil de Frete.

    Modelo de caixa/peso reutilizável, associado a produtos e planos
    de assinatura. Produtos e planos referenciam o perfil, nunca o possuem.

    Invariantes:
    - Nome com 2 a 100 caracteres
    - 0 < peso_kg ≤ 30
    - Dimensões inteiras, 0 < d ≤ 100

    Example:
        perfil = ShippingProfileEntity.criar(
            nome="Caixa Pequena",
            peso_kg=Decimal("1.0"),
            largura_cm=20,
            altura_cm=10,
            comprimento_cm=15,
        )
        perfil.alternar_status()
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    nome: str = ""
    peso_kg: Decimal = Decimal("0")
    largura_cm: int = 0
    altura_cm: int = 0
    comprimento_cm: int = 0
    ativo: bool = True

    criado_em: datetime = field(default_factory=datetime.now)
    atualizado_em: datetime = field(default_factory=datetime.now)

    NOME_MIN_LENGTH: ClassVar[int] = 2
    NOME_MAX_LENGTH: ClassVar[int] = 100
    PESO_MAXIMO_KG: ClassVar[Decimal] = Decimal("30")
    DIMENSAO_MAXIMA_CM: ClassVar[int] = 100

    @classmethod
    def criar(
        cls,
        nome: str,
        peso_kg,
        largura_cm,
        altura_cm,
        comprimento_cm,
        ativo: bool = True,
    ) -> "ShippingProfileEntity":
        """
        Factory method para criar perfil com validações.

        Args:
            nome: Nome do perfil (2 a 100 caracteres)
            peso_kg: Peso em kg (aceita Decimal, int, float ou str)
            largura_cm: Largura em cm
            altura_cm: Altura em cm
            comprimento_cm: Comprimento em cm
            ativo: Se o perfil pode ser usado em cotações

        Returns:
            Nova instância de ShippingProfileEntity

        Raises:
            ValidationError: Se dados de entrada inválidos
        """
        cls._validar_nome(nome)

        return cls(
            nome=nome.strip(),
            peso_kg=cls._validar_peso(peso_kg),
            largura_cm=cls._validar_dimensao(largura_cm, "largura_cm", "Largura"),
            altura_cm=cls._validar_dimensao(altura_cm, "altura_cm", "Altura"),
            comprimento_cm=cls._validar_dimensao(comprimento_cm, "comprimento_cm", "Comprimento"),
            ativo=bool(ativo),
        )

    @classmethod
    def _validar_nome(cls, nome: str) -> None:
        """Valida nome do perfil."""
        if not nome or not nome.strip():
            raise ValidationError("Nome é obrigatório", field="nome")

        nome_limpo = nome.strip()

        if len(nome_limpo) < cls.NOME_MIN_LENGTH:
            raise ValidationError(
                f"Nome deve ter no mínimo {cls.NOME_MIN_LENGTH} caracteres",
                field="nome"
            )

        if len(nome_limpo) > cls.NOME_MAX_LENGTH:
            raise ValidationError(
                f"Nome deve ter no máximo {cls.NOME_MAX_LENGTH} caracteres",
                field="nome"
            )

    @classmethod
    def _validar_peso(cls, peso_kg) -> Decimal:
        """Valida e converte peso para Decimal."""
        if isinstance(peso_kg, bool):
            raise ValidationError("Peso inválido", field="peso_kg")

        try:
            peso = Decimal(str(peso_kg))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError("Peso inválido", field="peso_kg")

        if not peso.is_finite() or peso <= 0:
            raise ValidationError("Peso deve ser positivo", field="peso_kg")

        if peso > cls.PESO_MAXIMO_KG:
            raise ValidationError("Peso máximo de 30kg", field="peso_kg")

        return peso

    @classmethod
    def _validar_dimensao(cls, valor, campo: str, rotulo: str) -> int:
        """Valida dimensão inteira em centímetros."""
        if isinstance(valor, bool) or not isinstance(valor, (int, str, Decimal, float)):
            raise ValidationError(f"{rotulo} deve ser um número inteiro", field=campo)

        try:
            numero = Decimal(str(valor))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{rotulo} deve ser um número inteiro", field=campo)

        if not numero.is_finite() or numero != numero.to_integral_value():
            raise ValidationError(f"{rotulo} deve ser um número inteiro", field=campo)

        if numero <= 0:
            raise ValidationError(f"{rotulo} deve ser positiva", field=campo)

        if numero > cls.DIMENSAO_MAXIMA_CM:
            raise ValidationError(
                f"{rotulo} máxima de {cls.DIMENSAO_MAXIMA_CM}cm",
                field=campo
            )

        return int(numero)

    def atualizar(
        self,
        nome: Optional[str] = None,
        peso_kg=None,
        largura_cm=None,
        altura_cm=None,
        comprimento_cm=None,
        ativo: Optional[bool] = None,
    ) -> List[str]:
        """
        Atualiza campos informados (None = manter valor atual).

        Todos os valores são validados antes de qualquer alteração,
        de modo que uma atualização inválida não deixa o perfil
        parcialmente modificado.

        Returns:
            Lista com os nomes dos campos efetivamente alterados

        Raises:
            ValidationError: Se algum valor for inválido
        """
        novos = {}

        if nome is not None:
            self._validar_nome(nome)
            novos["nome"] = nome.strip()
        if peso_kg is not None:
            novos["peso_kg"] = self._validar_peso(peso_kg)
        if largura_cm is not None:
            novos["largura_cm"] = self._validar_dimensao(largura_cm, "largura_cm", "Largura")
        if altura_cm is not None:
            novos["altura_cm"] = self._validar_dimensao(altura_cm, "altura_cm", "Altura")
        if comprimento_cm is not None:
            novos["comprimento_cm"] = self._validar_dimensao(
                comprimento_cm, "comprimento_cm", "Comprimento"
            )
        if ativo is not None:
            novos["ativo"] = bool(ativo)

        alterados = [
            campo for campo, valor in novos.items()
            if getattr(self, campo) != valor
        ]
        for campo in alterados:
            setattr(self, campo, novos[campo])

        if alterados:
            self._atualizar_timestamp()

        return alterados

    def alternar_status(self) -> bool:
        """
        Ativa/desativa o perfil.

        Returns:
            Novo valor de `ativo`
        """
        self.ativo = not self.ativo
        self._atualizar_timestamp()
        return self.ativo

    def _atualizar_timestamp(self) -> None:
        self.atualizado_em = datetime.now()

    @property
    def pacote(self) -> Pacote:
        return Pacote.from_profile(self)

    def __repr__(self) -> str:
        return (
            f"ShippingProfileEntity("
            f"id={self.id[:8]}..., "
            f"nome='{self.nome}', "
            f"peso_kg={self.peso_kg}, "
            f"dims={self.largura_cm}x{self.altura_cm}x{self.comprimento_cm}, "
            f"ativo={self.ativo}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparação por ID (identidade de entidade)."""
        if not isinstance(other, ShippingProfileEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


# =============================================================================
# Itens com frete (produtos e planos)
# =============================================================================

@dataclass(frozen=True)
class ItemFrete:
    """
    Produto ou plano de assinatura visto pelo domínio de frete.

    Attributes:
        id: ID do produto/plano
        nome: Nome para mensagens
        ativo: Se pode ser vendido
        perfil: Perfil de frete associado (None = usa perfil padrão)
    """

    id: str
    nome: str = ""
    ativo: bool = True
    perfil: Optional[ShippingProfileEntity] = None


# =============================================================================
# Origens da carga (variante com três casos)
# =============================================================================

@dataclass(frozen=True)
class PerfilCargoSource:
    """Carga definida diretamente por um perfil de frete."""

    profile_id: str


@dataclass(frozen=True)
class ProdutosCargoSource:
    """Carga derivada de uma lista de produtos (ids repetidos = quantidade)."""

    product_ids: Tuple[str, ...]


@dataclass(frozen=True)
class PlanoCargoSource:
    """Carga derivada do perfil associado a um plano de assinatura."""

    plan_id: str


CargoSource = Union[PerfilCargoSource, ProdutosCargoSource, PlanoCargoSource]


# =============================================================================
# Opções de frete
# =============================================================================

@dataclass(frozen=True)
class ShippingOption:
    """
    Value Object: opção de frete oferecida ao cliente.

    Efêmera: só é persistida (como OrderShippingData) quando
    o cliente a escolhe no checkout.

    Invariantes:
    - preco ≥ 0 (arredondado em centavos)
    - prazo_dias inteiro > 0
    """

    id: str
    transportadora: str
    servico: str
    preco: Decimal
    prazo_dias: int
    prazo_descricao: str = ""
    recomendado: bool = False

    def __post_init__(self):
        preco = Decimal(self.preco)
        if not preco.is_finite() or preco < 0:
            raise ValueError(f"Preço de frete inválido: {self.preco}")
        if isinstance(self.prazo_dias, bool) or not isinstance(self.prazo_dias, int) or self.prazo_dias <= 0:
            raise ValueError(f"Prazo de entrega inválido: {self.prazo_dias}")
        object.__setattr__(self, "preco", arredondar_preco(preco))

    @property
    def nome(self) -> str:
        return f"{self.transportadora} {self.servico}"

    @property
    def gratuito(self) -> bool:
        return self.preco == 0

    def chave_ordenacao(self) -> Tuple[Decimal, int, str]:
        """Preço crescente, depois prazo crescente, depois id."""
        return (self.preco, self.prazo_dias, self.id)

    def to_dict(self) -> dict:
        return {
            "optionId": self.id,
            "carrier": self.transportadora,
            "service": self.servico,
            "name": self.nome,
            "price": float(self.preco),
            "deliveryDays": self.prazo_dias,
            "deliveryTime": self.prazo_descricao,
            "recommended": self.recomendado,
        }


@dataclass(frozen=True)
class OrderShippingData:
    """
    Frete selecionado no checkout, gravado no pedido.

    Imutável após a criação: faz parte da trilha de auditoria
    do pedido. Preço e prazo sempre vêm de uma ShippingOption
    efetivamente oferecida pelo calculador.
    """

    option_id: str
    transportadora: str
    servico: str
    preco: Decimal
    prazo_dias: int
    cep_destino: str
    cep_origem: str
    peso_total_kg: Decimal
    largura_cm: int
    altura_cm: int
    comprimento_cm: int
    cotado_em: datetime
    data_entrega_estimada: Optional[datetime] = None

    @classmethod
    def criar(
        cls,
        opcao: ShippingOption,
        destino: Cep,
        origem: Cep,
        pacote: Pacote,
        cotado_em: Optional[datetime] = None,
    ) -> "OrderShippingData":
        """
        Monta dados de frete do pedido a partir da opção escolhida.

        A data estimada de entrega é o momento da cotação somado
        ao prazo (em dias) da opção.
        """
        cotado_em = cotado_em or datetime.now()
        return cls(
            option_id=opcao.id,
            transportadora=opcao.transportadora,
            servico=opcao.servico,
            preco=opcao.preco,
            prazo_dias=opcao.prazo_dias,
            cep_destino=destino.digitos,
            cep_origem=origem.digitos,
            peso_total_kg=pacote.peso_kg,
            largura_cm=pacote.largura_cm,
            altura_cm=pacote.altura_cm,
            comprimento_cm=pacote.comprimento_cm,
            cotado_em=cotado_em,
            data_entrega_estimada=cotado_em + timedelta(days=opcao.prazo_dias),
        )

    def to_dict(self) -> dict:
        return {
            "optionId": self.option_id,
            "carrier": self.transportadora,
            "service": self.servico,
            "price": float(self.preco),
            "deliveryDays": self.prazo_dias,
            "destinationZipCode": self.cep_destino,
            "originZipCode": self.cep_origem,
            "totalWeightKg": float(self.peso_total_kg),
            "dimensions": {
                "widthCm": self.largura_cm,
                "heightCm": self.altura_cm,
                "lengthCm": self.comprimento_cm,
            },
            "quotedAt": self.cotado_em.isoformat(),
            "estimatedDeliveryDate": (
                self.data_entrega_estimada.isoformat()
                if self.data_entrega_estimada else None
            ),
        }
