"""
Domain Events do Domínio de Frete.

Eventos disparados quando o catálogo de perfis de frete muda.
A cotação em si não gera eventos: é uma consulta sem efeitos colaterais.

Eventos:
- PerfilFreteCriadoEvent: Novo perfil cadastrado
- PerfilFreteAtualizadoEvent: Peso/dimensões/nome alterados
- PerfilFreteStatusAlteradoEvent: Perfil ativado ou desativado
- PerfilFreteExcluidoEvent: Perfil removido

Uso:
    with uow:
        perfil = ShippingProfileEntity.criar(...)
        repo.save(perfil)
        uow.publish_event(PerfilFreteCriadoEvent(aggregate_id=perfil.id, ...))
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.core.shared.events import DomainEvent


AGGREGATE_TYPE = "ShippingProfile"


@dataclass
class PerfilFreteCriadoEvent(DomainEvent):
    """
    Evento: Perfil de frete foi criado.

    Handlers típicos:
    - Registrar métrica de catálogo
    - Auditoria

    Attributes:
        nome: Nome do perfil
        peso_kg: Peso (str para serialização JSON exata)
        dimensoes: "LxAxC" em centímetros
        criado_por_id: Admin responsável
    """

    nome: str = ""
    peso_kg: str = ""
    dimensoes: str = ""
    criado_por_id: Optional[str] = None

    def __post_init__(self):
        # Não chamar super().__post_init__() pois aggregate_id já está setado
        pass

    @property
    def aggregate_type(self) -> str:
        return AGGREGATE_TYPE

    def _get_event_data(self) -> Dict[str, Any]:
        data = {
            "nome": self.nome,
            "peso_kg": self.peso_kg,
            "dimensoes": self.dimensoes,
        }
        if self.criado_por_id:
            data["criado_por_id"] = self.criado_por_id
        return data


@dataclass
class PerfilFreteAtualizadoEvent(DomainEvent):
    """
    Evento: Dados do perfil foram alterados.

    Cotações futuras de produtos/planos vinculados passam a usar
    os novos valores.

    Attributes:
        campos_alterados: Nomes dos campos modificados
        alterado_por_id: Admin responsável
    """

    campos_alterados: List[str] = field(default_factory=list)
    alterado_por_id: Optional[str] = None

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return AGGREGATE_TYPE

    def _get_event_data(self) -> Dict[str, Any]:
        data = {"campos_alterados": list(self.campos_alterados)}
        if self.alterado_por_id:
            data["alterado_por_id"] = self.alterado_por_id
        return data


@dataclass
class PerfilFreteStatusAlteradoEvent(DomainEvent):
    """
    Evento: Perfil foi ativado ou desativado.

    Handlers típicos:
    - Alertar admins se um perfil desativado ainda está vinculado
      a produtos ou planos (cotações desses itens passam a falhar)

    Attributes:
        ativo: Novo status
    """

    ativo: bool = True

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return AGGREGATE_TYPE

    def _get_event_data(self) -> Dict[str, Any]:
        return {"ativo": self.ativo}


@dataclass
class PerfilFreteExcluidoEvent(DomainEvent):
    """Evento: Perfil de frete foi excluído."""

    nome: str = ""

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return AGGREGATE_TYPE

    def _get_event_data(self) -> Dict[str, Any]:
        return {"nome": self.nome}
