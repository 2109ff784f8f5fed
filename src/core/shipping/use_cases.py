"""
Use Cases (Application Services) do Domínio de Frete.

Este módulo contém os casos de uso da aplicação, que orquestram
a cotação de frete e a manutenção do catálogo de perfis.

Use Cases implementados:
- CalcularFreteService: Cota frete para um CEP e uma carga
- SelecionarFreteService: Confirma a opção escolhida no checkout
- VerificarDisponibilidadeService: Checa se itens têm perfil de frete
- ListarPerfisFreteService: Lista perfis (com contagem de uso opcional)
- ObterPerfilFreteService: Obtém perfil específico
- CriarPerfilFreteService: Cria perfil
- AtualizarPerfilFreteService: Altera perfil
- AlternarStatusPerfilFreteService: Ativa/desativa perfil
- ExcluirPerfilFreteService: Exclui perfil sem vínculos

Princípios:
- Um Use Case = Uma operação de negócio
- Dependências injetadas (DI)
- Cotação é somente leitura: sem UoW, sem eventos
"""

from decimal import Decimal
from typing import List, Optional, Tuple
import logging

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    DomainException,
    EntityNotFoundError,
    InfrastructureError,
    NoShippingOptionsError,
    ValidationError,
)

from .ports import (
    PlanShippingLookup,
    ProductShippingLookup,
    RateTable,
    ShippingProfileRepository,
)
from .entities import (
    CargoSource,
    Cep,
    ItemFrete,
    OrderShippingData,
    Pacote,
    PerfilCargoSource,
    PlanoCargoSource,
    ProdutosCargoSource,
    ShippingOption,
    ShippingProfileEntity,
)
from .dtos import (
    AtualizarPerfilFreteInputDTO,
    CotacaoFreteOutputDTO,
    CotarFreteInputDTO,
    CriarPerfilFreteInputDTO,
    DisponibilidadeFreteOutputDTO,
    FreteSelecionadoOutputDTO,
    PerfilFreteOutputDTO,
    SelecionarFreteInputDTO,
    VerificarDisponibilidadeInputDTO,
)
from .events import (
    PerfilFreteAtualizadoEvent,
    PerfilFreteCriadoEvent,
    PerfilFreteExcluidoEvent,
    PerfilFreteStatusAlteradoEvent,
)

logger = logging.getLogger(__name__)


# Perfil usado por produtos/planos sem perfil de frete cadastrado
PACOTE_PADRAO = Pacote(
    peso_kg=Decimal("0.5"),
    largura_cm=20,
    altura_cm=10,
    comprimento_cm=30,
)

OPCAO_ADMIN_ID = "admin_frete_gratis"


def _perfil_nao_encontrado(profile_id: str) -> EntityNotFoundError:
    return EntityNotFoundError(
        f"Perfil de frete {profile_id} não encontrado",
        entity_type="ShippingProfile",
        entity_id=profile_id,
    )


# =============================================================================
# Resolução da carga
# =============================================================================

class ResolvedorCarga:
    """
    Resolve a origem da carga (perfil, produtos ou plano) em um Pacote.

    Cada caso da variante usa seu próprio colaborador:
    - PerfilCargoSource → ShippingProfileRepository
    - ProdutosCargoSource → ProductShippingLookup
    - PlanoCargoSource → PlanShippingLookup

    Regras:
    - ID desconhecido, item inativo ou perfil inativo → EntityNotFoundError
    - Produto/plano sem perfil → pacote padrão
    - Vários produtos → Pacote.combinar (empilhamento)
    """

    def __init__(
        self,
        profile_repo: ShippingProfileRepository,
        product_lookup: ProductShippingLookup,
        plan_lookup: PlanShippingLookup,
        pacote_padrao: Pacote = PACOTE_PADRAO,
    ):
        self.profile_repo = profile_repo
        self.product_lookup = product_lookup
        self.plan_lookup = plan_lookup
        self.pacote_padrao = pacote_padrao

    def resolver(self, origem: CargoSource) -> Pacote:
        if isinstance(origem, PerfilCargoSource):
            return self._do_perfil(origem.profile_id)
        if isinstance(origem, ProdutosCargoSource):
            return self._dos_produtos(origem.product_ids)
        if isinstance(origem, PlanoCargoSource):
            return self._do_plano(origem.plan_id)
        raise ValidationError(f"Origem de carga desconhecida: {origem!r}", field="carga")

    def _do_perfil(self, profile_id: str) -> Pacote:
        perfil = self.profile_repo.get_by_id(profile_id)
        if not perfil or not perfil.ativo:
            raise _perfil_nao_encontrado(profile_id)
        return perfil.pacote

    def _dos_produtos(self, product_ids: Tuple[str, ...]) -> Pacote:
        unicos = list(dict.fromkeys(product_ids))
        encontrados = self.product_lookup.get_by_ids(unicos)

        pacotes = []
        for product_id in product_ids:
            item = encontrados.get(product_id)
            if not item or not item.ativo:
                raise EntityNotFoundError(
                    f"Produto {product_id} não encontrado",
                    entity_type="Product",
                    entity_id=product_id,
                )
            pacotes.append(self._pacote_do_item(item))

        return Pacote.combinar(pacotes)

    def _do_plano(self, plan_id: str) -> Pacote:
        item = self.plan_lookup.get_by_id(plan_id)
        if not item or not item.ativo:
            raise EntityNotFoundError(
                f"Plano {plan_id} não encontrado",
                entity_type="SubscriptionPlan",
                entity_id=plan_id,
            )
        return self._pacote_do_item(item)

    def _pacote_do_item(self, item: ItemFrete) -> Pacote:
        if item.perfil is None:
            logger.debug(f"Item {item.id} sem perfil de frete; usando pacote padrão")
            return self.pacote_padrao
        if not item.perfil.ativo:
            raise _perfil_nao_encontrado(item.perfil.id)
        return item.perfil.pacote


# =============================================================================
# Cotação
# =============================================================================

class CalcularFreteService:
    """
    Use Case: Calcular opções de frete.

    Fluxo:
    1. Validar CEP (8 dígitos) → ValidationError
    2. Resolver a carga (perfil | produtos | plano) → EntityNotFoundError
    3. Consultar a tabela de frete (falha → InfrastructureError)
    4. Sem opções → NoShippingOptionsError
    5. Admin: acrescentar uma opção gratuita com o prazo mais rápido
    6. Ordenar por preço, depois prazo

    Sem efeitos colaterais: a mesma entrada produz sempre a mesma
    lista (salvo mudança externa na tabela de frete).

    Example:
        service = CalcularFreteService(profile_repo, product_lookup, plan_lookup, rate_table)
        output = service.execute(
            CotarFreteInputDTO(cep="01310100", shipping_profile_id="perfil-1"),
            is_admin=False,
        )
        for opcao in output.opcoes:
            print(opcao.nome, opcao.preco)
    """

    def __init__(
        self,
        profile_repo: ShippingProfileRepository,
        product_lookup: ProductShippingLookup,
        plan_lookup: PlanShippingLookup,
        rate_table: RateTable,
        pacote_padrao: Optional[Pacote] = None,
    ):
        self.rate_table = rate_table
        self.resolvedor = ResolvedorCarga(
            profile_repo=profile_repo,
            product_lookup=product_lookup,
            plan_lookup=plan_lookup,
            pacote_padrao=pacote_padrao or PACOTE_PADRAO,
        )

    def execute(self, input_dto: CotarFreteInputDTO, is_admin: bool = False) -> CotacaoFreteOutputDTO:
        """
        Executa a cotação.

        Args:
            input_dto: CEP normalizado e origem da carga
            is_admin: Se o solicitante é administrador

        Returns:
            DTO com opções ordenadas

        Raises:
            ValidationError: CEP malformado ou carga ausente
            EntityNotFoundError: Perfil/produto/plano inexistente ou inativo
            NoShippingOptionsError: Nenhuma transportadora atende
            InfrastructureError: Falha de colaborador
        """
        destino, _pacote, opcoes = self.calcular_opcoes(input_dto, is_admin)
        return CotacaoFreteOutputDTO(cep=destino.formatado, uf=destino.uf, opcoes=opcoes)

    def calcular_opcoes(
        self,
        input_dto: CotarFreteInputDTO,
        is_admin: bool = False,
    ) -> Tuple[Cep, Pacote, List[ShippingOption]]:
        """Mesma cotação de execute(), devolvendo também CEP e pacote resolvidos."""
        destino = Cep.from_normalized(input_dto.cep)
        origem = input_dto.cargo_source()

        pacote = self._resolver_carga(origem)
        opcoes = self._consultar_tabela(pacote, destino)

        if not opcoes:
            logger.info(
                f"Nenhuma opção de frete para {destino.formatado} "
                f"({pacote.peso_kg}kg {pacote.largura_cm}x{pacote.altura_cm}x{pacote.comprimento_cm})"
            )
            raise NoShippingOptionsError()

        if is_admin:
            opcoes.append(self._opcao_admin(opcoes))

        opcoes.sort(key=ShippingOption.chave_ordenacao)

        logger.debug(
            f"Cotação para {destino.formatado}: "
            f"{[(o.id, str(o.preco), o.prazo_dias) for o in opcoes]}"
        )
        return destino, pacote, opcoes

    def _resolver_carga(self, origem: CargoSource) -> Pacote:
        try:
            return self.resolvedor.resolver(origem)
        except DomainException:
            raise
        except Exception as e:
            logger.exception(f"Falha ao resolver carga {origem!r}: {e}")
            raise InfrastructureError(
                f"Falha ao resolver carga: {e}",
                source="cargo_lookup",
            ) from e

    def _consultar_tabela(self, pacote: Pacote, destino: Cep) -> List[ShippingOption]:
        try:
            return list(self.rate_table.quote(pacote, destino))
        except DomainException:
            raise
        except Exception as e:
            logger.exception(f"Falha na tabela de frete para {destino.formatado}: {e}")
            raise InfrastructureError(
                f"Falha ao consultar tabela de frete: {e}",
                source="rate_table",
            ) from e

    @staticmethod
    def _opcao_admin(opcoes: List[ShippingOption]) -> ShippingOption:
        """Frete grátis de administrador, com o prazo da opção mais rápida."""
        prazo = min(opcao.prazo_dias for opcao in opcoes)
        return ShippingOption(
            id=OPCAO_ADMIN_ID,
            transportadora="Admin",
            servico="Frete Grátis (Admin)",
            preco=Decimal("0"),
            prazo_dias=prazo,
            prazo_descricao=f"{prazo} dias úteis",
        )


class SelecionarFreteService:
    """
    Use Case: Confirmar a opção de frete escolhida no checkout.

    Refaz a cotação com os mesmos dados e só aceita um option_id
    que esteja entre as opções oferecidas. Assim o preço e o prazo
    gravados no pedido sempre correspondem a uma cotação real.
    """

    def __init__(self, calcular_service: CalcularFreteService, origem_cep: str):
        self.calcular_service = calcular_service
        self.origem = Cep.from_normalized(origem_cep)

    def execute(
        self,
        input_dto: SelecionarFreteInputDTO,
        is_admin: bool = False,
    ) -> FreteSelecionadoOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se a opção não foi oferecida nesta cotação
        """
        destino, pacote, opcoes = self.calcular_service.calcular_opcoes(
            input_dto.cotacao, is_admin
        )

        opcao = next((o for o in opcoes if o.id == input_dto.option_id), None)
        if opcao is None:
            raise EntityNotFoundError(
                f"Opção de frete {input_dto.option_id} não disponível para esta cotação",
                entity_type="ShippingOption",
                entity_id=input_dto.option_id,
            )

        dados = OrderShippingData.criar(
            opcao=opcao,
            destino=destino,
            origem=self.origem,
            pacote=pacote,
        )

        logger.info(
            f"Frete selecionado: {opcao.id} R$ {opcao.preco} "
            f"para {destino.formatado}"
        )
        return FreteSelecionadoOutputDTO(dados=dados)


class VerificarDisponibilidadeService:
    """
    Use Case: Verificar se produtos/plano podem ter frete calculado.

    Diferente da cotação, não usa o pacote padrão: aponta todos os
    itens sem perfil ativo, para o admin corrigir o cadastro.
    """

    def __init__(self, product_lookup: ProductShippingLookup, plan_lookup: PlanShippingLookup):
        self.product_lookup = product_lookup
        self.plan_lookup = plan_lookup

    def execute(self, input_dto: VerificarDisponibilidadeInputDTO) -> DisponibilidadeFreteOutputDTO:
        pendentes = []

        unicos = list(dict.fromkeys(input_dto.product_ids))
        encontrados = self.product_lookup.get_by_ids(unicos) if unicos else {}
        for product_id in unicos:
            motivo = self._motivo(encontrados.get(product_id))
            if motivo:
                pendentes.append({"type": "product", "id": product_id, "reason": motivo})

        if input_dto.plan_id:
            motivo = self._motivo(self.plan_lookup.get_by_id(input_dto.plan_id))
            if motivo:
                pendentes.append({"type": "plan", "id": input_dto.plan_id, "reason": motivo})

        return DisponibilidadeFreteOutputDTO(
            disponivel=not pendentes,
            itens_sem_perfil=pendentes,
        )

    @staticmethod
    def _motivo(item: Optional[ItemFrete]) -> Optional[str]:
        if item is None:
            return "not_found"
        if item.perfil is None:
            return "no_profile"
        if not item.perfil.ativo:
            return "inactive_profile"
        return None


# =============================================================================
# Catálogo de perfis (admin)
# =============================================================================

class ListarPerfisFreteService:
    """
    Use Case: Listar perfis de frete.

    Somente leitura (sem UoW).
    """

    def __init__(self, profile_repo: ShippingProfileRepository):
        self.profile_repo = profile_repo

    def execute(
        self,
        apenas_ativos: bool = False,
        incluir_uso: bool = False,
    ) -> List[PerfilFreteOutputDTO]:
        """
        Args:
            apenas_ativos: Omite perfis desativados
            incluir_uso: Inclui contagem de produtos e planos vinculados

        Returns:
            Perfis ordenados por nome
        """
        perfis = self.profile_repo.list_all(apenas_ativos=apenas_ativos)

        if not incluir_uso:
            return [PerfilFreteOutputDTO.from_entity(p) for p in perfis]

        resultado = []
        for perfil in perfis:
            produtos, planos = self.profile_repo.count_usage(perfil.id)
            resultado.append(PerfilFreteOutputDTO.from_entity(perfil, produtos, planos))
        return resultado


class ObterPerfilFreteService:
    """Use Case: Obter perfil de frete com contagem de uso."""

    def __init__(self, profile_repo: ShippingProfileRepository):
        self.profile_repo = profile_repo

    def execute(self, profile_id: str) -> PerfilFreteOutputDTO:
        perfil = self.profile_repo.get_by_id(profile_id)
        if not perfil:
            raise _perfil_nao_encontrado(profile_id)

        produtos, planos = self.profile_repo.count_usage(profile_id)
        return PerfilFreteOutputDTO.from_entity(perfil, produtos, planos)


class CriarPerfilFreteService:
    """
    Use Case: Criar perfil de frete.

    Fluxo:
    1. Criar entidade (validações na entidade)
    2. Persistir via repositório
    3. Disparar PerfilFreteCriadoEvent
    """

    def __init__(self, profile_repo: ShippingProfileRepository, uow: UnitOfWork):
        self.profile_repo = profile_repo
        self.uow = uow

    def execute(self, input_dto: CriarPerfilFreteInputDTO) -> PerfilFreteOutputDTO:
        """
        Raises:
            ValidationError: Se dados inválidos
        """
        with self.uow:
            perfil = ShippingProfileEntity.criar(
                nome=input_dto.nome,
                peso_kg=input_dto.peso_kg,
                largura_cm=input_dto.largura_cm,
                altura_cm=input_dto.altura_cm,
                comprimento_cm=input_dto.comprimento_cm,
                ativo=input_dto.ativo,
            )

            self.profile_repo.save(perfil)

            self.uow.publish_event(
                PerfilFreteCriadoEvent(
                    aggregate_id=perfil.id,
                    nome=perfil.nome,
                    peso_kg=str(perfil.peso_kg),
                    dimensoes=f"{perfil.largura_cm}x{perfil.altura_cm}x{perfil.comprimento_cm}",
                    criado_por_id=input_dto.criado_por_id,
                )
            )

        return PerfilFreteOutputDTO.from_entity(perfil, 0, 0)


class AtualizarPerfilFreteService:
    """
    Use Case: Atualizar perfil de frete.

    Atualização parcial: campos None são mantidos. Só dispara
    evento quando algum campo mudou de fato.
    """

    def __init__(self, profile_repo: ShippingProfileRepository, uow: UnitOfWork):
        self.profile_repo = profile_repo
        self.uow = uow

    def execute(self, input_dto: AtualizarPerfilFreteInputDTO) -> PerfilFreteOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se perfil não existe
            ValidationError: Se algum valor for inválido
        """
        with self.uow:
            perfil = self.profile_repo.get_by_id(input_dto.profile_id)
            if not perfil:
                raise _perfil_nao_encontrado(input_dto.profile_id)

            alterados = perfil.atualizar(
                nome=input_dto.nome,
                peso_kg=input_dto.peso_kg,
                largura_cm=input_dto.largura_cm,
                altura_cm=input_dto.altura_cm,
                comprimento_cm=input_dto.comprimento_cm,
                ativo=input_dto.ativo,
            )

            if alterados:
                self.profile_repo.save(perfil)
                self.uow.publish_event(
                    PerfilFreteAtualizadoEvent(
                        aggregate_id=perfil.id,
                        campos_alterados=alterados,
                        alterado_por_id=input_dto.alterado_por_id,
                    )
                )
                if "ativo" in alterados:
                    self.uow.publish_event(
                        PerfilFreteStatusAlteradoEvent(
                            aggregate_id=perfil.id,
                            ativo=perfil.ativo,
                        )
                    )

        produtos, planos = self.profile_repo.count_usage(perfil.id)
        return PerfilFreteOutputDTO.from_entity(perfil, produtos, planos)


class AlternarStatusPerfilFreteService:
    """
    Use Case: Ativar/desativar perfil de frete.

    Perfis desativados deixam de ser aceitos na cotação
    (EntityNotFoundError), inclusive quando vinculados a produtos/planos.
    """

    def __init__(self, profile_repo: ShippingProfileRepository, uow: UnitOfWork):
        self.profile_repo = profile_repo
        self.uow = uow

    def execute(self, profile_id: str) -> PerfilFreteOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se perfil não existe
        """
        with self.uow:
            perfil = self.profile_repo.get_by_id(profile_id)
            if not perfil:
                raise _perfil_nao_encontrado(profile_id)

            perfil.alternar_status()
            self.profile_repo.save(perfil)

            self.uow.publish_event(
                PerfilFreteStatusAlteradoEvent(
                    aggregate_id=perfil.id,
                    ativo=perfil.ativo,
                )
            )

        return PerfilFreteOutputDTO.from_entity(perfil)


class ExcluirPerfilFreteService:
    """
    Use Case: Excluir perfil de frete.

    Regra: perfil vinculado a produtos ou planos não pode ser excluído
    (desative-o em vez disso).
    """

    def __init__(self, profile_repo: ShippingProfileRepository, uow: UnitOfWork):
        self.profile_repo = profile_repo
        self.uow = uow

    def execute(self, profile_id: str) -> None:
        """
        Raises:
            EntityNotFoundError: Se perfil não existe
            BusinessRuleViolationError: Se perfil está em uso
        """
        with self.uow:
            perfil = self.profile_repo.get_by_id(profile_id)
            if not perfil:
                raise _perfil_nao_encontrado(profile_id)

            produtos, planos = self.profile_repo.count_usage(profile_id)
            if produtos or planos:
                raise BusinessRuleViolationError(
                    f"Não é possível excluir o perfil pois ele está vinculado a "
                    f"{produtos} produto(s) e {planos} plano(s)",
                    rule="perfil_em_uso",
                )

            self.profile_repo.delete(profile_id)

            self.uow.publish_event(
                PerfilFreteExcluidoEvent(
                    aggregate_id=profile_id,
                    nome=perfil.nome,
                )
            )

        logger.info(f"Perfil de frete excluído: {profile_id}")
