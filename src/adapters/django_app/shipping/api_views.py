"""
API Views JSON para o domínio de Frete.

Endpoints públicos (checkout):
- POST /shipping/quote/ - Cotar frete
- POST /shipping/select/ - Confirmar opção escolhida
- POST /shipping/availability/ - Checar se itens têm perfil de frete

Endpoints de administração (usuário is_staff):
- GET /shipping/profiles/ - Listar perfis
- POST /shipping/profiles/ - Criar perfil
- GET /shipping/profiles/<id>/ - Obter perfil
- PATCH /shipping/profiles/<id>/ - Atualizar perfil
- DELETE /shipping/profiles/<id>/ - Excluir perfil
- POST /shipping/profiles/<id>/toggle-active/ - Ativar/desativar

Formato:
- Entrada: JSON (validado por Django Forms)
- Saída: JSON com estrutura {success, data/error, meta}

Autenticação:
- Session do Django; sem sessão a cotação segue como não-admin
"""

import json
import logging
from typing import Any, Dict, Optional, Type

from django import forms
from django.views import View
from django.http import JsonResponse, HttpRequest
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt

from src.core.shipping.dtos import (
    AtualizarPerfilFreteInputDTO,
    CotarFreteInputDTO,
    CriarPerfilFreteInputDTO,
    SelecionarFreteInputDTO,
    VerificarDisponibilidadeInputDTO,
)
from src.core.shared.exceptions import (
    AuthorizationError,
    BusinessRuleViolationError,
    DomainException,
    EntityNotFoundError,
    InfrastructureError,
    ValidationError,
)
from src.config.container import get_container

from .forms import (
    ShippingAvailabilityForm,
    ShippingProfileForm,
    ShippingProfileUpdateForm,
    ShippingQuoteForm,
    ShippingSelectForm,
    first_error,
    first_error_field,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Decorators e Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais

    Returns:
        JsonResponse formatada
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status, safe=False)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValueError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValueError("JSON inválido: esperado um objeto")
    return data


def get_user_id(request: HttpRequest) -> Optional[str]:
    """Extrai ID do usuário do request."""
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return str(user.id)
    return None


def is_admin(request: HttpRequest) -> bool:
    """Usuário autenticado com is_staff. Sem sessão → False."""
    user = getattr(request, 'user', None)
    return bool(user is not None and user.is_authenticated and user.is_staff)


def validate_form(form_class: Type[forms.Form], data: Dict) -> Dict:
    """
    Valida dados com o form informado.

    Raises:
        ValidationError: Com a primeira mensagem de erro do form
    """
    form = form_class(data)
    if not form.is_valid():
        raise ValidationError(first_error(form), field=first_error_field(form))
    return form.cleaned_data


def quote_dto_from(cleaned: Dict) -> CotarFreteInputDTO:
    return CotarFreteInputDTO(
        cep=cleaned['cep'],
        shipping_profile_id=cleaned.get('shippingProfileId'),
        product_ids=tuple(cleaned.get('productIds') or ()),
        plan_id=cleaned.get('planId'),
    )


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    internal_error_message = "Erro interno do servidor"

    def get_container(self):
        """Retorna container de DI."""
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Trata exceções e retorna resposta apropriada.

        Mapeamento:
        - ValidationError / ValueError → 400
        - AuthorizationError → 401 (sem sessão) / 403 (sem permissão)
        - EntityNotFoundError → 404
        - BusinessRuleViolationError → 422
        - InfrastructureError / inesperado → 500 com mensagem genérica
        """
        if isinstance(e, ValidationError):
            return json_response(
                success=False,
                error=e.message,
                status=400,
                meta={'field': e.field}
            )

        if isinstance(e, AuthorizationError):
            return json_response(
                success=False,
                error=e.message,
                status=403 if e.authenticated else 401
            )

        if isinstance(e, EntityNotFoundError):
            return json_response(
                success=False,
                error=e.message,
                status=404
            )

        if isinstance(e, BusinessRuleViolationError):
            return json_response(
                success=False,
                error=e.message,
                status=422,
                meta={'rule': e.rule, 'code': e.code}
            )

        if isinstance(e, InfrastructureError):
            logger.exception(f"Falha de infraestrutura ({e.source}): {e.message}")
            return json_response(
                success=False,
                error=self.internal_error_message,
                status=500
            )

        if isinstance(e, DomainException):
            return json_response(
                success=False,
                error=e.message,
                status=400
            )

        if isinstance(e, ValueError):
            return json_response(
                success=False,
                error=str(e),
                status=400
            )

        # Erro inesperado
        logger.exception(f"Erro inesperado na API: {e}")
        return json_response(
            success=False,
            error=self.internal_error_message,
            status=500
        )


@method_decorator(csrf_exempt, name='dispatch')
class AdminAPIView(BaseAPIView):
    """
    View base para endpoints administrativos.

    Sem sessão → 401; sessão sem is_staff → 403.
    """

    def dispatch(self, request, *args, **kwargs):
        user = getattr(request, 'user', None)
        try:
            if user is None or not user.is_authenticated:
                raise AuthorizationError("Não autenticado")
            if not user.is_staff:
                raise AuthorizationError("Acesso negado", authenticated=True)
        except AuthorizationError as e:
            return self.handle_exception(e)
        return super().dispatch(request, *args, **kwargs)


# =============================================================================
# Checkout API Views
# =============================================================================

class ShippingQuoteAPIView(BaseAPIView):
    """
    POST /shipping/quote/ - Cota frete.

    Body JSON:
    {
        "cep": "01310-100",
        "shippingProfileId": "uuid (opcional)",
        "productIds": ["uuid", ...] (opcional),
        "planId": "uuid (opcional)"
    }
    """

    internal_error_message = "Erro ao calcular frete. Tente novamente."

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            data = self.parse_body(request)
            cleaned = validate_form(ShippingQuoteForm, data)

            admin = is_admin(request)
            if admin:
                logger.info("Cotação de frete por admin: frete grátis habilitado")

            calcular_service = self.get_service('calcular_frete_service')
            output = calcular_service.execute(quote_dto_from(cleaned), is_admin=admin)

            return json_response(
                success=True,
                data=output.options_to_list(),
                meta={
                    'cep': output.cep,
                    'uf': output.uf,
                    'quotedAt': output.cotado_em.isoformat(),
                }
            )

        except Exception as e:
            return self.handle_exception(e)


class ShippingSelectAPIView(BaseAPIView):
    """
    POST /shipping/select/ - Confirma a opção escolhida.

    Body JSON: mesmo da cotação + "optionId".
    Responde com os dados de frete a gravar no pedido.
    """

    internal_error_message = "Erro ao calcular frete. Tente novamente."

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            data = self.parse_body(request)
            cleaned = validate_form(ShippingSelectForm, data)

            selecionar_service = self.get_service('selecionar_frete_service')
            output = selecionar_service.execute(
                SelecionarFreteInputDTO(
                    cotacao=quote_dto_from(cleaned),
                    option_id=cleaned['optionId'],
                ),
                is_admin=is_admin(request),
            )

            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class ShippingAvailabilityAPIView(BaseAPIView):
    """POST /shipping/availability/ - Itens sem perfil de frete."""

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            data = self.parse_body(request)
            cleaned = validate_form(ShippingAvailabilityForm, data)

            service = self.get_service('verificar_disponibilidade_service')
            output = service.execute(
                VerificarDisponibilidadeInputDTO(
                    product_ids=tuple(cleaned.get('productIds') or ()),
                    plan_id=cleaned.get('planId'),
                )
            )

            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


# =============================================================================
# Admin API Views - Perfis de Frete
# =============================================================================

class ShippingProfileAPIListView(AdminAPIView):
    """
    API para listar e criar perfis.

    GET /shipping/profiles/?activeOnly=true&includeUsage=true
    POST /shipping/profiles/
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            apenas_ativos = request.GET.get('activeOnly', '').lower() in ('1', 'true')
            incluir_uso = request.GET.get('includeUsage', '').lower() in ('1', 'true')

            listar_service = self.get_service('listar_perfis_frete_service')
            perfis = listar_service.execute(
                apenas_ativos=apenas_ativos,
                incluir_uso=incluir_uso,
            )

            return json_response(
                success=True,
                data=[p.to_dict() for p in perfis],
                meta={'total': len(perfis)}
            )

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Cria perfil.

        Body JSON:
        {
            "name": "Caixa Pequena",
            "weightKg": 1.0,
            "widthCm": 20,
            "heightCm": 10,
            "lengthCm": 15,
            "isActive": true (opcional)
        }
        """
        try:
            data = self.parse_body(request)
            cleaned = validate_form(ShippingProfileForm, data)

            criar_service = self.get_service('criar_perfil_frete_service')
            output = criar_service.execute(
                CriarPerfilFreteInputDTO(
                    nome=cleaned['name'],
                    peso_kg=cleaned['weightKg'],
                    largura_cm=cleaned['widthCm'],
                    altura_cm=cleaned['heightCm'],
                    comprimento_cm=cleaned['lengthCm'],
                    ativo=cleaned['isActive'],
                    criado_por_id=get_user_id(request),
                )
            )

            logger.info(f"API: Perfil de frete criado: {output.id}")

            return json_response(success=True, data=output.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class ShippingProfileAPIDetailView(AdminAPIView):
    """
    API para operações em perfil específico.

    GET / PATCH / DELETE /shipping/profiles/<id>/
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            obter_service = self.get_service('obter_perfil_frete_service')
            perfil = obter_service.execute(pk)

            return json_response(success=True, data=perfil.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        """Atualização parcial: campos ausentes são mantidos."""
        try:
            data = self.parse_body(request)
            cleaned = validate_form(ShippingProfileUpdateForm, data)

            atualizar_service = self.get_service('atualizar_perfil_frete_service')
            output = atualizar_service.execute(
                AtualizarPerfilFreteInputDTO(
                    profile_id=pk,
                    nome=cleaned.get('name'),
                    peso_kg=cleaned.get('weightKg'),
                    largura_cm=cleaned.get('widthCm'),
                    altura_cm=cleaned.get('heightCm'),
                    comprimento_cm=cleaned.get('lengthCm'),
                    ativo=cleaned.get('isActive'),
                    alterado_por_id=get_user_id(request),
                )
            )

            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            excluir_service = self.get_service('excluir_perfil_frete_service')
            excluir_service.execute(pk)

            return json_response(
                success=True,
                meta={'message': 'Perfil de frete excluído com sucesso'}
            )

        except Exception as e:
            return self.handle_exception(e)


class ShippingProfileAPIToggleView(AdminAPIView):
    """POST /shipping/profiles/<id>/toggle-active/"""

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            alternar_service = self.get_service('alternar_status_perfil_frete_service')
            output = alternar_service.execute(pk)

            return json_response(
                success=True,
                data=output.to_dict(),
                meta={'toggledAt': timezone.now().isoformat()}
            )

        except Exception as e:
            return self.handle_exception(e)
