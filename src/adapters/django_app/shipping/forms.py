"""
Django Forms para validação de entrada da API de frete.

Forms são DRIVING ADAPTERS que validam dados antes de
passar para os Use Cases.

Responsabilidades:
- Validação estrutural (campos obrigatórios, tipos, formato de CEP/UUID)
- Normalização (CEP → 8 dígitos)
- Mensagens de erro amigáveis

Os nomes dos campos seguem o JSON público (camelCase).
Limites de negócio são revalidados na ShippingProfileEntity.
"""

import uuid

from django import forms
from django.core.exceptions import ValidationError

from src.core.shipping.dtos import MENSAGEM_SEM_ORIGEM_CARGA
from src.core.shipping.entities import MENSAGEM_CEP_INVALIDO


CEP_REGEX = r'^[0-9]{5}-?[0-9]{3}\Z'


def first_error(form: forms.Form) -> str:
    """Primeira mensagem de erro do form (campo ou non_field)."""
    for errors in form.errors.values():
        if errors:
            return errors[0]
    return 'Dados inválidos'


def first_error_field(form: forms.Form):
    for field, errors in form.errors.items():
        if errors:
            return None if field == '__all__' else field
    return None


class UUIDListField(forms.Field):
    """Lista JSON de UUIDs, devolvida como lista de strings."""

    default_error_messages = {
        'invalid_list': 'Informe uma lista de IDs',
        'invalid': 'ID inválido',
    }

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('required', False)
        super().__init__(*args, **kwargs)

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValidationError(self.error_messages['invalid_list'], code='invalid_list')

        ids = []
        for item in value:
            try:
                ids.append(str(uuid.UUID(str(item))))
            except ValueError:
                raise ValidationError(self.error_messages['invalid'], code='invalid')
        return ids


def _uuid_field(mensagem: str) -> forms.UUIDField:
    return forms.UUIDField(
        required=False,
        error_messages={'invalid': mensagem},
    )


class ShippingQuoteForm(forms.Form):
    """
    Form para cotação de frete.

    Valida QuoteRequest antes de montar CotarFreteInputDTO.
    Exige ao menos uma origem de carga.
    """

    cep = forms.RegexField(
        regex=CEP_REGEX,
        error_messages={
            'required': MENSAGEM_CEP_INVALIDO,
            'invalid': MENSAGEM_CEP_INVALIDO,
        },
    )

    shippingProfileId = _uuid_field('ID do perfil inválido')

    productIds = UUIDListField(
        error_messages={'invalid': 'ID de produto inválido'},
    )

    planId = _uuid_field('ID do plano inválido')

    def clean_cep(self):
        """Normaliza para 8 dígitos."""
        return self.cleaned_data['cep'].replace('-', '')

    def clean_shippingProfileId(self):
        value = self.cleaned_data.get('shippingProfileId')
        return str(value) if value else None

    def clean_planId(self):
        value = self.cleaned_data.get('planId')
        return str(value) if value else None

    def clean(self):
        cleaned = super().clean()
        if self.errors:
            return cleaned

        if not (
            cleaned.get('shippingProfileId')
            or cleaned.get('productIds')
            or cleaned.get('planId')
        ):
            raise ValidationError(MENSAGEM_SEM_ORIGEM_CARGA)
        return cleaned


class ShippingSelectForm(ShippingQuoteForm):
    """Cotação + opção escolhida no checkout."""

    optionId = forms.CharField(
        max_length=100,
        error_messages={'required': 'Selecione uma opção de frete'},
    )


class ShippingAvailabilityForm(forms.Form):
    """Itens do carrinho para checar disponibilidade de frete."""

    productIds = UUIDListField(
        error_messages={'invalid': 'ID de produto inválido'},
    )

    planId = _uuid_field('ID do plano inválido')

    def clean_planId(self):
        value = self.cleaned_data.get('planId')
        return str(value) if value else None


class ShippingProfileForm(forms.Form):
    """
    Form para criação de perfil de frete.
    """

    name = forms.CharField(
        max_length=100,
        min_length=2,
        error_messages={
            'required': 'Nome é obrigatório',
            'min_length': 'Nome deve ter no mínimo 2 caracteres',
            'max_length': 'Nome deve ter no máximo 100 caracteres',
        },
    )

    weightKg = forms.DecimalField(
        max_digits=6,
        decimal_places=3,
        error_messages={
            'required': 'Peso é obrigatório',
            'invalid': 'Peso inválido',
            'max_digits': 'Peso máximo de 30kg',
            'max_whole_digits': 'Peso máximo de 30kg',
            'max_decimal_places': 'Peso deve ter no máximo 3 casas decimais',
        },
    )

    widthCm = forms.IntegerField(
        error_messages={
            'required': 'Largura é obrigatória',
            'invalid': 'Largura deve ser um número inteiro',
        },
    )

    heightCm = forms.IntegerField(
        error_messages={
            'required': 'Altura é obrigatória',
            'invalid': 'Altura deve ser um número inteiro',
        },
    )

    lengthCm = forms.IntegerField(
        error_messages={
            'required': 'Comprimento é obrigatório',
            'invalid': 'Comprimento deve ser um número inteiro',
        },
    )

    isActive = forms.NullBooleanField(required=False)

    def clean_name(self):
        return self.cleaned_data['name'].strip()

    def clean_weightKg(self):
        peso = self.cleaned_data.get('weightKg')
        if peso is None:
            return peso
        if peso <= 0:
            raise ValidationError('Peso deve ser maior que zero')
        if peso > 30:
            raise ValidationError('Peso máximo de 30kg')
        return peso

    def _clean_dimensao(self, campo: str, rotulo: str, genero: str = 'a'):
        valor = self.cleaned_data.get(campo)
        if valor is None:
            return valor
        if valor <= 0:
            raise ValidationError(f'{rotulo} deve ser maior que zero')
        if valor > 100:
            raise ValidationError(f'{rotulo} máxim{genero} de 100cm')
        return valor

    def clean_widthCm(self):
        return self._clean_dimensao('widthCm', 'Largura')

    def clean_heightCm(self):
        return self._clean_dimensao('heightCm', 'Altura')

    def clean_lengthCm(self):
        return self._clean_dimensao('lengthCm', 'Comprimento', 'o')

    def clean_isActive(self):
        valor = self.cleaned_data.get('isActive')
        return True if valor is None else valor


class ShippingProfileUpdateForm(ShippingProfileForm):
    """
    Form para atualização parcial de perfil (PATCH).

    Todos os campos são opcionais; ausentes ficam None.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            field.required = False

    def clean_name(self):
        name = self.cleaned_data.get('name')
        return name.strip() if name else None

    def clean_isActive(self):
        return self.cleaned_data.get('isActive')
