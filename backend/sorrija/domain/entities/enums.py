"""Enums - valores fixos que se repetem no sistema."""

from enum import Enum


class LeadTemperature(str, Enum):
    """Estágio (temperatura) do lead no funil."""
    NEW = "novo"        # Acabou de chegar
    HOT = "quente"      # Em atendimento ativo
    COLD = "frio"       # Esfriou (sem interação)
    LOST = "perdido"    # Perdido/desistiu


class HotSubstatus(str, Enum):
    """Substatus do lead quente. Só existe enquanto temperature = quente."""
    IN_CONVERSATION = "em_conversa"
    AWAITING_RESPONSE = "aguardando_resposta"
    NEGOTIATING = "em_negociacao"
    FOLLOW_UP_SCHEDULED = "follow_up_agendado"


class TriggerEvent(str, Enum):
    """Evento que dispara uma regra de transição de temperatura."""
    INACTIVITY_TIMER = "inactivity_timer"    # Sem interação do cliente
    SUBSTATUS_TIMEOUT = "substatus_timeout"  # Tempo limite de um substatus
    NO_RESPONSE = "no_response"              # Cliente não respondeu após mensagem enviada


class UserRole(str, Enum):
    """Nível de acesso do usuário."""
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    MANAGER = "gestor"
    USER = "usuario"


# Temperaturas que as regras automáticas nunca alteram
TERMINAL_TEMPERATURES = frozenset({LeadTemperature.COLD.value, LeadTemperature.LOST.value})
