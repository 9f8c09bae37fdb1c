"""Mudança manual de temperatura (ação do usuário no CRM)."""

from datetime import datetime
from typing import Optional

from sorrija.domain.entities.enums import LeadTemperature, HotSubstatus


class InvalidTemperatureChange(ValueError):
    """Combinação de temperatura/substatus/motivo que quebra as invariantes do lead."""


VALID_TEMPERATURES = frozenset(t.value for t in LeadTemperature)
VALID_SUBSTATUSES = frozenset(s.value for s in HotSubstatus)


def build_temperature_change(
    current_substatus: Optional[str],
    temperature: str,
    now: datetime,
    hot_substatus: Optional[str] = None,
    lost_reason: Optional[str] = None,
) -> dict:
    """
    Monta os campos a gravar quando o usuário muda a temperatura do lead.

    - substatus só existe em QUENTE (mantém o atual ou usa em_conversa)
    - motivo de perda só existe em PERDIDO
    - voltar para QUENTE conta como interação (reinicia os timers)
    """
    if temperature not in VALID_TEMPERATURES:
        raise InvalidTemperatureChange(f"Temperatura inválida: {temperature}")

    if hot_substatus is not None and hot_substatus not in VALID_SUBSTATUSES:
        raise InvalidTemperatureChange(f"Substatus inválido: {hot_substatus}")

    if hot_substatus is not None and temperature != LeadTemperature.HOT.value:
        raise InvalidTemperatureChange("Substatus só pode ser definido para lead QUENTE")

    changes: dict = {
        "temperature": temperature,
        "updated_at": now,
    }

    if temperature == LeadTemperature.HOT.value:
        changes["hot_substatus"] = hot_substatus or current_substatus or HotSubstatus.IN_CONVERSATION.value
        changes["last_interaction_at"] = now
    else:
        changes["hot_substatus"] = None

    if temperature == LeadTemperature.LOST.value:
        changes["lost_reason"] = (lost_reason or "").strip() or None
    else:
        changes["lost_reason"] = None

    return changes
