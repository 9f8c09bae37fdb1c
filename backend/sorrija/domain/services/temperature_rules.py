"""
MOTOR DE REGRAS DE TEMPERATURA
==============================

Decide, para um lead, qual transição automática (se alguma) deve acontecer.

ORDEM DE AVALIAÇÃO:
1. Regras customizadas ativas da organização (prioridade crescente)
2. Regras padrão geradas a partir do CRMSettings:
   - NOVO → FRIO após new_to_cold_minutes
   - QUENTE → FRIO após hot_to_cold_days + hot_to_cold_hours
   - QUENTE/em_conversa → aguardando_resposta após em_conversa_timeout_minutes
   - QUENTE/aguardando_resposta → FRIO após aguardando_to_cold_hours

A primeira regra que casa (e muda alguma coisa) vence. O estado resultante
é reavaliado até nenhuma regra disparar: a rodada deixa o lead estável.

FRIO e PERDIDO são terminais para a automação: só o usuário tira um
lead desses estágios.

O tempo decorrido é sempre medido a partir de last_interaction_at
(ou created_at, se nunca houve interação), usando o mesmo "agora"
para todos os leads da rodada.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional, Sequence

from sorrija.domain.entities.enums import (
    LeadTemperature,
    HotSubstatus,
    TriggerEvent,
    TERMINAL_TEMPERATURES,
)


NEW = LeadTemperature.NEW.value
HOT = LeadTemperature.HOT.value
COLD = LeadTemperature.COLD.value
LOST = LeadTemperature.LOST.value

IN_CONVERSATION = HotSubstatus.IN_CONVERSATION.value
AWAITING_RESPONSE = HotSubstatus.AWAITING_RESPONSE.value

# Substatus assumido quando uma regra deixa o lead QUENTE sem definir um
DEFAULT_HOT_SUBSTATUS = IN_CONVERSATION

# Temperaturas que uma regra automática pode atribuir
AUTOMATIC_TARGET_TEMPERATURES = frozenset({NEW, HOT, COLD})

TEMPERATURE_LABELS = {
    NEW: "NOVO",
    HOT: "QUENTE",
    COLD: "FRIO",
    LOST: "PERDIDO",
}

SUBSTATUS_LABELS = {
    IN_CONVERSATION: "Em Conversa",
    AWAITING_RESPONSE: "Aguardando Resposta",
    HotSubstatus.NEGOTIATING.value: "Em Negociação",
    HotSubstatus.FOLLOW_UP_SCHEDULED.value: "Follow-up Agendado",
}


# =============================================================================
# TIPOS
# =============================================================================

@dataclass(frozen=True)
class LeadSnapshot:
    """Recorte do lead que o motor precisa para decidir."""

    id: int
    temperature: str
    hot_substatus: Optional[str]
    last_interaction_at: Optional[datetime]
    created_at: datetime
    lost_reason: Optional[str] = None

    @property
    def reference_at(self) -> datetime:
        return self.last_interaction_at or self.created_at


@dataclass(frozen=True)
class TransitionRule:
    """
    Regra uniforme: customizada (vinda do banco) ou padrão (gerada do CRMSettings).
    """

    name: str
    trigger_event: str
    timer_minutes: int
    from_temperature: Optional[str] = None
    from_substatus: Optional[str] = None
    action_set_temperature: Optional[str] = None
    action_set_substatus: Optional[str] = None
    action_clear_substatus: bool = False
    priority: int = 0
    rule_id: Optional[int] = None
    builtin: bool = False

    @classmethod
    def from_entity(cls, rule: Any) -> "TransitionRule":
        """Converte uma TemperatureTransitionRule (ou objeto equivalente)."""
        return cls(
            name=rule.name,
            trigger_event=rule.trigger_event,
            timer_minutes=rule.timer_minutes or 0,
            from_temperature=rule.from_temperature or None,
            from_substatus=rule.from_substatus or None,
            action_set_temperature=rule.action_set_temperature or None,
            action_set_substatus=rule.action_set_substatus or None,
            action_clear_substatus=bool(rule.action_clear_substatus),
            priority=rule.priority if rule.priority is not None else 0,
            rule_id=getattr(rule, "id", None),
        )

    @property
    def requires_substatus(self) -> bool:
        """Regras que dependem do substatus só valem para leads QUENTES."""
        return self.from_substatus is not None or self.trigger_event in (
            TriggerEvent.SUBSTATUS_TIMEOUT.value,
            TriggerEvent.NO_RESPONSE.value,
        )


@dataclass(frozen=True)
class TransitionDecision:
    """Resultado do motor para um lead."""

    lead_id: int
    previous_temperature: str
    previous_substatus: Optional[str]
    next_temperature: str
    next_hot_substatus: Optional[str]
    clear_substatus: bool
    reason: str
    rule_id: Optional[int] = None
    clear_lost_reason: bool = False

    @property
    def temperature_changed(self) -> bool:
        return self.next_temperature != self.previous_temperature

    @property
    def substatus_changed(self) -> bool:
        return self.next_hot_substatus != self.previous_substatus


@dataclass
class RuleCheck:
    condition: str
    passed: bool
    expected: str
    actual: str


@dataclass
class RuleTestResult:
    matches: bool
    checks: list[RuleCheck] = field(default_factory=list)
    next_temperature: Optional[str] = None
    next_hot_substatus: Optional[str] = None


# =============================================================================
# HELPERS DE TEMPO
# =============================================================================

def as_utc(value: datetime) -> datetime:
    """Datas sem fuso (ex: SQLite) são tratadas como UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_since_reference(lead: LeadSnapshot, now: datetime) -> timedelta:
    return as_utc(now) - as_utc(lead.reference_at)


# =============================================================================
# REGRAS PADRÃO
# =============================================================================

def build_default_rules(settings: Any) -> list[TransitionRule]:
    """
    Gera as regras padrão a partir do CRMSettings da organização.

    Regras desligadas pelas chaves enable_* simplesmente não entram na lista.
    """
    rules: list[TransitionRule] = []

    if settings.enable_auto_temperature:
        rules.append(TransitionRule(
            name="Novo → Frio (padrão)",
            trigger_event=TriggerEvent.INACTIVITY_TIMER.value,
            timer_minutes=settings.new_to_cold_minutes,
            from_temperature=NEW,
            action_set_temperature=COLD,
            action_clear_substatus=True,
            builtin=True,
        ))

        hot_to_cold_minutes = (settings.hot_to_cold_days or 0) * 24 * 60 + (settings.hot_to_cold_hours or 0) * 60
        rules.append(TransitionRule(
            name="Quente → Frio (padrão)",
            trigger_event=TriggerEvent.INACTIVITY_TIMER.value,
            timer_minutes=hot_to_cold_minutes,
            from_temperature=HOT,
            action_set_temperature=COLD,
            action_clear_substatus=True,
            builtin=True,
        ))

    if settings.enable_substatus_timeout:
        rules.append(TransitionRule(
            name="Em conversa → Aguardando resposta (padrão)",
            trigger_event=TriggerEvent.SUBSTATUS_TIMEOUT.value,
            timer_minutes=settings.em_conversa_timeout_minutes,
            from_temperature=HOT,
            from_substatus=IN_CONVERSATION,
            action_set_substatus=AWAITING_RESPONSE,
            builtin=True,
        ))
        rules.append(TransitionRule(
            name="Aguardando resposta → Frio (padrão)",
            trigger_event=TriggerEvent.SUBSTATUS_TIMEOUT.value,
            timer_minutes=settings.aguardando_to_cold_hours * 60,
            from_temperature=HOT,
            from_substatus=AWAITING_RESPONSE,
            action_set_temperature=COLD,
            action_clear_substatus=True,
            builtin=True,
        ))

    return rules


def build_rule_chain(settings: Any, custom_rules: Iterable[Any] = ()) -> list[TransitionRule]:
    """Regras customizadas ativas (prioridade crescente) seguidas das padrão."""
    custom = [
        rule if isinstance(rule, TransitionRule) else TransitionRule.from_entity(rule)
        for rule in custom_rules
        if isinstance(rule, TransitionRule) or getattr(rule, "active", True)
    ]
    # sorted é estável: empate de prioridade mantém a ordem recebida
    custom.sort(key=lambda r: r.priority)
    return custom + build_default_rules(settings)


# =============================================================================
# CASAMENTO DE REGRA
# =============================================================================

def _label_temperature(value: Optional[str]) -> str:
    if not value:
        return "Nenhuma"
    return TEMPERATURE_LABELS.get(value, value.upper())


def _label_substatus(value: Optional[str]) -> str:
    if not value:
        return "Nenhum"
    return SUBSTATUS_LABELS.get(value, value)


def evaluate_rule_conditions(
    rule: TransitionRule,
    temperature: str,
    substatus: Optional[str],
    elapsed: timedelta,
) -> list[RuleCheck]:
    """Avalia cada condição da regra. A regra casa se todas passarem."""
    is_hot = temperature == HOT
    checks: list[RuleCheck] = []

    checks.append(RuleCheck(
        condition="Automação",
        passed=temperature not in TERMINAL_TEMPERATURES,
        expected="NOVO ou QUENTE",
        actual=_label_temperature(temperature),
    ))

    checks.append(RuleCheck(
        condition="Temperatura",
        passed=rule.from_temperature is None or rule.from_temperature == temperature,
        expected=_label_temperature(rule.from_temperature) if rule.from_temperature else "Qualquer",
        actual=_label_temperature(temperature),
    ))

    # Substatus fora de QUENTE é dado inválido: nunca casa regra de substatus
    substatus_ok = rule.from_substatus is None or rule.from_substatus == substatus
    if rule.requires_substatus and not is_hot:
        substatus_ok = False
    checks.append(RuleCheck(
        condition="Substatus",
        passed=substatus_ok,
        expected=_label_substatus(rule.from_substatus) if rule.from_substatus else "Qualquer",
        actual=_label_substatus(substatus),
    ))

    if rule.trigger_event == TriggerEvent.SUBSTATUS_TIMEOUT.value:
        checks.append(RuleCheck(
            condition="Evento",
            passed=is_hot and substatus is not None,
            expected="Lead QUENTE com substatus",
            actual=f"{_label_temperature(temperature)} / {_label_substatus(substatus)}",
        ))
    elif rule.trigger_event == TriggerEvent.NO_RESPONSE.value:
        checks.append(RuleCheck(
            condition="Evento",
            passed=is_hot and (rule.from_substatus is not None or substatus == AWAITING_RESPONSE),
            expected="Lead aguardando resposta",
            actual=_label_substatus(substatus),
        ))

    minutes = int(elapsed.total_seconds() // 60)
    checks.append(RuleCheck(
        condition="Timer",
        passed=elapsed >= timedelta(minutes=rule.timer_minutes),
        expected=f"≥ {rule.timer_minutes} minutos",
        actual=f"{minutes} minutos",
    ))

    return checks


def rule_matches(rule: TransitionRule, temperature: str, substatus: Optional[str], elapsed: timedelta) -> bool:
    return all(check.passed for check in evaluate_rule_conditions(rule, temperature, substatus, elapsed))


def _apply_rule_action(rule: TransitionRule, temperature: str, substatus: Optional[str]) -> Optional[tuple[str, Optional[str]]]:
    """
    Calcula (temperatura, substatus) resultantes da ação da regra.

    Retorna None quando a regra pediria PERDIDO ou uma temperatura desconhecida.
    """
    target = rule.action_set_temperature or temperature
    if target not in AUTOMATIC_TARGET_TEMPERATURES:
        return None

    if target != HOT:
        return target, None

    if rule.action_set_substatus:
        return target, rule.action_set_substatus
    if temperature == HOT and substatus and not rule.action_clear_substatus:
        return target, substatus
    return target, DEFAULT_HOT_SUBSTATUS


# =============================================================================
# RESOLUÇÃO
# =============================================================================

def _normalize_state(temperature: str, substatus: Optional[str]) -> tuple[Optional[str], list[str]]:
    """
    Corrige o substatus que viola a invariante substatus ⇔ QUENTE.

    Retorna o substatus corrigido e os motivos da correção (vazio se nada mudou).
    """
    if temperature != HOT and substatus is not None:
        return None, [f"Substatus inválido para lead {_label_temperature(temperature)}"]
    if temperature == HOT and substatus is None:
        return DEFAULT_HOT_SUBSTATUS, ["Lead QUENTE sem substatus"]
    return substatus, []


def _next_step(
    rules: Sequence[TransitionRule],
    temperature: str,
    substatus: Optional[str],
    elapsed: timedelta,
) -> Optional[tuple[TransitionRule, str, Optional[str]]]:
    """Primeira regra que casa e muda alguma coisa no estado atual."""
    for rule in rules:
        if not rule_matches(rule, temperature, substatus, elapsed):
            continue

        outcome = _apply_rule_action(rule, temperature, substatus)
        if outcome is None:
            continue

        next_temperature, next_substatus = outcome
        if next_temperature == temperature and next_substatus == substatus:
            continue

        return rule, next_temperature, next_substatus

    return None


def resolve_transition(
    lead: LeadSnapshot,
    rules: Sequence[TransitionRule],
    now: datetime,
) -> Optional[TransitionDecision]:
    """
    Retorna a transição do lead para esta rodada, ou None se nada deve mudar.

    O estado projetado é reavaliado até nenhuma regra disparar, então uma
    segunda rodada com o mesmo "agora" não encontra mais nada a fazer
    (ex: em_conversa → aguardando_resposta → FRIO numa rodada só).
    Regras que casam mas não mudariam nada são puladas.
    """
    elapsed = elapsed_since_reference(lead, now)
    minutes = int(elapsed.total_seconds() // 60)

    temperature = lead.temperature
    substatus, reasons = _normalize_state(temperature, lead.hot_substatus)

    fired: list[TransitionRule] = []
    visited = {(temperature, substatus)}
    # Limite e estados visitados cortam ciclos entre regras customizadas
    for _ in range(len(rules) + 1):
        step = _next_step(rules, temperature, substatus, elapsed)
        if step is None:
            break
        rule, next_temperature, next_substatus = step
        if (next_temperature, next_substatus) in visited:
            break
        visited.add((next_temperature, next_substatus))
        fired.append(rule)
        temperature, substatus = next_temperature, next_substatus

    clear_lost_reason = lead.lost_reason is not None and temperature != LOST
    if clear_lost_reason and not fired:
        reasons.append(f"Motivo de perda em lead {_label_temperature(temperature)}")

    if (
        temperature == lead.temperature
        and substatus == lead.hot_substatus
        and not clear_lost_reason
    ):
        return None

    if fired:
        names = " → ".join(rule.name for rule in fired)
        reasons.append(f"{names}: {minutes} min sem interação")

    return TransitionDecision(
        lead_id=lead.id,
        previous_temperature=lead.temperature,
        previous_substatus=lead.hot_substatus,
        next_temperature=temperature,
        next_hot_substatus=substatus,
        clear_substatus=lead.hot_substatus is not None and substatus is None,
        reason="; ".join(reasons),
        rule_id=fired[0].rule_id if fired else None,
        clear_lost_reason=clear_lost_reason,
    )


def resolve_batch(
    leads: Iterable[LeadSnapshot],
    rules: Sequence[TransitionRule],
    now: datetime,
) -> list[tuple[LeadSnapshot, Optional[TransitionDecision]]]:
    """Resolve uma rodada inteira com o mesmo 'agora' e o mesmo conjunto de regras."""
    return [(lead, resolve_transition(lead, rules, now)) for lead in leads]


# =============================================================================
# TESTADOR DE REGRA (tela de cadastro)
# =============================================================================

def simulate_transition_rule(
    rule: Any,
    temperature: str,
    substatus: Optional[str],
    minutes_since_interaction: int,
) -> RuleTestResult:
    """
    Simula uma regra contra condições informadas pelo usuário.

    Retorna o detalhamento de cada condição e, se casar, o resultado da ação.
    """
    transition_rule = rule if isinstance(rule, TransitionRule) else TransitionRule.from_entity(rule)
    elapsed = timedelta(minutes=minutes_since_interaction)

    checks = evaluate_rule_conditions(transition_rule, temperature, substatus, elapsed)
    result = RuleTestResult(matches=all(check.passed for check in checks), checks=checks)

    if result.matches:
        outcome = _apply_rule_action(transition_rule, temperature, substatus)
        if outcome is not None:
            result.next_temperature, result.next_hot_substatus = outcome

    return result

