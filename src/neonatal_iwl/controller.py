"""Reactive state for an interactive IWL calculator.

State changes go through ``apply``, a pure reducer over controller events.
``ReactiveController`` owns the current state, schedules the trailing-edge
debounce for typed weight text, runs the engine when the reducer asks for a
computation and publishes a ``Snapshot`` to subscribers after every
transition.

Debounce timers carry the token that was current when they were scheduled.
Any later edit or manual recompute bumps the token, so a stale timer that
still fires is ignored by the reducer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Literal, Union

from .config import DEFAULT_DEBOUNCE_MS, Settings
from .engine import CalculationEngine
from .models import CalculationResult, InvalidWeightError
from .scheduling import Scheduler, TimerHandle
from .validation import validate_weight

logger = logging.getLogger(__name__)

Status = Literal["idle", "pending", "computing", "settled"]


@dataclass(frozen=True)
class ControllerState:
    status: Status = "idle"
    weight_text: str = ""
    selection: Mapping[str, bool] = field(default_factory=dict)
    token: int = 0
    weight_grams: float | None = None
    result: CalculationResult | None = None
    error: InvalidWeightError | None = None


@dataclass(frozen=True)
class WeightTextChanged:
    text: str


@dataclass(frozen=True)
class DebounceFired:
    token: int


@dataclass(frozen=True)
class FactorToggled:
    factor_id: str
    active: bool


@dataclass(frozen=True)
class RecomputeRequested:
    pass


@dataclass(frozen=True)
class ComputationFinished:
    result: CalculationResult


Event = Union[WeightTextChanged, DebounceFired, FactorToggled, RecomputeRequested, ComputationFinished]


@dataclass(frozen=True)
class Snapshot:
    """Read model handed to the presentation layer."""

    status: Status
    per_kg_per_day_rate: float | None
    total_ml_per_day: float | None
    trace_text: str
    error_message: str | None
    is_busy: bool


def _settle(state: ControllerState) -> ControllerState:
    text = state.weight_text.strip()
    if not text:
        return replace(state, status="idle", weight_grams=None, result=None, error=None)
    try:
        weight = validate_weight(text)
    except InvalidWeightError as exc:
        return replace(state, status="settled", weight_grams=None, result=None, error=exc)
    return replace(state, status="computing", weight_grams=weight, error=None)


def apply(state: ControllerState, event: Event) -> ControllerState:
    """Return the state following ``event``.

    A ``computing`` result means the caller should run the engine on
    ``weight_grams`` and ``selection`` and feed back ``ComputationFinished``.
    Events that do not apply return ``state`` itself.
    """
    if isinstance(event, WeightTextChanged):
        return replace(state, weight_text=event.text, status="pending", token=state.token + 1)

    if isinstance(event, DebounceFired):
        if event.token != state.token or state.status != "pending":
            return state
        return _settle(state)

    if isinstance(event, FactorToggled):
        selection = {**state.selection, event.factor_id: event.active}
        toggled = replace(state, selection=selection)
        if state.status == "settled" and state.weight_grams is not None:
            return replace(toggled, status="computing")
        return toggled

    if isinstance(event, RecomputeRequested):
        return _settle(replace(state, token=state.token + 1))

    if isinstance(event, ComputationFinished):
        if state.status != "computing":
            return state
        return replace(state, status="settled", result=event.result, error=None)

    raise TypeError(f"unsupported event: {event!r}")


def snapshot_of(state: ControllerState) -> Snapshot:
    result = state.result
    return Snapshot(
        status=state.status,
        per_kg_per_day_rate=None if result is None else result.per_kg_per_day_rate,
        total_ml_per_day=None if result is None else result.total_ml_per_day,
        trace_text="" if result is None else result.trace_text,
        error_message=None if state.error is None else state.error.message,
        is_busy=state.status == "computing",
    )


class ReactiveController:
    """Owns calculator inputs and re-derives the result when they change.

    Without a scheduler, typed weight stays pending until ``flush`` or
    ``manual_recompute`` is called.
    """

    def __init__(
        self,
        engine: CalculationEngine | None = None,
        scheduler: Scheduler | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_MS / 1000.0,
        selection: Mapping[str, bool] | None = None,
    ) -> None:
        self.engine = engine if engine is not None else CalculationEngine()
        self.scheduler = scheduler
        self.debounce_seconds = debounce_seconds
        self._state = ControllerState(selection=self._complete_selection(selection or {}))
        self._subscribers: list[Callable[[Snapshot], None]] = []
        self._timer: TimerHandle | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        engine: CalculationEngine | None = None,
        scheduler: Scheduler | None = None,
    ) -> ReactiveController:
        return cls(engine=engine, scheduler=scheduler, debounce_seconds=settings.debounce_seconds)

    def _complete_selection(self, selection: Mapping[str, bool]) -> dict[str, bool]:
        for factor_id in selection:
            self.engine.catalog.get(factor_id)
        return {factor_id: bool(selection.get(factor_id, False)) for factor_id in self.engine.catalog.ids()}

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def status(self) -> Status:
        return self._state.status

    @property
    def weight_text(self) -> str:
        return self._state.weight_text

    @property
    def selection(self) -> Mapping[str, bool]:
        return dict(self._state.selection)

    @property
    def result(self) -> CalculationResult | None:
        return self._state.result

    @property
    def error(self) -> InvalidWeightError | None:
        return self._state.error

    @property
    def trace(self) -> tuple[str, ...]:
        return () if self._state.result is None else self._state.result.trace

    @property
    def is_busy(self) -> bool:
        return self._state.status == "computing"

    def snapshot(self) -> Snapshot:
        return snapshot_of(self._state)

    def subscribe(self, callback: Callable[[Snapshot], None]) -> Callable[[], None]:
        """Register ``callback`` for snapshots; returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def set_weight_text(self, text: str) -> None:
        self._dispatch(WeightTextChanged(text))
        if self.scheduler is None:
            return
        self._cancel_timer()
        token = self._state.token
        self._timer = self.scheduler.call_later(self.debounce_seconds, lambda: self._on_debounce(token))

    def toggle_factor(self, factor_id: str, active: bool = True) -> None:
        self.engine.catalog.get(factor_id)
        self._dispatch(FactorToggled(factor_id, bool(active)))

    def manual_recompute(self) -> None:
        self._cancel_timer()
        self._dispatch(RecomputeRequested())

    def flush(self) -> None:
        """Fire a pending debounce immediately."""
        if self._state.status != "pending":
            return
        self._cancel_timer()
        self._dispatch(DebounceFired(self._state.token))

    def reset(self) -> None:
        """Return to empty weight text and an all-false selection."""
        self._cancel_timer()
        self._state = ControllerState(selection=self._complete_selection({}), token=self._state.token + 1)
        self._emit()

    def _on_debounce(self, token: int) -> None:
        if token != self._state.token:
            logger.debug("ignoring stale debounce token=%s current=%s", token, self._state.token)
            return
        self._timer = None
        self._dispatch(DebounceFired(token))

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _dispatch(self, event: Event) -> None:
        previous = self._state
        self._state = apply(previous, event)
        if self._state is previous:
            return
        logger.debug("%s -> %s on %s", previous.status, self._state.status, type(event).__name__)
        if self._state.error is not None and self._state.error is not previous.error:
            logger.info("weight rejected (%s): %r", self._state.error.kind, self._state.weight_text)
        self._emit()
        if self._state.status == "computing":
            result = self.engine.compute(self._state.weight_grams, self._state.selection)
            self._dispatch(ComputationFinished(result))

    def _emit(self) -> None:
        snapshot = snapshot_of(self._state)
        for callback in list(self._subscribers):
            callback(snapshot)
