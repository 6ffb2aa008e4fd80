import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, Iterable, Optional, Set, Tuple, Union

from pwcheck import settings
from pwcheck.models import EvaluationResult
from pwcheck.pwned import UNKNOWN, LeakOracle, LeakVerdict
from pwcheck.strength import score

logger = logging.getLogger(__name__)

FieldId = Hashable
ResultCallback = Callable[[FieldId, EvaluationResult], Union[None, Awaitable[None]]]
FieldCallback = Callable[[FieldId], Union[None, Awaitable[None]]]


@dataclass
class FieldState:
    request_id: int = 0
    timer: Optional[asyncio.Task] = None
    in_flight: int = 0
    cleared: bool = False


async def evaluate_password(password: str, oracle: LeakOracle) -> Tuple[int, LeakVerdict]:
    """One-shot evaluation with no field bookkeeping."""
    strength = score(password)
    leak = await oracle.is_compromised(password)
    return strength, leak


class EvaluationCoordinator:
    """Turns input changes for password fields into at most one result per settled value.

    Every field gets its own FieldState. A change bumps the field's
    request_id and re-arms its debounce timer; when the timer fires the
    value is scored and checked, and the result is emitted only if the
    request_id it was started with is still the field's current one.
    In-flight lookups are never aborted, they are just ignored once stale.

    Callbacks may be plain functions or coroutine functions. Exceptions
    they raise are logged and swallowed.
    """

    def __init__(
        self,
        on_result: ResultCallback,
        on_clear: FieldCallback,
        *,
        oracle: Optional[LeakOracle] = None,
        on_pending: Optional[FieldCallback] = None,
        debounce: float = settings.DEBOUNCE_SEC,
    ):
        self.on_result = on_result
        self.on_clear = on_clear
        self.on_pending = on_pending
        self.oracle = oracle if oracle is not None else LeakOracle()
        self.debounce = debounce
        self._fields: Dict[FieldId, FieldState] = {}
        self._tasks: Set[asyncio.Task] = set()

    # ---------------- Input side ----------------
    def handle_input(self, field_id: FieldId, value: Optional[str]) -> None:
        state = self._fields.setdefault(field_id, FieldState())
        self._cancel_timer(state)
        state.request_id += 1

        if not value:
            # in-flight work for the old value is now stale
            state.cleared = True
            self._forget_if_idle(field_id)
            self._spawn(self._notify(self.on_clear, field_id))
            return

        state.cleared = False
        state.timer = self._spawn(self._debounced(field_id, value, state.request_id))

    def start(self, snapshot: Iterable[Tuple[FieldId, Optional[str]]]) -> None:
        """Initial pass over fields that already hold a value."""
        for field_id, value in snapshot:
            if value:
                self.evaluate_now(field_id, value)

    def evaluate_now(self, field_id: FieldId, value: str) -> None:
        state = self._fields.setdefault(field_id, FieldState())
        self._cancel_timer(state)
        state.request_id += 1
        state.cleared = False
        state.in_flight += 1
        self._spawn(self._evaluate(field_id, value, state.request_id))

    def current_request_id(self, field_id: FieldId) -> int:
        state = self._fields.get(field_id)
        return state.request_id if state else 0

    @property
    def active_fields(self) -> int:
        return len(self._fields)

    # ---------------- Lifecycle ----------------
    async def join(self) -> None:
        """Wait until no timer or evaluation is pending."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._fields.clear()

    # ---------------- Internals ----------------
    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    def _cancel_timer(state: FieldState) -> None:
        if state.timer is not None and not state.timer.done():
            state.timer.cancel()
        state.timer = None

    async def _debounced(self, field_id: FieldId, value: str, request_id: int) -> None:
        await asyncio.sleep(self.debounce)
        if not self._is_current(field_id, request_id):
            return
        state = self._fields[field_id]
        state.timer = None
        state.in_flight += 1
        # a separate task so a later keystroke cancels only timers, never a lookup
        self._spawn(self._evaluate(field_id, value, request_id))

    def _forget_if_idle(self, field_id: FieldId) -> None:
        # a cleared field with nothing pending needs no state; request ids may restart
        state = self._fields.get(field_id)
        if state is not None and state.cleared and state.in_flight == 0 and state.timer is None:
            del self._fields[field_id]

    def _is_current(self, field_id: FieldId, request_id: int) -> bool:
        state = self._fields.get(field_id)
        return state is not None and state.request_id == request_id

    async def _evaluate(self, field_id: FieldId, value: str, request_id: int) -> None:
        try:
            await self._run_evaluation(field_id, value, request_id)
        finally:
            state = self._fields.get(field_id)
            if state is not None:
                state.in_flight -= 1
                self._forget_if_idle(field_id)

    async def _run_evaluation(self, field_id: FieldId, value: str, request_id: int) -> None:
        if self.on_pending is not None and self._is_current(field_id, request_id):
            await self._notify(self.on_pending, field_id)

        strength = score(value)
        try:
            leak = await self.oracle.is_compromised(value)
        except Exception as e:
            logger.warning("leak check raised %s; treating as unknown", type(e).__name__)
            leak = UNKNOWN

        if not self._is_current(field_id, request_id):
            logger.debug("discarding stale result for field %r (request %d)", field_id, request_id)
            return
        result = EvaluationResult(strength=strength, leak=leak, request_id=request_id)
        await self._notify(self.on_result, field_id, result)

    async def _notify(self, callback: Callable[..., Any], *args: Any) -> None:
        try:
            ret = callback(*args)
            if inspect.isawaitable(ret):
                await ret
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("collaborator callback %s failed", getattr(callback, "__name__", callback))
