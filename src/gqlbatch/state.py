"""Observable state container backed by one named GraphQL query.

:class:`GqlQueryState` owns a plain-dict snapshot. Local mutators change it
without any network activity; a successful :meth:`GqlQueryState.query`
replaces it wholesale. Subscribers are called synchronously, in subscription
order, with ``(state, old_state, store)``.
"""

from __future__ import annotations

import dataclasses
import itertools
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from gqlbatch._constants import STATE_ERROR_CODE
from gqlbatch._transport import Transport
from gqlbatch.config import GqlConfig
from gqlbatch.exceptions import GqlConfigError, GqlStateError
from gqlbatch.models import ArgumentSpec, ExecResult
from gqlbatch.query import run_query

_logger = logging.getLogger(__name__)

#: ``(state, old_state, store)`` listener.
Subscriber = Callable[[dict[str, Any], dict[str, Any], "GqlQueryState"], Any]

_subscription_ids = itertools.count(1)


@dataclasses.dataclass(frozen=True, slots=True)
class Subscription:
    """Opaque handle returned by :meth:`GqlQueryState.subscribe`."""

    id: int
    callback: Subscriber = dataclasses.field(compare=False, repr=False)


class GqlQueryState:
    """A named query and the latest snapshot of its result.

    ``set``/``unset``/``reset`` never notify, so several changes can be
    batched before one notification; their ``*_sync`` variants notify.
    """

    def __init__(
        self,
        name: str,
        query_text: str,
        *,
        args: Mapping[str, ArgumentSpec | Mapping[str, Any]] | None = None,
        defaults: Any = None,
        subscribers: Iterable[Subscriber] = (),
        config: GqlConfig | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.name = name
        self.query_text = query_text
        self._args: dict[str, ArgumentSpec] = {
            key: ArgumentSpec.model_validate(spec) for key, spec in (args or {}).items()
        }
        self._config = config
        self._transport = transport
        self._state: dict[str, Any] = self._prepared(defaults)
        self._old_state: dict[str, Any] = {}
        self._subscriptions: list[Subscription] = []
        for callback in subscribers:
            self.subscribe(callback)

    def prepare_state(self, state: Any) -> Mapping[str, Any]:
        """Hook applied to every replacement snapshot. Identity by default.

        Override it to reshape a query result (e.g. key a list payload by
        id) before it becomes the snapshot.
        """
        return state

    def _prepared(self, state: Any) -> dict[str, Any]:
        prepared = self.prepare_state(state if state is not None else {})
        if not isinstance(prepared, Mapping):
            raise GqlStateError(
                f"GqlQueryState {self.name!r} needs a mapping snapshot, got {type(prepared).__name__}; "
                "override prepare_state() to reshape it"
            )
        return dict(prepared)

    @property
    def state(self) -> dict[str, Any]:
        return dict(self._state)

    @property
    def old_state(self) -> dict[str, Any]:
        return dict(self._old_state)

    # ------------------------------------------------------------------
    # Query arguments
    # ------------------------------------------------------------------

    def set_args(self, args: Mapping[str, Any]) -> None:
        """Declare new arguments or change the value of declared ones.

        A key not declared yet must carry a full argument spec.
        """
        for key, value in args.items():
            current = self._args.get(key)
            if current is None:
                self._args[key] = ArgumentSpec.model_validate(value)
            else:
                self._args[key] = current.model_copy(update={"value": value})

    def get_arg(self, name: str) -> Any:
        """Effective value of a declared argument.

        The snapshot's value wins, then the declared default. Undeclared
        arguments yield ``None``.
        """
        spec = self._args.get(name)
        if spec is None:
            return None
        value = self._state.get(name)
        if value is not None:
            return value
        return spec.default()

    def to_query(self) -> dict[str, Any]:
        """Request descriptor accepted by :func:`gqlbatch.query.run_query`."""
        args: dict[str, ArgumentSpec] = {}
        for key, spec in self._args.items():
            value = self._state.get(key)
            args[key] = spec if value is None else spec.model_copy(update={"value": value})
        return {"name": self.name, "query_text": self.query_text, "args": args}

    async def query(
        self,
        on_success: Callable[[dict[str, Any], GqlQueryState], Any] | None = None,
        on_error: Callable[[Any, GqlQueryState], Any] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> ExecResult:
        """Fetch the query and replace the snapshot with its result.

        Subscribers are notified on success; ``on_error`` receives the
        server error or the query's own field error. A result that cannot
        become the snapshot (see :meth:`prepare_state`) is routed to
        ``on_error`` with code ``stateError`` and reported in the returned
        result under the query name; the snapshot is left as it was.
        """
        if self._config is None or self._transport is None:
            raise GqlConfigError(f"GqlQueryState {self.name!r} has no config/transport to query with")

        rejected: dict[str, Any] = {}

        def _handle_error(error: Any, _registry: Any) -> None:
            if on_error is not None:
                on_error(error, self)

        def _handle_success(payload: Any, _registry: Any) -> None:
            try:
                self.reset(payload)
            except GqlStateError as exc:
                _logger.warning("%s", exc)
                rejected[self.name] = {"message": str(exc), "code": STATE_ERROR_CODE}
                _handle_error(rejected[self.name], _registry)
                return
            self._notify()
            if on_success is not None:
                on_success(self.get(), self)

        spec = {**self.to_query(), "on_success": _handle_success, "on_error": _handle_error}
        result = await run_query(spec, headers=headers, config=self._config, transport=self._transport)
        if not rejected:
            return result
        return dataclasses.replace(result, errors={**result.errors, **rejected})

    # ------------------------------------------------------------------
    # Snapshot access and mutation
    # ------------------------------------------------------------------

    def get(self, name: str | None = None) -> Any:
        """A shallow copy of the whole snapshot, or one field."""
        if name is None:
            return dict(self._state)
        return self._state.get(name)

    def set(self, name: str | Mapping[str, Any], value: Any = None) -> None:
        """Merge a patch mapping, or set a single field."""
        self._old_state = dict(self._state)
        if isinstance(name, Mapping):
            self._state.update(name)
            return
        self._state[name] = value

    def set_sync(self, name: str | Mapping[str, Any], value: Any = None) -> None:
        self.set(name, value)
        self._notify()

    def unset(self, name: str) -> bool:
        """Remove a field. Returns ``False`` when it was not present."""
        if name not in self._state:
            return False
        self._old_state = dict(self._state)
        del self._state[name]
        return True

    def unset_sync(self, name: str) -> bool:
        if not self.unset(name):
            return False
        self._notify()
        return True

    def reset(self, state: Any) -> None:
        """Replace the whole snapshot (through :meth:`prepare_state`).

        Raises :class:`~gqlbatch.exceptions.GqlStateError`, leaving the
        snapshot untouched, when the prepared state is not a mapping.
        """
        prepared = self._prepared(state)
        self._old_state = dict(self._state)
        self._state = prepared

    def reset_sync(self, state: Any) -> None:
        self.reset(state)
        self._notify()

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Subscription:
        """Register a listener.

        Subscribing a callback that is already registered returns its
        existing handle instead of adding it twice.
        """
        if not callable(callback):
            raise TypeError(f"subscriber must be callable, got {type(callback).__name__}")
        for subscription in self._subscriptions:
            if subscription.callback == callback:
                return subscription
        subscription = Subscription(id=next(_subscription_ids), callback=callback)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription | Subscriber) -> bool:
        """Remove a listener by handle (or by the callback itself)."""
        before = len(self._subscriptions)
        if isinstance(subscription, Subscription):
            self._subscriptions = [s for s in self._subscriptions if s.id != subscription.id]
        else:
            self._subscriptions = [s for s in self._subscriptions if s.callback != subscription]
        return len(self._subscriptions) != before

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _notify(self) -> None:
        if not self._subscriptions:
            return
        old_state = self._old_state
        for subscription in list(self._subscriptions):
            try:
                subscription.callback(dict(self._state), dict(old_state), self)
            except Exception:
                _logger.warning("Subscriber %r of %s failed", subscription.callback, self.name, exc_info=True)
