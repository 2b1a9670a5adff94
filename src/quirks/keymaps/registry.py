"""Action and binding storage behind every mode's key dispatch."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, Optional

from quirks.runtime.telemetry import SpanHandle, span

from .models import ActionRef, Binding

# mode -> key signature -> binding ids
ModeIndex = Dict[str, Dict[str, set[str]]]


@dataclass(slots=True)
class RegistryStats:
    action_count: int
    binding_count: int
    modes: tuple[str, ...]


class KeymapConflictError(RuntimeError):
    """Raised when a new binding claims keys another binding already owns."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        self.binding = binding
        self.conflicts = tuple(conflicts)
        owners = ", ".join(conflict.id for conflict in self.conflicts)
        super().__init__(f"Binding '{binding.id}' conflicts with {owners}")


class KeymapRegistry:
    """Owns action references and the bindings that point at them.

    Every binding change bumps :meth:`revision`; resolvers compare it to
    decide when their cached tries are stale.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        self._index: ModeIndex = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    # -- lookups -------------------------------------------------------------

    def get_action(self, action_id: str) -> ActionRef:
        action = self._actions.get(action_id)
        if action is None:
            raise KeyError(f"Action '{action_id}' is not registered")
        return action

    def get_binding(self, binding_id: str) -> Binding:
        binding = self._bindings.get(binding_id)
        if binding is None:
            raise KeyError(f"Binding '{binding_id}' is not registered")
        return binding

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
            return
        for ids in self._index.get(mode, {}).values():
            for binding_id in sorted(ids):
                yield self._bindings[binding_id]

    def describe(self, mode: str) -> list[tuple[str, str]]:
        """``(keys, description)`` rows for ``mode`` in registration order."""

        rows: Dict[str, str] = {}
        for binding in self._bindings.values():
            if binding.mode != mode:
                continue
            keys = binding.sequence.display()
            if keys not in rows:
                rows[keys] = (
                    binding.description or self._actions[binding.action_id].description
                )
        return list(rows.items())

    def modes(self) -> tuple[str, ...]:
        return tuple(sorted(self._index))

    def stats(self) -> RegistryStats:
        return RegistryStats(
            action_count=len(self._actions),
            binding_count=len(self._bindings),
            modes=self.modes(),
        )

    def detect_conflicts(self, binding: Binding) -> list[Binding]:
        """Bindings in the same mode with exactly the same key sequence."""

        ids = self._index.get(binding.mode, {}).get(binding.key_signature, set())
        return [self._bindings[binding_id] for binding_id in sorted(ids)]

    # -- mutation ------------------------------------------------------------

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        with self._span("register_action", action_id=action.id):
            if action.id in self._actions and not replace:
                raise ValueError(f"Action '{action.id}' already registered")
            self._actions[action.id] = action
            return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        """Add ``binding``; ``replace`` evicts whatever owns its keys or id."""

        with self._span(
            "register_binding", binding_id=binding.id, mode=binding.mode
        ) as handle:
            self._require_action(binding, handle)
            conflicts = self.detect_conflicts(binding)
            if not replace:
                if conflicts:
                    handle.add_metadata("conflicts", [c.id for c in conflicts])
                    raise KeymapConflictError(binding, conflicts)
                if binding.id in self._bindings:
                    raise ValueError(f"Binding id '{binding.id}' already registered")
            else:
                for evicted in conflicts:
                    self._drop(evicted)
                if binding.id in self._bindings:
                    self._drop(self._bindings[binding.id])
            self._store(binding)
            self._revision += 1
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        with self._span("unregister_binding", binding_id=binding_id):
            binding = self._bindings.get(binding_id)
            if binding is None:
                return None
            self._drop(binding)
            self._revision += 1
            return binding

    def update_binding(self, binding_id: str, **changes: object) -> Binding:
        """Apply dataclass ``changes`` to a binding, keeping it conflict free."""

        with self._span("update_binding", binding_id=binding_id) as handle:
            current = self._bindings.get(binding_id)
            if current is None:
                handle.fail("missing_binding")
                raise KeyError(f"Binding '{binding_id}' not found")
            updated = replace(current, **changes)
            self._require_action(updated, handle)

            self._drop(current)
            conflicts = self.detect_conflicts(updated)
            if conflicts:
                self._store(current)
                handle.add_metadata("conflicts", [c.id for c in conflicts])
                raise KeymapConflictError(updated, conflicts)
            self._store(updated)
            self._revision += 1
            return updated

    # -- internals -----------------------------------------------------------

    def _span(
        self, operation: str, **metadata: object
    ) -> AbstractContextManager[SpanHandle]:
        return span(
            f"keymaps::{operation}",
            logger_name=self._logger_name,
            component="keymaps",
            metadata=metadata,
        )

    def _require_action(self, binding: Binding, handle: SpanHandle) -> None:
        if binding.action_id not in self._actions:
            handle.add_metadata("missing_action", binding.action_id)
            raise KeyError(
                f"Binding '{binding.id}' references unknown action '{binding.action_id}'"
            )

    def _store(self, binding: Binding) -> None:
        self._bindings[binding.id] = binding
        signatures = self._index.setdefault(binding.mode, {})
        signatures.setdefault(binding.key_signature, set()).add(binding.id)

    def _drop(self, binding: Binding) -> None:
        self._bindings.pop(binding.id, None)
        signatures = self._index.get(binding.mode, {})
        ids = signatures.get(binding.key_signature)
        if ids is None:
            return
        ids.discard(binding.id)
        if not ids:
            del signatures[binding.key_signature]
        if not signatures:
            self._index.pop(binding.mode, None)


__all__ = [
    "KeymapConflictError",
    "KeymapRegistry",
    "RegistryStats",
]
