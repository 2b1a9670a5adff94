from __future__ import annotations

from quirks.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
    make_token,
)


def make_action(action_id: str) -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_binding(
    binding_id: str,
    *,
    mode: str = "normal",
    keys: tuple[str, ...] = ("g", "g"),
    action_id: str = "core.test",
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=KeySequence.from_strings(*keys),
        action_id=action_id,
    )


def build_registry(bindings: list[Binding]) -> KeymapRegistry:
    registry = KeymapRegistry()
    action_ids = {binding.action_id for binding in bindings}
    for action_id in action_ids:
        registry.register_action(make_action(action_id))
    for binding in bindings:
        registry.register_binding(binding)
    return registry


def test_resolver_matches_exact_sequence() -> None:
    binding = make_binding("normal.gg")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g", "g"))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == binding.id


def test_resolver_reports_pending_for_prefix() -> None:
    binding = make_binding("normal.gg")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g",))

    assert result.status == "pending"
    assert result.next_expected == ("g",)


def test_resolver_prefers_match_over_longer_sequences() -> None:
    short = make_binding("normal.g", keys=("g",), action_id="core.short")
    long = make_binding("normal.gg", action_id="core.long")
    registry = build_registry([short, long])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g",))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.action.id == "core.short"


def test_resolver_misses_other_modes() -> None:
    registry = build_registry([make_binding("normal.gg")])
    resolver = KeymapResolver(registry)

    assert resolver.resolve("insert", ("g", "g")).status == "miss"
    assert resolver.resolve("normal", ("g", "x")).status == "miss"


def test_resolver_normalizes_modifier_tokens() -> None:
    binding = make_binding("normal.redo", keys=("ctrl+r",), action_id="edit.redo")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", (make_token("R", ("CTRL",)),))

    assert make_token("R", ("CTRL",)) == "ctrl+r"
    assert result.status == "match"


def test_make_token_drops_shift_for_printable_keys() -> None:
    assert make_token("G", ("shift",)) == "G"
    assert make_token("<Esc>") == "ESC"
    assert make_token("tab", ("shift",)) == "shift+TAB"


def test_resolver_cache_refreshes_on_revision() -> None:
    registry = build_registry([])
    resolver = KeymapResolver(registry)

    miss = resolver.resolve("normal", ("x",))
    assert miss.status == "miss"

    new_binding = make_binding("normal.x", keys=("x",), action_id="core.x")
    registry.register_action(make_action("core.x"))
    registry.register_binding(new_binding)

    match = resolver.resolve("normal", ("x",))
    assert match.status == "match"
    assert match.match is not None
    assert match.match.binding.id == new_binding.id
