import pytest

from quirks.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeymapConflictError,
    KeymapRegistry,
    load_default_keymaps,
)
from quirks.keymaps.defaults import DEFAULT_BINDINGS, default_actions


def make_action(action_id: str = "core.test", description: str = "") -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None, description=description)


def make_sequence(*keys: str) -> KeySequence:
    return KeySequence.from_strings(*keys)


def make_binding(
    *,
    binding_id: str,
    mode: str = "normal",
    sequence: KeySequence | None = None,
    action_id: str = "core.test",
    description: str = "",
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=sequence or make_sequence("g", "g"),
        action_id=action_id,
        description=description,
    )


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    action = make_action()
    registry.register_action(action)
    binding = make_binding(binding_id="normal.gg")

    registry.register_binding(binding)

    assert registry.stats().binding_count == 1
    assert list(registry.iter_bindings(mode="normal")) == [binding]


def test_register_binding_conflict_detection() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    binding = make_binding(binding_id="normal.gg")
    registry.register_binding(binding)

    with pytest.raises(KeymapConflictError):
        registry.register_binding(make_binding(binding_id="normal.gg.duplicate"))


def test_same_keys_in_different_modes_do_not_conflict() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    registry.register_binding(make_binding(binding_id="normal.gg"))
    registry.register_binding(make_binding(binding_id="visual.gg", mode="visual"))

    assert registry.stats().binding_count == 2
    assert registry.modes() == ("normal", "visual")


def test_register_binding_unknown_action() -> None:
    registry = KeymapRegistry()

    with pytest.raises(KeyError):
        registry.register_binding(make_binding(binding_id="normal.gg"))


def test_register_binding_with_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    first = make_binding(binding_id="binding")
    second = make_binding(binding_id="binding")

    registry.register_binding(first)
    registry.register_binding(second, replace=True)

    assert list(registry.iter_bindings()) == [second]


def test_update_binding_changes_sequence() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="binding")
    registry.register_binding(binding)
    before = registry.revision()

    updated = registry.update_binding(
        "binding", sequence=make_sequence("d", "d"), description="delete line"
    )

    assert updated.sequence.tokens == ("d", "d")
    assert updated.description == "delete line"
    assert registry.revision() == before + 1


def test_unregister_binding() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="binding")
    registry.register_binding(binding)

    removed = registry.unregister_binding("binding")

    assert removed == binding
    assert registry.stats().binding_count == 0
    assert registry.unregister_binding("binding") is None


def test_describe_falls_back_to_action_description() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action(description="Go to the first line"))
    registry.register_binding(make_binding(binding_id="normal.gg"))
    registry.register_binding(
        make_binding(
            binding_id="normal.ctrl-home",
            sequence=make_sequence("ctrl+HOME"),
            description="Top of buffer",
        )
    )

    rows = registry.describe("normal")

    assert rows == [("gg", "Go to the first line"), ("<ctrl+HOME>", "Top of buffer")]


def test_load_default_keymaps_include_filters() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(
        registry,
        include_actions=("core.enter_insert",),
        include_bindings=("normal.i",),
    )

    assert registry.stats().binding_count == 1
    assert registry.get_binding("normal.i").action_id == "core.enter_insert"


def test_load_default_keymaps_exclude_actions_drops_their_bindings() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, exclude_actions=("edit.undo",))

    with pytest.raises(KeyError):
        registry.get_binding("normal.u")
    assert registry.get_binding("normal.ctrl-r").action_id == "edit.redo"


def test_load_default_keymaps_per_mode_override() -> None:
    registry = KeymapRegistry()
    custom_binding = Binding(
        id="normal.i",
        mode="normal",
        sequence=KeySequence.from_strings("ctrl+i"),
        action_id="core.enter_insert",
    )

    load_default_keymaps(
        registry,
        per_mode_overrides={"normal": (custom_binding,)},
    )

    binding = registry.get_binding("normal.i")
    assert binding.sequence.tokens == ("ctrl+i",)


def test_per_mode_override_must_target_its_mode() -> None:
    registry = KeymapRegistry()
    stray = Binding(
        id="insert.i",
        mode="insert",
        sequence=KeySequence.from_strings("ctrl+i"),
        action_id="core.enter_insert",
    )

    with pytest.raises(ValueError):
        load_default_keymaps(registry, per_mode_overrides={"normal": (stray,)})


def test_default_bindings_reference_known_actions() -> None:
    action_ids = {action.id for action in default_actions()}

    assert all(binding.action_id in action_ids for binding in DEFAULT_BINDINGS)
    assert len({binding.id for binding in DEFAULT_BINDINGS}) == len(DEFAULT_BINDINGS)


def test_default_bindings_cover_every_mode() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)

    assert set(registry.modes()) == {
        "normal",
        "insert",
        "visual",
        "visual_line",
        "visual_block",
        "command",
        "search",
        "help",
    }
    assert registry.get_binding("normal.g_g").action_id == "motion.buffer_start"
    assert registry.get_binding("normal.SG").action_id == "motion.buffer_end"
    assert registry.get_binding("visual_line.y").action_id == "visual.yank"
