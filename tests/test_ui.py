# tests/test_ui.py
from __future__ import annotations

import asyncio

import pytest

prompt_toolkit = pytest.importorskip("prompt_toolkit")

from exline import ui  # noqa: E402
from exline.config import PROMPT_INPUT_BOX, YAMLConfig  # noqa: E402
from exline.history import HistoryStore  # noqa: E402
from exline.prompt import InteractivePrompt, RecalledItem, TypedItem  # noqa: E402
from exline.session import Mode  # noqa: E402


def _items(*texts: str) -> list[RecalledItem]:
    return [RecalledItem(t) for t in texts]


# ----------------------------------------------------------------
# QuickPick
# ----------------------------------------------------------------


def test_quickpick_value_change_fires_event() -> None:
    widget = ui.QuickPick()
    seen: list[str] = []
    widget.on_did_change_value.add_handler(lambda w: seen.append(w.value))

    widget.value = "wq"

    assert widget.value == "wq"
    assert seen == ["wq"]


def test_quickpick_filters_case_insensitively() -> None:
    widget = ui.QuickPick()
    widget.items = _items("Write", "quit", "rewind")

    widget.value = "w"

    assert [it.text for it in widget.visible_items()] == ["Write", "rewind"]


def test_quickpick_accept_selects_current_item() -> None:
    widget = ui.QuickPick()
    widget.items = [TypedItem("s/a/b/"), *_items("w", "q")]
    picked: list[str] = []
    widget.on_did_change_selection.add_handler(
        lambda w: picked.append(w.selected_items[0].text)
    )

    widget.move(+1)
    widget.move(+1)
    widget.accept()
    widget.move(+1)
    widget.accept()

    assert picked == ["q", "s/a/b/"]


def test_quickpick_accept_without_matches_does_nothing() -> None:
    widget = ui.QuickPick()
    widget.items = _items("w")
    widget.value = "zzz"
    fired: list[object] = []
    widget.on_did_change_selection.add_handler(fired.append)

    widget.accept()

    assert fired == []
    assert list(widget.selected_items) == []


def test_quickpick_hidden_before_run_still_reports_hide() -> None:
    widget = ui.QuickPick()
    hides: list[object] = []
    widget.on_did_hide.add_handler(hides.append)

    async def scenario() -> None:
        widget.hide()
        widget.show()
        widget.show()
        await widget.wait_closed()

    asyncio.run(scenario())

    assert hides == [widget]


def test_quickpick_disposed_never_shows() -> None:
    widget = ui.QuickPick()
    hides: list[object] = []
    widget.on_did_hide.add_handler(hides.append)

    async def scenario() -> None:
        widget.dispose()
        widget.show()
        await widget.wait_closed()

    asyncio.run(scenario())

    assert hides == []


# ----------------------------------------------------------------
# Prompt cancellation
# ----------------------------------------------------------------


def test_cancelled_prompt_closes_running_quickpick() -> None:
    from prompt_toolkit.application import create_app_session
    from prompt_toolkit.input import create_pipe_input
    from prompt_toolkit.output import DummyOutput

    widget = ui.QuickPick()
    prompt = InteractivePrompt(lambda: widget)
    state: dict[str, bool] = {}

    async def scenario() -> None:
        task = asyncio.ensure_future(prompt("x"))
        await asyncio.sleep(0.1)
        state["running"] = widget._app is not None and widget._app.is_running
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.wait_for(widget.wait_closed(), timeout=2)

    with create_pipe_input() as inp:
        with create_app_session(input=inp, output=DummyOutput()):
            asyncio.run(scenario())

    assert state["running"]
    assert widget._app is None


# ----------------------------------------------------------------
# pick_from_list
# ----------------------------------------------------------------


class _ChoosingQuickPick(ui.QuickPick):
    def show(self) -> None:
        self.value = "q"
        self.accept()


class _DismissedQuickPick(ui.QuickPick):
    def show(self) -> None:
        self.on_did_hide.fire()


def test_pick_from_list_returns_selection(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(ui, "QuickPick", _ChoosingQuickPick)

    chosen = asyncio.run(ui.pick_from_list(["w", "q"], "history"))

    assert chosen == "q"


def test_pick_from_list_dismissed_returns_none(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(ui, "QuickPick", _DismissedQuickPick)

    assert asyncio.run(ui.pick_from_list(["w"], "history")) is None


# ----------------------------------------------------------------
# InputBox
# ----------------------------------------------------------------


class FakePromptSession:
    def __init__(self, answer: str | None = None, error=None) -> None:
        self.answer = answer
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def prompt_async(self, message: str, default: str = "") -> str:
        self.calls.append((message, default))
        if self.error is not None:
            raise self.error
        return self.answer or ""


def test_input_box_seeds_prompt_and_resets_history_cursor() -> None:
    history = HistoryStore()
    history.add("w")
    history.index = 0
    box = ui.InputBox(history)
    box.session = FakePromptSession("12")

    result = asyncio.run(box("1"))

    assert result == "12"
    assert box.session.calls == [(":", "1")]
    assert history.index == 1


@pytest.mark.parametrize("error", [KeyboardInterrupt(), EOFError()])
def test_input_box_cancel_resolves_none(error: BaseException) -> None:
    box = ui.InputBox(HistoryStore())
    box.session = FakePromptSession(error=error)

    assert asyncio.run(box("")) is None


def test_input_box_binds_history_keys() -> None:
    box = ui.InputBox(HistoryStore())

    keys = {b.keys for b in box.build_key_bindings().bindings}

    assert len(keys) == 2


# ----------------------------------------------------------------
# Status bar and style
# ----------------------------------------------------------------


def test_status_bar_render_includes_mode_and_recording() -> None:
    bar = ui.TerminalStatusBar()

    parts = bar.render("E16: Invalid range", Mode.INSERT, True, True)

    assert list(parts) == [
        ("class:status.mode", "-- INSERT -- "),
        ("class:status.recording", "recording "),
        ("class:status.error", "E16: Invalid range"),
    ]


def test_status_bar_set_prints_only_when_there_is_something_to_show(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    printed: list[object] = []
    monkeypatch.setattr(
        ui, "print_formatted_text", lambda text, style=None: printed.append(text)
    )
    bar = ui.TerminalStatusBar()

    bar.set("", Mode.NORMAL, False)
    assert printed == []

    bar.set("3 fewer lines", Mode.NORMAL, False)
    assert bar.text == "3 fewer lines"
    assert list(printed[0]) == [("class:status", "3 fewer lines")]


def test_build_style_applies_string_overrides() -> None:
    cfg = YAMLConfig(
        {"ui": {"theme": {"style": {"status": "#00ff00", "bad": 3}}}}
    )

    rules = dict(ui.build_style(cfg).style_rules)

    assert rules["status"] == "#00ff00"
    assert "bad" not in rules
    assert rules["status.error"] == "#ff5f5f bold"


# ----------------------------------------------------------------
# Strategy selection
# ----------------------------------------------------------------


def test_build_prompt_strategy_defaults_to_picker() -> None:
    strategy = ui.build_prompt_strategy(None, HistoryStore(), None)

    assert isinstance(strategy, InteractivePrompt)


def test_build_prompt_strategy_input_box() -> None:
    cfg = YAMLConfig(
        {"command_line": {"prompt": PROMPT_INPUT_BOX, "placeholder": "Ex"}}
    )

    strategy = ui.build_prompt_strategy(cfg, HistoryStore(), None)

    assert isinstance(strategy, ui.InputBox)
    assert strategy.placeholder == "Ex"


def test_build_prompt_strategy_rejects_unknown_kind() -> None:
    cfg = YAMLConfig({"command_line": {"prompt": "popup"}})

    with pytest.raises(ValueError):
        ui.build_prompt_strategy(cfg, HistoryStore(), None)
