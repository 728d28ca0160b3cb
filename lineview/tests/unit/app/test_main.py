from __future__ import annotations

import asyncio
import json

from lineview.app.main import _parse_args, load_settings, render_rows, run_demo
from lineview.domain.settings import SettingsConfig
from lineview.usecases.invalidation_subscriber import SubscriberState


def test_run_demo_plays_scripted_session() -> None:
    panel = asyncio.run(run_demo(SettingsConfig()))

    assert not panel.running
    assert panel.is_elevated
    assert [r.line_item_id for r in panel.rows] == ["LI-2", "LI-3"]
    assert not panel.has_stock_warning
    assert panel.subscriber.state is SubscriberState.UNSUBSCRIBED
    assert [r.record_id for r in panel.dispatcher.navigator.requests] == ["P-2"]


def test_render_rows_marks_stock_errors() -> None:
    panel = asyncio.run(run_demo(SettingsConfig()))
    table = render_rows(panel.rows)

    assert "USB-C Cable" in table
    assert "Docking Station" in table
    assert " !" not in table
    assert render_rows([]).endswith("(no rows)")


def test_load_settings_merges_flags_over_file(tmp_path) -> None:
    (tmp_path / "settings.json").write_text(
        json.dumps({"api_base_url": "http://file.local", "stream_url": "http://file.local/stream"}),
        encoding="utf-8",
    )
    args = _parse_args(["--settings-dir", str(tmp_path), "--api-base-url", "http://flag.local/", "--debug"])

    settings = load_settings(args)

    assert settings.api_base_url == "http://flag.local"
    assert settings.stream_url == "http://file.local/stream"
    assert settings.debug_logging is True
