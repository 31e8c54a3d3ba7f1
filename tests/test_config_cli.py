from __future__ import annotations

from typing import Any, Dict, List

import pytest

from nvim_bridge import cli
from nvim_bridge.runtime.config import BridgeConfig
from nvim_bridge.runtime.process import EMBED_FLAG, build_argv


def test_from_env_reads_prefixed_settings() -> None:
    config = BridgeConfig.from_env(
        {
            "NVIM_BRIDGE_NVIM": "/opt/nvim/bin/nvim",
            "NVIM_BRIDGE_WIDTH": "100",
            "NVIM_BRIDGE_HEIGHT": "not-a-number",
            "NVIM_BRIDGE_MULTIGRID": "yes",
            "NVIM_BRIDGE_PASTE_CHUNK": "512",
        }
    )

    assert config.nvim_binary == "/opt/nvim/bin/nvim"
    assert config.width == 100
    assert config.height == 32
    assert config.multigrid
    assert not config.popups
    assert config.paste_chunk_size == 512


def test_ui_options_follow_flags() -> None:
    assert BridgeConfig().ui_options() == {"rgb": True, "ext_linegrid": True}
    options = BridgeConfig(multigrid=True, popups=True, messages=True).ui_options()
    assert options == {
        "rgb": True,
        "ext_linegrid": True,
        "ext_multigrid": True,
        "ext_messages": True,
        "ext_popupmenu": True,
    }


def test_invalid_dimensions_are_rejected() -> None:
    with pytest.raises(ValueError):
        BridgeConfig(width=0)
    with pytest.raises(ValueError):
        BridgeConfig().with_overrides(paste_chunk_size=0)


def test_split_leading_stops_at_first_editor_argument() -> None:
    leading, rest = cli.split_leading(
        ["--multigrid", "--trace", "-", "--width=90", "notes.txt", "--popup"]
    )

    assert leading == ["--multigrid", "--trace", "-", "--width=90"]
    assert rest == ["notes.txt", "--popup"]


def test_split_leading_with_dangling_value_flag() -> None:
    assert cli.split_leading(["--nvim"]) == (["--nvim"], [])


def test_parse_args_layers_flags_over_base_config() -> None:
    config = cli.parse_args(
        ["--popup", "--messages", "--height", "40", "-u", "NONE", "--multigrid"],
        base=BridgeConfig(width=90),
    )

    assert config.popups and config.messages
    assert not config.multigrid
    assert (config.width, config.height) == (90, 40)
    assert config.editor_args == ("-u", "NONE", "--multigrid")


def test_build_argv_prefixes_the_embed_flag() -> None:
    assert build_argv("nvim", ["-u", "NONE"]) == ["nvim", EMBED_FLAG, "-u", "NONE"]


def test_main_reports_missing_editor_as_setup_failure() -> None:
    status = cli.main(["--nvim", "nvim-bridge-test-no-such-editor"])
    assert status == 1


def test_main_rejects_invalid_dimensions() -> None:
    assert cli.main(["--width", "0"]) == 1


def test_logging_moves_off_the_terminal_unless_tracing(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: List[Dict[str, Any]] = []
    monkeypatch.setattr(cli.telemetry, "configure", lambda **kwargs: calls.append(kwargs))

    cli.configure_logging(BridgeConfig())
    cli.configure_logging(BridgeConfig(trace="-"))

    assert calls == [{"preset": "production"}, {"trace": "-"}]
