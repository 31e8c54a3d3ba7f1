"""``nvim-bridge`` entry point: spawn the editor and host it in Textual."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence, Tuple

from nvim_bridge.errors import SetupError
from nvim_bridge.runtime import telemetry
from nvim_bridge.runtime.config import BridgeConfig
from nvim_bridge.runtime.process import spawn_editor
from nvim_bridge.session import BridgeSession
from nvim_bridge.surface import CellSurface

_SWITCHES = {"--multigrid", "--popup", "--messages"}
_VALUED = {"--trace", "--nvim", "--width", "--height"}


def split_leading(argv: Sequence[str]) -> Tuple[list[str], list[str]]:
    """Split ``argv`` at the first argument that isn't a bridge flag.

    Everything from that argument on belongs to the editor, including
    later arguments that happen to look like bridge flags.
    """

    index = 0
    while index < len(argv):
        token = argv[index]
        name = token.split("=", 1)[0]
        if name in _SWITCHES:
            index += 1
        elif name in _VALUED:
            index += 1 if "=" in token else 2
        else:
            break
    index = min(index, len(argv))
    return list(argv[:index]), list(argv[index:])


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nvim-bridge",
        description="Run an embedded editor inside a Textual terminal host.",
        epilog="Arguments after the last bridge flag are passed to the editor.",
    )
    parser.add_argument(
        "--multigrid",
        action="store_true",
        help="Request ext_multigrid (one surface per editor grid)",
    )
    parser.add_argument(
        "--popup",
        action="store_true",
        help="Request ext_popupmenu",
    )
    parser.add_argument(
        "--messages",
        action="store_true",
        help="Request ext_messages",
    )
    parser.add_argument(
        "--trace",
        metavar="TARGET",
        help="Trace decoded traffic to TARGET ('-' for the console)",
    )
    parser.add_argument("--nvim", metavar="BINARY", help="Editor binary to spawn")
    parser.add_argument("--width", type=int, help="Initial grid width in cells")
    parser.add_argument("--height", type=int, help="Initial grid height in cells")
    return parser


def parse_args(
    argv: Optional[Sequence[str]] = None,
    *,
    base: Optional[BridgeConfig] = None,
) -> BridgeConfig:
    """Turn the command line into a ``BridgeConfig`` layered over the environment."""

    raw = list(sys.argv[1:] if argv is None else argv)
    leading, editor_args = split_leading(raw)
    args = _build_parser().parse_args(leading)

    config = base if base is not None else BridgeConfig.from_env()
    changes: dict[str, object] = {"editor_args": tuple(editor_args)}
    if args.multigrid:
        changes["multigrid"] = True
    if args.popup:
        changes["popups"] = True
    if args.messages:
        changes["messages"] = True
    if args.trace:
        changes["trace"] = args.trace
    if args.nvim:
        changes["nvim_binary"] = args.nvim
    if args.width is not None:
        changes["width"] = args.width
    if args.height is not None:
        changes["height"] = args.height
    return config.with_overrides(**changes)


def configure_logging(config: BridgeConfig) -> None:
    """Keep log records off the terminal once the host owns it."""

    if config.trace:
        telemetry.configure(trace=config.trace)
    else:
        telemetry.configure(preset="production")


def run(config: BridgeConfig) -> int:
    editor = spawn_editor(config.editor_args, binary=config.nvim_binary)
    configure_logging(config)
    session = BridgeSession(config, CellSurface(config.width, config.height))
    try:
        from nvim_bridge.adapters.textual.app import NvimBridgeApp

        session.attach(editor.stdin)
        session.start_decoder(editor.stdout)
        NvimBridgeApp(session).run()
    finally:
        session.close()
        status = editor.close()
        telemetry.record_event("process.exited", data={"status": status})
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        config = parse_args(argv)
    except ValueError as exc:
        telemetry.record_event(
            "setup.failed", level="error", data={"reason": str(exc)}
        )
        return 1

    try:
        return run(config)
    except SetupError as exc:
        telemetry.record_event(
            "setup.failed", level="error", data={"reason": str(exc)}
        )
        return 1


if __name__ == "__main__":  # pragma: no cover - manual run
    raise SystemExit(main())
