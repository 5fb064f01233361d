"""Command-line interface."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from edgeworker.config import Settings, ValidationConfigError, load_loop_config
from edgeworker.util.logging import get_logger, set_level
from edgeworker.validation import (
    ValidationLoopConfig,
    ValidationLoopState,
    create_initial_state,
    get_fixer_context,
    get_validation_result_schema,
    get_validation_summary,
    parse_validation_result,
    record_attempt,
    render_validation_fixer_prompt,
    should_continue_loop,
    should_proceed_after_validation,
    state_from_json,
    state_to_json,
)


logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edgeworker-validation", description="EdgeWorker validation loop tools"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_response_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--file", dest="response_file", help="Agent response text (default: stdin)")
        sub.add_argument("--structured", dest="structured_file", help="JSON structured output")

    def add_config_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--config", dest="config_path", help="YAML file with a validation section")
        sub.add_argument("--max-iterations", type=int, dest="max_iterations")
        sub.add_argument(
            "--hard-fail",
            action="store_true",
            dest="hard_fail",
            help="Block progress when retries are exhausted",
        )

    parse_cmd = subparsers.add_parser("parse", help="Parse one validation response")
    add_response_args(parse_cmd)

    record_cmd = subparsers.add_parser("record", help="Record a response into a state file")
    record_cmd.add_argument("state_file")
    add_response_args(record_cmd)
    add_config_args(record_cmd)

    summary_cmd = subparsers.add_parser("summary", help="Summarize a state file")
    summary_cmd.add_argument("state_file")

    fixer_cmd = subparsers.add_parser("fixer-prompt", help="Render the fixer prompt for a state file")
    fixer_cmd.add_argument("state_file")
    add_config_args(fixer_cmd)

    subparsers.add_parser("schema", help="Print the validation result JSON schema")
    return parser


def resolve_loop_config(settings: Settings, args: argparse.Namespace) -> ValidationLoopConfig:
    config = settings.loop_config()
    if getattr(args, "config_path", None):
        config = load_loop_config(Path(args.config_path))
    data: dict[str, Any] = config.model_dump()
    if getattr(args, "max_iterations", None) is not None:
        data["max_iterations"] = args.max_iterations
    if getattr(args, "hard_fail", False):
        data["continue_on_max_retries"] = False
    try:
        return ValidationLoopConfig(**data)
    except ValidationError as exc:
        raise ValidationConfigError(str(exc)) from exc


def _read_response(args: argparse.Namespace) -> tuple[str | None, Any]:
    if args.response_file:
        text = Path(args.response_file).read_text(encoding="utf-8")
    elif args.structured_file:
        text = None
    else:
        text = sys.stdin.read()
    structured = None
    if args.structured_file:
        try:
            structured = json.loads(Path(args.structured_file).read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring structured output that is not valid JSON.")
    return text, structured


def _load_state(path: Path) -> ValidationLoopState:
    if not path.exists():
        return create_initial_state()
    return state_from_json(path.read_text(encoding="utf-8"))


def _cmd_parse(args: argparse.Namespace, settings: Settings) -> int:
    text, structured = _read_response(args)
    result = parse_validation_result(text, structured)
    print(json.dumps(result.to_payload(), ensure_ascii=False))
    return 0


def _cmd_record(args: argparse.Namespace, settings: Settings) -> int:
    config = resolve_loop_config(settings, args)
    state_path = Path(args.state_file)
    state = _load_state(state_path)
    text, structured = _read_response(args)
    state = record_attempt(state, parse_validation_result(text, structured), config)
    state_path.parent.mkdir(parents=True, exist_ok=True)
    state_path.write_text(state_to_json(state), encoding="utf-8")
    print(get_validation_summary(state))
    if should_continue_loop(state) or should_proceed_after_validation(state, config):
        return 0
    return 1


def _cmd_summary(args: argparse.Namespace, settings: Settings) -> int:
    state = _load_state(Path(args.state_file))
    print(get_validation_summary(state))
    return 0


def _cmd_fixer_prompt(args: argparse.Namespace, settings: Settings) -> int:
    config = resolve_loop_config(settings, args)
    context = get_fixer_context(_load_state(Path(args.state_file)), config)
    if context is None:
        print("No fixer context: loop is complete or has no attempts.", file=sys.stderr)
        return 1
    print(render_validation_fixer_prompt(context))
    return 0


def _cmd_schema(args: argparse.Namespace, settings: Settings) -> int:
    print(json.dumps(get_validation_result_schema(), indent=2))
    return 0


_HANDLERS = {
    "parse": _cmd_parse,
    "record": _cmd_record,
    "summary": _cmd_summary,
    "fixer-prompt": _cmd_fixer_prompt,
    "schema": _cmd_schema,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings()
        set_level(settings.log_level)
        return _HANDLERS[args.command](args, settings)
    except (ValidationConfigError, ValidationError, UnicodeDecodeError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
