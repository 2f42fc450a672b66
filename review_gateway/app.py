import argparse
import json
from pathlib import Path

from . import __version__
from .config import Settings
from .logger import get_logger
from .models import Entity
from .parser import parse_decision
from .prompt import SYSTEM_PROMPT, build_prompt
from .reviewer import review_merge
from .schema import validate_review_request


def load_request(input_path: Path) -> dict:
    """Read a review request JSON file and exit if it is structurally invalid."""
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Input is not valid JSON: {e}")
    errors = validate_review_request(data)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    return data


def cmd_validate(args: argparse.Namespace) -> None:
    load_request(Path(args.input))
    print("Valid")


def cmd_prompt(args: argparse.Namespace) -> None:
    data = load_request(Path(args.input))
    prompt = build_prompt(
        Entity.from_dict(data["entity1"]),
        Entity.from_dict(data["entity2"]),
        data["similarity"],
    )
    print("System:")
    print(SYSTEM_PROMPT)
    print()
    print("Prompt:")
    print(prompt)


def cmd_review(args: argparse.Namespace, settings: Settings) -> None:
    data = load_request(Path(args.input))
    if not settings.api_key:
        raise SystemExit("DEEPINFRA_API_KEY not set. Set env var or add it to .env.")
    model = args.model or settings.model
    try:
        result = review_merge(
            settings.api_key,
            model,
            Entity.from_dict(data["entity1"]),
            Entity.from_dict(data["entity2"]),
            data["similarity"],
            api_url=settings.api_url,
        )
    except Exception as e:
        raise SystemExit(f"Review failed: {e}")
    print(f"Decision: {result.decision.value}")
    print(f"Tokens: input={result.input_tokens} output={result.output_tokens} total={result.total_tokens}")


def cmd_parse(args: argparse.Namespace) -> None:
    if args.input:
        input_path = Path(args.input)
        if not input_path.exists():
            raise SystemExit(f"Input file not found: {input_path}")
        text = input_path.read_text(encoding="utf-8")
    else:
        text = args.text
    print(parse_decision(text).value)


def cmd_serve(args: argparse.Namespace, settings: Settings) -> None:
    import uvicorn
    from .api import create_app

    host = args.host or settings.host
    port = args.port or settings.port
    get_logger().info("Starting review gateway", host=host, port=port, model=settings.model)
    uvicorn.run(create_app(settings), host=host, port=port)


def main(argv=None):
    parser = argparse.ArgumentParser(prog="review-gateway", description="AI review gateway for entity merge decisions")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    srv = subparsers.add_parser("serve", help="Run the HTTP gateway (GET /health, POST /review)")
    srv.add_argument("--host", help="Bind address (default: HOST or 0.0.0.0)")
    srv.add_argument("--port", type=int, help="Port (default: PORT or 8000)")
    srv.set_defaults(func=cmd_serve, needs_settings=True)

    val = subparsers.add_parser("validate", help="Validate a review request JSON")
    val.add_argument("--input", required=True, help="Path to review request JSON")
    val.set_defaults(func=cmd_validate)

    prm = subparsers.add_parser("prompt", help="Print the prompt that would be sent for a review request")
    prm.add_argument("--input", required=True, help="Path to review request JSON")
    prm.set_defaults(func=cmd_prompt)

    rev = subparsers.add_parser("review", help="Run a live review against the completion API")
    rev.add_argument("--input", required=True, help="Path to review request JSON")
    rev.add_argument("--model", help="Model identifier (default: DEEPINFRA_MODEL)")
    rev.set_defaults(func=cmd_review, needs_settings=True)

    prs = subparsers.add_parser("parse", help="Parse a decision from raw model output")
    src = prs.add_mutually_exclusive_group(required=True)
    src.add_argument("--text", help="Raw model output")
    src.add_argument("--input", help="File containing raw model output")
    prs.set_defaults(func=cmd_parse)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    if getattr(args, "needs_settings", False):
        # Load .env if present (DEEPINFRA_API_KEY, DEEPINFRA_MODEL, etc.)
        settings = Settings.default()
        get_logger(level=settings.log_level, log_dir=settings.log_dir)
        args.func(args, settings)
        return

    args.func(args)


if __name__ == "__main__":
    main()
