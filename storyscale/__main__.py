"""CLI entrypoint: python -m storyscale {generate|route|classify|sources|assess}."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path

from storyscale.config import get_log_config, get_router_config, load_config
from storyscale.errors import StoryScaleError
from storyscale.models import ContentRequest


def setup_logging(config: dict) -> None:
    """Configure logging with console + rotating file output."""
    log_cfg = get_log_config(config)
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(log_cfg["level"]).upper(), logging.INFO))

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler on stderr so stdout stays JSON
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    root.addHandler(console)

    # File handler (rotate at 5MB, keep 3 backups)
    log_file = Path(log_cfg["file"])
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3,
    )
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("trafilatura").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)


logger = logging.getLogger("storyscale")


def _dump(obj) -> None:
    if dataclasses.is_dataclass(obj):
        obj = dataclasses.asdict(obj)
    print(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


def _require(args: list[str], usage: str) -> str:
    if not args:
        print(f"Usage: python -m storyscale {usage}")
        sys.exit(1)
    return args[0]


def _load_request(path: str) -> ContentRequest:
    with open(path, encoding="utf-8") as f:
        return ContentRequest.from_dict(json.load(f))


async def cmd_generate(config: dict, args: list[str]) -> None:
    """Run the full pipeline for a JSON request file."""
    from storyscale.pipeline import run_generation

    request = _load_request(_require(args, "generate <request.json>"))
    result = await run_generation(config, request)
    _dump(result)


def cmd_route(config: dict, args: list[str]) -> None:
    """Show the source routing decision for a request."""
    from storyscale.classify import classify
    from storyscale.router import SourceRouter

    request = _load_request(_require(args, "route <request.json>"))
    classification, strategy = classify(request, get_router_config(config)["specialized_keywords"])
    router = SourceRouter(config)
    decision = router.optimize_for_cost(router.route(request, classification, strategy), request)
    _dump(decision)


def cmd_classify(config: dict, args: list[str]) -> None:
    """Show the classification and routing strategy for a request."""
    from storyscale.classify import classify

    request = _load_request(_require(args, "classify <request.json>"))
    classification, strategy = classify(request, get_router_config(config)["specialized_keywords"])
    _dump({"strategy": strategy, "classification": dataclasses.asdict(classification)})


def cmd_sources(config: dict, args: list[str]) -> None:
    """List catalog sources, optionally for one category."""
    from storyscale.sources import load_registry

    registry = load_registry()
    sources = registry.by_category(args[0]) if args else registry.all_sources()
    header = f"{'Domain':<24} {'Category':<14} {'Tier':<10} {'Trust':>5}  Name"
    print(header)
    print("-" * 70)
    for s in sources:
        print(f"{s.domain:<24} {s.category:<14} {s.tier:<10} {s.trust_score:>5.1f}  {s.name}")


def cmd_assess(config: dict, args: list[str]) -> None:
    """Score a text file without generating anything."""
    from storyscale.adapt import AdaptationContext, CulturalAdapter
    from storyscale.quality import QualityContext, QualityScorer

    path = _require(args, "assess <text.txt> [content_type] [language]")
    content_type = args[1] if len(args) > 1 else "article"
    language = args[2] if len(args) > 2 else "no"
    text = Path(path).read_text(encoding="utf-8")

    check = CulturalAdapter().check(text, AdaptationContext(language=language))
    scorer = QualityScorer(config)
    ctx = QualityContext(content_type=content_type, language=language, cultural_score=check.cultural_score)
    assessment = scorer.assess(text, ctx)
    _dump({
        "assessment": dataclasses.asdict(assessment),
        "cultural_check": dataclasses.asdict(check),
        "meets_threshold": assessment.overall >= scorer.threshold,
    })


COMMANDS = {
    "generate": cmd_generate,
    "route": cmd_route,
    "classify": cmd_classify,
    "sources": cmd_sources,
    "assess": cmd_assess,
}


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    if not argv or argv[0] not in COMMANDS:
        available = ", ".join(COMMANDS)
        print(f"Usage: python -m storyscale {{{available}}}")
        sys.exit(1)

    command, args = argv[0], argv[1:]
    config = load_config(os.environ.get("CONFIG_PATH", "config.yaml"))
    setup_logging(config)
    handler = COMMANDS[command]

    try:
        if asyncio.iscoroutinefunction(handler):
            asyncio.run(handler(config, args))
        else:
            handler(config, args)
    except StoryScaleError as exc:
        logger.error("%s failed: %s", command, exc)
        _dump(exc.to_dict())
        sys.exit(2)


if __name__ == "__main__":
    main()
