from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..ai.service import StubAIService
from ..config.loader import AppConfig, ConfigError, resolve_config
from ..logging.init import log_summary, setup_logging
from ..logging.issue_log import IssueLogBuffer
from ..models.dataset import DatasetKind
from ..services.summary import render_summary_line
from ..services.workspace import Workspace
from ..tabular.reader import TableReadError

"""CLI entrypoint.

Flow for every sub-command:
- Load .env, then the YAML config
- Read the datasets given with --clients / --workers / --tasks
- Run the sub-command against the workspace
- Log the SUMMARY line and map the validation outcome to the exit code

Results (rows, previews, recommendations...) are printed as JSON, one document
per line, so they can be piped; everything else goes through the labeled
logger.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_ISSUES = 2


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv.

    Used for DATA_ALCHEMIST_CONFIG; values already in the environment win
    unless override is set.
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="data-alchemist", description="Validate, query and export scheduling datasets")
    p.add_argument("--config", type=Path, default=None, help="YAML config file (default config/alchemist.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--clients", type=Path, default=None, help="clients .csv/.xlsx")
    p.add_argument("--workers", type=Path, default=None, help="workers .csv/.xlsx")
    p.add_argument("--tasks", type=Path, default=None, help="tasks .csv/.xlsx")
    p.add_argument("--issues-log", action="store_true", help="Append validation issues to the JSON Lines issue log")

    sub = p.add_subparsers(dest="command", required=True)
    datasets = [k.value for k in DatasetKind]

    sub.add_parser("validate", help="Print validation issues")

    sp = sub.add_parser("search", help="Filter a dataset with a search query")
    sp.add_argument("dataset", choices=datasets)
    sp.add_argument("query")

    sp = sub.add_parser("modify", help="Preview (and optionally apply) a modification sentence")
    sp.add_argument("text")
    sp.add_argument("--apply", action="store_true", help="Apply the preview and export the result")
    sp.add_argument("--output", type=Path, default=None)

    sub.add_parser("scan", help="Run the smart validation scan")

    sp = sub.add_parser("recommend", help="Print rule recommendations")
    sp.add_argument("--accept", action="append", default=[], metavar="ID", help="Accept a recommendation (repeatable)")
    sp.add_argument("--output", type=Path, default=None, help="Export accepted rules into this directory")

    sp = sub.add_parser("correct", help="Suggest corrections for a dataset's issues")
    sp.add_argument("dataset", choices=datasets)
    sp.add_argument("--apply", action="store_true", help="Apply every suggestion and export the result")
    sp.add_argument("--output", type=Path, default=None)

    sp = sub.add_parser("export", help="Write datasets, rules.json and prioritization.json")
    sp.add_argument("--output", type=Path, default=None)
    sp.add_argument("--accept-recommendations", action="store_true", help="Accept every recommendation as a rule first")
    return p.parse_args(argv)


def _emit(document: Any) -> None:
    print(json.dumps(document, ensure_ascii=False, default=str))


def _input_paths(args: argparse.Namespace) -> dict[DatasetKind, Path]:
    paths = {
        DatasetKind.CLIENTS: args.clients,
        DatasetKind.WORKERS: args.workers,
        DatasetKind.TASKS: args.tasks,
    }
    return {k: p for k, p in paths.items() if p is not None}


def _output_dir(args: argparse.Namespace, cfg: AppConfig) -> Path:
    return args.output if args.output is not None else Path(cfg.output_directory)


def _cmd_validate(ws: Workspace, args: argparse.Namespace, cfg: AppConfig, log) -> None:
    for kind, issues in ws.all_issues().items():
        for issue in issues:
            _emit({"dataset": kind.value, "row": issue.row, "message": issue.message})


def _cmd_search(ws: Workspace, args: argparse.Namespace, cfg: AppConfig, log) -> None:
    rows = ws.set_query(args.dataset, args.query)
    log.info(f"search {args.dataset}: {len(rows)}/{len(ws.rows(args.dataset))} rows match")
    for row in rows:
        _emit(row)


def _cmd_modify(ws: Workspace, args: argparse.Namespace, cfg: AppConfig, log) -> bool:
    preview = asyncio.run(ws.submit_command(args.text))
    if preview is None:
        log.error(ws.command_error or "command failed")
        return False
    _emit({
        "command": preview.command.describe(),
        "dataset": preview.command.dataset.value,
        "affected_rows": preview.affected_rows,
    })
    if args.apply:
        ws.apply_preview()
        ws.export(_output_dir(args, cfg))
    else:
        ws.cancel_preview()
    return True


def _cmd_scan(ws: Workspace, args: argparse.Namespace, cfg: AppConfig, log) -> None:
    insights = asyncio.run(ws.run_smart_scan())
    log.info(f"scan: {len(insights)} insights")
    for insight in insights:
        _emit({
            "severity": insight.severity.value,
            "message": insight.message,
            "field": insight.field,
            "suggested_fix": insight.suggested_fix,
        })


def _recommendation_doc(rec) -> dict[str, Any]:
    return {
        "id": rec.id,
        "type": rec.type.value,
        "description": rec.description,
        "confidence": rec.confidence,
        "reasoning": rec.reasoning,
        "parameters": rec.suggested_parameters,
    }


def _cmd_recommend(ws: Workspace, args: argparse.Namespace, cfg: AppConfig, log) -> bool:
    recommendations = asyncio.run(ws.generate_recommendations())
    log.info(f"recommend: {len(recommendations)} recommendations")
    for rec in recommendations:
        _emit(_recommendation_doc(rec))
    if not args.accept:
        return True
    known = {rec.id for rec in recommendations}
    unknown = [rid for rid in args.accept if rid not in known]
    if unknown:
        log.error(f"unknown recommendation id(s): {', '.join(unknown)}")
        return False
    for rid in args.accept:
        ws.accept_recommendation(rid)
    ws.export(_output_dir(args, cfg))
    return True


def _cmd_correct(ws: Workspace, args: argparse.Namespace, cfg: AppConfig, log) -> None:
    kind = DatasetKind.parse(args.dataset)
    issues = ws.issues(kind)
    suggestions = asyncio.run(ws.generate_corrections(kind))
    log.info(f"correct {kind.value}: {len(suggestions)} suggestions for {len(issues)} issues")
    for index, suggestion in suggestions.items():
        _emit({"issue": index, "message": issues[index].message, "suggestion": suggestion})
    if args.apply:
        ws.apply_all_corrections(kind)
        ws.export(_output_dir(args, cfg))


def _cmd_export(ws: Workspace, args: argparse.Namespace, cfg: AppConfig, log) -> None:
    if args.accept_recommendations:
        for rec in asyncio.run(ws.generate_recommendations()):
            ws.accept_recommendation(rec.id)
    paths = ws.export(_output_dir(args, cfg))
    for path in paths:
        _emit({"written": str(path)})


_COMMANDS = {
    "validate": _cmd_validate,
    "search": _cmd_search,
    "modify": _cmd_modify,
    "scan": _cmd_scan,
    "recommend": _cmd_recommend,
    "correct": _cmd_correct,
    "export": _cmd_export,
}


def _row_counts(ws: Workspace) -> dict[DatasetKind, int]:
    return {k: len(ws.rows(k)) for k in DatasetKind}


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        logger = setup_logging(debug=True)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))
    try:
        cfg = resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    if cfg.source is not None:
        logger.debug(f"config loaded from {cfg.source}")

    ws = Workspace(ai=StubAIService(latency=cfg.latency), weights=cfg.weights)
    paths = _input_paths(args)
    if not paths:
        logger.warning("no input files given (use --clients / --workers / --tasks)")
    try:
        ws.load_files(paths)
    except TableReadError as e:
        logger.error(f"load: {e}")
        return EXIT_FATAL

    handler = _COMMANDS[args.command]
    if handler(ws, args, cfg, logger) is False:
        return EXIT_FATAL

    issues = ws.all_issues()
    issue_counts = {k: len(v) for k, v in issues.items()}
    if args.issues_log:
        buffer = IssueLogBuffer(Path(cfg.issue_log_directory))
        for kind, kind_issues in issues.items():
            buffer.extend(kind_issues, source=ws.dataset(kind).source)
        log_path = buffer.flush()
        logger.info(f"issue log: {log_path}")

    summary_line = render_summary_line(_row_counts(ws), issue_counts)
    # log_summary が "SUMMARY " を付与するため除去
    log_summary(summary_line[len("SUMMARY "):])

    if any(issue_counts.values()):
        return EXIT_ISSUES
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
