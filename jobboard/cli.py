"""Command line driver for the job board."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from jobboard.board import JobBoard
from jobboard.config import load_settings
from jobboard.errors import ValidationError
from jobboard.log import get_logger, set_level
from jobboard.models import Applicant, ErrorKind, JobRecord, LoadStatus

log = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="jobboard", description="Browse job listings and track applications.")
    parser.add_argument("--settings", type=Path, default=None, help="Path to a YAML settings file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list", help="List jobs, optionally filtered")
    ls.add_argument("--search", default="", help="Match title or description")
    ls.add_argument("--location", default="")
    ls.add_argument("--type", dest="job_type", default="", help="Exact job type, e.g. Full-time")
    ls.add_argument("--company", default="")
    ls.add_argument("--json", action="store_true", help="Print jobs as JSON")

    show = sub.add_parser("show", help="Show one job")
    show.add_argument("job_id")

    apply = sub.add_parser("apply", help="Submit an application")
    apply.add_argument("job_id")
    apply.add_argument("--name", required=True)
    apply.add_argument("--email", required=True)
    apply.add_argument("--resume", required=True, help="Path to resume file")
    apply.add_argument("--cover-letter", default=None)

    sub.add_parser("applied", help="List jobs marked as applied")

    mark = sub.add_parser("mark", help="Mark a job as applied without submitting")
    mark.add_argument("job_id")

    unmark = sub.add_parser("unmark", help="Remove a job from the applied list")
    unmark.add_argument("job_id")
    return parser.parse_args(argv)


def _line(job: JobRecord, applied: bool) -> str:
    flag = "[applied] " if applied else ""
    return f"{job.id:>6}  {flag}{job.title} — {job.company} ({job.location}, {job.job_type})"


def _detail(job: JobRecord, applied: bool) -> str:
    lines = [
        f"{job.title}",
        f"  Company:  {job.company}",
        f"  Location: {job.location}",
        f"  Type:     {job.job_type}",
    ]
    if job.salary:
        lines.append(f"  Salary:   {job.salary}")
    if job.posted_date:
        lines.append(f"  Posted:   {job.posted_date}")
    if job.requirements:
        lines.append(f"  Requires: {', '.join(job.requirements)}")
    lines.append("")
    lines.append(job.description)
    lines.append("")
    lines.append("Status: applied" if applied else "Status: not applied")
    return "\n".join(lines)


def _cmd_list(board: JobBoard, args: argparse.Namespace) -> int:
    if board.load_all() is LoadStatus.FAILED:
        print(f"Could not load jobs: {board.last_error()}", file=sys.stderr)
        return 1
    board.set_filter(
        search=args.search,
        location=args.location,
        type=args.job_type,
        company=args.company,
    )
    jobs = board.filtered_jobs()
    if args.json:
        print(json.dumps([dict(j.to_dict(), applied=board.is_applied(j.id)) for j in jobs], indent=2))
        return 0
    if not jobs:
        print("No jobs match the current filters.")
        return 0
    for job in jobs:
        print(_line(job, board.is_applied(job.id)))
    log.debug("Listed %d of %d jobs", len(jobs), len(board.all_jobs()))
    return 0


def _cmd_show(board: JobBoard, args: argparse.Namespace) -> int:
    job = board.load_one(args.job_id)
    if job is None:
        if board.last_error_kind() is ErrorKind.NOT_FOUND:
            print(f"No such job: {args.job_id}", file=sys.stderr)
            return 2
        print(f"Could not load job {args.job_id}: {board.last_error()}", file=sys.stderr)
        return 1
    print(_detail(job, board.is_applied(job.id)))
    return 0


def _cmd_apply(board: JobBoard, args: argparse.Namespace) -> int:
    if board.is_applied(args.job_id):
        print(f"Already applied to job {args.job_id}.")
        return 0
    applicant = Applicant(
        name=args.name,
        email=args.email,
        resume_path=args.resume,
        cover_letter=args.cover_letter,
    )
    try:
        result = board.submit_application(args.job_id, applicant)
    except ValidationError as exc:
        print(f"Invalid application — {exc}", file=sys.stderr)
        return 2
    print(result.message)
    return 0 if result.ok else 1


def _cmd_applied(board: JobBoard, args: argparse.Namespace) -> int:
    ids = board.ledger.ids()
    if not ids:
        print("You have not applied to any jobs yet.")
        return 0
    board.load_all()
    known = {job.id: job for job in board.applied_jobs()}
    for job_id in ids:
        job = known.get(job_id)
        print(_line(job, True) if job else f"{job_id:>6}  [applied] (no longer listed)")
    return 0


def _cmd_mark(board: JobBoard, args: argparse.Namespace) -> int:
    if board.mark_applied(args.job_id):
        print(f"Marked job {args.job_id} as applied.")
    else:
        print(f"Job {args.job_id} was already marked as applied.")
    return 0


def _cmd_unmark(board: JobBoard, args: argparse.Namespace) -> int:
    if board.unmark_applied(args.job_id):
        print(f"Removed job {args.job_id} from applied jobs.")
    else:
        print(f"Job {args.job_id} was not marked as applied.")
    return 0


_COMMANDS = {
    "list": _cmd_list,
    "show": _cmd_show,
    "apply": _cmd_apply,
    "applied": _cmd_applied,
    "mark": _cmd_mark,
    "unmark": _cmd_unmark,
}


def main(argv: list[str] | None = None, board: JobBoard | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        set_level("DEBUG")
    if board is None:
        board = JobBoard.from_settings(load_settings(args.settings))
    return _COMMANDS[args.command](board, args)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
