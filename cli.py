import argparse
import datetime
import logging
import sys
from typing import Optional

from catalog import ExerciseCatalog, NoExerciseSelected
from client import RemoteError
from codec import encode_segment, export_lines
from config import APP_VERSION
from formats import default_input
from models import LogEntry, RECORD_BOTH_LABEL, Side
from reports import export_report
from seed_sample_data import seed
from settings_schema import load_settings, save_settings
from store import LogStore
from sync_service import SyncService, open_client, open_store


def export_log(
    store: LogStore, fmt: str = "lines", date: Optional[str] = None
) -> str:
    """Whole-log or single-day export as storage lines or a readable report."""
    groups = [store.day_group(date)] if date else store.day_groups()
    groups = [g for g in groups if g.entries or g.status]
    if fmt == "report":
        return export_report(groups, store.catalog)
    return export_lines(groups)


def add_entry(
    store: LogStore,
    date: str,
    exercise_id: str,
    side: Optional[str] = None,
    notes: str = "",
    **fields: object,
) -> LogEntry:
    """Record one entry, overriding the exercise's default inputs with ``fields``."""
    definition = store.catalog.require(exercise_id)
    inputs = default_input(definition)
    updates = {
        k: v
        for k, v in fields.items()
        if v is not None and k in type(inputs).model_fields
    }
    return store.save_entry(
        date, exercise_id, inputs.model_copy(update=updates), side, notes
    )


def list_catalog(catalog: ExerciseCatalog, query: str = "") -> str:
    lines = []
    for category, definitions in catalog.grouped(query):
        lines.append(category)
        for ex in definitions:
            flag = " (單側)" if ex.is_unilateral else ""
            lines.append(f"  {ex.id}\t{ex.name}\t{ex.mode.value}{flag}")
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="RehabFlow utility commands")
    parser.add_argument("--yaml", default=None, help="settings file")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=APP_VERSION)
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--fmt", choices=["lines", "report"], default="lines")
    exp.add_argument("--date", default=None)
    exp.add_argument("--out", default=None)

    add = sub.add_parser("add")
    add.add_argument("--date", default=datetime.date.today().isoformat())
    add.add_argument("--exercise", required=True, help="exercise id")
    add.add_argument(
        "--side", choices=[Side.LEFT.value, Side.RIGHT.value, RECORD_BOTH_LABEL]
    )
    add.add_argument("--notes", default="")
    add.add_argument("--sets", type=int)
    for field in ("weight", "reps", "time", "resistance", "slope", "speed"):
        add.add_argument(f"--{field}")

    cat = sub.add_parser("catalog")
    cat.add_argument("--query", default="")

    status = sub.add_parser("status")
    status.add_argument("--date", required=True)
    status.add_argument("--text", required=True)

    delete = sub.add_parser("delete")
    target = delete.add_mutually_exclusive_group(required=True)
    target.add_argument("--date")
    target.add_argument("--entry")
    target.add_argument("--all", action="store_true")

    push = sub.add_parser("push")
    push.add_argument("--date", default=None)

    sub.add_parser("pull")

    seed_cmd = sub.add_parser("seed")
    seed_cmd.add_argument("--db", default="sheet.db")
    seed_cmd.add_argument("--catalog", default="exercises.yaml")

    cfg = sub.add_parser("config", help="store settings; an empty value clears one")
    cfg.add_argument("--endpoint")
    cfg.add_argument("--timeout", type=float)
    cfg.add_argument("--lock-timeout", type=float)
    cfg.add_argument("--scope")
    cfg.add_argument("--language")
    cfg.add_argument("--catalog")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "seed":
        seed(args.db, args.catalog)
        return 0

    if args.cmd == "config":
        try:
            saved = save_settings(
                args.yaml,
                endpoint_url=args.endpoint,
                timeout=args.timeout,
                lock_timeout=args.lock_timeout,
                scope=args.scope,
                language=args.language,
                catalog_path=args.catalog,
            )
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 1
        for key, value in saved.model_dump().items():
            print(f"{key}\t{value}")
        return 0

    settings = load_settings(args.yaml)
    store = open_store(settings)

    try:
        if args.cmd == "export":
            text = export_log(store, args.fmt, args.date)
            if not text:
                print("目前沒有紀錄可以匯出", file=sys.stderr)
                return 1
            if args.out:
                with open(args.out, "w", encoding="utf-8") as f:
                    f.write(text + "\n")
            else:
                print(text)
        elif args.cmd == "add":
            entry = add_entry(
                store,
                args.date,
                args.exercise,
                args.side,
                args.notes,
                sets=args.sets,
                weight=args.weight,
                reps=args.reps,
                time=args.time,
                resistance=args.resistance,
                slope=args.slope,
                speed=args.speed,
            )
            print(f"{entry.id}\t{encode_segment(entry)}")
        elif args.cmd == "catalog":
            if store.catalog.is_empty:
                print("No exercises available", file=sys.stderr)
                return 1
            print(list_catalog(store.catalog, args.query))
        elif args.cmd == "status":
            store.set_status(args.date, args.text)
        elif args.cmd == "delete":
            if args.all:
                store.delete_all()
            elif args.entry:
                if not store.delete_entry(args.entry):
                    print(f"No entry {args.entry}", file=sys.stderr)
                    return 1
            else:
                print(f"Deleted {store.delete_day(args.date)} entries")
        elif args.cmd in ("push", "pull"):
            client = open_client(settings)
            if client is None:
                print("endpoint_url is not configured", file=sys.stderr)
                return 1
            sync = SyncService(client, store)
            if args.cmd == "pull":
                print(f"Restored {sync.restore()} entries")
            elif args.date:
                print(sync.push_day(args.date))
            else:
                for message in sync.push_all():
                    print(message)
    except RemoteError as e:
        print(f"連線失敗: {e}", file=sys.stderr)
        return 2
    except NoExerciseSelected as e:
        print(str(e), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
