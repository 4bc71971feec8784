"""CLI entry point for the flight category monitor."""

import argparse
import logging

from pydantic import ValidationError

from flightcat.config.loader import (
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from flightcat.forecast.classifier import get_scheme
from flightcat.history.reconstruction import metar_history, taf_history
from flightcat.history.verification import verify_forecasts
from flightcat.models.common import HOUR, epoch_now, epoch_to_iso
from flightcat.pipeline.fetch_pipeline import FetchPipeline
from flightcat.reporting.formatters import format_status_table
from flightcat.reporting.health_checker import HealthChecker
from flightcat.reporting.status_tracker import StatusTracker
from flightcat.storage import state_repo
from flightcat.storage.database import connect, run_migrations

DEFAULT_CONFIG = "ops/configs/default.yaml"
DEFAULT_DB = "data/flightcat.db"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="flightcat",
        description="METAR/TAF flight category monitor",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument("--db", default=DEFAULT_DB, help="SQLite DB path")

    sub = parser.add_subparsers(dest="command")

    # fetch
    fetch_p = sub.add_parser("fetch", help="Run one fetch cycle")
    fetch_p.add_argument(
        "--force", action="store_true", help="Bypass the response cache"
    )

    # status
    sub.add_parser("status", help="Show current and forecast categories")

    # history
    hist_p = sub.add_parser("history", help="Show stored history for an airport")
    hist_p.add_argument("icao", help="ICAO airport code")
    hist_p.add_argument("--hours", type=int, default=24, help="Look-back window")
    hist_p.add_argument(
        "--taf", action="store_true", help="Show the reconstructed TAF series"
    )

    # verify
    verify_p = sub.add_parser("verify", help="Compare TAFs against METARs")
    verify_p.add_argument("icao", help="ICAO airport code")
    verify_p.add_argument("--hours", type=int, default=24, help="Look-back window")

    # health
    sub.add_parser("health", help="Run health checks")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    # pause / resume
    sub.add_parser("pause", help="Pause fetching")
    sub.add_parser("resume", help="Resume fetching")

    # daemon
    daemon_p = sub.add_parser("daemon", help="Run fetch cycles continuously")
    daemon_p.add_argument(
        "--interval", type=int, default=None, help="Seconds between fetches"
    )
    daemon_p.add_argument(
        "--stop", action="store_true", help="Stop the running daemon"
    )
    daemon_p.add_argument(
        "--status", action="store_true", help="Show daemon status"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except ValidationError as e:
        print(f"Invalid config {args.config}:\n{e}")
        return 1

    if args.command == "fetch":
        return _cmd_fetch(config, args)
    elif args.command == "status":
        return _cmd_status(config, args)
    elif args.command == "history":
        return _cmd_history(config, args)
    elif args.command == "verify":
        return _cmd_verify(config, args)
    elif args.command == "health":
        return _cmd_health(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    elif args.command == "pause":
        return _cmd_pause(args)
    elif args.command == "resume":
        return _cmd_resume(args)
    elif args.command == "daemon":
        return _cmd_daemon(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_fetch(config, args) -> int:
    pipeline = FetchPipeline(config, args.db)
    summary = pipeline.run(force=args.force)
    return 0 if not summary.errors else 1


def _cmd_status(config, args) -> int:
    conn = connect(args.db)
    run_migrations(conn)
    tracker = StatusTracker(conn, config)
    statuses = tracker.current(epoch_now())
    paused = state_repo.is_paused(conn)

    print(f"Scheme: {config.classification.scheme} | Paused: {paused}")
    print(format_status_table(statuses))
    conn.close()
    return 0


def _cmd_history(config, args) -> int:
    icao = args.icao.upper()
    end = epoch_now()
    start = end - args.hours * HOUR
    conn = connect(args.db)
    run_migrations(conn)

    if args.taf:
        scheme = get_scheme(config.classification.scheme)
        step = config.ops.history_step_minutes * 60
        points = taf_history(conn, icao, start, end, step=step, scheme=scheme)
        print(f"{icao} TAF series, last {args.hours}h: {len(points)} points")
        for p in points:
            cat = p.category.value if p.category else "-"
            gust = f" G{p.weather.wgst}kt" if p.weather and p.weather.wgst else ""
            print(f"  {epoch_to_iso(p.time)}  {cat:<5}{gust}")
    else:
        points = metar_history(conn, icao, start, end)
        print(f"{icao} METARs, last {args.hours}h: {len(points)} reports")
        for p in points:
            cat = p.flt_cat.value if p.flt_cat else "-"
            ceil = f"{p.ceiling}ft" if p.ceiling is not None else "unl"
            print(f"  {p.report_time}  {cat:<5} ceiling {ceil} vis {p.visib or '-'}")
    conn.close()
    return 0


def _cmd_verify(config, args) -> int:
    icao = args.icao.upper()
    end = epoch_now()
    start = end - args.hours * HOUR
    conn = connect(args.db)
    run_migrations(conn)
    scheme = get_scheme(config.classification.scheme)
    summary = verify_forecasts(conn, icao, start, end, scheme)
    conn.close()

    print(f"{icao} verification, last {args.hours}h")
    print(f"Observations: {len(summary.points)} | Compared: {summary.compared}")
    for result in ("exact", "worse", "better"):
        print(f"  {result}: {summary.counts.get(result, 0)}")
    if summary.exact_ratio is not None:
        print(f"Exact: {summary.exact_ratio:.0%}")
    return 0


def _cmd_health(config, args) -> int:
    conn = connect(args.db)
    run_migrations(conn)
    checker = HealthChecker(conn, config)
    status = checker.check()

    print(f"DB: {'OK' if status.db_connected else 'FAIL'}")
    print(f"Provider: {'OK' if status.provider_reachable else 'FAIL'}")
    if status.last_run_age_minutes is not None:
        print(f"Last run: {status.last_run_age_minutes:.0f} min ago")
    else:
        print("Last run: never")
    print(f"Stale METARs: {', '.join(status.stale_metars) or 'none'}")
    print(f"Expired TAFs: {', '.join(status.expired_tafs) or 'none'}")
    print(f"Paused: {status.paused}")
    conn.close()
    return 0 if status.db_connected else 1


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
        except (KeyError, IndexError, ValueError) as e:
            print(f"Error: {e}")
            return 1
        save_config(new_config, args.config)
        print(f"Set {key} = {get_config_value(new_config, key.strip())}")
        return 0
    else:
        print("Use: config show | config set key=value")
        return 1


def _cmd_pause(args) -> int:
    conn = connect(args.db)
    run_migrations(conn)
    state_repo.set_system_state(conn, "paused", "true")
    print("System paused")
    conn.close()
    return 0


def _cmd_resume(args) -> int:
    conn = connect(args.db)
    run_migrations(conn)
    state_repo.set_system_state(conn, "paused", "false")
    print("System resumed")
    conn.close()
    return 0


def _cmd_daemon(config, args) -> int:
    from flightcat.daemon import FetchDaemon, daemon_status, stop_daemon

    if args.stop:
        return stop_daemon()
    if args.status:
        return daemon_status()
    return FetchDaemon(config, args.db, interval=args.interval).start()
