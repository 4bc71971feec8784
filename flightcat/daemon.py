"""Fetch daemon: keeps the snapshot store current by fetching on a fixed cadence.

    python -m flightcat daemon                  # every ops.fetch_interval_minutes
    python -m flightcat daemon --interval 600
    python -m flightcat daemon --status
    python -m flightcat daemon --stop
"""

import contextlib
import json
import logging
import os
import signal
import time
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from flightcat.config.schema import FlightcatConfig
from flightcat.models.common import utc_now_iso
from flightcat.models.reporting import RunSummary
from flightcat.pipeline.fetch_pipeline import FetchPipeline

logger = logging.getLogger(__name__)

DATA_DIR = Path("data")
PID_FILE = DATA_DIR / "daemon.pid"
STATE_FILE = DATA_DIR / "daemon_state.json"
LOG_DIR = Path("logs")
KEEP_LOGS = 100
MAX_BACKOFF = 3600
STOP_TIMEOUT = 60
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class AirportTally:
    """Per-airport coverage across cycles."""

    last_metar_at: str | None = None
    last_taf_at: str | None = None
    metar_misses: int = 0
    taf_misses: int = 0


@dataclass
class DaemonState:
    pid: int
    interval: int
    started_at: str
    cycles: int = 0
    failed_cycles: int = 0
    consecutive_failures: int = 0
    metars_stored: int = 0
    tafs_stored: int = 0
    last_fetch_at: str | None = None
    last_error: str | None = None
    airports: dict[str, AirportTally] = field(default_factory=dict)

    def record(self, summary: RunSummary, icaos: list[str], at: str) -> None:
        self.cycles += 1
        self.last_fetch_at = at
        if summary.errors:
            self._fail(summary.errors[-1])
            return
        self.consecutive_failures = 0
        self.metars_stored += summary.metars_stored
        self.tafs_stored += summary.tafs_stored
        for icao in icaos:
            tally = self.airports.setdefault(icao, AirportTally())
            if icao in summary.metar_airports:
                tally.last_metar_at = at
            else:
                tally.metar_misses += 1
            if icao in summary.taf_airports:
                tally.last_taf_at = at
            else:
                tally.taf_misses += 1

    def record_crash(self, error: str, at: str) -> None:
        self.cycles += 1
        self.last_fetch_at = at
        self._fail(error)

    def _fail(self, error: str) -> None:
        self.failed_cycles += 1
        self.consecutive_failures += 1
        self.last_error = error

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(self), indent=2))

    @classmethod
    def load(cls, path: Path) -> "DaemonState | None":
        if not path.exists():
            return None
        data = json.loads(path.read_text())
        airports = {
            icao: AirportTally(**tally)
            for icao, tally in data.pop("airports", {}).items()
        }
        return cls(**data, airports=airports)


def backoff_seconds(interval: int, failures: int) -> int:
    """Wait before the next cycle: the interval, doubled per consecutive failure."""
    if failures <= 0:
        return interval
    return min(interval * 2 ** failures, MAX_BACKOFF)


def read_pid() -> int | None:
    """PID recorded in the PID file; an unreadable file is removed."""
    if not PID_FILE.exists():
        return None
    try:
        return int(PID_FILE.read_text().strip())
    except ValueError:
        logger.warning("Removing corrupt PID file %s", PID_FILE)
        PID_FILE.unlink(missing_ok=True)
        return None


def process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, owned by someone else.
        return True
    return True


def prune_logs(keep: int = KEEP_LOGS) -> None:
    logs = sorted(LOG_DIR.glob("fetch_*.log"))
    for old in logs[: max(0, len(logs) - keep)]:
        old.unlink(missing_ok=True)


@contextlib.contextmanager
def cycle_log(cycle: int):
    """Mirror all log records of one cycle into logs/fetch_<stamp>.log."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    handler = logging.FileHandler(LOG_DIR / f"fetch_{stamp}_{cycle:05d}.log")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    try:
        yield
    finally:
        root.removeHandler(handler)
        handler.close()
        prune_logs()


class FetchDaemon:
    def __init__(
        self,
        config: FlightcatConfig,
        db_path: str = "data/flightcat.db",
        interval: int | None = None,
    ):
        self.config = config
        self.db_path = db_path
        self.interval = interval or config.ops.fetch_interval_minutes * 60
        self.state = DaemonState(
            pid=os.getpid(), interval=self.interval, started_at=utc_now_iso()
        )
        self._stop_requested = False

    def start(self) -> int:
        """Run fetch cycles until SIGTERM/SIGINT. Returns the exit code."""
        pid = read_pid()
        if pid is not None and process_alive(pid):
            print(f"Daemon already running (pid {pid}); use: python -m flightcat daemon --stop")
            return 1

        PID_FILE.parent.mkdir(parents=True, exist_ok=True)
        PID_FILE.write_text(str(self.state.pid))
        self._install_signal_handlers()
        logger.info(
            "Fetch daemon up: pid=%d airports=%s interval=%ds",
            self.state.pid, ",".join(self.config.enabled_icaos), self.interval,
        )
        print(f"Fetch daemon running (pid {self.state.pid}, every {self.interval}s, logs in {LOG_DIR}/)")

        try:
            self._serve()
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            PID_FILE.unlink(missing_ok=True)
            self.state.save(STATE_FILE)
            logger.info(
                "Fetch daemon down after %d cycles (%d failed), %d METARs and %d TAFs stored",
                self.state.cycles, self.state.failed_cycles,
                self.state.metars_stored, self.state.tafs_stored,
            )
        return 0

    def run_cycle(self) -> bool:
        """One pipeline run; updates and saves the daemon state."""
        at = utc_now_iso()
        cycle = self.state.cycles + 1
        with cycle_log(cycle):
            try:
                summary = FetchPipeline(self.config, self.db_path).run()
            except Exception as e:
                logger.exception("Cycle %d crashed", cycle)
                self.state.record_crash(str(e), at)
                ok = False
            else:
                self.state.record(summary, self.config.enabled_icaos, at)
                ok = not summary.errors
                if ok:
                    logger.info(
                        "Cycle %d: +%d METARs, +%d TAFs",
                        cycle, summary.metars_stored, summary.tafs_stored,
                    )
                else:
                    logger.error("Cycle %d failed: %s", cycle, "; ".join(summary.errors))
        self.state.save(STATE_FILE)
        return ok

    def _serve(self) -> None:
        while not self._stop_requested:
            began = time.monotonic()
            self.run_cycle()
            wait = backoff_seconds(self.interval, self.state.consecutive_failures)
            if self.state.consecutive_failures:
                logger.warning(
                    "%d consecutive failed cycles, next attempt in %ds",
                    self.state.consecutive_failures, wait,
                )
            deadline = began + wait
            # Short sleeps keep shutdown responsive.
            while not self._stop_requested and time.monotonic() < deadline:
                time.sleep(1)

    def _install_signal_handlers(self) -> None:
        def _request_stop(signum: int, frame: object) -> None:
            logger.info("%s received, stopping after this cycle", signal.Signals(signum).name)
            self._stop_requested = True

        signal.signal(signal.SIGTERM, _request_stop)
        signal.signal(signal.SIGINT, _request_stop)


def stop_daemon(timeout: int = STOP_TIMEOUT) -> int:
    """SIGTERM the running daemon, escalating to SIGKILL after `timeout` seconds."""
    pid = read_pid()
    if pid is None:
        print("No daemon running")
        return 1
    if not process_alive(pid):
        print(f"Daemon not running (stale pid {pid}), cleaning up")
        PID_FILE.unlink(missing_ok=True)
        return 0

    print(f"Stopping daemon (pid {pid})")
    os.kill(pid, signal.SIGTERM)
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if not process_alive(pid):
            PID_FILE.unlink(missing_ok=True)
            print("Daemon stopped")
            return 0
        time.sleep(1)

    print(f"Daemon still alive after {timeout}s, killing")
    os.kill(pid, signal.SIGKILL)
    PID_FILE.unlink(missing_ok=True)
    return 0


def format_daemon_state(state: DaemonState, running: bool) -> str:
    lines = [
        f"Daemon {'running' if running else 'stopped'} (pid {state.pid}, every {state.interval}s)",
        f"Started: {state.started_at} | Last fetch: {state.last_fetch_at or 'never'}",
        f"Cycles: {state.cycles} ({state.failed_cycles} failed, "
        f"{state.consecutive_failures} in a row)",
        f"Stored: {state.metars_stored} METARs, {state.tafs_stored} TAFs",
    ]
    if state.last_error:
        lines.append(f"Last error: {state.last_error}")
    for icao in sorted(state.airports):
        t = state.airports[icao]
        lines.append(
            f"  {icao:<5} METAR {t.last_metar_at or '-'} (missed {t.metar_misses})"
            f"  TAF {t.last_taf_at or '-'} (missed {t.taf_misses})"
        )
    return "\n".join(lines)


def daemon_status() -> int:
    state = DaemonState.load(STATE_FILE)
    if state is None:
        print("No daemon state found")
        return 1
    print(format_daemon_state(state, process_alive(state.pid)))
    return 0
