"""
main_asyncio.py — Application entry point for the traffic supervisor
---------------------------------------------------------------------

Responsible for:
- parsing the command line and loading configuration
- connecting to the simulator and spawning traffic
- wiring the registry, fault trap, signal relay, pipeline and supervisor
- mapping the outcome to a process exit code

Exit codes: 0 after a graceful stop (interrupt or simulator loss),
1 after a startup failure or an emergency (fault) shutdown.
"""

import sys

# ---------------------------------------------------------------------------
# UTF-8 ENCODING FIX
# ---------------------------------------------------------------------------

# Set UTF-8 encoding for output BEFORE any imports (fixes Unicode symbol rendering)
if hasattr(sys.stdout, 'reconfigure') and sys.stdout.encoding != 'UTF-8':
    sys.stdout.reconfigure(encoding='utf-8')  # type: ignore
if hasattr(sys.stderr, 'reconfigure') and sys.stderr.encoding != 'UTF-8':
    sys.stderr.reconfigure(encoding='utf-8')  # type: ignore

import asyncio
from typing import List, Optional

from lifecycle import ActorRegistry, FaultTrap, Session, SessionSupervisor, ShutdownFlag, SignalRelay
from managers import ConfigManager
from models.config import AppConfig
from models.enums import EXIT_FAILURE, EXIT_OK, LogCategory, ReclamationOrigin, ShutdownReason
from models.errors import StartupError
from runtime.cli import parse_arguments
from simulation import ISimulationClient, connect, spawn_traffic
from traffic import TrafficPipeline
from utils.logger import configure_logger, get_logger

# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------

log = get_logger().for_category(LogCategory.SYSTEM)


# ---------------------------------------------------------------------------
# SESSION
# ---------------------------------------------------------------------------

async def run_session(
    config: AppConfig,
    client: ISimulationClient,
    flag: ShutdownFlag,
    registry: ActorRegistry,
    fault_trap: FaultTrap,
) -> int:
    """Spawn traffic and supervise it until shutdown. Returns the exit code."""

    loop = asyncio.get_running_loop()
    fault_trap.watch_loop(loop)

    relay = SignalRelay(flag)
    relay.install(loop)
    log.info("Signal handlers installed (SIGINT, SIGTERM)")

    try:
        # ========================================================================
        # 1. TRAFFIC
        # ========================================================================

        log.info(f"Spawning traffic (target={config.traffic.target_count or 'all spawn points'})...")
        handles = await asyncio.to_thread(
            spawn_traffic, client, config.traffic.target_count, config.traffic.seed
        )
        registry.publish(handles)

        client.set_timeout(config.connection.timeout)

        # ========================================================================
        # 2. PIPELINE + SUPERVISOR
        # ========================================================================

        pipeline = TrafficPipeline(list(registry), client, config.pipeline)
        session = Session(registry=registry, worker=pipeline, client=client)
        supervisor = SessionSupervisor(
            session,
            flag,
            poll_interval=config.supervisor.poll_interval,
        )

        log.info("🏁 Traffic spawned. Waiting for exit signal...")
        return await supervisor.run()
    finally:
        relay.uninstall(loop)


# ---------------------------------------------------------------------------
# Application Entry
# ---------------------------------------------------------------------------

def run(argv: Optional[List[str]] = None, registry: Optional[ActorRegistry] = None) -> int:
    """Synchronous entry point. Returns the process exit code."""

    options = parse_arguments(argv)

    config_manager = ConfigManager(options.config_path)
    config_manager.load()
    config = config_manager.apply_overrides(options)
    configure_logger(config.logging.level, config.logging.use_colors)

    log.info("Starting TrafficManager...")

    flag = ShutdownFlag()
    registry = registry if registry is not None else ActorRegistry.instance()

    try:
        client = connect(config, offline=options.offline)
    except StartupError as e:
        log.error(f"Startup failed: {e}")
        return EXIT_FAILURE

    fault_trap = FaultTrap(flag, registry, client)
    fault_trap.install()

    try:
        return asyncio.run(run_session(config, client, flag, registry, fault_trap))
    except StartupError as e:
        log.error(f"Startup failed: {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")
        flag.request(ShutdownReason.INTERRUPT)
        registry.reclaim(client, ReclamationOrigin.GRACEFUL)
        return EXIT_OK


def main() -> None:
    sys.exit(run())


# ---------------------------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    main()
