"""
nearpay - Proximity Request/Transfer Simulation

Logs a demo user in next to the synthetic population and runs the SimPy
simulation for SIM_DURATION_SECONDS simulated seconds, then logs a summary
of what the fabricated devices did.
"""

import logging
import signal

from nearpay.context import AppContext
from nearpay.settings import get_settings
from nearpay.sim_logging import setup_logging

logger = logging.getLogger(__name__)

STEP_SECONDS = 60.0


def main() -> None:
    """Main entry point - runs the demo to completion or until interrupted."""
    settings = get_settings()
    sim = settings.simulation

    setup_logging(
        level=sim.log_level,
        json_output=sim.log_format == "json",
        environment=sim.environment,
    )

    logger.info("Starting nearpay simulation...")
    logger.info(
        f"Storage backend: {settings.storage.backend}, radius: {settings.proximity.radius_m:.0f}m"
    )

    context = AppContext(settings)
    context.login(sim.username, location=settings.proximity.fallback_location)

    stopping = False

    def shutdown_handler(signum: int, frame: object) -> None:
        nonlocal stopping
        logger.info(f"Received signal {signum}, shutting down...")
        stopping = True

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    remaining = sim.duration_seconds
    while remaining > 0 and not stopping:
        step = min(STEP_SECONDS, remaining)
        context.run(step)
        remaining -= step

    summary = context.summary()
    context.logout()

    for key, value in summary.items():
        logger.info(f"{key}: {value}")
    logger.info("Simulation finished")


if __name__ == "__main__":
    main()
