"""
Main entry point for the SaintGrid behavior demo.
Plays a routine through the rhythm sequencer on a Qt event loop,
with the rhythm clock ticking alongside, and exits when it completes.
"""

import argparse
import sys

from PyQt5.QtCore import QCoreApplication


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play a SaintGrid pet routine")
    parser.add_argument("routine", nargs="?", default="greeting",
                        help="builtin routine name or path to a routine .json")
    parser.add_argument("--name", default=None, help="who the pet greets")
    parser.add_argument("--profile", default="demo",
                        choices=["development", "production", "demo"],
                        help="rhythm clock profile")
    parser.add_argument("--debug", action="store_true", help="show debug log lines")
    parser.add_argument("--log-file", default=None, help="also write all log lines to this file")
    return parser


def resolve_routine(name: str, greet_name=None):
    from saintgrid.model.steps import RhythmSteps
    from saintgrid.routines import Routine, RoutineManager, builtin_routines

    if name == "greeting" and greet_name:
        return Routine("greeting", RhythmSteps.greeting(greet_name))
    for routine in builtin_routines():
        if routine.name == name:
            return routine
    return RoutineManager().load(name)


def main(argv=None):
    from saintgrid.utils.logger import logger, set_log_level, LogLevel
    from saintgrid.engine.rhythm_clock import RhythmClock, RhythmConfig
    from saintgrid.engine.rhythm_sequencer import RhythmSequencer, SequencerConfig
    from saintgrid.engine.step_executor import StepExecutor
    from saintgrid.engine.timers import QtTimerBackend
    from saintgrid.routines import RoutineError

    args = build_parser().parse_args(argv)
    if args.debug:
        set_log_level(LogLevel.DEBUG)
    if args.log_file:
        logger.enable_file_logging(args.log_file)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])

    try:
        routine = resolve_routine(args.routine, args.name)
    except RoutineError as e:
        logger.error("Could not load routine", component="APP", details=str(e))
        return 1

    logger.info("=" * 40, component="APP")
    logger.info(f"SaintGrid playing '{routine.name}' ({len(routine.steps)} steps)", component="APP")
    logger.info("=" * 40, component="APP")

    timers = QtTimerBackend()

    clock = RhythmClock(timers=timers, config=RhythmConfig.from_profile(args.profile))
    clock.on_tick(lambda ts, interval: logger.debug(f"tick ({interval:.0f}ms)", component="RHYTHM"))

    executor = StepExecutor(
        speak=lambda text: logger.info(f"says: {text}", component="PET"),
        animate=lambda name: logger.info(f"animates: {name}", component="PET"),
    )
    executor.register_plugin(
        "log", lambda params: logger.info(f"plugin log: {dict(params or {})}", component="PET")
    )

    def on_complete():
        clock.dispose()
        logger.info("Routine complete", component="APP")
        app.quit()

    sequencer = RhythmSequencer(
        executor,
        SequencerConfig(
            on_complete=on_complete,
            on_error=lambda exc, step: logger.warning(
                f"{step.kind.value} step failed", component="APP", details=str(exc)
            ),
        ),
        timers=timers,
    )

    clock.start()
    sequencer.submit(routine.steps)
    if not sequencer.is_running:
        return 0
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
