"""Rhythm engines: sequencer, clock, executor, timers."""
