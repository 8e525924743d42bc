"""STRANDED — run lifecycle orchestrator for a cooperative survival session.

Package layout:
  config.py    — pydantic-settings tunables (env / .env driven)
  comms/       — EventBus (queue observers + synchronous topic handlers)
  simulation/  — phase controller and the subsystems that react to it

The entry point for a game loop is ``stranded.simulation.RunSession``.
"""

__version__ = "0.1.0"
