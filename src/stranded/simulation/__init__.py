"""Simulation subsystem — run phases, threat, encounters, repairs."""
from .cargo import OBJECTIVE_KINDS, SALVAGE_KINDS, ItemKind, SharedCargo
from .completion import CompletionMonitor
from .deployment import DeploymentPoints
from .issues import REPAIRABLE_KINDS, Issue, IssueKind, IssueTracker
from .mission import MissionConfig, MissionSession, MissionState
from .mission_flow import MissionFlowTrigger
from .phases import PHASE_SUCCESSORS, TERMINAL_PHASES, PhaseController, RunPhase
from .pressure import PressureSystem, threat_category
from .repair import RepairStation
from .session import RunSession
from .spawner import EncounterSpawner, SpawnProfile, compute_spawn_interval
from .target import Hostile
from .zone import ReturnZone

__all__ = [
    "CompletionMonitor",
    "DeploymentPoints",
    "EncounterSpawner",
    "Hostile",
    "Issue",
    "IssueKind",
    "IssueTracker",
    "ItemKind",
    "MissionConfig",
    "MissionFlowTrigger",
    "MissionSession",
    "MissionState",
    "OBJECTIVE_KINDS",
    "PHASE_SUCCESSORS",
    "PhaseController",
    "PressureSystem",
    "REPAIRABLE_KINDS",
    "RepairStation",
    "ReturnZone",
    "RunPhase",
    "RunSession",
    "SALVAGE_KINDS",
    "SharedCargo",
    "SpawnProfile",
    "TERMINAL_PHASES",
    "compute_spawn_interval",
    "threat_category",
]
