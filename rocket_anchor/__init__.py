"""Rocket Anchor: deploy and seed Anchor programs on Solana."""

from .config import RAConfig, load_config
from .deployer import DeployOptions, DeployResult, deploy
from .errors import ConfigError, ResolutionError, RocketAnchorError, SeedError
from .keypairs import load_keypair
from .plans import CallSpec, SeedPlan, load_plans
from .seeder import PlanResult, SeedPhase, SeedSequencer, run_seeds

__version__ = "1.0.0"

__all__ = [
    "CallSpec",
    "ConfigError",
    "DeployOptions",
    "DeployResult",
    "PlanResult",
    "RAConfig",
    "ResolutionError",
    "RocketAnchorError",
    "SeedError",
    "SeedPhase",
    "SeedPlan",
    "SeedSequencer",
    "deploy",
    "load_config",
    "load_keypair",
    "load_plans",
    "run_seeds",
]
