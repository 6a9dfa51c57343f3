# =============================================================================
# Experiment Configuration
# =============================================================================
"""
Configuration management for training runs.

This module provides:
- YAML config loading
- Default configurations
- Factories for the simulator and trainer settings

Why YAML Configs?
-----------------
1. REPRODUCIBILITY: Exact hyperparameters and seed saved with each table
2. VERSIONING: Can track config changes in git
3. FLEXIBILITY: Try another goal or epsilon without code changes

Example config:
---------------
```yaml
name: "goal_2_3"
seed: 42
goal: [2, 3]

environment:
  sunshine_lux: 400.0
  failure_rate: 0.0

training:
  episodes: 2500
  alpha: 0.5
  gamma: 0.8
  epsilon: 0.4
  goal_reward: 15.0
```
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from lightlab.environment.lab_simulator import DEFAULT_SUNSHINE_GAIN, LabSimulator


@dataclass
class EnvironmentConfig:
    """Simulated lab configuration."""
    sunshine_lux: float = 400.0
    ambient_lux: float = 10.0
    light_lux: float = 150.0
    sunshine_gain: List[float] = field(default_factory=lambda: list(DEFAULT_SUNSHINE_GAIN))
    sunshine_schedule: Optional[List[float]] = None
    failure_rate: float = 0.0


@dataclass
class TrainingConfig:
    """Q-learning hyperparameters."""
    episodes: int = 2500
    alpha: float = 0.5
    gamma: float = 0.8
    epsilon: float = 0.4
    goal_reward: float = 15.0

    # Episode shape
    max_steps: int = 50
    max_kicks: int = 10

    # Progress logging
    log_every: int = 500


@dataclass
class EvaluationConfig:
    """Greedy rollout settings."""
    num_episodes: int = 100
    max_steps: int = 50


@dataclass
class ExperimentConfig:
    """
    Complete experiment configuration.

    Combines all sub-configs into one object.
    Can be loaded from YAML or created programmatically.
    """
    # Experiment metadata
    name: str = "experiment"
    seed: int = 42
    goal: List[int] = field(default_factory=lambda: [2, 3])

    # Sub-configs
    environment: EnvironmentConfig = field(default_factory=EnvironmentConfig)
    training: TrainingConfig = field(default_factory=TrainingConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)

    # Paths
    output_dir: str = "experiments/qtables"
    log_dir: str = "experiments/logs"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def save(self, path: str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ExperimentConfig":
        """Create from dictionary."""
        d = dict(d)
        # Handle nested configs
        if "environment" in d and isinstance(d["environment"], dict):
            d["environment"] = EnvironmentConfig(**d["environment"])
        if "training" in d and isinstance(d["training"], dict):
            d["training"] = TrainingConfig(**d["training"])
        if "evaluation" in d and isinstance(d["evaluation"], dict):
            d["evaluation"] = EvaluationConfig(**d["evaluation"])

        return cls(**d)

    def make_environment(self) -> LabSimulator:
        """Build the simulator described by ``environment``."""
        env = self.environment
        return LabSimulator(
            sunshine_lux=env.sunshine_lux,
            ambient_lux=env.ambient_lux,
            light_lux=env.light_lux,
            sunshine_gain=env.sunshine_gain,
            sunshine_schedule=env.sunshine_schedule,
            failure_rate=env.failure_rate,
            seed=self.seed,
        )


def load_config(path: str) -> ExperimentConfig:
    """
    Load configuration from YAML file.

    Parameters:
    -----------
    path : str
        Path to YAML config file

    Returns:
    --------
    ExperimentConfig
        Loaded configuration
    """
    with open(path, 'r') as f:
        d = yaml.safe_load(f) or {}

    return ExperimentConfig.from_dict(d)


def create_default_config(name: str = "default") -> ExperimentConfig:
    """Create a default configuration."""
    return ExperimentConfig(name=name)
