# =============================================================================
# Training Module
# =============================================================================
"""
Training pipeline for illuminance policies.

This module provides:
- QTrainer: episodic tabular Q-learning for one goal
- Q-table CSV export/import
- JSONL episode logs
- YAML experiment configs

Training Pipeline Overview:
---------------------------

┌─────────────────┐     ┌─────────────────┐     ┌─────────────────┐
│  YAML config    │────▶│   QTrainer      │────▶│  QTableStore    │
│  (goal, alpha,  │     │  (kicks, eps-   │     │  (frozen table  │
│   gamma, ...)   │     │   greedy, TD)   │     │   per goal)     │
└─────────────────┘     └─────────────────┘     └─────────────────┘
                                │                       │
                                ▼                       ▼
                        training_log.jsonl        qtable_*.csv
"""

from lightlab.training.q_trainer import EpisodeStats, QTrainer, shaped_reward
from lightlab.training.experiment_config import ExperimentConfig, load_config
from lightlab.training.q_table_io import format_q_table, load_q_table, save_q_table
from lightlab.training.episode_logger import EpisodeLogger

__all__ = [
    "QTrainer",
    "EpisodeStats",
    "shaped_reward",
    "ExperimentConfig",
    "load_config",
    "save_q_table",
    "load_q_table",
    "format_q_table",
    "EpisodeLogger",
]
