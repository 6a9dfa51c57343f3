# =============================================================================
# Episode Logger
# =============================================================================
"""
JSONL log of training episodes.

Each line is one EpisodeStats record plus the goal and a timestamp:

    {"episode": 12, "start_state": 530, "steps": 4, "reached_goal": true,
     "total_reward": 19.9, "aborted": false, "goal": [2, 3], "ts": "..."}

Append-friendly, so several training runs can share one file, and readable
line by line for plotting how quickly the goal starts being reached.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from lightlab.agents.q_table_store import GoalDescriptor


class EpisodeLogger:
    """
    Appends one JSON line per training episode.

    Example:
    --------
    >>> episode_logger = EpisodeLogger("experiments/logs")
    >>> trainer = QTrainer(lab, store, episode_logger=episode_logger)
    >>> trainer.train((2, 3), 100, 0.5, 0.8, 0.4, 15)
    >>> episode_logger.get_stats()["goal_reach_rate"]
    """

    def __init__(
        self,
        save_dir: str = "experiments/logs",
        filename: str = "training_log.jsonl",
    ):
        self.save_dir = Path(save_dir)
        self.filepath = self.save_dir / filename
        self.save_dir.mkdir(parents=True, exist_ok=True)

    def log_episode(self, stats, goal: Optional[Any] = None) -> None:
        """Append an EpisodeStats record."""
        entry = stats.to_dict()
        if goal is not None:
            entry["goal"] = list(GoalDescriptor.of(goal))
        entry["ts"] = datetime.now().isoformat()

        with open(self.filepath, "a") as f:
            json.dump(entry, f)
            f.write("\n")

    def load_all(self) -> List[Dict[str, Any]]:
        if not self.filepath.exists():
            return []

        entries = []
        with open(self.filepath, "r") as f:
            for line in f:
                if line.strip():
                    entries.append(json.loads(line))
        return entries

    def get_stats(self) -> Dict[str, Any]:
        """
        Summary of everything logged so far.

        Returns:
        --------
        dict
            Episode count, goal reach rate, mean steps and aborted count
        """
        entries = self.load_all()
        if not entries:
            return {"total_episodes": 0}

        reached = [e for e in entries if e["reached_goal"]]
        return {
            "total_episodes": len(entries),
            "episodes_reaching_goal": len(reached),
            "goal_reach_rate": len(reached) / len(entries),
            "avg_steps": sum(e["steps"] for e in entries) / len(entries),
            "aborted_episodes": sum(1 for e in entries if e["aborted"]),
            "goals": sorted({tuple(e["goal"]) for e in entries if "goal" in e}),
        }
