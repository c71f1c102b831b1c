"""
action_executor.py: Module for executing synthesis actions with dry-run support
"""
import logging
from typing import List, Dict, Any

from .utils import info, success, error


class ActionExecutor:
    """
    ActionExecutor: Class responsible for executing action plans with dry-run support
    """

    def __init__(self):
        self.logger = logging.getLogger("reelstack.executor")

    def execute_actions(self, actions: List[Dict[str, Any]], dry_run: bool = False) -> bool:
        """
        Execute a list of actions with optional dry-run
        :param actions: List of action dictionaries
        :param dry_run: Whether to execute in dry-run mode
        :return: True if all actions completed successfully (or if dry_run)
        """
        if not actions:
            info("Nothing to do.")
            return True

        info("Planned actions:")
        for act in actions:
            print(f"  {act['desc']}")

        if dry_run:
            info("DRY RUN: No changes applied")
            return True

        for act in actions:
            func = act['func']
            args = act.get('args', ())
            kwargs = act.get('kwargs', {})
            try:
                func(*args, **kwargs)
            except OSError as e:
                error(f"Failed to execute: {act['desc']} → {e}")
                self.logger.debug("Action failed", exc_info=True)
                return False
            self.logger.debug(f"Done: {act['desc']}")
        success("All actions completed")
        return True
