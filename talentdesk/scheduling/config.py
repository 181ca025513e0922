"""
Scheduling configuration module.

This module defines the fixed parameters used by the project schedule
calculations (timeline, phase transitions and date sanity checks).
"""

from typing import Dict


class SchedulingConfig:
    """
    Configuration for schedule calculations.

    Values match the behavior the frontend has always shown.
    """

    # Projects spanning more than this many days get a warning
    MAX_PROJECT_SPAN_DAYS: int = 365

    # Hour of the day after the show when the project moves to post-show
    POST_SHOW_TRANSITION_HOUR: int = 6

    # Timeline descriptions per entry
    TIMELINE_DESCRIPTIONS: Dict[str, str] = {
        'prep': 'Project preparation and setup',
        'show': 'Show day',
        'post_show': 'Post-show wrap-up',
    }

    @classmethod
    def rehearsal_description(cls, rehearsal_days: int) -> str:
        """
        Describe the rehearsal block of a multi-day project.

        Args:
            rehearsal_days: Number of rehearsal days (at least 1)

        Returns:
            str: e.g. 'Rehearsals (1 day)', 'Rehearsals (3 days)'
        """
        suffix = '' if rehearsal_days == 1 else 's'
        return f"Rehearsals ({rehearsal_days} day{suffix})"
