"""Database-level enumerations for interview sessions."""

import enum


class RecordStatus(str, enum.Enum):
    """Persisted lifecycle of an interview session.

    Coarser than the in-memory ``SessionStatus``: only phase boundaries
    are written.

    Transitions:
        in_progress -> phase_1_complete  (analysis received)
        phase_1_complete -> phase_2_complete  (phase-2 answers submitted)
        phase_2_complete -> completed  (report stored)
    """

    IN_PROGRESS = "in_progress"
    PHASE_1_COMPLETE = "phase_1_complete"
    PHASE_2_COMPLETE = "phase_2_complete"
    COMPLETED = "completed"
