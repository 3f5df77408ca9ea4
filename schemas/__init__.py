from .exercise import ExerciseResult, RecordSummary

__all__ = ["ExerciseResult", "RecordSummary"]
