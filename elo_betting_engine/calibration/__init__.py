"""Regression calibration of the predictor's constants."""

from elo_betting_engine.calibration.regression import (
    CalibrationPoint,
    CalibrationResult,
    Calibrator,
    collect_calibration_points,
    fit_calibration,
)

__all__ = [
    "CalibrationPoint",
    "CalibrationResult",
    "Calibrator",
    "collect_calibration_points",
    "fit_calibration",
]
