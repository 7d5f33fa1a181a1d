"""Reports: per-bar results frame and CSV export."""

from mtr_backtester.reports.export import band_place, results_frame, export_results_csv

__all__ = ["band_place", "results_frame", "export_results_csv"]
