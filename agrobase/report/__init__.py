from .generator import DiagnosisReport, ReportGenerator, render, report_filename

__all__ = ["DiagnosisReport", "ReportGenerator", "render", "report_filename"]
