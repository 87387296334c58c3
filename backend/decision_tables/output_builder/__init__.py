from .diff_report import build_diff_report

__all__ = ['build_diff_report']
