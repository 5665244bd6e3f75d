from ._check import Assumption, DiagnosticCheck, DiagnosticReport

__all__ = ["Assumption", "DiagnosticCheck", "DiagnosticReport"]
