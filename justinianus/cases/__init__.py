"""Case workspaces."""

from justinianus.cases.case_config import CaseConfig
from justinianus.cases.case_manager import CaseManager

__all__ = ["CaseConfig", "CaseManager"]
